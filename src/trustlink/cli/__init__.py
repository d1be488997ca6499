"""CLI commands using Typer."""

import typer

from trustlink.cli.db import app as db_app
from trustlink.cli.sessions import app as sessions_app

app = typer.Typer(name="trustlink", help="TrustLink CLI")

app.add_typer(db_app, name="db")
app.add_typer(sessions_app, name="sessions")


@app.command()
def version():
    """Show version information."""
    from trustlink import __version__

    typer.echo(f"TrustLink v{__version__}")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(8000, help="Port to bind to"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
):
    """Run the API server."""
    import uvicorn

    from trustlink.logging import get_uvicorn_log_config

    uvicorn.run(
        "trustlink.main:app",
        host=host,
        port=port,
        reload=reload,
        log_config=get_uvicorn_log_config(),
    )


@app.command()
def worker(
    concurrency: int = typer.Option(4, help="Number of concurrent notification jobs"),
):
    """Run the notification worker."""
    import asyncio

    from saq import Worker

    from trustlink.logging import setup_logging
    from trustlink.tasks import get_queue_settings

    setup_logging()
    queue_settings = get_queue_settings()

    typer.echo(f"Starting worker with concurrency={concurrency}")

    async def run_worker():
        w = Worker(
            queue=queue_settings["queue"],
            functions=queue_settings["functions"],
            concurrency=concurrency,
            startup=queue_settings.get("startup"),
            shutdown=queue_settings.get("shutdown"),
        )
        await w.start()

    asyncio.run(run_worker())


if __name__ == "__main__":
    app()
