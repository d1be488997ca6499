"""Verification session CLI commands."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from trustlink.database import get_session_context
from trustlink.errors import VerificationError
from trustlink.models import SessionStatus, VerificationType
from trustlink.services.aggregator import is_fully_verified
from trustlink.services.lifecycle import SessionLifecycle, evaluate_expiry
from trustlink.services.sequencer import required_checks
from trustlink.services.store import VerificationStore
from trustlink.services.tokens import results_url, verification_url

console = Console()
app = typer.Typer(help="Verification session commands")

STATUS_STYLES = {
    SessionStatus.PENDING: "yellow",
    SessionStatus.IN_PROGRESS: "cyan",
    SessionStatus.COMPLETED: "green",
    SessionStatus.EXPIRED: "red",
}


def _status_label(status: SessionStatus, expired: bool) -> str:
    style = STATUS_STYLES[status]
    label = f"[{style}]{status.value}[/{style}]"
    if expired and status != SessionStatus.COMPLETED:
        label += " [red](expired)[/red]"
    return label


@app.command("list")
def list_sessions(
    limit: int = typer.Option(20, "--limit", "-l", help="Number of sessions to show"),
):
    """List the most recent sessions."""

    async def _list():
        async with get_session_context() as session:
            verifications = await VerificationStore(session).list_sessions(limit=limit)

            table = Table(title="Verification Sessions")
            table.add_column("Token", style="cyan")
            table.add_column("Type", style="magenta")
            table.add_column("Status")
            table.add_column("Seller", style="green")
            table.add_column("Expires", style="dim")

            for verification in verifications:
                status = SessionStatus(verification.status)
                expired = evaluate_expiry(verification).expired
                table.add_row(
                    verification.session_token,
                    VerificationType(verification.verification_type).value,
                    _status_label(status, expired),
                    verification.seller_phone,
                    verification.expires_at.strftime("%Y-%m-%d %H:%M"),
                )

            console.print(table)

    asyncio.run(_list())


@app.command("show")
def show_session(token: str = typer.Argument(..., help="Session token")):
    """Show a session and its check results."""

    async def _show():
        async with get_session_context() as session:
            store = VerificationStore(session)
            verification = await store.get_session_by_token(token)
            if verification is None:
                console.print(f"[red]Error:[/red] Session {token} not found")
                raise typer.Exit(1)

            status = SessionStatus(verification.status)
            verification_type = VerificationType(verification.verification_type)
            expired = evaluate_expiry(verification).expired

            console.print(f"[bold]Session:[/bold] {verification.session_token}")
            console.print(f"  Type: {verification_type.value}")
            console.print(f"  Status: {_status_label(status, expired)}")
            console.print(f"  Buyer: {verification.buyer_phone}")
            if verification.buyer_email:
                console.print(f"  Buyer email: {verification.buyer_email}")
            console.print(f"  Seller: {verification.seller_phone}")
            console.print(f"  Expires: {verification.expires_at.isoformat()}")

            verification_result = await store.get_result(verification.id)
            if verification_result is None:
                console.print("[dim]No checks recorded yet[/dim]")
                return

            table = Table(title="Checks")
            table.add_column("Check", style="cyan")
            table.add_column("Status")
            table.add_column("Match")
            for kind in required_checks(verification_type):
                match = verification_result.check_match(kind)
                match_str = "-" if match is None else ("[green]yes[/green]" if match else "[red]no[/red]")
                table.add_row(kind.value, verification_result.check_status(kind).value, match_str)
            console.print(table)

            if verification_result.completed_at:
                verdict = is_fully_verified(verification_result, verification_type)
                verdict_str = "[green]Fully verified[/green]" if verdict else "[red]Not fully verified[/red]"
                console.print(verdict_str)

    asyncio.run(_show())


@app.command("create")
def create_session(
    buyer_phone: str = typer.Option(..., "--buyer", "-b", help="Buyer phone number"),
    seller_phone: str = typer.Option(..., "--seller", "-s", help="Seller phone number"),
    verification_type: VerificationType = typer.Option(
        VerificationType.PROPERTY, "--type", "-t", help="What to verify"
    ),
    buyer_email: str | None = typer.Option(None, "--email", "-e", help="Buyer email for results"),
):
    """Create a verification session and print its links."""

    async def _create():
        async with get_session_context() as session:
            lifecycle = SessionLifecycle(VerificationStore(session))
            try:
                verification = await lifecycle.create_session(
                    buyer_phone=buyer_phone,
                    seller_phone=seller_phone,
                    verification_type=verification_type,
                    buyer_email=buyer_email,
                )
            except VerificationError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                raise typer.Exit(1) from e

            console.print(f"[green]Created session:[/green] {verification.session_token}")
            console.print(f"  Verify: {verification_url(verification.session_token)}")
            console.print(f"  Results: {results_url(verification.session_token)}")

    asyncio.run(_create())


@app.command("expire-check")
def expire_check(
    limit: int = typer.Option(200, "--limit", "-l", help="Number of recent sessions to scan"),
):
    """Report unfinished sessions that are past their expiry.

    Read-only: expiry is evaluated, never written back.
    """

    async def _check():
        async with get_session_context() as session:
            verifications = await VerificationStore(session).list_sessions(limit=limit)
            stale = [
                v
                for v in verifications
                if SessionStatus(v.status) != SessionStatus.COMPLETED
                and evaluate_expiry(v).expired
            ]

            if not stale:
                console.print("[green]No expired unfinished sessions[/green]")
                return

            table = Table(title=f"Expired Sessions ({len(stale)})")
            table.add_column("Token", style="cyan")
            table.add_column("Status", style="yellow")
            table.add_column("Expired At", style="dim")
            for verification in stale:
                table.add_row(
                    verification.session_token,
                    SessionStatus(verification.status).value,
                    verification.expires_at.strftime("%Y-%m-%d %H:%M"),
                )
            console.print(table)

    asyncio.run(_check())
