"""SAQ queue configuration for background tasks."""

import logging

from saq import Queue

from trustlink.config import settings

logger = logging.getLogger(__name__)

# Main task queue
queue = Queue.from_url(settings.redis_url)

NOTIFICATION_TIMEOUT_SECONDS = 60


def get_queue_settings() -> dict:
    """Get SAQ queue settings for the worker."""
    # Import here to avoid circular imports
    from trustlink.tasks.notifications import send_results_summary

    return {
        "queue": queue,
        "functions": [send_results_summary],
        "concurrency": 4,
        "startup": startup,
        "shutdown": shutdown,
    }


async def startup(_ctx: dict) -> None:
    """Called when worker starts."""
    logger.info("Notification worker started")


async def shutdown(_ctx: dict) -> None:
    """Called when worker shuts down."""
    from trustlink.database import close_db

    await close_db()
