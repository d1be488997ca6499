"""Background delivery of verification result notifications."""

import logging
from typing import Any

from trustlink.database import get_session_context
from trustlink.services.notifications import NotificationDispatcher
from trustlink.services.store import VerificationStore
from trustlink.tasks.queue import NOTIFICATION_TIMEOUT_SECONDS, queue

logger = logging.getLogger(__name__)


async def send_results_summary(ctx: dict[str, Any], *, session_id: str) -> dict[str, Any]:
    """Load a completed session and notify buyer and seller.

    Args:
        ctx: SAQ context
        session_id: Internal session id

    Returns:
        Dict describing which channels accepted the notification
    """
    async with get_session_context() as session:
        store = VerificationStore(session)
        verification = await store.get_session_by_id(session_id)
        if verification is None:
            logger.warning(f"Notification skipped: session {session_id} not found")
            return {"sent": False, "reason": "session_not_found"}

        verification_result = await store.get_result(session_id)
        if verification_result is None:
            logger.warning(f"Notification skipped: no result for session {session_id}")
            return {"sent": False, "reason": "result_not_found"}

        report = await NotificationDispatcher().send_results_summary(
            verification, verification_result
        )

    return {
        "sent": report.buyer_notified,
        "buyer_email": report.buyer_email,
        "buyer_sms": report.buyer_sms,
        "seller_sms": report.seller_sms,
    }


async def enqueue_results_summary(session_id: str) -> bool:
    """Queue a results notification. Failures are logged, never raised."""
    try:
        await queue.enqueue(
            "send_results_summary",
            session_id=session_id,
            timeout=NOTIFICATION_TIMEOUT_SECONDS,
        )
    except Exception as e:
        logger.error(f"Failed to queue results notification for session {session_id}: {e!r}")
        return False
    return True
