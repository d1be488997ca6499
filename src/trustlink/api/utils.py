"""Shared API utilities."""

from trustlink.errors import SessionNotFoundError
from trustlink.models import SessionRead, SessionStatus, VerificationSession
from trustlink.services.lifecycle import SessionLifecycle, evaluate_expiry


def to_session_read(verification: VerificationSession) -> SessionRead:
    """Serialize a session with its read-time expiry flag.

    Only unfinished sessions are reported as expired, so the view of a
    completed session never changes.
    """
    status = SessionStatus(verification.status)
    return SessionRead(
        session_token=verification.session_token,
        buyer_phone=verification.buyer_phone,
        buyer_email=verification.buyer_email,
        seller_phone=verification.seller_phone,
        verification_type=verification.verification_type,
        status=status,
        expires_at=verification.expires_at,
        expired=status != SessionStatus.COMPLETED and evaluate_expiry(verification).expired,
        created_at=verification.created_at,
        updated_at=verification.updated_at,
    )


async def get_session_or_404(token: str, lifecycle: SessionLifecycle) -> VerificationSession:
    """Get a session by token.

    Raises:
        SessionNotFoundError: if no session matches the token
    """
    verification = await lifecycle.fetch_by_token(token)
    if verification is None:
        raise SessionNotFoundError("Verification session not found")
    return verification
