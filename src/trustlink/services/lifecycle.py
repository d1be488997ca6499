"""Session lifecycle: creation, token lookup, expiry and status transitions.

Stored status only moves forward one level at a time:

    pending -> in_progress -> completed

Expiry is never stored. It is evaluated at read time against ``expires_at``
and leaves the stored status untouched.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from trustlink.config import settings
from trustlink.errors import InvalidStatusTransitionError, ValidationError
from trustlink.models import (
    SessionStatus,
    VerificationSession,
    VerificationType,
    ensure_utc,
    utcnow,
)
from trustlink.services.store import VerificationStore
from trustlink.services.tokens import generate_session_token

logger = logging.getLogger(__name__)

_VALID_TRANSITIONS: dict[SessionStatus, list[SessionStatus]] = {
    SessionStatus.PENDING: [SessionStatus.IN_PROGRESS],
    SessionStatus.IN_PROGRESS: [SessionStatus.COMPLETED],
    SessionStatus.COMPLETED: [],
    SessionStatus.EXPIRED: [],
}


@dataclass(frozen=True)
class ExpiryState:
    """Read-time expiry view of a session."""

    expired: bool


def evaluate_expiry(verification: VerificationSession, now: datetime | None = None) -> ExpiryState:
    """A session is expired strictly after ``expires_at``; the boundary is still valid."""
    now = ensure_utc(now) if now else utcnow()
    return ExpiryState(expired=now > ensure_utc(verification.expires_at))


def is_valid_transition(current: SessionStatus, target: SessionStatus) -> bool:
    """Check if a status transition is allowed."""
    return target in _VALID_TRANSITIONS.get(current, [])


def validate_transition(current: SessionStatus, target: SessionStatus) -> None:
    """Raise InvalidStatusTransitionError unless ``current -> target`` is allowed."""
    if not is_valid_transition(current, target):
        raise InvalidStatusTransitionError(current.value, target.value)


def _require(value: str | None, field: str, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"Please enter {label}", field=field)
    return cleaned


class SessionLifecycle:
    """Owns session creation and status transitions."""

    def __init__(self, store: VerificationStore, ttl_minutes: int | None = None):
        self.store = store
        if ttl_minutes is None:
            ttl_minutes = settings.session_ttl_minutes
        self.ttl = timedelta(minutes=ttl_minutes)

    async def create_session(
        self,
        buyer_phone: str,
        seller_phone: str,
        verification_type: VerificationType,
        buyer_email: str | None = None,
    ) -> VerificationSession:
        """Create a pending session with a fresh token and a fixed expiry.

        Raises:
            ValidationError: if either phone number is blank
            PersistenceError: if the store write fails (not retried)
        """
        buyer_phone = _require(buyer_phone, "buyer_phone", "your phone number")
        seller_phone = _require(seller_phone, "seller_phone", "the seller's phone number")

        now = utcnow()
        verification = VerificationSession(
            session_token=generate_session_token(),
            buyer_phone=buyer_phone,
            buyer_email=(buyer_email or "").strip() or None,
            seller_phone=seller_phone,
            verification_type=VerificationType(verification_type),
            status=SessionStatus.PENDING,
            expires_at=now + self.ttl,
            created_at=now,
            updated_at=now,
        )
        await self.store.insert_session(verification)
        logger.info(
            f"Created verification session {verification.id} "
            f"type={verification.verification_type.value}"
        )
        return verification

    async def fetch_by_token(self, token: str) -> VerificationSession | None:
        """Exact-match token lookup; ``None`` is a normal outcome."""
        if not token:
            return None
        return await self.store.get_session_by_token(token)

    async def fetch_by_id(self, session_id: str) -> VerificationSession | None:
        return await self.store.get_session_by_id(session_id)

    def evaluate_expiry(
        self, verification: VerificationSession, now: datetime | None = None
    ) -> ExpiryState:
        return evaluate_expiry(verification, now)

    async def advance_status(
        self, verification: VerificationSession, new_status: SessionStatus
    ) -> VerificationSession:
        """Move the session one step forward and refresh ``updated_at``.

        Raises:
            InvalidStatusTransitionError: for backward, repeated or skip-level moves
        """
        current = SessionStatus(verification.status)
        validate_transition(current, new_status)
        await self.store.update_session_status(verification, new_status)
        logger.info(f"Session {verification.id} {current.value} -> {new_status.value}")
        return verification
