"""SQLModel database models."""

from trustlink.models.base import TimestampMixin, ensure_utc, generate_nanoid, utcnow
from trustlink.models.result import (
    CHECK_FIELDS,
    CheckKind,
    CheckStatus,
    ResultRead,
    VerificationResult,
)
from trustlink.models.session import (
    TOKEN_LENGTH,
    SessionCreate,
    SessionRead,
    SessionStatus,
    VerificationSession,
    VerificationType,
)

__all__ = [
    "CHECK_FIELDS",
    "TOKEN_LENGTH",
    "CheckKind",
    "CheckStatus",
    "ResultRead",
    "SessionCreate",
    "SessionRead",
    "SessionStatus",
    "TimestampMixin",
    "VerificationResult",
    "VerificationSession",
    "VerificationType",
    "ensure_utc",
    "generate_nanoid",
    "utcnow",
]
