"""Error taxonomy for the verification workflow.

Every error carries the HTTP status and a message that is safe to show to
the buyer or seller. "Not found" is deliberately absent from the service
layer: lookups return ``None`` and only the HTTP boundary turns that into
``SessionNotFoundError``.
"""

__all__ = [
    "AlreadyFinalizedError",
    "ExpiredError",
    "InvalidStatusTransitionError",
    "InvalidStepError",
    "PersistenceError",
    "SessionNotFoundError",
    "ValidationError",
    "VerificationError",
]


class VerificationError(Exception):
    """Base class for all workflow errors."""

    code = "VERIFICATION_ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PersistenceError(VerificationError):
    """The store rejected or failed an operation. Never retried."""

    code = "PERSISTENCE_ERROR"
    status_code = 503


class ValidationError(VerificationError):
    """A required field is missing or blank."""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ExpiredError(VerificationError):
    """The verification link is past its expiry time."""

    code = "SESSION_EXPIRED"
    status_code = 410


class SessionNotFoundError(VerificationError):
    """No session matches the supplied token."""

    code = "SESSION_NOT_FOUND"
    status_code = 404


class InvalidStatusTransitionError(VerificationError):
    """Raised when a session status would move backward or skip a level."""

    code = "INVALID_STATUS_TRANSITION"
    status_code = 409

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot transition session from {current} to {target}")
        self.current = current
        self.target = target


class AlreadyFinalizedError(VerificationError):
    """Raised when a result that already has ``completed_at`` is finalized again."""

    code = "ALREADY_FINALIZED"
    status_code = 409


class InvalidStepError(VerificationError):
    """A check was submitted out of order or outside an active flow."""

    code = "INVALID_STEP"
    status_code = 409
