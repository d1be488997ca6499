"""Verification session model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from trustlink.models.base import TimestampMixin, generate_nanoid

TOKEN_LENGTH = 32


class VerificationType(str, Enum):
    """What the buyer asked the seller to prove."""

    ID_NUMBER = "idNumber"
    PROPERTY = "property"
    VEHICLE = "vehicle"
    BOTH = "both"  # property + vehicle


class SessionStatus(str, Enum):
    """Stored lifecycle status of a session.

    EXPIRED exists for compatibility with the stored vocabulary; expiry is
    derived at read time and never written.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    EXPIRED = "expired"


class VerificationSession(TimestampMixin, SQLModel, table=True):
    """A buyer-initiated verification request addressed by a public token."""

    __tablename__ = "verification_sessions"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    session_token: str = Field(unique=True, index=True, max_length=TOKEN_LENGTH)
    buyer_phone: str = Field(max_length=32)
    buyer_email: str | None = Field(default=None, max_length=255)
    seller_phone: str = Field(max_length=32)
    verification_type: VerificationType
    status: SessionStatus = Field(default=SessionStatus.PENDING)
    expires_at: datetime = Field(
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Creation time plus the session TTL; never extended",
    )


class SessionCreate(SQLModel):
    """Schema for a buyer creating a verification session."""

    buyer_phone: str = ""
    buyer_email: str | None = None
    seller_phone: str = ""
    verification_type: VerificationType = VerificationType.PROPERTY


class SessionRead(SQLModel):
    """Schema for reading a session by token."""

    session_token: str
    buyer_phone: str
    buyer_email: str | None
    seller_phone: str
    verification_type: VerificationType
    status: SessionStatus
    expires_at: datetime
    expired: bool
    created_at: datetime
    updated_at: datetime
