"""Verification result model."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlmodel import Field, SQLModel

from trustlink.models.base import TimestampMixin, generate_nanoid


class CheckKind(str, Enum):
    """The three checks a seller can be asked to pass."""

    IDENTITY = "identity"
    PROPERTY = "property"
    VEHICLE = "vehicle"


class CheckStatus(str, Enum):
    """Outcome status of a single check."""

    VERIFIED = "verified"
    FAILED = "failed"
    PENDING = "pending"
    SKIPPED = "skipped"


# Column names per check: (status, reference digest, match flag)
CHECK_FIELDS: dict[CheckKind, tuple[str, str, str]] = {
    CheckKind.IDENTITY: ("id_verification_status", "id_hash", "name_match"),
    CheckKind.PROPERTY: ("property_verification_status", "property_reference", "property_match"),
    CheckKind.VEHICLE: ("vehicle_verification_status", "vehicle_reference", "vehicle_match"),
}


class VerificationResult(TimestampMixin, SQLModel, table=True):
    """Accumulated check outcomes for one session.

    Reference columns only ever hold hex SHA-256 digests.
    """

    __tablename__ = "verification_results"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    session_id: str = Field(
        sa_column=Column(
            String(21),
            ForeignKey("verification_sessions.id", ondelete="CASCADE"),
            unique=True,
            index=True,
            nullable=False,
        )
    )

    id_verification_status: CheckStatus = Field(default=CheckStatus.PENDING)
    id_hash: str | None = Field(default=None, max_length=64)
    name_match: bool | None = Field(default=None)

    property_verification_status: CheckStatus = Field(default=CheckStatus.PENDING)
    property_reference: str | None = Field(default=None, max_length=64)
    property_match: bool | None = Field(default=None)

    vehicle_verification_status: CheckStatus = Field(default=CheckStatus.PENDING)
    vehicle_reference: str | None = Field(default=None, max_length=64)
    vehicle_match: bool | None = Field(default=None)

    completed_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    def check_status(self, kind: CheckKind) -> CheckStatus:
        """Status of one check, normalised to the enum."""
        status_field, _, _ = CHECK_FIELDS[kind]
        return CheckStatus(getattr(self, status_field))

    def check_match(self, kind: CheckKind) -> bool | None:
        """Match flag of one check."""
        _, _, match_field = CHECK_FIELDS[kind]
        return getattr(self, match_field)


class ResultRead(SQLModel):
    """Schema for reading a result. Never carries raw references."""

    id_verification_status: CheckStatus
    id_hash: str | None
    name_match: bool | None
    property_verification_status: CheckStatus
    property_reference: str | None
    property_match: bool | None
    vehicle_verification_status: CheckStatus
    vehicle_reference: str | None
    vehicle_match: bool | None
    completed_at: datetime | None
    created_at: datetime
