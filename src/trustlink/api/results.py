"""Buyer results view."""

from fastapi import APIRouter
from pydantic import BaseModel

from trustlink.api.deps import AggregatorDep, LifecycleDep, LookupRateLimit
from trustlink.api.utils import get_session_or_404, to_session_read
from trustlink.models import (
    CheckKind,
    CheckStatus,
    ResultRead,
    SessionRead,
    SessionStatus,
    VerificationResult,
    VerificationType,
)
from trustlink.services.aggregator import is_fully_verified
from trustlink.services.sequencer import required_checks

router = APIRouter()

# (status passed, status failed, match passed, match failed)
BADGE_LABELS: dict[CheckKind, tuple[str, str, str, str]] = {
    CheckKind.IDENTITY: (
        "ID Verified",
        "ID Verification Failed",
        "Name Match Confirmed",
        "Name Mismatch",
    ),
    CheckKind.PROPERTY: (
        "Property Verified",
        "Property Check Failed",
        "Ownership Confirmed",
        "Ownership Not Confirmed",
    ),
    CheckKind.VEHICLE: (
        "Vehicle Verified",
        "Vehicle Check Failed",
        "Vehicle Ownership Confirmed",
        "Vehicle Ownership Not Confirmed",
    ),
}


class Badge(BaseModel):
    """One pass/fail pill on the results page."""

    check: CheckKind
    label: str
    passed: bool


class ResultsResponse(BaseModel):
    """Everything the buyer sees for a session."""

    session: SessionRead
    result: ResultRead | None = None
    fully_verified: bool
    badges: list[Badge]


def build_badges(
    verification_result: VerificationResult, verification_type: VerificationType
) -> list[Badge]:
    """Status and match badges for each check the type requires."""
    badges: list[Badge] = []
    for kind in required_checks(verification_type):
        verified_label, failed_label, match_label, mismatch_label = BADGE_LABELS[kind]
        verified = verification_result.check_status(kind) == CheckStatus.VERIFIED
        matched = verification_result.check_match(kind) is True
        badges.append(
            Badge(check=kind, label=verified_label if verified else failed_label, passed=verified)
        )
        badges.append(
            Badge(check=kind, label=match_label if matched else mismatch_label, passed=matched)
        )
    return badges


@router.get("/{token}", response_model=ResultsResponse)
async def get_results(
    token: str,
    lifecycle: LifecycleDep,
    aggregator: AggregatorDep,
    _rate_limit: LookupRateLimit,
):
    """Get the verification results for a session.

    Read-only: viewing results never changes the session or the result.
    """
    verification = await get_session_or_404(token, lifecycle)
    session_read = to_session_read(verification)

    if SessionStatus(verification.status) != SessionStatus.COMPLETED:
        return ResultsResponse(session=session_read, fully_verified=False, badges=[])

    verification_result = await aggregator.get_result(verification)
    if verification_result is None:
        return ResultsResponse(session=session_read, fully_verified=False, badges=[])

    verification_type = VerificationType(verification.verification_type)
    return ResultsResponse(
        session=session_read,
        result=ResultRead.model_validate(verification_result, from_attributes=True),
        fully_verified=is_fully_verified(verification_result, verification_type),
        badges=build_badges(verification_result, verification_type),
    )
