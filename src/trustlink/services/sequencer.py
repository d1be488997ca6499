"""Step sequencing for the seller flow.

Identity is always checked first, whatever was requested; property and
vehicle follow in that order when the verification type asks for them.
"""

from enum import Enum

from trustlink.errors import InvalidStepError
from trustlink.models import CheckKind, CheckStatus, VerificationResult, VerificationType


class Step(str, Enum):
    """Screens of the seller flow."""

    INVALID = "invalid"
    EXPIRED = "expired"
    INTRO = "intro"
    ID = "id"
    PROPERTY = "property"
    VEHICLE = "vehicle"
    COMPLETE = "complete"


STEP_FOR_CHECK: dict[CheckKind, Step] = {
    CheckKind.IDENTITY: Step.ID,
    CheckKind.PROPERTY: Step.PROPERTY,
    CheckKind.VEHICLE: Step.VEHICLE,
}

_TYPE_CHECKS: dict[VerificationType, tuple[CheckKind, ...]] = {
    VerificationType.ID_NUMBER: (CheckKind.IDENTITY,),
    VerificationType.PROPERTY: (CheckKind.IDENTITY, CheckKind.PROPERTY),
    VerificationType.VEHICLE: (CheckKind.IDENTITY, CheckKind.VEHICLE),
    VerificationType.BOTH: (CheckKind.IDENTITY, CheckKind.PROPERTY, CheckKind.VEHICLE),
}


def required_checks(verification_type: VerificationType) -> tuple[CheckKind, ...]:
    """Checks a verification type requires, in the order they run."""
    return _TYPE_CHECKS[VerificationType(verification_type)]


def requires_check(verification_type: VerificationType, kind: CheckKind) -> bool:
    return kind in required_checks(verification_type)


def step_order(verification_type: VerificationType) -> list[Step]:
    """Full ordered step list: intro, the check steps, then complete."""
    checks = [STEP_FOR_CHECK[kind] for kind in required_checks(verification_type)]
    return [Step.INTRO, *checks, Step.COMPLETE]


def next_step(verification_type: VerificationType, current: Step) -> Step:
    """Decide the step after ``current`` for a verification type.

    Examples:
        next_step(BOTH, ID) -> PROPERTY
        next_step(BOTH, PROPERTY) -> VEHICLE
        next_step(ID_NUMBER, ID) -> COMPLETE
        next_step(VEHICLE, ID) -> VEHICLE

    Raises:
        InvalidStepError: if ``current`` is not part of this type's flow
    """
    current = Step(current)
    if current == Step.COMPLETE:
        return Step.COMPLETE

    order = step_order(verification_type)
    if current not in order:
        raise InvalidStepError(
            f"Step '{current.value}' is not part of a "
            f"'{VerificationType(verification_type).value}' verification"
        )
    return order[order.index(current) + 1]


def resume_step(
    verification_type: VerificationType, verification_result: VerificationResult | None
) -> Step:
    """First check step still pending, or COMPLETE when every required check ran."""
    if verification_result is None:
        return Step.ID
    for kind in required_checks(verification_type):
        if verification_result.check_status(kind) == CheckStatus.PENDING:
            return STEP_FOR_CHECK[kind]
    return Step.COMPLETE
