"""Step sequencing tests."""

import pytest

from trustlink.errors import InvalidStepError
from trustlink.models import CheckKind, CheckStatus, VerificationResult, VerificationType
from trustlink.services.sequencer import (
    Step,
    next_step,
    required_checks,
    requires_check,
    resume_step,
    step_order,
)


@pytest.mark.parametrize(
    ("verification_type", "expected"),
    [
        (VerificationType.ID_NUMBER, [Step.INTRO, Step.ID, Step.COMPLETE]),
        (VerificationType.PROPERTY, [Step.INTRO, Step.ID, Step.PROPERTY, Step.COMPLETE]),
        (VerificationType.VEHICLE, [Step.INTRO, Step.ID, Step.VEHICLE, Step.COMPLETE]),
        (
            VerificationType.BOTH,
            [Step.INTRO, Step.ID, Step.PROPERTY, Step.VEHICLE, Step.COMPLETE],
        ),
    ],
)
def test_step_order(verification_type, expected):
    assert step_order(verification_type) == expected


@pytest.mark.parametrize(
    ("verification_type", "current", "expected"),
    [
        (VerificationType.BOTH, Step.INTRO, Step.ID),
        (VerificationType.BOTH, Step.ID, Step.PROPERTY),
        (VerificationType.BOTH, Step.PROPERTY, Step.VEHICLE),
        (VerificationType.BOTH, Step.VEHICLE, Step.COMPLETE),
        (VerificationType.PROPERTY, Step.ID, Step.PROPERTY),
        (VerificationType.PROPERTY, Step.PROPERTY, Step.COMPLETE),
        (VerificationType.VEHICLE, Step.ID, Step.VEHICLE),
        (VerificationType.ID_NUMBER, Step.ID, Step.COMPLETE),
    ],
)
def test_next_step(verification_type, current, expected):
    assert next_step(verification_type, current) == expected


@pytest.mark.parametrize("verification_type", list(VerificationType))
def test_complete_is_absorbing(verification_type):
    assert next_step(verification_type, Step.COMPLETE) == Step.COMPLETE


@pytest.mark.parametrize(
    ("verification_type", "current"),
    [
        (VerificationType.PROPERTY, Step.VEHICLE),
        (VerificationType.VEHICLE, Step.PROPERTY),
        (VerificationType.ID_NUMBER, Step.PROPERTY),
        (VerificationType.BOTH, Step.EXPIRED),
    ],
)
def test_next_step_outside_flow(verification_type, current):
    with pytest.raises(InvalidStepError):
        next_step(verification_type, current)


def test_identity_always_required():
    for verification_type in VerificationType:
        assert required_checks(verification_type)[0] == CheckKind.IDENTITY
        assert requires_check(verification_type, CheckKind.IDENTITY)

    assert not requires_check(VerificationType.PROPERTY, CheckKind.VEHICLE)
    assert requires_check(VerificationType.BOTH, CheckKind.VEHICLE)


def test_resume_step_without_result():
    assert resume_step(VerificationType.BOTH, None) == Step.ID


def test_resume_step_follows_pending_checks():
    verification_result = VerificationResult(session_id="s1")
    assert resume_step(VerificationType.BOTH, verification_result) == Step.ID

    verification_result.id_verification_status = CheckStatus.VERIFIED
    assert resume_step(VerificationType.BOTH, verification_result) == Step.PROPERTY

    verification_result.property_verification_status = CheckStatus.FAILED
    assert resume_step(VerificationType.BOTH, verification_result) == Step.VEHICLE

    verification_result.vehicle_verification_status = CheckStatus.VERIFIED
    assert resume_step(VerificationType.BOTH, verification_result) == Step.COMPLETE


def test_resume_step_ignores_unrequested_checks():
    verification_result = VerificationResult(
        session_id="s1", id_verification_status=CheckStatus.VERIFIED
    )
    # Vehicle stays pending, but a property session never asks for it
    assert resume_step(VerificationType.PROPERTY, verification_result) == Step.PROPERTY
    verification_result.property_verification_status = CheckStatus.VERIFIED
    assert resume_step(VerificationType.PROPERTY, verification_result) == Step.COMPLETE
