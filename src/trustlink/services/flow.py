"""Seller verification flow.

Drives a seller through intro -> id -> (property) -> (vehicle) -> complete,
one check at a time. Expiry blocks opening and starting a flow; a seller who
already started may finish their checks.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from trustlink.errors import (
    ExpiredError,
    InvalidStepError,
    SessionNotFoundError,
    ValidationError,
)
from trustlink.models import (
    CheckKind,
    CheckStatus,
    SessionStatus,
    VerificationResult,
    VerificationSession,
    VerificationType,
)
from trustlink.services.aggregator import CheckOutcome, ResultAggregator
from trustlink.services.lifecycle import SessionLifecycle
from trustlink.services.sequencer import (
    STEP_FOR_CHECK,
    Step,
    next_step,
    required_checks,
    requires_check,
    resume_step,
)
from trustlink.services.verification import VerificationProvider
from trustlink.tasks.notifications import enqueue_results_summary

logger = logging.getLogger(__name__)

Notifier = Callable[[str], Awaitable[bool]]


@dataclass
class FlowState:
    """Where a seller currently is in the flow."""

    step: Step
    verification: VerificationSession | None = None

    @property
    def checks(self) -> list[CheckKind]:
        if self.verification is None:
            return []
        return list(required_checks(self.verification.verification_type))


@dataclass
class StepOutcome:
    """Result of submitting one check."""

    check: CheckKind
    verified: bool
    match: bool
    next_step: Step


class SellerFlow:
    """Seller-side orchestration over lifecycle, aggregator and provider."""

    def __init__(
        self,
        lifecycle: SessionLifecycle,
        aggregator: ResultAggregator,
        provider: VerificationProvider,
        notifier: Notifier | None = None,
    ):
        self.lifecycle = lifecycle
        self.aggregator = aggregator
        self.provider = provider
        self.notifier = notifier or enqueue_results_summary

    async def _require_session(self, token: str) -> VerificationSession:
        verification = await self.lifecycle.fetch_by_token(token)
        if verification is None:
            raise SessionNotFoundError("This verification link is invalid or has been removed")
        return verification

    async def load(self, token: str) -> FlowState:
        """Resolve the screen a seller should see for a token."""
        verification = await self.lifecycle.fetch_by_token(token)
        if verification is None:
            return FlowState(step=Step.INVALID)

        if self.lifecycle.evaluate_expiry(verification).expired:
            return FlowState(step=Step.EXPIRED, verification=verification)

        status = SessionStatus(verification.status)
        if status == SessionStatus.COMPLETED:
            return FlowState(step=Step.COMPLETE, verification=verification)
        if status == SessionStatus.PENDING:
            return FlowState(step=Step.INTRO, verification=verification)

        verification_result = await self.aggregator.get_result(verification)
        return FlowState(
            step=resume_step(verification.verification_type, verification_result),
            verification=verification,
        )

    async def start(self, token: str) -> FlowState:
        """Begin (or resume) the flow: status goes in_progress and the result row exists.

        An in-progress session whose checks are all recorded but which never
        reached completed is finished here, even past its expiry.

        Raises:
            SessionNotFoundError: unknown token
            ExpiredError: link past its expiry
        """
        verification = await self._require_session(token)
        status = SessionStatus(verification.status)

        if status == SessionStatus.COMPLETED:
            return FlowState(step=Step.COMPLETE, verification=verification)

        if status == SessionStatus.IN_PROGRESS:
            verification_result = await self.aggregator.get_result(verification)
            if (
                verification_result is not None
                and resume_step(verification.verification_type, verification_result)
                == Step.COMPLETE
            ):
                await self._finish(verification, verification_result)
                return FlowState(step=Step.COMPLETE, verification=verification)

        if self.lifecycle.evaluate_expiry(verification).expired:
            raise ExpiredError(
                "This verification link has expired. Please request a new one from the buyer."
            )

        if status == SessionStatus.PENDING:
            await self.lifecycle.advance_status(verification, SessionStatus.IN_PROGRESS)
        verification_result = await self.aggregator.start_result(verification)

        return FlowState(
            step=resume_step(verification.verification_type, verification_result),
            verification=verification,
        )

    async def _active_result(
        self, verification: VerificationSession, kind: CheckKind
    ) -> VerificationResult:
        if not requires_check(verification.verification_type, kind):
            raise InvalidStepError(
                f"This session does not request {kind.value} verification"
            )

        status = SessionStatus(verification.status)
        if status == SessionStatus.PENDING:
            raise InvalidStepError("Verification has not been started")
        if status != SessionStatus.IN_PROGRESS:
            raise InvalidStepError("Verification has already been completed")

        verification_result = await self.aggregator.get_result(verification)
        if verification_result is None:
            # Status was advanced but the result insert never landed
            verification_result = await self.aggregator.start_result(verification)

        expected = resume_step(verification.verification_type, verification_result)
        if expected not in (STEP_FOR_CHECK[kind], Step.COMPLETE):
            raise InvalidStepError(
                f"Cannot submit {kind.value} verification now; current step is {expected.value}"
            )
        return verification_result

    async def _finish(
        self, verification: VerificationSession, verification_result: VerificationResult
    ) -> None:
        if verification_result.completed_at is None:
            await self.aggregator.finalize(verification, verification_result)
        else:
            # completed_at landed on an earlier attempt, the status did not
            await self.lifecycle.advance_status(verification, SessionStatus.COMPLETED)
        logger.info(f"Session {verification.id} completed")
        await self.notifier(verification.id)

    async def _submit(
        self,
        verification: VerificationSession,
        kind: CheckKind,
        reference: str,
        run_check: Callable[[], Awaitable[CheckOutcome]],
    ) -> StepOutcome:
        verification_result = await self._active_result(verification, kind)
        verification_type = VerificationType(verification.verification_type)

        if resume_step(verification_type, verification_result) == Step.COMPLETE:
            # Every check is recorded but completion failed; retrying only finishes it
            await self._finish(verification, verification_result)
            return StepOutcome(
                check=kind,
                verified=verification_result.check_status(kind) == CheckStatus.VERIFIED,
                match=verification_result.check_match(kind) is True,
                next_step=Step.COMPLETE,
            )

        outcome = await run_check()
        await self.aggregator.record_check_outcome(verification_result, kind, reference, outcome)

        following = next_step(verification_type, STEP_FOR_CHECK[kind])
        if following == Step.COMPLETE:
            await self._finish(verification, verification_result)

        return StepOutcome(
            check=kind, verified=outcome.verified, match=outcome.match, next_step=following
        )

    async def submit_identity(self, token: str, id_number: str, full_name: str) -> StepOutcome:
        verification = await self._require_session(token)
        id_number = (id_number or "").strip()
        full_name = (full_name or "").strip()
        if not id_number or not full_name:
            raise ValidationError("Please fill in all fields")

        async def run_check() -> CheckOutcome:
            check = await self.provider.check_identity(id_number, full_name)
            return CheckOutcome(verified=check.verified, match=check.name_match)

        return await self._submit(verification, CheckKind.IDENTITY, id_number, run_check)

    async def submit_property(self, token: str, reference: str) -> StepOutcome:
        verification = await self._require_session(token)
        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Please enter property reference", field="reference")

        async def run_check() -> CheckOutcome:
            check = await self.provider.check_property(reference)
            return CheckOutcome(verified=check.verified, match=check.ownership_match)

        return await self._submit(verification, CheckKind.PROPERTY, reference, run_check)

    async def submit_vehicle(self, token: str, reference: str) -> StepOutcome:
        verification = await self._require_session(token)
        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Please enter vehicle reference", field="reference")

        async def run_check() -> CheckOutcome:
            check = await self.provider.check_vehicle(reference)
            return CheckOutcome(verified=check.verified, match=check.ownership_match)

        return await self._submit(verification, CheckKind.VEHICLE, reference, run_check)
