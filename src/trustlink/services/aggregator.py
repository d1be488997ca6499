"""Result aggregation: per-check outcomes, finalization and the overall verdict."""

import logging
from dataclasses import dataclass

from trustlink.errors import AlreadyFinalizedError, PersistenceError
from trustlink.models import (
    CHECK_FIELDS,
    CheckKind,
    CheckStatus,
    SessionStatus,
    VerificationResult,
    VerificationSession,
    VerificationType,
    utcnow,
)
from trustlink.services.lifecycle import SessionLifecycle
from trustlink.services.sequencer import required_checks
from trustlink.services.store import VerificationStore
from trustlink.services.tokens import hash_reference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckOutcome:
    """What a verification provider reported for one check.

    ``verified`` says the check ran successfully; ``match`` says the claimed
    value agrees with the looked-up one. The two are independent.
    """

    verified: bool
    match: bool


def is_fully_verified(
    verification_result: VerificationResult | None, verification_type: VerificationType
) -> bool:
    """True iff every check the type requires is verified with a positive match."""
    if verification_result is None:
        return False
    return all(
        verification_result.check_status(kind) == CheckStatus.VERIFIED
        and verification_result.check_match(kind) is True
        for kind in required_checks(verification_type)
    )


class ResultAggregator:
    """Persists check outcomes and finalizes sessions."""

    def __init__(self, store: VerificationStore, lifecycle: SessionLifecycle):
        self.store = store
        self.lifecycle = lifecycle

    async def get_result(self, verification: VerificationSession) -> VerificationResult | None:
        return await self.store.get_result(verification.id)

    async def start_result(self, verification: VerificationSession) -> VerificationResult:
        """Create the result row for a session, or return the existing one."""
        existing = await self.store.get_result(verification.id)
        if existing is not None:
            return existing
        verification_result = await self.store.insert_result(verification.id)
        logger.info(f"Created result {verification_result.id} for session {verification.id}")
        return verification_result

    async def record_check_outcome(
        self,
        verification_result: VerificationResult,
        kind: CheckKind,
        reference: str,
        outcome: CheckOutcome,
    ) -> VerificationResult:
        """Persist one check: hashed reference, status and match flag.

        The raw reference is hashed before anything touches the store.
        """
        digest = hash_reference(reference)
        status_field, reference_field, match_field = CHECK_FIELDS[kind]
        status = CheckStatus.VERIFIED if outcome.verified else CheckStatus.FAILED

        await self.store.update_result(
            verification_result,
            {
                status_field: status,
                reference_field: digest,
                match_field: outcome.match,
            },
        )
        logger.info(
            f"Recorded {kind.value} check for session {verification_result.session_id}: "
            f"status={status.value} match={outcome.match}"
        )
        return verification_result

    async def finalize(
        self, verification: VerificationSession, verification_result: VerificationResult
    ) -> VerificationResult:
        """Stamp ``completed_at`` once and mark the session completed.

        Raises:
            AlreadyFinalizedError: if the result was finalized before
        """
        if verification_result.completed_at is not None:
            raise AlreadyFinalizedError("Verification has already been completed")

        await self.store.update_result(verification_result, {"completed_at": utcnow()})
        try:
            await self.lifecycle.advance_status(verification, SessionStatus.COMPLETED)
        except PersistenceError:
            # No cross-row transaction: completed_at is stored but status lags behind
            logger.error(
                f"Session {verification.id} finalized but status update failed; "
                "status is behind completed_at"
            )
            raise
        return verification_result
