"""Data-access layer for sessions and results.

Each write commits on its own: the store guarantees row-level durability
only, there is no transaction spanning a session and its result.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from trustlink.errors import PersistenceError
from trustlink.models import (
    SessionStatus,
    VerificationResult,
    VerificationSession,
    utcnow,
)

logger = logging.getLogger(__name__)


class VerificationStore:
    """Session and result persistence over an async SQLAlchemy session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, action: str) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Store write failed ({action}): {e!r}")
            raise PersistenceError(f"Failed to {action}") from e

    async def _fetch_one(self, stmt: Any, action: str) -> Any:
        try:
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Store read failed ({action}): {e!r}")
            raise PersistenceError(f"Failed to {action}") from e

    async def insert_session(self, verification: VerificationSession) -> VerificationSession:
        self.session.add(verification)
        await self._commit("create verification session")
        return verification

    async def get_session_by_token(self, token: str) -> VerificationSession | None:
        stmt = select(VerificationSession).where(VerificationSession.session_token == token)
        return await self._fetch_one(stmt, "fetch session")

    async def get_session_by_id(self, session_id: str) -> VerificationSession | None:
        stmt = select(VerificationSession).where(VerificationSession.id == session_id)
        return await self._fetch_one(stmt, "fetch session")

    async def list_sessions(self, limit: int = 50) -> list[VerificationSession]:
        stmt = (
            select(VerificationSession)
            .order_by(VerificationSession.created_at.desc())  # type: ignore[attr-defined]
            .limit(limit)
        )
        try:
            result = await self.session.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"Store read failed (list sessions): {e!r}")
            raise PersistenceError("Failed to list sessions") from e

    async def update_session_status(
        self, verification: VerificationSession, status: SessionStatus
    ) -> VerificationSession:
        verification.status = status
        verification.updated_at = utcnow()
        await self._commit("update session")
        return verification

    async def insert_result(self, session_id: str) -> VerificationResult:
        verification_result = VerificationResult(session_id=session_id)
        self.session.add(verification_result)
        await self._commit("create verification result")
        return verification_result

    async def update_result(
        self, verification_result: VerificationResult, updates: dict[str, Any]
    ) -> VerificationResult:
        for field, value in updates.items():
            setattr(verification_result, field, value)
        verification_result.updated_at = utcnow()
        await self._commit("update verification result")
        return verification_result

    async def get_result(self, session_id: str) -> VerificationResult | None:
        stmt = select(VerificationResult).where(VerificationResult.session_id == session_id)
        return await self._fetch_one(stmt, "fetch verification result")
