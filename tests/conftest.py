"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from trustlink.api.deps import get_provider
from trustlink.config import settings
from trustlink.database import get_session
from trustlink.main import app
from trustlink.models import SessionStatus, VerificationSession, VerificationType, utcnow
from trustlink.services.aggregator import ResultAggregator
from trustlink.services.flow import SellerFlow
from trustlink.services.lifecycle import SessionLifecycle
from trustlink.services.rate_limit import get_rate_limiter
from trustlink.services.store import VerificationStore
from trustlink.services.tokens import generate_session_token
from trustlink.services.verification import (
    IdentityCheck,
    OwnershipCheck,
    VerificationProvider,
)


class FakeVerificationProvider(VerificationProvider):
    """Deterministic provider; flip the flags to script outcomes."""

    def __init__(self) -> None:
        self.verified = True
        self.name_match = True
        self.property_match = True
        self.vehicle_match = True
        self.calls: list[tuple[str, str]] = []

    async def check_identity(self, id_number: str, expected_name: str) -> IdentityCheck:
        self.calls.append(("identity", id_number))
        return IdentityCheck(
            verified=self.verified, name_match=self.name_match, retrieved_name=expected_name
        )

    async def check_property(self, reference: str) -> OwnershipCheck:
        self.calls.append(("property", reference))
        return OwnershipCheck(verified=self.verified, ownership_match=self.property_match)

    async def check_vehicle(self, reference: str) -> OwnershipCheck:
        self.calls.append(("vehicle", reference))
        return OwnershipCheck(verified=self.verified, ownership_match=self.vehicle_match)


@pytest.fixture(autouse=True)
def mock_queue():
    """Mock the SAQ queue to avoid Redis connections in tests."""
    mock_job = MagicMock()
    mock_job.id = "test-job-id"
    mock_job.key = "test-job-key"

    with patch("trustlink.tasks.queue.queue.enqueue", new_callable=AsyncMock) as mock_enqueue:
        mock_enqueue.return_value = mock_job
        yield mock_enqueue


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Start every test with empty rate limit windows."""
    get_rate_limiter().reset()
    yield
    get_rate_limiter().reset()


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine(
        settings.database_url_test,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session_factory() as session:
        yield session


@pytest.fixture
def provider() -> FakeVerificationProvider:
    return FakeVerificationProvider()


@pytest.fixture
async def client(
    session: AsyncSession, provider: FakeVerificationProvider
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_provider] = lambda: provider

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def store(session: AsyncSession) -> VerificationStore:
    return VerificationStore(session)


@pytest.fixture
def lifecycle(store: VerificationStore) -> SessionLifecycle:
    return SessionLifecycle(store)


@pytest.fixture
def aggregator(store: VerificationStore, lifecycle: SessionLifecycle) -> ResultAggregator:
    return ResultAggregator(store, lifecycle)


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock(return_value=True)


@pytest.fixture
def seller_flow(
    lifecycle: SessionLifecycle,
    aggregator: ResultAggregator,
    provider: FakeVerificationProvider,
    notifier: AsyncMock,
) -> SellerFlow:
    return SellerFlow(lifecycle, aggregator, provider, notifier=notifier)


MakeSession = Callable[..., Awaitable[VerificationSession]]


@pytest.fixture
def make_session(session: AsyncSession) -> MakeSession:
    """Factory for sessions with arbitrary type, status and expiry."""

    async def _make(
        verification_type: VerificationType = VerificationType.PROPERTY,
        status: SessionStatus = SessionStatus.PENDING,
        expires_in: timedelta = timedelta(minutes=30),
        buyer_email: str | None = None,
    ) -> VerificationSession:
        verification = VerificationSession(
            session_token=generate_session_token(),
            buyer_phone="+27 82 555 0101",
            buyer_email=buyer_email,
            seller_phone="+27 83 555 0202",
            verification_type=verification_type,
            status=status,
            expires_at=utcnow() + expires_in,
        )
        session.add(verification)
        await session.commit()
        return verification

    return _make


@pytest.fixture
async def pending_session(make_session: MakeSession) -> VerificationSession:
    """A fresh property verification nobody has started."""
    return await make_session()
