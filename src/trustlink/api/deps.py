"""FastAPI dependencies for dependency injection."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from trustlink.database import get_session
from trustlink.services.aggregator import ResultAggregator
from trustlink.services.flow import SellerFlow
from trustlink.services.lifecycle import SessionLifecycle
from trustlink.services.rate_limit import (
    RateLimitType,
    check_rate_limit,
    rate_limit_headers,
)
from trustlink.services.store import VerificationStore
from trustlink.services.verification import VerificationProvider, get_verification_provider

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_store(session: SessionDep) -> VerificationStore:
    return VerificationStore(session)


StoreDep = Annotated[VerificationStore, Depends(get_store)]


def get_lifecycle(store: StoreDep) -> SessionLifecycle:
    return SessionLifecycle(store)


LifecycleDep = Annotated[SessionLifecycle, Depends(get_lifecycle)]


def get_aggregator(store: StoreDep, lifecycle: LifecycleDep) -> ResultAggregator:
    return ResultAggregator(store, lifecycle)


AggregatorDep = Annotated[ResultAggregator, Depends(get_aggregator)]


@lru_cache
def get_provider() -> VerificationProvider:
    """Process-wide verification provider."""
    return get_verification_provider()


ProviderDep = Annotated[VerificationProvider, Depends(get_provider)]


def get_seller_flow(
    lifecycle: LifecycleDep,
    aggregator: AggregatorDep,
    provider: ProviderDep,
) -> SellerFlow:
    return SellerFlow(lifecycle, aggregator, provider)


SellerFlowDep = Annotated[SellerFlow, Depends(get_seller_flow)]


class RateLimitDependency:
    """Dependency class for rate limiting endpoints.

    Usage:
        @router.post("/endpoint")
        async def endpoint(_rate_limit: CreateRateLimit):
            ...
    """

    def __init__(self, limit_type: RateLimitType) -> None:
        self.limit_type = limit_type

    async def __call__(self, request: Request) -> None:
        """Check rate limit and raise 429 if exceeded."""
        result = await check_rate_limit(request, self.limit_type)

        if not result.success:
            headers = rate_limit_headers(result)
            retry_after = headers.get("Retry-After", "60")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Please try again in {retry_after} seconds.",
                headers=headers,
            )


# Pre-configured rate limit dependencies
CreateRateLimit = Annotated[None, Depends(RateLimitDependency(RateLimitType.CREATE))]
VerifyRateLimit = Annotated[None, Depends(RateLimitDependency(RateLimitType.VERIFY))]
LookupRateLimit = Annotated[None, Depends(RateLimitDependency(RateLimitType.LOOKUP))]
