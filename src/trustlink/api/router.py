"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from trustlink.api import health, results, sessions, verify

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])

# Seller flow
api_router.include_router(verify.router, prefix="/verify", tags=["verify"])

# Buyer results
api_router.include_router(results.router, prefix="/results", tags=["results"])
