"""Buyer endpoints: create a verification link and look it up."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from trustlink.api.deps import CreateRateLimit, LifecycleDep, LookupRateLimit
from trustlink.api.utils import get_session_or_404, to_session_read
from trustlink.models import SessionCreate, SessionRead
from trustlink.services.tokens import results_url, verification_url, whatsapp_share_url

router = APIRouter()

SHARE_MESSAGE = (
    "Hi! Please verify your identity and ownership using this secure TrustLink: {url}\n\n"
    "This will only take 45 seconds and helps protect both of us from scams."
)


class SessionCreatedResponse(BaseModel):
    """A new session plus the links the buyer shares and keeps."""

    session: SessionRead
    verification_url: str
    results_url: str
    whatsapp_url: str


@router.post("", response_model=SessionCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_in: SessionCreate,
    lifecycle: LifecycleDep,
    _rate_limit: CreateRateLimit,
):
    """Create a verification session for a seller."""
    verification = await lifecycle.create_session(
        buyer_phone=session_in.buyer_phone,
        seller_phone=session_in.seller_phone,
        verification_type=session_in.verification_type,
        buyer_email=session_in.buyer_email,
    )

    link = verification_url(verification.session_token)
    return SessionCreatedResponse(
        session=to_session_read(verification),
        verification_url=link,
        results_url=results_url(verification.session_token),
        whatsapp_url=whatsapp_share_url(
            verification.seller_phone, SHARE_MESSAGE.format(url=link)
        ),
    )


@router.get("/{token}", response_model=SessionRead)
async def get_session(token: str, lifecycle: LifecycleDep, _rate_limit: LookupRateLimit):
    """Get a session by its public token."""
    verification = await get_session_or_404(token, lifecycle)
    return to_session_read(verification)
