"""Seller flow endpoints."""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel

from trustlink.api.deps import LookupRateLimit, SellerFlowDep, VerifyRateLimit
from trustlink.errors import SessionNotFoundError
from trustlink.models import CheckKind, SessionStatus, VerificationType
from trustlink.services.flow import FlowState, StepOutcome
from trustlink.services.sequencer import Step

router = APIRouter()


class FlowResponse(BaseModel):
    """The screen a seller should see."""

    step: Step
    verification_type: VerificationType
    status: SessionStatus
    checks: list[CheckKind]
    expires_at: datetime


class IdentityRequest(BaseModel):
    """Identity check submission."""

    id_number: str = ""
    full_name: str = ""


class ReferenceRequest(BaseModel):
    """Property or vehicle check submission."""

    reference: str = ""


class StepResponse(BaseModel):
    """Outcome of one check and the step that follows it."""

    check: CheckKind
    verified: bool
    match: bool
    next_step: Step


def _flow_response(state: FlowState) -> FlowResponse:
    if state.verification is None:
        raise SessionNotFoundError("This verification link is invalid or has been removed")
    return FlowResponse(
        step=state.step,
        verification_type=state.verification.verification_type,
        status=state.verification.status,
        checks=state.checks,
        expires_at=state.verification.expires_at,
    )


def _step_response(outcome: StepOutcome) -> StepResponse:
    return StepResponse(
        check=outcome.check,
        verified=outcome.verified,
        match=outcome.match,
        next_step=outcome.next_step,
    )


@router.get("/{token}", response_model=FlowResponse)
async def get_flow(token: str, flow: SellerFlowDep, _rate_limit: LookupRateLimit):
    """Resolve the seller's current step."""
    return _flow_response(await flow.load(token))


@router.post("/{token}/start", response_model=FlowResponse)
async def start_flow(token: str, flow: SellerFlowDep, _rate_limit: VerifyRateLimit):
    """Start (or resume) verification."""
    return _flow_response(await flow.start(token))


@router.post("/{token}/identity", response_model=StepResponse)
async def submit_identity(
    token: str, body: IdentityRequest, flow: SellerFlowDep, _rate_limit: VerifyRateLimit
):
    """Verify the seller's ID number and name."""
    outcome = await flow.submit_identity(token, body.id_number, body.full_name)
    return _step_response(outcome)


@router.post("/{token}/property", response_model=StepResponse)
async def submit_property(
    token: str, body: ReferenceRequest, flow: SellerFlowDep, _rate_limit: VerifyRateLimit
):
    """Verify property ownership."""
    outcome = await flow.submit_property(token, body.reference)
    return _step_response(outcome)


@router.post("/{token}/vehicle", response_model=StepResponse)
async def submit_vehicle(
    token: str, body: ReferenceRequest, flow: SellerFlowDep, _rate_limit: VerifyRateLimit
):
    """Verify vehicle ownership."""
    outcome = await flow.submit_vehicle(token, body.reference)
    return _step_response(outcome)
