"""Call creation and end-of-call endpoints."""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends

from ..core.config import Settings
from ..dependencies import get_app_settings, get_gateway
from ..schemas.calls import CreateCallRequest, CreateCallResponse, EndCallRequest, EndCallResponse
from ..services import calls as call_service
from ..services.stream import StreamGateway

router = APIRouter()


@router.post("/create-call", response_model=CreateCallResponse)
async def create_call(
    payload: CreateCallRequest | None = Body(default=None),
    gateway: StreamGateway = Depends(get_gateway),
) -> CreateCallResponse:
    """Ensure the video call for a booking exists with both participants."""

    payload = payload or CreateCallRequest()
    professional = call_service.ParticipantIdentity(
        id=payload.professional_id or "",
        display_name=payload.professional_name or "",
    )
    patient = call_service.ParticipantIdentity(
        id=payload.patient_id or "",
        display_name=payload.patient_name or "",
    )
    session = await call_service.ensure_session(gateway, payload.booking_id, professional, patient)
    return CreateCallResponse(
        call_id=session.session_id,
        created=session.created,
        timestamp=datetime.now(timezone.utc),
    )


@router.post("/end-call", response_model=EndCallResponse)
async def end_call(
    payload: EndCallRequest | None = Body(default=None),
    gateway: StreamGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> EndCallResponse:
    """Acknowledge the end of a call, forwarding it to Stream when configured."""

    payload = payload or EndCallRequest()
    ack = await call_service.notify_ended(gateway, payload.call_id, hard_end=settings.hard_end_calls)
    return EndCallResponse(call_id=ack.session_id, forwarded=ack.forwarded)
