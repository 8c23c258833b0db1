"""Stream user token endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from ..core.config import Settings
from ..dependencies import get_app_settings, get_gateway
from ..schemas.tokens import TokenRequest, TokenResponse
from ..services import tokens as token_service
from ..services.stream import StreamGateway

router = APIRouter()


@router.post("/token", response_model=TokenResponse)
@router.post("/api/stream-token", response_model=TokenResponse, include_in_schema=False)
async def create_token(
    payload: TokenRequest | None = Body(default=None),
    gateway: StreamGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> TokenResponse:
    """Return a Stream user token so the client can join calls."""

    payload = payload or TokenRequest()
    token = await token_service.issue_token(gateway, payload.user_id, ttl_seconds=settings.token_ttl_seconds)
    return TokenResponse(token=token.token, user_id=token.user_id, expires_in=token.expires_in)
