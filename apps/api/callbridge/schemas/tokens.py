"""Data contracts for token endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId", description="Opaque user identifier")


class TokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., description="Stream user token")
    user_id: str = Field(..., alias="userId")
    expires_in: int = Field(..., ge=1, alias="expiresIn", description="Seconds until expiration")
