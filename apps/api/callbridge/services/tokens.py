"""User token issuance, signed by the Stream SDK."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import MissingIdentifier, SigningUnavailable
from .stream import StreamGateway, StreamGatewayError

logger = logging.getLogger(__name__)

@dataclass(slots=True)
class AuthToken:
    token: str
    user_id: str
    expires_in: int


async def issue_token(gateway: StreamGateway, user_id: str | None, *, ttl_seconds: int) -> AuthToken:
    """Produce a Stream user token for ``user_id``."""

    if not user_id or not user_id.strip():
        raise MissingIdentifier("userId is required")

    try:
        token = await gateway.create_token(user_id, expiration=ttl_seconds)
    except StreamGatewayError as exc:
        logger.error("Token generation failed for %s (code=%s): %s", user_id, exc.code, exc.message)
        raise SigningUnavailable(exc.message, code=exc.code) from exc

    if not token:
        raise SigningUnavailable("Stream returned an empty token")
    return AuthToken(token=token, user_id=user_id, expires_in=ttl_seconds)
