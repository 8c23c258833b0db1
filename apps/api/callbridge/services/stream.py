"""Stream video client wrapper.

The SDK is synchronous; every call is pushed onto a worker thread so route
handlers stay non-blocking. API and transport failures raised by the SDK are flattened into
:class:`StreamGatewayError` so the services only deal with one error type.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from getstream import Stream
from getstream.exceptions import StreamApiException, StreamException
from getstream.models import CallRequest, MemberRequest, UserRequest

from ..core.config import Settings

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "missing_credentials"
TRANSPORT_ERROR = "transport_error"

T = TypeVar("T")


class StreamGatewayError(RuntimeError):
    """Raised when Stream cannot be reached or rejects a request."""

    def __init__(self, message: str, *, code: str | int | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class StreamGateway:
    """Process-wide handle on the Stream server client."""

    def __init__(self, client: Stream | None, *, call_type: str = "default") -> None:
        self._client = client
        self.call_type = call_type

    async def create_token(self, user_id: str, *, expiration: int) -> str:
        client = self._require_client()
        return await self._run(lambda: client.create_token(user_id, expiration=expiration))

    async def upsert_users(self, users: Sequence[Mapping[str, str]]) -> None:
        """Create or update all ``users`` in one request."""

        client = self._require_client()
        requests = [UserRequest(**user) for user in users]
        await self._run(lambda: client.upsert_users(*requests))

    async def get_or_create_call(
        self,
        call_id: str,
        *,
        created_by_id: str,
        member_ids: Sequence[str],
        custom: Mapping[str, str] | None = None,
    ) -> bool:
        """Get or create a call, returning ``True`` when Stream created it."""

        client = self._require_client()
        call = client.video.call(self.call_type, call_id)
        data = CallRequest(
            created_by_id=created_by_id,
            members=[MemberRequest(user_id=member_id) for member_id in member_ids],
            custom=dict(custom or {}),
        )
        response = await self._run(lambda: call.get_or_create(data=data))
        return bool(getattr(getattr(response, "data", None), "created", False))

    async def end_call(self, call_id: str) -> None:
        client = self._require_client()
        await self._run(lambda: client.video.call(self.call_type, call_id).end())

    def _require_client(self) -> Stream:
        if self._client is None:
            raise StreamGatewayError("Stream API credentials are not configured", code=MISSING_CREDENTIALS)
        return self._client

    async def _run(self, func: Callable[[], T]) -> T:
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, func)
        except StreamApiException as exc:
            raise _translate_api_error(exc) from exc
        except StreamException as exc:
            message = str(exc.args[0]) if exc.args else exc.__class__.__name__
            raise StreamGatewayError(message, code=TRANSPORT_ERROR) from exc


def _translate_api_error(exc: StreamApiException) -> StreamGatewayError:
    api_error: Any = getattr(exc, "api_error", None)
    status_code = getattr(exc, "status_code", None)
    code = getattr(api_error, "code", None)
    message = getattr(api_error, "message", None) or str(exc) or "Stream API error"
    return StreamGatewayError(message, code=code, status_code=status_code)


def build_gateway(settings: Settings) -> StreamGateway:
    """Create the gateway once at startup."""

    if not settings.has_stream_credentials:
        logger.warning("STREAM_API_KEY/STREAM_API_SECRET missing; token and call endpoints will fail")
        return StreamGateway(None, call_type=settings.stream_call_type)

    client = Stream(
        api_key=settings.stream_api_key,
        api_secret=settings.stream_api_secret,
        timeout=settings.stream_timeout_seconds,
    )
    return StreamGateway(client, call_type=settings.stream_call_type)
