"""Shared fixtures: an in-memory stand-in for the Stream gateway."""
from __future__ import annotations

from collections.abc import Mapping, Sequence

import pytest

from callbridge.services.stream import StreamGatewayError


class FakeGateway:
    """Records every Stream request and mimics get-or-create semantics."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, str]] = {}
        self.calls: dict[str, dict] = {}
        self.upsert_batches: list[list[dict[str, str]]] = []
        self.create_requests: list[str] = []
        self.ended: list[str] = []
        self.token_requests: list[tuple[str, int]] = []
        self.fail_with: dict[str, StreamGatewayError] = {}

    async def create_token(self, user_id: str, *, expiration: int) -> str:
        self._maybe_fail("create_token")
        self.token_requests.append((user_id, expiration))
        return f"token-for-{user_id}"

    async def upsert_users(self, users: Sequence[Mapping[str, str]]) -> None:
        self._maybe_fail("upsert_users")
        batch = [dict(user) for user in users]
        self.upsert_batches.append(batch)
        for user in batch:
            self.users[user["id"]] = user

    async def get_or_create_call(
        self,
        call_id: str,
        *,
        created_by_id: str,
        member_ids: Sequence[str],
        custom: Mapping[str, str] | None = None,
    ) -> bool:
        self._maybe_fail("get_or_create_call")
        self.create_requests.append(call_id)
        if call_id in self.calls:
            return False
        self.calls[call_id] = {
            "created_by_id": created_by_id,
            "members": list(member_ids),
            "custom": dict(custom or {}),
        }
        return True

    async def end_call(self, call_id: str) -> None:
        self._maybe_fail("end_call")
        self.ended.append(call_id)

    def _maybe_fail(self, operation: str) -> None:
        error = self.fail_with.get(operation)
        if error is not None:
            raise error


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()
