"""Tests for call reconciliation and end-of-call handling."""
from __future__ import annotations

import pytest

from callbridge.services import calls
from callbridge.services.errors import (
    IdentityUpsertFailed,
    InvalidReference,
    SessionCreateFailed,
    ValidationError,
)
from callbridge.services.stream import TRANSPORT_ERROR, StreamGatewayError

DOCTOR = calls.ParticipantIdentity(id="doc-1", display_name="Dr. Ada")
PATIENT = calls.ParticipantIdentity(id="pat-1")


@pytest.mark.asyncio
async def test_ensure_session_creates_call_with_both_members(gateway) -> None:
    session = await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)

    assert session.session_id == "bk-100"
    assert session.created is True
    assert session.created_by == DOCTOR
    assert gateway.upsert_batches == [
        [
            {"id": "doc-1", "name": "Dr. Ada"},
            {"id": "pat-1", "name": "pat-1"},
        ]
    ]
    stored = gateway.calls["bk-100"]
    assert stored["created_by_id"] == "doc-1"
    assert stored["members"] == ["doc-1", "pat-1"]
    assert stored["custom"] == {"booking_id": "bk-100", "professional_id": "doc-1", "patient_id": "pat-1"}


@pytest.mark.asyncio
async def test_ensure_session_only_sends_explicit_roles(gateway) -> None:
    moderator = calls.ParticipantIdentity(id="doc-2", role=calls.ParticipantRole.ELEVATED)

    await calls.ensure_session(gateway, "bk-200", moderator, PATIENT)

    assert gateway.users["doc-2"] == {"id": "doc-2", "name": "doc-2", "role": "admin"}
    assert "role" not in gateway.users["pat-1"]


@pytest.mark.asyncio
async def test_ensure_session_is_idempotent(gateway) -> None:
    first = await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)
    second = await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)

    assert first.session_id == second.session_id == "bk-100"
    assert first.created is True
    assert second.created is False
    assert len(gateway.calls) == 1


@pytest.mark.asyncio
async def test_ensure_session_rejects_same_participant(gateway) -> None:
    with pytest.raises(ValidationError):
        await calls.ensure_session(gateway, "bk-100", DOCTOR, calls.ParticipantIdentity(id="doc-1"))

    assert gateway.upsert_batches == []


@pytest.mark.asyncio
async def test_ensure_session_lists_all_missing_fields(gateway) -> None:
    with pytest.raises(ValidationError) as exc:
        await calls.ensure_session(gateway, "", DOCTOR, calls.ParticipantIdentity(id=""))

    assert exc.value.missing == ["bookingId", "patientId"]
    assert gateway.upsert_batches == []
    assert gateway.create_requests == []


@pytest.mark.asyncio
async def test_ensure_session_rejects_invalid_booking_before_upstream(gateway) -> None:
    with pytest.raises(InvalidReference):
        await calls.ensure_session(gateway, "bk 100", DOCTOR, PATIENT)

    assert gateway.upsert_batches == []


@pytest.mark.asyncio
async def test_transport_failures_map_to_service_errors(gateway) -> None:
    gateway.fail_with["upsert_users"] = StreamGatewayError("Name or service not known", code=TRANSPORT_ERROR)

    with pytest.raises(IdentityUpsertFailed) as exc:
        await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)

    assert exc.value.code == TRANSPORT_ERROR

    gateway.fail_with["end_call"] = StreamGatewayError("Name or service not known", code=TRANSPORT_ERROR)
    ack = await calls.notify_ended(gateway, "session-abc", hard_end=True)

    assert ack.forwarded is False


@pytest.mark.asyncio
async def test_upsert_failure_stops_call_creation(gateway) -> None:
    gateway.fail_with["upsert_users"] = StreamGatewayError("bad user", code=4, status_code=400)

    with pytest.raises(IdentityUpsertFailed) as exc:
        await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)

    assert exc.value.code == 4
    assert gateway.create_requests == []


@pytest.mark.asyncio
async def test_already_exists_is_treated_as_success(gateway) -> None:
    gateway.fail_with["get_or_create_call"] = StreamGatewayError("call already exists", code=4, status_code=409)

    session = await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)

    assert session.session_id == "bk-100"
    assert session.created is False


@pytest.mark.asyncio
async def test_create_failure_preserves_upstream_code(gateway) -> None:
    gateway.fail_with["get_or_create_call"] = StreamGatewayError("rate limited", code=9, status_code=429)

    with pytest.raises(SessionCreateFailed) as exc:
        await calls.ensure_session(gateway, "bk-100", DOCTOR, PATIENT)

    assert exc.value.code == 9
    assert exc.value.diagnostic == "rate limited"
    assert exc.value.message == "Failed to create call"


@pytest.mark.asyncio
async def test_notify_ended_requires_call_id(gateway) -> None:
    with pytest.raises(InvalidReference) as exc:
        await calls.notify_ended(gateway, "")

    assert exc.value.message == "callId is required"


@pytest.mark.asyncio
async def test_notify_ended_soft_mode_does_not_contact_stream(gateway) -> None:
    ack = await calls.notify_ended(gateway, "session-abc")

    assert ack.session_id == "session-abc"
    assert ack.forwarded is False
    assert gateway.ended == []


@pytest.mark.asyncio
async def test_notify_ended_hard_mode_forwards_end(gateway) -> None:
    ack = await calls.notify_ended(gateway, "session-abc", hard_end=True)

    assert ack.forwarded is True
    assert gateway.ended == ["session-abc"]


@pytest.mark.asyncio
async def test_notify_ended_hard_mode_still_acknowledges_on_failure(gateway) -> None:
    gateway.fail_with["end_call"] = StreamGatewayError("call not found", code=16, status_code=404)

    ack = await calls.notify_ended(gateway, "session-abc", hard_end=True)

    assert ack.session_id == "session-abc"
    assert ack.forwarded is False
