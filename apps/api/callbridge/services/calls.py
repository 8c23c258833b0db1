"""Call session reconciliation and end-of-call handling."""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from .errors import IdentityUpsertFailed, InvalidReference, SessionCreateFailed, ValidationError
from .identity import map_to_session_id
from .stream import StreamGateway, StreamGatewayError

logger = logging.getLogger(__name__)

CONFLICT_STATUS = 409


class ParticipantRole(str, enum.Enum):
    STANDARD = "user"
    ELEVATED = "admin"


@dataclass(frozen=True, slots=True)
class ParticipantIdentity:
    id: str
    display_name: str = ""
    role: ParticipantRole | None = None

    @property
    def name(self) -> str:
        return self.display_name or self.id

    def as_user(self) -> dict[str, str]:
        """Stream user payload. The role is only sent when set so existing roles survive."""

        user = {"id": self.id, "name": self.name}
        if self.role is not None:
            user["role"] = self.role.value
        return user


@dataclass(slots=True)
class CallSession:
    session_id: str
    participants: tuple[ParticipantIdentity, ...]
    created_by: ParticipantIdentity
    metadata: dict[str, str] = field(default_factory=dict)
    created: bool = False


@dataclass(slots=True)
class Acknowledgement:
    session_id: str
    forwarded: bool = False


async def ensure_session(
    gateway: StreamGateway,
    booking: str | None,
    participant_a: ParticipantIdentity,
    participant_b: ParticipantIdentity,
) -> CallSession:
    """Make sure a call exists for ``booking`` with both participants attached.

    ``participant_a`` owns the call. Both are plain members so each side gets
    Stream's default permissions. Re-running with the same arguments is a
    no-op that returns the same session id.
    """

    missing = [
        name
        for name, value in (("bookingId", booking), ("professionalId", participant_a.id), ("patientId", participant_b.id))
        if not value or not value.strip()
    ]
    if missing:
        raise ValidationError("Missing required fields", missing=missing)
    if participant_a.id == participant_b.id:
        raise ValidationError("professionalId and patientId must be different")

    session_id = map_to_session_id(booking)
    participants = (participant_a, participant_b)
    metadata = {"booking_id": booking, "professional_id": participant_a.id, "patient_id": participant_b.id}

    try:
        await gateway.upsert_users([person.as_user() for person in participants])
    except StreamGatewayError as exc:
        logger.error("Upserting participants for %s failed (code=%s): %s", session_id, exc.code, exc.message)
        raise IdentityUpsertFailed(exc.message, code=exc.code) from exc

    try:
        created = await gateway.get_or_create_call(
            session_id,
            created_by_id=participant_a.id,
            member_ids=[person.id for person in participants],
            custom=metadata,
        )
    except StreamGatewayError as exc:
        if not _is_conflict(exc):
            logger.error("Creating call %s failed (code=%s): %s", session_id, exc.code, exc.message)
            raise SessionCreateFailed(exc.message, code=exc.code) from exc
        logger.info("Call %s already exists; reusing it", session_id)
        created = False

    logger.info("Call %s ready (created=%s)", session_id, created)
    return CallSession(
        session_id=session_id,
        participants=participants,
        created_by=participant_a,
        metadata=metadata,
        created=created,
    )


async def notify_ended(gateway: StreamGateway, session_id: str | None, *, hard_end: bool = False) -> Acknowledgement:
    """Acknowledge that a caller wants ``session_id`` ended.

    With ``hard_end`` the call is also ended at Stream. Failures there are
    logged and reported through ``forwarded``; the intent is still acknowledged.
    """

    if not session_id or not session_id.strip():
        raise InvalidReference("callId is required")

    if not hard_end:
        logger.info("End requested for call %s", session_id)
        return Acknowledgement(session_id=session_id)

    try:
        await gateway.end_call(session_id)
    except StreamGatewayError as exc:
        logger.warning("Ending call %s at Stream failed (code=%s): %s", session_id, exc.code, exc.message)
        return Acknowledgement(session_id=session_id, forwarded=False)

    logger.info("Call %s ended at Stream", session_id)
    return Acknowledgement(session_id=session_id, forwarded=True)


def _is_conflict(exc: StreamGatewayError) -> bool:
    return exc.status_code == CONFLICT_STATUS or "already exists" in exc.message.lower()
