"""Booking reference to call id mapping.

The booking reference is used verbatim as the Stream call id so every
consumer can derive the same id without a handshake. References that do not
fit Stream's call-id grammar are rejected rather than rewritten.
"""
from __future__ import annotations

import re

from .errors import InvalidReference

MAX_CALL_ID_LENGTH = 64
_CALL_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def map_to_session_id(booking: str | None) -> str:
    """Return the call id for ``booking``."""

    if not booking or not booking.strip():
        raise InvalidReference("bookingId is required")
    if len(booking) > MAX_CALL_ID_LENGTH:
        raise InvalidReference(f"bookingId must be at most {MAX_CALL_ID_LENGTH} characters")
    if not _CALL_ID_PATTERN.fullmatch(booking):
        raise InvalidReference("bookingId may only contain letters, digits, '-' and '_'")
    return booking
