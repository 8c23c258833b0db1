"""Error taxonomy shared by the token and call services."""
from __future__ import annotations

from collections.abc import Sequence


class CallBridgeError(Exception):
    """Base class for errors rendered to API clients."""

    status_code = 500

    def __init__(self, message: str, *, code: str | int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(CallBridgeError):
    """Client supplied a malformed request. Safe to expose verbatim."""

    status_code = 400

    def __init__(self, message: str, *, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class InvalidReference(ValidationError):
    """Booking or call reference is empty or outside the call-id grammar."""


class MissingIdentifier(ValidationError):
    """A required user identifier was not supplied."""


class UpstreamUnavailable(CallBridgeError):
    """Stream rejected or could not serve a request.

    ``public_message`` is what clients see; ``diagnostic`` keeps the upstream
    message for operators and development builds.
    """

    public_message = "Upstream video service error"

    def __init__(self, diagnostic: str, *, code: str | int | None = None) -> None:
        super().__init__(self.public_message, code=code)
        self.diagnostic = diagnostic


class SigningUnavailable(UpstreamUnavailable):
    public_message = "Failed to generate token"


class IdentityUpsertFailed(UpstreamUnavailable):
    public_message = "Failed to register call participants"


class SessionCreateFailed(UpstreamUnavailable):
    public_message = "Failed to create call"
