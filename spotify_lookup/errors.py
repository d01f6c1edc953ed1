"""Exceptions raised by spotify_lookup.

Every public operation can fail with one of these. Nothing is retried or
wrapped on the way up, so callers see the original failure.
"""

from typing import Any, Optional


INVALID_REFERENCE_MESSAGE = "Not a Spotify url or id"


class SpotifyLookupError(Exception):
    """Base exception for all spotify_lookup errors."""


class InvalidReference(SpotifyLookupError, ValueError):
    """Raised when a url or id cannot be resolved for the requested entity kind."""

    def __init__(self, message: str = INVALID_REFERENCE_MESSAGE):
        super().__init__(message)


class ProtocolError(SpotifyLookupError):
    """Raised when Spotify answers with something other than JSON."""


class SchemaError(ProtocolError):
    """Raised when a JSON response does not have the expected shape."""


class RemoteError(SpotifyLookupError):
    """Raised when Spotify answers with a JSON error body.

    The parsed body is kept verbatim in ``detail``.
    """

    def __init__(self, detail: Any, *, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(self._message_from(detail, status_code))

    @staticmethod
    def _message_from(detail: Any, status_code: Optional[int]) -> str:
        message = None
        if isinstance(detail, dict):
            error = detail.get("error")
            if isinstance(error, dict):
                message = error.get("message")
            elif isinstance(error, str):
                message = detail.get("error_description") or error

        prefix = f"Spotify API error {status_code}" if status_code is not None else "Spotify API error"
        return f"{prefix}: {message}" if message else f"{prefix}: {detail}"


class ConfigError(SpotifyLookupError, ValueError):
    """Raised when client options fail validation."""
