"""Error types raised across liftsheet."""


class LiftsheetError(Exception):
    """Base class for all liftsheet errors."""


class AuthError(LiftsheetError):
    """No usable access token. Surfaced for re-authentication, never retried."""


class RemoteError(LiftsheetError):
    """Transport failure or non-success response from the remote sheet."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OfflineUnavailable(LiftsheetError):
    """Offline and nothing cached for the requested date."""

    def __init__(self, date_key: str):
        super().__init__(f"Offline and no cached data available for {date_key!r}")
        self.date_key = date_key


class CodecError(LiftsheetError, ValueError):
    """A domain value that cannot be represented in the fixed-column layout."""
