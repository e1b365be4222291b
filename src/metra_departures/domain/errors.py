"""Error taxonomy for departure sources.

Every failure that crosses a component boundary is one of these exceptions.
Each carries an ``ErrorKind`` plus structured payload; turning it into text
is left to the presentation layer.
"""

from enum import StrEnum

from metra_departures.domain.models.error_details import ErrorDetails


class ErrorKind(StrEnum):
    """Kinds of failure reported to the presentation layer."""

    NO_CACHE = "no_cache"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACTION_FAILED = "extraction_failed"
    MISSING_COLUMNS = "missing_columns"
    UNREADABLE_TABLE = "unreadable_table"
    HTTP_ERROR = "http_error"
    DECODING_ERROR = "decoding_error"
    TRANSPORT_ERROR = "transport_error"
    NO_TOKEN = "no_token"
    NO_SLOTS = "no_slots"


class DepartureSourceError(Exception):
    """Base class for recoverable failures of a departure source."""

    kind: ErrorKind = ErrorKind.TRANSPORT_ERROR

    def __init__(self, reason: str, status_code: int | None = None, table: str | None = None):
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
        self.table = table

    def to_details(self) -> ErrorDetails:
        """Return the structured form of this error."""
        return ErrorDetails(
            kind=self.kind.value,
            status_code=self.status_code,
            table=self.table,
            reason=self.reason,
        )


class NoCacheError(DepartureSourceError):
    """No usable schedule snapshot on disk and the network is unavailable."""

    kind = ErrorKind.NO_CACHE

    def __init__(self, reason: str = "No cached schedule and network unavailable") -> None:
        super().__init__(reason)


class DownloadFailedError(DepartureSourceError):
    """The schedule archive download returned a non-success status."""

    kind = ErrorKind.DOWNLOAD_FAILED

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Schedule download failed (HTTP {status_code})", status_code=status_code)


class ExtractionFailedError(DepartureSourceError):
    """The schedule archive was corrupt or incomplete."""

    kind = ErrorKind.EXTRACTION_FAILED

    def __init__(self, reason: str = "Failed to extract schedule files") -> None:
        super().__init__(reason)


class MissingColumnsError(DepartureSourceError):
    """A schedule table lacks one of its required header columns."""

    kind = ErrorKind.MISSING_COLUMNS

    def __init__(self, table: str) -> None:
        super().__init__(f"Unexpected format in {table}", table=table)


class UnreadableTableError(DepartureSourceError):
    """A schedule table could not be read or decoded."""

    kind = ErrorKind.UNREADABLE_TABLE

    def __init__(self, table: str, reason: str | None = None) -> None:
        super().__init__(reason or f"Could not read {table}", table=table)


class HttpError(DepartureSourceError):
    """The realtime feed answered with a non-2xx status."""

    kind = ErrorKind.HTTP_ERROR

    def __init__(self, status_code: int) -> None:
        super().__init__(f"API returned HTTP {status_code}", status_code=status_code)


class DecodingError(DepartureSourceError):
    """The realtime feed body could not be decoded."""

    kind = ErrorKind.DECODING_ERROR


class TransportError(DepartureSourceError):
    """The request never produced a response (connection error, timeout)."""

    kind = ErrorKind.TRANSPORT_ERROR


class NoTokenError(DepartureSourceError):
    """No API token is configured. Expected steady state, never shown to users."""

    kind = ErrorKind.NO_TOKEN

    def __init__(self) -> None:
        super().__init__("No API token configured")
