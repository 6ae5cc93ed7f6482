"""
Exception types shared by the storage and service layers.

Read paths never raise for missing data; absence is reported as ``None``
or an empty list.  The exceptions below describe genuine failures of a
backing store and are caught at the boundary that knows how to degrade
(storage reads, the refresh controller) or surfaced to the caller when a
failure cannot be hidden (writes).
"""


class DirectoryError(Exception):
    """Base class for all directory errors."""


class BackendUnavailable(DirectoryError):
    """The backing store cannot be reached or is not configured.

    Raised for missing or invalid credentials, network failures, API
    errors and load timeouts.  Storage reads catch it and return empty
    results; ``create`` and ``reload`` let it propagate.
    """


class RecordParseError(DirectoryError):
    """A single row from a loosely typed backend could not be parsed.

    The store skips the offending row and keeps reading the rest.
    """

    def __init__(self, message: str, row_number: int | None = None) -> None:
        super().__init__(message)
        self.row_number = row_number


class RefreshThrottled(DirectoryError):
    """A refresh was requested before the minimum interval elapsed.

    The refresh controller records this as an outcome rather than
    raising it, so callers normally never see this exception.
    """
