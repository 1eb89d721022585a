"""Exception hierarchy for feed synchronisation.

Domain errors derive from :class:`FeedSyncError`. The engines catch any
exception at the row boundary and record its type on the row result. The CLI
catches :class:`FeedSyncError` and exits with status 1.
"""

from typing import Any


class FeedSyncError(Exception):
    """Base class for all feed sync errors."""


class ConfigurationError(FeedSyncError):
    """Raised when run configuration is missing or invalid."""


class FeedValidationError(FeedSyncError):
    """Raised when a feed row is missing required fields or has invalid values."""

    def __init__(self, message: str, missing_fields: list[str] | None = None):
        super().__init__(message)
        self.missing_fields = missing_fields or []


class NotFoundError(FeedSyncError):
    """Raised when an asset, file or folder cannot be located."""


class UpstreamError(FeedSyncError):
    """Raised for non-success HTTP responses or embedded API error objects."""

    def __init__(self, message: str, status_code: int | None = None, response_body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class AggregateError(FeedSyncError):
    """Raised when one or more per-line-item operations failed for a row.

    Attributes:
        failures: (line_item_id, error) pairs, in processing order
    """

    def __init__(self, message: str, failures: list[tuple[str, Exception]]):
        super().__init__(message)
        self.failures = failures

    @property
    def failed_ids(self) -> list[str]:
        return [line_item_id for line_item_id, _ in self.failures]
