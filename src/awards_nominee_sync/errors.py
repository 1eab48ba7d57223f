"""Exception hierarchy.

Only faults are raised. A nominee with no metadata match or one that fails
category rules is reported through return values instead.
"""


class NomineeSyncError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(NomineeSyncError):
    """Missing credential, malformed setting or unknown category text."""


class UpstreamError(NomineeSyncError):
    """An external service failed or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientUpstreamError(UpstreamError):
    """Timeout, transport failure, 5xx or rate limit. Safe to retry."""


class MalformedPayloadError(UpstreamError):
    """Upstream response is missing keys the pipeline depends on."""
