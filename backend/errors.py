"""BoroughWatch Backend: Error kinds

Every error carries the HTTP status the API layer should answer with.
"""

from typing import Optional


class BoroughWatchError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFound(BoroughWatchError):
    status_code = 404


class GeometryMissing(BoroughWatchError):
    """Borough is known but has no usable poly query strings."""
    status_code = 422


class TopologyUnavailable(BoroughWatchError):
    """No borough geometry was loaded at start-up."""
    status_code = 503


class StoreUnavailable(BoroughWatchError):
    """Persistent store could not be read or written. Never surfaced to callers."""
    status_code = 503


class UpstreamError(BoroughWatchError):
    """data.police.uk returned a non-2xx response or could not be reached."""

    def __init__(self, status: int, message: str, body: str = ""):
        super().__init__(message, status_code=status)
        self.status = status
        self.body = body
