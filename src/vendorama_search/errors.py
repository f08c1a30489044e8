"""Error taxonomy for search fetches and session state."""

from __future__ import annotations


class SearchError(Exception):
    """Base error for the search core."""


class FetchError(SearchError):
    """Base error for a failed page fetch."""


class NetworkError(FetchError):
    """Raised when the search API cannot be reached."""


class HttpStatusError(FetchError):
    """Raised when the search API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DecodeError(FetchError):
    """Raised when a response body is not the expected JSON shape."""


class InvalidStateError(SearchError):
    """Raised when a request cannot be built from the current session state."""
