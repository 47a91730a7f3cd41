"""
Movies API Integration - Custom Exceptions

SRP: Only error definitions, no logic.
Raised by client.py, classified by the connectivity monitor and the movie
service, and mapped to HTTP errors in router.py.
"""
from __future__ import annotations

from typing import Optional


class MoviesApiError(Exception):
    """Base error for the hosted movies service."""
    pass


class UpstreamUnavailable(MoviesApiError):
    """Movies service host cannot be reached (connection refused, DNS, reset)."""
    pass


class UpstreamTimeout(MoviesApiError):
    """Timeout while talking to the movies service."""
    pass


class BadUpstreamResponse(MoviesApiError):
    """Unexpected response from the movies service (malformed JSON, etc.)."""
    pass


class RemoteApplicationError(MoviesApiError):
    """The movies service answered with a non-success HTTP status."""

    def __init__(self, message: str, *, status_code: int, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = int(status_code)
        self.detail = detail or message

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


def is_connectivity_failure(exc: BaseException) -> bool:
    """True for failures that mean "service unreachable" rather than "request rejected"."""
    if isinstance(exc, (UpstreamUnavailable, UpstreamTimeout, BadUpstreamResponse)):
        return True
    if isinstance(exc, RemoteApplicationError):
        return exc.is_server_error
    return False


def is_write_fallback_failure(exc: BaseException) -> bool:
    """
    True when a failed write should be kept locally and queued for replay.

    A malformed reply is excluded: the service may already have stored the
    record, and replaying it would create a duplicate.
    """
    if isinstance(exc, (UpstreamUnavailable, UpstreamTimeout)):
        return True
    if isinstance(exc, RemoteApplicationError):
        return exc.is_server_error
    return False
