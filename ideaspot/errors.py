"""
Error taxonomy for the expansion function.

Each error carries the callable status code and the HTTP status it maps to,
so the entrypoint can turn any of them into a response without knowing
where it was raised.
"""

from __future__ import annotations


class ExpansionError(Exception):
    """Base class for failures surfaced to the caller."""

    status = "INTERNAL"
    http_status = 500

    def __init__(self, message: str, *, status: str | None = None, http_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        if http_status is not None:
            self.http_status = http_status


class InvalidArgument(ExpansionError):
    """The caller supplied an empty, oversized or mistyped transcript."""

    status = "INVALID_ARGUMENT"
    http_status = 400


class Unauthenticated(ExpansionError):
    """The request carried no valid Firebase ID token."""

    status = "UNAUTHENTICATED"
    http_status = 401


class UpstreamFailure(ExpansionError):
    """The model API call itself failed (network, auth, quota)."""


class MalformedResponse(ExpansionError):
    """The model replied, but not with a parseable JSON object."""
