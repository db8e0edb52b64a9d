"""Typed errors raised by the OPA permission client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

__all__ = [
    "OPAError",
    "RequestBuildError",
    "OPATransportError",
    "OPATimeoutError",
    "BodyReadError",
    "StatusCodeError",
    "DecodeError",
    "RetryTimeoutError",
]


class OPAError(Exception):
    """Raised when OPA is unreachable or returns an unexpected response.

    A caught ``OPAError`` means the decision is unknown, never deny.
    """


class RequestBuildError(OPAError):
    """The outgoing request could not be constructed (bad URL or method)."""


class OPATransportError(OPAError):
    """The request could not be completed (DNS, refused connection, ...)."""


class OPATimeoutError(OPATransportError):
    """The request exceeded the configured timeout."""


class BodyReadError(OPAError):
    """The response body could not be fully read."""


class StatusCodeError(OPAError):
    """OPA answered with an unexpected status code.

    The body and response are kept for diagnostics.
    """

    def __init__(
        self,
        status_code: int,
        expected_status_code: int,
        body: bytes,
        response: httpx.Response,
    ) -> None:
        super().__init__(
            f"Got unexpected response status code: {status_code}. "
            f"Expected: {expected_status_code}"
        )
        self.status_code = status_code
        self.expected_status_code = expected_status_code
        self.body = body
        self.response = response


class DecodeError(OPAError):
    """The response body does not match the expected JSON shape."""


class RetryTimeoutError(OPAError):
    """A retried operation did not succeed before its deadline."""

    def __init__(
        self,
        message: str = "Retry timeout exceeded",
        last_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.last_error = last_error
