"""Single-shot HTTP request helper."""

from __future__ import annotations

import re
from collections.abc import Mapping

import httpx

from opaclient.errors import (
    BodyReadError,
    OPATimeoutError,
    OPATransportError,
    RequestBuildError,
    StatusCodeError,
)

__all__ = ["send_http_request"]


# RFC 6265 token and cookie-octet sets
_COOKIE_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_COOKIE_VALUE = re.compile(r"[\x21\x23-\x2B\x2D-\x3A\x3C-\x5B\x5D-\x7E]*")


def _cookie_header(cookies: Mapping[str, str]) -> str:
    for name, value in cookies.items():
        if not _COOKIE_NAME.fullmatch(name):
            raise RequestBuildError(f"Invalid cookie name: {name!r}")
        if not _COOKIE_VALUE.fullmatch(value):
            raise RequestBuildError(f"Invalid value for cookie {name!r}")
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


async def send_http_request(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    body: bytes = b"",
    headers: Mapping[str, str] | None = None,
    cookies: Mapping[str, str] | None = None,
    expected_status_code: int = 0,
    timeout: float | None = None,
) -> tuple[bytes, httpx.Response]:
    """Perform exactly one HTTP request and return ``(body, response)``.

    Args:
        client: Shared async client issuing the request.
        method: HTTP method, e.g. ``"POST"``.
        url: Absolute target URL.
        body: Raw request body.
        headers: Headers set on the request.
        cookies: Cookies sent in a single ``Cookie`` header.
        expected_status_code: Required status code; 0 skips the check.
        timeout: Per-request timeout in seconds; ``None`` keeps the client default.

    Raises:
        RequestBuildError: the request could not be built, or a cookie
            name or value is not valid in a ``Cookie`` header.
        OPATransportError: the request could not be completed.
        BodyReadError: the response body could not be read.
        StatusCodeError: status differs from ``expected_status_code``.
    """
    request_headers = dict(headers or {})
    if cookies:
        request_headers["Cookie"] = _cookie_header(cookies)

    try:
        request = client.build_request(
            method,
            url,
            content=body,
            headers=request_headers,
            timeout=httpx.USE_CLIENT_DEFAULT if timeout is None else timeout,
        )
    except (httpx.InvalidURL, ValueError, TypeError) as e:
        raise RequestBuildError(f"Failed to create http request: {e}") from e

    try:
        response = await client.send(request, stream=True)
    except httpx.TimeoutException as e:
        raise OPATimeoutError(f"HTTP request timed out: {e}") from e
    except httpx.HTTPError as e:
        raise OPATransportError(f"Failed to send HTTP request: {e}") from e

    try:
        response_body = await response.aread()
    except httpx.HTTPError as e:
        raise BodyReadError(f"Failed to read response body: {e}") from e
    finally:
        await response.aclose()

    if expected_status_code != 0 and response.status_code != expected_status_code:
        raise StatusCodeError(
            response.status_code,
            expected_status_code,
            response_body,
            response,
        )

    return response_body, response
