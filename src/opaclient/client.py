"""OPA HTTP permission client with typed errors."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from opaclient.errors import (
    DecodeError,
    OPAError,
    OPATransportError,
    RetryTimeoutError,
    StatusCodeError,
)
from opaclient.logging import get_logger
from opaclient.retry import retry_until_successful
from opaclient.transport import send_http_request
from opaclient.types import (
    Action,
    PermissionFilterInput,
    PermissionFilterRequest,
    PermissionFilterResponse,
    PermissionOptions,
    PermissionQueryInput,
    PermissionQueryRequest,
    PermissionQueryResponse,
)

__all__ = ["PermissionClient", "HTTPClient"]

_ResponseT = TypeVar("_ResponseT", bound=BaseModel)


class PermissionClient(Protocol):
    """Minimal contract for permission lookups."""

    async def query_permissions(
        self,
        resource: str,
        action: Action,
        options: PermissionOptions,
    ) -> bool:
        """Return True if ``options.member_ids`` may perform ``action`` on ``resource``."""
        ...

    async def query_permissions_multi_resources(
        self,
        resources: Sequence[str],
        action: Action,
        options: PermissionOptions,
    ) -> list[bool]:
        """Return one decision per resource, in input order."""
        ...

    async def close(self) -> None:
        """Release any connections held by the client."""
        ...

    async def __aenter__(self) -> PermissionClient: ...

    async def __aexit__(self, *exc_info: object) -> None: ...


def _is_transient(error: OPAError) -> bool:
    if isinstance(error, OPATransportError):
        return True
    return isinstance(error, StatusCodeError) and error.status_code >= 500


class HTTPClient:
    """HTTP client for Open Policy Agent permission queries.

    Holds read-only configuration and one shared ``httpx.AsyncClient``,
    so a single instance can serve concurrent callers.
    """

    def __init__(
        self,
        address: str = "http://localhost:8181",
        permission_query_path: str = "/v1/data/authz/allow",
        permission_filter_path: str = "/v1/data/authz/filter_allowed",
        request_timeout: float = 10.0,
        *,
        verbose: bool = False,
        override_header_value: str = "",
        retry_duration: float = 0.0,
        retry_interval: float = 1.0,
        headers: Mapping[str, str] | None = None,
        cookies: Mapping[str, str] | None = None,
        logger: structlog.BoundLogger | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if request_timeout <= 0:
            msg = f"request_timeout must be positive, got {request_timeout}"
            raise ValueError(msg)
        if retry_duration < 0:
            msg = f"retry_duration must not be negative, got {retry_duration}"
            raise ValueError(msg)
        if retry_interval <= 0:
            msg = f"retry_interval must be positive, got {retry_interval}"
            raise ValueError(msg)

        self._address = address.rstrip("/")
        self._permission_query_path = permission_query_path
        self._permission_filter_path = permission_filter_path
        self._request_timeout = request_timeout
        self._verbose = verbose
        self._override_header_value = override_header_value
        self._retry_duration = retry_duration
        self._retry_interval = retry_interval
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._cookies = dict(cookies or {})
        self._logger = get_logger(logger)
        self._owns_http_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=request_timeout)

    async def query_permissions(
        self,
        resource: str,
        action: Action,
        options: PermissionOptions,
    ) -> bool:
        """Ask OPA whether the members may perform ``action`` on ``resource``.

        Raises OPAError if the decision could not be obtained.
        """
        if self._is_override(options):
            return True

        request = PermissionQueryRequest(
            input=PermissionQueryInput(
                resource=resource,
                action=str(action),
                member_ids=list(options.member_ids),
            )
        )
        if self._verbose:
            self._logger.info(
                "opa.query.request",
                resource=resource,
                action=str(action),
                member_ids=list(options.member_ids),
            )

        response = await self._post(
            self._permission_query_path, request, PermissionQueryResponse
        )

        if self._verbose:
            self._logger.info(
                "opa.query.decision",
                resource=resource,
                action=str(action),
                allowed=response.result,
            )
        return response.result

    async def query_permissions_multi_resources(
        self,
        resources: Sequence[str],
        action: Action,
        options: PermissionOptions,
    ) -> list[bool]:
        """Ask OPA which of ``resources`` the members may act on.

        Returns one bool per input position. Duplicate resources share a
        decision since OPA answers with the allowed subset by value.

        Raises OPAError if the decision could not be obtained; no partial
        results are returned.
        """
        if self._is_override(options):
            return [True] * len(resources)
        if not resources:
            return []

        request = PermissionFilterRequest(
            input=PermissionFilterInput(
                resources=list(resources),
                action=str(action),
                member_ids=list(options.member_ids),
            )
        )
        if self._verbose:
            self._logger.info(
                "opa.filter.request",
                resources=list(resources),
                action=str(action),
                member_ids=list(options.member_ids),
            )

        response = await self._post(
            self._permission_filter_path, request, PermissionFilterResponse
        )

        allowed = set(response.result)
        results = [resource in allowed for resource in resources]

        if self._verbose:
            self._logger.info(
                "opa.filter.decision",
                action=str(action),
                allowed_resources=response.result,
                results=results,
            )
        return results

    async def close(self) -> None:
        if self._owns_http_client:
            await self._client.aclose()

    async def __aenter__(self) -> HTTPClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _is_override(self, options: PermissionOptions) -> bool:
        return bool(
            options.override_header_value
            and options.override_header_value == self._override_header_value
        )

    async def _post(
        self,
        path: str,
        request: BaseModel,
        response_model: type[_ResponseT],
    ) -> _ResponseT:
        url = f"{self._address}{path}"
        body = request.model_dump_json(by_alias=True).encode("utf-8")

        if self._retry_duration > 0:
            response_body = await self._send_with_retry(url, body)
        else:
            response_body = await self._send(url, body)

        try:
            return response_model.model_validate_json(response_body, strict=True)
        except ValidationError as e:
            raise DecodeError(f"Failed to decode OPA response from {path}: {e}") from e

    async def _send(self, url: str, body: bytes) -> bytes:
        response_body, _ = await send_http_request(
            self._client,
            "POST",
            url,
            body=body,
            headers=self._headers,
            cookies=self._cookies,
            expected_status_code=200,
            timeout=self._request_timeout,
        )
        return response_body

    async def _send_with_retry(self, url: str, body: bytes) -> bytes:
        response_body = b""
        last_error: OPAError | None = None

        async def probe() -> bool:
            nonlocal response_body, last_error
            try:
                response_body = await self._send(url, body)
            except OPAError as e:
                if not _is_transient(e):
                    raise
                last_error = e
                self._logger.warning("opa.request.retry", url=url, error=str(e))
                return False
            return True

        try:
            await retry_until_successful(self._retry_duration, self._retry_interval, probe)
        except RetryTimeoutError as e:
            raise RetryTimeoutError(
                f"OPA request to {url} did not succeed within {self._retry_duration}s",
                last_error=last_error,
            ) from last_error or e
        return response_body
