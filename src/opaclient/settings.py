"""Client settings via environment variables, and the client factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from opaclient.client import HTTPClient, PermissionClient
from opaclient.mock import MockClient
from opaclient.nop import NopClient

if TYPE_CHECKING:
    import structlog

__all__ = ["ClientKind", "OPASettings", "create_client"]

ClientKind = Literal["http", "nop", "mock"]


class OPASettings(BaseSettings):
    """OPA client configuration, read from ``OPA_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="OPA_", frozen=True)

    # Variant selection
    client_kind: ClientKind = "nop"

    # Endpoint
    address: str = "http://localhost:8181"
    permission_query_path: str = "/v1/data/authz/allow"
    permission_filter_path: str = "/v1/data/authz/filter_allowed"
    request_timeout: float = Field(10.0, gt=0)  # seconds

    # Observability
    verbose: bool = False

    # Trusted-caller bypass; empty disables it
    override_header_value: str = ""

    # Retry around each POST; 0 means single shot
    retry_duration: float = Field(0.0, ge=0)
    retry_interval: float = Field(1.0, gt=0)

    # Extra request metadata
    headers: dict[str, str] = {}
    cookies: dict[str, str] = {}


def create_client(
    settings: OPASettings,
    logger: structlog.BoundLogger | None = None,
) -> PermissionClient:
    """Build the client variant named by ``settings.client_kind``."""
    if settings.client_kind == "http":
        return HTTPClient(
            address=settings.address,
            permission_query_path=settings.permission_query_path,
            permission_filter_path=settings.permission_filter_path,
            request_timeout=settings.request_timeout,
            verbose=settings.verbose,
            override_header_value=settings.override_header_value,
            retry_duration=settings.retry_duration,
            retry_interval=settings.retry_interval,
            headers=settings.headers,
            cookies=settings.cookies,
            logger=logger,
        )
    if settings.client_kind == "nop":
        return NopClient(logger=logger)
    if settings.client_kind == "mock":
        return MockClient()

    msg = f"Unsupported OPA client kind: {settings.client_kind!r}"
    raise ValueError(msg)
