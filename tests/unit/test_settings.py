"""Tests for environment settings and client selection."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from opaclient.client import HTTPClient, PermissionClient
from opaclient.mock import MockClient
from opaclient.nop import NopClient
from opaclient.settings import ClientKind, OPASettings, create_client
from opaclient.types import Action, PermissionOptions


def test_defaults() -> None:
    s = OPASettings()
    assert s.client_kind == "nop"
    assert s.address == "http://localhost:8181"
    assert s.permission_query_path == "/v1/data/authz/allow"
    assert s.permission_filter_path == "/v1/data/authz/filter_allowed"
    assert s.request_timeout == 10.0
    assert s.verbose is False
    assert s.override_header_value == ""
    assert s.retry_duration == 0.0


def test_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPA_CLIENT_KIND", "http")
    monkeypatch.setenv("OPA_ADDRESS", "http://opa:8181")
    monkeypatch.setenv("OPA_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("OPA_VERBOSE", "true")
    monkeypatch.setenv("OPA_OVERRIDE_HEADER_VALUE", "s3cret")
    monkeypatch.setenv("OPA_HEADERS", '{"X-Tenant": "t1"}')

    s = OPASettings()
    assert s.client_kind == "http"
    assert s.address == "http://opa:8181"
    assert s.request_timeout == 2.5
    assert s.verbose is True
    assert s.override_header_value == "s3cret"
    assert s.headers == {"X-Tenant": "t1"}


def test_unknown_kind_rejected() -> None:
    with pytest.raises(ValidationError):
        OPASettings(client_kind="ldap")  # type: ignore[arg-type]


def test_settings_are_frozen() -> None:
    s = OPASettings()
    with pytest.raises(ValidationError):
        s.address = "http://elsewhere"  # type: ignore[misc]


@pytest.mark.anyio()
async def test_create_http_client() -> None:
    settings = OPASettings(
        client_kind="http", override_header_value="s3cret", address="http://opa:8181"
    )
    client: PermissionClient = create_client(settings)
    async with client as opened:
        # bypass short-circuits before any network call
        assert await opened.query_permissions_multi_resources(
            ["a", "b"], Action.READ, PermissionOptions(override_header_value="s3cret")
        ) == [True, True]

    assert isinstance(client, HTTPClient)
    assert client._client.is_closed is True  # noqa: SLF001


@pytest.mark.anyio()
@pytest.mark.parametrize("kind", ["http", "nop", "mock"])
async def test_every_client_kind_closes_through_interface(kind: ClientKind) -> None:
    client: PermissionClient = create_client(OPASettings(client_kind=kind))
    await client.close()
    async with create_client(OPASettings(client_kind=kind)) as opened:
        assert await opened.query_permissions_multi_resources(
            [], Action.READ, PermissionOptions()
        ) == []


def test_create_nop_and_mock_clients() -> None:
    assert isinstance(create_client(OPASettings(client_kind="nop")), NopClient)
    assert isinstance(create_client(OPASettings(client_kind="mock")), MockClient)


@pytest.mark.parametrize(
    "overrides",
    [
        {"retry_interval": 0},
        {"retry_interval": -1},
        {"request_timeout": 0},
        {"request_timeout": -5},
        {"retry_duration": -3},
    ],
)
def test_non_positive_timing_rejected(overrides: dict[str, float]) -> None:
    with pytest.raises(ValidationError):
        OPASettings(**overrides)  # type: ignore[arg-type]


def test_non_positive_retry_interval_rejected_from_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OPA_RETRY_INTERVAL", "0")
    with pytest.raises(ValidationError):
        OPASettings()
