"""Tests for permission types and OPA wire models."""

from __future__ import annotations

import dataclasses
import json

import pytest
from pydantic import ValidationError

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


class TestAction:
    def test_wire_values(self) -> None:
        assert [str(a) for a in Action] == ["read", "create", "update", "delete", "write"]

    def test_equality_with_plain_string(self) -> None:
        assert Action.READ == "read"
        assert Action("delete") is Action.DELETE


class TestPermissionOptions:
    def test_defaults(self) -> None:
        opts = PermissionOptions()
        assert opts.member_ids == ()
        assert opts.override_header_value == ""

    def test_member_ids_frozen_to_tuple(self) -> None:
        ids = ["u1", "u2"]
        opts = PermissionOptions(member_ids=ids)
        ids.append("u3")
        assert opts.member_ids == ("u1", "u2")

    def test_immutable(self) -> None:
        opts = PermissionOptions(member_ids=["u1"])
        with pytest.raises(dataclasses.FrozenInstanceError):
            opts.override_header_value = "x"  # type: ignore[misc]


class TestWireModels:
    def test_query_request_uses_camel_case_member_ids(self) -> None:
        req = PermissionQueryRequest(
            input=PermissionQueryInput(resource="r", action="read", member_ids=["u1"])
        )
        assert json.loads(req.model_dump_json(by_alias=True)) == {
            "input": {"resource": "r", "action": "read", "memberIds": ["u1"]}
        }

    def test_filter_request_shape(self) -> None:
        req = PermissionFilterRequest(
            input=PermissionFilterInput(resources=["a", "b"], action="create", member_ids=[])
        )
        assert json.loads(req.model_dump_json(by_alias=True)) == {
            "input": {"resources": ["a", "b"], "action": "create", "memberIds": []}
        }

    def test_query_response(self) -> None:
        assert PermissionQueryResponse.model_validate_json(b'{"result": true}').result is True
        assert PermissionQueryResponse.model_validate_json(b"{}").result is False
        assert PermissionQueryResponse.model_validate_json(b'{"result": null}').result is False

    def test_query_response_ignores_extra_fields(self) -> None:
        resp = PermissionQueryResponse.model_validate_json(
            b'{"result": true, "decision_id": "abc"}'
        )
        assert resp.result is True

    def test_filter_response_null_is_empty(self) -> None:
        assert PermissionFilterResponse.model_validate_json(b'{"result": null}').result == []
        assert PermissionFilterResponse.model_validate_json(b"{}").result == []

    def test_filter_response_rejects_wrong_shape(self) -> None:
        with pytest.raises(ValidationError):
            PermissionFilterResponse.model_validate_json(b'{"result": [1, 2]}', strict=True)
