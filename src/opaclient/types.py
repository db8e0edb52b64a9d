"""Permission query data types and OPA wire models."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "Action",
    "PermissionOptions",
    "PermissionQueryInput",
    "PermissionQueryRequest",
    "PermissionQueryResponse",
    "PermissionFilterInput",
    "PermissionFilterRequest",
    "PermissionFilterResponse",
]


class Action(StrEnum):
    """Operation being authorized. The wire value is the plain string."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    WRITE = "write"


@dataclass(frozen=True)
class PermissionOptions:
    """Per-call options: the principals asking and an optional override value.

    ``member_ids`` accepts any sequence and is frozen to a tuple.
    """

    member_ids: Sequence[str] = ()
    override_header_value: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "member_ids", tuple(self.member_ids))


# ── Wire models ──────────────────────────────────────────────────


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PermissionQueryInput(_WireModel):
    resource: str
    action: str
    member_ids: list[str] = Field(default_factory=list, alias="memberIds")


class PermissionQueryRequest(_WireModel):
    """Body of a single-resource query: ``{"input": {...}}``."""

    input: PermissionQueryInput


class PermissionQueryResponse(_WireModel):
    # OPA omits ``result`` when the decision is undefined
    result: bool = False

    @field_validator("result", mode="before")
    @classmethod
    def _null_is_false(cls, value: object) -> object:
        return False if value is None else value


class PermissionFilterInput(_WireModel):
    resources: list[str]
    action: str
    member_ids: list[str] = Field(default_factory=list, alias="memberIds")


class PermissionFilterRequest(_WireModel):
    """Body of a batch filter query: ``{"input": {...}}``."""

    input: PermissionFilterInput


class PermissionFilterResponse(_WireModel):
    """Allowed subset of the requested resources, in server order."""

    result: list[str] = Field(default_factory=list)

    @field_validator("result", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        return [] if value is None else value
