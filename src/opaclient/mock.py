"""Controllable permission client for test suites of calling code."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from opaclient.types import Action, PermissionOptions

__all__ = ["MockCall", "MockClient"]


@dataclass(frozen=True)
class MockCall:
    """One recorded query."""

    method: str  # "query_permissions" | "query_permissions_multi_resources"
    resources: tuple[str, ...]
    action: Action
    options: PermissionOptions


class MockClient:
    """Test double that records calls and returns configured answers.

    Answers are looked up per ``(resource, action)`` first, then per
    resource, then fall back to ``default``. A configured ``error`` is
    raised by every call until cleared.
    """

    def __init__(self, *, default: bool = False) -> None:
        self.default = default
        self.error: Exception | None = None
        self.calls: list[MockCall] = []
        self.closed = False
        self._answers: dict[tuple[str, Action | None], bool] = {}

    def set_permission(self, resource: str, allowed: bool, action: Action | None = None) -> None:
        """Configure the answer for ``resource`` (optionally only for ``action``)."""
        self._answers[(resource, action)] = allowed

    def reset(self) -> None:
        self.calls.clear()
        self._answers.clear()
        self.error = None

    def _answer(self, resource: str, action: Action) -> bool:
        if (resource, action) in self._answers:
            return self._answers[(resource, action)]
        return self._answers.get((resource, None), self.default)

    async def query_permissions(
        self,
        resource: str,
        action: Action,
        options: PermissionOptions,
    ) -> bool:
        self.calls.append(MockCall("query_permissions", (resource,), action, options))
        if self.error is not None:
            raise self.error
        return self._answer(resource, action)

    async def query_permissions_multi_resources(
        self,
        resources: Sequence[str],
        action: Action,
        options: PermissionOptions,
    ) -> list[bool]:
        self.calls.append(
            MockCall("query_permissions_multi_resources", tuple(resources), action, options)
        )
        if self.error is not None:
            raise self.error
        return [self._answer(resource, action) for resource in resources]

    async def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> MockClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
