"""Always-allow client for deployments with authorization disabled."""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from opaclient.logging import get_logger
from opaclient.types import Action, PermissionOptions

__all__ = ["NopClient"]


class NopClient:
    """Client that allows everything without contacting OPA."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._logger = get_logger(logger, client="nop")

    async def query_permissions(
        self,
        resource: str,
        action: Action,
        options: PermissionOptions,
    ) -> bool:
        self._logger.debug("opa.nop.allow", resource=resource, action=str(action))
        return True

    async def query_permissions_multi_resources(
        self,
        resources: Sequence[str],
        action: Action,
        options: PermissionOptions,
    ) -> list[bool]:
        self._logger.debug("opa.nop.allow", resources=list(resources), action=str(action))
        return [True] * len(resources)

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> NopClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
