"""Daytona integration."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import SyncContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import Component, Integration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.daytona.common import new_client
from superplane_integrations.integrations.daytona.create_sandbox import CreateSandbox
from superplane_integrations.integrations.daytona.delete_sandbox import DeleteSandbox
from superplane_integrations.integrations.daytona.execute_code import ExecuteCode
from superplane_integrations.integrations.daytona.execute_command import ExecuteCommand

logger = logging.getLogger(__name__)


class DaytonaIntegration(Integration):
    @property
    def name(self) -> str:
        return "daytona"

    @property
    def label(self) -> str:
        return "Daytona"

    @property
    def description(self) -> str:
        return "Run code and commands in Daytona sandboxes"

    def components(self) -> list[Component]:
        return [CreateSandbox(), ExecuteCommand(), ExecuteCode(), DeleteSandbox()]

    async def sync(self, ctx: SyncContext) -> None:
        async with new_client(ctx.integration, ctx.transport) as client:
            try:
                await client.verify()
            except IntegrationError as e:
                raise ComponentError(f"failed to verify API key: {e}") from e

        ctx.integration.set_state("ready")
        logger.info("[daytona] API key verified")
