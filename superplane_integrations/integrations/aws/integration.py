"""AWS integration."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import SyncContext
from superplane_integrations.core.plugin import Component, Integration
from superplane_integrations.integrations.aws.credentials import credentials_from_integration
from superplane_integrations.integrations.aws.ecs import RunTask, StopTask

logger = logging.getLogger(__name__)


class AWSIntegration(Integration):
    """
    Connection to an AWS account.

    The host exchanges the configured role for session credentials and
    stores them as integration secrets; sync() only checks they are there.
    """

    @property
    def name(self) -> str:
        return "aws"

    @property
    def label(self) -> str:
        return "AWS"

    @property
    def description(self) -> str:
        return "Run and manage workloads on Amazon Web Services"

    def components(self) -> list[Component]:
        return [RunTask(), StopTask()]

    async def sync(self, ctx: SyncContext) -> None:
        credentials = credentials_from_integration(ctx.integration)
        logger.info(f"[aws] Session credentials present for {credentials.access_key_id[:4]}***")
        ctx.integration.set_state("ready")
