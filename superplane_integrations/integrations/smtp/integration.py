"""SMTP integration."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import SyncContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.plugin import Component, Integration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.smtp.common import new_client
from superplane_integrations.integrations.smtp.send_email import SendEmail

logger = logging.getLogger(__name__)


class SMTPIntegration(Integration):
    """
    Connection to an SMTP server.

    Configuration: host, port (default 587), fromEmail, optional username,
    password and fromName, and useTLS (STARTTLS, on by default).
    """

    @property
    def name(self) -> str:
        return "smtp"

    @property
    def label(self) -> str:
        return "SMTP"

    @property
    def description(self) -> str:
        return "Send emails"

    def components(self) -> list[Component]:
        return [SendEmail()]

    async def sync(self, ctx: SyncContext) -> None:
        try:
            client = new_client(ctx.integration)
        except ComponentError as e:
            raise ComponentError(f"failed to create SMTP client: {e}") from e

        try:
            await client.verify()
        except IntegrationError as e:
            raise ComponentError(f"failed to verify SMTP connection: {e}") from e

        ctx.integration.set_state("ready")
        logger.info(f"[smtp] Connection to {client.config.host}:{client.config.port} verified")
