"""Send Email component."""

from __future__ import annotations

import logging

from superplane_integrations.core.context import ExecutionContext, SetupContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.core.execution import DEFAULT_OUTPUT_CHANNEL
from superplane_integrations.core.plugin import Component, ComponentConfig, decode_configuration
from superplane_integrations.integrations.base import IntegrationError
from superplane_integrations.integrations.smtp.client import Email
from superplane_integrations.integrations.smtp.common import new_client
from superplane_integrations.utils import normalize_email_address, parse_email_list

logger = logging.getLogger(__name__)

PAYLOAD_TYPE = "smtp.email"


class SendEmailConfig(ComponentConfig):
    to: str | list[str] = ""
    cc: str | list[str] = ""
    bcc: str | list[str] = ""
    subject: str = ""
    body: str = ""
    html_body: str = ""
    from_name: str = ""
    from_email: str = ""
    reply_to: str = ""


def build_email(config: SendEmailConfig) -> Email:
    """
    Validate the configuration and turn it into an Email.

    Raises:
        ComponentError: On missing recipients, subject or body, or an
            invalid fromEmail/replyTo address
    """
    to = parse_email_list(config.to)
    if not to:
        raise ComponentError("to is required")

    subject = config.subject.strip()
    if not subject:
        raise ComponentError("subject is required")

    if not config.body.strip() and not config.html_body.strip():
        raise ComponentError("body or htmlBody is required")

    from_email = ""
    if config.from_email.strip():
        from_email = normalize_email_address(config.from_email)
        if not from_email:
            raise ComponentError(f"invalid fromEmail: {config.from_email}")

    reply_to = ""
    if config.reply_to.strip():
        reply_to = normalize_email_address(config.reply_to)
        if not reply_to:
            raise ComponentError(f"invalid replyTo: {config.reply_to}")

    return Email(
        to=to,
        cc=parse_email_list(config.cc),
        bcc=parse_email_list(config.bcc),
        subject=subject,
        text_body=config.body,
        html_body=config.html_body,
        from_name=config.from_name.strip(),
        from_email=from_email,
        reply_to=reply_to,
    )


class SendEmail(Component):
    """Sends a plain text and/or HTML email through the configured SMTP server."""

    @property
    def name(self) -> str:
        return "smtp.sendEmail"

    @property
    def label(self) -> str:
        return "Send Email"

    @property
    def description(self) -> str:
        return "Send an email via SMTP"

    async def setup(self, ctx: SetupContext) -> None:
        config = decode_configuration(SendEmailConfig, ctx.configuration)
        build_email(config)

    async def execute(self, ctx: ExecutionContext) -> None:
        config = decode_configuration(SendEmailConfig, ctx.configuration)
        email = build_email(config)

        client = new_client(ctx.integration)
        try:
            result = await client.send_email(email)
        except IntegrationError as e:
            raise ComponentError(f"failed to send email: {e}") from e

        logger.info(f"[smtp] Email '{email.subject}' sent from {result.from_email}")
        ctx.execution_state.emit(DEFAULT_OUTPUT_CHANNEL.name, PAYLOAD_TYPE, [result.to_payload()])
