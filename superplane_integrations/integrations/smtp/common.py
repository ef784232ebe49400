"""Helpers shared by the SMTP components."""

from __future__ import annotations

from superplane_integrations.config import integration_config_from_settings
from superplane_integrations.core.context import IntegrationContext
from superplane_integrations.core.errors import ComponentError
from superplane_integrations.integrations.smtp.client import DEFAULT_PORT, SMTPClient, SMTPConfig


def _parse_port(value: str) -> int:
    try:
        return int(float(value.strip()))
    except (ValueError, OverflowError):
        raise ComponentError(f"invalid port: {value}") from None


def new_client(integration: IntegrationContext) -> SMTPClient:
    """
    Build a client from the integration's server and sender settings.

    useTLS defaults to true; only an explicit "false" disables STARTTLS.

    Raises:
        ComponentError: If host, port or fromEmail is missing or invalid
    """
    port = _parse_port(integration.get_optional_config("port", str(DEFAULT_PORT)))
    use_tls = integration.get_optional_config("useTLS", "true").strip().lower() != "false"

    try:
        config = integration_config_from_settings(
            SMTPConfig(
                host=integration.get_optional_config("host"),
                port=port,
                username=integration.get_optional_config("username").strip(),
                password=integration.get_optional_config("password"),
                from_name=integration.get_optional_config("fromName").strip(),
                from_email=integration.get_optional_config("fromEmail").strip(),
                use_tls=use_tls,
            )
        )
    except ValueError as e:
        raise ComponentError(str(e)) from e
    return SMTPClient(config)
