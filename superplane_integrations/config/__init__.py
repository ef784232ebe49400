"""Application settings."""

from superplane_integrations.config.settings import (
    AppSettings,
    configure_logging,
    get_settings,
    integration_config_from_settings,
)

__all__ = [
    "AppSettings",
    "configure_logging",
    "get_settings",
    "integration_config_from_settings",
]
