"""
Application settings for hosts embedding the integration catalog.

Settings come from SUPERPLANE_* environment variables and are cached for
the process lifetime. Integration credentials are NOT read here: they
belong to each connected account and arrive through IntegrationContext.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from functools import lru_cache

from pydantic import BaseModel, Field

from superplane_integrations.integrations.base import IntegrationConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "SUPERPLANE_"


class AppSettings(BaseModel):
    """
    Application settings model.

    HTTP settings feed every IntegrationConfig built by
    integration_config_from_settings().
    """

    # Service identity
    service_name: str = "superplane-integrations"
    environment: str = "development"
    debug: bool = False

    # Outbound HTTP
    http_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    http_max_retries: int = Field(default=0, ge=0, description="Retries for retryable failures")
    http_retry_delay: float = Field(default=1.0, ge=0, description="Base backoff delay in seconds")

    # Logging
    log_requests: bool = False
    log_responses: bool = False
    log_level: str = "INFO"

    class Config:
        frozen = True


def _env(name: str, default: str) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool = False) -> bool:
    return _env(name, "true" if default else "false").lower() == "true"


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings from environment.

    Uses lru_cache for singleton pattern; call get_settings.cache_clear()
    after changing the environment.
    """
    settings = AppSettings(
        # Service
        service_name=_env("SERVICE_NAME", "superplane-integrations"),
        environment=_env("ENVIRONMENT", "development"),
        debug=_env_bool("DEBUG"),
        # HTTP
        http_timeout=float(_env("HTTP_TIMEOUT", "30")),
        http_max_retries=int(_env("HTTP_MAX_RETRIES", "0")),
        http_retry_delay=float(_env("HTTP_RETRY_DELAY", "1.0")),
        # Logging
        log_requests=_env_bool("LOG_REQUESTS"),
        log_responses=_env_bool("LOG_RESPONSES"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
    )
    logger.debug(f"[settings] Loaded settings for {settings.service_name} ({settings.environment})")
    return settings


def integration_config_from_settings(
    base: IntegrationConfig,
    settings: AppSettings | None = None,
) -> IntegrationConfig:
    """
    Apply the HTTP settings to a client config.

    Works for IntegrationConfig subclasses too: dataclasses.replace keeps
    every integration-specific field and overrides only the shared ones.
    """
    settings = settings or get_settings()
    return replace(
        base,
        timeout=settings.http_timeout,
        max_retries=settings.http_max_retries,
        retry_delay=settings.http_retry_delay,
        log_requests=settings.log_requests or settings.debug,
        log_responses=settings.log_responses or settings.debug,
    )


def configure_logging(settings: AppSettings | None = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
