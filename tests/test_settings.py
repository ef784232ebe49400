"""
Tests for application settings.
"""

from unittest.mock import patch

import pytest

from superplane_integrations.config import (
    AppSettings,
    get_settings,
    integration_config_from_settings,
)
from superplane_integrations.integrations.daytona.client import DaytonaConfig


class TestGetSettings:
    """Tests for get_settings()."""

    def test_defaults(self):
        """Without environment overrides the defaults apply."""
        with patch.dict("os.environ", {}, clear=True):
            settings = get_settings()

        assert settings.service_name == "superplane-integrations"
        assert settings.http_timeout == 30.0
        assert settings.http_max_retries == 0
        assert settings.log_level == "INFO"

    def test_environment_overrides(self):
        env = {
            "SUPERPLANE_HTTP_TIMEOUT": "5",
            "SUPERPLANE_HTTP_MAX_RETRIES": "2",
            "SUPERPLANE_DEBUG": "true",
            "SUPERPLANE_LOG_LEVEL": "warning",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = get_settings()

        assert settings.http_timeout == 5.0
        assert settings.http_max_retries == 2
        assert settings.debug is True
        assert settings.log_level == "WARNING"

    def test_cached(self):
        """Settings are built once per process."""
        assert get_settings() is get_settings()


class TestIntegrationConfigFromSettings:
    def test_applies_http_settings(self):
        """Shared HTTP fields are replaced, integration fields kept."""
        settings = AppSettings(http_timeout=7.5, http_max_retries=3, http_retry_delay=0.5)
        config = integration_config_from_settings(DaytonaConfig(api_key="key"), settings)

        assert isinstance(config, DaytonaConfig)
        assert config.api_key == "key"
        assert config.timeout == 7.5
        assert config.max_retries == 3
        assert config.retry_delay == 0.5

    def test_debug_enables_request_logging(self):
        settings = AppSettings(debug=True)
        config = integration_config_from_settings(DaytonaConfig(api_key="key"), settings)

        assert config.log_requests
        assert config.log_responses

    def test_invalid_timeout_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(http_timeout=0)
