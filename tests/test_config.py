"""Tests for EngineConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from entitlecore import DeploymentMode, EngineConfig, LogLevel, load_config_from_env


class TestEngineConfig:
    """Tests for EngineConfig model."""

    def test_create_default_config(self) -> None:
        config = EngineConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.deployment_mode is DeploymentMode.SELF_HOSTED
        assert config.service_name is None
        assert config.is_hosted is False

    def test_create_custom_config(self) -> None:
        config = EngineConfig(
            log_level=LogLevel.DEBUG,
            log_json=True,
            deployment_mode=DeploymentMode.HOSTED,
            service_name="api",
        )
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.is_hosted is True
        assert config.service_name == "api"

    def test_log_level_from_string(self) -> None:
        config = EngineConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            EngineConfig(log_level="INVALID")

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("hosted", DeploymentMode.HOSTED),
            ("HOSTED", DeploymentMode.HOSTED),
            ("cloud", DeploymentMode.HOSTED),
            ("self-hosted", DeploymentMode.SELF_HOSTED),
            ("self_hosted", DeploymentMode.SELF_HOSTED),
            ("selfhosted", DeploymentMode.SELF_HOSTED),
        ],
    )
    def test_deployment_mode_spellings(self, raw: str, expected: DeploymentMode) -> None:
        assert EngineConfig(deployment_mode=raw).deployment_mode is expected

    def test_deployment_mode_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid deployment mode"):
            EngineConfig(deployment_mode="on-prem")

    def test_frozen(self) -> None:
        config = EngineConfig()
        with pytest.raises(Exception):
            config.deployment_mode = DeploymentMode.HOSTED  # type: ignore[misc]

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(Exception):  # Pydantic validation error
            EngineConfig(extra_field="value")  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_load_defaults(self) -> None:
        config = load_config_from_env()
        assert config.log_level == LogLevel.INFO
        assert config.deployment_mode is DeploymentMode.SELF_HOSTED
        assert config.log_json is False

    @patch.dict(
        os.environ,
        {
            "LOG_LEVEL": "DEBUG",
            "LOG_JSON": "yes",
            "DEPLOYMENT_MODE": "cloud",
            "SERVICE_NAME": "kan-api",
        },
        clear=True,
    )
    def test_load_from_env(self) -> None:
        config = load_config_from_env()
        assert config.log_level == LogLevel.DEBUG
        assert config.log_json is True
        assert config.deployment_mode is DeploymentMode.HOSTED
        assert config.service_name == "kan-api"

    @patch.dict(os.environ, {"DEPLOYMENT_MODE": "somewhere"}, clear=True)
    def test_invalid_mode_fails_startup(self) -> None:
        with pytest.raises(ValueError, match="Invalid deployment mode"):
            load_config_from_env()
