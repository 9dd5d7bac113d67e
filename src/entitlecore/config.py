"""Process-wide configuration for the authorization engine.

Pydantic-validated settings read once at startup. The deployment mode decides
whether subscription entitlements are enforced at all: hosted deployments bill
per workspace, self-hosted deployments have no billing relationship.

Direct os.environ usage outside ``load_config_from_env`` is not allowed;
callers receive an immutable ``EngineConfig`` instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DeploymentMode(str, Enum):
    """Where the engine runs.

    - HOSTED: billed service, entitlements enforced against subscriptions.
    - SELF_HOSTED: no billing, entitlement checks are bypassed.
    """

    HOSTED = "hosted"
    SELF_HOSTED = "self-hosted"

    @classmethod
    def parse(cls, value: str | DeploymentMode) -> DeploymentMode:
        """Canonical values and known aliases, case-insensitively.

        Raises:
            ValueError: If the value names no deployment mode.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Deployment mode must be string or DeploymentMode enum, got {type(value)}")
        raw = value.strip().lower()
        if raw in _MODE_ALIASES:
            return _MODE_ALIASES[raw]
        try:
            return cls(raw)
        except ValueError:
            raise ValueError(
                f"Invalid deployment mode: {value}. Must be one of {[m.value for m in cls]}"
            ) from None


# Spellings accepted from the environment besides the canonical values.
_MODE_ALIASES = {
    "cloud": DeploymentMode.HOSTED,
    "selfhosted": DeploymentMode.SELF_HOSTED,
    "self_hosted": DeploymentMode.SELF_HOSTED,
}


class EngineConfig(BaseModel):
    """Configuration contract for services embedding the engine.

    Frozen after construction: the deployment mode is fixed for the process lifetime.
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the service",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    deployment_mode: DeploymentMode = Field(
        default=DeploymentMode.SELF_HOSTED,
        description="hosted (entitlements enforced) or self-hosted (bypassed)",
    )

    service_name: Optional[str] = Field(
        default=None,
        description="Service name used as logger name for decision logs",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.strip().upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def validate_deployment_mode(cls, v: str | DeploymentMode) -> DeploymentMode:
        """Accept canonical values and the known aliases, case-insensitively."""
        return DeploymentMode.parse(v)

    @property
    def is_hosted(self) -> bool:
        return self.deployment_mode == DeploymentMode.HOSTED

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }


def load_config_from_env() -> EngineConfig:
    """Load engine configuration from environment variables.

    This is the ONLY place where os.getenv is allowed for engine settings.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - DEPLOYMENT_MODE: hosted | self-hosted (``cloud`` means hosted; default: self-hosted)
    - SERVICE_NAME: Service name for decision logs

    Returns:
        EngineConfig instance with values from environment or defaults.
    """
    import os

    return EngineConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        deployment_mode=os.getenv("DEPLOYMENT_MODE", DeploymentMode.SELF_HOSTED.value),
        service_name=os.getenv("SERVICE_NAME"),
    )


__all__ = [
    "DeploymentMode",
    "EngineConfig",
    "LogLevel",
    "load_config_from_env",
]
