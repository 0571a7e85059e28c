"""Configuration contract for governcore.

Pydantic-validated settings shared by every host that embeds the engine
(logging, audit emission, secret redaction).

Direct os.environ/os.getenv usage is confined to load_config_from_env();
everything else receives a GovernanceConfig instance.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_TRUTHY = ("true", "1", "yes", "on")


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class GovernanceConfig(BaseModel):
    """Settings for the authorization engine and its ambient services."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the engine",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    redact_secrets: bool = Field(
        default=True,
        description="Redact credential material from log output",
    )

    # Service identification
    service_name: Optional[str] = Field(
        default=None,
        description="Host service name for logger identification",
    )

    # Audit
    audit_enabled: bool = Field(
        default=True,
        description="Emit a decision event to the audit sink after every check",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env() -> GovernanceConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - LOG_REDACT_SECRETS: Redact credential material (default: true)
    - SERVICE_NAME: Host service name
    - GOVERNANCE_AUDIT_ENABLED: Emit decision events (default: true)

    Returns:
        GovernanceConfig instance with values from environment or defaults.
    """
    import os

    return GovernanceConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
        redact_secrets=os.getenv("LOG_REDACT_SECRETS", "true").lower() in _TRUTHY,
        service_name=os.getenv("SERVICE_NAME"),
        audit_enabled=os.getenv("GOVERNANCE_AUDIT_ENABLED", "true").lower() in _TRUTHY,
    )


__all__ = [
    "GovernanceConfig",
    "LogLevel",
    "load_config_from_env",
]
