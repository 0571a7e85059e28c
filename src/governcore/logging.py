"""Centralized logging utilities for governcore.

This module provides:
- Logging configuration from GovernanceConfig
- Safe preview utilities for sensitive data
- Secret redaction (API keys, bearer tokens, MCP key material)
- Structured logging with principal and resource context
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from .config import GovernanceConfig, LogLevel
from .models import ResourceRef, ScopeTarget


# Patterns for detecting secrets (common patterns to redact)
SECRET_PATTERNS = [
    r'(?i)(?:password|passwd|pwd|secret|token|key|api[_-]?key|auth[_-]?token)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'(?i)(?:bearer|basic)\s+([a-zA-Z0-9+/=]+)',
    r'(?i)(?:sk-|pk-)[a-zA-Z0-9]{32,}',
    r'(?i)(?:mcp_|mcpk_)[a-zA-Z0-9_\-]{16,}',
    r'(?i)(?:x-api-key|x-auth-token|x-mcp-key)\s*[:=]\s*["\']?([^"\'\s]+)',
    r'[a-f0-9]{32,}',  # Long hex strings (could be hashes or keys)
]

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "principal_id", "resource",
}

# Audit extras hold identifiers and are never redacted
AUDIT_FIELDS = {"decision", "contributing_grants", "error_code", "generation"}


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a safe, length-bounded, single-line preview of a value.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A safe, truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


def redact_secrets(text: str, replacement: str = "[REDACTED]") -> str:
    """Redact secret patterns from text.

    Args:
        text: The text to redact
        replacement: String to replace secrets with (default: "[REDACTED]")

    Returns:
        Text with secrets redacted; non-string input is returned unchanged.
    """
    if not isinstance(text, str):
        return text

    result = text
    for pattern in SECRET_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE | re.DOTALL)

    return result


def safe_log_value(value: Any, limit: int = 240, redact: bool = True) -> str:
    """Preview plus optional redaction; use for any value of unknown origin."""
    preview = safe_preview(value, limit=limit)
    if redact:
        preview = redact_secrets(preview)
    return preview


class GovernanceFormatter(logging.Formatter):
    """Formatter that carries principal/resource context, as JSON or plain text.

    Extra fields on the record are previewed and (optionally) redacted;
    the audit fields in ``AUDIT_FIELDS`` are written as-is.
    """

    def __init__(
        self,
        include_context: bool = True,
        json_format: bool = True,
        redact_secrets: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context = include_context
        self.json_format = json_format
        self.redact_secrets = redact_secrets

    def format(self, record: logging.LogRecord) -> str:
        principal_id = getattr(record, "principal_id", None)
        resource = getattr(record, "resource", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            if principal_id:
                log_data["principal_id"] = str(principal_id)
            if resource:
                log_data["resource"] = str(resource)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in AUDIT_FIELDS:
                log_data[key] = value if isinstance(value, (int, list)) or value is None else str(value)
            elif key not in _RESERVED_ATTRS:
                log_data[key] = safe_log_value(value, redact=self.redact_secrets)

        if self.redact_secrets:
            log_data["message"] = redact_secrets(log_data["message"])

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "principal_id" in log_data:
            parts.append(f"principal={log_data['principal_id']}")
        if "resource" in log_data:
            parts.append(f"resource={log_data['resource']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class DecisionLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds principal_id and resource to every record.

    Usage:
        logger = get_decision_logger(__name__, principal_id="u1")
        logger.info("Resolved", resource=ResourceRef.folder("f1"))
    """

    def __init__(
        self,
        logger: logging.Logger,
        principal_id: Optional[str] = None,
        resource: Optional[ResourceRef | ScopeTarget | str] = None,
    ):
        super().__init__(logger, {})
        self.principal_id = principal_id
        self.resource = resource

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        principal_id = kwargs.pop("principal_id", self.principal_id)
        resource = kwargs.pop("resource", self.resource)

        extra = kwargs.get("extra", {})
        if principal_id:
            extra["principal_id"] = principal_id
        if resource is not None:
            extra["resource"] = str(resource)
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[GovernanceConfig] = None,
    json_format: Optional[bool] = None,
    redact_secrets: Optional[bool] = None,
) -> None:
    """Configure the root logger for a host embedding the engine.

    Args:
        config: GovernanceConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
        redact_secrets: Override ``config.redact_secrets``
    """
    if config is None:
        from .config import load_config_from_env
        config = load_config_from_env()

    log_level = getattr(logging, LogLevel(config.log_level).value, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        GovernanceFormatter(
            include_context=True,
            json_format=config.log_json if json_format is None else json_format,
            redact_secrets=config.redact_secrets if redact_secrets is None else redact_secrets,
        )
    )
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_decision_logger(
    name: str,
    principal_id: Optional[str] = None,
    resource: Optional[ResourceRef | ScopeTarget | str] = None,
) -> DecisionLoggerAdapter:
    """Get a logger adapter bound to a principal and/or resource."""
    return DecisionLoggerAdapter(logging.getLogger(name), principal_id=principal_id, resource=resource)


__all__ = [
    "DecisionLoggerAdapter",
    "GovernanceFormatter",
    "get_decision_logger",
    "redact_secrets",
    "safe_log_value",
    "safe_preview",
    "setup_logging",
]
