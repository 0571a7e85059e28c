"""Decision events for the external audit sink.

The engine emits one AuditEvent per check and never waits on, or fails
because of, the sink. Persisting events is the sink's business.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .principals import PrincipalKind


class AuditEvent(BaseModel):
    """One authorization decision.

    ``decision`` is the level label for user checks (``"none"``, ``"read"``,
    ...), ``"allow"``/``"deny"`` for credential checks, and ``"error"`` when
    the check failed with ``error_code``.
    """

    model_config = {"frozen": True}

    principal_kind: PrincipalKind
    principal_id: str
    target: str
    decision: str
    contributing_grant_ids: tuple[str, ...] = ()
    error_code: Optional[str] = None
    generation: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AuditSink(ABC):
    @abstractmethod
    def emit(self, event: AuditEvent) -> None:
        raise NotImplementedError


class NullAuditSink(AuditSink):
    """Drops every event."""

    def emit(self, event: AuditEvent) -> None:
        return None


class LoggingAuditSink(AuditSink):
    """Writes events to a logger as structured extras.

    Pair with :class:`governcore.logging.GovernanceFormatter` in JSON mode to
    ship decisions to a log pipeline.
    """

    def __init__(self, logger_name: str = "governcore.audit", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def emit(self, event: AuditEvent) -> None:
        self._logger.log(
            self._level,
            "%s check: %s",
            event.principal_kind.value,
            event.decision,
            extra={
                "principal_id": event.principal_id,
                "resource": event.target,
                "decision": event.decision,
                "contributing_grants": list(event.contributing_grant_ids),
                "error_code": event.error_code,
                "generation": event.generation,
            },
        )


__all__ = ["AuditEvent", "AuditSink", "LoggingAuditSink", "NullAuditSink"]
