"""Unified exception hierarchy for governcore.

Every failure raised by the resolution engine derives from GovernanceError.
This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for protocol mapping
- gRPC error handler decorator for hosts exposing checks over internal RPC

"No access" is never an exception: the engine answers it with
``AccessLevel.NONE`` or ``False``. Errors here mean the check itself failed.

Usage:
    from governcore.exceptions import (
        GovernanceError,
        NotFoundError,
        IntegrityError,
        grpc_error_handler,
    )
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "GovernanceError",
    "NotFoundError",
    "IntegrityError",
    "AccessDeniedError",
    "ConfigurationError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
    # gRPC helpers
    "get_grpc_status_code",
    "grpc_error_handler",
]

logger = logging.getLogger(__name__)


# ---- Exception Hierarchy ----------------------------------------------------


class GovernanceError(Exception):
    """Base exception for the governance engine.

    Attributes:
        code: Stable error code string for protocol mapping (e.g. "NOT_FOUND").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class NotFoundError(GovernanceError):
    """Account, project, folder or origin folder id absent from the graph."""

    code: str = "NOT_FOUND"
    message: str = "Resource not found"


class IntegrityError(GovernanceError):
    """Structural invariant violated in the snapshot (cycles, torn reads).

    Signals a bug in the upstream mutation layer, not an authorization outcome.
    """

    code: str = "INTEGRITY_ERROR"
    message: str = "Resource graph integrity violated"


class AccessDeniedError(GovernanceError):
    """Raised only by explicit ``require``-style checks."""

    code: str = "ACCESS_DENIED"
    message: str = "Access denied"


class ConfigurationError(GovernanceError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[GovernanceError])


class ErrorRegistry:
    """Registry for mapping internal errors to external protocol codes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[GovernanceError]] = {}

    def register(self, code: str, error_cls: type[GovernanceError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[GovernanceError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[GovernanceError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("STALE_SNAPSHOT")
        class StaleSnapshotError(GovernanceError):
            code = "STALE_SNAPSHOT"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


error_registry.register("INTERNAL_ERROR", GovernanceError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("INTEGRITY_ERROR", IntegrityError)
error_registry.register("ACCESS_DENIED", AccessDeniedError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)


# ---- gRPC Error Handling Utilities ------------------------------------------


def get_grpc_status_code(error: GovernanceError) -> Any:
    """Map GovernanceError to a gRPC status code.

    Import grpc locally to avoid hard dependency at module level.
    """
    import grpc

    error_to_status = {
        "NOT_FOUND": grpc.StatusCode.NOT_FOUND,
        "INTEGRITY_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
        "ACCESS_DENIED": grpc.StatusCode.PERMISSION_DENIED,
        "CONFIGURATION_ERROR": grpc.StatusCode.FAILED_PRECONDITION,
    }
    return error_to_status.get(error.code, grpc.StatusCode.INTERNAL)


def grpc_error_handler(method):
    """Decorator for unary gRPC methods that run access checks.

    Engine errors abort the call as a generic "access check failed" with the
    stable code in trailing metadata, so a data problem never reaches the
    client as a silent denial.

    Usage:
        @grpc_error_handler
        async def CheckAccess(self, request, context):
            ...
    """

    @functools.wraps(method)
    async def wrapper(self, request, context):
        try:
            return await method(self, request, context)
        except GovernanceError as e:
            status_code = get_grpc_status_code(e)
            error_message = f"[{e.code}] access check failed: {e.message}"

            logger.error(
                "%s failed: %s",
                method.__name__,
                error_message,
                extra={
                    "error_code": e.code,
                    "error_details": e.details,
                },
            )

            context.set_trailing_metadata([("error-code", e.code)])
            await context.abort(status_code, error_message)
            return

        except Exception as e:
            import grpc

            logger.exception("%s unexpected error: %s", method.__name__, e)
            await context.abort(
                grpc.StatusCode.INTERNAL,
                f"Unexpected {type(e).__name__}: {e}",
            )
            return

    return wrapper
