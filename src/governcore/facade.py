"""Single entry point for authorization checks.

``AuthorizationFacade`` picks the resolver from the principal's kind:

- users get a fine-grained ``AccessLevel`` from the ResolutionEngine;
- MCP keys get a boolean from the scope check.

Every call reads exactly one snapshot from its source and emits one audit
event. Engine errors are logged, audited as ``"error"`` and re-raised so that
a data problem is never mistaken for a denial.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .audit import AuditEvent, AuditSink, LoggingAuditSink
from .config import GovernanceConfig
from .credentials import MCPKey
from .exceptions import AccessDeniedError, GovernanceError
from .interfaces import Snapshot, SnapshotSource
from .logging import get_decision_logger
from .models import ResourceRef, ScopeTarget
from .permissions.constants import AccessLevel, ResourceType
from .permissions.resolution import Resolution, ResolutionEngine
from .permissions.scope import ScopeAuthorizer
from .principals import Principal, PrincipalKind, UserPrincipal

logger = logging.getLogger(__name__)


class AuthorizationFacade:
    """Composes resolution and scope checks behind one API.

    Args:
        source: Provides the snapshot each call runs against.
        audit_sink: Receives decision events (default: LoggingAuditSink).
        config: Engine settings; ``audit_enabled=False`` silences the sink.
        scope_authorizer: Credential checker (default: ScopeAuthorizer()).

    Example::

        facade = AuthorizationFacade(StaticSnapshotSource(snapshot))

        facade.check(UserPrincipal("u1"), ResourceRef.folder("f1"))
        # AccessLevel.WRITE

        facade.check(CredentialPrincipal(key), ScopeTarget(account_id="a1", project_id="p1"))
        # True
    """

    def __init__(
        self,
        source: SnapshotSource,
        *,
        audit_sink: Optional[AuditSink] = None,
        config: Optional[GovernanceConfig] = None,
        scope_authorizer: Optional[ScopeAuthorizer] = None,
    ) -> None:
        self._source = source
        self._config = config or GovernanceConfig()
        self._audit_sink = audit_sink or LoggingAuditSink()
        self._scopes = scope_authorizer or ScopeAuthorizer()

    # ── Entry points ─────────────────────────────────────────────

    def check(self, principal: Principal, target: Union[ResourceRef, ScopeTarget]) -> Union[AccessLevel, bool]:
        """Level for a user on a resource, or allow/deny for a key on a target."""
        if principal.kind == PrincipalKind.USER:
            if not isinstance(target, ResourceRef):
                raise TypeError(f"User checks take a ResourceRef, got {type(target).__name__}")
            return self.resolve(principal, target).level

        if principal.kind == PrincipalKind.CREDENTIAL:
            if not isinstance(target, ScopeTarget):
                raise TypeError(f"Credential checks take a ScopeTarget, got {type(target).__name__}")
            return self.authorize(principal.key, target)

        raise TypeError(f"Unknown principal kind: {principal.kind!r}")

    def resolve(self, principal: UserPrincipal, resource: ResourceRef) -> Resolution:
        snapshot = self._source.snapshot()
        return self._resolve_in(snapshot, principal, resource, audit_as=(PrincipalKind.USER, principal.user_id))

    def authorize(self, key: MCPKey, target: ScopeTarget) -> bool:
        allowed = self._scopes.authorize(key, target)
        self._emit(
            AuditEvent(
                principal_kind=PrincipalKind.CREDENTIAL,
                principal_id=key.id,
                target=str(target),
                decision="allow" if allowed else "deny",
            )
        )
        return allowed

    def require(self, principal: UserPrincipal, resource: ResourceRef, level: AccessLevel) -> Resolution:
        """Resolve and raise AccessDeniedError unless ``level`` is reached."""
        resolution = self.resolve(principal, resource)
        if not resolution.level.satisfies(level):
            raise AccessDeniedError(
                f"{principal.user_id} has {resolution.level.label} on {resource}, needs {level.label}",
                principal_id=principal.user_id,
                resource=str(resource),
                required=level.label,
                actual=resolution.level.label,
            )
        return resolution

    def check_bearer(self, key: MCPKey, resource: ResourceRef) -> AccessLevel:
        """Level the bearer of ``key`` holds on ``resource``.

        The key must reach the resource's project (or, for account-level
        resources, its account without project narrowing); then the level is
        the one resolved for the user the key was issued for.
        """
        if key.user_id is None:
            raise ValueError(f"MCP key {key.id} was not issued on behalf of a user")

        snapshot = self._source.snapshot()
        try:
            chain = snapshot.ancestors_of(resource)
        except GovernanceError as e:
            self._fail(e, PrincipalKind.CREDENTIAL, key.id, str(resource), snapshot.generation)
            raise

        project = next((ref for ref in chain if ref.resource_type == ResourceType.PROJECT), None)
        target = ScopeTarget(
            account_id=chain[-1].resource_id,
            project_id=project.resource_id if project is not None else "",
        )
        if not self._scopes.authorize(key, target):
            self._emit(
                AuditEvent(
                    principal_kind=PrincipalKind.CREDENTIAL,
                    principal_id=key.id,
                    target=str(resource),
                    decision=AccessLevel.NONE.label,
                    generation=snapshot.generation,
                )
            )
            return AccessLevel.NONE

        resolution = self._resolve_in(
            snapshot,
            UserPrincipal(key.user_id),
            resource,
            audit_as=(PrincipalKind.CREDENTIAL, key.id),
        )
        return resolution.level

    # ── Internals ────────────────────────────────────────────────

    def _resolve_in(
        self,
        snapshot: Snapshot,
        principal: UserPrincipal,
        resource: ResourceRef,
        *,
        audit_as: tuple[PrincipalKind, str],
    ) -> Resolution:
        kind, principal_id = audit_as
        try:
            resolution = ResolutionEngine.from_snapshot(snapshot).resolve(principal, resource)
        except GovernanceError as e:
            self._fail(e, kind, principal_id, str(resource), snapshot.generation)
            raise

        self._emit(
            AuditEvent(
                principal_kind=kind,
                principal_id=principal_id,
                target=str(resource),
                decision=resolution.level.label,
                contributing_grant_ids=resolution.contributing_grant_ids,
                generation=snapshot.generation,
            )
        )
        return resolution

    def _fail(self, error: GovernanceError, kind: PrincipalKind, principal_id: str, target: str, generation: int) -> None:
        log = get_decision_logger(__name__, principal_id=principal_id, resource=target)
        log.warning("Access check failed: [%s] %s", error.code, error.message)
        self._emit(
            AuditEvent(
                principal_kind=kind,
                principal_id=principal_id,
                target=target,
                decision="error",
                error_code=error.code,
                generation=generation,
            )
        )

    def _emit(self, event: AuditEvent) -> None:
        if not self._config.audit_enabled:
            return
        try:
            self._audit_sink.emit(event)
        except Exception:
            logger.exception("Audit sink %s rejected event for %s", type(self._audit_sink).__name__, event.target)


__all__ = ["AuthorizationFacade"]
