"""MCP key records as consumed by the scope authorizer.

An MCPKey is an immutable snapshot handed in by the credential issuance
service. Creation, revocation and scope editing happen there; this module only
validates the scope invariants and carries the usage update the write path
should persist after a successful authorization.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .permissions.constants import ScopeType


@dataclass(frozen=True)
class MCPKey:
    """Scoped API credential.

    MCPKey provides:
    - id: Key identifier for audit trails
    - scope_type: all_projects | account | project
    - account_ids: Accounts an ``account`` key reaches
    - project_ids: Projects a ``project`` key reaches; for ``account`` keys an
      optional narrowing (empty = every project of the listed accounts)
    - revoked: Revoked keys never authorize
    - user_id: User the key was issued on behalf of (None = service key)

    ``all_projects`` keys ignore both id sets.
    """

    id: str
    scope_type: ScopeType = ScopeType.ALL_PROJECTS
    account_ids: frozenset[str] = frozenset()
    project_ids: frozenset[str] = frozenset()
    revoked: bool = False
    user_id: str | None = None
    name: str = ""

    def __post_init__(self) -> None:
        # Normalize plain strings and iterables handed in by hosts.
        object.__setattr__(self, "scope_type", ScopeType(self.scope_type))
        object.__setattr__(self, "account_ids", frozenset(self.account_ids))
        object.__setattr__(self, "project_ids", frozenset(self.project_ids))

        if self.scope_type == ScopeType.ACCOUNT and not self.account_ids:
            raise ValueError(f"MCP key {self.id!r}: account scope requires account_ids")
        if self.scope_type == ScopeType.PROJECT and not self.project_ids:
            raise ValueError(f"MCP key {self.id!r}: project scope requires project_ids")

    @classmethod
    def for_projects(cls, key_id: str, project_ids: Iterable[str], **kwargs) -> MCPKey:
        return cls(id=key_id, scope_type=ScopeType.PROJECT, project_ids=frozenset(project_ids), **kwargs)

    @classmethod
    def for_accounts(
        cls,
        key_id: str,
        account_ids: Iterable[str],
        project_ids: Iterable[str] = (),
        **kwargs,
    ) -> MCPKey:
        return cls(
            id=key_id,
            scope_type=ScopeType.ACCOUNT,
            account_ids=frozenset(account_ids),
            project_ids=frozenset(project_ids),
            **kwargs,
        )


@dataclass(frozen=True)
class CredentialUsage:
    """Usage metadata to persist after a successful authorization."""

    key_id: str
    last_used: datetime
    last_used_project_id: str


__all__ = ["CredentialUsage", "MCPKey"]
