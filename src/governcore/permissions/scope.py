"""Scope checks for MCP keys.

Credentials are coarse-grained: a key either reaches an (account, project)
pair or it does not. Fine-grained levels only exist for users, see
:mod:`governcore.permissions.resolution`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable

from ..credentials import CredentialUsage, MCPKey
from ..models import ScopeTarget
from .constants import ScopeType

logger = logging.getLogger(__name__)


def authorize(key: MCPKey, target: ScopeTarget) -> bool:
    """Check whether ``key`` reaches ``target``.

    Checks in order:
    1. revoked → never
    2. ``all_projects`` → always
    3. ``account`` → account listed, and project listed when the key narrows
       to specific projects (empty ``project_ids`` = all projects of the account)
    4. ``project`` → project listed; the account is not consulted

    Example::

        key = MCPKey.for_accounts("k1", ["a1"])
        authorize(key, ScopeTarget(account_id="a1", project_id="p9"))  # True
        authorize(key, ScopeTarget(account_id="a2", project_id="p9"))  # False
    """
    if key.revoked:
        return False

    if key.scope_type == ScopeType.ALL_PROJECTS:
        return True

    if key.scope_type == ScopeType.ACCOUNT:
        if target.account_id not in key.account_ids:
            return False
        return not key.project_ids or target.project_id in key.project_ids

    if key.scope_type == ScopeType.PROJECT:
        return target.project_id in key.project_ids

    logger.warning("MCP key %s has unknown scope type %r", key.id, key.scope_type)
    return False


def keys_for_project(keys: Iterable[MCPKey], target: ScopeTarget) -> list[MCPKey]:
    """Credentials usable against one project, in input order."""
    return [key for key in keys if authorize(key, target)]


def record_usage(key: MCPKey, target: ScopeTarget, *, now: datetime | None = None) -> CredentialUsage | None:
    """Build the usage update to persist after a successful authorization.

    Nothing is written here; the credential service owns that write.
    Returns None when ``key`` does not reach ``target``.
    """
    if not authorize(key, target):
        return None
    return CredentialUsage(
        key_id=key.id,
        last_used=now or datetime.now(timezone.utc),
        last_used_project_id=target.project_id,
    )


class ScopeAuthorizer:
    """Object form of :func:`authorize` for hosts wiring components explicitly."""

    def authorize(self, key: MCPKey, target: ScopeTarget) -> bool:
        allowed = authorize(key, target)
        logger.debug("Scope check %s on %s: %s", key.id, target, "allow" if allowed else "deny")
        return allowed

    def keys_for_project(self, keys: Iterable[MCPKey], target: ScopeTarget) -> list[MCPKey]:
        return keys_for_project(keys, target)

    def record_usage(self, key: MCPKey, target: ScopeTarget, *, now: datetime | None = None) -> CredentialUsage | None:
        return record_usage(key, target, now=now)


__all__ = [
    "ScopeAuthorizer",
    "authorize",
    "keys_for_project",
    "record_usage",
]
