"""Access levels and the enumerations of the governance data model.

Provides:
- ``AccessLevel``: totally ordered effective level (none < read < write < admin).
- ``InheritanceMode``: per-project account inheritance (full / partial / none).
- ``SourceOfTruth`` / ``FolderStatus``: folder materialization state.
- ``ResourceType`` / ``TargetType`` / ``OwnerScope``: grant addressing.
- ``ScopeType``: MCP key scope.
- ``ACCOUNT_ROLE_LEVELS``: account membership role → account-level grant.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class AccessLevel(IntEnum):
    """Effective authorization level.

    Ordering is the merge rule: combining contributions takes the maximum.

    Example::

        max(AccessLevel.READ, AccessLevel.ADMIN)     # AccessLevel.ADMIN
        AccessLevel.WRITE.satisfies(AccessLevel.READ)  # True
    """

    NONE = 0
    READ = 1
    WRITE = 2
    ADMIN = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    def satisfies(self, required: AccessLevel) -> bool:
        """True if this level is at least ``required``."""
        return self >= required

    @classmethod
    def from_name(cls, value: str | AccessLevel) -> AccessLevel:
        """Parse ``"read"``, ``"WRITE"``, ... into an AccessLevel."""
        if isinstance(value, AccessLevel):
            return value
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown access level: {value!r}") from None


# Levels a PermissionGrant may carry; NONE is only ever a resolution result.
GRANTABLE_LEVELS = frozenset({AccessLevel.READ, AccessLevel.WRITE, AccessLevel.ADMIN})


class InheritanceMode(str, Enum):
    """How a project takes grants and folders from its account."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class SourceOfTruth(str, Enum):
    """Where a folder's content and permissions come from."""

    LOCAL = "local"
    INHERITED = "inherited"


class FolderStatus(str, Enum):
    EDITABLE = "editable"
    READ_ONLY = "read-only"


class ResourceType(str, Enum):
    """Resources a grant can be attached to."""

    ACCOUNT = "account"
    PROJECT = "project"
    FOLDER = "folder"


class TargetType(str, Enum):
    USER = "user"
    GROUP = "group"


class OwnerScope(str, Enum):
    """Level of the hierarchy that owns a folder."""

    ACCOUNT = "account"
    PROJECT = "project"


class ScopeType(str, Enum):
    """Reach of an MCP key.

    - ``all_projects``: global credential, every account and project.
    - ``account``: listed accounts, optionally narrowed to listed projects.
    - ``project``: listed projects only, account not consulted.
    """

    ALL_PROJECTS = "all_projects"
    ACCOUNT = "account"
    PROJECT = "project"


class AccountRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


ACCOUNT_ROLE_LEVELS: dict[AccountRole, AccessLevel] = {
    AccountRole.OWNER: AccessLevel.ADMIN,
    AccountRole.ADMIN: AccessLevel.ADMIN,
    AccountRole.MEMBER: AccessLevel.READ,
}


__all__ = [
    "ACCOUNT_ROLE_LEVELS",
    "GRANTABLE_LEVELS",
    "AccessLevel",
    "AccountRole",
    "FolderStatus",
    "InheritanceMode",
    "OwnerScope",
    "ResourceType",
    "ScopeType",
    "SourceOfTruth",
    "TargetType",
]
