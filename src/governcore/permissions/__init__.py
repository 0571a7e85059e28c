"""Permission model and resolution for governcore.

Defines:
- AccessLevel and the data-model enumerations
- ResolutionEngine: effective level of a user on a resource
- Scope checks: whether an MCP key reaches an (account, project) pair
"""

# constants must load before resolution: models import it mid-package-init.
from .constants import (
    ACCOUNT_ROLE_LEVELS,
    GRANTABLE_LEVELS,
    AccessLevel,
    AccountRole,
    FolderStatus,
    InheritanceMode,
    OwnerScope,
    ResourceType,
    ScopeType,
    SourceOfTruth,
    TargetType,
)
from .resolution import Resolution, ResolutionEngine, merge_grants
from .scope import ScopeAuthorizer, authorize, keys_for_project, record_usage

__all__ = [
    "ACCOUNT_ROLE_LEVELS",
    "GRANTABLE_LEVELS",
    "AccessLevel",
    "AccountRole",
    "FolderStatus",
    "InheritanceMode",
    "OwnerScope",
    "Resolution",
    "ResolutionEngine",
    "ResourceType",
    "ScopeAuthorizer",
    "ScopeType",
    "SourceOfTruth",
    "TargetType",
    "authorize",
    "keys_for_project",
    "merge_grants",
    "record_usage",
]
