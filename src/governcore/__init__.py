from .permissions import (
    ACCOUNT_ROLE_LEVELS,
    AccessLevel,
    AccountRole,
    FolderStatus,
    InheritanceMode,
    OwnerScope,
    Resolution,
    ResolutionEngine,
    ResourceType,
    ScopeAuthorizer,
    ScopeType,
    SourceOfTruth,
    TargetType,
    authorize,
    keys_for_project,
    merge_grants,
    record_usage,
)
from .config import GovernanceConfig, LogLevel, load_config_from_env
from .exceptions import (
    AccessDeniedError,
    ConfigurationError,
    GovernanceError,
    IntegrityError,
    NotFoundError,
)
from .models import (
    Account,
    AccountMember,
    Folder,
    FolderMeta,
    Group,
    PermissionGrant,
    Project,
    ResourceRef,
    ScopeTarget,
    member_grant,
)
from .credentials import CredentialUsage, MCPKey
from .principals import CredentialPrincipal, Principal, PrincipalKind, UserPrincipal
from .interfaces import GrantStore, GroupIndex, ResourceGraph, Snapshot, SnapshotSource
from .snapshot import GovernanceSnapshot, StaticSnapshotSource, VersionedSnapshotSource
from .audit import AuditEvent, AuditSink, LoggingAuditSink, NullAuditSink
from .logging import (
    DecisionLoggerAdapter,
    GovernanceFormatter,
    get_decision_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .facade import AuthorizationFacade

__all__ = [
    'ACCOUNT_ROLE_LEVELS',
    'AccessDeniedError',
    'AccessLevel',
    'Account',
    'AccountMember',
    'AccountRole',
    'AuditEvent',
    'AuditSink',
    'AuthorizationFacade',
    'ConfigurationError',
    'CredentialPrincipal',
    'CredentialUsage',
    'DecisionLoggerAdapter',
    'Folder',
    'FolderMeta',
    'FolderStatus',
    'GovernanceConfig',
    'GovernanceError',
    'GovernanceFormatter',
    'GovernanceSnapshot',
    'GrantStore',
    'Group',
    'GroupIndex',
    'InheritanceMode',
    'IntegrityError',
    'LogLevel',
    'LoggingAuditSink',
    'MCPKey',
    'NotFoundError',
    'NullAuditSink',
    'OwnerScope',
    'PermissionGrant',
    'Principal',
    'PrincipalKind',
    'Project',
    'Resolution',
    'ResolutionEngine',
    'ResourceGraph',
    'ResourceRef',
    'ResourceType',
    'ScopeAuthorizer',
    'ScopeTarget',
    'ScopeType',
    'Snapshot',
    'SnapshotSource',
    'SourceOfTruth',
    'StaticSnapshotSource',
    'TargetType',
    'UserPrincipal',
    'VersionedSnapshotSource',
    'authorize',
    'get_decision_logger',
    'keys_for_project',
    'load_config_from_env',
    'member_grant',
    'merge_grants',
    'record_usage',
    'redact_secrets',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
]
