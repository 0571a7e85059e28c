"""Entity models for the Account → Project → Folder hierarchy.

These are immutable Pydantic models. The engine never mutates them; hosts
build a new snapshot when the upstream CRUD service changes anything.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .permissions.constants import (
    ACCOUNT_ROLE_LEVELS,
    GRANTABLE_LEVELS,
    AccessLevel,
    AccountRole,
    FolderStatus,
    InheritanceMode,
    OwnerScope,
    ResourceType,
    SourceOfTruth,
    TargetType,
)

_FROZEN = {"frozen": True}


class ResourceRef(BaseModel):
    """Address of a resource in the hierarchy."""

    model_config = _FROZEN

    resource_type: ResourceType
    resource_id: str

    @classmethod
    def account(cls, account_id: str) -> ResourceRef:
        return cls(resource_type=ResourceType.ACCOUNT, resource_id=account_id)

    @classmethod
    def project(cls, project_id: str) -> ResourceRef:
        return cls(resource_type=ResourceType.PROJECT, resource_id=project_id)

    @classmethod
    def folder(cls, folder_id: str) -> ResourceRef:
        return cls(resource_type=ResourceType.FOLDER, resource_id=folder_id)

    def __str__(self) -> str:
        return f"{self.resource_type.value}:{self.resource_id}"


class ScopeTarget(BaseModel):
    """The (account, project) pair an API credential is checked against."""

    model_config = _FROZEN

    account_id: str
    project_id: str

    def __str__(self) -> str:
        return f"account:{self.account_id}/project:{self.project_id}"


class Account(BaseModel):
    """Root tenant boundary."""

    model_config = _FROZEN

    id: str
    name: str = ""


class Project(BaseModel):
    model_config = _FROZEN

    id: str
    account_id: str
    inheritance_mode: InheritanceMode = InheritanceMode.FULL
    name: str = ""


class Folder(BaseModel):
    """A folder owned by an account (baseline) or by a project.

    ``inherited_from_folder_id`` is a lookup-only back-reference to the
    account-level origin of a folder synced into a project.
    """

    model_config = _FROZEN

    id: str
    account_id: str
    project_id: Optional[str] = None
    owner_scope: OwnerScope = OwnerScope.PROJECT
    parent_folder_id: Optional[str] = None
    path: str = "/"
    status: FolderStatus = FolderStatus.EDITABLE
    source_of_truth: SourceOfTruth = SourceOfTruth.LOCAL
    inherited_from_folder_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_owner(self) -> Folder:
        if self.owner_scope == OwnerScope.PROJECT and not self.project_id:
            raise ValueError(f"Project-owned folder {self.id!r} requires project_id")
        if self.owner_scope == OwnerScope.ACCOUNT and self.project_id:
            raise ValueError(f"Account-owned folder {self.id!r} cannot have project_id")
        return self

    @property
    def meta(self) -> FolderMeta:
        return FolderMeta(
            source_of_truth=self.source_of_truth,
            status=self.status,
            inherited_from_folder_id=self.inherited_from_folder_id,
        )


class FolderMeta(BaseModel):
    """Inheritance state of a folder as seen by the resolver."""

    model_config = _FROZEN

    source_of_truth: SourceOfTruth
    status: FolderStatus
    inherited_from_folder_id: Optional[str] = None

    def violations(self) -> list[str]:
        """Return the folder invariants this state breaks (empty if consistent)."""
        problems: list[str] = []
        inherited = self.source_of_truth == SourceOfTruth.INHERITED
        if inherited and not self.inherited_from_folder_id:
            problems.append("inherited folder has no origin folder")
        if not inherited and self.inherited_from_folder_id:
            problems.append("local folder points to an origin folder")
        if not inherited and self.status == FolderStatus.READ_ONLY:
            problems.append("local folder is read-only")
        return problems


class PermissionGrant(BaseModel):
    """Explicit grant of a level to a user or group on one resource."""

    model_config = _FROZEN

    id: str
    resource_type: ResourceType
    resource_id: str
    target_type: TargetType
    target_id: str
    level: AccessLevel
    granted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    granted_by: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, v: Any) -> AccessLevel:
        level = AccessLevel.from_name(v) if isinstance(v, str) else AccessLevel(v)
        if level not in GRANTABLE_LEVELS:
            raise ValueError("A grant must carry read, write or admin")
        return level

    @property
    def key(self) -> tuple[ResourceType, str, TargetType, str]:
        """Uniqueness tuple: at most one grant per resource and target."""
        return (self.resource_type, self.resource_id, self.target_type, self.target_id)

    @property
    def resource(self) -> ResourceRef:
        return ResourceRef(resource_type=self.resource_type, resource_id=self.resource_id)


class Group(BaseModel):
    """Flat user group (no nesting)."""

    model_config = _FROZEN

    id: str
    account_id: str = ""
    name: str = ""
    member_user_ids: frozenset[str] = Field(default_factory=frozenset)


class AccountMember(BaseModel):
    """Membership of a user in an account, with its role."""

    model_config = _FROZEN

    account_id: str
    user_id: str
    role: AccountRole = AccountRole.MEMBER


def member_grant(member: AccountMember, *, granted_by: str = "") -> PermissionGrant:
    """Express an account membership as the equivalent account-level grant."""
    return PermissionGrant(
        id=f"member:{member.account_id}:{member.user_id}",
        resource_type=ResourceType.ACCOUNT,
        resource_id=member.account_id,
        target_type=TargetType.USER,
        target_id=member.user_id,
        level=ACCOUNT_ROLE_LEVELS[member.role],
        granted_by=granted_by,
    )


__all__ = [
    "Account",
    "AccountMember",
    "Folder",
    "FolderMeta",
    "Group",
    "PermissionGrant",
    "Project",
    "ResourceRef",
    "ScopeTarget",
    "member_grant",
]
