"""Shared fixtures: a small governance world covering all inheritance modes.

Account a1
├── baseline folders: origin (admin for u-origin), unrelated
├── p-none     (none)    → f-none-local
├── p-full     (full)    → f-full-inherited (from origin, read-only), f-full-local
└── p-partial  (partial) → f-partial-inherited (from origin), f-partial-local
Account a2
└── p-other    (full)
"""

from __future__ import annotations

import pytest

from governcore import (
    Account,
    Folder,
    FolderStatus,
    GovernanceSnapshot,
    Group,
    InheritanceMode,
    OwnerScope,
    PermissionGrant,
    Project,
    ResourceType,
    SourceOfTruth,
    TargetType,
)


def make_grant(
    grant_id: str,
    resource_type: ResourceType | str,
    resource_id: str,
    target_id: str,
    level: str,
    *,
    target_type: TargetType | str = TargetType.USER,
) -> PermissionGrant:
    return PermissionGrant(
        id=grant_id,
        resource_type=resource_type,
        resource_id=resource_id,
        target_type=target_type,
        target_id=target_id,
        level=level,
        granted_by="operator",
    )


def account_folder(folder_id: str, account_id: str = "a1") -> Folder:
    return Folder(id=folder_id, account_id=account_id, owner_scope=OwnerScope.ACCOUNT, path=f"/{folder_id}")


def local_folder(folder_id: str, project_id: str, account_id: str = "a1", **kwargs) -> Folder:
    return Folder(id=folder_id, account_id=account_id, project_id=project_id, path=f"/{folder_id}", **kwargs)


def inherited_folder(
    folder_id: str,
    project_id: str,
    origin_id: str,
    *,
    read_only: bool = True,
    account_id: str = "a1",
) -> Folder:
    return Folder(
        id=folder_id,
        account_id=account_id,
        project_id=project_id,
        path=f"/{folder_id}",
        source_of_truth=SourceOfTruth.INHERITED,
        status=FolderStatus.READ_ONLY if read_only else FolderStatus.EDITABLE,
        inherited_from_folder_id=origin_id,
    )


@pytest.fixture
def world() -> GovernanceSnapshot:
    return GovernanceSnapshot(
        accounts=[Account(id="a1", name="Acme"), Account(id="a2", name="Globex")],
        projects=[
            Project(id="p-none", account_id="a1", inheritance_mode=InheritanceMode.NONE),
            Project(id="p-full", account_id="a1", inheritance_mode=InheritanceMode.FULL),
            Project(id="p-partial", account_id="a1", inheritance_mode=InheritanceMode.PARTIAL),
            Project(id="p-other", account_id="a2", inheritance_mode=InheritanceMode.FULL),
        ],
        folders=[
            account_folder("origin"),
            account_folder("unrelated"),
            local_folder("f-none-local", "p-none"),
            inherited_folder("f-full-inherited", "p-full", "origin"),
            local_folder("f-full-local", "p-full"),
            inherited_folder("f-partial-inherited", "p-partial", "origin", read_only=False),
            local_folder("f-partial-local", "p-partial"),
        ],
        groups=[Group(id="g-eng", account_id="a1", member_user_ids={"u1", "u2"})],
        grants=[
            make_grant("g-origin-admin", ResourceType.FOLDER, "origin", "u-origin", "admin"),
            make_grant("g-unrelated-admin", ResourceType.FOLDER, "unrelated", "u-origin", "admin"),
        ],
    )
