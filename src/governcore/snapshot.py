"""In-memory snapshot of the governance data and the sources that serve it.

Provides:
- ``GovernanceSnapshot``: immutable ResourceGraph + GrantStore + GroupIndex
  built from plain entity lists, one generation of the upstream data.
- ``StaticSnapshotSource``: always serves the same snapshot.
- ``VersionedSnapshotSource``: serves the current generation and swaps in
  new ones atomically.

A check reads every provider from a single snapshot, so it can never observe
a grant from one write together with an inheritance flip from another.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from .exceptions import IntegrityError, NotFoundError
from .interfaces import Snapshot, SnapshotSource
from .models import Account, Folder, Group, PermissionGrant, Project, ResourceRef
from .permissions.constants import OwnerScope, ResourceType

logger = logging.getLogger(__name__)


class GovernanceSnapshot(Snapshot):
    """Immutable view of accounts, projects, folders, grants and groups.

    Grants are deduplicated on construction: a later grant for the same
    (resource_type, resource_id, target_type, target_id) replaces the earlier
    one, so the resolver never sees duplicates.

    Example::

        snap = GovernanceSnapshot(
            accounts=[Account(id="a1")],
            projects=[Project(id="p1", account_id="a1")],
            grants=[PermissionGrant(id="g1", resource_type="project",
                                    resource_id="p1", target_type="user",
                                    target_id="u1", level="read")],
        )
        snap.grants_on(ResourceType.PROJECT, "p1")  # frozenset({<g1>})
    """

    def __init__(
        self,
        *,
        accounts: Iterable[Account] = (),
        projects: Iterable[Project] = (),
        folders: Iterable[Folder] = (),
        grants: Iterable[PermissionGrant] = (),
        groups: Iterable[Group] = (),
        generation: int = 0,
    ) -> None:
        self._accounts = {a.id: a for a in accounts}
        self._projects = {p.id: p for p in projects}
        self._folders = {f.id: f for f in folders}
        self._groups = {g.id: g for g in groups}
        self._generation = generation

        unique: dict[tuple, PermissionGrant] = {}
        for grant in grants:
            if grant.key in unique:
                logger.debug("Grant %s replaces %s on %s", grant.id, unique[grant.key].id, grant.resource)
                # Re-insert so the surviving grant keeps last-write order.
                del unique[grant.key]
            unique[grant.key] = grant
        self._grants = unique

        by_resource: dict[tuple[ResourceType, str], set[PermissionGrant]] = {}
        for grant in unique.values():
            by_resource.setdefault((grant.resource_type, grant.resource_id), set()).add(grant)
        self._by_resource = {k: frozenset(v) for k, v in by_resource.items()}

        memberships: dict[str, set[str]] = {}
        for group in self._groups.values():
            for user_id in group.member_user_ids:
                memberships.setdefault(user_id, set()).add(group.id)
        self._memberships = {k: frozenset(v) for k, v in memberships.items()}

    @property
    def generation(self) -> int:
        return self._generation

    # ── ResourceGraph ────────────────────────────────────────────

    def account(self, account_id: str) -> Account:
        try:
            return self._accounts[account_id]
        except KeyError:
            raise NotFoundError(f"Account not found: {account_id}", resource=f"account:{account_id}") from None

    def project(self, project_id: str) -> Project:
        try:
            return self._projects[project_id]
        except KeyError:
            raise NotFoundError(f"Project not found: {project_id}", resource=f"project:{project_id}") from None

    def folder(self, folder_id: str) -> Folder:
        try:
            return self._folders[folder_id]
        except KeyError:
            raise NotFoundError(f"Folder not found: {folder_id}", resource=f"folder:{folder_id}") from None

    def ancestors_of(self, resource: ResourceRef) -> list[ResourceRef]:
        if resource.resource_type == ResourceType.ACCOUNT:
            self.account(resource.resource_id)
            return [resource]

        if resource.resource_type == ResourceType.PROJECT:
            project = self.project(resource.resource_id)
            return [resource, self._parent_account(project.account_id, resource)]

        folder = self.folder(resource.resource_id)
        chain = [resource]
        seen = {folder.id}
        current = folder
        while current.parent_folder_id is not None:
            parent_id = current.parent_folder_id
            if parent_id in seen:
                raise IntegrityError(
                    f"Cyclic folder parents at {parent_id}",
                    resource=str(resource),
                    cycle=sorted(seen),
                )
            if parent_id not in self._folders:
                raise IntegrityError(f"Folder {current.id} has dangling parent {parent_id}", resource=str(resource))
            parent = self._folders[parent_id]
            if (parent.account_id, parent.project_id) != (current.account_id, current.project_id):
                raise IntegrityError(
                    f"Folder {current.id} and its parent {parent_id} belong to different owners",
                    resource=str(resource),
                )
            seen.add(parent_id)
            current = parent
            chain.append(ResourceRef.folder(parent_id))

        if folder.owner_scope == OwnerScope.PROJECT:
            project = self._projects.get(folder.project_id)
            if project is None:
                raise IntegrityError(
                    f"Folder {folder.id} belongs to missing project {folder.project_id}",
                    resource=str(resource),
                )
            if project.account_id != folder.account_id:
                raise IntegrityError(
                    f"Folder {folder.id} is in account {folder.account_id} but its project "
                    f"{project.id} is in account {project.account_id}",
                    resource=str(resource),
                )
            chain.append(ResourceRef.project(folder.project_id))
        chain.append(self._parent_account(folder.account_id, resource))
        return chain

    def _parent_account(self, account_id: str, child: ResourceRef) -> ResourceRef:
        if account_id not in self._accounts:
            raise IntegrityError(f"{child} belongs to missing account {account_id}", resource=str(child))
        return ResourceRef.account(account_id)

    # ── GrantStore ───────────────────────────────────────────────

    def grants_on(self, resource_type: ResourceType, resource_id: str) -> frozenset[PermissionGrant]:
        return self._by_resource.get((ResourceType(resource_type), resource_id), frozenset())

    # ── GroupIndex ───────────────────────────────────────────────

    def groups_of(self, user_id: str) -> frozenset[str]:
        return self._memberships.get(user_id, frozenset())

    # ── Derivation (new generations) ─────────────────────────────

    def _derive(self, **changes) -> GovernanceSnapshot:
        fields = {
            "accounts": self._accounts.values(),
            "projects": self._projects.values(),
            "folders": self._folders.values(),
            "grants": self._grants.values(),
            "groups": self._groups.values(),
        }
        fields.update(changes)
        return GovernanceSnapshot(generation=self._generation + 1, **fields)

    def with_grant(self, grant: PermissionGrant) -> GovernanceSnapshot:
        """New generation with ``grant`` added (replacing any same-target grant)."""
        return self._derive(grants=[*self._grants.values(), grant])

    def without_grant(self, grant_id: str) -> GovernanceSnapshot:
        return self._derive(grants=[g for g in self._grants.values() if g.id != grant_id])

    def with_project(self, project: Project) -> GovernanceSnapshot:
        """New generation with ``project`` added or replaced (e.g. a mode switch)."""
        return self._derive(projects=[*(p for p in self._projects.values() if p.id != project.id), project])

    def with_folder(self, folder: Folder) -> GovernanceSnapshot:
        return self._derive(folders=[*(f for f in self._folders.values() if f.id != folder.id), folder])

    def with_group(self, group: Group) -> GovernanceSnapshot:
        return self._derive(groups=[*(g for g in self._groups.values() if g.id != group.id), group])

    def __repr__(self) -> str:
        return (
            f"GovernanceSnapshot(generation={self._generation}, accounts={len(self._accounts)}, "
            f"projects={len(self._projects)}, folders={len(self._folders)}, grants={len(self._grants)})"
        )


class StaticSnapshotSource(SnapshotSource):
    def __init__(self, snapshot: Snapshot) -> None:
        self._snapshot = snapshot

    def snapshot(self) -> Snapshot:
        return self._snapshot


class VersionedSnapshotSource(SnapshotSource):
    """Current generation holder with atomic swaps.

    Readers take whichever generation is current when their check starts and
    keep it for the whole check; publishing never disturbs a check in flight.
    """

    def __init__(self, initial: GovernanceSnapshot | None = None) -> None:
        self._current = initial or GovernanceSnapshot()
        self._lock = threading.Lock()

    def snapshot(self) -> GovernanceSnapshot:
        with self._lock:
            return self._current

    def publish(self, snapshot: GovernanceSnapshot) -> None:
        with self._lock:
            if snapshot.generation <= self._current.generation:
                logger.warning(
                    "Publishing generation %d over newer-or-equal generation %d",
                    snapshot.generation,
                    self._current.generation,
                )
            self._current = snapshot

    def update(self, change: Callable[[GovernanceSnapshot], GovernanceSnapshot]) -> GovernanceSnapshot:
        """Apply ``change`` to the current generation and publish the result."""
        with self._lock:
            self._current = change(self._current)
            return self._current


__all__ = [
    "GovernanceSnapshot",
    "StaticSnapshotSource",
    "VersionedSnapshotSource",
]
