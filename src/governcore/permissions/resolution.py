"""Effective permission resolution for user principals.

Reconciles direct grants, group grants, account inheritance and folder
inheritance into one ``AccessLevel``:

1. Candidates on a resource are the grants targeting the user plus the grants
   targeting any of the user's groups.
2. A project adds its account's candidates only under ``full`` inheritance.
3. A ``local`` folder stands alone. An ``inherited`` folder adds the
   candidates of its origin folder chain, whatever the project mode.
4. The level is the maximum over all candidates (most permissive wins);
   no candidates resolves to ``AccessLevel.NONE``.

The engine is read-only over the providers it is built with and holds no
state between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from ..exceptions import IntegrityError
from ..interfaces import GrantStore, GroupIndex, ResourceGraph, Snapshot
from ..models import FolderMeta, PermissionGrant, ResourceRef
from ..principals import UserPrincipal
from .constants import AccessLevel, InheritanceMode, OwnerScope, ResourceType, SourceOfTruth, TargetType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of one resolution.

    ``contributing_grants`` are all grants that attained ``level``; ties are
    reported together, in a stable order.
    """

    resource: ResourceRef
    level: AccessLevel
    contributing_grants: tuple[PermissionGrant, ...] = ()

    @property
    def contributing_grant_ids(self) -> tuple[str, ...]:
        return tuple(g.id for g in self.contributing_grants)

    @property
    def granted(self) -> bool:
        return self.level > AccessLevel.NONE


def _grant_order(grant: PermissionGrant) -> tuple[str, ...]:
    return (
        grant.resource_type.value,
        grant.resource_id,
        grant.target_type.value,
        grant.target_id,
        grant.id,
    )


def merge_grants(grants: Iterable[PermissionGrant]) -> tuple[AccessLevel, tuple[PermissionGrant, ...]]:
    """Monotonic merge: the maximum level and every grant attaining it.

    Example::

        merge_grants([])                    # (AccessLevel.NONE, ())
        merge_grants([read_g, admin_g])     # (AccessLevel.ADMIN, (admin_g,))
    """
    grants = list(grants)
    if not grants:
        return AccessLevel.NONE, ()
    level = max(g.level for g in grants)
    top = sorted((g for g in grants if g.level == level), key=_grant_order)
    return AccessLevel(level), tuple(top)


class ResolutionEngine:
    """Resolves a user's effective level on an account, project or folder.

    Args:
        graph: Hierarchy view (must be one consistent snapshot).
        grants: Grant lookup over the same snapshot.
        groups: Group membership over the same snapshot.

    Example::

        engine = ResolutionEngine.from_snapshot(snapshot)
        result = engine.resolve(UserPrincipal("u1"), ResourceRef.folder("f1"))
        result.level                  # AccessLevel.ADMIN
        result.contributing_grant_ids # ("g-origin-admin",)
    """

    def __init__(self, graph: ResourceGraph, grants: GrantStore, groups: GroupIndex) -> None:
        self._graph = graph
        self._grants = grants
        self._groups = groups

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> ResolutionEngine:
        return cls(snapshot, snapshot, snapshot)

    def resolve(self, principal: UserPrincipal, resource: ResourceRef) -> Resolution:
        """Compute the effective level of ``principal`` on ``resource``.

        Raises:
            NotFoundError: The resource (or an origin folder) does not exist.
            IntegrityError: Cyclic inheritance or an inconsistent folder state.
        """
        chain = self._graph.ancestors_of(resource)
        group_ids = self._groups.groups_of(principal.user_id)

        candidates = set(self._candidates(resource, principal.user_id, group_ids))

        if resource.resource_type == ResourceType.PROJECT:
            mode = self._graph.inheritance_mode_of(resource.resource_id)
            if mode == InheritanceMode.FULL:
                candidates.update(self._candidates(chain[-1], principal.user_id, group_ids))
        elif resource.resource_type == ResourceType.FOLDER:
            candidates.update(self._inherited_candidates(resource, chain, principal.user_id, group_ids))

        level, contributing = merge_grants(candidates)
        logger.debug(
            "Resolved %s on %s: %s (%d candidates, contributing=%s)",
            principal.user_id,
            resource,
            level.label,
            len(candidates),
            [g.id for g in contributing],
        )
        return Resolution(resource=resource, level=level, contributing_grants=contributing)

    # ── Internals ────────────────────────────────────────────────

    def _candidates(
        self,
        resource: ResourceRef,
        user_id: str,
        group_ids: frozenset[str],
    ) -> list[PermissionGrant]:
        return [
            grant
            for grant in self._grants.grants_on(resource.resource_type, resource.resource_id)
            if (grant.target_type == TargetType.USER and grant.target_id == user_id)
            or (grant.target_type == TargetType.GROUP and grant.target_id in group_ids)
        ]

    def _checked_meta(self, folder_id: str) -> FolderMeta:
        meta = self._graph.folder_meta(folder_id)
        problems = meta.violations()
        if problems:
            raise IntegrityError(
                f"Folder {folder_id} is inconsistent: {'; '.join(problems)}",
                resource=f"folder:{folder_id}",
                violations=problems,
            )
        return meta

    def _inherited_candidates(
        self,
        folder: ResourceRef,
        chain: list[ResourceRef],
        user_id: str,
        group_ids: frozenset[str],
    ) -> list[PermissionGrant]:
        meta = self._checked_meta(folder.resource_id)
        if meta.source_of_truth == SourceOfTruth.LOCAL:
            return []

        project = next((ref for ref in chain if ref.resource_type == ResourceType.PROJECT), None)
        if project is not None and self._graph.inheritance_mode_of(project.resource_id) == InheritanceMode.NONE:
            raise IntegrityError(
                f"Folder {folder.resource_id} is inherited inside {project}, which has no inheritance",
                resource=str(folder),
            )

        account_id = self._graph.folder(folder.resource_id).account_id
        found: list[PermissionGrant] = []
        visited = {folder.resource_id}
        origin_id = meta.inherited_from_folder_id
        while origin_id is not None:
            if origin_id in visited:
                raise IntegrityError(
                    f"Cyclic folder inheritance through {origin_id}",
                    resource=str(folder),
                    cycle=sorted(visited),
                )
            visited.add(origin_id)
            origin = self._graph.folder(origin_id)
            if origin.account_id != account_id:
                raise IntegrityError(
                    f"Origin folder {origin_id} is in account {origin.account_id}, not {account_id}",
                    resource=str(folder),
                )
            origin_meta = self._checked_meta(origin_id)
            if origin.owner_scope == OwnerScope.PROJECT and origin_meta.source_of_truth == SourceOfTruth.LOCAL:
                raise IntegrityError(
                    f"Origin folder {origin_id} is a local project folder",
                    resource=str(folder),
                )
            found.extend(self._candidates(ResourceRef.folder(origin_id), user_id, group_ids))
            if origin_meta.source_of_truth == SourceOfTruth.INHERITED:
                origin_id = origin_meta.inherited_from_folder_id
            else:
                origin_id = None
        return found


__all__ = ["Resolution", "ResolutionEngine", "merge_grants"]
