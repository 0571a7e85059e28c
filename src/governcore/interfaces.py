from abc import ABC, abstractmethod
from typing import FrozenSet, List

from .models import Account, Folder, FolderMeta, PermissionGrant, Project, ResourceRef
from .permissions.constants import InheritanceMode, ResourceType


class ResourceGraph(ABC):
    """Point-in-time view of the Account/Project/Folder hierarchy."""

    @abstractmethod
    def account(self, account_id: str) -> Account:
        raise NotImplementedError

    @abstractmethod
    def project(self, project_id: str) -> Project:
        raise NotImplementedError

    @abstractmethod
    def folder(self, folder_id: str) -> Folder:
        raise NotImplementedError

    @abstractmethod
    def ancestors_of(self, resource: ResourceRef) -> List[ResourceRef]:
        """Ordered from ``resource`` itself up to its Account."""
        raise NotImplementedError

    def inheritance_mode_of(self, project_id: str) -> InheritanceMode:
        return self.project(project_id).inheritance_mode

    def folder_meta(self, folder_id: str) -> FolderMeta:
        return self.folder(folder_id).meta


class GrantStore(ABC):
    """Read side of the explicit grant records."""

    @abstractmethod
    def grants_on(self, resource_type: ResourceType, resource_id: str) -> FrozenSet[PermissionGrant]:
        """Empty set, never an error, when the resource carries no grants."""
        raise NotImplementedError


class GroupIndex(ABC):
    @abstractmethod
    def groups_of(self, user_id: str) -> FrozenSet[str]:
        """Unknown users belong to no groups."""
        raise NotImplementedError


class Snapshot(ResourceGraph, GrantStore, GroupIndex):
    """The three providers read from one consistent generation."""

    @property
    @abstractmethod
    def generation(self) -> int:
        raise NotImplementedError


class SnapshotSource(ABC):
    """Hands out the snapshot a single check runs against."""

    @abstractmethod
    def snapshot(self) -> Snapshot:
        raise NotImplementedError


__all__ = ["GrantStore", "GroupIndex", "ResourceGraph", "Snapshot", "SnapshotSource"]
