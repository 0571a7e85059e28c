"""Principals: the acting identities the facade authorizes.

``Principal`` is a tagged union. Each variant carries a ``kind`` so callers
and the facade dispatch on the tag rather than on concrete classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .credentials import MCPKey


class PrincipalKind(str, Enum):
    USER = "user"
    CREDENTIAL = "credential"


@dataclass(frozen=True)
class UserPrincipal:
    """A resolved human user; group memberships come from the GroupIndex."""

    user_id: str
    kind: PrincipalKind = field(default=PrincipalKind.USER, init=False)

    @property
    def principal_id(self) -> str:
        return self.user_id


@dataclass(frozen=True)
class CredentialPrincipal:
    """A caller presenting an MCP key."""

    key: MCPKey
    kind: PrincipalKind = field(default=PrincipalKind.CREDENTIAL, init=False)

    @property
    def principal_id(self) -> str:
        return self.key.id


Principal = Union[UserPrincipal, CredentialPrincipal]


__all__ = [
    "CredentialPrincipal",
    "Principal",
    "PrincipalKind",
    "UserPrincipal",
]
