"""Effective role of an actor inside a workspace.

The membership store owns roles; this module only reads a snapshot and turns
it into either a ``Role`` or the explicit ``NOT_A_MEMBER`` outcome.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .exceptions import ConfigurationError, InvalidInputError
from .permissions import MemberOverride, Role

logger = logging.getLogger(__name__)


class MemberStatus(str, Enum):
    """Lifecycle of a workspace membership."""

    INVITED = "invited"
    ACTIVE = "active"
    REMOVED = "removed"


class _NotAMember:
    """Explicit "no role in this workspace" outcome."""

    _instance: Optional[_NotAMember] = None

    def __new__(cls) -> _NotAMember:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_A_MEMBER"


NOT_A_MEMBER = _NotAMember()

NotAMember = _NotAMember


class Membership(BaseModel):
    """Read-only membership snapshot supplied by the membership store.

    ``role`` stays a plain string here: the store may hold values this engine
    does not know, and those must resolve to NOT_A_MEMBER rather than fail parsing.
    """

    actor_id: str
    workspace_id: str
    role: str
    status: str = MemberStatus.ACTIVE.value
    overrides: tuple[MemberOverride, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}


class MembershipStore(ABC):
    """Membership data provider (database, cache, API …)."""

    @abstractmethod
    async def lookup_membership(self, actor_id: str, workspace_id: str) -> Optional[Membership]:
        """Return the actor's membership in the workspace, or None."""
        raise NotImplementedError


def require_identifier(value: object, name: str) -> str:
    """Reject blank identifiers before they reach any resolver."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{name} must be a non-empty string", field=name)
    return value


class RoleContext:
    """Resolves ``Role | NOT_A_MEMBER`` for an actor in a workspace."""

    def __init__(self, store: Optional[MembershipStore] = None) -> None:
        self._store = store

    @staticmethod
    def resolve_role(
        membership: Optional[Membership],
        *,
        actor_id: Optional[str] = None,
        workspace_id: Optional[str] = None,
    ) -> Role | _NotAMember:
        """Turn a snapshot into a role.

        Only active memberships count. A snapshot that belongs to another actor
        or workspace than the one asked about is treated as absent.
        """
        if membership is None:
            return NOT_A_MEMBER
        if actor_id is not None and membership.actor_id != actor_id:
            return NOT_A_MEMBER
        if workspace_id is not None and membership.workspace_id != workspace_id:
            return NOT_A_MEMBER
        if membership.status != MemberStatus.ACTIVE.value:
            return NOT_A_MEMBER

        role = Role.from_store(membership.role)
        if role is None:
            logger.warning(
                "Membership %s/%s carries unknown role %r",
                membership.workspace_id,
                membership.actor_id,
                membership.role,
            )
            return NOT_A_MEMBER
        return role

    async def lookup(self, actor_id: str, workspace_id: str) -> Optional[Membership]:
        """Validated store lookup, returning the raw snapshot."""
        require_identifier(actor_id, "actor_id")
        require_identifier(workspace_id, "workspace_id")
        if self._store is None:
            raise ConfigurationError("RoleContext has no membership store")
        return await self._store.lookup_membership(actor_id, workspace_id)

    async def resolve(self, actor_id: str, workspace_id: str) -> Role | _NotAMember:
        """Look the actor up in the store and resolve its role."""
        membership = await self.lookup(actor_id, workspace_id)
        return self.resolve_role(membership, actor_id=actor_id, workspace_id=workspace_id)


__all__ = [
    "NOT_A_MEMBER",
    "MemberStatus",
    "Membership",
    "MembershipStore",
    "NotAMember",
    "RoleContext",
    "require_identifier",
]
