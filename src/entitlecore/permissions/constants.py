"""Roles and permission tokens.

Provides:
- ``Role`` — the closed set of workspace roles, ranked by privilege.
- ``Permission`` — every grantable ``resource:action`` token.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of an actor inside one workspace.

    Exactly one per (actor, workspace) pair. Never inferred: a missing or
    unknown role is "not a member", not a fallback to ``GUEST``.
    """

    ADMIN = "admin"
    MEMBER = "member"
    GUEST = "guest"

    @property
    def rank(self) -> int:
        """Privilege rank, higher is stronger."""
        return _ROLE_RANK[self]

    @classmethod
    def parse(cls, value: object) -> Role | None:
        """Coerce a role value; anything outside the closed set yields None."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None

    @classmethod
    def from_store(cls, value: object) -> Role | None:
        """Exact match for roles read from persisted memberships.

        Unlike :meth:`parse`, no case folding or trimming: a stored ``" Admin "``
        is corrupt data and resolves to None.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls._value2member_map_.get(value)
        return None


_ROLE_RANK = {
    Role.GUEST: 0,
    Role.MEMBER: 1,
    Role.ADMIN: 2,
}


class Permission(str, Enum):
    """Permission tokens.

    Format: ``{resource}:{action}``
    """

    # ── Workspace ───────────────────────────────────────
    WORKSPACE_VIEW = "workspace:view"
    WORKSPACE_EDIT = "workspace:edit"
    WORKSPACE_DELETE = "workspace:delete"

    # ── Boards ──────────────────────────────────────────
    BOARD_VIEW = "board:view"
    BOARD_CREATE = "board:create"
    BOARD_EDIT = "board:edit"
    BOARD_DELETE = "board:delete"

    # ── Lists ───────────────────────────────────────────
    LIST_VIEW = "list:view"
    LIST_CREATE = "list:create"
    LIST_EDIT = "list:edit"
    LIST_DELETE = "list:delete"

    # ── Cards ───────────────────────────────────────────
    CARD_VIEW = "card:view"
    CARD_CREATE = "card:create"
    CARD_EDIT = "card:edit"
    CARD_DELETE = "card:delete"

    # ── Comments ────────────────────────────────────────
    COMMENT_VIEW = "comment:view"
    COMMENT_CREATE = "comment:create"
    COMMENT_EDIT = "comment:edit"
    COMMENT_DELETE = "comment:delete"

    # ── Members ─────────────────────────────────────────
    MEMBER_VIEW = "member:view"
    MEMBER_INVITE = "member:invite"
    MEMBER_EDIT = "member:edit"
    MEMBER_REMOVE = "member:remove"

    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]


__all__ = [
    "Permission",
    "Role",
]
