"""Role → capability resolution and point queries.

Everything here is a lookup into a :class:`PermissionCatalog`. Named predicates
(``can_edit_card`` …) are single ``has(role, token)`` calls; anything needing
subscription state belongs to :mod:`entitlecore.entitlements`.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import BaseModel

from ..exceptions import PermissionDeniedError
from .catalog import DEFAULT_CATALOG, PermissionCatalog, parse_permission
from .constants import Permission, Role

logger = logging.getLogger(__name__)

RoleLike = Optional[Role | str]


class MemberOverride(BaseModel):
    """Per-member grant (``granted=True``) or revocation of a single token."""

    permission: str
    granted: bool = True

    model_config = {"frozen": True}


class PermissionResolver:
    """Computes capability sets for roles.

    Unknown or absent roles resolve to no capabilities (default-deny).
    Unknown permission tokens raise :class:`CatalogViolationError`.
    """

    __slots__ = ("_catalog",)

    def __init__(self, catalog: PermissionCatalog = DEFAULT_CATALOG) -> None:
        self._catalog = catalog

    @property
    def catalog(self) -> PermissionCatalog:
        return self._catalog

    def capabilities_of(self, role: RoleLike) -> frozenset[Permission]:
        """Permission tokens granted to ``role`` (empty for non-roles)."""
        parsed = Role.parse(role)
        if parsed is None:
            return frozenset()
        return self._catalog.permissions_for(parsed)

    def has(self, role: RoleLike, permission: Permission | str) -> bool:
        """True iff ``permission`` is in ``capabilities_of(role)``.

        The token is validated before the role so that a bad token fails loudly
        even for callers without a role.
        """
        token = parse_permission(permission)
        return token in self.capabilities_of(role)

    def effective_permissions(
        self,
        role: RoleLike,
        overrides: Iterable[MemberOverride] = (),
    ) -> frozenset[Permission]:
        """Role grants adjusted by per-member overrides.

        Overrides apply in order, so a later override for the same token wins.
        Overrides never give capabilities to a non-role. Stored overrides naming
        a token that has left the catalog are skipped: a stale grant grants
        nothing, a stale revoke had nothing to remove.
        """
        base = self.capabilities_of(role)
        if not base:
            return base

        effective = set(base)
        for override in overrides:
            try:
                token = Permission(override.permission)
            except ValueError:
                logger.warning(
                    "Skipping override for unknown permission %r (catalog v%d)",
                    override.permission,
                    self._catalog.version,
                )
                continue
            if override.granted:
                effective.add(token)
            else:
                effective.discard(token)
        return frozenset(effective)

    def assert_permission(
        self,
        role: RoleLike,
        permission: Permission | str,
        overrides: Iterable[MemberOverride] = (),
    ) -> None:
        """Raise :class:`PermissionDeniedError` unless the permission is held."""
        token = parse_permission(permission)
        if token not in self.effective_permissions(role, overrides):
            raise PermissionDeniedError(
                f"Missing permission: {token.value}",
                permission=token.value,
                role=getattr(role, "value", role),
            )

    def role_at_least(self, role: RoleLike, minimum: Role) -> bool:
        """Rank comparison, False for non-roles."""
        parsed = Role.parse(role)
        return parsed is not None and parsed.rank >= minimum.rank

    def can_manage_member(self, actor_role: RoleLike, target_role: RoleLike) -> bool:
        """Whether an actor may edit another member's role or overrides.

        Requires ``member:edit`` and a rank no lower than the target's.
        """
        target = Role.parse(target_role)
        if target is None or not self.has(actor_role, Permission.MEMBER_EDIT):
            return False
        return self.role_at_least(actor_role, target)

    # ── Named predicates ────────────────────────────────

    def can_view_card(self, role: RoleLike) -> bool:
        return self.has(role, Permission.CARD_VIEW)

    def can_create_card(self, role: RoleLike) -> bool:
        return self.has(role, Permission.CARD_CREATE)

    def can_edit_card(self, role: RoleLike) -> bool:
        return self.has(role, Permission.CARD_EDIT)

    def can_delete_card(self, role: RoleLike) -> bool:
        return self.has(role, Permission.CARD_DELETE)

    def can_create_list(self, role: RoleLike) -> bool:
        return self.has(role, Permission.LIST_CREATE)

    def can_edit_list(self, role: RoleLike) -> bool:
        return self.has(role, Permission.LIST_EDIT)

    def can_delete_list(self, role: RoleLike) -> bool:
        return self.has(role, Permission.LIST_DELETE)

    def can_create_board(self, role: RoleLike) -> bool:
        return self.has(role, Permission.BOARD_CREATE)

    def can_edit_board(self, role: RoleLike) -> bool:
        return self.has(role, Permission.BOARD_EDIT)

    def can_delete_board(self, role: RoleLike) -> bool:
        return self.has(role, Permission.BOARD_DELETE)

    def can_view_comment(self, role: RoleLike) -> bool:
        return self.has(role, Permission.COMMENT_VIEW)

    def can_create_comment(self, role: RoleLike) -> bool:
        return self.has(role, Permission.COMMENT_CREATE)

    def can_edit_comment(self, role: RoleLike) -> bool:
        return self.has(role, Permission.COMMENT_EDIT)

    def can_delete_comment(self, role: RoleLike) -> bool:
        return self.has(role, Permission.COMMENT_DELETE)

    def can_invite_member(self, role: RoleLike) -> bool:
        # Role half only; the hosted plan check lives in EntitlementGate.
        return self.has(role, Permission.MEMBER_INVITE)

    def can_edit_member(self, role: RoleLike) -> bool:
        return self.has(role, Permission.MEMBER_EDIT)

    def can_remove_member(self, role: RoleLike) -> bool:
        return self.has(role, Permission.MEMBER_REMOVE)

    def can_view_workspace(self, role: RoleLike) -> bool:
        return self.has(role, Permission.WORKSPACE_VIEW)

    def can_edit_workspace(self, role: RoleLike) -> bool:
        return self.has(role, Permission.WORKSPACE_EDIT)


__all__ = [
    "MemberOverride",
    "PermissionResolver",
]
