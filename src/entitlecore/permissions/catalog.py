"""Versioned permission catalog and the role → permission map.

Provides:
- ``CATALOG_VERSION`` — bumped whenever a token is added or removed.
- ``ROLE_PERMISSIONS`` — default grants per role.
- ``PermissionCatalog`` — validated, read-only view over a role map.
- ``DEFAULT_CATALOG`` — the process-wide instance, validated at import.
- ``parse_permission()`` — strict token coercion.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from ..exceptions import CatalogViolationError
from .constants import Permission, Role

logger = logging.getLogger(__name__)

CATALOG_VERSION = 2


def parse_permission(value: Permission | str) -> Permission:
    """Coerce a token into a catalog ``Permission``.

    Unknown tokens are programmer errors and raise instead of denying.

    Example::

        parse_permission("card:edit")    # Permission.CARD_EDIT
        parse_permission("card:archive") # CatalogViolationError
    """
    if isinstance(value, Permission):
        return value
    try:
        return Permission(value)
    except ValueError:
        logger.error("Permission token %r is not in catalog v%d", value, CATALOG_VERSION)
        raise CatalogViolationError(
            f"Unknown permission token: {value!r}",
            permission=value,
            catalog_version=CATALOG_VERSION,
        ) from None


# ── Role → Permission Map ───────────────────────────────

_GUEST: tuple[Permission, ...] = (
    Permission.WORKSPACE_VIEW,
    Permission.BOARD_VIEW,
    Permission.LIST_VIEW,
    Permission.CARD_VIEW,
    Permission.COMMENT_VIEW,
    Permission.COMMENT_CREATE,
)

_MEMBER: tuple[Permission, ...] = _GUEST + (
    Permission.BOARD_CREATE,
    Permission.BOARD_EDIT,
    Permission.LIST_CREATE,
    Permission.LIST_EDIT,
    Permission.LIST_DELETE,
    Permission.CARD_CREATE,
    Permission.CARD_EDIT,
    Permission.CARD_DELETE,
    Permission.COMMENT_EDIT,
    Permission.COMMENT_DELETE,
    Permission.MEMBER_VIEW,
)

ROLE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.ADMIN: tuple(Permission),
    Role.MEMBER: _MEMBER,
    Role.GUEST: _GUEST,
}


class PermissionCatalog:
    """Immutable, validated role → permission table.

    Construction checks, once:
    1. every ``Role`` is mapped,
    2. every role's set is non-empty,
    3. every token belongs to the catalog,
    4. the admin set is a superset of every other role's set.

    Any failure raises :class:`CatalogViolationError`, so a bad table stops
    the process at startup instead of producing wrong answers later.

    Args:
        role_permissions: Mapping of role → granted tokens (enum or string).
        version: Catalog version the table was written against.
    """

    __slots__ = ("_version", "_grants")

    def __init__(
        self,
        role_permissions: Mapping[Role | str, Iterable[Permission | str]],
        *,
        version: int = CATALOG_VERSION,
    ) -> None:
        if version != CATALOG_VERSION:
            raise CatalogViolationError(
                f"Role map targets catalog v{version}, runtime catalog is v{CATALOG_VERSION}",
                version=version,
            )

        grants: dict[Role, frozenset[Permission]] = {}
        for raw_role, tokens in role_permissions.items():
            role = Role.parse(raw_role)
            if role is None:
                raise CatalogViolationError(f"Unknown role in permission map: {raw_role!r}", role=raw_role)
            if role in grants:
                raise CatalogViolationError(f"Duplicate role in permission map: {raw_role!r}", role=role.value)
            grants[role] = frozenset(parse_permission(token) for token in tokens)

        self._version = version
        self._grants: Mapping[Role, frozenset[Permission]] = MappingProxyType(grants)
        self._validate()

    def _validate(self) -> None:
        missing = [role.value for role in Role if role not in self._grants]
        if missing:
            raise CatalogViolationError(f"Roles without a permission set: {missing}", roles=missing)

        empty = [role.value for role, perms in self._grants.items() if not perms]
        if empty:
            raise CatalogViolationError(f"Roles with an empty permission set: {empty}", roles=empty)

        admin = self._grants[Role.ADMIN]
        for role, perms in self._grants.items():
            excess = perms - admin
            if excess:
                raise CatalogViolationError(
                    f"Role {role.value!r} holds permissions admin lacks: {sorted(p.value for p in excess)}",
                    role=role.value,
                )

    @property
    def version(self) -> int:
        return self._version

    @property
    def roles(self) -> tuple[Role, ...]:
        return tuple(self._grants)

    @property
    def permissions(self) -> frozenset[Permission]:
        """Every token in the catalog, granted to a role or not."""
        return frozenset(Permission)

    def permissions_for(self, role: Role) -> frozenset[Permission]:
        return self._grants[role]

    def __contains__(self, token: object) -> bool:
        return isinstance(token, Permission) or (isinstance(token, str) and token in Permission._value2member_map_)

    def __repr__(self) -> str:
        return f"PermissionCatalog(version={self._version}, roles={[r.value for r in self._grants]})"


DEFAULT_CATALOG = PermissionCatalog(ROLE_PERMISSIONS)


__all__ = [
    "CATALOG_VERSION",
    "DEFAULT_CATALOG",
    "ROLE_PERMISSIONS",
    "PermissionCatalog",
    "parse_permission",
]
