"""Permission catalog and role resolution.

Defines:
- Role: closed set of workspace roles (admin/member/guest)
- Permission: catalog of resource:action tokens
- ROLE_PERMISSIONS: Role → default permission sets
- PermissionCatalog: validated, immutable role map
- PermissionResolver: capability sets and point queries
"""

from .catalog import (
    CATALOG_VERSION,
    DEFAULT_CATALOG,
    ROLE_PERMISSIONS,
    PermissionCatalog,
    parse_permission,
)
from .constants import Permission, Role
from .resolver import MemberOverride, PermissionResolver

__all__ = [
    "CATALOG_VERSION",
    "DEFAULT_CATALOG",
    "ROLE_PERMISSIONS",
    "MemberOverride",
    "Permission",
    "PermissionCatalog",
    "PermissionResolver",
    "Role",
    "parse_permission",
]
