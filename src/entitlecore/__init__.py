from .config import DeploymentMode, EngineConfig, LogLevel, load_config_from_env
from .entitlements import (
    ENTITLEMENT_RULES,
    AuthorizationEngine,
    DecisionReason,
    EntitlementDecision,
    EntitlementGate,
    EntitlementRule,
    GatedAction,
    MemberPermissions,
    WorkspaceAccess,
)
from .exceptions import (
    CatalogViolationError,
    ConfigurationError,
    EntitleCoreError,
    InvalidInputError,
    PermissionDeniedError,
    StoreError,
)
from .logging import (
    DecisionFormatter,
    DecisionLoggerAdapter,
    get_decision_logger,
    safe_preview,
    setup_logging,
)
from .membership import (
    NOT_A_MEMBER,
    MemberStatus,
    Membership,
    MembershipStore,
    NotAMember,
    RoleContext,
)
from .permissions import (
    CATALOG_VERSION,
    DEFAULT_CATALOG,
    ROLE_PERMISSIONS,
    MemberOverride,
    Permission,
    PermissionCatalog,
    PermissionResolver,
    Role,
    parse_permission,
)
from .subscriptions import (
    ACTIVE_STATUSES,
    Plan,
    SeatCapacity,
    Subscription,
    SubscriptionEvaluator,
    SubscriptionStatus,
    SubscriptionStore,
    active_subscriptions,
    best_match,
    has_active_subscription,
    has_unlimited_seats,
    seat_capacity,
)

__all__ = [
    'ACTIVE_STATUSES',
    'CATALOG_VERSION',
    'DEFAULT_CATALOG',
    'ENTITLEMENT_RULES',
    'NOT_A_MEMBER',
    'ROLE_PERMISSIONS',
    'AuthorizationEngine',
    'CatalogViolationError',
    'ConfigurationError',
    'DecisionFormatter',
    'DecisionLoggerAdapter',
    'DecisionReason',
    'DeploymentMode',
    'EngineConfig',
    'EntitleCoreError',
    'EntitlementDecision',
    'EntitlementGate',
    'EntitlementRule',
    'GatedAction',
    'InvalidInputError',
    'LogLevel',
    'MemberOverride',
    'MemberPermissions',
    'MemberStatus',
    'Membership',
    'MembershipStore',
    'NotAMember',
    'Permission',
    'PermissionCatalog',
    'PermissionDeniedError',
    'PermissionResolver',
    'Plan',
    'Role',
    'RoleContext',
    'SeatCapacity',
    'StoreError',
    'Subscription',
    'SubscriptionEvaluator',
    'SubscriptionStatus',
    'SubscriptionStore',
    'WorkspaceAccess',
    'active_subscriptions',
    'best_match',
    'get_decision_logger',
    'has_active_subscription',
    'has_unlimited_seats',
    'load_config_from_env',
    'parse_permission',
    'safe_preview',
    'seat_capacity',
    'setup_logging',
]
