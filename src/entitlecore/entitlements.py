"""Entitlement gate and the engine facade.

Provides:
- ``GatedAction`` / ``ENTITLEMENT_RULES`` — actions that need a plan on hosted deployments.
- ``EntitlementGate`` — pure decision over role + subscriptions + deployment mode.
- ``WorkspaceAccess`` — request-scoped snapshot answering permission and entitlement queries.
- ``AuthorizationEngine`` — fetches snapshots from the stores and wraps the gate.

Decision table for a gated action:
1. Role check: the actor must hold the action's permission token. Fails first
   and short-circuits, so plan state is never consulted for such actors.
2. Self-hosted: allowed (no billing relationship to enforce).
3. Hosted: allowed iff an active subscription on the required plan exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from .config import DeploymentMode, EngineConfig
from .exceptions import CatalogViolationError, ConfigurationError
from .logging import get_decision_logger
from .membership import NOT_A_MEMBER, MembershipStore, RoleContext, require_identifier
from .permissions import MemberOverride, Permission, PermissionResolver, Role, parse_permission
from .subscriptions import Plan, Subscription, SubscriptionEvaluator, SubscriptionStore

logger = logging.getLogger(__name__)


class GatedAction(str, Enum):
    """Actions that depend on the workspace's plan when hosted."""

    INVITE_MEMBER = "invite_member"


@dataclass(frozen=True)
class EntitlementRule:
    """Base permission plus the plan an action requires on hosted deployments."""

    permission: Permission
    plan: Plan


ENTITLEMENT_RULES: dict[GatedAction, EntitlementRule] = {
    GatedAction.INVITE_MEMBER: EntitlementRule(permission=Permission.MEMBER_INVITE, plan=Plan.TEAM),
}


class DecisionReason(str, Enum):
    NOT_A_MEMBER = "not_a_member"
    MISSING_PERMISSION = "missing_permission"
    SELF_HOSTED = "self_hosted"
    ENTITLED = "entitled"
    NO_ACTIVE_SUBSCRIPTION = "no_active_subscription"


@dataclass(frozen=True)
class EntitlementDecision:
    """Derived allow/deny judgment. Never stored, recomputed per query."""

    action: GatedAction
    allowed: bool
    reason: DecisionReason

    def __bool__(self) -> bool:
        return self.allowed


def parse_action(action: GatedAction | str) -> GatedAction:
    if isinstance(action, GatedAction):
        return action
    try:
        return GatedAction(action)
    except ValueError:
        raise CatalogViolationError(f"Unknown gated action: {action!r}", action=action) from None


class EntitlementGate:
    """Combines role capabilities, subscription state and deployment mode.

    Args:
        mode: Process-wide deployment mode.
        resolver: Role capability resolver.
        evaluator: Subscription evaluator.
        rules: Action → rule table (defaults to ``ENTITLEMENT_RULES``).
    """

    def __init__(
        self,
        mode: DeploymentMode,
        resolver: Optional[PermissionResolver] = None,
        evaluator: Optional[SubscriptionEvaluator] = None,
        rules: Optional[dict[GatedAction, EntitlementRule]] = None,
    ) -> None:
        try:
            self._mode = DeploymentMode.parse(mode)
        except ValueError as e:
            raise ConfigurationError(str(e), deployment_mode=str(mode)) from e
        self._resolver = resolver or PermissionResolver()
        self._evaluator = evaluator or SubscriptionEvaluator()
        self._rules = dict(ENTITLEMENT_RULES if rules is None else rules)

    @property
    def mode(self) -> DeploymentMode:
        return self._mode

    @property
    def resolver(self) -> PermissionResolver:
        return self._resolver

    def decide(
        self,
        role: Optional[Role | str],
        action: GatedAction | str,
        subscriptions: Optional[Iterable[Subscription]] = None,
        overrides: Iterable[MemberOverride] = (),
    ) -> EntitlementDecision:
        """Full decision for ``action``; ``subscriptions=None`` counts as empty."""
        gated = parse_action(action)
        rule = self._rules.get(gated)
        if rule is None:
            raise CatalogViolationError(f"No entitlement rule for action: {gated.value}", action=gated.value)

        if Role.parse(role) is None:
            return EntitlementDecision(gated, False, DecisionReason.NOT_A_MEMBER)

        if rule.permission not in self._resolver.effective_permissions(role, overrides):
            return EntitlementDecision(gated, False, DecisionReason.MISSING_PERMISSION)

        if self._mode == DeploymentMode.SELF_HOSTED:
            return EntitlementDecision(gated, True, DecisionReason.SELF_HOSTED)

        active = self._evaluator.active_subscriptions(subscriptions)
        if self._evaluator.best_match(active, rule.plan) is None:
            return EntitlementDecision(gated, False, DecisionReason.NO_ACTIVE_SUBSCRIPTION)
        return EntitlementDecision(gated, True, DecisionReason.ENTITLED)

    def is_entitled(
        self,
        role: Optional[Role | str],
        action: GatedAction | str,
        subscriptions: Optional[Iterable[Subscription]] = None,
        overrides: Iterable[MemberOverride] = (),
    ) -> bool:
        return self.decide(role, action, subscriptions, overrides).allowed


@dataclass(frozen=True)
class MemberPermissions:
    """Role and effective permissions of an actor in a workspace."""

    role: Optional[Role]
    permissions: frozenset[Permission] = frozenset()


@dataclass(frozen=True)
class WorkspaceAccess:
    """Role and subscriptions fetched once for a single request.

    Do not keep instances beyond the request: subscription state can change
    between requests and every security-relevant action must re-resolve.
    """

    actor_id: str
    workspace_id: str
    role: Optional[Role]
    subscriptions: tuple[Subscription, ...]
    gate: EntitlementGate = field(repr=False)
    overrides: tuple[MemberOverride, ...] = ()

    @property
    def is_member(self) -> bool:
        return self.role is not None

    @property
    def capabilities(self) -> frozenset[Permission]:
        return self.gate.resolver.effective_permissions(self.role, self.overrides)

    def has(self, permission: Permission | str) -> bool:
        return parse_permission(permission) in self.capabilities

    def decide(self, action: GatedAction | str) -> EntitlementDecision:
        decision = self.gate.decide(self.role, action, self.subscriptions, self.overrides)
        get_decision_logger(__name__, workspace_id=self.workspace_id, actor_id=self.actor_id).debug(
            "%s %s (%s)",
            decision.action.value,
            "allowed" if decision.allowed else "denied",
            decision.reason.value,
            extra={"deployment_mode": self.gate.mode.value},
        )
        return decision

    def is_entitled(self, action: GatedAction | str) -> bool:
        return self.decide(action).allowed


class AuthorizationEngine:
    """Entry point for request-handling code.

    Reads roles and subscriptions from the injected stores on every call; nothing
    is cached across calls. Store exceptions propagate unchanged.

    Usage::

        engine = AuthorizationEngine(members, billing, load_config_from_env())
        if await engine.is_entitled(user_id, workspace_id, GatedAction.INVITE_MEMBER):
            ...

        access = await engine.snapshot(user_id, workspace_id)  # one request
        access.has(Permission.CARD_EDIT)
        access.is_entitled(GatedAction.INVITE_MEMBER)
    """

    def __init__(
        self,
        membership_store: MembershipStore,
        subscription_store: SubscriptionStore,
        config: Optional[EngineConfig] = None,
        *,
        resolver: Optional[PermissionResolver] = None,
    ) -> None:
        if membership_store is None or subscription_store is None:
            raise ConfigurationError("AuthorizationEngine needs a membership store and a subscription store")
        self._config = config or EngineConfig()
        self._roles = RoleContext(membership_store)
        self._subscriptions = subscription_store
        self._resolver = resolver or PermissionResolver()
        self._gate = EntitlementGate(self._config.deployment_mode, self._resolver)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def resolver(self) -> PermissionResolver:
        return self._resolver

    @property
    def gate(self) -> EntitlementGate:
        return self._gate

    def capabilities_of(self, role: Optional[Role | str]) -> frozenset[Permission]:
        return self._resolver.capabilities_of(role)

    def has(self, role: Optional[Role | str], permission: Permission | str) -> bool:
        return self._resolver.has(role, permission)

    async def snapshot(self, actor_id: str, workspace_id: str) -> WorkspaceAccess:
        """Fetch role and subscriptions for one request.

        Subscriptions are only fetched for members of hosted deployments;
        self-hosted decisions never read them.
        """
        membership = await self._roles.lookup(actor_id, workspace_id)
        role = self._roles.resolve_role(membership, actor_id=actor_id, workspace_id=workspace_id)

        if role is NOT_A_MEMBER:
            logger.debug("Actor %s is not a member of workspace %s", actor_id, workspace_id)
            return WorkspaceAccess(actor_id, workspace_id, None, (), self._gate)

        subscriptions: Sequence[Subscription] = ()
        if self._config.is_hosted:
            subscriptions = await self._subscriptions.list_subscriptions(workspace_id) or ()

        return WorkspaceAccess(
            actor_id=actor_id,
            workspace_id=workspace_id,
            role=role,
            subscriptions=tuple(subscriptions),
            gate=self._gate,
            overrides=membership.overrides if membership is not None else (),
        )

    async def is_entitled(self, actor_id: str, workspace_id: str, action: GatedAction | str) -> bool:
        """Full decision for ``action`` by ``actor_id`` in ``workspace_id``."""
        require_identifier(actor_id, "actor_id")
        require_identifier(workspace_id, "workspace_id")
        parse_action(action)
        access = await self.snapshot(actor_id, workspace_id)
        return access.is_entitled(action)

    async def permissions_for(self, actor_id: str, workspace_id: str) -> MemberPermissions:
        """Role and effective permissions; non-members get no role and no permissions."""
        access = await self.snapshot(actor_id, workspace_id)
        return MemberPermissions(role=access.role, permissions=access.capabilities)


__all__ = [
    "ENTITLEMENT_RULES",
    "AuthorizationEngine",
    "DecisionReason",
    "EntitlementDecision",
    "EntitlementGate",
    "EntitlementRule",
    "GatedAction",
    "MemberPermissions",
    "WorkspaceAccess",
    "parse_action",
]
