"""Subscription snapshots and active-entitlement evaluation.

Subscriptions are produced by the billing sync and are never mutated here.
Status is authoritative: a canceled or past_due subscription is inactive even
when its period has not ended; period dates are informational and only used
to break ties.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field, field_validator


class SubscriptionStatus(str, Enum):
    """Billing status as reported by the provider."""

    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    UNPAID = "unpaid"


class Plan(str, Enum):
    """Plans that gate entitlements."""

    TEAM = "team"
    PRO = "pro"


ACTIVE_STATUSES = frozenset({SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value})


class Subscription(BaseModel):
    """Immutable subscription snapshot.

    ``plan`` and ``status`` are plain strings so that values the engine does not
    know (new plans, provider-specific statuses) load fine and simply never
    count as active or matching.
    """

    id: Optional[str | int] = None  # None until first purchase
    plan: str
    status: str
    seat_count: Optional[int] = Field(default=None, ge=0)
    unlimited_seats: bool = False
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    provider_subscription_id: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("plan", "status", mode="before")
    @classmethod
    def normalize_label(cls, v: object) -> object:
        if isinstance(v, Enum):
            v = v.value
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("period_start", "period_end")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are read as UTC so they compare with aware ones."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class SeatCapacity(BaseModel):
    """Seat facts for a plan, reported side by side.

    How ``unlimited`` and ``seats`` combine into a limit is left to the seat
    consumer.
    """

    plan: Optional[str] = None
    unlimited: bool = False
    seats: Optional[int] = None

    model_config = {"frozen": True}


class SubscriptionStore(ABC):
    """Billing-state provider. Refreshed out-of-band (webhooks)."""

    @abstractmethod
    async def list_subscriptions(self, workspace_id: str) -> Optional[Sequence[Subscription]]:
        """Return every known subscription of the workspace (historical + current)."""
        raise NotImplementedError


def _plan_value(plan: Plan | str) -> str:
    return (plan.value if isinstance(plan, Plan) else str(plan)).strip().lower()


def active_subscriptions(subscriptions: Optional[Iterable[Subscription]]) -> list[Subscription]:
    """Subscriptions whose status is active or trialing, in input order.

    ``None`` is treated as an empty list.
    """
    if not subscriptions:
        return []
    return [sub for sub in subscriptions if sub.is_active]


def best_match(active: Optional[Iterable[Subscription]], plan: Plan | str) -> Optional[Subscription]:
    """The active subscription for ``plan`` with the earliest ``period_start``.

    Subscriptions without a start date sort after dated ones; equal keys keep
    input order. Inactive entries in ``active`` are ignored.
    """
    wanted = _plan_value(plan)
    candidates = [sub for sub in active_subscriptions(active) if sub.plan == wanted]
    if not candidates:
        return None
    return min(
        candidates,
        key=lambda sub: (sub.period_start is None, sub.period_start or datetime.min.replace(tzinfo=timezone.utc)),
    )


def has_active_subscription(subscriptions: Optional[Iterable[Subscription]], plan: Plan | str) -> bool:
    return best_match(subscriptions, plan) is not None


def has_unlimited_seats(active: Optional[Iterable[Subscription]]) -> bool:
    """True iff any active subscription grants unlimited seats."""
    return any(sub.unlimited_seats for sub in active_subscriptions(active))


def seat_capacity(active: Optional[Iterable[Subscription]], plan: Plan | str) -> SeatCapacity:
    """Seat facts for ``plan``: the unlimited flag and the best match's seat count."""
    active_list = active_subscriptions(active)
    match = best_match(active_list, plan)
    return SeatCapacity(
        plan=_plan_value(plan),
        unlimited=has_unlimited_seats(active_list),
        seats=match.seat_count if match is not None else None,
    )


class SubscriptionEvaluator:
    """Object form of the module functions, for injection into gates and engines."""

    def active_subscriptions(self, subscriptions: Optional[Iterable[Subscription]]) -> list[Subscription]:
        return active_subscriptions(subscriptions)

    def best_match(self, active: Optional[Iterable[Subscription]], plan: Plan | str) -> Optional[Subscription]:
        return best_match(active, plan)

    def has_active_subscription(self, subscriptions: Optional[Iterable[Subscription]], plan: Plan | str) -> bool:
        return has_active_subscription(subscriptions, plan)

    def has_unlimited_seats(self, active: Optional[Iterable[Subscription]]) -> bool:
        return has_unlimited_seats(active)

    def seat_capacity(self, active: Optional[Iterable[Subscription]], plan: Plan | str) -> SeatCapacity:
        return seat_capacity(active, plan)


__all__ = [
    "ACTIVE_STATUSES",
    "Plan",
    "SeatCapacity",
    "Subscription",
    "SubscriptionEvaluator",
    "SubscriptionStatus",
    "SubscriptionStore",
    "active_subscriptions",
    "best_match",
    "has_active_subscription",
    "has_unlimited_seats",
    "seat_capacity",
]
