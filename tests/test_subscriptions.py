"""Tests for subscription filtering and ranking."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from entitlecore import (
    Plan,
    SeatCapacity,
    Subscription,
    SubscriptionEvaluator,
    SubscriptionStatus,
    active_subscriptions,
    best_match,
    has_active_subscription,
    has_unlimited_seats,
    seat_capacity,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _sub(plan: str = "team", status: str = "active", **kwargs) -> Subscription:
    return Subscription(plan=plan, status=status, **kwargs)


class TestSubscriptionModel:
    """Tests for the Subscription snapshot."""

    def test_defaults(self) -> None:
        sub = _sub()
        assert sub.id is None
        assert sub.seat_count is None
        assert sub.unlimited_seats is False

    def test_enum_and_case_normalized(self) -> None:
        sub = Subscription(plan=Plan.TEAM, status=" TRIALING ")
        assert sub.plan == "team"
        assert sub.status == "trialing"
        assert sub.is_active

    def test_unknown_values_load_as_inactive(self) -> None:
        sub = _sub(plan="enterprise", status="incomplete")
        assert not sub.is_active

    def test_naive_dates_read_as_utc(self) -> None:
        sub = _sub(period_start=datetime(2026, 1, 1))
        assert sub.period_start == T0

    def test_negative_seats_rejected(self) -> None:
        with pytest.raises(ValueError):
            _sub(seat_count=-1)

    def test_frozen(self) -> None:
        sub = _sub()
        with pytest.raises(Exception):
            sub.status = "canceled"  # type: ignore[misc]


class TestActiveSubscriptions:
    """Tests for active_subscriptions."""

    def test_filters_to_active_and_trialing_in_order(self) -> None:
        subs = [
            _sub(status="active", id=1),
            _sub(status="past_due", id=2),
            _sub(status="canceled", id=3),
            _sub(status="trialing", id=4),
            _sub(status="unpaid", id=5),
        ]
        result = active_subscriptions(subs)
        assert [s.id for s in result] == [1, 4]
        assert all(s.status in {"active", "trialing"} for s in result)

    def test_none_and_empty(self) -> None:
        assert active_subscriptions(None) == []
        assert active_subscriptions([]) == []

    def test_idempotent(self) -> None:
        subs = [_sub(status="active"), _sub(status="canceled"), _sub(status="trialing")]
        once = active_subscriptions(subs)
        assert active_subscriptions(once) == once

    def test_status_beats_dates(self) -> None:
        """A canceled subscription with an unexpired period is still inactive."""
        sub = _sub(status=SubscriptionStatus.CANCELED, period_end=datetime.now(timezone.utc) + timedelta(days=30))
        assert active_subscriptions([sub]) == []


class TestBestMatch:
    """Tests for best_match."""

    def test_matches_plan(self) -> None:
        subs = [_sub(plan="pro", id="pro"), _sub(plan="team", id="team")]
        assert best_match(subs, Plan.TEAM).id == "team"
        assert best_match(subs, "pro").id == "pro"

    def test_no_match(self) -> None:
        assert best_match([_sub(plan="pro")], Plan.TEAM) is None
        assert best_match(None, Plan.TEAM) is None

    def test_earliest_period_start_wins(self) -> None:
        later = _sub(id="later", period_start=T0 + timedelta(days=10))
        earlier = _sub(id="earlier", period_start=T0)
        assert best_match([later, earlier], Plan.TEAM).id == "earlier"

    def test_missing_start_sorts_last(self) -> None:
        undated = _sub(id="undated")
        dated = _sub(id="dated", period_start=T0)
        assert best_match([undated, dated], Plan.TEAM).id == "dated"

    def test_equal_starts_keep_input_order(self) -> None:
        first = _sub(id="first", period_start=T0)
        second = _sub(id="second", period_start=T0)
        assert best_match([first, second], Plan.TEAM).id == "first"

    def test_inactive_ignored(self) -> None:
        canceled = _sub(id="canceled", status="canceled", period_start=T0)
        active = _sub(id="active", period_start=T0 + timedelta(days=1))
        assert best_match([canceled, active], Plan.TEAM).id == "active"

    def test_has_active_subscription(self) -> None:
        assert has_active_subscription([_sub(status="trialing")], Plan.TEAM)
        assert not has_active_subscription([_sub(status="past_due")], Plan.TEAM)


class TestSeats:
    """Tests for unlimited seats and seat capacity."""

    def test_unlimited_from_any_active(self) -> None:
        subs = [_sub(seat_count=5), _sub(plan="pro", unlimited_seats=True)]
        assert has_unlimited_seats(subs)

    def test_unlimited_on_inactive_ignored(self) -> None:
        assert not has_unlimited_seats([_sub(status="canceled", unlimited_seats=True)])
        assert not has_unlimited_seats(None)

    def test_seat_capacity_reports_both(self) -> None:
        subs = [_sub(seat_count=5, period_start=T0), _sub(plan="pro", unlimited_seats=True)]
        assert seat_capacity(subs, Plan.TEAM) == SeatCapacity(plan="team", unlimited=True, seats=5)

    def test_seat_capacity_without_match(self) -> None:
        assert seat_capacity([], Plan.TEAM) == SeatCapacity(plan="team", unlimited=False, seats=None)


class TestSubscriptionEvaluator:
    """The evaluator object delegates to the module functions."""

    def test_delegates(self) -> None:
        evaluator = SubscriptionEvaluator()
        subs = [_sub(id=1, seat_count=3), _sub(id=2, status="canceled")]
        active = evaluator.active_subscriptions(subs)
        assert [s.id for s in active] == [1]
        assert evaluator.best_match(active, Plan.TEAM).id == 1
        assert evaluator.has_active_subscription(subs, Plan.TEAM)
        assert not evaluator.has_unlimited_seats(active)
        assert evaluator.seat_capacity(active, Plan.TEAM).seats == 3
