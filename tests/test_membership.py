"""Tests for role resolution from membership snapshots."""

from __future__ import annotations

from typing import Optional

import pytest

from entitlecore import (
    NOT_A_MEMBER,
    ConfigurationError,
    InvalidInputError,
    MemberStatus,
    Membership,
    MembershipStore,
    NotAMember,
    Role,
    RoleContext,
)


class _DictMembershipStore(MembershipStore):
    def __init__(self, memberships: list[Membership]) -> None:
        self._memberships = {(m.actor_id, m.workspace_id): m for m in memberships}
        self.calls: list[tuple[str, str]] = []

    async def lookup_membership(self, actor_id: str, workspace_id: str) -> Optional[Membership]:
        self.calls.append((actor_id, workspace_id))
        return self._memberships.get((actor_id, workspace_id))


class TestNotAMember:
    """Tests for the explicit non-member outcome."""

    def test_singleton(self) -> None:
        assert NotAMember() is NOT_A_MEMBER

    def test_falsy(self) -> None:
        assert not NOT_A_MEMBER

    def test_repr(self) -> None:
        assert repr(NOT_A_MEMBER) == "NOT_A_MEMBER"


class TestResolveRole:
    """Tests for RoleContext.resolve_role (pure)."""

    def test_active_member(self) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role="member")
        assert RoleContext.resolve_role(membership) is Role.MEMBER

    def test_none_is_not_a_member(self) -> None:
        assert RoleContext.resolve_role(None) is NOT_A_MEMBER

    @pytest.mark.parametrize("status", [MemberStatus.INVITED.value, MemberStatus.REMOVED.value, "suspended"])
    def test_inactive_status_is_not_a_member(self, status: str) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role="admin", status=status)
        assert RoleContext.resolve_role(membership) is NOT_A_MEMBER

    def test_unknown_role_is_never_guessed(self) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role="owner")
        assert RoleContext.resolve_role(membership) is NOT_A_MEMBER

    @pytest.mark.parametrize("stored", [" Admin ", "Admin", "ADMIN", "admin "])
    def test_stored_role_matched_exactly(self, stored: str) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role=stored)
        assert RoleContext.resolve_role(membership) is NOT_A_MEMBER
        # Caller-supplied roles are still normalized.
        assert Role.parse(stored) is Role.ADMIN

    def test_mismatched_actor_is_not_a_member(self) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role="admin")
        assert RoleContext.resolve_role(membership, actor_id="u2") is NOT_A_MEMBER

    def test_mismatched_workspace_is_not_a_member(self) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role="admin")
        assert RoleContext.resolve_role(membership, workspace_id="w2") is NOT_A_MEMBER

    def test_membership_is_frozen(self) -> None:
        membership = Membership(actor_id="u1", workspace_id="w1", role="guest")
        with pytest.raises(Exception):
            membership.role = "admin"  # type: ignore[misc]


class TestRoleContextStore:
    """Tests for store-backed resolution."""

    @pytest.mark.asyncio
    async def test_resolve_from_store(self) -> None:
        store = _DictMembershipStore([Membership(actor_id="u1", workspace_id="w1", role="admin")])
        context = RoleContext(store)
        assert await context.resolve("u1", "w1") is Role.ADMIN
        assert store.calls == [("u1", "w1")]

    @pytest.mark.asyncio
    async def test_unknown_actor(self) -> None:
        context = RoleContext(_DictMembershipStore([]))
        assert await context.resolve("u1", "w1") is NOT_A_MEMBER

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor_id, workspace_id", [("", "w1"), ("u1", "   "), (None, "w1")])
    async def test_blank_identifiers_rejected_before_lookup(self, actor_id, workspace_id) -> None:
        store = _DictMembershipStore([])
        context = RoleContext(store)
        with pytest.raises(InvalidInputError) as exc_info:
            await context.resolve(actor_id, workspace_id)
        assert exc_info.value.code == "INVALID_INPUT"
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_missing_store(self) -> None:
        with pytest.raises(ConfigurationError):
            await RoleContext().resolve("u1", "w1")
