"""Tests for reaction-role panels."""

import json
import os
from unittest.mock import MagicMock

import discord
import pytest

import reaction_roles
from reaction_roles import PANEL_TITLE, PanelStore, apply_reaction, panel_embed, role_id_for_emoji

ROLES = [
    ("📣", 100, "| Announcements Ping"),
    ("🗓️", 200, "| Event Ping"),
    ("🎉", None, "| Unconfigured Ping"),
]


@pytest.fixture
def store(tmp_path):
    return PanelStore(str(tmp_path / "reaction_panels.json"))


class TestPanelStore:
    def test_empty_without_file(self, store):
        assert 1 not in store

    def test_add_persists(self, store):
        store.add(345)

        assert 345 in store
        with open(store.path, "r", encoding="utf-8") as f:
            assert json.load(f) == {"panels": ["345"]}
        assert 345 in PanelStore(store.path)

    def test_discard(self, store):
        store.add(345)
        assert store.discard(345)
        assert not store.discard(345)
        assert 345 not in PanelStore(store.path)

    def test_failed_add_leaves_store_unchanged(self, store, monkeypatch):
        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(reaction_roles.os, "replace", fail)

        assert not store.add(345)
        assert 345 not in store
        assert not os.path.exists(store.path)
        assert os.listdir(os.path.dirname(store.path)) == []

    def test_failed_discard_keeps_panel(self, store, monkeypatch):
        store.add(345)

        def fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(reaction_roles.os, "replace", fail)

        assert not store.discard(345)
        assert 345 in store
        monkeypatch.undo()
        assert 345 in PanelStore(store.path)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "reaction_panels.json"
        path.write_text("[[", encoding="utf-8")
        assert 1 not in PanelStore(str(path))


def test_panel_embed_lists_roles():
    embed = panel_embed(ROLES[:2])
    assert embed.title == PANEL_TITLE
    assert "📣 : **| Announcements Ping**" in embed.description


class TestRoleLookup:
    def test_exact_emoji(self):
        assert role_id_for_emoji("📣", ROLES) == 100

    def test_variation_selector_is_ignored(self):
        assert role_id_for_emoji("🗓", ROLES) == 200

    def test_unconfigured_role(self):
        assert role_id_for_emoji("🎉", ROLES) is None

    def test_unknown_emoji(self):
        assert role_id_for_emoji("🍕", ROLES) is None


def make_payload(event_type: str, emoji: str, member=None, message_id: int = 345, user_id: int = 1):
    payload = MagicMock(spec=discord.RawReactionActionEvent)
    payload.event_type = event_type
    payload.emoji = emoji
    payload.member = member
    payload.message_id = message_id
    payload.user_id = user_id
    return payload


def make_guild(role, member=None):
    guild = MagicMock(spec=discord.Guild)
    guild.get_role.return_value = role
    guild.get_member.return_value = member
    return guild


class TestApplyReaction:
    @pytest.mark.asyncio
    async def test_add_grants_role(self, store, member_factory, role_factory):
        store.add(345)
        role, member = role_factory(100), member_factory(1)

        assert await apply_reaction(make_guild(role), make_payload("REACTION_ADD", "📣", member), store, ROLES)
        member.add_roles.assert_awaited_once_with(role, reason="Reaction role")

    @pytest.mark.asyncio
    async def test_remove_takes_role(self, store, member_factory, role_factory):
        store.add(345)
        role, member = role_factory(100), member_factory(1)

        assert await apply_reaction(make_guild(role, member), make_payload("REACTION_REMOVE", "📣"), store, ROLES)
        member.remove_roles.assert_awaited_once_with(role, reason="Reaction role")

    @pytest.mark.asyncio
    async def test_ignores_other_messages(self, store, member_factory, role_factory):
        member = member_factory(1)
        payload = make_payload("REACTION_ADD", "📣", member, message_id=999)

        assert not await apply_reaction(make_guild(role_factory(100)), payload, store, ROLES)
        member.add_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_ignores_bots(self, store, member_factory, role_factory):
        store.add(345)
        bot = member_factory(2, bot=True)

        assert not await apply_reaction(make_guild(role_factory(100)), make_payload("REACTION_ADD", "📣", bot), store, ROLES)
        bot.add_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_role(self, store, member_factory):
        store.add(345)
        assert not await apply_reaction(make_guild(None), make_payload("REACTION_ADD", "📣", member_factory(1)), store, ROLES)

    @pytest.mark.asyncio
    async def test_permission_error(self, store, member_factory, role_factory):
        store.add(345)
        member = member_factory(1)
        member.add_roles.side_effect = discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Permissions")

        assert not await apply_reaction(make_guild(role_factory(100)), make_payload("REACTION_ADD", "📣", member), store, ROLES)
