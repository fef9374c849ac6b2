"""Tests for the audit-log embeds and lookups."""

import datetime
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

import server_logs
from server_logs import (
    executor_of,
    is_recent_kick,
    latest_audit_entry,
    log_kick_if_any,
    member_banned_embed,
    message_deleted_embed,
    message_edited_embed,
    send_log,
)


def fields(embed: discord.Embed) -> dict:
    return {f.name: f.value for f in embed.fields}


def make_entry(target_id: int, user: str = "mod#0001", reason=None, age_seconds: float = 0.0):
    entry = MagicMock(spec=discord.AuditLogEntry)
    entry.target = MagicMock(id=target_id)
    entry.user = MagicMock()
    entry.user.__str__.return_value = user
    entry.reason = reason
    entry.created_at = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(seconds=age_seconds)
    return entry


def make_guild(channel=None, entries=()):
    guild = MagicMock(spec=discord.Guild)
    guild.id = 1
    guild.get_channel.return_value = channel

    async def audit_logs(**kwargs):
        for entry in entries:
            yield entry

    guild.audit_logs = MagicMock(side_effect=audit_logs)
    return guild


class TestEmbeds:
    def test_deleted_message_without_text(self):
        embed = message_deleted_embed("driver#1", "<#5>", "")
        assert embed.author.name == "Message Deleted"
        assert fields(embed)["Content"] == "[Image/Embed]"

    def test_edited_message(self):
        embed = message_edited_embed("driver#1", "<#5>", "helo", "hello")
        assert fields(embed)["Before"] == "helo"
        assert fields(embed)["After"] == "hello"

    def test_long_content_is_clipped(self):
        embed = message_deleted_embed("driver#1", "<#5>", "x" * 5000)
        assert len(fields(embed)["Content"]) == 1024

    def test_ban_without_reason(self):
        embed = member_banned_embed("driver#1", None, "Unknown", None)
        assert fields(embed)["Reason"] == "No reason provided"
        assert fields(embed)["Banned By"] == "Unknown"
        assert embed.timestamp is not None


class TestAuditLookups:
    def test_executor_for_matching_target(self):
        assert executor_of(make_entry(42), target_id=42) == "mod#0001"

    def test_executor_for_other_target(self):
        assert executor_of(make_entry(41), target_id=42) == "Unknown"

    def test_executor_without_entry(self):
        assert executor_of(None) == "Unknown"

    def test_recent_kick(self):
        assert is_recent_kick(make_entry(42, age_seconds=2), 42)

    def test_stale_kick_is_a_leave(self):
        assert not is_recent_kick(make_entry(42, age_seconds=30), 42)

    def test_kick_of_someone_else(self):
        assert not is_recent_kick(make_entry(7, age_seconds=1), 42)
        assert not is_recent_kick(None, 42)

    @pytest.mark.asyncio
    async def test_latest_audit_entry(self):
        entry = make_entry(42)
        guild = make_guild(entries=[entry])
        assert await latest_audit_entry(guild, discord.AuditLogAction.ban) is entry

    @pytest.mark.asyncio
    async def test_latest_audit_entry_without_permission(self):
        guild = make_guild()
        guild.audit_logs = MagicMock(side_effect=discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Access"))
        assert await latest_audit_entry(guild, discord.AuditLogAction.ban) is None


class TestSendLog:
    @pytest.mark.asyncio
    async def test_sends_to_configured_channel(self, channel_factory):
        channel = channel_factory(99)
        embed = discord.Embed(title="x")

        assert await send_log(make_guild(channel), 99, embed)
        channel.send.assert_awaited_once_with(embed=embed)

    @pytest.mark.asyncio
    async def test_skips_when_unconfigured(self, channel_factory):
        assert not await send_log(make_guild(channel_factory(99)), None, discord.Embed())
        assert not await send_log(None, 99, discord.Embed())

    @pytest.mark.asyncio
    async def test_skips_missing_channel(self):
        assert not await send_log(make_guild(None), 99, discord.Embed())

    @pytest.mark.asyncio
    async def test_send_failure_is_swallowed(self, channel_factory):
        channel = channel_factory(99)
        channel.send.side_effect = discord.HTTPException(MagicMock(status=500, reason="Server Error"), "boom")
        assert not await send_log(make_guild(channel), 99, discord.Embed())


class TestKickLog:
    @pytest.fixture(autouse=True)
    def no_delay(self, monkeypatch):
        monkeypatch.setattr(server_logs, "KICK_LOOKUP_DELAY_SECONDS", 0)

    def _member(self, member_factory, guild):
        member = member_factory(42, "driver")
        member.guild = guild
        member.display_avatar = MagicMock(url="https://cdn.example/avatar.png")
        return member

    @pytest.mark.asyncio
    async def test_recent_kick_is_logged(self, member_factory, channel_factory):
        channel = channel_factory(99)
        guild = make_guild(channel, entries=[make_entry(42, reason="spam")])

        assert await log_kick_if_any(self._member(member_factory, guild), 99)

        embed = channel.send.await_args.kwargs["embed"]
        assert embed.author.name == "Member Kicked"
        assert fields(embed)["Kicked By"] == "mod#0001"
        assert fields(embed)["Reason"] == "spam"

    @pytest.mark.asyncio
    async def test_plain_leave_is_not_logged(self, member_factory, channel_factory):
        channel = channel_factory(99)
        guild = make_guild(channel, entries=[make_entry(42, age_seconds=60)])

        assert not await log_kick_if_any(self._member(member_factory, guild), 99)
        channel.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_lookup_without_logging_channel(self, monkeypatch, member_factory):
        monkeypatch.setattr(server_logs, "KICK_LOOKUP_DELAY_SECONDS", 60)
        guild = make_guild(entries=[make_entry(42, reason="spam")])

        assert not await log_kick_if_any(self._member(member_factory, guild), None)
        guild.audit_logs.assert_not_called()
