"""Tests for moderation helpers."""

from unittest.mock import MagicMock

import discord
import pytest

from moderation import (
    DEFAULT_REASON,
    MAX_TIMEOUT,
    ban_message,
    kick_message,
    mute_message,
    parse_mute_seconds,
    reason_or_default,
    send_warning_dm,
    warn_message,
    warning_dm_embed,
)


def test_reason_or_default():
    assert reason_or_default(None) == DEFAULT_REASON
    assert reason_or_default("   ") == DEFAULT_REASON
    assert reason_or_default(" spamming ") == "spamming"


@pytest.mark.parametrize("text,expected", [("60", 60), ("3600s", 3600), ("1", 1)])
def test_parse_mute_seconds(text, expected):
    assert parse_mute_seconds(text) == expected


@pytest.mark.parametrize("text", [None, "", "0", "-10", "ten", str(int(MAX_TIMEOUT.total_seconds()) + 1)])
def test_parse_mute_seconds_rejects(text):
    assert parse_mute_seconds(text) is None


def test_messages():
    assert kick_message("bad#1", "spam") == "👢 **bad#1** was kicked.\n**Reason:** spam"
    assert ban_message("bad#1", "spam").startswith("🔨 **bad#1** was banned.")
    assert "muted for 60 seconds" in mute_message("bad#1", 60, "spam")


def test_warn_message_reports_dm_status():
    assert "✅ User notified via DM." in warn_message("bad#1", "spam", True)
    assert "❌ Could not DM user (DMs closed)." in warn_message("bad#1", "spam", False)


def test_warning_dm_embed():
    embed = warning_dm_embed("https://cdn.example/icon.png", "spam")
    assert embed.title == "⚠️ Official Warning"
    assert embed.fields[0].value == "spam"
    assert embed.thumbnail.url == "https://cdn.example/icon.png"


def test_warning_dm_embed_without_icon():
    assert warning_dm_embed(None, "spam").thumbnail.url is None


@pytest.mark.asyncio
async def test_send_warning_dm(member_factory):
    member = member_factory(5)
    embed = warning_dm_embed(None, "spam")

    assert await send_warning_dm(member, embed)
    member.send.assert_awaited_once_with(embed=embed)


@pytest.mark.asyncio
async def test_send_warning_dm_closed(member_factory):
    member = member_factory(5)
    member.send.side_effect = discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Cannot send messages to this user")

    assert not await send_warning_dm(member, warning_dm_embed(None, "spam"))
