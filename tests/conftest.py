"""Shared fixtures for NorthStar bot tests."""

from unittest.mock import AsyncMock, MagicMock

import discord
import pytest


def make_role(role_id: int, name: str = "role") -> MagicMock:
    role = MagicMock(spec=discord.Role)
    role.id = role_id
    role.name = name
    role.mention = f"<@&{role_id}>"
    return role


def make_member(member_id: int = 1, name: str = "driver", roles=(), admin: bool = False, bot: bool = False) -> MagicMock:
    member = MagicMock(spec=discord.Member)
    member.id = member_id
    member.name = name
    member.display_name = name
    member.bot = bot
    member.mention = f"<@{member_id}>"
    member.roles = [make_role(r) if isinstance(r, int) else r for r in roles]
    member.guild_permissions = MagicMock(administrator=admin)
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    member.send = AsyncMock()
    return member


def make_text_channel(channel_id: int = 500, name: str = "general") -> MagicMock:
    channel = MagicMock(spec=discord.TextChannel)
    channel.id = channel_id
    channel.name = name
    channel.mention = f"<#{channel_id}>"
    channel.send = AsyncMock()
    channel.delete = AsyncMock()
    return channel


@pytest.fixture
def member_factory():
    return make_member


@pytest.fixture
def channel_factory():
    return make_text_channel


@pytest.fixture
def role_factory():
    return make_role
