# server_logs.py
"""
Audit-style embeds posted to the staff logging channel.

The embed builders are plain functions so they can be reused by commands
(e.g. !warn) and checked without a live gateway connection.
"""

from __future__ import annotations
import asyncio
import datetime
import logging
from typing import Optional

import discord

from helpers import truncate

# Child logger (parent configured in bot.py)
logger = logging.getLogger("northstar.logs")

ICON_DELETED = "https://cdn-icons-png.flaticon.com/512/3221/3221897.png"
ICON_EDITED = "https://cdn-icons-png.flaticon.com/512/1159/1159633.png"
ICON_BAN = "https://cdn-icons-png.flaticon.com/512/1603/1603806.png"
ICON_CHANNEL_CREATED = "https://cdn-icons-png.flaticon.com/512/992/992651.png"
ICON_CHANNEL_DELETED = "https://cdn-icons-png.flaticon.com/512/1214/1214428.png"
ICON_NICKNAME = "https://cdn-icons-png.flaticon.com/512/1250/1250689.png"
ICON_KICK = "https://cdn-icons-png.flaticon.com/512/924/924922.png"
ICON_ROLE_DELETED = "https://cdn-icons-png.flaticon.com/512/6861/6861326.png"

KICK_LOOKUP_DELAY_SECONDS = 1.0
KICK_MAX_AGE_SECONDS = 10.0


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _base(title: str, icon_url: str | None, color: int) -> discord.Embed:
    e = discord.Embed(color=color, timestamp=_now())
    e.set_author(name=title, icon_url=icon_url)
    return e


# ---------------- Embed builders ----------------
def message_deleted_embed(author_tag: str, channel_mention: str, content: str | None) -> discord.Embed:
    e = _base("Message Deleted", ICON_DELETED, 0xF1C40F)
    e.add_field(name="Author", value=author_tag, inline=True)
    e.add_field(name="Channel", value=channel_mention, inline=True)
    e.add_field(name="Content", value=truncate(content) or "[Image/Embed]", inline=False)
    return e


def message_edited_embed(author_tag: str, channel_mention: str, before: str | None, after: str | None) -> discord.Embed:
    e = _base("Message Edited", ICON_EDITED, 0x3498DB)
    e.add_field(name="Author", value=author_tag, inline=True)
    e.add_field(name="Channel", value=channel_mention, inline=True)
    e.add_field(name="Before", value=truncate(before) or "[None]", inline=False)
    e.add_field(name="After", value=truncate(after) or "[None]", inline=False)
    return e


def member_banned_embed(user_tag: str, avatar_url: str | None, executor: str, reason: str | None) -> discord.Embed:
    e = _base("Member Banned", ICON_BAN, 0xE74C3C)
    if avatar_url:
        e.set_thumbnail(url=avatar_url)
    e.add_field(name="User", value=user_tag, inline=True)
    e.add_field(name="Banned By", value=executor, inline=True)
    e.add_field(name="Reason", value=reason or "No reason provided", inline=False)
    return e


def member_unbanned_embed(user_tag: str, executor: str) -> discord.Embed:
    e = _base("Member Unbanned", ICON_BAN, 0x2ECC71)
    e.add_field(name="User", value=user_tag, inline=True)
    e.add_field(name="Unbanned By", value=executor, inline=True)
    return e


def channel_created_embed(channel_mention: str, channel_name: str) -> discord.Embed:
    e = _base("Channel Created", ICON_CHANNEL_CREATED, 0x2ECC71)
    e.description = f"Channel: {channel_mention} ({channel_name})"
    return e


def channel_deleted_embed(channel_name: str) -> discord.Embed:
    e = _base("Channel Deleted", ICON_CHANNEL_DELETED, 0xE74C3C)
    e.description = f"Channel Name: **{channel_name}**"
    return e


def nickname_changed_embed(user_tag: str, old_name: str, new_name: str) -> discord.Embed:
    e = _base("Nickname Changed", ICON_NICKNAME, 0x9B59B6)
    e.add_field(name="User", value=user_tag, inline=True)
    e.add_field(name="Old Name", value=old_name, inline=True)
    e.add_field(name="New Name", value=new_name, inline=True)
    return e


def member_kicked_embed(user_tag: str, avatar_url: str | None, executor: str, reason: str | None) -> discord.Embed:
    e = _base("Member Kicked", ICON_KICK, 0xE67E22)
    if avatar_url:
        e.set_thumbnail(url=avatar_url)
    e.add_field(name="User", value=user_tag, inline=True)
    e.add_field(name="Kicked By", value=executor, inline=True)
    e.add_field(name="Reason", value=reason or "No reason provided", inline=False)
    return e


def role_deleted_embed(role_name: str, executor: str) -> discord.Embed:
    e = _base("Role Deleted", ICON_ROLE_DELETED, 0x2F3136)
    e.add_field(name="Role", value=role_name, inline=True)
    e.add_field(name="Deleted By", value=executor, inline=True)
    return e


def member_warned_embed(user_tag: str, user_id: int, avatar_url: str | None, moderator: str, reason: str) -> discord.Embed:
    e = _base("Member Warned", avatar_url, 0xE67E22)
    e.add_field(name="User", value=f"{user_tag} ({user_id})", inline=True)
    e.add_field(name="Moderator", value=moderator, inline=True)
    e.add_field(name="Reason", value=reason, inline=False)
    return e


def nickname_label(member: discord.Member) -> str:
    return member.nick or member.name


# ---------------- Audit log lookups ----------------
async def latest_audit_entry(
    guild: discord.Guild, action: discord.AuditLogAction
) -> Optional[discord.AuditLogEntry]:
    """Most recent audit entry for `action`, or None if unavailable (missing View Audit Log, etc.)."""
    try:
        async for entry in guild.audit_logs(limit=1, action=action):
            return entry
    except discord.HTTPException as e:
        logger.warning(f"audit:fetch_failed guild_id={guild.id} action={action.name}: {e}")
    return None


def executor_of(entry: Optional[discord.AuditLogEntry], target_id: int | None = None) -> str:
    """Executor tag from an audit entry; 'Unknown' if absent or for a different target."""
    if entry is None or entry.user is None:
        return "Unknown"
    if target_id is not None and getattr(entry.target, "id", None) != target_id:
        return "Unknown"
    return str(entry.user)


def is_recent_kick(entry: Optional[discord.AuditLogEntry], member_id: int, now: datetime.datetime | None = None) -> bool:
    """A kick entry counts when it targets the member and is younger than KICK_MAX_AGE_SECONDS."""
    if entry is None or getattr(entry.target, "id", None) != member_id:
        return False
    now = now or _now()
    return (now - entry.created_at).total_seconds() < KICK_MAX_AGE_SECONDS


# ---------------- Posting ----------------
async def send_log(guild: discord.Guild | None, channel_id: int | None, embed: discord.Embed) -> bool:
    """Post `embed` to the logging channel if configured. Returns True when sent."""
    if guild is None or not channel_id:
        return False
    ch = guild.get_channel(channel_id)
    if not isinstance(ch, (discord.TextChannel, discord.Thread)):
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"send_log:skip_no_channel guild_id={guild.id} channel_id={channel_id}")
        return False
    try:
        await ch.send(embed=embed)
        return True
    except discord.HTTPException:
        logger.exception(f"send_log:failed guild_id={guild.id} channel_id={channel_id}")
        return False


async def log_kick_if_any(member: discord.Member, channel_id: int | None) -> bool:
    """Members leave and get kicked through the same event; check the audit log to tell them apart."""
    if not channel_id:
        return False
    await asyncio.sleep(KICK_LOOKUP_DELAY_SECONDS)
    entry = await latest_audit_entry(member.guild, discord.AuditLogAction.kick)
    if not is_recent_kick(entry, member.id):
        return False
    embed = member_kicked_embed(str(member), member.display_avatar.url, executor_of(entry), entry.reason)
    logger.info(f"audit:kick user_id={member.id} by='{executor_of(entry)}'")
    return await send_log(member.guild, channel_id, embed)
