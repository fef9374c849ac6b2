# moderation.py
"""Staff moderation helpers: kick, ban, mute (timeout) and warn."""

from __future__ import annotations
import datetime
import logging
from typing import Optional

import discord

from helpers import parse_leading_int

# Child logger (parent configured in bot.py)
logger = logging.getLogger("northstar.moderation")

DEFAULT_REASON = "No reason provided"
MAX_TIMEOUT = datetime.timedelta(days=28)  # Discord's upper bound for timeouts

NO_PERMISSION = "❌ You do not have permission."


def reason_or_default(reason: str | None) -> str:
    reason = (reason or "").strip()
    return reason or DEFAULT_REASON


def parse_mute_seconds(text: str | None) -> Optional[int]:
    """Seconds for !mute: a positive integer no longer than Discord allows."""
    seconds = parse_leading_int(text)
    if seconds is None or seconds <= 0:
        return None
    if seconds > MAX_TIMEOUT.total_seconds():
        return None
    return seconds


def warning_dm_embed(guild_icon_url: str | None, reason: str) -> discord.Embed:
    e = discord.Embed(
        title="⚠️ Official Warning",
        description=(
            "**You have been warned by one of NorthStar moderation team.**\n\n"
            "If you think this is a mistake please create a ticket."
        ),
        color=0xE67E22,
    )
    e.add_field(name="Reason", value=reason, inline=False)
    if guild_icon_url:
        e.set_thumbnail(url=guild_icon_url)
    e.set_footer(text="NorthStar VTC Moderation Team")
    return e


async def send_warning_dm(member: discord.Member, embed: discord.Embed) -> bool:
    """DM the warning; False when the member has DMs closed."""
    try:
        await member.send(embed=embed)
        return True
    except discord.Forbidden:
        logger.info(f"warn:dm_closed user_id={member.id}")
        return False
    except discord.HTTPException as e:
        logger.warning(f"warn:dm_failed user_id={member.id}: {e}")
        return False


def kick_message(user_tag: str, reason: str) -> str:
    return f"👢 **{user_tag}** was kicked.\n**Reason:** {reason}"


def ban_message(user_tag: str, reason: str) -> str:
    return f"🔨 **{user_tag}** was banned.\n**Reason:** {reason}"


def mute_message(user_tag: str, seconds: int, reason: str) -> str:
    return f"🤐 **{user_tag}** has been muted for {seconds} seconds.\n**Reason:** {reason}"


def warn_message(user_tag: str, reason: str, dm_sent: bool) -> str:
    dm_status = "✅ User notified via DM." if dm_sent else "❌ Could not DM user (DMs closed)."
    return f"⚠️ **{user_tag}** has been warned.\n**Reason:** {reason}\n{dm_status}"
