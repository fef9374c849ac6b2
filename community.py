# community.py
"""Welcome, about and help embeds, plus the AFK nickname toggle."""

from __future__ import annotations
import datetime
from typing import Optional

import discord

from config import ABOUT, FOOTER_TEXT, SETUP_COLOR, WELCOME_IMAGE_URL
from helpers import get_safe_color

AFK_PREFIX = "[AFK] "
MAX_NICKNAME_LENGTH = 32

ONLINE_MESSAGE = "✅ **System Online:** NorthStar Bot is ready for duty!"


def welcome_embed(member: discord.Member) -> discord.Embed:
    e = discord.Embed(
        title="👋 Welcome to NorthStar VTC!",
        description=(
            f"Hello {member.mention}, we are thrilled to have you here! If you wish to join our driver team, "
            "please apply in the application channel.\n\nPlease make sure to read the rules..."
        ),
        color=get_safe_color(SETUP_COLOR),
        timestamp=datetime.datetime.now(datetime.timezone.utc),
    )
    e.set_thumbnail(url=member.display_avatar.replace(size=256).url)
    e.add_field(name="🆔 User Info", value=member.name, inline=True)
    e.set_image(url=WELCOME_IMAGE_URL)
    e.set_footer(text="NorthStar Logistics • Reliability at every mile")
    return e


def about_embed() -> discord.Embed:
    e = discord.Embed(
        title=ABOUT["title"],
        description=ABOUT["description"],
        color=get_safe_color(SETUP_COLOR),
    )
    e.set_thumbnail(url=ABOUT["thumbnail"])
    for name, value, inline in ABOUT["fields"]:
        e.add_field(name=name, value=value, inline=inline)
    e.set_footer(text=ABOUT["footer"])
    return e


HELP_SECTIONS: dict[str, tuple[str, list[str]]] = {
    "general": ("🧭 General", [
        "`{p}ping`: bot latency",
        "`{p}uptime`: how long the bot has been running",
        "`{p}about`: about NorthStar Logistics",
        "`{p}count`: current count in the counting channel",
        "`{p}afk`: toggle the [AFK] tag on your nickname",
    ]),
    "games": ("🎲 Games", [
        "`{p}rps <rock|paper|scissors>`",
        "`{p}guess <1-10>`",
        "`{p}duel @user`",
        "`{p}slots`",
        "`{p}trivia` / `{p}math`: answer within 10 seconds",
        "`{p}wyr`, `{p}search`, `{p}delivery`",
    ]),
    "staff": ("🛡️ Staff", [
        "`{p}kick @user [reason]`, `{p}ban @user [reason]`",
        "`{p}mute @user <seconds> [reason]`",
        "`{p}warn @user [reason]`",
        "`{p}setup-ticket`, `{p}setup-reaction`, `{p}setup-count`",
    ]),
}


def help_embed(prefix: str, section: Optional[str] = None) -> discord.Embed:
    e = discord.Embed(title="📖 NorthStar Bot Help", color=get_safe_color(SETUP_COLOR))
    keys = [section] if section in HELP_SECTIONS else list(HELP_SECTIONS)
    for key in keys:
        name, lines = HELP_SECTIONS[key]
        e.add_field(name=name, value="\n".join(line.format(p=prefix) for line in lines), inline=False)
    e.set_footer(text=FOOTER_TEXT)
    return e


def afk_nickname(display_name: str) -> tuple[str, bool]:
    """
    Toggle the AFK tag. Returns (new_nickname, now_afk).
    Nicknames are capped at Discord's 32 characters.
    """
    if display_name.startswith(AFK_PREFIX):
        return display_name[len(AFK_PREFIX):], False
    return (AFK_PREFIX + display_name)[:MAX_NICKNAME_LENGTH], True
