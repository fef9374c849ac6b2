# helpers.py
"""Small shared helpers: colors, names, durations, staff checks."""

from __future__ import annotations
import re
import discord

FALLBACK_COLOR = 0x2F3136

_HEX_COLOR_RE = re.compile(r"^#([0-9a-f]{3}){1,2}$", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")


def get_safe_color(hex_code: str | None) -> discord.Colour:
    """Parse '#rgb' / '#rrggbb' into a Colour, falling back to the dark embed grey."""
    if not hex_code or not _HEX_COLOR_RE.match(hex_code):
        return discord.Colour(FALLBACK_COLOR)
    digits = hex_code[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return discord.Colour(int(digits, 16))


def parse_leading_int(text: str | None) -> int | None:
    """
    Read the integer at the start of `text` ("12", " 7 apples", "-3").
    Returns None when the text does not start with a number.
    """
    m = _LEADING_INT_RE.match(text or "")
    if not m:
        return None
    return int(m.group(1))


def slugify_channel_name(name: str, fallback: str = "ticket") -> str:
    """Turn a display name into a safe channel name fragment."""
    name = name.lower()
    name = re.sub(r"[^a-z0-9-]+", "-", name)
    name = re.sub(r"-+", "-", name).strip("-")
    if not name:
        name = fallback
    return name[:90]


def truncate(text: str | None, limit: int = 1024) -> str:
    """Clip text to an embed field limit."""
    text = text or ""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def format_uptime(seconds: float) -> str:
    seconds = max(0, int(seconds))
    days, rem = divmod(seconds, 86400)
    hours, rem = divmod(rem, 3600)
    minutes = rem // 60
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def is_staff(member: discord.abc.User | None, staff_role_id: int | None) -> bool:
    """Administrators and holders of the staff role count as staff."""
    if not isinstance(member, discord.Member):
        return False
    if member.guild_permissions.administrator:
        return True
    return staff_role_id is not None and any(r.id == staff_role_id for r in member.roles)


def has_role(member: discord.abc.User | None, role_id: int | None) -> bool:
    if role_id is None or not isinstance(member, discord.Member):
        return False
    return any(r.id == role_id for r in member.roles)
