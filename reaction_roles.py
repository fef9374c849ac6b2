# reaction_roles.py
"""
Self-service ping roles: members react on the role panel to opt in/out.

Panel message ids are remembered in reaction_panels.json so reactions keep
working after a restart:
{
  "panels": ["345678901234567890"]
}
"""

from __future__ import annotations
import json
import os
import tempfile
import threading
from typing import Iterable, Optional
import logging

import discord

from config import SETUP_COLOR
from helpers import get_safe_color

# Child logger (parent configured in bot.py)
logger = logging.getLogger("northstar.reaction_roles")

PANEL_TITLE = "🎭 Selecte your Roles here!"

_lock = threading.Lock()


class PanelStore:
    """Set of message ids that are reaction-role panels, cached after the first read."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._panels: Optional[set[int]] = None

    # ---------------- I/O ----------------
    def _load(self) -> set[int]:
        if not os.path.exists(self.path):
            return set()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.exception(f"load:error file='{self.path}': {e}")
            return set()
        out: set[int] = set()
        for raw in data.get("panels", []) if isinstance(data, dict) else []:
            try:
                out.add(int(raw))
            except (TypeError, ValueError):
                continue
        return out

    def _save_atomic(self, panels: set[int]) -> bool:
        d = os.path.dirname(self.path) or "."
        tmp_path = None
        try:
            os.makedirs(d, exist_ok=True)
            with tempfile.NamedTemporaryFile("w", delete=False, dir=d, encoding="utf-8") as tmp:
                tmp_path = tmp.name
                json.dump({"panels": [str(p) for p in sorted(panels)]}, tmp, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except OSError as e:
            logger.exception(f"save:error path='{self.path}': {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            return False

    def _cached(self) -> set[int]:
        if self._panels is None:
            self._panels = self._load()
        return self._panels

    # ---------------- Public API ----------------
    # The cache only changes once the new set is on disk.
    def add(self, message_id: int) -> bool:
        with _lock:
            updated = self._cached() | {int(message_id)}
            if not self._save_atomic(updated):
                return False
            self._panels = updated
        logger.info(f"panel:add message_id={message_id}")
        return True

    def discard(self, message_id: int) -> bool:
        with _lock:
            panels = self._cached()
            if message_id not in panels:
                return False
            if not self._save_atomic(panels - {message_id}):
                return False
            self._panels = panels - {message_id}
        logger.info(f"panel:remove message_id={message_id}")
        return True

    def __contains__(self, message_id: int) -> bool:
        with _lock:
            return message_id in self._cached()


def panel_embed(roles: Iterable[tuple[str, Optional[int], str]]) -> discord.Embed:
    lines = [f"{emoji} : **{label}**" for emoji, _role_id, label in roles]
    return discord.Embed(
        title=PANEL_TITLE,
        description="Claim any roles by Reacting below:\n\n" + "\n".join(lines),
        color=get_safe_color(SETUP_COLOR),
    )


def _strip_variation(s: str) -> str:
    return s.replace("\ufe0f", "")


def role_id_for_emoji(emoji: discord.PartialEmoji | str, roles: Iterable[tuple[str, Optional[int], str]]) -> Optional[int]:
    """Configured role for a reaction emoji (variation selectors ignored)."""
    name = _strip_variation(str(emoji))
    for e, role_id, _label in roles:
        if role_id and _strip_variation(e) == name:
            return role_id
    return None


async def apply_reaction(
    guild: discord.Guild | None,
    payload: discord.RawReactionActionEvent,
    store: PanelStore,
    roles: Iterable[tuple[str, Optional[int], str]],
) -> bool:
    """Grant (REACTION_ADD) or remove (REACTION_REMOVE) the matching role. True if a role changed."""
    if guild is None or payload.message_id not in store:
        return False
    role_id = role_id_for_emoji(payload.emoji, roles)
    if role_id is None:
        return False
    role = guild.get_role(role_id)
    member = payload.member if payload.event_type == "REACTION_ADD" else guild.get_member(payload.user_id)
    if role is None or member is None or member.bot:
        return False

    try:
        if payload.event_type == "REACTION_ADD":
            await member.add_roles(role, reason="Reaction role")
        else:
            await member.remove_roles(role, reason="Reaction role")
    except discord.HTTPException:
        logger.exception(f"reaction:role_update_failed user_id={member.id} role_id={role_id}")
        return False

    logger.info(f"reaction:{payload.event_type.lower()} user_id={member.id} role_id={role_id}")
    return True
