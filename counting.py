# counting.py
"""
Counting game for the #🔢-counting channel.

Members count upwards one message at a time. The same member may not count
twice in a row; a wrong number or a double count resets the game to 0.

Storage format
--------------
countData.json:
{
  "count": 41,
  "lastUser": "123456789012345678",
  "channelId": "234567890123456789"
}
IDs are written as strings so the file stays readable by other tools.
"""

from __future__ import annotations
import enum
import json
import os
import tempfile
import threading
from dataclasses import dataclass
from typing import Optional
import logging

from helpers import parse_leading_int

# Child logger (parent configured in bot.py)
logger = logging.getLogger("northstar.counting")

COUNTING_CHANNEL_NAME = "🔢-counting"


def parse_count(content: str | None) -> Optional[int]:
    """Return the number a counting message starts with, or None if it isn't numeric."""
    return parse_leading_int(content)


class CountOutcome(enum.Enum):
    NOT_A_NUMBER = "not_a_number"
    ACCEPTED = "accepted"
    DOUBLE_COUNT = "double_count"
    WRONG_NUMBER = "wrong_number"


@dataclass(frozen=True)
class CountResult:
    outcome: CountOutcome
    value: Optional[int]      # number the member posted (None when not numeric)
    previous: int             # count before this message
    count: int                # count after this message

    @property
    def reset(self) -> bool:
        return self.outcome in (CountOutcome.DOUBLE_COUNT, CountOutcome.WRONG_NUMBER)


def _as_id(value) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class CountingGame:
    """In-memory counting state, written to `path` after every transition."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.count = 0
        self.last_user_id: Optional[int] = None
        self.channel_id: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def next_number(self) -> int:
        return self.count + 1

    # ---------------- I/O ----------------
    def load(self) -> None:
        """Restore state from disk; a missing or unreadable file means a fresh game."""
        if not os.path.exists(self.path):
            logger.info(f"load:missing_file path='{self.path}' -> count=0")
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.exception(f"load:error file='{self.path}': {e}")
            return
        if not isinstance(data, dict):
            logger.warning(f"load:bad_shape file='{self.path}' type={type(data).__name__}")
            return

        count = data.get("count") or 0
        if not isinstance(count, int) or isinstance(count, bool) or count < 0:
            logger.warning(f"load:bad_count value={count!r} -> 0")
            count = 0
        self.count = count
        self.last_user_id = _as_id(data.get("lastUser")) if count else None
        self.channel_id = _as_id(data.get("channelId"))
        logger.info(f"load:ok count={self.count} last_user={self.last_user_id} channel_id={self.channel_id}")

    def save(self) -> None:
        data = {
            "count": self.count,
            "lastUser": str(self.last_user_id) if self.last_user_id is not None else None,
            "channelId": str(self.channel_id) if self.channel_id is not None else None,
        }
        d = os.path.dirname(self.path) or "."
        os.makedirs(d, exist_ok=True)
        try:
            with tempfile.NamedTemporaryFile("w", delete=False, dir=d, encoding="utf-8") as tmp:
                json.dump(data, tmp, indent=4)
                tmp_path = tmp.name
            os.replace(tmp_path, self.path)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"save:ok path='{self.path}' count={self.count}")
        except OSError as e:
            logger.exception(f"save:error path='{self.path}': {e}")
            if "tmp_path" in locals() and os.path.exists(tmp_path):
                os.remove(tmp_path)

    # ---------------- Transitions ----------------
    def reset(self) -> None:
        with self._lock:
            self._reset_locked()
            self.save()

    def _reset_locked(self) -> None:
        self.count = 0
        self.last_user_id = None

    def set_channel(self, channel_id: int) -> None:
        """Remember a freshly created counting channel and start over."""
        with self._lock:
            self.channel_id = int(channel_id)
            self._reset_locked()
            self.save()
        logger.info(f"channel:set channel_id={channel_id}")

    def submit(self, author_id: int, content: str | None) -> CountResult:
        """Apply one message to the game and persist the new state."""
        value = parse_count(content)
        with self._lock:
            previous = self.count
            if value is None:
                return CountResult(CountOutcome.NOT_A_NUMBER, None, previous, previous)

            if value == previous + 1:
                if self.last_user_id == author_id:
                    outcome = CountOutcome.DOUBLE_COUNT
                    self._reset_locked()
                else:
                    outcome = CountOutcome.ACCEPTED
                    self.count = value
                    self.last_user_id = author_id
            else:
                outcome = CountOutcome.WRONG_NUMBER
                self._reset_locked()

            self.save()
            result = CountResult(outcome, value, previous, self.count)

        if result.reset:
            logger.info(f"count:reset reason='{outcome.value}' user_id={author_id} value={value} was={previous}")
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"count:ok user_id={author_id} count={result.count}")
        return result


def violation_message(result: CountResult, mention: str) -> str | None:
    """Channel announcement for a reset, or None when nothing should be said."""
    if result.outcome is CountOutcome.DOUBLE_COUNT:
        return f"⛔ **{mention}**, you cannot count twice in a row! Reset to 0."
    if result.outcome is CountOutcome.WRONG_NUMBER:
        return f"💀 **{mention}** ruined the streak at **{result.previous}**! Reset to 0."
    return None


def online_message(game: CountingGame) -> str:
    return (
        f"🟢 **Bot Online!** We finished off at **{game.count}**. "
        f"Lets carry on from there. Next number **{game.next_number}**."
    )
