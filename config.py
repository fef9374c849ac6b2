# config.py
"""
Runtime configuration for the NorthStar bot.

Secrets and server-specific IDs come from the environment (Railway variables or
a local .env file). Branding text is not secret and lives here as constants.
"""

from __future__ import annotations
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).with_name(".env"))


def _env_id(name: str) -> int | None:
    """Read a Discord snowflake from the environment; blank or non-numeric -> None."""
    raw = (os.getenv(name) or "").strip()
    if not raw.isdigit():
        return None
    return int(raw)


# ---------------- DATA DIR / FILES ----------------
DATA_DIR = os.getenv("DATA_DIR") or os.path.dirname(os.path.abspath(__file__))
COUNT_FILE = os.getenv("COUNT_FILE") or os.path.join(DATA_DIR, "countData.json")
REACTION_PANELS_FILE = os.path.join(DATA_DIR, "reaction_panels.json")

# ---------------- LOGGING ----------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "bot.log")

# ---------------- DISCORD ----------------
PREFIX = os.getenv("PREFIX", "!")
GUILD_ID = _env_id("GUILD_ID")  # optional: guild-only slash sync

STAFF_ROLE_ID = _env_id("STAFF_ROLE_ID")
TRANSCRIPT_CHANNEL_ID = _env_id("TRANSCRIPT_CHANNEL_ID")
WELCOME_CHANNEL_ID = _env_id("WELCOME_CHANNEL_ID")
ONLINE_LOG_CHANNEL_ID = _env_id("ONLINE_LOG_CHANNEL_ID")
COUNTING_CHANNEL_ID = _env_id("COUNTING_CHANNEL_ID")
LOGGING_CHANNEL_ID = _env_id("LOGGING_CHANNEL_ID")

# emoji -> (role id, label shown on the panel)
REACTION_ROLES: list[tuple[str, int | None, str]] = [
    ("📣", _env_id("ROLE_ANNOUNCEMENT_ID"), "| Announcements Ping"),
    ("📕", _env_id("ROLE_APPLICATION_ID"), "| Application Ping"),
    ("🗓️", _env_id("ROLE_EVENT_ID"), "| Event Ping"),
    ("📍", _env_id("ROLE_VTC_ID"), "| VTC update Ping"),
    ("🌐", _env_id("ROLE_DISCORD_ID"), "| Discord Update Ping"),
]

# ---------------- BRANDING ----------------
SETUP_COLOR = "#3498db"
FOOTER_TEXT = "NorthStar VTC • Reliability at every mile"
LOGO_URL = "https://cdn.discordapp.com/attachments/1077664866539683982/1446236802368409764/NSL_CLEAR_NO_TEXT.png"
WELCOME_IMAGE_URL = "https://cdn.discordapp.com/attachments/1077664866539683982/1457809010119151812/Welcome_message.png"

ABOUT = {
    "title": "🚚 About NorthStar Logistics",
    "description": (
        "NorthStar Logistics is a premier Virtual Trucking Company (VTC) dedicated to "
        "professionalism, community, and the open road."
    ),
    "thumbnail": LOGO_URL,
    "footer": FOOTER_TEXT,
    "fields": [
        ("🌐 Website", "https://sprogg289.github.io/NorthStar-Express/", True),
        ("📈 Requirements", "15+ Years Old", True),
    ],
}

TICKET_PANEL = {
    "author_name": "NorthStar Support Center",
    "title": "📩 NorthStar Support Center",
    "description": (
        "Welcome to our official support portal.\n By selecting a category below, you can open a ticket. "
        "Our team is here to assist you with any inquiries or issues you may have. \n\n"
        " Please choose the appropriate category to get started:"
    ),
    "color": "#3498db",
    "thumbnail": LOGO_URL,
    "image": "https://media.discordapp.net/attachments/1077664866539683982/1446830775612866722/New_Project_26.png",
    "footer": FOOTER_TEXT,
}

TICKET_MENU_PLACEHOLDER = "🔎 Choose a category to start..."

# value -> (label, emoji)
TICKET_CATEGORIES: dict[str, tuple[str, str]] = {
    "support": ("General Support", "🛠️"),
    "report": ("Player Report", "⚠️"),
    "partnership": ("Partnership Request", "🤝"),
    "invite": ("Invite Request", "🗓️"),
    "contentManagement": ("Management Team Request", "📋"),
}

CLOSE_BUTTON_LABEL = "🔒 Close & Archive Ticket"
CLAIM_BUTTON_LABEL = "🙋‍♂️ Claim Ticket"
TICKET_DELETE_DELAY_SECONDS = 5


def load_token() -> str:
    """Return the bot token or raise if it is missing/malformed (value is never logged)."""
    token = (os.getenv("DISCORD_BOT_TOKEN") or os.getenv("TOKEN") or "").strip()

    # If someone pasted "Bot <token>", fix it:
    if token.lower().startswith("bot "):
        token = token.split(" ", 1)[1].strip()

    if not token:
        raise RuntimeError("DISCORD_BOT_TOKEN is missing. Check your .env or Railway variables.")
    if len(token) < 50 or "." not in token:
        raise RuntimeError("DISCORD_BOT_TOKEN looks malformed. Make sure you copied the Bot Token from the Bot tab.")
    return token
