# tickets.py
"""
Support tickets.

Flow: the support panel's select menu -> a modal asking for details -> a private
text channel for the member and staff -> Claim / Close buttons. Closing posts a
plain-text transcript to the transcript channel and deletes the ticket.

Both views are persistent (timeout=None, fixed custom_ids) and are registered
in setup_hook so the buttons keep working after a restart.
"""

from __future__ import annotations
import asyncio
import datetime
import io
import logging
from typing import Iterable, Optional

import discord

from config import (
    CLAIM_BUTTON_LABEL,
    CLOSE_BUTTON_LABEL,
    STAFF_ROLE_ID,
    TICKET_CATEGORIES,
    TICKET_DELETE_DELAY_SECONDS,
    TICKET_MENU_PLACEHOLDER,
    TICKET_PANEL,
    TRANSCRIPT_CHANNEL_ID,
)
from helpers import get_safe_color, has_role, slugify_channel_name, truncate

# Child logger (parent configured in bot.py)
logger = logging.getLogger("northstar.tickets")

SELECT_ID = "ticket_select"
CLOSE_ID = "close_ticket"
CLAIM_ID = "claim_ticket"
MODAL_PREFIX = "modal_"
DETAILS_ID = "details"


# ---------------- Helpers ----------------
def ticket_channel_name(category: str, username: str) -> str:
    return slugify_channel_name(f"{category}-{username}")


def category_from_modal_id(custom_id: str) -> Optional[str]:
    """'modal_support' -> 'support'; None for unknown categories."""
    if not custom_id.startswith(MODAL_PREFIX):
        return None
    category = custom_id[len(MODAL_PREFIX):]
    return category if category in TICKET_CATEGORIES else None


def panel_embed() -> discord.Embed:
    e = discord.Embed(
        title=TICKET_PANEL["title"],
        description=TICKET_PANEL["description"],
        color=get_safe_color(TICKET_PANEL["color"]),
    )
    e.set_author(name=TICKET_PANEL["author_name"])
    e.set_thumbnail(url=TICKET_PANEL["thumbnail"])
    e.set_image(url=TICKET_PANEL["image"])
    e.set_footer(text=TICKET_PANEL["footer"])
    return e


def new_ticket_embed(user: discord.abc.User, category: str, details: str) -> discord.Embed:
    label = TICKET_CATEGORIES.get(category, (category, ""))[0]
    e = discord.Embed(
        title="New Ticket",
        description=f"Welcome {user.mention}. Please explain your issue below.",
        color=0x3498DB,
    )
    e.add_field(name="Category", value=label, inline=True)
    e.add_field(name="Details", value=truncate(details) or "[None]", inline=False)
    return e


def ticket_overwrites(
    guild: discord.Guild, opener: discord.abc.Snowflake, staff_role: Optional[discord.Role]
) -> dict:
    allow = discord.PermissionOverwrite(
        view_channel=True, send_messages=True, read_message_history=True, attach_files=True
    )
    overwrites = {
        guild.default_role: discord.PermissionOverwrite(view_channel=False),
        opener: allow,
    }
    if staff_role is not None:
        overwrites[staff_role] = allow
    if guild.me is not None:
        overwrites[guild.me] = discord.PermissionOverwrite(
            view_channel=True, send_messages=True, read_message_history=True, manage_channels=True
        )
    return overwrites


def format_transcript(channel_name: str, messages: Iterable[discord.Message]) -> str:
    lines = [
        f"TRANSCRIPT FOR #{channel_name}",
        f"Generated {datetime.datetime.now(datetime.timezone.utc):%Y-%m-%d %H:%M:%S} UTC",
        "",
    ]
    for m in messages:
        stamp = m.created_at.strftime("%Y-%m-%d %H:%M:%S")
        lines.append(f"[{stamp}] {m.author}: {m.content}")
        for embed in m.embeds:
            if embed.title or embed.description:
                lines.append(f"  [embed] {embed.title or ''} {embed.description or ''}".rstrip())
        for a in m.attachments:
            lines.append(f"  [attachment] {a.url}")
    return "\n".join(lines)


async def build_transcript(channel: discord.TextChannel) -> discord.File:
    messages = [m async for m in channel.history(limit=None, oldest_first=True)]
    text = format_transcript(channel.name, messages)
    return discord.File(io.BytesIO(text.encode("utf-8")), filename=f"transcript-{channel.name}.txt")


async def post_transcript(channel: discord.TextChannel, transcript_channel_id: Optional[int]) -> bool:
    """Upload the transcript; failures are logged and never block the close."""
    if not transcript_channel_id:
        return False
    log_channel = channel.guild.get_channel(transcript_channel_id)
    if not isinstance(log_channel, (discord.TextChannel, discord.Thread)):
        logger.warning(f"transcript:missing_channel channel_id={transcript_channel_id}")
        return False
    try:
        file = await build_transcript(channel)
        await log_channel.send(content=f"Transcript: {channel.name}", file=file)
    except discord.HTTPException:
        logger.exception(f"transcript:failed ticket={channel.name}")
        return False
    logger.info(f"transcript:posted ticket={channel.name} to={transcript_channel_id}")
    return True


async def open_ticket(
    guild: discord.Guild,
    user: discord.Member,
    category: str,
    details: str,
    staff_role_id: Optional[int] = STAFF_ROLE_ID,
) -> discord.TextChannel:
    """Create the private ticket channel and post the welcome + controls."""
    staff_role = guild.get_role(staff_role_id) if staff_role_id else None
    channel = await guild.create_text_channel(
        name=ticket_channel_name(category, user.name),
        overwrites=ticket_overwrites(guild, user, staff_role),
        reason=f"Ticket ({category}) opened by {user}",
    )
    mention = user.mention + (f" {staff_role.mention}" if staff_role else "")
    await channel.send(
        content=mention,
        embed=new_ticket_embed(user, category, details),
        view=TicketControlsView(),
        allowed_mentions=discord.AllowedMentions(users=True, roles=True),
    )
    logger.info(f"ticket:open channel_id={channel.id} user_id={user.id} category='{category}'")
    return channel


# ---------------- UI ----------------
class TicketModal(discord.ui.Modal):
    def __init__(self, category: str) -> None:
        super().__init__(title=category.upper()[:45], custom_id=f"{MODAL_PREFIX}{category}")
        self.category = category
        self.details = discord.ui.TextInput(
            label="Details",
            custom_id=DETAILS_ID,
            style=discord.TextStyle.paragraph,
            required=True,
            max_length=1000,
        )
        self.add_item(self.details)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        if interaction.guild is None or not isinstance(interaction.user, discord.Member):
            await interaction.followup.send("❌ Tickets can only be opened inside the server.", ephemeral=True)
            return
        try:
            channel = await open_ticket(interaction.guild, interaction.user, self.category, self.details.value)
        except discord.HTTPException:
            logger.exception(f"ticket:create_failed user_id={interaction.user.id} category='{self.category}'")
            await interaction.followup.send("❌ Error creating ticket.", ephemeral=True)
            return
        await interaction.followup.send(f"✅ Ticket created: {channel.mention}", ephemeral=True)


class TicketCategorySelect(discord.ui.Select):
    def __init__(self) -> None:
        options = [
            discord.SelectOption(label=label, value=value, emoji=emoji)
            for value, (label, emoji) in TICKET_CATEGORIES.items()
        ]
        super().__init__(custom_id=SELECT_ID, placeholder=TICKET_MENU_PLACEHOLDER, options=options)

    async def callback(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_modal(TicketModal(self.values[0]))


class TicketPanelView(discord.ui.View):
    def __init__(self) -> None:
        super().__init__(timeout=None)
        self.add_item(TicketCategorySelect())


class TicketControlsView(discord.ui.View):
    """Close / Claim buttons inside a ticket channel."""

    def __init__(self, claimed_by: Optional[str] = None) -> None:
        super().__init__(timeout=None)
        if claimed_by:
            self.claim_ticket.label = f"Claimed by {claimed_by}"[:80]
            self.claim_ticket.disabled = True

    @discord.ui.button(label=CLOSE_BUTTON_LABEL, style=discord.ButtonStyle.danger, custom_id=CLOSE_ID)
    async def close_ticket(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        channel = interaction.channel
        await interaction.response.send_message("🔒 Closing ticket...")
        if not isinstance(channel, discord.TextChannel):
            return
        await post_transcript(channel, TRANSCRIPT_CHANNEL_ID)
        logger.info(f"ticket:close channel_id={channel.id} by={interaction.user.id}")
        await asyncio.sleep(TICKET_DELETE_DELAY_SECONDS)
        try:
            await channel.delete(reason=f"Ticket closed by {interaction.user}")
        except discord.HTTPException as e:
            logger.warning(f"ticket:delete_failed channel_id={channel.id}: {e}")

    @discord.ui.button(label=CLAIM_BUTTON_LABEL, style=discord.ButtonStyle.success, custom_id=CLAIM_ID)
    async def claim_ticket(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        if not has_role(interaction.user, STAFF_ROLE_ID):
            await interaction.response.send_message("⚠️ Only staff!", ephemeral=True)
            return
        await interaction.response.edit_message(view=TicketControlsView(claimed_by=interaction.user.name))
        logger.info(f"ticket:claim channel_id={interaction.channel_id} by={interaction.user.id}")
