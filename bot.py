# bot.py
import asyncio
import datetime
import logging
import logging.handlers
import time
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

import config
from config import (
    COUNTING_CHANNEL_ID,
    LOG_FILE,
    LOG_LEVEL,
    LOGGING_CHANNEL_ID,
    ONLINE_LOG_CHANNEL_ID,
    PREFIX,
    REACTION_ROLES,
    STAFF_ROLE_ID,
    WELCOME_CHANNEL_ID,
)
import community
import games
import moderation
import reaction_roles
import server_logs
import tickets
from counting import COUNTING_CHANNEL_NAME, CountingGame, CountOutcome, online_message, violation_message
from helpers import format_uptime, is_staff


# ---------------- LOGGING ----------------
def setup_logging():
    # Root logger: keep minimal setup so third-party libs aren't affected.
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.INFO)
    root.addHandler(logging.StreamHandler())  # simple console for discord.py logs

    # Our app logger + handlers
    app_logger = logging.getLogger("northstar")
    app_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    app_logger.propagate = False

    fmt = logging.Formatter(
        "%(asctime)s %(levelname)-7s %(name)s :: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    ch = logging.StreamHandler()
    ch.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    ch.setFormatter(fmt)

    fh = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=2_000_000, backupCount=3, encoding="utf-8"
    )
    fh.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    fh.setFormatter(fmt)

    # Clear existing handlers on the app logger to avoid duplicates
    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    app_logger.addHandler(ch)
    app_logger.addHandler(fh)

logger = logging.getLogger("northstar")


# ---------------- BOT SETUP ----------------
intents = discord.Intents.default()
intents.message_content = True   # counting game + prefix commands
intents.members = True           # welcome, nickname and kick logs
bot = commands.Bot(command_prefix=PREFIX, intents=intents, help_command=None)

counting_game = CountingGame(config.COUNT_FILE)
reaction_panels = reaction_roles.PanelStore(config.REACTION_PANELS_FILE)

_ready_once = False
started_at: Optional[float] = None


def staff_only():
    """Prefix-command check: administrators or the staff role."""
    async def predicate(ctx: commands.Context) -> bool:
        if ctx.guild is None:
            raise commands.NoPrivateMessage()
        return is_staff(ctx.author, STAFF_ROLE_ID)
    return commands.check(predicate)


async def _safe_send(channel: discord.abc.Messageable | None, *args, **kwargs) -> Optional[discord.Message]:
    if channel is None:
        return None
    try:
        return await channel.send(*args, **kwargs)
    except discord.HTTPException as e:
        logger.warning(f"send:failed channel={getattr(channel, 'id', None)}: {e}")
        return None


async def _log(guild: discord.Guild | None, embed: discord.Embed) -> None:
    await server_logs.send_log(guild, LOGGING_CHANNEL_ID, embed)


# ---------------- LIFECYCLE ----------------
@bot.event
async def setup_hook():
    counting_game.load()
    if COUNTING_CHANNEL_ID:
        counting_game.channel_id = COUNTING_CHANNEL_ID

    # Persistent views: buttons/menus posted before a restart keep working
    bot.add_view(tickets.TicketPanelView())
    bot.add_view(tickets.TicketControlsView())


@bot.event
async def on_ready():
    global _ready_once, started_at
    logger.info("startup: bot ready as %s (guilds=%d, LOG_LEVEL=%s, LOG_FILE=%s)",
                bot.user, len(bot.guilds), LOG_LEVEL, LOG_FILE)
    if _ready_once:  # gateway reconnects fire on_ready again
        return
    _ready_once = True
    started_at = time.monotonic()

    try:
        if config.GUILD_ID:
            guild = discord.Object(id=config.GUILD_ID)
            bot.tree.copy_global_to(guild=guild)
            synced = await bot.tree.sync(guild=guild)
        else:
            synced = await bot.tree.sync()
        logger.info(f"Synced {len(synced)} slash commands: {[c.name for c in synced]}")
    except Exception as e:
        logger.exception(f"[SYNC ERROR] {type(e).__name__}: {e}")

    if ONLINE_LOG_CHANNEL_ID:
        await _safe_send(bot.get_channel(ONLINE_LOG_CHANNEL_ID), community.ONLINE_MESSAGE)

    if counting_game.channel_id:
        await _safe_send(bot.get_channel(counting_game.channel_id), online_message(counting_game))


# ---------------- WELCOME ----------------
@bot.event
async def on_member_join(member: discord.Member):
    if not WELCOME_CHANNEL_ID:
        return
    channel = member.guild.get_channel(WELCOME_CHANNEL_ID)
    if channel is None:
        return
    await _safe_send(channel, content=f"Welcome {member.mention}!", embed=community.welcome_embed(member))


# ---------------- SERVER LOGS ----------------
@bot.event
async def on_message_delete(message: discord.Message):
    if message.guild is None or message.author.bot:
        return
    await _log(message.guild, server_logs.message_deleted_embed(
        str(message.author), message.channel.mention, message.content))


@bot.event
async def on_message_edit(before: discord.Message, after: discord.Message):
    if before.guild is None or before.author.bot or before.content == after.content:
        return
    await _log(before.guild, server_logs.message_edited_embed(
        str(before.author), before.channel.mention, before.content, after.content))


@bot.event
async def on_member_ban(guild: discord.Guild, user: discord.User | discord.Member):
    entry = await server_logs.latest_audit_entry(guild, discord.AuditLogAction.ban)
    executor = server_logs.executor_of(entry, user.id)
    reason = entry.reason if executor != "Unknown" else None
    logger.info(f"audit:ban user_id={user.id} by='{executor}'")
    await _log(guild, server_logs.member_banned_embed(str(user), user.display_avatar.url, executor, reason))


@bot.event
async def on_member_unban(guild: discord.Guild, user: discord.User):
    entry = await server_logs.latest_audit_entry(guild, discord.AuditLogAction.unban)
    executor = server_logs.executor_of(entry, user.id)
    logger.info(f"audit:unban user_id={user.id} by='{executor}'")
    await _log(guild, server_logs.member_unbanned_embed(str(user), executor))


@bot.event
async def on_guild_channel_create(channel: discord.abc.GuildChannel):
    await _log(channel.guild, server_logs.channel_created_embed(channel.mention, channel.name))


@bot.event
async def on_guild_channel_delete(channel: discord.abc.GuildChannel):
    await _log(channel.guild, server_logs.channel_deleted_embed(channel.name))


@bot.event
async def on_member_update(before: discord.Member, after: discord.Member):
    if before.nick == after.nick:
        return
    await _log(after.guild, server_logs.nickname_changed_embed(
        str(after), server_logs.nickname_label(before), server_logs.nickname_label(after)))


@bot.event
async def on_member_remove(member: discord.Member):
    await server_logs.log_kick_if_any(member, LOGGING_CHANNEL_ID)


@bot.event
async def on_guild_role_delete(role: discord.Role):
    entry = await server_logs.latest_audit_entry(role.guild, discord.AuditLogAction.role_delete)
    await _log(role.guild, server_logs.role_deleted_embed(role.name, server_logs.executor_of(entry, role.id)))


# ---------------- REACTION ROLES ----------------
@bot.event
async def on_raw_reaction_add(payload: discord.RawReactionActionEvent):
    await reaction_roles.apply_reaction(bot.get_guild(payload.guild_id or 0), payload, reaction_panels, REACTION_ROLES)


@bot.event
async def on_raw_reaction_remove(payload: discord.RawReactionActionEvent):
    await reaction_roles.apply_reaction(bot.get_guild(payload.guild_id or 0), payload, reaction_panels, REACTION_ROLES)


@bot.event
async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent):
    reaction_panels.discard(payload.message_id)


# ---------------- MESSAGES / COUNTING ----------------
async def handle_counting(message: discord.Message) -> None:
    result = counting_game.submit(message.author.id, message.content)
    try:
        if result.outcome is CountOutcome.NOT_A_NUMBER:
            await message.delete()
        elif result.outcome is CountOutcome.ACCEPTED:
            await message.add_reaction("✅")
        else:
            await message.add_reaction("❌")
            await message.channel.send(violation_message(result, message.author.mention))
    except discord.HTTPException as e:
        logger.warning(f"count:reply_failed message_id={message.id} outcome={result.outcome.value}: {e}")


@bot.event
async def on_message(message: discord.Message):
    if message.author.bot:
        return

    if counting_game.channel_id and message.channel.id == counting_game.channel_id:
        await handle_counting(message)
        return

    await bot.process_commands(message)


# ---------------- ERRORS ----------------
@bot.event
async def on_command_error(ctx: commands.Context, error: commands.CommandError):
    if isinstance(error, commands.CommandNotFound):
        return
    if isinstance(error, commands.NoPrivateMessage):
        await ctx.reply("❌ This command only works inside the server.")
        return
    if isinstance(error, commands.CheckFailure):
        await ctx.reply(moderation.NO_PERMISSION)
        return
    if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument)):
        await ctx.reply(f"⚠️ Usage: `{ctx.prefix}{ctx.command.qualified_name} {ctx.command.signature}`")
        return
    logger.error(f"command:error name='{ctx.command}' user_id={ctx.author.id}", exc_info=error)
    await ctx.reply("❌ Something went wrong running that command.")


@bot.tree.error
async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError):
    logger.error(f"slash:error name='{interaction.command and interaction.command.name}'", exc_info=error)
    msg = "❌ Something went wrong running that command."
    if interaction.response.is_done():
        await interaction.followup.send(msg, ephemeral=True)
    else:
        await interaction.response.send_message(msg, ephemeral=True)


# ---------------- UTILITY COMMANDS ----------------
def _uptime_text() -> str:
    elapsed = time.monotonic() - started_at if started_at is not None else 0
    return f"⏱️ The bot has been up for **{format_uptime(elapsed)}**."


def _count_text() -> str:
    if not counting_game.channel_id:
        return "🔢 The counting game isn't set up yet. Staff can run `setup-count`."
    return (f"🔢 Current count: **{counting_game.count}** in <#{counting_game.channel_id}>. "
            f"Next number **{counting_game.next_number}**.")


@bot.command(name="ping")
async def ping_cmd(ctx: commands.Context):
    await ctx.reply(f"🏓 Pong! {round(bot.latency * 1000)}ms")


@bot.command(name="uptime")
async def uptime_cmd(ctx: commands.Context):
    await ctx.reply(_uptime_text())


@bot.command(name="about")
async def about_cmd(ctx: commands.Context):
    await ctx.send(embed=community.about_embed())


@bot.command(name="help")
async def help_cmd(ctx: commands.Context, section: Optional[str] = None):
    await ctx.send(embed=community.help_embed(ctx.prefix or PREFIX, (section or "").lower() or None))


@bot.command(name="count")
async def count_cmd(ctx: commands.Context):
    await ctx.reply(_count_text())


@bot.command(name="afk")
@commands.guild_only()
async def afk_cmd(ctx: commands.Context):
    new_name, now_afk = community.afk_nickname(ctx.author.display_name)
    try:
        await ctx.author.edit(nick=new_name)
    except discord.HTTPException:
        await ctx.reply("❌ Error changing nickname.")
        return
    await ctx.reply("💤 AFK mode active." if now_afk else "👋 Welcome back!")


# ---------------- STAFF SETUP ----------------
@bot.command(name="setup-count")
@staff_only()
async def setup_count_cmd(ctx: commands.Context):
    if counting_game.channel_id:
        existing = ctx.guild.get_channel(counting_game.channel_id)
        if existing:
            await ctx.reply(f"⚠️ **Counting System is already active!**\nGo to: {existing.mention}")
            return

    duplicate = discord.utils.get(ctx.guild.text_channels, name=COUNTING_CHANNEL_NAME)
    if duplicate:
        await ctx.reply(f"⚠️ **A counting channel already exists!**\nGo to: {duplicate.mention}")
        return

    try:
        count_channel = await ctx.guild.create_text_channel(
            name=COUNTING_CHANNEL_NAME,
            overwrites={ctx.guild.default_role: discord.PermissionOverwrite(view_channel=True, send_messages=True)},
            reason=f"Counting channel set up by {ctx.author}",
        )
    except discord.HTTPException:
        logger.exception("setup_count:create_failed")
        await ctx.reply("❌ Error creating channel.")
        return

    counting_game.set_channel(count_channel.id)
    await ctx.send(
        f"✅ Channel created: {count_channel.mention}.\n"
        f"**Important:** Add `COUNTING_CHANNEL_ID={count_channel.id}` to your Railway variables."
    )
    await count_channel.send("🏁 **Start Counting!** The first number is **1**.")


@bot.command(name="setup-ticket")
@staff_only()
async def setup_ticket_cmd(ctx: commands.Context):
    await ctx.send(embed=tickets.panel_embed(), view=tickets.TicketPanelView())


@bot.command(name="setup-reaction")
@staff_only()
async def setup_reaction_cmd(ctx: commands.Context):
    sent = await ctx.send(embed=reaction_roles.panel_embed(REACTION_ROLES))
    if not reaction_panels.add(sent.id):
        await ctx.reply("⚠️ Could not save this panel; reactions on it won't assign roles.")
    for emoji, _role_id, _label in REACTION_ROLES:
        await sent.add_reaction(emoji)


# ---------------- MODERATION ----------------
@bot.command(name="kick")
@staff_only()
async def kick_cmd(ctx: commands.Context, target: Optional[discord.Member] = None, *, reason: Optional[str] = None):
    if target is None:
        await ctx.reply("⚠️ Mention a user to kick.")
        return
    if target.top_role >= ctx.guild.me.top_role or target == ctx.guild.owner:
        await ctx.reply("❌ I cannot kick this user (Check roles/permissions).")
        return
    reason = moderation.reason_or_default(reason)
    try:
        await target.kick(reason=reason)
    except discord.HTTPException:
        logger.exception(f"kick:failed user_id={target.id}")
        await ctx.reply("❌ Error kicking user.")
        return
    logger.info(f"mod:kick user_id={target.id} by={ctx.author.id}")
    await ctx.send(moderation.kick_message(str(target), reason))


@bot.command(name="ban")
@staff_only()
async def ban_cmd(ctx: commands.Context, target: Optional[discord.Member] = None, *, reason: Optional[str] = None):
    if target is None:
        await ctx.reply("⚠️ Mention a user to ban.")
        return
    if target.top_role >= ctx.guild.me.top_role or target == ctx.guild.owner:
        await ctx.reply("❌ I cannot ban this user (Check roles/permissions).")
        return
    reason = moderation.reason_or_default(reason)
    try:
        await target.ban(reason=reason)
    except discord.HTTPException:
        logger.exception(f"ban:failed user_id={target.id}")
        await ctx.reply("❌ Error banning user.")
        return
    logger.info(f"mod:ban user_id={target.id} by={ctx.author.id}")
    await ctx.send(moderation.ban_message(str(target), reason))


@bot.command(name="mute")
@staff_only()
async def mute_cmd(
    ctx: commands.Context,
    target: Optional[discord.Member] = None,
    seconds: Optional[str] = None,
    *,
    reason: Optional[str] = None,
):
    if target is None:
        await ctx.reply(f"⚠️ Mention a user. Usage: `{ctx.prefix}mute @user 60 Spamming`")
        return
    duration = moderation.parse_mute_seconds(seconds)
    if duration is None:
        await ctx.reply("⚠️ Provide time in seconds (up to 28 days).")
        return
    reason = moderation.reason_or_default(reason)
    try:
        await target.timeout(datetime.timedelta(seconds=duration), reason=reason)
    except discord.HTTPException:
        logger.exception(f"mute:failed user_id={target.id}")
        await ctx.reply("❌ Error muting user.")
        return
    logger.info(f"mod:mute user_id={target.id} seconds={duration} by={ctx.author.id}")
    await ctx.send(moderation.mute_message(str(target), duration, reason))


@bot.command(name="warn")
@staff_only()
async def warn_cmd(ctx: commands.Context, target: Optional[discord.Member] = None, *, reason: Optional[str] = None):
    if target is None:
        await ctx.reply(f"⚠️ Mention a user to warn. Usage: `{ctx.prefix}warn @user Reason`")
        return
    reason = moderation.reason_or_default(reason)
    icon = ctx.guild.icon.url if ctx.guild.icon else None
    dm_sent = await moderation.send_warning_dm(target, moderation.warning_dm_embed(icon, reason))

    await _log(ctx.guild, server_logs.member_warned_embed(
        str(target), target.id, target.display_avatar.url, str(ctx.author), reason))
    logger.info(f"mod:warn user_id={target.id} by={ctx.author.id} dm_sent={dm_sent}")
    await ctx.send(moderation.warn_message(str(target), reason, dm_sent))


# ---------------- GAMES ----------------
@bot.command(name="rps")
async def rps_cmd(ctx: commands.Context, choice: Optional[str] = None):
    user_choice = games.parse_rps_choice(choice)
    if user_choice is None:
        await ctx.reply(f"⚠️ Usage: `{ctx.prefix}rps <rock|paper|scissors>`")
        return
    await ctx.send(embed=games.rps_embed(user_choice))


@bot.command(name="guess")
async def guess_cmd(ctx: commands.Context, number: Optional[str] = None):
    guess = games.parse_guess(number)
    if guess is None:
        await ctx.reply(f"⚠️ Usage: `{ctx.prefix}guess <number 1-10>`")
        return
    await ctx.reply(games.guess_reply(guess))


@bot.command(name="duel")
async def duel_cmd(ctx: commands.Context, target: Optional[discord.User] = None):
    error = games.duel_error(ctx.author, target)
    if error:
        await ctx.reply(error)
        return
    await ctx.send(embed=games.duel_embed(ctx.author, target))


@bot.command(name="slots")
async def slots_cmd(ctx: commands.Context):
    await ctx.send(embed=games.slots_embed(games.spin_slots()))


async def _await_answer(ctx: commands.Context) -> Optional[discord.Message]:
    def check(m: discord.Message) -> bool:
        return m.author.id == ctx.author.id and m.channel.id == ctx.channel.id

    try:
        return await bot.wait_for("message", check=check, timeout=games.ANSWER_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        return None


@bot.command(name="trivia")
async def trivia_cmd(ctx: commands.Context):
    trivia = games.pick_trivia()
    await ctx.send(f"🧠 **Trivia Time!**\nQuestion: {trivia.question}\n*(You have 10 seconds to answer)*")
    reply = await _await_answer(ctx)
    if reply is None:
        await ctx.send(f"⏰ **Time's up!** The answer was: {trivia.answers[0]}")
    elif trivia.is_correct(reply.content):
        await ctx.send("✅ **Correct!** Good job.")
    else:
        await ctx.send(f"❌ **Wrong!** The answer was: {trivia.answers[0]}")


@bot.command(name="wyr")
async def wyr_cmd(ctx: commands.Context):
    await ctx.send(embed=games.wyr_embed())


@bot.command(name="math")
async def math_cmd(ctx: commands.Context):
    problem = games.make_math_problem()
    await ctx.send(f"🧮 **Solve this:** `{problem}` (10 seconds)")
    reply = await _await_answer(ctx)
    if reply is None:
        await ctx.send(f"⏰ **Time's up!** The answer was {problem.answer}.")
    elif problem.is_correct(reply.content):
        await ctx.send("✅ **Correct!** Math genius.")
    else:
        await ctx.send(f"❌ **Wrong.** The answer was {problem.answer}.")


@bot.command(name="search")
async def search_cmd(ctx: commands.Context):
    await ctx.reply(games.search_reply())


@bot.command(name="delivery")
async def delivery_cmd(ctx: commands.Context):
    await ctx.send(embed=games.delivery_embed(games.roll_delivery()))


# ---------------- SLASH COMMANDS ----------------
HELP_CHOICES = [
    app_commands.Choice(name="All", value="all"),
    app_commands.Choice(name="General", value="general"),
    app_commands.Choice(name="Games", value="games"),
    app_commands.Choice(name="Staff", value="staff"),
]

RPS_CHOICES = [
    app_commands.Choice(name="Rock", value="rock"),
    app_commands.Choice(name="Paper", value="paper"),
    app_commands.Choice(name="Scissors", value="scissors"),
]


@bot.tree.command(name="ping", description="Check the bot's latency.")
async def ping_slash(interaction: discord.Interaction):
    await interaction.response.send_message(f"🏓 Pong! {round(bot.latency * 1000)}ms")


@bot.tree.command(name="uptime", description="How long the bot has been running.")
async def uptime_slash(interaction: discord.Interaction):
    await interaction.response.send_message(_uptime_text())


@bot.tree.command(name="about", description="About NorthStar Logistics.")
async def about_slash(interaction: discord.Interaction):
    await interaction.response.send_message(embed=community.about_embed())


@bot.tree.command(name="count", description="Show the counting game's current number.")
async def count_slash(interaction: discord.Interaction):
    await interaction.response.send_message(_count_text(), ephemeral=True)


@bot.tree.command(name="help", description="What the NorthStar bot can do.")
@app_commands.describe(section="Pick a section or 'All'")
@app_commands.choices(section=HELP_CHOICES)
async def help_slash(interaction: discord.Interaction, section: app_commands.Choice[str] | None = None):
    sel = section.value if section else None
    await interaction.response.send_message(embed=community.help_embed(PREFIX, sel), ephemeral=True)


@bot.tree.command(name="rps", description="Play rock, paper, scissors against the bot.")
@app_commands.choices(choice=RPS_CHOICES)
async def rps_slash(interaction: discord.Interaction, choice: app_commands.Choice[str]):
    await interaction.response.send_message(embed=games.rps_embed(games.parse_rps_choice(choice.value)))


# ---------------- RUN ----------------
def main() -> None:
    setup_logging()
    token = config.load_token()
    logger.info("Starting bot process...")
    bot.run(token, log_handler=None)


if __name__ == "__main__":
    main()
