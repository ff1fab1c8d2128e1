"""
Jrrp - Daily luck values for Red-DiscordBot

Every user gets one luck value (0-100) per day. On top of the ledger:
- averages and history with an optional moving average
- guild and global leaderboards
- a month calendar
- scheduled events that force a value on given days
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Optional, Set

import discord
from redbot.core import Config, commands
from redbot.core.bot import Red
from redbot.core.data_manager import cog_data_path
from redbot.core.utils.chat_formatting import box, pagify

from .config import DB_FILE, DEFAULTS, PAGE_LENGTH, PLATFORM
from .config_commands import ConfigCommands
from .database import JrrpDatabase
from .errors import NotFoundError, UpstreamError, ValidationError
from .formatting import (
    average_message,
    history_table,
    leaderboard_lines,
    month_calendar,
    rank_message,
    roll_message,
)
from .ledger import LuckLedger
from .models import load_events
from .ranking import LuckStats
from .smoothing import moving_average
from .utils import make_uid, split_uid, this_month, today_string

log = logging.getLogger("red.FARA.Jrrp")

__version__ = "1.0.0"


class Jrrp(ConfigCommands, commands.Cog):
    """Check your luck of the day, compare it and follow it over time."""

    __version__ = __version__

    def __init__(self, bot: Red):
        self.bot = bot
        self.config = Config.get_conf(self, identifier=0xFA11A77E, force_registration=True)
        self.config.register_global(**DEFAULTS)

        self.db_path = cog_data_path(self) / DB_FILE
        self.db = JrrpDatabase(self.db_path)
        self.ledger = LuckLedger(self.db)
        self.stats = LuckStats(self.db)

    async def cog_load(self) -> None:
        """Initialize database, salt and scheduled events."""
        log.info(f"Jrrp v{__version__} loading...")
        await self.db.initialize()
        await self.db.migrate_legacy(await self.config.timezone())

        salt = await self.config.seed_salt()
        if not salt:
            salt = secrets.token_hex(8)
            await self.config.seed_salt.set(salt)
        self.ledger.salt = salt

        await self.reload_events()
        log.info("Jrrp loaded successfully")

    async def cog_unload(self):
        """Clean up when cog is unloaded."""
        log.info("Jrrp cog unloaded")

    async def reload_events(self):
        """Re-read scheduled events from config."""
        events = load_events(await self.config.events())
        self.ledger.set_events(events)
        log.info(f"Loaded {len(events)} scheduled events")

    # ==================== HELPERS ====================

    @staticmethod
    def _uid(user: discord.abc.User) -> str:
        return make_uid(PLATFORM, user.id)

    @staticmethod
    def _host_name(user: discord.abc.User) -> str:
        return user.display_name or user.name or str(user.id)

    async def _today(self) -> str:
        return today_string(await self.config.timezone())

    async def _roster(self, guild: discord.Guild) -> Set[str]:
        """Ids of everyone in the guild."""
        if not guild.chunked:
            try:
                await guild.chunk()
            except (discord.HTTPException, discord.ClientException) as e:
                log.error(f"Error chunking members of guild {guild.id}: {e}", exc_info=True)
                raise UpstreamError(
                    f"Could not fetch the member list of {guild.name}.",
                    details={"guild_id": guild.id},
                ) from e
        return {str(member.id) for member in guild.members}

    @staticmethod
    def _fallback_name(guild: Optional[discord.Guild]) -> Callable[[str], Optional[str]]:
        """Nickname or user name from the guild when no display name is stored."""
        def resolve(uid: str) -> Optional[str]:
            platform, user_id = split_uid(uid)
            if guild is None or platform != PLATFORM or not user_id.isdigit():
                return None
            member = guild.get_member(int(user_id))
            return member.display_name if member else None
        return resolve

    async def _send_boxed(self, ctx: commands.Context, text: str, header: str = ""):
        pages = list(pagify(text, delims=["\n"], page_length=PAGE_LENGTH))
        for i, page in enumerate(pages):
            await ctx.send((header + "\n" if header and i == 0 else "") + box(page))

    # ==================== LISTENERS ====================

    @commands.Cog.listener()
    async def on_member_update(self, before: discord.Member, after: discord.Member):
        """Keep stored display names in step with nickname changes."""
        if after.bot or before.display_name == after.display_name:
            return
        # Only users who already ran [p]jrrp have a row to update
        await self.db.update_name(self._uid(after), after.display_name)

    # ==================== COMMANDS ====================

    @commands.group(name="jrrp", invoke_without_command=True)
    async def jrrp(self, ctx: commands.Context):
        """Check your luck of the day."""
        uid = self._uid(ctx.author)
        name = self._host_name(ctx.author)
        await self.db.set_name(uid, name)

        result = await self.ledger.get_or_assign_today(uid, await self._today())
        await ctx.send(roll_message(name, result))

    @jrrp.command(name="average", aliases=["avg"])
    async def jrrp_average(self, ctx: commands.Context):
        """Show your average luck over all days."""
        name = self._host_name(ctx.author)
        try:
            average = await self.stats.average(self._uid(ctx.author))
        except NotFoundError:
            await ctx.send(f"{name} has no luck history yet.")
            return
        await ctx.send(average_message(name, average))

    @jrrp.command(name="top")
    @commands.guild_only()
    async def jrrp_top(self, ctx: commands.Context, max_count: Optional[int] = None):
        """
        Today's luck leaderboard for this server.

        **Example:**
        `[p]jrrp top 10`
        """
        await self._show_leaderboard(ctx, reverse=False, max_count=max_count, global_scope=False)

    @jrrp.command(name="bottom")
    @commands.guild_only()
    async def jrrp_bottom(self, ctx: commands.Context, max_count: Optional[int] = None):
        """Today's luck leaderboard for this server, lowest first."""
        await self._show_leaderboard(ctx, reverse=True, max_count=max_count, global_scope=False)

    @jrrp.command(name="global", hidden=True)
    @commands.is_owner()
    async def jrrp_global(self, ctx: commands.Context, max_count: Optional[int] = None, reverse: bool = False):
        """Today's luck leaderboard across every server."""
        await self._show_leaderboard(ctx, reverse=reverse, max_count=max_count, global_scope=True)

    async def _show_leaderboard(
        self, ctx: commands.Context, *, reverse: bool, max_count: Optional[int], global_scope: bool
    ):
        uid = self._uid(ctx.author)
        name = self._host_name(ctx.author)

        members = None
        platform = None
        if not global_scope:
            members = await self._roster(ctx.guild)
            platform = PLATFORM

        try:
            board = await self.stats.leaderboard(
                await self._today(),
                members=members,
                platform=platform,
                reverse=reverse,
                max_count=max_count,
                uid=uid,
                fallback_name=self._fallback_name(ctx.guild),
            )
        except ValidationError as e:
            await ctx.send(f"❌ {e.message}")
            return

        if board.is_empty:
            await ctx.send("Nobody has checked their luck today.")
            return

        title = "Today's luck leaderboard" + (" (lowest first)" if reverse else "")
        header = f"{rank_message(name, board.rank, reverse)}\n{title}"
        await self._send_boxed(ctx, leaderboard_lines(board, uid), header=header)

    @jrrp.command(name="calendar")
    async def jrrp_calendar(self, ctx: commands.Context, month: Optional[str] = None):
        """
        Your luck calendar for a month.

        **Example:**
        `[p]jrrp calendar 2024-01`
        """
        month = month or this_month(await self.config.timezone())
        try:
            series = await self.stats.history_range(self._uid(ctx.author), month)
        except ValidationError:
            await ctx.send(f"{month} is not a valid month, use YYYY-MM.")
            return
        await ctx.send(box(month_calendar(series, month)))

    @jrrp.command(name="history")
    async def jrrp_history(
        self,
        ctx: commands.Context,
        window: Optional[int] = None,
        target: Optional[discord.Member] = None,
    ):
        """
        Your luck history.

        Give a window length to add a moving average, and a member to
        compare against.

        **Examples:**
        `[p]jrrp history`
        `[p]jrrp history 7`
        `[p]jrrp history 7 @someone`
        """
        own = await self.stats.history(self._uid(ctx.author))
        if not own:
            await ctx.send("You have no luck history yet.")
            return

        averages = None
        if window is not None:
            try:
                averages = moving_average(own, window)
            except ValidationError as e:
                await ctx.send(f"❌ {e.message}")
                return

        other = None
        other_label = "them"
        if target is not None:
            other = await self.stats.history(self._uid(target))
            other_label = self._host_name(target)

        text = history_table(
            own,
            averages=averages,
            other=other,
            own_label=self._host_name(ctx.author),
            other_label=other_label,
        )
        await self._send_boxed(ctx, text)
