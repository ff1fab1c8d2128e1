"""
Configuration commands for Jrrp
Extension of the main cog for settings management
"""

from redbot.core import commands
from redbot.core.utils.chat_formatting import box

from .errors import ValidationError
from .models import ScheduledEvent
from .utils import resolve_timezone, today_string


class ConfigCommands:
    """Configuration commands mixin for Jrrp."""

    @commands.group(name="jrrpset")
    @commands.is_owner()
    async def jrrpset(self, ctx: commands.Context):
        """
        Configure Jrrp settings.
        """
        if ctx.invoked_subcommand is None:
            await ctx.send_help(ctx.command)

    @jrrpset.command(name="view")
    async def jrrpset_view(self, ctx: commands.Context):
        """View current Jrrp configuration."""
        conf = await self.config.all()
        total = await self.db.count_records()
        events = self.ledger.events

        event_lines = "\n".join(f"  {i}. {event.describe()}" for i, event in enumerate(events, 1))
        settings = f"""
Jrrp Configuration
══════════════════

Timezone: {conf['timezone']} (today is {today_string(conf['timezone'])})
Stored luck records: {total}

Scheduled events (first match wins):
{event_lines or '  none'}
        """
        await ctx.send(box(settings, lang="yaml"))

    @jrrpset.command(name="timezone")
    async def jrrpset_timezone(self, ctx: commands.Context, tz_name: str):
        """
        Set the timezone that decides when a new day starts.

        **Example:**
        `[p]jrrpset timezone Asia/Shanghai`
        """
        try:
            resolve_timezone(tz_name)
        except ValidationError as e:
            await ctx.send(f"❌ {e.message}")
            return
        await self.config.timezone.set(tz_name)
        await ctx.send(f"✅ Timezone set to {tz_name}. Today is {today_string(tz_name)}.")

    @jrrpset.group(name="event")
    async def jrrpset_event(self, ctx: commands.Context):
        """Manage scheduled events that force a luck value on matching days."""
        if ctx.invoked_subcommand is None:
            await ctx.send_help(ctx.command)

    @jrrpset_event.command(name="add")
    async def jrrpset_event_add(self, ctx: commands.Context, pattern: str, value: int, *, reason: str):
        """
        Add a scheduled event.

        The pattern is YYYY-MM-DD with `*` for any part. Events are checked in
        the order they were added and the first match wins.

        **Examples:**
        `[p]jrrpset event add *-01-01 100 Happy new year`
        `[p]jrrpset event add 2024-04-* 0 April gloom`
        """
        try:
            event = ScheduledEvent.from_pattern(pattern, value, reason)
        except ValidationError as e:
            await ctx.send(f"❌ {e.message}")
            return

        async with self.config.events() as events:
            events.append(event.to_json())
            position = len(events)
        await self.reload_events()
        await ctx.send(f"✅ Event #{position} added: {event.describe()}")

    @jrrpset_event.command(name="remove", aliases=["delete", "del"])
    async def jrrpset_event_remove(self, ctx: commands.Context, index: int):
        """Remove a scheduled event by its number in `[p]jrrpset event list`."""
        async with self.config.events() as events:
            if not 1 <= index <= len(events):
                await ctx.send(f"❌ There is no event #{index}.")
                return
            removed = ScheduledEvent.from_json(events.pop(index - 1))
        await self.reload_events()
        await ctx.send(f"✅ Removed event: {removed.describe()}")

    @jrrpset_event.command(name="list")
    async def jrrpset_event_list(self, ctx: commands.Context):
        """List scheduled events in match order."""
        events = self.ledger.events
        if not events:
            await ctx.send("No scheduled events.")
            return
        lines = [f"{i}. {event.describe()}" for i, event in enumerate(events, 1)]
        await ctx.send(box("\n".join(lines), lang="ini"))
