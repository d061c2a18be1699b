"""
Bouncer - Timeout Commands
==========================

/timeout and /untimeout. Durations accept "30" (minutes), "10m",
"2h", "1d" or combinations such as "1h30m", up to Discord's 28 days.
"""

from datetime import timedelta
from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bouncer.core.constants import MAX_TIMEOUT_SECONDS
from bouncer.core.logger import logger
from bouncer.utils.duration import format_duration, parse_duration
from bouncer.utils.http_errors import log_http_error

from .helpers import GuardedCog, reason_or_default, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class TimeoutCog(GuardedCog):
    """Apply and remove member timeouts."""

    @commands.hybrid_command(name="timeout", description="Timeout a member (plain numbers are minutes)")
    @commands.guild_only()
    async def timeout(
        self,
        ctx: commands.Context,
        member: discord.Member,
        duration: str,
        *,
        reason: Optional[str] = None,
    ) -> None:
        if not ctx.guild.me.guild_permissions.moderate_members:
            await respond(ctx, "I do not have permission to timeout members.")
            return

        seconds = parse_duration(duration)
        if seconds is None:
            await respond(ctx, "Please provide a valid duration, e.g. 30, 10m, 2h or 1d.")
            return
        if seconds > MAX_TIMEOUT_SECONDS:
            await respond(ctx, "Timeouts cannot be longer than 28 days.")
            return

        reason = reason_or_default(reason)

        try:
            await member.timeout(timedelta(seconds=seconds), reason=reason)
        except discord.HTTPException as e:
            log_http_error(e, "Timeout", [("User", f"{member} ({member.id})")])
            await respond(ctx, "Failed to timeout user. Make sure I have the correct permissions and the user is moderatable.")
            return

        logger.tree("USER TIMED OUT", [
            ("User", f"{member} ({member.id})"),
            ("Duration", format_duration(seconds)),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
            ("Reason", reason[:50]),
        ], emoji="⏳")
        await respond(ctx, f"Successfully timed out {member} for {format_duration(seconds)}\nReason: {reason}")

    @commands.hybrid_command(name="untimeout", description="Remove a member's timeout")
    @commands.guild_only()
    async def untimeout(self, ctx: commands.Context, member: discord.Member, *, reason: Optional[str] = None) -> None:
        if not ctx.guild.me.guild_permissions.moderate_members:
            await respond(ctx, "I do not have permission to manage timeouts.")
            return

        reason = reason_or_default(reason)

        try:
            await member.timeout(None, reason=reason)
        except discord.HTTPException as e:
            log_http_error(e, "Untimeout", [("User", f"{member} ({member.id})")])
            await respond(ctx, "Failed to remove timeout. Make sure I have the correct permissions and the user is moderatable.")
            return

        logger.tree("TIMEOUT REMOVED", [
            ("User", f"{member} ({member.id})"),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
        ], emoji="⌛")
        await respond(ctx, f"Successfully removed timeout from {member}\nReason: {reason}")


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(TimeoutCog(bot))
    logger.tree("Timeout Cog Loaded", [("Commands", "timeout, untimeout")], emoji="⏳")
