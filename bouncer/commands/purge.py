"""
Bouncer - Purge Command
=======================

Bulk delete recent messages in the current channel. The prefix form
also removes the invoking message, so it deletes amount + 1.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from bouncer.core.constants import PURGE_MAX, PURGE_MIN
from bouncer.core.logger import logger
from bouncer.utils.http_errors import log_http_error

from .helpers import GuardedCog, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class PurgeCog(GuardedCog):
    """Bulk message deletion."""

    @commands.hybrid_command(name="purge", description="Delete recent messages in this channel (1-100)")
    @commands.guild_only()
    async def purge(self, ctx: commands.Context, amount: commands.Range[int, PURGE_MIN, PURGE_MAX]) -> None:
        if not ctx.channel.permissions_for(ctx.guild.me).manage_messages:
            await respond(ctx, "I do not have permission to manage messages.")
            return

        # The prefix invocation itself sits at the top of the channel
        limit = amount if ctx.interaction is not None else amount + 1
        await ctx.defer(ephemeral=True)

        try:
            deleted = await ctx.channel.purge(limit=limit)
        except discord.HTTPException as e:
            log_http_error(e, "Purge", [
                ("Channel", f"#{ctx.channel.name} ({ctx.channel.id})"),
                ("Amount", str(amount)),
            ])
            await respond(ctx, "Failed to delete messages. Messages older than 14 days cannot be bulk deleted.")
            return

        logger.tree("MESSAGES PURGED", [
            ("Channel", f"#{ctx.channel.name} ({ctx.channel.id})"),
            ("Requested", str(amount)),
            ("Deleted", str(len(deleted))),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
        ], emoji="🧹")

        if ctx.interaction is not None:
            await respond(ctx, f"Deleted {len(deleted)} messages.")


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(PurgeCog(bot))
    logger.tree("Purge Cog Loaded", [("Commands", "purge")], emoji="🧹")
