"""
Bouncer - Panel Command
=======================

/buildbouncer posts the bouncer panel (role buttons + Enter Code) in
the current channel.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from bouncer.core.logger import logger
from bouncer.utils.http_errors import log_http_error
from bouncer.views import build_bouncer_message

from .helpers import GuardedCog, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class PanelCog(GuardedCog):
    """Bouncer panel deployment."""

    @commands.hybrid_command(name="buildbouncer", description="Post the bouncer panel in this channel")
    @commands.guild_only()
    async def buildbouncer(self, ctx: commands.Context) -> None:
        role_buttons = self.bot.config.permissions.role_buttons
        embed, view = build_bouncer_message(role_buttons)

        try:
            message = await ctx.channel.send(embed=embed, view=view)
        except discord.HTTPException as e:
            log_http_error(e, "Build Bouncer Panel", [
                ("Channel", f"#{ctx.channel.name} ({ctx.channel.id})"),
            ])
            await respond(ctx, "Failed to post the bouncer panel. Make sure I can send messages here.")
            return

        logger.tree("BOUNCER PANEL POSTED", [
            ("Channel", f"#{ctx.channel.name} ({ctx.channel.id})"),
            ("Message", str(message.id)),
            ("Role Buttons", str(len(role_buttons))),
            ("By", f"{ctx.author} ({ctx.author.id})"),
        ], emoji="🚪")
        await respond(ctx, "Bouncer panel created.")


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(PanelCog(bot))
    logger.tree("Panel Cog Loaded", [("Commands", "buildbouncer")], emoji="🚪")
