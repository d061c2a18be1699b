"""
Bouncer - Warn Commands
=======================

/warn records a warning in SQLite. /warnings lists the most recent ones.
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bouncer.core.config import EmbedColors
from bouncer.core.constants import WARNINGS_DISPLAY_LIMIT
from bouncer.core.logger import logger

from .helpers import GuardedCog, reason_or_default, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class WarnCog(GuardedCog):
    """Warning issue and lookup."""

    @commands.hybrid_command(name="warn", description="Warn a user")
    @commands.guild_only()
    async def warn(self, ctx: commands.Context, user: discord.User, *, reason: Optional[str] = None) -> None:
        reason = reason_or_default(reason)

        self.bot.db.add_warning(user.id, ctx.guild.id, ctx.author.id, reason)
        total = self.bot.db.get_warn_count(user.id, ctx.guild.id)

        logger.tree("USER WARNED", [
            ("User", f"{user} ({user.id})"),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
            ("Reason", reason[:50]),
            ("Total Warnings", str(total)),
        ], emoji="⚠️")
        await respond(ctx, f"Warning issued to {user}\nReason: {reason}\nTotal warnings: {total}")

    @commands.hybrid_command(name="warnings", description="Show a user's warnings")
    @commands.guild_only()
    async def warnings(self, ctx: commands.Context, user: discord.User) -> None:
        records = self.bot.db.get_user_warnings(user.id, ctx.guild.id, limit=WARNINGS_DISPLAY_LIMIT)
        total = self.bot.db.get_warn_count(user.id, ctx.guild.id)

        if not records:
            await respond(ctx, f"{user} has no warnings.")
            return

        embed = discord.Embed(
            title=f"Warnings for {user}",
            color=EmbedColors.WARNING,
        )
        lines = [
            f"`#{w['id']}` <t:{int(w['created_at'])}:R> by <@{w['moderator_id']}>\n{w['reason'] or 'No reason provided'}"
            for w in records
        ]
        embed.description = "\n\n".join(lines)
        embed.set_footer(text=f"User ID: {user.id} | Total: {total}")

        await respond(ctx, embed=embed)


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(WarnCog(bot))
    logger.tree("Warn Cog Loaded", [("Commands", "warn, warnings")], emoji="⚠️")
