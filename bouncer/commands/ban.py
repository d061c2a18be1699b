"""
Bouncer - Ban Commands
======================

/ban and /unban (also //ban, //unban).
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bouncer.core.logger import logger
from bouncer.utils.http_errors import log_http_error

from .helpers import GuardedCog, reason_or_default, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class BanCog(GuardedCog):
    """Ban and unban members."""

    @commands.hybrid_command(name="ban", description="Ban a user from the server")
    @commands.guild_only()
    async def ban(self, ctx: commands.Context, user: discord.User, *, reason: Optional[str] = None) -> None:
        """Ban a user, with an optional reason."""
        if not ctx.guild.me.guild_permissions.ban_members:
            await respond(ctx, "I do not have permission to ban members.")
            return

        reason = reason_or_default(reason)
        await ctx.defer(ephemeral=True)

        try:
            await ctx.guild.ban(user, reason=reason)
        except discord.HTTPException as e:
            log_http_error(e, "Ban", [("User", f"{user} ({user.id})")])
            await respond(ctx, "Failed to ban user. Make sure I have the correct permissions and the user is bannable.")
            return

        logger.tree("USER BANNED", [
            ("User", f"{user} ({user.id})"),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
            ("Reason", reason[:50]),
        ], emoji="🔨")
        await respond(ctx, f"Successfully banned {user}\nReason: {reason}")

    @commands.hybrid_command(name="unban", description="Unban a user by ID")
    @commands.guild_only()
    async def unban(self, ctx: commands.Context, user_id: str, *, reason: Optional[str] = None) -> None:
        """Lift a ban by user ID."""
        if not ctx.guild.me.guild_permissions.ban_members:
            await respond(ctx, "I do not have permission to unban members.")
            return

        reason = reason_or_default(reason)
        failure = "Failed to unban user. Make sure the ID is valid and the user is banned."

        try:
            target_id = int(user_id.strip())
        except ValueError:
            await respond(ctx, failure)
            return

        try:
            await ctx.guild.unban(discord.Object(id=target_id), reason=reason)
        except discord.HTTPException as e:
            log_http_error(e, "Unban", [("User ID", str(target_id))])
            await respond(ctx, failure)
            return

        logger.tree("USER UNBANNED", [
            ("User ID", str(target_id)),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
            ("Reason", reason[:50]),
        ], emoji="🔓")
        await respond(ctx, f"Successfully unbanned user with ID: {target_id}\nReason: {reason}")


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(BanCog(bot))
    logger.tree("Ban Cog Loaded", [("Commands", "ban, unban")], emoji="🔨")
