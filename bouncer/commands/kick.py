"""
Bouncer - Kick Command
======================
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bouncer.core.logger import logger
from bouncer.utils.http_errors import log_http_error

from .helpers import GuardedCog, reason_or_default, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class KickCog(GuardedCog):
    """Kick members."""

    @commands.hybrid_command(name="kick", description="Kick a member from the server")
    @commands.guild_only()
    async def kick(self, ctx: commands.Context, member: discord.Member, *, reason: Optional[str] = None) -> None:
        if not ctx.guild.me.guild_permissions.kick_members:
            await respond(ctx, "I do not have permission to kick members.")
            return

        reason = reason_or_default(reason)

        try:
            await member.kick(reason=reason)
        except discord.HTTPException as e:
            log_http_error(e, "Kick", [("User", f"{member} ({member.id})")])
            await respond(ctx, "Failed to kick user. Make sure I have the correct permissions and the user is kickable.")
            return

        logger.tree("USER KICKED", [
            ("User", f"{member} ({member.id})"),
            ("Moderator", f"{ctx.author} ({ctx.author.id})"),
            ("Reason", reason[:50]),
        ], emoji="👢")
        await respond(ctx, f"Successfully kicked {member}\nReason: {reason}")


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(KickCog(bot))
    logger.tree("Kick Cog Loaded", [("Commands", "kick")], emoji="👢")
