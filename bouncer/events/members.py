"""
Bouncer - Member Events
=======================

New members receive the unverified role until they pass the gate.
"""

from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from bouncer.core.logger import logger
from bouncer.utils.http_errors import log_http_error

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class MemberEvents(commands.Cog):
    """Member event handlers."""

    def __init__(self, bot: "BouncerBot") -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> None:
        role_name = self.bot.config.gate.unverified_role
        role = discord.utils.get(member.guild.roles, name=role_name)

        if role is None:
            logger.warning("Unverified Role Not Found", [
                ("Role", role_name),
                ("Guild", f"{member.guild.name} ({member.guild.id})"),
                ("Available", ", ".join(r.name for r in member.guild.roles)[:200]),
            ])
            return

        try:
            await member.add_roles(role, reason="New member awaiting verification")
        except discord.HTTPException as e:
            log_http_error(e, "Assign Unverified Role", [
                ("User", f"{member} ({member.id})"),
                ("Role", role_name),
            ])
            return

        logger.tree("MEMBER JOINED", [
            ("User", f"{member} ({member.id})"),
            ("Role", role_name),
        ], emoji="👋")


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(MemberEvents(bot))
