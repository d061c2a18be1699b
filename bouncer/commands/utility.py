"""
Bouncer - Utility Commands
==========================

/ping and /help.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bouncer.core.config import EmbedColors
from bouncer.core.logger import logger

from .helpers import GuardedCog, respond

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


class UtilityCog(GuardedCog):
    """Latency check and command listing."""

    @commands.hybrid_command(name="ping", description="Check the bot's latency")
    async def ping(self, ctx: commands.Context) -> None:
        created_at = ctx.interaction.created_at if ctx.interaction else ctx.message.created_at
        bot_latency = max(0, round((datetime.now(timezone.utc) - created_at).total_seconds() * 1000))
        api_latency = round(self.bot.latency * 1000)

        await respond(ctx, f"Pong! 🏓\nBot Latency: {bot_latency}ms\nAPI Latency: {api_latency}ms")

    @commands.hybrid_command(name="help", description="List commands or show one command's usage")
    async def help(self, ctx: commands.Context, command: Optional[str] = None) -> None:
        permissions = self.bot.config.permissions
        prefix = self.bot.config.command_prefix

        if command:
            target = self.bot.get_command(command.strip().removeprefix(prefix).removeprefix("/"))
            if target is None:
                await respond(ctx, f"Unknown command: {command}")
                return

            rule = permissions.command_rule(target.qualified_name)
            embed = discord.Embed(
                title=f"{prefix}{target.qualified_name}",
                description=rule.description,
                color=EmbedColors.INFO,
            )
            usage = f"{prefix}{target.qualified_name} {target.signature}".strip()
            embed.add_field(name="Usage", value=f"`{usage}`", inline=False)
            if rule.roles:
                embed.add_field(name="Roles", value=", ".join(rule.roles), inline=False)
            if rule.cooldown.duration > 0:
                embed.add_field(name="Cooldown", value=f"{rule.cooldown.usages} use(s) per {rule.cooldown.duration:g}s", inline=False)
            await respond(ctx, embed=embed)
            return

        lines = []
        for cmd in sorted(self.bot.commands, key=lambda c: c.qualified_name):
            if cmd.hidden:
                continue
            rule = permissions.command_rule(cmd.qualified_name)
            lines.append(f"`{prefix}{cmd.qualified_name}` {rule.description}")

        embed = discord.Embed(
            title="Bouncer Commands",
            description="\n".join(lines) or "No commands available.",
            color=EmbedColors.INFO,
        )
        embed.set_footer(text=f"Slash commands work too. Use {prefix}help <command> for usage.")
        await respond(ctx, embed=embed)


async def setup(bot: "BouncerBot") -> None:
    await bot.add_cog(UtilityCog(bot))
    logger.tree("Utility Cog Loaded", [("Commands", "ping, help")], emoji="🛠️")
