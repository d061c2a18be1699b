"""
Bouncer - Command Helpers
=========================

Shared pieces for every command cog: the permission/cooldown guard and
the reply routine.

Replies:
    Slash invocations answer ephemerally. Prefix invocations answer by
    DM and leave "Check DMs" in the channel, or an in-channel notice
    when the member's DMs are closed.
"""

from typing import TYPE_CHECKING, Optional

import discord
from discord.ext import commands

from bouncer.core.constants import DEFAULT_REASON
from bouncer.core.logger import logger

if TYPE_CHECKING:
    from bouncer.bot import BouncerBot


DM_NOTICE = "Check DMs"
DM_CLOSED = "I couldn't send you a DM. Please make sure your DMs are open."


class CommandDenied(commands.CheckFailure):
    """Raised by the command guard with the reason shown to the caller."""

    pass


class GuardedCog(commands.Cog):
    """
    Base cog that runs every command through the bot's CommandPolicy.

    DESIGN:
        cog_check runs for both prefix and slash invocations of hybrid
        commands, so one guard covers both surfaces.
    """

    def __init__(self, bot: "BouncerBot") -> None:
        self.bot = bot

    async def cog_check(self, ctx: commands.Context) -> bool:
        decision = self.bot.policy.can_use(ctx.author, ctx.command.qualified_name)
        if not decision.allowed:
            logger.tree("Command Denied", [
                ("User", f"{ctx.author} ({ctx.author.id})"),
                ("Command", ctx.command.qualified_name),
                ("Reason", decision.reason or "Unknown"),
            ], emoji="🚫")
            raise CommandDenied(decision.reason or "You do not have permission to use this command.")
        return True


async def respond(
    ctx: commands.Context,
    content: Optional[str] = None,
    *,
    embed: Optional[discord.Embed] = None,
) -> None:
    """Reply ephemerally to slash commands and by DM to prefix commands."""
    if ctx.interaction is not None:
        await ctx.send(content=content, embed=embed, ephemeral=True)
        return

    try:
        await ctx.author.send(content=content, embed=embed)
    except discord.HTTPException as e:
        logger.warning("Command DM Failed", [
            ("User", f"{ctx.author} ({ctx.author.id})"),
            ("Error", str(e)[:100]),
        ])
        await ctx.reply(DM_CLOSED, mention_author=False)
        return

    if ctx.guild is not None:
        await ctx.reply(DM_NOTICE, mention_author=False)


def reason_or_default(reason: Optional[str]) -> str:
    return reason.strip() if reason and reason.strip() else DEFAULT_REASON


def usage_text(ctx: commands.Context) -> str:
    command = ctx.command
    prefix = ctx.clean_prefix if ctx.interaction is None else "/"
    return f"{prefix}{command.qualified_name} {command.signature}".strip()


__all__ = [
    "CommandDenied",
    "DM_CLOSED",
    "DM_NOTICE",
    "GuardedCog",
    "reason_or_default",
    "respond",
    "usage_text",
]
