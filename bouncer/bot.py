"""
Bouncer - Main Bot Class
========================

Discord client for the Bouncer moderation bot.

Features:
- Code-entry gate with attempt tracking kept in the log channel
- Lockout alerts and automatic removal after too many failed codes
- Self-serve role buttons on a persistent panel
- Hybrid moderation commands (slash and prefix)
"""

from datetime import datetime
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from bouncer.core.config import Config, get_config
from bouncer.core.database import DatabaseManager, get_db
from bouncer.core.logger import logger
from bouncer.core.permissions import CommandPolicy
from bouncer.services.attempts import AttemptStoreError, ChannelAttemptStore
from bouncer.services.gate import AccessGate
from bouncer.utils.error_handler import ErrorHandler, ErrorSeverity
from bouncer.utils.http_errors import log_http_error


GENERIC_COMMAND_ERROR = "There was an error executing this command."
GUILD_ONLY_MESSAGE = "This command can only be used in a server."


def _unwrap(error: BaseException) -> BaseException:
    """Strip the hybrid/invoke wrappers discord.py puts around command errors."""
    wrappers = (commands.HybridCommandError, commands.CommandInvokeError, app_commands.CommandInvokeError)
    while isinstance(error, wrappers) and getattr(error, "original", None) is not None:
        error = error.original
    return error


# =============================================================================
# BouncerBot Class
# =============================================================================

class BouncerBot(commands.Bot):
    """
    Main Discord bot class.

    SERVICE INITIALIZATION ORDER:
    1. __init__: config, database, command policy
    2. setup_hook (before on_ready):
       - Attempt store and access gate
       - Command and event cog loading
       - Persistent panel items
       - Command tree syncing
    3. on_ready: log channel reachability check
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, config: Optional[Config] = None, db: Optional[DatabaseManager] = None) -> None:
        self.config = config or get_config()

        intents = discord.Intents.default()
        intents.message_content = True
        intents.members = True

        super().__init__(
            command_prefix=self.config.command_prefix,
            intents=intents,
            help_command=None,
        )

        self.db = db or get_db()
        self.policy = CommandPolicy(self.config.permissions, self.config.developer_id)
        self.start_time: datetime = datetime.now()

        # Gate services, created in setup_hook
        self.attempt_store: Optional[ChannelAttemptStore] = None
        self.access_gate: Optional[AccessGate] = None

        self._ready_initialized: bool = False

        logger.info("Bot Instance Created")

    # =========================================================================
    # Setup Hook
    # =========================================================================

    async def setup_hook(self) -> None:
        """Build the gate, load cogs and sync commands before on_ready."""
        gate_config = self.config.gate
        self.attempt_store = ChannelAttemptStore(self, gate_config.log_channel_id)
        self.access_gate = AccessGate(gate_config, self.attempt_store)

        from bouncer.commands import COMMAND_COGS
        for cog in COMMAND_COGS:
            try:
                await self.load_extension(cog)
            except commands.ExtensionError as e:
                logger.error("Failed to Load Cog", [("Cog", cog), ("Error", str(e))])

        from bouncer.events import EVENT_COGS
        for cog in EVENT_COGS:
            try:
                await self.load_extension(cog)
                logger.debug(f"Event Cog Loaded: {cog.split('.')[-1]}")
            except commands.ExtensionError as e:
                logger.error("Failed to Load Event Cog", [("Cog", cog), ("Error", str(e))])

        from bouncer.views import setup_bouncer_views
        setup_bouncer_views(self)

        try:
            synced = await self.tree.sync()
            logger.tree("Commands Synced", [("Count", str(len(synced)))], emoji="✅")
        except discord.HTTPException as e:
            logger.error("Command Sync Failed", [("Error", str(e))])

    # =========================================================================
    # On Ready
    # =========================================================================

    async def on_ready(self) -> None:
        if self._ready_initialized:
            logger.info("Bot Reconnected (skipping re-initialization)")
            return

        self._ready_initialized = True

        if not self.user:
            return

        logger.tree("BOT ONLINE", [
            ("Name", self.user.name),
            ("ID", str(self.user.id)),
            ("Guilds", str(len(self.guilds))),
            ("Prefix", self.config.command_prefix),
        ], emoji="🚀")

        try:
            channel = await self.attempt_store.get_channel()
            logger.tree("Log Channel Ready", [
                ("Channel", f"#{getattr(channel, 'name', '?')} ({channel.id})"),
            ], emoji="📋")
        except AttemptStoreError as e:
            logger.error("Log Channel Unavailable", [
                ("Channel ID", str(self.config.gate.log_channel_id)),
                ("Error", str(e)[:100]),
                ("Impact", "Code entry will answer with the contact-admin message"),
            ])

    # =========================================================================
    # Command Errors
    # =========================================================================

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        """One reply per failed command, for both prefix and slash invocations."""
        from bouncer.commands.helpers import respond, usage_text

        error = _unwrap(error)

        if isinstance(error, commands.CommandNotFound):
            return

        if isinstance(error, commands.NoPrivateMessage):
            message = GUILD_ONLY_MESSAGE
        elif isinstance(error, (commands.CheckFailure, app_commands.CheckFailure)):
            message = str(error) or "You do not have permission to use this command."
        elif isinstance(error, (commands.UserInputError, app_commands.TransformerError)):
            message = f"Invalid command usage!\nCorrect usage: {usage_text(ctx)}"
        else:
            ErrorHandler.handle(
                error,
                location=f"command.{ctx.command.qualified_name if ctx.command else 'unknown'}",
                severity=ErrorSeverity.HIGH,
                user=f"{ctx.author} ({ctx.author.id})",
            )
            message = GENERIC_COMMAND_ERROR

        try:
            await respond(ctx, message)
        except discord.HTTPException as e:
            log_http_error(e, "Command Error Reply", [
                ("Command", ctx.command.qualified_name if ctx.command else "unknown"),
                ("User", f"{ctx.author} ({ctx.author.id})"),
            ])

    # =========================================================================
    # Shutdown
    # =========================================================================

    async def shutdown(self) -> None:
        """Graceful shutdown with proper cleanup."""
        logger.info("Initiating Graceful Shutdown")

        self.db.close()
        await super().close()

        logger.tree("SHUTDOWN COMPLETE", [
            ("Uptime", str(datetime.now() - self.start_time)),
        ], emoji="🛑")

    async def close(self) -> None:
        """Override close to ensure proper shutdown."""
        await self.shutdown()


__all__ = ["BouncerBot"]
