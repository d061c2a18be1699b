#!/usr/bin/env python3
"""
Bouncer - Discord Moderation Bot Entry Point
============================================

Loads .env, validates configuration and runs the bot until SIGINT,
SIGTERM or a critical error.

Exit codes:
    0: Clean shutdown
    1: Invalid configuration, login failure or critical error
"""

from dotenv import load_dotenv

# Paths in bouncer.core are read from the environment at import time
load_dotenv()

import asyncio
import signal
import sys

import discord

from bouncer.bot import BouncerBot
from bouncer.core.config import ConfigValidationError, validate_and_log_config
from bouncer.core.logger import logger
from bouncer.utils.async_utils import create_safe_task
from bouncer.utils.error_handler import ErrorHandler, install_exception_handlers


async def main() -> int:
    """
    Run the bot lifecycle.

    1. Validates config (exit 1 when invalid)
    2. Installs process-wide exception handlers
    3. Starts the bot and waits for a shutdown signal

    Returns:
        Process exit code.
    """
    logger.tree("BOUNCER STARTING", [
        ("Python", sys.version.split()[0]),
        ("discord.py", discord.__version__),
    ], "🚪")

    try:
        config = validate_and_log_config()
    except ConfigValidationError as e:
        logger.critical("Invalid Configuration", [("Error", str(e))])
        return 1

    loop = asyncio.get_running_loop()
    install_exception_handlers(loop)

    bot = BouncerBot(config)

    def request_stop() -> None:
        if not bot.is_closed():
            create_safe_task(bot.close(), "Bot Shutdown")

    ErrorHandler.set_fatal_callback(request_stop)
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_stop)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    try:
        async with bot:
            await bot.start(config.discord_token)
    except discord.LoginFailure as e:
        logger.critical("Discord Login Failed", [("Error", str(e))])
        return 1

    return 1 if ErrorHandler.exit_requested else 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
