"""
Bouncer - Commands Package
==========================

Hybrid command cogs: every command works as a slash command and with
the configured text prefix.

DESIGN:
    Each module holds one GuardedCog and an async setup(bot). The bot
    iterates COMMAND_COGS and calls load_extension() for each, so a new
    command only needs its module added below.

Available Commands:
    /ban, /unban: Ban or lift a ban by user ID
    /kick: Kick a member
    /timeout, /untimeout: Apply or remove a timeout
    /purge: Bulk delete 1-100 messages
    /warn, /warnings: Issue or list warnings
    /ping, /help: Latency and command listing
    /buildbouncer: Post the bouncer panel
"""

# =============================================================================
# Command Cog Registry
# =============================================================================

COMMAND_COGS = [
    "bouncer.commands.ban",
    "bouncer.commands.kick",
    "bouncer.commands.timeout",
    "bouncer.commands.purge",
    "bouncer.commands.warn",
    "bouncer.commands.utility",
    "bouncer.commands.panel",
]
"""List of command cog module paths for dynamic loading."""


__all__ = [
    "COMMAND_COGS",
]
