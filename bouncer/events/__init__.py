"""
Bouncer - Events Package
========================

Event handler cogs, loaded by the bot with load_extension().

    - members.py: Member join (unverified role)
"""

# =============================================================================
# Event Cog Registry
# =============================================================================

EVENT_COGS = [
    "bouncer.events.members",
]


__all__ = [
    "EVENT_COGS",
]
