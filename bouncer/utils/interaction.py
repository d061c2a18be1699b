"""
Bouncer - Interaction Utilities
===============================

Reply helpers for buttons and the code entry modal.

An interaction can only be answered once and expires after a few
seconds, so every gate reply goes through these: a rejected or expired
interaction is logged at debug level instead of raising into the gate.
"""

from typing import Any, Optional

import discord

from bouncer.core.logger import logger


def _already_answered(interaction: discord.Interaction) -> bool:
    try:
        return interaction.response.is_done()
    except discord.HTTPException:
        return True


async def safe_respond(
    interaction: discord.Interaction,
    content: Optional[str] = None,
    *,
    embed: Optional[discord.Embed] = None,
    ephemeral: bool = True,
) -> bool:
    """
    Send `content` as the first response, or as a followup once answered.

    Returns:
        True if Discord accepted the message.
    """
    payload: dict[str, Any] = {"ephemeral": ephemeral}
    if content is not None:
        payload["content"] = content
    if embed is not None:
        payload["embed"] = embed

    send = interaction.followup.send if _already_answered(interaction) else interaction.response.send_message
    try:
        await send(**payload)
    except discord.HTTPException as e:
        logger.debug(f"Interaction reply rejected: {e.status} - {str(e)[:50]}")
        return False
    return True


async def safe_defer(interaction: discord.Interaction, *, ephemeral: bool = True) -> bool:
    """Acknowledge with a "thinking" state; False if already answered or rejected."""
    if _already_answered(interaction):
        return False
    try:
        await interaction.response.defer(ephemeral=ephemeral, thinking=True)
    except discord.HTTPException as e:
        logger.debug(f"Interaction defer rejected: {e.status} - {str(e)[:50]}")
        return False
    return True


async def finish_deferred(interaction: discord.Interaction, content: str) -> bool:
    """Replace the deferred "thinking" reply with `content`, or follow up if that fails."""
    try:
        await interaction.edit_original_response(content=content)
        return True
    except discord.HTTPException as e:
        logger.debug(f"Deferred reply edit rejected: {e.status} - {str(e)[:50]}")
    return await safe_respond(interaction, content, ephemeral=True)


__all__ = ["safe_respond", "safe_defer", "finish_deferred"]
