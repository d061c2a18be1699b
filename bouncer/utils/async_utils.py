"""
Bouncer - Async Utilities
=========================

Best-effort side effects (audit posts, shutdown) that must be logged
when they fail but must never break the flow that started them.
"""

import asyncio
from typing import Any, Coroutine, List, Tuple

import discord

from bouncer.core.logger import logger


def _failure_details(name: str, e: BaseException) -> List[Tuple[str, str]]:
    return [
        ("Operation", name),
        ("Error Type", type(e).__name__),
        ("Error", str(e)[:100]),
    ]


async def safe_async_operation(name: str, coro: Coroutine[Any, Any, Any], default: Any = None) -> Any:
    """Await `coro`; on a Discord or network failure log a warning and return `default`."""
    try:
        return await coro
    except (discord.DiscordException, OSError, asyncio.TimeoutError) as e:
        logger.warning("Best-Effort Operation Failed", _failure_details(name, e))
        return default


def create_safe_task(coro: Coroutine[Any, Any, Any], name: str = "Background Task") -> asyncio.Task:
    """Schedule `coro` so an exception in it is logged instead of lost with the task."""
    async def runner():
        try:
            await coro
        except asyncio.CancelledError:
            logger.debug(f"Task Cancelled: {name}")
        except Exception as e:
            logger.error("Background Task Failed", _failure_details(name, e))

    return asyncio.create_task(runner(), name=name)


__all__ = ["safe_async_operation", "create_safe_task"]
