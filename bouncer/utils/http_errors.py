"""
Bouncer - Discord HTTP Error Logging
====================================

One place to turn a discord.HTTPException into a readable log tree.
"""

from typing import List, Optional, Tuple

import discord

from bouncer.core.logger import logger


HTTP_STATUS_DESCRIPTIONS = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    429: "Rate Limited",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}


def log_http_error(
    e: discord.HTTPException,
    operation: str,
    context: Optional[List[Tuple[str, str]]] = None,
) -> None:
    """
    Log a Discord HTTPException with status details.

    Rate limits, missing permissions and missing resources are warnings;
    anything else is an error.
    """
    status = getattr(e, "status", None)
    status_desc = HTTP_STATUS_DESCRIPTIONS.get(status, "Unknown")

    log_items = [
        ("Status", f"{status} ({status_desc})"),
        ("Error", str(getattr(e, "text", "") or e)[:200]),
    ]
    if context:
        log_items.extend(context)

    if status == 429:
        logger.warning(f"🚦 {operation} Rate Limited", log_items)
    elif status == 403:
        logger.warning(f"🚫 {operation} Forbidden", log_items)
    elif status == 404:
        logger.warning(f"❓ {operation} Not Found", log_items)
    else:
        logger.error(f"❌ {operation} Failed", log_items)


__all__ = ["log_http_error", "HTTP_STATUS_DESCRIPTIONS"]
