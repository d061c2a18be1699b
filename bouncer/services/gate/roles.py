"""
Bouncer - Role Grants
=====================

Shared by role buttons and valid access codes: add the configured roles
and drop the unverified role.
"""

from dataclasses import dataclass, field
from typing import Sequence, Tuple

import discord

from bouncer.core.logger import logger
from bouncer.utils.http_errors import log_http_error


GRANT_FAILED_MESSAGE = "ERROR CONTACT DEV"


@dataclass(frozen=True)
class RoleGrantResult:
    success: bool
    message: str
    granted: Tuple[str, ...] = ()
    missing: Tuple[str, ...] = field(default_factory=tuple)


async def grant_roles(
    member: discord.Member,
    role_names: Sequence[str],
    unverified_role: str,
) -> RoleGrantResult:
    """
    Give `member` the named roles and remove the unverified role.

    Names that do not exist in the guild are skipped and logged. If none
    exist, nothing is changed and the result is a failure.
    """
    guild = member.guild
    roles = []
    missing = []
    for name in role_names:
        role = discord.utils.get(guild.roles, name=name)
        if role is None:
            missing.append(name)
        else:
            roles.append(role)

    if missing:
        logger.warning("Configured Roles Not Found", [
            ("Guild", guild.name),
            ("Missing", ", ".join(missing)),
        ])

    if not roles:
        return RoleGrantResult(False, GRANT_FAILED_MESSAGE, missing=tuple(missing))

    try:
        await member.add_roles(*roles, reason="Bouncer role grant")

        unverified = discord.utils.get(guild.roles, name=unverified_role)
        if unverified is not None and unverified in member.roles:
            await member.remove_roles(unverified, reason="Bouncer role grant")
    except discord.HTTPException as e:
        log_http_error(e, "Role Grant", [
            ("User", f"{member} ({member.id})"),
            ("Roles", ", ".join(r.name for r in roles)),
        ])
        return RoleGrantResult(False, GRANT_FAILED_MESSAGE, missing=tuple(missing))

    granted = tuple(r.name for r in roles)
    logger.tree("Roles Granted", [
        ("User", f"{member} ({member.id})"),
        ("Roles", ", ".join(granted)),
    ], emoji="🎭")

    return RoleGrantResult(
        True,
        f"WELCOME I GAVE YOU THE ROLE: {', '.join(granted)}",
        granted=granted,
        missing=tuple(missing),
    )


__all__ = ["GRANT_FAILED_MESSAGE", "RoleGrantResult", "grant_roles"]
