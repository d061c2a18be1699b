"""
Bouncer - Command Permissions
=============================

Decides whether a member may run a command.

Order of checks:
    1. Developer or admin role -> allowed
    2. Public command -> allowed
    3. Member's permission role not listed for the command -> denied
    4. Sliding-window cooldown per (user, command) -> allowed or denied
"""

from dataclasses import dataclass
from typing import Optional

import discord

from bouncer.core.config import PermissionsConfig
from bouncer.utils.cooldown import CooldownTracker


# =============================================================================
# Decision
# =============================================================================

@dataclass(frozen=True)
class PermissionDecision:
    allowed: bool
    reason: Optional[str] = None

    @classmethod
    def allow(cls) -> "PermissionDecision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "PermissionDecision":
        return cls(False, reason)


# =============================================================================
# Command Policy
# =============================================================================

class CommandPolicy:
    """
    Role and cooldown checks driven by the permissions file.

    Attributes:
        permissions: Parsed permissions config.
        developer_id: User who bypasses every check.
    """

    def __init__(
        self,
        permissions: PermissionsConfig,
        developer_id: Optional[int] = None,
        cooldowns: Optional[CooldownTracker] = None,
    ) -> None:
        self.permissions = permissions
        self.developer_id = developer_id
        self.cooldowns = cooldowns or CooldownTracker()

    def permission_role(self, member: discord.Member) -> Optional[str]:
        """First of the member's roles that is a configured permission role."""
        tracked = self.permissions.permission_roles
        for role in getattr(member, "roles", []):
            if role.name in tracked:
                return role.name
        return None

    def is_admin(self, member: discord.Member) -> bool:
        if self.developer_id is not None and member.id == self.developer_id:
            return True
        admin_role = self.permissions.gate.admin_role
        return any(role.name == admin_role for role in getattr(member, "roles", []))

    def can_use(self, member: discord.Member, command: str) -> PermissionDecision:
        """Evaluate roles, then cooldown, for `command`."""
        if self.is_admin(member):
            return PermissionDecision.allow()

        rule = self.permissions.command_rule(command)
        if rule.public:
            return PermissionDecision.allow()

        role = self.permission_role(member)
        if role is None or role not in rule.roles:
            return PermissionDecision.deny("Insufficient permissions")

        remaining = self.cooldowns.hit(
            (member.id, command),
            duration=rule.cooldown.duration,
            usages=rule.cooldown.usages,
        )
        if remaining is not None:
            return PermissionDecision.deny(
                f"Please wait {remaining:.1f} more seconds before using this command again."
            )

        return PermissionDecision.allow()


__all__ = ["CommandPolicy", "PermissionDecision"]
