"""
Bouncer - Escalation Notifier
=============================

Runs the lockout sequence for a member who used up every attempt.

Order:
    1. Alert administrators in the log channel (best-effort)
    2. Tell the member they are out
    3. Kick the member
    4. Conclude the tracking record, only if the kick went through

DESIGN:
    Each step runs on its own and failures never undo earlier steps.
    A failed alert does not block the kick; a failed kick is logged as
    critical because the over-limit record is left without containment.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

import discord

from bouncer.core.config import EmbedColors
from bouncer.core.constants import KICK_REASON
from bouncer.core.logger import logger
from bouncer.services.attempts.codec import format_attempts
from bouncer.services.attempts.models import AttemptRecord, Outcome
from bouncer.services.attempts.store import AttemptStoreError
from bouncer.services.attempts.tracker import EJECTION_MESSAGE, AttemptTracker
from bouncer.utils.http_errors import log_http_error


ALERT_TITLE = "🚨 Security Alert: Multiple Failed Access Attempts"
DETAILS_TITLE = "🔒 Additional Security Details"
ALERT_DIVIDER = "━━━━━━━━━━━━━━━━━━━━━━━━"
ACTION_REQUIRED = (
    "• Review the failed attempts\n"
    "• Check for potential security threats\n"
    "• Consider updating access codes if necessary"
)

Reply = Callable[[str], Awaitable[bool]]


@dataclass
class EscalationReport:
    alert_sent: bool = False
    user_notified: bool = False
    evicted: bool = False
    resolved: bool = False


def _format_time(value: Optional[datetime], style: str = "F") -> str:
    return discord.utils.format_dt(value, style) if value else "Unknown"


def build_alert_embeds(
    member: discord.Member,
    record: AttemptRecord,
    now: Optional[datetime] = None,
) -> List[discord.Embed]:
    """Alert embed plus the follow-up "action required" embed."""
    now = now or datetime.now(timezone.utc)

    alert = discord.Embed(
        title=ALERT_TITLE,
        description="User exceeded the maximum code attempts and is being removed from the server.",
        color=EmbedColors.ALERT,
        timestamp=now,
    )
    alert.add_field(name="User Information", value=f"Name: {member}\nID: {member.id}", inline=False)
    alert.add_field(name="Joined Server", value=_format_time(getattr(member, "joined_at", None)), inline=True)
    alert.add_field(name="Account Created", value=_format_time(getattr(member, "created_at", None)), inline=True)
    alert.add_field(name="First Attempt", value=_format_time(record.first_attempt_at), inline=False)
    alert.add_field(name="Failed Codes", value=format_attempts(record), inline=False)

    details = discord.Embed(
        title=DETAILS_TITLE,
        description="User has been automatically kicked for security reasons.",
        color=EmbedColors.ALERT,
        timestamp=now,
    )
    details.add_field(name="Action Required", value=ACTION_REQUIRED, inline=False)
    return [alert, details]


class EscalationNotifier:
    """
    Alerts admins and removes a locked-out member.

    Attributes:
        tracker: Used to conclude the record after a successful kick.
        admin_role: Role name mentioned in the alert.
    """

    def __init__(self, tracker: AttemptTracker, admin_role: str) -> None:
        self.tracker = tracker
        self.admin_role = admin_role

    async def escalate(
        self,
        member: discord.Member,
        record: AttemptRecord,
        channel: Optional[discord.abc.Messageable],
        reply: Reply,
    ) -> EscalationReport:
        report = EscalationReport()

        report.alert_sent = await self._send_alert(member, record, channel)

        try:
            report.user_notified = bool(await reply(EJECTION_MESSAGE))
        except discord.HTTPException as e:
            logger.warning("Ejection Notice Failed", [
                ("User", f"{member} ({member.id})"),
                ("Error", str(e)[:100]),
            ])

        try:
            await member.kick(reason=KICK_REASON)
            report.evicted = True
        except discord.HTTPException as e:
            logger.critical("Lockout Kick Failed", [
                ("User", f"{member} ({member.id})"),
                ("Attempts", str(record.count)),
                ("Status", str(e.status)),
                ("Error", str(e)[:100]),
            ])

        if report.evicted:
            try:
                await self.tracker.resolve(record, Outcome.LOCKOUT)
                report.resolved = True
            except AttemptStoreError as e:
                logger.error("Lockout Record Not Concluded", [
                    ("User", f"{member} ({member.id})"),
                    ("Error", str(e)[:100]),
                ])

        logger.tree("Lockout Escalated", [
            ("User", f"{member} ({member.id})"),
            ("Attempts", str(record.count)),
            ("Alert Sent", "✅" if report.alert_sent else "❌"),
            ("User Notified", "✅" if report.user_notified else "❌"),
            ("Kicked", "✅" if report.evicted else "❌"),
            ("Record Concluded", "✅" if report.resolved else "❌"),
        ], emoji="🚨")
        return report

    async def _send_alert(
        self,
        member: discord.Member,
        record: AttemptRecord,
        channel: Optional[discord.abc.Messageable],
    ) -> bool:
        if channel is None:
            logger.error("Security Alert Not Sent", [
                ("User", f"{member} ({member.id})"),
                ("Reason", "Log channel unavailable"),
            ])
            return False

        role = discord.utils.get(member.guild.roles, name=self.admin_role)
        if role is None:
            logger.warning("Admin Role Not Found", [
                ("Role", self.admin_role),
                ("Guild", member.guild.name),
            ])
            content = f"🚨 **SECURITY ALERT** 🚨\n{ALERT_DIVIDER}"
        else:
            content = f"🚨 {role.mention} **SECURITY ALERT** 🚨\n{ALERT_DIVIDER}"

        try:
            await channel.send(
                content=content,
                embeds=build_alert_embeds(member, record),
                allowed_mentions=discord.AllowedMentions(roles=True, users=False, everyone=False),
            )
            return True
        except discord.HTTPException as e:
            log_http_error(e, "Security Alert", [("User", f"{member} ({member.id})")])
            return False


__all__ = ["EscalationNotifier", "EscalationReport", "build_alert_embeds"]
