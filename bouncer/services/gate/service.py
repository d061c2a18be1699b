"""
Bouncer - Access Gate
=====================

Single entry point for access code submissions.

Flow:
    1. Acknowledge the interaction right away (ephemeral "thinking")
    2. Under the user's tracker session:
       - exact code match: conclude any active record, grant the
         configured roles, post a success audit, reply
       - mismatch: record the failure; at the limit hand over to the
         EscalationNotifier, otherwise reply with the attempt message
    3. Any failure ends in a generic reply; the interaction is never
       left unanswered

DESIGN:
    A store read failure is never treated as "no record". Neither roles
    nor lockout are acted on unless the tracking read succeeded.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Tuple

import discord

from bouncer.core.config import EmbedColors, GateConfig
from bouncer.core.logger import logger
from bouncer.services.attempts.models import AttemptRecord, Outcome, TrackerState
from bouncer.services.attempts.store import AttemptStoreError, ChannelAttemptStore
from bouncer.services.attempts.tracker import AttemptTracker
from bouncer.services.gate.escalation import EscalationNotifier, EscalationReport
from bouncer.services.gate.roles import grant_roles
from bouncer.utils.async_utils import safe_async_operation
from bouncer.utils.error_handler import ErrorHandler, ErrorSeverity
from bouncer.utils.interaction import finish_deferred, safe_defer


CONTACT_ADMIN_MESSAGE = "An error occurred while processing your code. Please contact an administrator."
TRY_LATER_MESSAGE = "An error occurred while processing your code. Please try again later."
SUCCESS_AUDIT_TITLE = "✅ Successful Code Access"

Reply = Callable[[str], Awaitable[bool]]


class GateUnavailable(Exception):
    """The gate is not configured well enough to judge a code."""

    pass


@dataclass
class GateResult:
    """
    What one submission ended in.

    state is RESOLVED for a valid code, ACTIVE for a counted failure and
    LOCKED_OUT when escalation ran.
    """

    state: TrackerState
    message: str
    record: Optional[AttemptRecord] = None
    roles: Tuple[str, ...] = field(default_factory=tuple)
    escalation: Optional[EscalationReport] = None


def build_success_embed(member: discord.Member, roles: Tuple[str, ...]) -> discord.Embed:
    embed = discord.Embed(
        title=SUCCESS_AUDIT_TITLE,
        description="User successfully accessed with code.",
        color=EmbedColors.SUCCESS,
        timestamp=datetime.now(timezone.utc),
    )
    embed.add_field(name="User", value=f"{member} ({member.id})", inline=False)
    embed.add_field(name="Roles Assigned", value=", ".join(roles) or "None", inline=False)
    return embed


class AccessGate:
    """
    Judges access codes and drives the tracker and escalation.

    Attributes:
        config: Codes, roles, admin role and limits.
        store: Log channel store, also where audits and alerts are posted.
        tracker: Attempt state machine.
        notifier: Lockout sequence.
    """

    def __init__(
        self,
        config: GateConfig,
        store: ChannelAttemptStore,
        tracker: Optional[AttemptTracker] = None,
        notifier: Optional[EscalationNotifier] = None,
    ) -> None:
        self.config = config
        self.store = store
        self.tracker = tracker or AttemptTracker(store, max_attempts=config.max_attempts)
        self.notifier = notifier or EscalationNotifier(self.tracker, config.admin_role)

    # =========================================================================
    # Interaction Entry Point
    # =========================================================================

    async def submit(self, interaction: discord.Interaction, code: str) -> None:
        """Handle a modal submission; always answers the interaction."""
        await safe_defer(interaction, ephemeral=True)

        async def reply(text: str) -> bool:
            return await finish_deferred(interaction, text)

        member = interaction.user
        if not isinstance(member, discord.Member):
            await reply(CONTACT_ADMIN_MESSAGE)
            return

        try:
            result = await self.process(member, code, reply)
        except (AttemptStoreError, GateUnavailable) as e:
            logger.error("Code Submission Failed", [
                ("User", f"{member} ({member.id})"),
                ("Error Type", type(e).__name__),
                ("Error", str(e)[:100]),
            ])
            await reply(CONTACT_ADMIN_MESSAGE)
            return
        except Exception as e:
            ErrorHandler.handle(
                e,
                location="AccessGate.submit",
                severity=ErrorSeverity.HIGH,
                user=f"{member} ({member.id})",
            )
            await reply(TRY_LATER_MESSAGE)
            return

        logger.tree("Code Submission", [
            ("User", f"{member} ({member.id})"),
            ("Result", result.state.name),
            ("Attempts", str(result.record.count) if result.record else "0"),
        ], emoji="🔑")

    # =========================================================================
    # Decision
    # =========================================================================

    async def process(self, member: discord.Member, code: str, reply: Reply) -> GateResult:
        """
        Judge one code for one member and send the reply through `reply`.

        Raises:
            GateUnavailable: If no access codes are configured.
            AttemptStoreError: If the tracking store cannot be used.
        """
        if not self.config.codes:
            raise GateUnavailable("No access codes configured")

        async with self.tracker.session(member.id):
            roles = self.config.roles_for(code)
            if roles is not None:
                record = await self.tracker.active_record(member.id)
                if self.tracker.is_locked_out(record):
                    # A correct code cannot lift a lockout whose kick failed earlier
                    logger.warning("Valid Code During Pending Lockout", [
                        ("User", f"{member} ({member.id})"),
                        ("Attempts", f"{record.count}/{self.tracker.max_attempts}"),
                    ])
                    return await self._lock_out(member, record, reply)
                return await self._accept(member, roles, record, reply)

            attempt = await self.tracker.record_failure(member.id, code)

            if attempt.state == TrackerState.LOCKED_OUT:
                return await self._lock_out(member, attempt.record, reply)

            message = self.tracker.message_for(attempt.count)
            await reply(message)
            return GateResult(state=TrackerState.ACTIVE, message=message, record=attempt.record)

    async def _lock_out(self, member: discord.Member, record: AttemptRecord, reply: Reply) -> GateResult:
        channel = await self._log_channel()
        report = await self.notifier.escalate(member, record, channel, reply)
        return GateResult(
            state=TrackerState.LOCKED_OUT,
            message=self.tracker.message_for(record.count),
            record=record,
            escalation=report,
        )

    async def _accept(
        self,
        member: discord.Member,
        roles: Tuple[str, ...],
        record: Optional[AttemptRecord],
        reply: Reply,
    ) -> GateResult:
        if record is not None:
            record = await self.tracker.resolve(record, Outcome.SUCCESS)

        result = await grant_roles(member, roles, self.config.unverified_role)
        if result.success:
            channel = await self._log_channel()
            if channel is not None:
                await safe_async_operation(
                    "Success Audit",
                    channel.send(embed=build_success_embed(member, result.granted)),
                )

        await reply(result.message)
        return GateResult(
            state=TrackerState.RESOLVED,
            message=result.message,
            record=record,
            roles=result.granted,
        )

    async def _log_channel(self) -> Optional[discord.abc.Messageable]:
        try:
            return await self.store.get_channel()
        except AttemptStoreError as e:
            logger.warning("Log Channel Unavailable", [("Error", str(e)[:100])])
            return None


__all__ = [
    "AccessGate",
    "CONTACT_ADMIN_MESSAGE",
    "GateResult",
    "GateUnavailable",
    "TRY_LATER_MESSAGE",
    "build_success_embed",
]
