"""
Bouncer - Attempt Store
=======================

Durable attempt records, one message per user session.

DESIGN:
    AttemptStore is the narrow interface the tracker depends on
    (find_active / create / append / resolve). ChannelAttemptStore keeps
    records as embeds in the log channel, which doubles as a readable
    audit trail. Consequences of that choice:

    - Only the most recent TRACKING_SCAN_LIMIT messages are searched, so
      an active record buried under enough other traffic is no longer
      found and the user's next failure starts a new record.
    - Appends re-render the whole message; there is no compare-and-swap.
      Callers serialize per user (see AttemptTracker.session).
    - Records are never deleted; resolving re-renders them as concluded.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Union

import discord

from bouncer.core.constants import TRACKING_SCAN_LIMIT
from bouncer.core.logger import logger
from bouncer.services.attempts.codec import parse_message, render_record
from bouncer.services.attempts.models import AttemptEntry, AttemptRecord, Outcome

if TYPE_CHECKING:
    from discord.ext import commands


# =============================================================================
# Exceptions
# =============================================================================

class AttemptStoreError(Exception):
    """The store could not be read or written."""

    pass


class AttemptStoreUnavailable(AttemptStoreError):
    """The log channel backing the store cannot be resolved."""

    pass


# =============================================================================
# Interface
# =============================================================================

class AttemptStore(ABC):
    """Persistence for attempt records."""

    @abstractmethod
    async def find_active(self, user_id: int, strict: bool = False) -> Optional[AttemptRecord]:
        """
        Return the user's unresolved record, or None.

        With strict=False a failed read is logged and reported as None.
        With strict=True it raises AttemptStoreError, so callers that
        must not mistake "unreadable" for "no record" can tell them apart.
        """

    @abstractmethod
    async def create(self, user_id: int, code: str, at: datetime) -> AttemptRecord:
        """Store a new single-entry record."""

    @abstractmethod
    async def append(self, record: AttemptRecord, code: str, at: datetime) -> AttemptRecord:
        """Add an entry to an active record, keeping earlier entries."""

    @abstractmethod
    async def resolve(self, record: AttemptRecord, outcome: Outcome) -> AttemptRecord:
        """Mark a record concluded so find_active skips it from now on."""


# =============================================================================
# Log Channel Implementation
# =============================================================================

MessageableChannel = Union[discord.TextChannel, discord.Thread]


class ChannelAttemptStore(AttemptStore):
    """
    Attempt records kept as embeds in a log channel.

    Only messages authored by the bot itself are treated as records.
    """

    def __init__(
        self,
        bot: "commands.Bot",
        channel_id: int,
        scan_limit: int = TRACKING_SCAN_LIMIT,
    ) -> None:
        self.bot = bot
        self.channel_id = channel_id
        self.scan_limit = scan_limit

    async def get_channel(self) -> MessageableChannel:
        """
        Resolve the log channel, from cache first.

        Raises:
            AttemptStoreUnavailable: If the channel is missing or not a
                text channel the bot can reach.
        """
        channel = self.bot.get_channel(self.channel_id)
        if channel is None:
            try:
                channel = await self.bot.fetch_channel(self.channel_id)
            except (discord.NotFound, discord.Forbidden) as e:
                raise AttemptStoreUnavailable(
                    f"Log channel {self.channel_id} is not reachable: {e}"
                ) from e
            except discord.HTTPException as e:
                raise AttemptStoreError(f"Fetching log channel failed: {e}") from e

        if not hasattr(channel, "history") or not hasattr(channel, "send"):
            raise AttemptStoreUnavailable(f"Log channel {self.channel_id} is not a text channel")
        return channel

    def _is_own(self, message: discord.Message) -> bool:
        me = self.bot.user
        return me is not None and message.author.id == me.id

    async def find_active(self, user_id: int, strict: bool = False) -> Optional[AttemptRecord]:
        try:
            channel = await self.get_channel()
            async for message in channel.history(limit=self.scan_limit):
                if not self._is_own(message):
                    continue
                record = parse_message(message)
                if record and record.user_id == user_id and not record.resolved:
                    return record
            return None
        except AttemptStoreError as e:
            if strict:
                raise
            logger.error("Tracking Lookup Failed", [
                ("User ID", str(user_id)),
                ("Error", str(e)[:100]),
            ])
            return None
        except discord.HTTPException as e:
            if strict:
                raise AttemptStoreError(f"Reading log channel history failed: {e}") from e
            logger.error("Tracking Lookup Failed", [
                ("User ID", str(user_id)),
                ("Status", str(e.status)),
                ("Error", str(e)[:100]),
            ])
            return None

    async def create(self, user_id: int, code: str, at: datetime) -> AttemptRecord:
        channel = await self.get_channel()
        record = AttemptRecord(user_id=user_id, entries=(AttemptEntry(code, at),))

        try:
            message = await channel.send(embed=render_record(record, now=at))
        except discord.HTTPException as e:
            raise AttemptStoreError(f"Posting tracking record failed: {e}") from e

        logger.tree("Tracking Record Created", [
            ("User ID", str(user_id)),
            ("Message ID", str(message.id)),
        ], emoji="🔒")
        return AttemptRecord(user_id=user_id, entries=record.entries, message_id=message.id)

    async def append(self, record: AttemptRecord, code: str, at: datetime) -> AttemptRecord:
        if record.resolved:
            raise AttemptStoreError(f"Record for {record.user_id} is already resolved")

        updated = record.with_entry(AttemptEntry(code, at))
        await self._rewrite(updated, now=at)

        logger.tree("Tracking Record Updated", [
            ("User ID", str(record.user_id)),
            ("Attempts", str(updated.count)),
        ], emoji="🔒")
        return updated

    async def resolve(self, record: AttemptRecord, outcome: Outcome) -> AttemptRecord:
        resolved = record.as_resolved()
        await self._rewrite(resolved, outcome=outcome)

        logger.tree("Tracking Record Resolved", [
            ("User ID", str(record.user_id)),
            ("Attempts", str(record.count)),
            ("Outcome", outcome.value),
        ], emoji="✅")
        return resolved

    async def _rewrite(
        self,
        record: AttemptRecord,
        outcome: Optional[Outcome] = None,
        now: Optional[datetime] = None,
    ) -> None:
        if record.message_id is None:
            raise AttemptStoreError(f"Record for {record.user_id} has no message to edit")

        channel = await self.get_channel()
        try:
            await channel.get_partial_message(record.message_id).edit(
                embed=render_record(record, outcome=outcome, now=now)
            )
        except discord.HTTPException as e:
            raise AttemptStoreError(f"Editing tracking record failed: {e}") from e


__all__ = [
    "AttemptStore",
    "AttemptStoreError",
    "AttemptStoreUnavailable",
    "ChannelAttemptStore",
]
