"""
Bouncer - Attempt Tracker
=========================

State machine for one user's code-entry session.

    NONE --wrong--> ACTIVE(1) --wrong--> ... --wrong--> LOCKED_OUT
    NONE / ACTIVE(n) --correct--> RESOLVED

DESIGN:
    State is rebuilt from the store on every submission; nothing about
    counts is cached in memory. Each read-modify-write cycle runs inside
    session(user_id), a per-user asyncio.Lock, so two submissions from
    the same user cannot both read "attempt n" and lose an update.
    Different users never wait on each other.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Dict, Optional

from bouncer.core.constants import MAX_ATTEMPTS
from bouncer.core.logger import logger
from bouncer.services.attempts.models import (
    AttemptRecord,
    AttemptResult,
    Outcome,
    TrackerState,
)
from bouncer.services.attempts.store import AttemptStore


# =============================================================================
# Reply Text
# =============================================================================

EJECTION_MESSAGE = "❌❌❌ GOOODBYEEEE ❌❌❌\nYou have exceeded the maximum number of attempts."

_TAUNTS = {
    1: "❌ NOPE TRY AGAIN ❌",
    2: "❌ SWING AND A MISS ❌",
    3: "❌ BOOOOOO ❌",
}
_LAST_CHANCE = "❌ YOU GOT ONE MORE CHANCE AFTER THIS ONE ❌"


def attempt_message(count: int, max_attempts: int = MAX_ATTEMPTS) -> str:
    """
    Reply for the `count`-th failed code.

    Depends only on the count: three escalating taunts, a last-chance
    warning one attempt before lockout, then the ejection notice.
    """
    if count >= max_attempts:
        return EJECTION_MESSAGE
    if count == max_attempts - 1:
        headline = _LAST_CHANCE
    else:
        headline = _TAUNTS.get(count, "❌ Invalid code ❌")
    return f"{headline}\nAttempt {count}/{max_attempts}"


# =============================================================================
# Tracker
# =============================================================================

class AttemptTracker:
    """
    Counts failed codes per user and reports when lockout is reached.

    Attributes:
        store: Where records live.
        max_attempts: Failed codes that trigger LOCKED_OUT.
    """

    def __init__(
        self,
        store: AttemptStore,
        max_attempts: int = MAX_ATTEMPTS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.max_attempts = max_attempts
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks: Dict[int, asyncio.Lock] = {}
        self._holders: Dict[int, int] = {}

    # =========================================================================
    # Per-user Serialization
    # =========================================================================

    @asynccontextmanager
    async def session(self, user_id: int) -> AsyncIterator[None]:
        """
        Hold the user's lock for one submission.

        The lock is dropped from the map once nobody holds or waits on it.
        """
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        self._holders[user_id] = self._holders.get(user_id, 0) + 1

        try:
            async with lock:
                yield
        finally:
            self._holders[user_id] -= 1
            if self._holders[user_id] == 0:
                del self._holders[user_id]
                del self._locks[user_id]

    @property
    def active_sessions(self) -> int:
        return len(self._locks)

    # =========================================================================
    # Transitions
    # =========================================================================

    async def record_failure(self, user_id: int, code: str) -> AttemptResult:
        """
        Record a wrong code.

        Callers hold session(user_id). A record already at the limit
        (its lockout did not complete) is reported as LOCKED_OUT again
        without appending, so no record ever grows past max_attempts.

        Raises:
            AttemptStoreError: If the store cannot be read or written.
        """
        record = await self.active_record(user_id)

        if self.is_locked_out(record):
            logger.warning("Lockout Pending From Earlier Attempt", [
                ("User ID", str(user_id)),
                ("Attempts", f"{record.count}/{self.max_attempts}"),
            ])
            return AttemptResult(TrackerState.LOCKED_OUT, record)

        now = self._clock()
        if record is None:
            record = await self.store.create(user_id, code, now)
        else:
            record = await self.store.append(record, code, now)

        state = TrackerState.LOCKED_OUT if record.count >= self.max_attempts else TrackerState.ACTIVE

        logger.tree("Failed Code Attempt", [
            ("User ID", str(user_id)),
            ("Attempt", f"{record.count}/{self.max_attempts}"),
            ("State", state.name),
        ], emoji="🔒" if state == TrackerState.ACTIVE else "🚨")

        return AttemptResult(state, record)

    async def active_record(self, user_id: int) -> Optional[AttemptRecord]:
        """
        Active record for the user, read strictly.

        Raises:
            AttemptStoreError: If the store cannot be read.
        """
        return await self.store.find_active(user_id, strict=True)

    def is_locked_out(self, record: Optional[AttemptRecord]) -> bool:
        return record is not None and record.count >= self.max_attempts

    async def resolve(self, record: AttemptRecord, outcome: Outcome) -> AttemptRecord:
        return await self.store.resolve(record, outcome)

    def message_for(self, count: int) -> str:
        return attempt_message(count, self.max_attempts)


__all__ = [
    "AttemptTracker",
    "EJECTION_MESSAGE",
    "attempt_message",
]
