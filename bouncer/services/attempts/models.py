"""
Bouncer - Attempt Tracking Models
=================================

Value types shared by the attempt store, the tracker and the gate.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple


class TrackerState(Enum):
    """Where a user's code-entry session stands after a submission."""

    NONE = "none"
    ACTIVE = "active"
    LOCKED_OUT = "locked_out"
    RESOLVED = "resolved"


class Outcome(Enum):
    """How a tracking record was concluded."""

    SUCCESS = "success"
    LOCKOUT = "lockout"


@dataclass(frozen=True)
class AttemptEntry:
    code: str
    submitted_at: datetime


@dataclass(frozen=True)
class AttemptRecord:
    """
    One user's code-entry session.

    Attributes:
        user_id: Subject of the record.
        entries: Failed codes in submission order.
        resolved: True once concluded; resolved records are history only.
        message_id: Log channel message holding the record, if stored.
    """

    user_id: int
    entries: Tuple[AttemptEntry, ...] = field(default_factory=tuple)
    resolved: bool = False
    message_id: Optional[int] = None

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def first_attempt_at(self) -> Optional[datetime]:
        return self.entries[0].submitted_at if self.entries else None

    def with_entry(self, entry: AttemptEntry) -> "AttemptRecord":
        return replace(self, entries=self.entries + (entry,))

    def as_resolved(self) -> "AttemptRecord":
        return replace(self, resolved=True)


@dataclass(frozen=True)
class AttemptResult:
    """What the tracker did with one failed submission."""

    state: TrackerState
    record: AttemptRecord

    @property
    def count(self) -> int:
        return self.record.count


__all__ = [
    "AttemptEntry",
    "AttemptRecord",
    "AttemptResult",
    "Outcome",
    "TrackerState",
]
