"""
Bouncer - Attempt Tracking
==========================

Failed code attempts per user, stored as embeds in the log channel.

Structure:
    - models.py: AttemptRecord and friends
    - codec.py: record <-> embed
    - store.py: AttemptStore interface and the log channel implementation
    - tracker.py: state machine and per-user serialization
"""

from .models import AttemptEntry, AttemptRecord, AttemptResult, Outcome, TrackerState
from .store import AttemptStore, AttemptStoreError, AttemptStoreUnavailable, ChannelAttemptStore
from .tracker import AttemptTracker, attempt_message

__all__ = [
    "AttemptEntry",
    "AttemptRecord",
    "AttemptResult",
    "AttemptStore",
    "AttemptStoreError",
    "AttemptStoreUnavailable",
    "AttemptTracker",
    "ChannelAttemptStore",
    "Outcome",
    "TrackerState",
    "attempt_message",
]
