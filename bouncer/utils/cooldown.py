"""
Bouncer - Command Cooldowns
===========================

Sliding-window cooldowns keyed by (user, command).

DESIGN:
    Each key keeps the monotonic timestamps of its recent uses. A call
    is allowed while fewer than `usages` timestamps fall inside the
    window; otherwise the caller learns how long until the oldest one
    expires. Denied calls are not recorded.

    At most once per SWEEP_INTERVAL, hit() drops keys whose newest use
    is older than the longest window seen, so users who stop issuing
    commands do not stay in memory.

Usage:
    cooldowns = CooldownTracker()
    remaining = cooldowns.hit((user_id, "ban"), duration=5, usages=1)
    if remaining:
        ...  # wait `remaining` seconds
"""

import time
from collections import deque
from typing import Callable, Deque, Dict, Hashable, Optional


SWEEP_INTERVAL = 300.0


# =============================================================================
# Cooldown Tracker
# =============================================================================

class CooldownTracker:
    """Sliding-window usage counter."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._uses: Dict[Hashable, Deque[float]] = {}
        self._longest_window = 0.0
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._uses)

    def hit(self, key: Hashable, duration: float, usages: int) -> Optional[float]:
        """
        Record a use of `key` if allowed.

        Returns:
            None when the use is allowed, otherwise seconds remaining
            until the next use would be allowed.
        """
        if duration <= 0:
            return None

        now = self._clock()
        self._longest_window = max(self._longest_window, duration)
        if now - self._last_sweep >= SWEEP_INTERVAL:
            self._last_sweep = now
            self.cleanup(max_age=self._longest_window)

        window = self._uses.setdefault(key, deque())

        while window and now - window[0] >= duration:
            window.popleft()

        if len(window) >= usages:
            return window[0] + duration - now

        window.append(now)
        return None

    def cleanup(self, max_age: float) -> int:
        """Drop keys whose newest use is older than `max_age` seconds."""
        now = self._clock()
        stale = [k for k, w in self._uses.items() if not w or now - w[-1] >= max_age]
        for key in stale:
            del self._uses[key]
        return len(stale)


__all__ = ["CooldownTracker", "SWEEP_INTERVAL"]
