"""
Bouncer - Centralized Constants
===============================

All magic numbers and constants are defined here for maintainability.
Import from this module instead of hardcoding values.
"""

# =============================================================================
# Time Constants (in seconds)
# =============================================================================

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400

# =============================================================================
# Code Entry Gate
# =============================================================================

MAX_ATTEMPTS = 5                      # Failed codes before lockout
MAX_ATTEMPTS_LIMIT = 8                # Max-length codes still fit one 1024-char embed field
TRACKING_SCAN_LIMIT = 100             # Log channel messages searched for a record
CODE_MAX_LENGTH = 100                 # Modal input limit
KICK_REASON = "Exceeded maximum code entry attempts"

# =============================================================================
# Roles
# =============================================================================

DEFAULT_UNVERIFIED_ROLE = "RANDO"

# =============================================================================
# Commands
# =============================================================================

DEFAULT_PREFIX = "//"
DEFAULT_COOLDOWN_SECONDS = 3
DEFAULT_COOLDOWN_USAGES = 1
DEFAULT_REASON = "No reason provided"
PURGE_MIN = 1
PURGE_MAX = 100
WARNINGS_DISPLAY_LIMIT = 10

# Discord caps member timeouts at 28 days
MAX_TIMEOUT_SECONDS = 28 * SECONDS_PER_DAY


__all__ = [
    "SECONDS_PER_MINUTE",
    "SECONDS_PER_HOUR",
    "SECONDS_PER_DAY",
    "MAX_ATTEMPTS",
    "MAX_ATTEMPTS_LIMIT",
    "TRACKING_SCAN_LIMIT",
    "CODE_MAX_LENGTH",
    "KICK_REASON",
    "DEFAULT_UNVERIFIED_ROLE",
    "DEFAULT_PREFIX",
    "DEFAULT_COOLDOWN_SECONDS",
    "DEFAULT_COOLDOWN_USAGES",
    "DEFAULT_REASON",
    "PURGE_MIN",
    "PURGE_MAX",
    "WARNINGS_DISPLAY_LIMIT",
    "MAX_TIMEOUT_SECONDS",
]
