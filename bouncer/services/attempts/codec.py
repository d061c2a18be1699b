"""
Bouncer - Attempt Record Codec
==============================

Encodes an AttemptRecord as a log channel embed and decodes it back.

Embed layout:
    title        "🔒 Code Entry Tracking" (active) or
                 "✅ Code Tracker Concluded" (resolved)
    description  "Tracking attempts for <@user_id>"
    field        "Attempts", one line per failed code:
                 "1. `code` at <t:1700000000:F>"
    footer       "User ID: <id> | First Attempt", with " | Resolved"
                 appended on conclusion

The footer is the lookup key; the title tells active from concluded.
"""

import re
from datetime import datetime, timezone
from typing import Optional

import discord

from bouncer.core.config import EmbedColors
from bouncer.services.attempts.models import AttemptEntry, AttemptRecord, Outcome


# =============================================================================
# Layout Constants
# =============================================================================

ACTIVE_TITLE = "🔒 Code Entry Tracking"
CONCLUDED_TITLE = "✅ Code Tracker Concluded"
ATTEMPTS_FIELD = "Attempts"
OUTCOME_FIELD = "Outcome"
FOOTER_BASE = "User ID: {user_id} | First Attempt"
RESOLVED_MARKER = " | Resolved"

FIELD_VALUE_LIMIT = 1024

OUTCOME_TEXT = {
    Outcome.SUCCESS: "Access granted",
    Outcome.LOCKOUT: "Locked out and removed",
}

_LINE_RE = re.compile(r"^(\d+)\. `(.*)` at <t:(\d+)(?::[A-Za-z])?>$")
_FOOTER_RE = re.compile(r"^User ID: (\d+)(?: \|.*)?$")


# =============================================================================
# Encoding
# =============================================================================

def _clean(code: str) -> str:
    return code.replace("\r", " ").replace("\n", " ")


def format_attempt_line(index: int, entry: AttemptEntry) -> str:
    return f"{index}. `{_clean(entry.code)}` at <t:{int(entry.submitted_at.timestamp())}:F>"


def format_attempts(record: AttemptRecord) -> str:
    """
    Render the attempts field.

    Codes are written in full. MAX_ATTEMPTS_LIMIT and CODE_MAX_LENGTH keep
    the worst case under FIELD_VALUE_LIMIT, so decoding returns the exact
    codes that were submitted.
    """
    if not record.entries:
        return "None"
    return "\n".join(format_attempt_line(i, e) for i, e in enumerate(record.entries, start=1))


def render_record(
    record: AttemptRecord,
    outcome: Optional[Outcome] = None,
    now: Optional[datetime] = None,
) -> discord.Embed:
    """
    Build the tracking embed for a record.

    Args:
        record: Record to encode.
        outcome: How the record concluded, shown on resolved records.
        now: Embed timestamp (defaults to the current time).
    """
    resolved = record.resolved
    footer = FOOTER_BASE.format(user_id=record.user_id)
    if resolved:
        footer += RESOLVED_MARKER

    embed = discord.Embed(
        title=CONCLUDED_TITLE if resolved else ACTIVE_TITLE,
        description=f"Tracking attempts for <@{record.user_id}>",
        color=EmbedColors.TRACKING_RESOLVED if resolved else EmbedColors.TRACKING_ACTIVE,
        timestamp=now or datetime.now(timezone.utc),
    )
    embed.add_field(name=ATTEMPTS_FIELD, value=format_attempts(record), inline=False)
    if resolved and outcome is not None:
        embed.add_field(name=OUTCOME_FIELD, value=OUTCOME_TEXT[outcome], inline=False)
    embed.set_footer(text=footer)
    return embed


# =============================================================================
# Decoding
# =============================================================================

def parse_user_id(footer_text: Optional[str]) -> Optional[int]:
    """Exact user id from a tracking footer, or None if it is not one."""
    if not footer_text:
        return None
    match = _FOOTER_RE.match(footer_text)
    return int(match.group(1)) if match else None


def parse_attempts(value: Optional[str]) -> tuple:
    """Decode the attempts field; malformed lines are skipped."""
    entries = []
    for line in (value or "").splitlines():
        match = _LINE_RE.match(line.strip())
        if not match:
            continue
        entries.append(AttemptEntry(
            code=match.group(2),
            submitted_at=datetime.fromtimestamp(int(match.group(3)), tz=timezone.utc),
        ))
    return tuple(entries)


def parse_embed(embed: discord.Embed, message_id: Optional[int] = None) -> Optional[AttemptRecord]:
    """
    Decode a tracking embed.

    Returns:
        The record, or None if the embed is not a tracking embed.
    """
    if embed.title not in (ACTIVE_TITLE, CONCLUDED_TITLE):
        return None

    footer_text = embed.footer.text if embed.footer else None
    user_id = parse_user_id(footer_text)
    if user_id is None:
        return None

    attempts_value = next(
        (f.value for f in embed.fields if f.name == ATTEMPTS_FIELD),
        None,
    )

    resolved = embed.title == CONCLUDED_TITLE or footer_text.endswith(RESOLVED_MARKER)
    return AttemptRecord(
        user_id=user_id,
        entries=parse_attempts(attempts_value),
        resolved=resolved,
        message_id=message_id,
    )


def parse_message(message: discord.Message) -> Optional[AttemptRecord]:
    """Decode the first embed of a message, if it is a tracking embed."""
    if not message.embeds:
        return None
    return parse_embed(message.embeds[0], message_id=message.id)


__all__ = [
    "ACTIVE_TITLE",
    "CONCLUDED_TITLE",
    "format_attempts",
    "parse_attempts",
    "parse_embed",
    "parse_message",
    "parse_user_id",
    "render_record",
]
