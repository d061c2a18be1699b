"""
Tests for bouncer/services/attempts/store.py

The log channel store only trusts its own messages, finds records by
exact user id and reports read failures instead of hiding them when
asked for a strict read.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from bouncer.services.attempts.codec import ACTIVE_TITLE, CONCLUDED_TITLE, render_record
from bouncer.services.attempts.models import AttemptEntry, AttemptRecord, Outcome
from bouncer.services.attempts.store import (
    AttemptStoreError,
    AttemptStoreUnavailable,
    ChannelAttemptStore,
)


AT = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def _embed(user_id, *codes, resolved=False):
    record = AttemptRecord(user_id, tuple(AttemptEntry(c, AT) for c in codes), resolved=resolved)
    return render_record(record, outcome=Outcome.SUCCESS if resolved else None)


# =============================================================================
# find_active()
# =============================================================================

class TestFindActive:
    """Tests for ChannelAttemptStore.find_active()."""

    @pytest.mark.asyncio
    async def test_no_records(self, store):
        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_finds_active_record(self, store, log_channel):
        message = log_channel.add_message(_embed(42, "a", "b"))

        record = await store.find_active(42)

        assert record.count == 2
        assert record.message_id == message.id

    @pytest.mark.asyncio
    async def test_skips_resolved_records(self, store, log_channel):
        log_channel.add_message(_embed(42, "a", resolved=True))
        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_newest_active_record_wins(self, store, log_channel):
        log_channel.add_message(_embed(42, "old"))
        newest = log_channel.add_message(_embed(42, "new", "newer"))

        record = await store.find_active(42)

        assert record.message_id == newest.id

    @pytest.mark.asyncio
    async def test_ignores_messages_from_other_authors(self, store, log_channel, make_author):
        log_channel.add_message(_embed(42, "forged"), author=make_author(1))
        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_exact_user_match(self, store, log_channel):
        log_channel.add_message(_embed(4200, "a"))
        log_channel.add_message(_embed(142, "a"))
        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_lookback_window(self, mock_bot, log_channel):
        store = ChannelAttemptStore(mock_bot, log_channel.id, scan_limit=3)
        log_channel.add_message(_embed(42, "a"))
        for _ in range(3):
            log_channel.add_message(discord.Embed(title="noise"))

        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_read_failure_best_effort(self, store, log_channel):
        log_channel.fail_history = True
        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_read_failure_strict_raises(self, store, log_channel):
        log_channel.fail_history = True
        with pytest.raises(AttemptStoreError):
            await store.find_active(42, strict=True)


# =============================================================================
# Channel Resolution
# =============================================================================

class TestGetChannel:
    @pytest.mark.asyncio
    async def test_falls_back_to_fetch(self, mock_bot, log_channel):
        mock_bot.get_channel = MagicMock(return_value=None)
        store = ChannelAttemptStore(mock_bot, log_channel.id)

        assert await store.get_channel() is log_channel
        mock_bot.fetch_channel.assert_awaited_once_with(log_channel.id)

    @pytest.mark.asyncio
    async def test_missing_channel_is_unavailable(self, mock_bot, log_channel, http_error):
        mock_bot.get_channel = MagicMock(return_value=None)
        mock_bot.fetch_channel = AsyncMock(side_effect=http_error(discord.NotFound, 404))
        store = ChannelAttemptStore(mock_bot, log_channel.id)

        with pytest.raises(AttemptStoreUnavailable):
            await store.get_channel()

    @pytest.mark.asyncio
    async def test_missing_channel_strict_read_raises(self, mock_bot, log_channel, http_error):
        mock_bot.get_channel = MagicMock(return_value=None)
        mock_bot.fetch_channel = AsyncMock(side_effect=http_error(discord.Forbidden, 403))
        store = ChannelAttemptStore(mock_bot, log_channel.id)

        assert await store.find_active(42) is None
        with pytest.raises(AttemptStoreUnavailable):
            await store.find_active(42, strict=True)

    @pytest.mark.asyncio
    async def test_non_text_channel_is_unavailable(self, mock_bot, log_channel):
        mock_bot.get_channel = MagicMock(return_value=object())
        store = ChannelAttemptStore(mock_bot, log_channel.id)

        with pytest.raises(AttemptStoreUnavailable):
            await store.get_channel()


# =============================================================================
# Writes
# =============================================================================

class TestWrites:
    @pytest.mark.asyncio
    async def test_create_posts_record(self, store, log_channel):
        record = await store.create(42, "abc", AT)

        assert record.count == 1
        assert record.message_id == log_channel.messages[-1].id
        embed = log_channel.messages[-1].embeds[0]
        assert embed.title == ACTIVE_TITLE
        assert embed.footer.text == "User ID: 42 | First Attempt"

    @pytest.mark.asyncio
    async def test_create_failure_raises(self, store, log_channel):
        log_channel.fail_send = True
        with pytest.raises(AttemptStoreError):
            await store.create(42, "abc", AT)

    @pytest.mark.asyncio
    async def test_append_edits_in_place(self, store, log_channel):
        record = await store.create(42, "a", AT)

        updated = await store.append(record, "b", AT)

        assert updated.count == 2
        assert len(log_channel.messages) == 1
        assert (await store.find_active(42)).count == 2

    @pytest.mark.asyncio
    async def test_append_to_resolved_record_raises(self, store):
        record = AttemptRecord(42, (AttemptEntry("a", AT),), resolved=True, message_id=1)
        with pytest.raises(AttemptStoreError):
            await store.append(record, "b", AT)

    @pytest.mark.asyncio
    async def test_append_without_message_raises(self, store):
        record = AttemptRecord(42, (AttemptEntry("a", AT),))
        with pytest.raises(AttemptStoreError):
            await store.append(record, "b", AT)

    @pytest.mark.asyncio
    async def test_edit_failure_raises(self, store, log_channel):
        record = await store.create(42, "a", AT)
        log_channel.fail_edit = True

        with pytest.raises(AttemptStoreError):
            await store.append(record, "b", AT)

    @pytest.mark.asyncio
    async def test_resolve_concludes_record(self, store, log_channel):
        record = await store.create(42, "a", AT)

        resolved = await store.resolve(record, Outcome.LOCKOUT)

        assert resolved.resolved is True
        assert log_channel.messages[-1].embeds[0].title == CONCLUDED_TITLE
        assert await store.find_active(42) is None

    @pytest.mark.asyncio
    async def test_new_record_after_resolution(self, store):
        first = await store.resolve(await store.create(42, "a", AT), Outcome.SUCCESS)
        second = await store.create(42, "b", AT)

        assert second.message_id != first.message_id
        assert (await store.find_active(42)).count == 1
