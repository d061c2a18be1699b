"""
Tests for bouncer/services/gate/escalation.py and roles.py

Lockout steps run in order and independently: alert, ejection notice,
kick, then conclusion of the record only when the kick went through.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from bouncer.services.attempts.models import AttemptEntry, AttemptRecord, Outcome
from bouncer.services.attempts.tracker import EJECTION_MESSAGE
from bouncer.services.gate.escalation import (
    ALERT_TITLE,
    DETAILS_TITLE,
    EscalationNotifier,
    build_alert_embeds,
)
from bouncer.services.gate.roles import GRANT_FAILED_MESSAGE, grant_roles


AT = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def locked_record():
    return AttemptRecord(
        user_id=123456789,
        entries=tuple(AttemptEntry(f"code{i}", AT) for i in range(5)),
        message_id=1,
    )


@pytest.fixture
def notifier():
    tracker = MagicMock()
    tracker.resolve = AsyncMock()
    return EscalationNotifier(tracker, "Admin")


# =============================================================================
# Alert Embeds
# =============================================================================

class TestBuildAlertEmbeds:
    def test_alert_and_details(self, mock_member, locked_record):
        alert, details = build_alert_embeds(mock_member, locked_record, now=AT)

        assert alert.title == ALERT_TITLE
        assert details.title == DETAILS_TITLE
        assert [f.name for f in alert.fields] == [
            "User Information",
            "Joined Server",
            "Account Created",
            "First Attempt",
            "Failed Codes",
        ]
        assert "`code4`" in alert.fields[4].value
        assert str(mock_member.id) in alert.fields[0].value


# =============================================================================
# Escalation Sequence
# =============================================================================

class TestEscalate:
    """Tests for EscalationNotifier.escalate()."""

    @pytest.mark.asyncio
    async def test_full_sequence_in_order(self, notifier, mock_member, locked_record, log_channel):
        calls = []
        reply = AsyncMock(side_effect=lambda text: calls.append("reply") or True)
        mock_member.kick = AsyncMock(side_effect=lambda **kw: calls.append("kick"))
        notifier.tracker.resolve = AsyncMock(side_effect=lambda *a: calls.append("resolve"))
        original_send = log_channel.send

        async def send(*args, **kwargs):
            calls.append("alert")
            return await original_send(*args, **kwargs)

        log_channel.send = send

        report = await notifier.escalate(mock_member, locked_record, log_channel, reply)

        assert calls == ["alert", "reply", "kick", "resolve"]
        assert report.alert_sent and report.user_notified and report.evicted and report.resolved
        reply.assert_awaited_once_with(EJECTION_MESSAGE)
        mock_member.kick.assert_awaited_once_with(reason="Exceeded maximum code entry attempts")
        notifier.tracker.resolve.assert_awaited_once_with(locked_record, Outcome.LOCKOUT)

    @pytest.mark.asyncio
    async def test_alert_mentions_admin_role(self, notifier, mock_member, locked_record, log_channel, guild_roles):
        await notifier.escalate(mock_member, locked_record, log_channel, AsyncMock(return_value=True))

        sent = log_channel.sent[0]
        assert guild_roles["Admin"].mention in sent["content"]
        assert sent["allowed_mentions"].roles is True
        assert sent["allowed_mentions"].everyone is False

    @pytest.mark.asyncio
    async def test_missing_admin_role_still_alerts(self, mock_member, locked_record, log_channel):
        notifier = EscalationNotifier(MagicMock(resolve=AsyncMock()), "NoSuchRole")

        report = await notifier.escalate(mock_member, locked_record, log_channel, AsyncMock(return_value=True))

        assert report.alert_sent is True
        assert "<@&" not in log_channel.sent[0]["content"]

    @pytest.mark.asyncio
    async def test_alert_failure_does_not_block_kick(self, notifier, mock_member, locked_record, log_channel):
        log_channel.fail_send = True

        report = await notifier.escalate(mock_member, locked_record, log_channel, AsyncMock(return_value=True))

        assert report.alert_sent is False
        assert report.evicted is True
        assert report.resolved is True

    @pytest.mark.asyncio
    async def test_no_channel_still_kicks(self, notifier, mock_member, locked_record):
        report = await notifier.escalate(mock_member, locked_record, None, AsyncMock(return_value=True))

        assert report.alert_sent is False
        mock_member.kick.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_kick_leaves_record_active(self, notifier, mock_member, locked_record, log_channel, http_error):
        mock_member.kick = AsyncMock(side_effect=http_error(discord.Forbidden, 403))

        report = await notifier.escalate(mock_member, locked_record, log_channel, AsyncMock(return_value=True))

        assert report.alert_sent is True
        assert report.evicted is False
        assert report.resolved is False
        notifier.tracker.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_reply_failure_does_not_block_kick(self, notifier, mock_member, locked_record, log_channel, http_error):
        reply = AsyncMock(side_effect=http_error(status=404))

        report = await notifier.escalate(mock_member, locked_record, log_channel, reply)

        assert report.user_notified is False
        assert report.evicted is True


# =============================================================================
# Role Grants
# =============================================================================

class TestGrantRoles:
    """Tests for grant_roles()."""

    @pytest.mark.asyncio
    async def test_grants_and_removes_unverified(self, mock_member, guild_roles):
        result = await grant_roles(mock_member, ["Member", "Crew"], "RANDO")

        assert result.success is True
        assert result.granted == ("Member", "Crew")
        assert result.message == "WELCOME I GAVE YOU THE ROLE: Member, Crew"
        mock_member.add_roles.assert_awaited_once_with(
            guild_roles["Member"], guild_roles["Crew"], reason="Bouncer role grant"
        )
        mock_member.remove_roles.assert_awaited_once_with(guild_roles["RANDO"], reason="Bouncer role grant")

    @pytest.mark.asyncio
    async def test_skips_unknown_roles(self, mock_member):
        result = await grant_roles(mock_member, ["Member", "Ghost"], "RANDO")

        assert result.success is True
        assert result.granted == ("Member",)
        assert result.missing == ("Ghost",)

    @pytest.mark.asyncio
    async def test_no_known_roles_fails(self, mock_member):
        result = await grant_roles(mock_member, ["Ghost"], "RANDO")

        assert result.success is False
        assert result.message == GRANT_FAILED_MESSAGE
        mock_member.add_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unverified_kept_when_not_held(self, make_member):
        member = make_member(roles=())

        await grant_roles(member, ["Member"], "RANDO")

        member.remove_roles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error_fails(self, mock_member, http_error):
        mock_member.add_roles = AsyncMock(side_effect=http_error(discord.Forbidden, 403))

        result = await grant_roles(mock_member, ["Member"], "RANDO")

        assert result.success is False
        assert result.message == GRANT_FAILED_MESSAGE
