"""
Bouncer - Test Fixtures
=======================

Shared fixtures for all tests.

The log channel is faked in memory with real discord.Embed objects so
tracking records go through the actual codec on every write and read.
"""

import os
import sys
import tempfile
from datetime import datetime, timezone
from itertools import count
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Keep log files and the database out of the working tree
_TEST_DIR = tempfile.mkdtemp(prefix="bouncer-tests-")
os.environ.setdefault("BOUNCER_LOG_DIR", str(Path(_TEST_DIR) / "logs"))
os.environ.setdefault("BOUNCER_DB_PATH", str(Path(_TEST_DIR) / "bouncer.db"))

import discord  # noqa: E402


BOT_USER_ID = 999888777
LOG_CHANNEL_ID = 444555666
GUILD_ID = 987654321


# =============================================================================
# Helpers
# =============================================================================

def http_error(cls=discord.HTTPException, status: int = 500, message: str = "boom"):
    """Build a discord HTTP exception without a real aiohttp response."""
    response = MagicMock()
    response.status = status
    response.reason = "Error"
    return cls(response, message)


def make_role(name: str, role_id: int) -> MagicMock:
    role = MagicMock()
    role.name = name
    role.id = role_id
    role.mention = f"<@&{role_id}>"
    return role


def make_author(user_id: int) -> MagicMock:
    author = MagicMock()
    author.id = user_id
    return author


# =============================================================================
# Fake Log Channel
# =============================================================================

class FakeMessage:
    """Message holding embeds; edits replace them in place."""

    def __init__(self, message_id: int, author, content=None, embeds=None) -> None:
        self.id = message_id
        self.author = author
        self.content = content
        self.embeds = list(embeds or [])

    async def edit(self, *, embed=None, **kwargs) -> "FakeMessage":
        if embed is not None:
            self.embeds = [embed]
        return self


class FakePartialMessage:
    def __init__(self, channel: "FakeLogChannel", message_id: int) -> None:
        self.channel = channel
        self.id = message_id

    async def edit(self, *, embed=None, **kwargs):
        if self.channel.fail_edit:
            raise http_error()
        message = self.channel.get(self.id)
        if message is None:
            raise http_error(discord.NotFound, 404, "Unknown Message")
        self.channel.edits += 1
        return await message.edit(embed=embed, **kwargs)


class FakeLogChannel:
    """
    In-memory text channel.

    messages are kept oldest first; history() yields newest first like
    discord.py does by default.
    """

    def __init__(self, channel_id: int = LOG_CHANNEL_ID, bot_user_id: int = BOT_USER_ID) -> None:
        self.id = channel_id
        self.name = "bouncer-logs"
        self.bot_author = make_author(bot_user_id)
        self.messages: list = []
        self.sent: list = []
        self.edits = 0
        self.fail_history = False
        self.fail_send = False
        self.fail_edit = False
        self._ids = count(1000)

    def get(self, message_id: int):
        return next((m for m in self.messages if m.id == message_id), None)

    def add_message(self, embed=None, author=None, content=None) -> FakeMessage:
        """Seed a message as if it had been posted earlier."""
        message = FakeMessage(next(self._ids), author or self.bot_author, content, [embed] if embed else [])
        self.messages.append(message)
        return message

    async def send(self, content=None, *, embed=None, embeds=None, **kwargs) -> FakeMessage:
        if self.fail_send:
            raise http_error()
        all_embeds = list(embeds or []) + ([embed] if embed is not None else [])
        message = FakeMessage(next(self._ids), self.bot_author, content, all_embeds)
        self.messages.append(message)
        self.sent.append({"content": content, "embeds": all_embeds, **kwargs})
        return message

    def history(self, limit: int = 100):
        async def _iterate():
            if self.fail_history:
                raise http_error(discord.Forbidden, 403, "Missing Access")
            for message in list(reversed(self.messages))[:limit]:
                yield message
        return _iterate()

    def get_partial_message(self, message_id: int) -> FakePartialMessage:
        return FakePartialMessage(self, message_id)


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def log_channel():
    """Empty fake log channel."""
    return FakeLogChannel()


@pytest.fixture
def mock_bot(log_channel):
    """Bot whose cache resolves the fake log channel."""
    bot = MagicMock()
    bot.user = make_author(BOT_USER_ID)
    bot.get_channel = MagicMock(return_value=log_channel)
    bot.fetch_channel = AsyncMock(return_value=log_channel)
    return bot


@pytest.fixture
def guild_roles():
    """Roles present in the test guild, by name."""
    return {
        name: make_role(name, 700 + i)
        for i, name in enumerate(["Admin", "Moderator", "Helper", "Member", "Crew", "Visitor", "CRYPTO", "RANDO"])
    }


@pytest.fixture
def mock_guild(guild_roles):
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.name = "Test Server"
    guild.roles = list(guild_roles.values())
    return guild


@pytest.fixture
def make_member(mock_guild, guild_roles):
    """Factory for guild members (isinstance(m, discord.Member) holds)."""
    def _make(user_id: int = 123456789, roles=("RANDO",)):
        member = MagicMock(spec=discord.Member)
        member.id = user_id
        member.name = f"user{user_id}"
        member.display_name = f"User {user_id}"
        member.mention = f"<@{user_id}>"
        member.guild = mock_guild
        member.roles = [guild_roles[r] for r in roles]
        member.joined_at = datetime(2024, 4, 15, 10, 0, tzinfo=timezone.utc)
        member.created_at = datetime(2020, 9, 13, 12, 0, tzinfo=timezone.utc)
        member.add_roles = AsyncMock()
        member.remove_roles = AsyncMock()
        member.kick = AsyncMock()
        member.send = AsyncMock()
        member.__str__ = MagicMock(return_value=f"user{user_id}")
        return member
    return _make


@pytest.fixture
def mock_member(make_member):
    return make_member()


@pytest.fixture
def mock_interaction(mock_member, mock_guild):
    """Modal submission interaction from mock_member."""
    interaction = MagicMock()
    interaction.user = mock_member
    interaction.guild = mock_guild
    interaction.client = MagicMock()
    interaction.response = MagicMock()
    interaction.response.is_done = MagicMock(return_value=False)
    interaction.response.defer = AsyncMock()
    interaction.response.send_message = AsyncMock()
    interaction.response.send_modal = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    interaction.edit_original_response = AsyncMock()
    return interaction


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def permissions_data():
    """Decoded permissions file used across tests."""
    return {
        "adminConfig": {
            "adminRole": "Admin",
            "logChannel": str(LOG_CHANNEL_ID),
            "unverifiedRole": "RANDO",
            "maxAttempts": 5,
            "rolesTotal": ["Admin", "Moderator", "Helper"],
            "codes": [
                {"code": "open-sesame", "roles": ["Member"]},
                {"code": "backstage", "roles": ["Member", "Crew"]},
            ],
            "roleButtons": [
                {"id": "visitor", "label": "Visitor", "roles": ["Visitor"]},
            ],
        },
        "commands": {
            "ping": {"description": "Check latency", "public": True},
            "kick": {"description": "Kick a member", "roles": ["Moderator"], "cooldown": {"duration": 10, "usages": 1}},
            "warn": {"description": "Warn a user", "roles": ["Moderator", "Helper"]},
        },
    }


@pytest.fixture
def permissions(permissions_data):
    from bouncer.core.config import parse_permissions
    return parse_permissions(permissions_data)


@pytest.fixture
def gate_config(permissions):
    return permissions.gate


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def store(mock_bot):
    from bouncer.services.attempts.store import ChannelAttemptStore
    return ChannelAttemptStore(mock_bot, LOG_CHANNEL_ID)


@pytest.fixture
def fixed_clock():
    """Clock advancing one minute per call."""
    base = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc).timestamp()
    ticks = count()

    def _now():
        return datetime.fromtimestamp(base + 60 * next(ticks), tz=timezone.utc)
    return _now


@pytest.fixture
def tracker(store, fixed_clock):
    from bouncer.services.attempts.tracker import AttemptTracker
    return AttemptTracker(store, max_attempts=5, clock=fixed_clock)


@pytest.fixture
def gate(gate_config, store, tracker):
    from bouncer.services.gate.service import AccessGate
    return AccessGate(gate_config, store, tracker=tracker)


@pytest.fixture
def replies():
    """Recording reply callable for AccessGate.process()."""
    sent = []

    async def _reply(text: str) -> bool:
        sent.append(text)
        return True

    _reply.sent = sent
    return _reply


@pytest.fixture
def test_db(tmp_path):
    """Fresh database in a temp directory."""
    from bouncer.core.database import DatabaseManager
    db = DatabaseManager(tmp_path / "test_bouncer.db")
    yield db
    db.close()


@pytest.fixture(name="http_error")
def http_error_fixture():
    """The http_error() helper, for building discord HTTP failures in tests."""
    return http_error


@pytest.fixture(name="make_author")
def make_author_fixture():
    return make_author
