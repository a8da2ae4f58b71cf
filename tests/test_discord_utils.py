from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from travis.datatypes.discord_datatypes import GuildID, MessageID, UserID
from travis.datatypes.moderation_datatypes import LogChannelSelector, ModerationMessage
from travis.exceptions import ActionFailure
from travis.util import discord_utils


class FakeMember:
    def __init__(self, roles=1, bot=False) -> None:
        self.id = 42
        self.bot = bot
        self.roles = [object() for _ in range(roles)]
        self.ban = AsyncMock()
        self.kick = AsyncMock()

    def __str__(self) -> str:
        return "spammer#0001"


class FakeMessage:
    def __init__(self, author=None, content="hello", guild_id=1) -> None:
        self.id = 555
        self.author = author or FakeMember()
        self.content = content
        self.guild = SimpleNamespace(id=guild_id) if guild_id is not None else None
        self.channel = SimpleNamespace(id=10)
        self.delete = AsyncMock()


class FakeChannel:
    def __init__(self, name: str) -> None:
        self.name = name
        self.send = AsyncMock()


def http_error(status: int = 403) -> discord.HTTPException:
    return discord.Forbidden(SimpleNamespace(status=status, reason="Forbidden"), "Missing Permissions")


@pytest.fixture(autouse=True)
def patch_discord_types(monkeypatch):
    monkeypatch.setattr(discord_utils.discord, "Member", FakeMember, raising=False)
    yield


def moderation_message(discord_message) -> ModerationMessage:
    return discord_utils.build_moderation_message(discord_message)


def test_build_moderation_message_counts_roles():
    message = moderation_message(FakeMessage(FakeMember(roles=1)))

    assert message.message_id == MessageID(555)
    assert message.user_id == UserID(42)
    assert message.user_tag == "spammer#0001"
    assert message.guild_id == GuildID(1)
    assert message.role_count == 1
    assert message.author_is_bot is False


def test_build_moderation_message_for_non_member():
    author = SimpleNamespace(id=42, bot=False)
    message = moderation_message(FakeMessage(author=author, guild_id=None))

    assert message.role_count is None
    assert message.guild_id is None


def test_is_ignored_author():
    assert discord_utils.is_ignored_author(FakeMember(bot=True)) is True
    assert discord_utils.is_ignored_author(SimpleNamespace(bot=False)) is True
    assert discord_utils.is_ignored_author(FakeMember()) is False


@pytest.mark.asyncio
async def test_ban_converts_days_to_seconds():
    discord_message = FakeMessage()
    actor = discord_utils.DiscordModerationActor()

    await actor.ban(moderation_message(discord_message), 1, "Message was scored 90% for TOXICITY")

    discord_message.author.ban.assert_awaited_once_with(
        delete_message_seconds=86400, reason="Message was scored 90% for TOXICITY"
    )


@pytest.mark.asyncio
async def test_kick_and_delete_pass_reason():
    discord_message = FakeMessage()
    actor = discord_utils.DiscordModerationActor()
    message = moderation_message(discord_message)

    await actor.kick(message, "reason")
    await actor.delete_message(message, "reason")

    discord_message.author.kick.assert_awaited_once_with(reason="reason")
    discord_message.delete.assert_awaited_once_with(reason="reason")


@pytest.mark.asyncio
async def test_http_errors_become_action_failures():
    discord_message = FakeMessage()
    discord_message.author.ban.side_effect = http_error()
    actor = discord_utils.DiscordModerationActor()

    with pytest.raises(ActionFailure) as excinfo:
        await actor.ban(moderation_message(discord_message), 1, "reason")

    assert excinfo.value.action == "ban"
    assert excinfo.value.user_id == UserID(42)
    assert excinfo.value.message_id == MessageID(555)


@pytest.mark.asyncio
async def test_kick_requires_guild_member():
    message = moderation_message(FakeMessage())
    message.discord_message = None

    with pytest.raises(ActionFailure):
        await discord_utils.DiscordModerationActor().kick(message, "reason")
    with pytest.raises(ActionFailure):
        await discord_utils.DiscordModerationActor().delete_message(message, "reason")


@pytest.mark.asyncio
async def test_sink_sends_to_named_channel():
    logs = FakeChannel("travis-logs")
    guild = SimpleNamespace(text_channels=[FakeChannel("general"), logs])
    bot = SimpleNamespace(get_guild=lambda guild_id: guild if guild_id == 1 else None)
    sink = discord_utils.DiscordLogChannelSink(bot)

    delivered = await sink.notify(LogChannelSelector(GuildID(1), "travis-logs"), "notice")

    assert delivered is True
    logs.send.assert_awaited_once()
    assert logs.send.call_args.args == ("notice",)


@pytest.mark.asyncio
async def test_sink_truncates_long_notices():
    logs = FakeChannel("travis-logs")
    guild = SimpleNamespace(text_channels=[logs])
    sink = discord_utils.DiscordLogChannelSink(SimpleNamespace(get_guild=lambda guild_id: guild))

    await sink.notify(LogChannelSelector(GuildID(1), "travis-logs"), "x" * 5000)

    sent = logs.send.call_args.args[0]
    assert len(sent) == discord_utils.MAX_MESSAGE_LENGTH
    assert sent.endswith("…")


@pytest.mark.asyncio
async def test_sink_without_channel_reports_not_delivered():
    guild = SimpleNamespace(text_channels=[FakeChannel("general")])
    sink = discord_utils.DiscordLogChannelSink(SimpleNamespace(get_guild=lambda guild_id: guild))

    assert await sink.notify(LogChannelSelector(GuildID(1), "travis-logs"), "notice") is False
    assert await sink.notify(LogChannelSelector(None, "travis-logs"), "notice") is False
