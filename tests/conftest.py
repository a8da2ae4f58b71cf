"""
Pytest configuration and fixtures for Travis tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to path so imports work without an editable install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from travis.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID  # noqa: E402
from travis.datatypes.moderation_datatypes import ModerationMessage  # noqa: E402
from travis.datatypes.perspective_datatypes import AttributeKind, AttributeScore  # noqa: E402


class FakeScorer:
    """Scorer returning canned scores and recording every call."""

    def __init__(self, scores=None, error: Exception | None = None) -> None:
        self.scores = scores or {}
        self.error = error
        self.calls: list = []

    async def score(self, text, requested_attributes, *, comment_type=None, languages=None):
        self.calls.append(
            {"text": text, "attributes": tuple(requested_attributes), "comment_type": comment_type, "languages": languages}
        )
        if self.error is not None:
            raise self.error
        return {
            attribute: AttributeScore(attribute=attribute, value=value)
            for attribute, value in self.scores.items()
        }


class FakeActor:
    """Moderation actor recording calls; any action named in ``fail`` raises."""

    def __init__(self, fail=()) -> None:
        self.fail = set(fail)
        self.calls: list = []

    async def _record(self, action, *args):
        self.calls.append((action, *args))
        if action in self.fail:
            raise RuntimeError(f"{action} refused")

    async def ban(self, subject, delete_message_days, reason):
        await self._record("ban", subject.user_id, delete_message_days, reason)

    async def kick(self, subject, reason):
        await self._record("kick", subject.user_id, reason)

    async def delete_message(self, message, reason):
        await self._record("delete", message.message_id, reason)


class FakeSink:
    """Notification sink recording notices; can fail or report a missing channel."""

    def __init__(self, delivered: bool = True, error: Exception | None = None) -> None:
        self.delivered = delivered
        self.error = error
        self.notices: list = []

    async def notify(self, channel_selector, text):
        self.notices.append((channel_selector, text))
        if self.error is not None:
            raise self.error
        return self.delivered


def make_message(
    content: str = "you are awful",
    role_count: int | None = 1,
    *,
    message_id: int = 555,
    user_id: int = 42,
    user_tag: str = "spammer#0001",
    guild_id: int | None = 1,
    author_is_bot: bool = False,
) -> ModerationMessage:
    return ModerationMessage(
        message_id=MessageID(message_id),
        user_id=UserID(user_id),
        user_tag=user_tag,
        content=content,
        guild_id=GuildID(guild_id) if guild_id is not None else None,
        channel_id=ChannelID(10),
        role_count=role_count,
        author_is_bot=author_is_bot,
    )


@pytest.fixture()
def toxicity_thresholds():
    return {AttributeKind.TOXICITY.value: {"ban": 0.8, "kick": 0.7, "delete": 0.5}}
