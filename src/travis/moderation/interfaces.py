"""Capabilities the message evaluator is wired with.

The Discord-backed implementations live in :mod:`travis.util.discord_utils`
and the Perspective-backed scorer in :mod:`travis.perspective`; tests swap
in plain fakes.
"""
from __future__ import annotations

from typing import Mapping, Protocol, Sequence, runtime_checkable

from travis.datatypes.moderation_datatypes import LogChannelSelector, ModerationMessage
from travis.datatypes.perspective_datatypes import AttributeKind, AttributeScore, CommentType, Language


@runtime_checkable
class Scorer(Protocol):
    async def score(
        self,
        text: str,
        requested_attributes: Sequence[AttributeKind],
        *,
        comment_type: CommentType = CommentType.PLAIN_TEXT,
        languages: Sequence[Language] | None = None,
    ) -> Mapping[AttributeKind, AttributeScore]: ...


@runtime_checkable
class ModerationActor(Protocol):
    async def ban(self, subject: ModerationMessage, delete_message_days: int, reason: str) -> None: ...
    async def kick(self, subject: ModerationMessage, reason: str) -> None: ...
    async def delete_message(self, message: ModerationMessage, reason: str) -> None: ...


@runtime_checkable
class NotificationSink(Protocol):
    async def notify(self, channel_selector: LogChannelSelector, text: str) -> bool: ...


__all__ = ["Scorer", "ModerationActor", "NotificationSink"]
