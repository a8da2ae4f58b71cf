"""
discord_utils.py
================

Discord-specific helpers for Travis.

This module provides the Discord-backed moderation actor and moderation log
sink used by the message evaluator, plus the conversion from a
``discord.Message`` to the evaluator's :class:`ModerationMessage`. The
evaluator itself never touches Discord objects directly.
"""

from __future__ import annotations

from typing import Union

import discord

from travis.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from travis.datatypes.moderation_datatypes import LogChannelSelector, ModerationMessage
from travis.exceptions import ActionFailure
from travis.util.logger import get_logger

logger = get_logger("discord_utils")

SECONDS_PER_DAY = 24 * 60 * 60
MAX_MESSAGE_LENGTH = 2000


def is_ignored_author(author: Union[discord.User, discord.Member]) -> bool:
    """
    Check if an author should be ignored by moderation handlers (bots or non-members).

    Args:
        author (discord.User | discord.Member): The user or member to check.

    Returns:
        bool: True if the author is a bot or not a guild member, False otherwise.
    """
    return author.bot or not isinstance(author, discord.Member)


def build_moderation_message(message: discord.Message) -> ModerationMessage:
    """
    Normalize a Discord message for the evaluator.

    Args:
        message (discord.Message): The received message.

    Returns:
        ModerationMessage: Message data plus a reference to the original message.
    """
    author = message.author
    role_count = len(author.roles) if isinstance(author, discord.Member) else None

    return ModerationMessage(
        message_id=MessageID(message.id),
        user_id=UserID(author.id),
        user_tag=str(author),
        content=message.content or "",
        guild_id=GuildID(message.guild.id) if message.guild else None,
        channel_id=ChannelID(message.channel.id),
        role_count=role_count,
        author_is_bot=bool(author.bot),
        discord_message=message,
    )


def _resolve_member(subject: ModerationMessage, action: str) -> discord.Member:
    discord_message = subject.discord_message
    author = getattr(discord_message, "author", None)
    if not isinstance(author, discord.Member):
        raise ActionFailure(
            action,
            user_id=subject.user_id,
            user_tag=subject.user_tag,
            message_id=subject.message_id,
            detail="author is not a guild member",
        )
    return author


class DiscordModerationActor:
    """Moderation actor that bans, kicks and deletes through the Discord API."""

    async def ban(self, subject: ModerationMessage, delete_message_days: int, reason: str) -> None:
        member = _resolve_member(subject, "ban")
        try:
            await member.ban(delete_message_seconds=delete_message_days * SECONDS_PER_DAY, reason=reason)
        except discord.HTTPException as exc:
            raise ActionFailure(
                "ban", user_id=subject.user_id, user_tag=subject.user_tag, message_id=subject.message_id, detail=str(exc)
            ) from exc
        logger.debug("Banned %s (%s)", subject.user_tag, subject.user_id)

    async def kick(self, subject: ModerationMessage, reason: str) -> None:
        member = _resolve_member(subject, "kick")
        try:
            await member.kick(reason=reason)
        except discord.HTTPException as exc:
            raise ActionFailure(
                "kick", user_id=subject.user_id, user_tag=subject.user_tag, message_id=subject.message_id, detail=str(exc)
            ) from exc
        logger.debug("Kicked %s (%s)", subject.user_tag, subject.user_id)

    async def delete_message(self, message: ModerationMessage, reason: str) -> None:
        discord_message = message.discord_message
        if discord_message is None:
            raise ActionFailure(
                "delete", user_id=message.user_id, user_tag=message.user_tag, message_id=message.message_id,
                detail="no Discord message attached",
            )
        try:
            await discord_message.delete(reason=reason)
        except discord.HTTPException as exc:
            raise ActionFailure(
                "delete", user_id=message.user_id, user_tag=message.user_tag, message_id=message.message_id, detail=str(exc)
            ) from exc
        logger.debug("Deleted message %s by %s (%s)", message.message_id, message.user_tag, message.user_id)


class DiscordLogChannelSink:
    """Posts moderation notices to a named text channel of the affected guild."""

    def __init__(self, bot: discord.Client) -> None:
        self.bot = bot

    def resolve_channel(self, channel_selector: LogChannelSelector) -> discord.TextChannel | None:
        """Return the first text channel matching the selector, or None."""
        if channel_selector.guild_id is None:
            return None
        guild = self.bot.get_guild(channel_selector.guild_id.to_int())
        if guild is None:
            return None
        return discord.utils.get(guild.text_channels, name=channel_selector.channel_name)

    async def notify(self, channel_selector: LogChannelSelector, text: str) -> bool:
        """Send ``text`` to the selected channel. Returns False if there is no such channel."""
        channel = self.resolve_channel(channel_selector)
        if channel is None:
            return False
        if len(text) > MAX_MESSAGE_LENGTH:
            text = text[: MAX_MESSAGE_LENGTH - 1] + "…"
        await channel.send(text, allowed_mentions=discord.AllowedMentions.none())
        return True
