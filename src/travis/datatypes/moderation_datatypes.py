"""
Punishment and message types for the moderation pipeline.

This module defines the PunishmentKind enum and the small dataclasses that
flow through a single message evaluation. None of them outlive the handling
of the message that produced them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from travis.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from travis.datatypes.perspective_datatypes import AttributeKind

if TYPE_CHECKING:
    import discord


class PunishmentKind(Enum):
    """Automated punishments, from most to least severe."""

    BAN = "ban"
    KICK = "kick"
    DELETE = "delete"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> int:
        """Rank of the punishment; higher is more severe."""
        return _SEVERITY[self]

    @classmethod
    def by_severity(cls) -> tuple[PunishmentKind, ...]:
        """Return every punishment, most severe first."""
        return tuple(sorted(cls, key=lambda kind: kind.severity, reverse=True))


_SEVERITY = {
    PunishmentKind.BAN: 3,
    PunishmentKind.KICK: 2,
    PunishmentKind.DELETE: 1,
}


class EvaluationState(Enum):
    """Where the handling of one message ended up."""

    SKIPPED = "skipped"          # not eligible, never scored
    UNSCORED = "unscored"        # scoring call failed
    NO_DECISION = "no_decision"  # no threshold met
    APPLIED = "applied"          # punished, log notice not delivered
    NOTIFIED = "notified"        # punished and logged
    FAILED = "failed"            # moderation call failed


@dataclass(frozen=True, slots=True)
class ThresholdEntry:
    """Minimum score at which ``punishment`` applies to an attribute."""

    punishment: PunishmentKind
    minimum_score: float


@dataclass(frozen=True, slots=True)
class ModerationDecision:
    """The punishment chosen for a message and why.

    Attributes:
        attribute: Attribute whose threshold was met.
        punishment: Punishment to apply.
        score: Observed score for ``attribute``.
        reason: Audit-log reason passed to Discord.
    """

    attribute: AttributeKind
    punishment: PunishmentKind
    score: float
    reason: str


@dataclass(frozen=True, slots=True)
class LogChannelSelector:
    """Identifies the moderation log channel of a guild by name."""

    guild_id: Optional[GuildID]
    channel_name: str


@dataclass(slots=True)
class ModerationMessage:
    """Normalized view of an inbound message for the evaluator.

    Attributes:
        message_id: ID of the message.
        user_id: ID of the author.
        user_tag: Display tag of the author (``name`` or ``name#1234``).
        content: Raw text content.
        guild_id: Guild the message was sent in, None for DMs.
        channel_id: Channel the message was sent in.
        role_count: Number of roles the author holds, including ``@everyone``.
            None when the author is not a guild member.
        author_is_bot: Whether the author is a bot account.
        discord_message: Underlying Discord message, used by the Discord actor.
    """

    message_id: MessageID
    user_id: UserID
    user_tag: str
    content: str
    guild_id: Optional[GuildID]
    channel_id: ChannelID
    role_count: Optional[int]
    author_is_bot: bool = False
    discord_message: Optional["discord.Message"] = None
