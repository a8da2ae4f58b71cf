"""
Score-and-punish decision procedure for a single message.

For each eligible message the evaluator:

1. Requests scores for the configured attributes from the scorer (one call).
2. Walks the attributes in configured order and, for each, scans its
   thresholds from the most to the least severe punishment. The first
   threshold met decides the punishment and no further attribute is looked at.
3. Applies that punishment through the moderation actor.
4. Posts a best-effort notice to the guild's moderation log channel.

Scoring failures and failed moderation calls are logged and end the handling
of that message only. An unknown punishment reaching step 3 means the
threshold table is corrupt and raises :class:`InvariantViolation`.

Messages are evaluated independently and concurrently. Two messages from the
same author that are in flight together may both be punished.
"""

from __future__ import annotations

import asyncio
import math
from typing import Mapping, Sequence

from travis.datatypes.moderation_datatypes import (
    EvaluationState,
    LogChannelSelector,
    ModerationDecision,
    ModerationMessage,
    PunishmentKind,
)
from travis.datatypes.perspective_datatypes import AttributeKind, AttributeScore, CommentType, Language
from travis.exceptions import ConfigurationError, InvariantViolation, ScoringServiceError
from travis.moderation.interfaces import ModerationActor, NotificationSink, Scorer
from travis.moderation.threshold_table import ThresholdTable
from travis.util.logger import get_logger

logger = get_logger("message_evaluator")

DEFAULT_LOG_CHANNEL_NAME = "travis-logs"
DEFAULT_BAN_DELETE_MESSAGE_DAYS = 1


def is_eligible(message: ModerationMessage) -> bool:
    """Return True if the message should be scored.

    Only non-empty messages from guild members holding nothing but the default
    ``@everyone`` role are scored. Bots are never scored.
    """
    if not message.content:
        return False
    if message.author_is_bot:
        return False
    return message.role_count == 1


def score_percentage(score: float) -> int:
    """Convert a probability to a whole percentage, rounding halves up."""
    return int(math.floor(score * 100 + 0.5))


def format_reason(attribute: AttributeKind, score: float) -> str:
    """Audit-log reason attached to every automated action."""
    return f"Message was scored {score_percentage(score)}% for {attribute}"


def format_notification(message: ModerationMessage, decision: ModerationDecision) -> str:
    """Render the moderation log notice for an applied decision."""
    return (
        f"The following message from {message.user_tag} ({message.user_id}) resulted in a "
        f"{decision.punishment} action because it was scored {score_percentage(decision.score)}% "
        f"for {decision.attribute}:\n{message.content}"
    )


class MessageEvaluator:
    """Decide on and apply at most one punishment per message.

    Args:
        scorer: Scores message text for the requested attributes.
        thresholds: Threshold table loaded at startup.
        actor: Performs bans, kicks and deletions.
        sink: Receives the moderation log notice.
        requested_attributes: Attributes to score, in evaluation order.
        log_channel_name: Name of the moderation log channel in each guild.
        ban_delete_message_days: Days of the author's messages removed on ban.
        comment_type: Passed through to the scorer.
        languages: Language hints passed through to the scorer.

    Raises:
        ConfigurationError: If no attribute is requested or a requested
            attribute has no thresholds.
    """

    def __init__(
        self,
        scorer: Scorer,
        thresholds: ThresholdTable,
        actor: ModerationActor,
        sink: NotificationSink,
        *,
        requested_attributes: Sequence[AttributeKind] = (AttributeKind.TOXICITY,),
        log_channel_name: str = DEFAULT_LOG_CHANNEL_NAME,
        ban_delete_message_days: int = DEFAULT_BAN_DELETE_MESSAGE_DAYS,
        comment_type: CommentType = CommentType.PLAIN_TEXT,
        languages: Sequence[Language] | None = None,
    ) -> None:
        ordered = tuple(dict.fromkeys(requested_attributes))
        if not ordered:
            raise ConfigurationError("At least one attribute must be requested")
        missing = [attribute for attribute in ordered if attribute not in thresholds]
        if missing:
            raise ConfigurationError(
                "No thresholds configured for requested attribute(s): "
                + ", ".join(str(attribute) for attribute in missing)
            )

        self.scorer = scorer
        self.thresholds = thresholds
        self.actor = actor
        self.sink = sink
        self.requested_attributes: tuple[AttributeKind, ...] = ordered
        self.log_channel_name = log_channel_name
        self.ban_delete_message_days = ban_delete_message_days
        self.comment_type = comment_type
        self.languages: tuple[Language, ...] = tuple(languages or ())

    async def evaluate(self, message: ModerationMessage) -> EvaluationState:
        """Run the full score, decide, apply, notify sequence for one message.

        Returns:
            EvaluationState: The terminal state reached for the message.

        Raises:
            InvariantViolation: If the decision names an unknown punishment.
        """
        if not is_eligible(message):
            return EvaluationState.SKIPPED

        try:
            scores = await self.scorer.score(
                message.content,
                self.requested_attributes,
                comment_type=self.comment_type,
                languages=self.languages or None,
            )
        except ScoringServiceError as exc:
            logger.error("Unable to score message %s by %s (%s): %s", message.message_id, message.user_tag, message.user_id, exc)
            return EvaluationState.UNSCORED

        logger.debug(
            "Scored message %s by %s (%s): %s",
            message.message_id,
            message.user_tag,
            message.user_id,
            {str(attribute): score.value for attribute, score in scores.items()},
        )

        decision = self.decide(scores)
        if decision is None:
            return EvaluationState.NO_DECISION

        logger.info(
            "Applying %s to %s (%s) for message %s: %s",
            decision.punishment,
            message.user_tag,
            message.user_id,
            message.message_id,
            decision.reason,
        )
        if not await self.apply(message, decision):
            return EvaluationState.FAILED

        if await self.notify(message, decision):
            return EvaluationState.NOTIFIED
        return EvaluationState.APPLIED

    def decide(self, scores: Mapping[AttributeKind, AttributeScore]) -> ModerationDecision | None:
        """Pick the punishment for a set of scores, or None if no threshold is met.

        Attributes are checked in configured order and the first one meeting
        any threshold wins, even if a later attribute would call for a more
        severe punishment.
        """
        for attribute in self.requested_attributes:
            attribute_score = scores.get(attribute)
            if attribute_score is None:
                continue

            for entry in self.thresholds.lookup(attribute):
                if entry.minimum_score <= attribute_score.value:
                    return ModerationDecision(
                        attribute=attribute,
                        punishment=entry.punishment,
                        score=attribute_score.value,
                        reason=format_reason(attribute, attribute_score.value),
                    )
        return None

    async def apply(self, message: ModerationMessage, decision: ModerationDecision) -> bool:
        """Carry out a decision. Returns False if a moderation call failed.

        Raises:
            InvariantViolation: If the punishment is not one the evaluator knows.
        """
        match decision.punishment:
            case PunishmentKind.BAN:
                try:
                    await self.actor.ban(message, self.ban_delete_message_days, decision.reason)
                except Exception as exc:
                    logger.error("Unable to ban the user %s (%s): %s", message.user_tag, message.user_id, exc)
                    return False

            case PunishmentKind.KICK:
                results = await asyncio.gather(
                    self.actor.kick(message, decision.reason),
                    self.actor.delete_message(message, decision.reason),
                    return_exceptions=True,
                )

                failures = [result for result in results if isinstance(result, BaseException)]
                for failure in failures:
                    if isinstance(failure, asyncio.CancelledError):
                        raise failure
                for failure in failures:
                    logger.error(
                        "Unable to kick the user %s (%s) and delete message %s: %s",
                        message.user_tag,
                        message.user_id,
                        message.message_id,
                        failure,
                    )
                if failures:
                    return False

            case PunishmentKind.DELETE:
                try:
                    await self.actor.delete_message(message, decision.reason)
                except Exception as exc:
                    logger.error(
                        "Unable to delete the message %s by the user %s (%s): %s",
                        message.message_id,
                        message.user_tag,
                        message.user_id,
                        exc,
                    )
                    return False

            case _:
                raise InvariantViolation(f"Unrecognized punishment {decision.punishment!r}; threshold table is corrupt")

        return True

    async def notify(self, message: ModerationMessage, decision: ModerationDecision) -> bool:
        """Post the moderation log notice. Failures are logged and reported as False."""
        selector = LogChannelSelector(guild_id=message.guild_id, channel_name=self.log_channel_name)
        try:
            delivered = await self.sink.notify(selector, format_notification(message, decision))
        except Exception as exc:
            logger.error("Failed to send moderation log notice for message %s: %s", message.message_id, exc)
            return False

        if not delivered:
            logger.debug("No '%s' channel in guild %s; moderation notice dropped", self.log_channel_name, message.guild_id)
        return bool(delivered)
