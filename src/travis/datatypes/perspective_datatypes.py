"""
Request and response types for the Perspective comment analyzer.

Enum values are the exact names the API uses on the wire, so members can be
serialized with ``.value`` and parsed with ``Enum(value)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping


class AttributeKind(Enum):
    """Attributes the Perspective API can score a comment for."""

    TOXICITY = "TOXICITY"
    SEVERE_TOXICITY = "SEVERE_TOXICITY"
    TOXICITY_FAST = "TOXICITY_FAST"
    IDENTITY_ATTACK = "IDENTITY_ATTACK"
    IDENTITY_ATTACK_EXPERIMENTAL = "IDENTITY_ATTACK_EXPERIMENTAL"
    INSULT = "INSULT"
    INSULT_EXPERIMENTAL = "INSULT_EXPERIMENTAL"
    PROFANITY = "PROFANITY"
    PROFANITY_EXPERIMENTAL = "PROFANITY_EXPERIMENTAL"
    THREAT = "THREAT"
    THREAT_EXPERIMENTAL = "THREAT_EXPERIMENTAL"
    SEXUALLY_EXPLICIT = "SEXUALLY_EXPLICIT"
    FLIRTATION = "FLIRTATION"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: str | AttributeKind) -> AttributeKind:
        """Parse an attribute name case-insensitively (``toxicity`` -> TOXICITY)."""
        if isinstance(raw, cls):
            return raw
        return cls(str(raw).strip().upper())


class Language(Enum):
    """ISO 639-1 codes accepted as language hints."""

    ENGLISH = "en"
    SPANISH = "es"
    FRENCH = "fr"
    GERMAN = "de"
    PORTUGUESE = "pt"
    ITALIAN = "it"
    RUSSIAN = "ru"

    def __str__(self) -> str:
        return self.value


class ScoreType(Enum):
    PROBABILITY = "PROBABILITY"


class CommentType(Enum):
    """Text type of the analyzed comment. Only plain text is supported upstream."""

    PLAIN_TEXT = "PLAIN_TEXT"
    HTML = "HTML"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class SpanScore:
    """Score for the part of the comment between ``begin`` and ``end``."""

    begin: int
    end: int
    value: float
    score_type: ScoreType = ScoreType.PROBABILITY


@dataclass(frozen=True, slots=True)
class AttributeScore:
    """Summary score the classifier assigned to one attribute of a message.

    Attributes:
        attribute: The scored attribute.
        value: Probability in [0, 1].
        score_type: Mirrors the requested score type.
        span_scores: Per-span scores, when the API returned any.
    """

    attribute: AttributeKind
    value: float
    score_type: ScoreType = ScoreType.PROBABILITY
    span_scores: tuple[SpanScore, ...] = ()


def _parse_score_type(raw: Any) -> ScoreType:
    try:
        return ScoreType(raw)
    except ValueError:
        return ScoreType.PROBABILITY


def _expect_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{where} must be an object, got {type(value).__name__}")
    return value


@dataclass(slots=True)
class AnalyzeCommentResponse:
    """Parsed body of a ``comments:analyze`` response.

    Attributes:
        attribute_scores: Scores keyed by attribute, in the order the API returned them.
        languages: Requested languages, or the auto-detected language.
        client_token: Echo of the request's client token, if any.
    """

    attribute_scores: Dict[AttributeKind, AttributeScore] = field(default_factory=dict)
    languages: List[str] = field(default_factory=list)
    client_token: str | None = None

    @classmethod
    def from_json(cls, body: Mapping[str, Any]) -> AnalyzeCommentResponse:
        """Build a response from decoded JSON.

        Attribute names this client does not know are skipped.

        Raises:
            KeyError, TypeError, ValueError: If a known attribute lacks a numeric
                summary score or a section of the body has the wrong shape.
        """
        attribute_scores = _expect_mapping(body.get("attributeScores") or {}, "attributeScores")

        scores: Dict[AttributeKind, AttributeScore] = {}
        for name, payload in attribute_scores.items():
            try:
                attribute = AttributeKind(name)
            except ValueError:
                continue

            payload = _expect_mapping(payload, name)
            summary = _expect_mapping(payload["summaryScore"], f"{name}.summaryScore")
            raw_spans = payload.get("spanScores") or []
            if not isinstance(raw_spans, list):
                raise TypeError(f"{name}.spanScores must be a list, got {type(raw_spans).__name__}")

            spans = []
            for span in raw_spans:
                span = _expect_mapping(span, f"{name}.spanScores[]")
                span_score = _expect_mapping(span["score"], f"{name}.spanScores[].score")
                spans.append(
                    SpanScore(
                        begin=int(span.get("begin", 0)),
                        end=int(span.get("end", 0)),
                        value=float(span_score["value"]),
                        score_type=_parse_score_type(span_score.get("type")),
                    )
                )
            scores[attribute] = AttributeScore(
                attribute=attribute,
                value=float(summary["value"]),
                score_type=_parse_score_type(summary.get("type")),
                span_scores=tuple(spans),
            )

        return cls(
            attribute_scores=scores,
            languages=list(body.get("languages") or []),
            client_token=body.get("clientToken"),
        )
