"""
Async client for the Perspective ``comments:analyze`` endpoint.

The client owns a lazily created ``aiohttp.ClientSession`` and applies its own
request timeout. It never retries: transport problems surface as
:class:`ScoringTransportError`, rejected or unreadable responses as
:class:`ScoringServiceError`.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional, Sequence

import aiohttp

from travis.datatypes.perspective_datatypes import (
    AnalyzeCommentResponse,
    AttributeKind,
    AttributeScore,
    CommentType,
    Language,
)
from travis.exceptions import ConfigurationError, ScoringServiceError, ScoringTransportError
from travis.util.logger import get_logger

logger = get_logger("perspective_client")

PERSPECTIVE_ENDPOINT = "https://commentanalyzer.googleapis.com/v1alpha1/comments:analyze"
DEFAULT_TIMEOUT_SECONDS = 10.0


class PerspectiveClient:
    """Scorer backed by Google's Perspective API.

    Args:
        api_key: Google API key with the Comment Analyzer API enabled.
        endpoint: Analyze endpoint URL.
        timeout_seconds: Total timeout applied to each request.
        do_not_store: Ask Perspective not to keep submitted comments.
        session: Optional externally managed session; it is not closed by :meth:`close`.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        endpoint: str = PERSPECTIVE_ENDPOINT,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        do_not_store: bool = True,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("A Perspective API key is required")

        self._api_key = api_key
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.do_not_store = do_not_store
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def build_request(
        self,
        text: str,
        requested_attributes: Sequence[AttributeKind],
        *,
        comment_type: CommentType = CommentType.PLAIN_TEXT,
        languages: Sequence[Language] | None = None,
    ) -> Dict[str, Any]:
        """Build the JSON body of an analyze request."""
        if not requested_attributes:
            raise ValueError("At least one attribute must be requested")

        body: Dict[str, Any] = {
            "comment": {"text": text, "type": comment_type.value},
            "requestedAttributes": {attribute.value: {} for attribute in requested_attributes},
            "doNotStore": self.do_not_store,
        }
        if languages:
            body["languages"] = [language.value for language in languages]
        return body

    async def analyze_comment(
        self,
        text: str,
        requested_attributes: Sequence[AttributeKind],
        *,
        comment_type: CommentType = CommentType.PLAIN_TEXT,
        languages: Sequence[Language] | None = None,
    ) -> AnalyzeCommentResponse:
        """Score ``text`` for the requested attributes.

        Raises:
            ScoringTransportError: If the service could not be reached in time.
            ScoringServiceError: If the service answered with an error or an unreadable body.
        """
        body = self.build_request(text, requested_attributes, comment_type=comment_type, languages=languages)
        session = await self._get_session()

        try:
            async with session.post(self.endpoint, params={"key": self._api_key}, json=body) as resp:
                status = resp.status
                if status != 200:
                    detail = await resp.text()
                    raise ScoringServiceError(f"Perspective returned HTTP {status}: {detail[:200]}", status=status)
                try:
                    payload = await resp.json(content_type=None)
                except ValueError as exc:
                    raise ScoringServiceError(f"Perspective returned invalid JSON: {exc}", status=status) from exc
        except asyncio.TimeoutError as exc:
            raise ScoringTransportError(f"Perspective request timed out after {self.timeout_seconds}s") from exc
        except aiohttp.ClientError as exc:
            raise ScoringTransportError(f"Perspective request failed: {exc}") from exc

        if not isinstance(payload, Mapping):
            raise ScoringServiceError("Perspective response is not a JSON object", status=status)

        try:
            return AnalyzeCommentResponse.from_json(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise ScoringServiceError(f"Malformed Perspective response: {exc}", status=status) from exc

    async def score(
        self,
        text: str,
        requested_attributes: Sequence[AttributeKind],
        *,
        comment_type: CommentType = CommentType.PLAIN_TEXT,
        languages: Sequence[Language] | None = None,
    ) -> Mapping[AttributeKind, AttributeScore]:
        """Return the summary score of each requested attribute."""
        response = await self.analyze_comment(
            text, requested_attributes, comment_type=comment_type, languages=languages
        )
        missing = [str(attribute) for attribute in requested_attributes if attribute not in response.attribute_scores]
        if missing:
            logger.debug("Perspective returned no score for %s", ", ".join(missing))
        return response.attribute_scores
