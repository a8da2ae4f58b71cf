"""
Error taxonomy for Travis.

- ConfigurationError: required startup configuration is missing or invalid.
  Fatal; raised before any message is served.
- ScoringServiceError / ScoringTransportError: the Perspective call failed.
  The message is skipped and the call is not retried.
- ActionFailure: a single ban, kick or delete call failed. Caught by the
  evaluator and logged.
- InvariantViolation: an unrecognized punishment reached the apply step.
  Never caught by the evaluator.
"""

from __future__ import annotations


class TravisError(Exception):
    """Base class for all Travis errors."""


class ConfigurationError(TravisError):
    """Raised when required configuration is absent or malformed."""


class ScoringServiceError(TravisError):
    """Raised when the scoring service rejects a request or returns garbage.

    Attributes:
        status: HTTP status returned by the service, when one was received.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ScoringTransportError(ScoringServiceError):
    """Raised when the scoring service could not be reached or timed out."""


class ActionFailure(TravisError):
    """Raised by a moderation actor when a ban, kick or delete call fails."""

    def __init__(
        self,
        action: str,
        user_id: int | str | None = None,
        user_tag: str | None = None,
        message_id: int | str | None = None,
        detail: str = "",
    ) -> None:
        self.action = action
        self.user_id = user_id
        self.user_tag = user_tag
        self.message_id = message_id
        self.detail = detail
        super().__init__(
            f"{action} failed for user {user_tag} ({user_id}) on message {message_id}"
            + (f": {detail}" if detail else "")
        )


class InvariantViolation(TravisError):
    """Raised when the evaluator reaches a state a valid threshold table cannot produce."""
