from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Callable, Dict, List
import yaml

from travis.datatypes.perspective_datatypes import AttributeKind, CommentType, Language
from travis.exceptions import ConfigurationError
from travis.moderation.threshold_table import ThresholdTable
from travis.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path(os.getenv("TRAVIS_CONFIG", "./config/app_config.yml")).resolve()

DEFAULT_THRESHOLDS: Dict[str, Dict[str, float]] = {
    AttributeKind.TOXICITY.value: {"ban": 0.8, "kick": 0.7, "delete": 0.5},
}
DEFAULT_REQUESTED_ATTRIBUTES: List[str] = [AttributeKind.TOXICITY.value]
DEFAULT_LOG_CHANNEL_NAME = "travis-logs"
DEFAULT_BAN_DELETE_MESSAGE_DAYS = 1
DEFAULT_MAX_MESSAGES = 10
DEFAULT_TIMEOUT_SECONDS = 10.0


def _coerce_number(raw: Any, cast: Callable[[Any], Any], key: str) -> Any:
    if isinstance(raw, bool):
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
    try:
        return cast(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from None


class PerspectiveSettings:
    """Typed accessors for the ``perspective`` configuration section."""

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    @property
    def comment_type(self) -> CommentType:
        raw = self.data.get("comment_type", CommentType.PLAIN_TEXT.value)
        try:
            return CommentType(str(raw).upper())
        except ValueError:
            raise ConfigurationError(f"Unknown perspective.comment_type: {raw!r}") from None

    @property
    def languages(self) -> List[Language]:
        raw = self.data.get("languages") or []
        if not isinstance(raw, list):
            raise ConfigurationError("perspective.languages must be a list")
        try:
            return [Language(str(code).lower()) for code in raw]
        except ValueError as exc:
            raise ConfigurationError(f"Unsupported perspective language: {exc}") from None

    @property
    def do_not_store(self) -> bool:
        return bool(self.data.get("do_not_store", True))

    @property
    def timeout_seconds(self) -> float:
        value = _coerce_number(
            self.data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS), float, "perspective.timeout_seconds"
        )
        if not value > 0:
            raise ConfigurationError(f"perspective.timeout_seconds must be positive, got {value}")
        return value


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The file is read once at construction. Every setting has a default matching
    the stock deployment, so a missing file still yields a usable
    configuration; malformed values raise :class:`ConfigurationError` when the
    corresponding property is read.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = self._load_from_disk()

    # --------------------------
    # Private helpers
    # --------------------------
    def _load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.warning("[APP CONFIGURATION] Config file %s not found; using defaults.", self.config_path)
            return {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Failed to parse config {self.config_path}: {exc}") from exc

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config {self.config_path} must contain a mapping at the top level")
        return data

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def thresholds(self) -> ThresholdTable:
        """Build the threshold table from the ``thresholds`` section."""
        return ThresholdTable.from_mapping(self._data.get("thresholds", DEFAULT_THRESHOLDS))

    @property
    def requested_attributes(self) -> List[AttributeKind]:
        """Attributes to score, in the order they are evaluated."""
        raw = self._data.get("requested_attributes", DEFAULT_REQUESTED_ATTRIBUTES)
        if not isinstance(raw, list) or not raw:
            raise ConfigurationError("requested_attributes must be a non-empty list")
        try:
            return [AttributeKind.parse(name) for name in raw]
        except ValueError as exc:
            raise ConfigurationError(f"Unknown requested attribute: {exc}") from None

    @property
    def log_channel_name(self) -> str:
        value = self._data.get("log_channel_name") or DEFAULT_LOG_CHANNEL_NAME
        return str(value)

    @property
    def ban_delete_message_days(self) -> int:
        """Days of the banned author's messages Discord should remove (0-7)."""
        value = _coerce_number(
            self._data.get("ban_delete_message_days", DEFAULT_BAN_DELETE_MESSAGE_DAYS), int, "ban_delete_message_days"
        )
        if not 0 <= value <= 7:
            raise ConfigurationError(f"ban_delete_message_days must be between 0 and 7, got {value}")
        return value

    @property
    def perspective(self) -> PerspectiveSettings:
        settings = self._data.get("perspective", {})
        if not isinstance(settings, dict):
            settings = {}
        return PerspectiveSettings(settings)

    @property
    def max_messages(self) -> int:
        """Size of py-cord's message cache."""
        discord_settings = self._data.get("discord", {})
        if not isinstance(discord_settings, dict):
            return DEFAULT_MAX_MESSAGES
        value = _coerce_number(discord_settings.get("max_messages", DEFAULT_MAX_MESSAGES), int, "discord.max_messages")
        if value < 0:
            raise ConfigurationError(f"discord.max_messages must not be negative, got {value}")
        return value


def load_app_config(config_path: Path = CONFIG_PATH) -> AppConfig:
    """Load the configuration file at ``config_path``."""
    return AppConfig(config_path)
