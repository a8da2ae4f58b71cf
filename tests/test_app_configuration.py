from operator import attrgetter
from pathlib import Path

import pytest
import yaml

from travis.configuration.app_configuration import AppConfig, PerspectiveSettings
from travis.datatypes.moderation_datatypes import PunishmentKind, ThresholdEntry
from travis.datatypes.perspective_datatypes import AttributeKind, CommentType, Language
from travis.exceptions import ConfigurationError


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def write_config(path: Path, payload) -> None:
    path.write_text(yaml.safe_dump(payload), encoding="utf-8")


def test_app_config_reload_parses_yaml(config_path: Path) -> None:
    write_config(
        config_path,
        {
            "thresholds": {
                "TOXICITY": {"ban": 0.9, "kick": 0.8, "delete": 0.6},
                "insult": {"delete": 0.7},
            },
            "requested_attributes": ["INSULT", "TOXICITY"],
            "log_channel_name": "mod-log",
            "ban_delete_message_days": 0,
            "perspective": {"comment_type": "html", "languages": ["en", "DE"], "do_not_store": False, "timeout_seconds": 3},
            "discord": {"max_messages": 50},
        },
    )

    config = AppConfig(config_path)

    assert config.thresholds.lookup(AttributeKind.INSULT) == (ThresholdEntry(PunishmentKind.DELETE, 0.7),)
    assert config.requested_attributes == [AttributeKind.INSULT, AttributeKind.TOXICITY]
    assert config.log_channel_name == "mod-log"
    assert config.ban_delete_message_days == 0
    assert config.perspective.comment_type is CommentType.HTML
    assert config.perspective.languages == [Language.ENGLISH, Language.GERMAN]
    assert config.perspective.do_not_store is False
    assert config.perspective.timeout_seconds == pytest.approx(3.0)
    assert config.max_messages == 50


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.thresholds.attributes == (AttributeKind.TOXICITY,)
    assert [entry.minimum_score for entry in config.thresholds.lookup(AttributeKind.TOXICITY)] == [0.8, 0.7, 0.5]
    assert config.requested_attributes == [AttributeKind.TOXICITY]
    assert config.log_channel_name == "travis-logs"
    assert config.ban_delete_message_days == 1
    assert config.perspective.comment_type is CommentType.PLAIN_TEXT
    assert config.perspective.languages == []
    assert config.perspective.do_not_store is True
    assert config.max_messages == 10


def test_app_config_empty_file_returns_defaults(config_path: Path) -> None:
    config_path.write_text("", encoding="utf-8")

    config = AppConfig(config_path)

    assert config.requested_attributes == [AttributeKind.TOXICITY]
    assert config.ban_delete_message_days == 1


def test_app_config_rejects_invalid_yaml(config_path: Path) -> None:
    config_path.write_text("thresholds: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        AppConfig(config_path)


def test_app_config_rejects_non_mapping(config_path: Path) -> None:
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        AppConfig(config_path)


@pytest.mark.parametrize(
    "payload, accessor",
    [
        ({"thresholds": {"TOXICITY": {"ban": 2}}}, "thresholds"),
        ({"requested_attributes": []}, "requested_attributes"),
        ({"requested_attributes": ["RUDENESS"]}, "requested_attributes"),
        ({"ban_delete_message_days": 8}, "ban_delete_message_days"),
        ({"ban_delete_message_days": "one"}, "ban_delete_message_days"),
        ({"ban_delete_message_days": None}, "ban_delete_message_days"),
        ({"ban_delete_message_days": True}, "ban_delete_message_days"),
        ({"discord": {"max_messages": "lots"}}, "max_messages"),
        ({"discord": {"max_messages": -1}}, "max_messages"),
        ({"perspective": {"timeout_seconds": "soon"}}, "perspective.timeout_seconds"),
        ({"perspective": {"timeout_seconds": 0}}, "perspective.timeout_seconds"),
    ],
)
def test_app_config_invalid_values(config_path: Path, payload, accessor) -> None:
    write_config(config_path, payload)
    config = AppConfig(config_path)

    with pytest.raises(ConfigurationError):
        attrgetter(accessor)(config)


def test_perspective_settings_validation() -> None:
    with pytest.raises(ConfigurationError):
        PerspectiveSettings({"comment_type": "MARKDOWN"}).comment_type
    with pytest.raises(ConfigurationError):
        PerspectiveSettings({"languages": ["xx"]}).languages
    with pytest.raises(ConfigurationError):
        PerspectiveSettings({"languages": "en"}).languages
