"""
Travis Discord Moderation Bot
=============================

A Discord bot that scores every message from unprivileged members with the
Perspective API and deletes the message, kicks the author or bans the author
when the toxicity score crosses the configured thresholds.
"""

import os
import platform
import sys
from pathlib import Path


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. TRAVIS_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise, the grandparent of this file's directory (the repository root).
    """
    if env_home := os.getenv("TRAVIS_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from travis import __version__
from travis.configuration.app_configuration import AppConfig, load_app_config
from travis.exceptions import ConfigurationError, InvariantViolation
from travis.moderation.message_evaluator import MessageEvaluator
from travis.perspective import PerspectiveClient
from travis.util.discord_utils import DiscordLogChannelSink, DiscordModerationActor
from travis.util.logger import get_logger, handle_exception


logger = get_logger("main")


class Secrets:
    """Credentials read from the environment."""

    def __init__(self, discord_token: str, perspective_api_key: str) -> None:
        self.discord_token = discord_token
        self.perspective_api_key = perspective_api_key


def load_environment() -> Secrets:
    """Load ``.env`` and return the required credentials.

    Raises
    ------
    ConfigurationError
        If ``DISCORD_TOKEN`` or ``GOOGLE_API_KEY`` is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")

    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigurationError("'DISCORD_TOKEN' environment variable not set")

    perspective_api_key = os.getenv("GOOGLE_API_KEY")
    if not perspective_api_key:
        raise ConfigurationError("'GOOGLE_API_KEY' environment variable not set")

    return Secrets(discord_token, perspective_api_key)


def build_intents() -> discord.Intents:
    """Construct the intents needed to read messages and inspect member roles."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


class TravisBot(discord.Bot):
    """py-cord bot that stops when an invariant of the evaluator is broken."""

    fatal_error: BaseException | None = None

    async def on_error(self, event_method: str, *args, **kwargs) -> None:
        error = sys.exc_info()[1]
        if isinstance(error, InvariantViolation):
            logger.critical("Invariant violated while handling %s; shutting down", event_method, exc_info=True)
            self.fatal_error = error
            await self.close()
            return
        logger.exception("Unhandled error in %s", event_method)


def create_bot(config: AppConfig) -> TravisBot:
    """Instantiate the Discord bot without registering cogs."""
    return TravisBot(
        intents=build_intents(),
        allowed_mentions=discord.AllowedMentions(everyone=False),
        max_messages=config.max_messages,
    )


def build_evaluator(config: AppConfig, bot: discord.Client, scorer: PerspectiveClient) -> MessageEvaluator:
    """Wire the evaluator with the Discord actor and log sink.

    Raises
    ------
    ConfigurationError
        If the thresholds or requested attributes are invalid.
    """
    thresholds = config.thresholds
    logger.info("Loaded thresholds: %r", thresholds)
    return MessageEvaluator(
        scorer,
        thresholds,
        DiscordModerationActor(),
        DiscordLogChannelSink(bot),
        requested_attributes=config.requested_attributes,
        log_channel_name=config.log_channel_name,
        ban_delete_message_days=config.ban_delete_message_days,
        comment_type=config.perspective.comment_type,
        languages=config.perspective.languages,
    )


def load_cogs(bot: discord.Bot, evaluator: MessageEvaluator) -> None:
    """Register the listener cogs with the bot."""
    from travis.cog.listener import events_listener, message_listener

    events_listener.setup(bot)
    message_listener.setup(bot, evaluator)

    logger.info("All cogs loaded successfully.")


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Connect to Discord and run until the bot is closed."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, scorer: PerspectiveClient | None) -> None:
    """Close the Discord connection and the Perspective HTTP session."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing Discord connection: %s", exc)

    if scorer is not None:
        try:
            await scorer.close()
        except Exception as exc:
            logger.exception("Error while closing Perspective session: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap configuration, collaborators and the bot, returning an exit code."""
    try:
        secrets = load_environment()
        config = load_app_config()
        scorer = PerspectiveClient(
            secrets.perspective_api_key,
            timeout_seconds=config.perspective.timeout_seconds,
            do_not_store=config.perspective.do_not_store,
        )
        bot = create_bot(config)
        evaluator = build_evaluator(config, bot, scorer)
    except ConfigurationError as exc:
        logger.critical("Invalid configuration, bot cannot start: %s", exc)
        return 1

    load_cogs(bot, evaluator)

    exit_code = 0
    try:
        await start_bot(bot, secrets.discord_token)
    except discord.LoginFailure as exc:
        logger.critical("An error occurred while logging in to Discord: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, scorer)

    if bot.fatal_error is not None:
        return 1
    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting Travis %s on Python %s", __version__, platform.python_version())
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
