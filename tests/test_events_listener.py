from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from travis.cog.listener import events_listener


@pytest.mark.asyncio
async def test_on_ready_sets_watching_presence():
    bot = SimpleNamespace(user=SimpleNamespace(id=1), change_presence=AsyncMock())
    cog = events_listener.EventsListenerCog(bot)

    await cog.on_ready()

    kwargs = bot.change_presence.call_args.kwargs
    assert kwargs["activity"].type is discord.ActivityType.watching
    assert kwargs["activity"].name == "you"


@pytest.mark.asyncio
async def test_on_ready_without_user_skips_presence():
    bot = SimpleNamespace(user=None, change_presence=AsyncMock())
    cog = events_listener.EventsListenerCog(bot)

    await cog.on_ready()

    bot.change_presence.assert_not_awaited()


def test_setup_registers_cog():
    bot = SimpleNamespace(add_cog=MagicMock())

    events_listener.setup(bot)

    assert isinstance(bot.add_cog.call_args.args[0], events_listener.EventsListenerCog)
