"""Event listener Cog for Travis.

This cog handles bot lifecycle events. Message events are handled by the
MessageListenerCog.
"""

import discord
from discord.ext import commands

from travis.util.logger import get_logger

logger = get_logger("events_listener")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle handlers."""

    def __init__(self, discord_bot_instance):
        self.bot = discord_bot_instance
        logger.info("[EVENTS LISTENER] Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """Set the "Watching you" presence and log the connected identity."""
        if self.bot.user:
            await self.bot.change_presence(
                status=discord.Status.online,
                activity=discord.Activity(type=discord.ActivityType.watching, name="you"),
            )
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("[EVENTS LISTENER] Bot partially connected, but user information not yet available.")

    @commands.Cog.listener(name='on_resumed')
    async def on_resumed(self):
        logger.info("[EVENTS LISTENER] Gateway session resumed")

    @commands.Cog.listener(name='on_disconnect')
    async def on_disconnect(self):
        logger.warning("[EVENTS LISTENER] Disconnected from Discord gateway")


def setup(discord_bot_instance):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance))
