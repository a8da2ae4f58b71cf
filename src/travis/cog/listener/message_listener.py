"""Message listener Cog for Travis.

Every message the bot sees is normalized and handed to the message evaluator.
py-cord dispatches each event in its own task, so a slow Perspective call or
moderation request for one message never holds up the next.
"""

import discord
from discord.ext import commands

from travis.datatypes.moderation_datatypes import EvaluationState
from travis.moderation.message_evaluator import MessageEvaluator
from travis.util import discord_utils
from travis.util.logger import get_logger

logger = get_logger("message_listener_cog")


class MessageListenerCog(commands.Cog):
    """Cog feeding newly created messages to the evaluator."""

    def __init__(self, discord_bot_instance, evaluator: MessageEvaluator):
        """
        Initialize the message listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        evaluator:
            Evaluator that scores and punishes messages.
        """
        self.bot = discord_bot_instance
        self.evaluator = evaluator
        logger.info("Message listener cog loaded")

    @commands.Cog.listener(name='on_message')
    async def on_message(self, message: discord.Message):
        """
        Score a new message and punish its author if a threshold is met.

        Messages outside guilds and messages from bots are ignored before
        normalization; the role and content rules are applied by the evaluator.
        """
        if message.guild is None or discord_utils.is_ignored_author(message.author):
            return

        moderation_message = discord_utils.build_moderation_message(message)
        state = await self.evaluator.evaluate(moderation_message)

        if state is not EvaluationState.SKIPPED:
            logger.debug(f"Message {message.id} from {message.author} finished as {state.value}")


def setup(discord_bot_instance, evaluator: MessageEvaluator):
    """
    Register the MessageListenerCog with the bot.

    Parameters
    ----------
    discord_bot_instance:
        The Discord bot instance to add this cog to.
    evaluator:
        Evaluator shared by every message.
    """
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, evaluator))
