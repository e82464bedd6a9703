"""Discord client that feeds incoming messages to the dispatcher."""

import logging

import discord

from .config import BotSettings
from .discord_client import DiscordPlatform
from .dispatcher import CommandDispatcher, IncomingMessage

logger = logging.getLogger(__name__)


def create_intents() -> discord.Intents:
    """Intents needed to read commands and look up members."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.members = True
    return intents


def incoming_message(message: discord.Message) -> IncomingMessage:
    """Convert a discord.py message for the dispatcher."""
    return IncomingMessage(
        message_id=message.id,
        guild_id=message.guild.id if message.guild is not None else None,
        author_id=message.author.id,
        author_name=str(message.author),
        author_is_bot=message.author.bot,
        content=message.content,
        source=message,
    )


class SteckbriefBot(discord.Client):
    """Bot publishing profile cards to the configured channel."""

    def __init__(self, settings: BotSettings):
        super().__init__(
            intents=create_intents(),
            activity=discord.Game(name=settings.status_text),
        )
        self.settings = settings
        self.dispatcher = CommandDispatcher(settings, DiscordPlatform(self))

    async def on_ready(self):
        logger.info("Logged in as %s (%s)", self.user, self.user.id if self.user else "?")

    async def on_message(self, message: discord.Message):
        await self.dispatcher.handle(incoming_message(message))
