"""Routes chat messages to the ping reply or the profile pipeline."""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from . import replies
from .card import THUMBNAIL_SIZE, build_card
from .config import BotSettings
from .discord_client import ChannelNotFoundError, DiscordClientError
from .identity_color import derive_color, identity_key
from .profile_parser import ProfileParseError, ProfileSubmission, parse_profile
from .submission_resolver import NOT_FOUND, Resolution, find_existing

logger = logging.getLogger(__name__)

PING = "ping"


@dataclass(frozen=True)
class IncomingMessage:
    """A chat message as the dispatcher sees it.

    ``source`` is the platform's own message object, used only for replies.
    """

    message_id: int
    guild_id: Optional[int]
    author_id: int
    author_name: str
    author_is_bot: bool
    content: str
    source: Any = None


def strip_prefix(content: str, prefix: str) -> Optional[str]:
    """Return ``content`` without ``prefix``, or None if it is missing."""
    if not content.startswith(prefix):
        return None
    return content[len(prefix):]


class CommandDispatcher:
    """Handles one incoming message at a time; safe to call concurrently.

    Args:
        settings: Immutable bot settings
        platform: Collaborator with the DiscordPlatform interface
    """

    def __init__(self, settings: BotSettings, platform: Any):
        self._settings = settings
        self._platform = platform
        self._user_locks: Dict[int, asyncio.Lock] = {}
        self._lock_users: Dict[int, int] = {}

    def _get_lock(self, user_id: int) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    def _release_lock(self, user_id: int) -> None:
        remaining = self._lock_users[user_id] - 1
        if remaining:
            self._lock_users[user_id] = remaining
            return
        # Nobody holds or waits for the lock any more
        del self._lock_users[user_id]
        del self._user_locks[user_id]

    @asynccontextmanager
    async def _submission_scope(self, user_id: int) -> AsyncIterator[None]:
        if not self._settings.serialize_submissions:
            yield
            return
        lock = self._get_lock(user_id)
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._release_lock(user_id)

    async def _reply(self, message: IncomingMessage, text: str) -> None:
        try:
            await self._platform.reply(message, text)
        except DiscordClientError as e:
            logger.error("Error sending reply to %s: %s", message.author_name, e)

    async def handle(self, message: IncomingMessage) -> None:
        """Dispatch a message if it is a known command."""
        if message.author_is_bot:
            return

        content = strip_prefix(message.content, self._settings.command_prefix)
        if content is None:
            return

        if content == PING:
            await self._reply(message, replies.PONG)
            return

        if content.startswith(self._settings.command_word):
            logger.debug("Profile command from %s", message.author_name)
            await self.handle_profile(message, content)

    async def handle_profile(self, message: IncomingMessage, content: str) -> None:
        """Parse a profile command and create or update its card."""
        settings = self._settings

        try:
            submission = parse_profile(
                content, settings.minimum_length, settings.command_word
            )
        except ProfileParseError as e:
            logger.warning("%s sent an invalid profile: %s", message.author_name, e)
            await self._reply(message, replies.parse_error_reply(e))
            return

        try:
            channel_id = await self._platform.fetch_channel(settings.submission_channel_id)
        except ChannelNotFoundError as e:
            logger.error(
                "Could not find the profile channel! Please ensure the bot has "
                "the correct permissions and the channel exists: %s", e
            )
            await self._reply(message, replies.CHANNEL_MISSING)
            return

        async with self._submission_scope(message.author_id):
            await self._publish(message, submission, channel_id)

    async def _has_role(self, message: IncomingMessage) -> bool:
        if message.guild_id is None:
            return False
        try:
            roles = await self._platform.fetch_member_roles(message.guild_id, message.author_id)
        except DiscordClientError as e:
            logger.error("%s error while fetching member: %s", message.author_name, e)
            return False
        return self._settings.submission_role_id in roles

    async def resolve_existing(self, message: IncomingMessage, channel_id: int) -> Resolution:
        """Look up the author's current card if they hold the profile role.

        Raises:
            DiscordClientError: If the channel history cannot be read
        """
        if not await self._has_role(message):
            return NOT_FOUND
        history = await self._platform.fetch_history(
            channel_id, self._settings.message_fetch_limit
        )
        return await find_existing(history, message.author_id, self._platform.fetch_user_id)

    async def _publish(
        self,
        message: IncomingMessage,
        submission: ProfileSubmission,
        channel_id: int
    ) -> None:
        settings = self._settings

        try:
            avatar_url = await self._platform.avatar_url(message.author_id, THUMBNAIL_SIZE)
            resolution = await self.resolve_existing(message, channel_id)
        except DiscordClientError as e:
            logger.error("Error preparing card for %s: %s", message.author_name, e)
            await self._reply(message, replies.GENERIC_FAILURE)
            return

        color = derive_color(identity_key(message.author_id))
        card = build_card(submission, message.author_id, color, avatar_url)

        if resolution.found:
            try:
                await self._platform.update_card(channel_id, resolution.message_id, card)
            except DiscordClientError as e:
                logger.error("Error updating message %s: %s", resolution.message_id, e)
                await self._reply(message, replies.UPDATE_FAILED)
                return
            logger.info("Updated card %s of %s", resolution.message_id, message.author_name)
            await self._reply(message, replies.UPDATED)
            return

        try:
            card_id = await self._platform.send_card(channel_id, card)
        except DiscordClientError as e:
            logger.error("Error sending card message: %s", e)
            await self._reply(message, replies.GENERIC_FAILURE)
            return
        logger.info("Published card %s for %s", card_id, message.author_name)

        if message.guild_id is None:
            logger.error("%s sent a profile outside a server, no role granted", message.author_name)
            await self._reply(message, replies.ROLE_FAILED)
            return

        try:
            await self._platform.add_role(
                message.guild_id, message.author_id, settings.submission_role_id
            )
        except DiscordClientError as e:
            # The card stays published
            logger.error("%s error while giving profile role: %s", message.author_name, e)
            await self._reply(message, replies.ROLE_FAILED)
            return
        logger.info("Granted profile role to %s", message.author_name)
        await self._reply(message, replies.CREATED)
