"""Discord REST access used by the bot, wrapped in plain-Python results."""

from dataclasses import dataclass
from typing import Any, List, Optional, Set

import discord


class DiscordClientError(Exception):
    """Discord client error."""
    pass


class ChannelNotFoundError(DiscordClientError):
    """The submission channel is missing or not visible to the bot."""
    pass


class UserLookupError(DiscordClientError):
    """A user or member could not be fetched."""
    pass


@dataclass(frozen=True)
class HistoryEntry:
    """A message read from the submission channel.

    ``description`` is None when the message has no embed.
    """

    message_id: int
    description: Optional[str]


def history_entry(message: discord.Message) -> HistoryEntry:
    """Reduce a channel message to what the resolver reads."""
    if not message.embeds:
        return HistoryEntry(message_id=message.id, description=None)
    return HistoryEntry(
        message_id=message.id,
        description=message.embeds[0].description or ""
    )


class DiscordPlatform:
    """Collaborator calls the dispatcher makes, on top of a connected client.

    Every discord.py failure is re-raised as DiscordClientError so callers
    only handle one exception family.
    """

    def __init__(self, client: discord.Client):
        self._client = client

    async def _channel(self, channel_id: int) -> Any:
        channel = self._client.get_channel(channel_id)
        if channel is None:
            channel = await self._fetch_channel(channel_id)
        # Categories and forums have no message history of their own
        if not isinstance(channel, discord.abc.Messageable):
            raise ChannelNotFoundError(
                f"Channel {channel_id} is not a text channel. "
                f"Configure a channel the bot can post messages in."
            )
        return channel

    async def _fetch_channel(self, channel_id: int) -> Any:
        try:
            return await self._client.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden) as e:
            raise ChannelNotFoundError(
                f"Channel {channel_id} not found. "
                f"Make sure the channel exists and the bot can see it."
            ) from e
        except discord.HTTPException as e:
            raise ChannelNotFoundError(f"Could not fetch channel {channel_id}: {e}") from e

    async def _guild(self, guild_id: int) -> discord.Guild:
        guild = self._client.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self._client.fetch_guild(guild_id)
        except discord.HTTPException as e:
            raise DiscordClientError(f"Could not fetch server {guild_id}: {e}") from e

    async def _member(self, guild_id: int, user_id: int) -> discord.Member:
        guild = await self._guild(guild_id)
        try:
            return await guild.fetch_member(user_id)
        except discord.HTTPException as e:
            raise UserLookupError(
                f"Could not fetch member {user_id} of server {guild_id}: {e}"
            ) from e

    async def _user(self, user_id: int) -> discord.User:
        try:
            return await self._client.fetch_user(user_id)
        except discord.HTTPException as e:
            raise UserLookupError(f"Could not fetch user {user_id}: {e}") from e

    async def reply(self, message: Any, text: str) -> None:
        """Reply to the message that triggered a command."""
        try:
            await message.source.reply(text)
        except discord.HTTPException as e:
            raise DiscordClientError(f"Could not reply to message {message.message_id}: {e}") from e

    async def fetch_channel(self, channel_id: int) -> int:
        """Check that a channel is reachable and return its ID."""
        channel = await self._channel(channel_id)
        return channel.id

    async def fetch_history(self, channel_id: int, limit: int) -> List[HistoryEntry]:
        """Fetch up to ``limit`` messages, newest first."""
        channel = await self._channel(channel_id)
        try:
            return [history_entry(m) async for m in channel.history(limit=limit)]
        except discord.HTTPException as e:
            raise DiscordClientError(f"Could not read history of channel {channel_id}: {e}") from e

    async def fetch_user_id(self, user_id: int) -> int:
        """Resolve a snowflake to an existing user's ID."""
        user = await self._user(user_id)
        return user.id

    async def fetch_member_roles(self, guild_id: int, user_id: int) -> Set[int]:
        """Get the role IDs a member holds."""
        member = await self._member(guild_id, user_id)
        return {role.id for role in member.roles}

    async def avatar_url(self, user_id: int, size: int) -> str:
        """Get the user's avatar URL at the given size (power of two)."""
        user = await self._user(user_id)
        try:
            return str(user.display_avatar.with_size(size).url)
        except ValueError as e:
            raise DiscordClientError(f"Invalid avatar size {size}: {e}") from e

    async def send_card(self, channel_id: int, embed: discord.Embed) -> int:
        """Post a card and return the new message ID."""
        channel = await self._channel(channel_id)
        try:
            sent = await channel.send(embed=embed)
        except discord.HTTPException as e:
            raise DiscordClientError(f"Could not send card to channel {channel_id}: {e}") from e
        return sent.id

    async def update_card(self, channel_id: int, message_id: int, embed: discord.Embed) -> None:
        """Replace the embed of an existing card."""
        channel = await self._channel(channel_id)
        try:
            await channel.get_partial_message(message_id).edit(embed=embed)
        except discord.HTTPException as e:
            raise DiscordClientError(f"Could not update message {message_id}: {e}") from e

    async def add_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        """Grant a role to a member."""
        member = await self._member(guild_id, user_id)
        try:
            await member.add_roles(discord.Object(id=role_id), reason="Steckbrief submitted")
        except discord.HTTPException as e:
            raise DiscordClientError(
                f"Could not grant role {role_id} to user {user_id}: {e}"
            ) from e
