"""Find a user's previously published card in the submission channel.

The channel itself is the database: every card carries a mention of its
author in the embed description, and a resubmission edits that message
instead of posting a new one.
"""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

from .discord_client import DiscordClientError, HistoryEntry

logger = logging.getLogger(__name__)

MENTION_PREFIX = "<@"
MENTION_SUFFIX = ">"


@dataclass(frozen=True)
class Resolution:
    """Outcome of a lookup: the existing card's message ID, or nothing."""

    message_id: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.message_id is not None


NOT_FOUND = Resolution()


def mention_reference(description: str) -> str:
    """Strip the ``<@...>`` wrapper from an embed description."""
    reference = description
    if reference.endswith(MENTION_SUFFIX):
        reference = reference[:-len(MENTION_SUFFIX)]
    if reference.startswith(MENTION_PREFIX):
        reference = reference[len(MENTION_PREFIX):]
    return reference


async def find_existing(
    history: Iterable[HistoryEntry],
    target_user_id: int,
    user_lookup: Callable[[int], Awaitable[int]],
) -> Resolution:
    """Return the first card in ``history`` written for ``target_user_id``.

    Args:
        history: Channel messages in the order the platform returned them
        target_user_id: Snowflake of the submitting user
        user_lookup: Resolves a snowflake to the user's ID, raising
            DiscordClientError when the user cannot be fetched

    Returns:
        Resolution with the message ID of the first match, or NOT_FOUND
    """
    for entry in history:
        if entry.description is None:
            logger.warning("Message %s has no embed, skipping", entry.message_id)
            continue

        reference = mention_reference(entry.description)
        if not reference:
            logger.warning("Message %s has an empty embed description, skipping", entry.message_id)
            continue
        if not reference.isdigit():
            logger.warning(
                "Message %s has no user mention in its description (%r), skipping",
                entry.message_id, reference
            )
            continue

        try:
            author_id = await user_lookup(int(reference))
        except DiscordClientError as e:
            logger.error("Error fetching user %s: %s", reference, e)
            continue

        if author_id == target_user_id:
            return Resolution(message_id=entry.message_id)

    return NOT_FOUND
