"""Render a profile submission as a Discord embed."""

import discord

from .profile_parser import ProfileSubmission

TITLE_PREFIX = "Steckbrief von "
THUMBNAIL_SIZE = 64


def build_card(
    submission: ProfileSubmission,
    user_id: int,
    color: int,
    avatar_url: str
) -> discord.Embed:
    """Build the card embed for a submission.

    The description holds the author's mention; the resolver reads it back
    to find the card on resubmission.
    """
    embed = discord.Embed(
        title=TITLE_PREFIX + submission.display_name,
        description=f"<@{user_id}>",
        color=color,
    )
    embed.set_thumbnail(url=avatar_url)
    for key, value in submission.fields:
        embed.add_field(name=key, value=value, inline=False)
    return embed
