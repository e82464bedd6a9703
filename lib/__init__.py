"""Steckbrief bot library modules."""

from .card import build_card
from .config import BotSettings, Config, ConfigError
from .discord_client import (
    ChannelNotFoundError,
    DiscordClientError,
    DiscordPlatform,
    HistoryEntry,
    UserLookupError
)
from .dispatcher import CommandDispatcher, IncomingMessage
from .identity_color import derive_color, identity_key
from .profile_parser import (
    CardTooLongError,
    EmptyNameError,
    FieldTooLongError,
    MalformedFieldError,
    NameTooLongError,
    NoFieldsError,
    ProfileParseError,
    ProfileSubmission,
    TooManyFieldsError,
    TooShortError,
    parse_profile
)
from .submission_resolver import NOT_FOUND, Resolution, find_existing

__all__ = [
    # Config
    "BotSettings",
    "Config",
    "ConfigError",
    # Discord Client
    "ChannelNotFoundError",
    "DiscordClientError",
    "DiscordPlatform",
    "HistoryEntry",
    "UserLookupError",
    # Profile Parser
    "CardTooLongError",
    "EmptyNameError",
    "FieldTooLongError",
    "MalformedFieldError",
    "NameTooLongError",
    "NoFieldsError",
    "ProfileParseError",
    "ProfileSubmission",
    "TooManyFieldsError",
    "TooShortError",
    "parse_profile",
    # Color
    "derive_color",
    "identity_key",
    # Resolver
    "NOT_FOUND",
    "Resolution",
    "find_existing",
    # Card and Dispatcher
    "build_card",
    "CommandDispatcher",
    "IncomingMessage",
]
