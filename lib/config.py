"""Configuration loader with .env and YAML support."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv


TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass(frozen=True)
class BotSettings:
    """Read-only settings shared by every message handler."""

    submission_channel_id: int
    submission_role_id: int
    message_fetch_limit: int = 100
    minimum_length: int = 200
    command_prefix: str = "!"
    command_word: str = "steckbrief"
    status_text: str = "schreibe !ping"
    serialize_submissions: bool = False


class Config:
    """Bot configuration loaded from .env and config/bot.yaml.

    Environment variables win over YAML keys, YAML keys win over defaults.
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        env_file: Optional[Path] = None
    ):
        """Initialize configuration.

        Args:
            config_dir: Directory containing config files. Defaults to ./config
            env_file: Path to .env file. Defaults to ./.env
        """
        self._base_dir = Path.cwd()
        self._config_dir = config_dir or self._base_dir / "config"
        self._env_file = env_file or self._base_dir / ".env"

        # Load environment variables
        load_dotenv(self._env_file)

        self._bot_config = self._load_yaml("bot.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML config file."""
        filepath = self._config_dir / filename
        if not filepath.exists():
            return {}
        with open(filepath, "r") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{filepath} must contain a mapping at the top level.")
        return data

    def _lookup(self, env_name: str, yaml_key: str) -> Optional[str]:
        value = os.getenv(env_name)
        if value is not None and value.strip() != "":
            return value.strip()
        value = self._bot_config.get(yaml_key)
        if value is None or str(value).strip() == "":
            return None
        return str(value).strip()

    def _snowflake(self, env_name: str, yaml_key: str) -> int:
        value = self._lookup(env_name, yaml_key)
        if value is None:
            raise ConfigError(
                f"{env_name} not set. "
                f"Add it to .env, set it as environment variable "
                f"or put '{yaml_key}' into config/bot.yaml."
            )
        if not value.isdigit():
            raise ConfigError(f"{env_name} must be a numeric Discord ID, got '{value}'.")
        return int(value)

    def _int(self, env_name: str, yaml_key: str, default: int, min_value: int) -> int:
        value = self._lookup(env_name, yaml_key)
        if value is None:
            return default
        try:
            number = int(value)
        except ValueError:
            raise ConfigError(f"{env_name} must be an integer, got '{value}'.")
        if number < min_value:
            raise ConfigError(f"{env_name} must be at least {min_value}, got {number}.")
        return number

    def _str(self, env_name: str, yaml_key: str, default: str) -> str:
        value = self._lookup(env_name, yaml_key)
        return default if value is None else value

    def _bool(self, env_name: str, yaml_key: str, default: bool) -> bool:
        value = self._lookup(env_name, yaml_key)
        if value is None:
            return default
        return value.lower() in TRUE_VALUES

    @property
    def discord_token(self) -> str:
        """Get Discord bot token from environment."""
        token = os.getenv("DISCORD_TOKEN")
        if not token:
            raise ConfigError(
                "DISCORD_TOKEN not set. "
                "Add it to .env file or set as environment variable."
            )
        return token

    @property
    def log_level(self) -> str:
        """Get logging level name (default WARNING)."""
        return self._str("LOG_LEVEL", "log_level", "WARNING").upper()

    def settings(self) -> BotSettings:
        """Resolve all bot settings.

        Raises:
            ConfigError: If a required value is missing or a value is invalid
        """
        return BotSettings(
            submission_channel_id=self._snowflake("STECKBRIEF_CHANNEL", "submission_channel_id"),
            submission_role_id=self._snowflake("STECKBRIEF_ROLE", "submission_role_id"),
            message_fetch_limit=self._int("MESSAGE_FETCH_LIMIT", "message_fetch_limit", 100, 1),
            minimum_length=self._int("MIN_LENGTH", "minimum_length", 200, 0),
            command_prefix=self._str("COMMAND_PREFIX", "command_prefix", "!"),
            command_word=self._str("COMMAND_WORD", "command_word", "steckbrief"),
            status_text=self._str("STATUS_TEXT", "status_text", "schreibe !ping"),
            serialize_submissions=self._bool(
                "SERIALIZE_SUBMISSIONS", "serialize_submissions", False
            ),
        )

