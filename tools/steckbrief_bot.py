#!/usr/bin/env python3
"""Steckbrief bot - Publish profile cards posted with !steckbrief.

Usage:
    python tools/steckbrief_bot.py
    python tools/steckbrief_bot.py --env-file /etc/steckbrief/.env --log-level INFO
    python tools/steckbrief_bot.py --check-config
"""

import argparse
import sys
from pathlib import Path

import discord

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lib.bot import SteckbriefBot
from lib.config import Config, ConfigError
from lib.log_setup import setup_logging


def main():
    parser = argparse.ArgumentParser(
        description="Run the Discord profile card bot"
    )

    parser.add_argument(
        "--config-dir",
        type=Path,
        metavar="DIR",
        help="Directory containing bot.yaml (default: ./config)"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        metavar="PATH",
        help="Path to .env file (default: ./.env)"
    )
    parser.add_argument(
        "--log-level",
        help="Logging level, overrides LOG_LEVEL (e.g. INFO, DEBUG)"
    )
    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Only validate the configuration, don't connect to Discord"
    )

    args = parser.parse_args()

    try:
        config = Config(config_dir=args.config_dir, env_file=args.env_file)
        settings = config.settings()
        setup_logging(args.log_level or config.log_level)

        if args.check_config:
            print("Configuration OK")
            print(f"  Channel: {settings.submission_channel_id}")
            print(f"  Role: {settings.submission_role_id}")
            print(f"  Fetch limit: {settings.message_fetch_limit}")
            print(f"  Minimum length: {settings.minimum_length}")
            print(f"  Command: {settings.command_prefix}{settings.command_word}")
            sys.exit(0)

        token = config.discord_token
        bot = SteckbriefBot(settings)
        # log_handler=None keeps our own logging setup
        bot.run(token, log_handler=None)

    except ConfigError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        sys.exit(1)
    except discord.LoginFailure as e:
        print(f"Authentication Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nBot stopped.")
        sys.exit(0)


if __name__ == "__main__":
    main()
