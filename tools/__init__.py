"""Command-line tools for the Steckbrief bot.

Available tools:
- steckbrief_bot: Run the bot or validate its configuration
"""

__all__ = [
    "steckbrief_bot",
]
