"""Parser for the plain-text profile ("Steckbrief") format.

A profile is sent as one chat message::

    steckbrief Max Mustermann
    Alter: 23
    Hobby: Schach

The first line (after the command word) is the display name, every further
non-blank line is a ``key: value`` field.
"""

from dataclasses import dataclass
from typing import Tuple

FIELD_SEPARATOR = ": "

# Discord embed limits
MAX_FIELDS = 25
MAX_FIELD_NAME_LENGTH = 256
MAX_FIELD_VALUE_LENGTH = 1024
# 256 title characters minus the "Steckbrief von " prefix
MAX_NAME_LENGTH = 241
# 6000 characters per embed, less title prefix and a 20-digit "<@id>" mention
MAX_CARD_TEXT = 5962


class ProfileParseError(Exception):
    """Base class for rejected profile submissions."""
    pass


class TooShortError(ProfileParseError):
    """The raw message is shorter than the configured minimum."""

    def __init__(self, length: int, minimum: int):
        super().__init__(f"profile has {length} characters, at least {minimum} required")
        self.length = length
        self.minimum = minimum


class EmptyNameError(ProfileParseError):
    """The first line holds no display name."""

    def __init__(self):
        super().__init__("profile has no display name")


class NoFieldsError(ProfileParseError):
    """Only a name was given."""

    def __init__(self):
        super().__init__("profile has no fields")


class MalformedFieldError(ProfileParseError):
    """A field line does not split into a non-empty key and value.

    Attributes:
        index: Line index within the body, the name line being 0
        text: First part of the split, shown back to the user
    """

    def __init__(self, index: int, text: str):
        super().__init__(f"line {index} is not a 'key: value' pair: {text!r}")
        self.index = index
        self.text = text


class TooManyFieldsError(ProfileParseError):
    """More fields than a card can hold."""

    def __init__(self, count: int):
        super().__init__(f"profile has {count} fields, at most {MAX_FIELDS} allowed")
        self.count = count


class NameTooLongError(ProfileParseError):
    """The display name does not fit into a card title."""

    def __init__(self, length: int):
        super().__init__(f"name has {length} characters, at most {MAX_NAME_LENGTH} allowed")
        self.length = length
        self.maximum = MAX_NAME_LENGTH


class FieldTooLongError(ProfileParseError):
    """A field key or value exceeds the embed field limits.

    Attributes:
        index: Line index within the body, the name line being 0
        key: The field key, possibly too long itself
        is_value: True if the value is too long, False for the key
        maximum: Allowed length of the offending part
    """

    def __init__(self, index: int, key: str, is_value: bool, maximum: int):
        part = "value" if is_value else "key"
        super().__init__(f"line {index} has a {part} longer than {maximum} characters")
        self.index = index
        self.key = key
        self.is_value = is_value
        self.maximum = maximum


class CardTooLongError(ProfileParseError):
    """Name and fields together exceed the embed size limit."""

    def __init__(self, length: int):
        super().__init__(f"profile has {length} characters, at most {MAX_CARD_TEXT} fit on a card")
        self.length = length
        self.maximum = MAX_CARD_TEXT


@dataclass(frozen=True)
class ProfileSubmission:
    """A parsed profile, fields kept in the order they were written."""

    display_name: str
    fields: Tuple[Tuple[str, str], ...]


def strip_command(content: str, command_word: str) -> str:
    """Drop all backticks and the leading command word, then trim."""
    body = content.replace("`", "")
    if body.startswith(command_word):
        body = body[len(command_word):]
    return body.strip()


def parse_profile(
    content: str,
    min_length: int,
    command_word: str = "steckbrief"
) -> ProfileSubmission:
    """Parse a profile command into a submission.

    Args:
        content: Message text with the bot prefix removed, command word still present
        min_length: Minimum length of ``content`` to accept
        command_word: Command keyword to strip from the start

    Returns:
        The parsed ProfileSubmission

    Raises:
        TooShortError, EmptyNameError, NameTooLongError, NoFieldsError,
        MalformedFieldError, FieldTooLongError, TooManyFieldsError,
        CardTooLongError: on the first problem found
    """
    if len(content) < min_length:
        raise TooShortError(len(content), min_length)

    lines = strip_command(content, command_word).split("\n")

    name = lines[0].strip()
    if not name:
        raise EmptyNameError()
    if len(name) > MAX_NAME_LENGTH:
        raise NameTooLongError(len(name))
    if len(lines) <= 1:
        raise NoFieldsError()

    fields = []
    for index in range(1, len(lines)):
        line = lines[index]
        if not line.strip():
            continue

        parts = line.split(FIELD_SEPARATOR)
        if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
            raise MalformedFieldError(index, parts[0])

        key, value = parts[0].strip(), parts[1].strip()
        if len(key) > MAX_FIELD_NAME_LENGTH:
            raise FieldTooLongError(index, key, False, MAX_FIELD_NAME_LENGTH)
        if len(value) > MAX_FIELD_VALUE_LENGTH:
            raise FieldTooLongError(index, key, True, MAX_FIELD_VALUE_LENGTH)
        fields.append((key, value))

    if not fields:
        raise NoFieldsError()
    if len(fields) > MAX_FIELDS:
        raise TooManyFieldsError(len(fields))

    total = len(name) + sum(len(key) + len(value) for key, value in fields)
    if total > MAX_CARD_TEXT:
        raise CardTooLongError(total)

    return ProfileSubmission(display_name=name, fields=tuple(fields))
