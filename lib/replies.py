"""User-facing reply texts (German)."""

from .profile_parser import (
    MAX_FIELDS,
    CardTooLongError,
    EmptyNameError,
    FieldTooLongError,
    MalformedFieldError,
    NameTooLongError,
    NoFieldsError,
    ProfileParseError,
    TooManyFieldsError,
    TooShortError,
)

PONG = "pong"

TOO_SHORT = "Bitte füge mehr Informationen zu deinem Steckbrief hinzu :grin:"
EMPTY_NAME = "Bitte gib in der ersten Zeile deines Steckbriefs einen Namen an."
NO_FIELDS = "Keine Informationen wurden im Steckbrief gefunden."
MALFORMED_FIELD = (
    "Fehler im Steckbrief! Kategorie `{text}` des Steckbriefs "
    "(Zeile {line}) hat keinen zugehörigen Wert."
)
TOO_MANY_FIELDS = (
    "Dein Steckbrief hat {count} Kategorien, erlaubt sind höchstens {maximum}."
)
NAME_TOO_LONG = (
    "Der Name in deinem Steckbrief ist zu lang. "
    "Erlaubt sind höchstens {maximum} Zeichen."
)
KEY_TOO_LONG = (
    "Die Kategorie in Zeile {line} deines Steckbriefs ist zu lang. "
    "Erlaubt sind höchstens {maximum} Zeichen."
)
VALUE_TOO_LONG = (
    "Der Wert der Kategorie `{key}` (Zeile {line}) ist zu lang. "
    "Erlaubt sind höchstens {maximum} Zeichen."
)
CARD_TOO_LONG = (
    "Dein Steckbrief hat {length} Zeichen, auf eine Karte passen höchstens {maximum}."
)

CHANNEL_MISSING = (
    "Es konnte kein Steckbrief Kanal gefunden werden! "
    "Bitte kontaktiere einen Systemadministator."
)
GENERIC_FAILURE = (
    "Beim Verarbeiten deines Steckbriefs ist ein Fehler aufgetreten. "
    "Bitte versuche es später erneut."
)
UPDATE_FAILED = "Fehler beim Aktualisieren deines Steckbriefes."
UPDATED = "Dein Steckbrief wurde aktualisiert."
CREATED = "Dein Steckbrief wurde veröffentlicht."
ROLE_FAILED = (
    "Fehler beim geben der Steckbriefrolle! "
    "Bitte wende dich an den Systemadministrator."
)


def parse_error_reply(error: ProfileParseError) -> str:
    """Map a parser error to the text shown to the user."""
    if isinstance(error, TooShortError):
        return TOO_SHORT
    if isinstance(error, EmptyNameError):
        return EMPTY_NAME
    if isinstance(error, NameTooLongError):
        return NAME_TOO_LONG.format(maximum=error.maximum)
    if isinstance(error, NoFieldsError):
        return NO_FIELDS
    if isinstance(error, MalformedFieldError):
        # Line numbers count the name line as 1
        return MALFORMED_FIELD.format(text=error.text, line=error.index + 1)
    if isinstance(error, TooManyFieldsError):
        return TOO_MANY_FIELDS.format(count=error.count, maximum=MAX_FIELDS)
    if isinstance(error, FieldTooLongError):
        if error.is_value:
            return VALUE_TOO_LONG.format(
                key=error.key, line=error.index + 1, maximum=error.maximum
            )
        return KEY_TOO_LONG.format(line=error.index + 1, maximum=error.maximum)
    if isinstance(error, CardTooLongError):
        return CARD_TOO_LONG.format(length=error.length, maximum=error.maximum)
    return GENERIC_FAILURE
