"""UI language preference: Korean by default, English as the alternate."""

from enum import Enum
from typing import Optional


STORAGE_KEY = "geonix_language"


class Language(str, Enum):
    KO = "ko"
    EN = "en"


DEFAULT_LANGUAGE = Language.KO


def parse_language(value: Optional[str], default: Language = DEFAULT_LANGUAGE) -> Language:
    """Stored or submitted value -> Language; anything unrecognised falls back to the default."""
    try:
        return Language((value or "").strip().lower())
    except ValueError:
        return default


def toggle_language(current: Language) -> Language:
    return Language.EN if current == Language.KO else Language.KO


def html_lang(language: Language) -> str:
    """Value for the document's <html lang> attribute."""
    return "ko" if language == Language.KO else "en"
