"""
Slug generation
Bulgarian Cyrillic is transliterated letter by letter, everything else outside
[a-z0-9] is dropped.
"""

import re

CYRILLIC_TO_LATIN = {
    "а": "a",
    "б": "b",
    "в": "v",
    "г": "g",
    "д": "d",
    "е": "e",
    "ж": "zh",
    "з": "z",
    "и": "i",
    "й": "y",
    "к": "k",
    "л": "l",
    "м": "m",
    "н": "n",
    "о": "o",
    "п": "p",
    "р": "r",
    "с": "s",
    "т": "t",
    "у": "u",
    "ф": "f",
    "х": "h",
    "ц": "ts",
    "ч": "ch",
    "ш": "sh",
    "щ": "sht",
    "ъ": "a",
    "ь": "y",
    "ю": "yu",
    "я": "ya",
}

_TRANSLIT_TABLE = str.maketrans(CYRILLIC_TO_LATIN)
_STRIP_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_MULTI_DASH_RE = re.compile(r"-+")

SLUG_PATTERN = r"^[a-z0-9-]+$"


def slugify(text: str) -> str:
    """Convert a display title into a URL-safe slug.

    Examples:
        "Мач в Пазарджик" -> "mach-v-pazardzhik"
        "  Спорт & Култура " -> "sport-kultura"

    Never fails; input with nothing transliterable yields "".
    """
    text = (text or "").lower().strip()
    text = text.translate(_TRANSLIT_TABLE)
    text = _STRIP_RE.sub("", text)
    text = _WHITESPACE_RE.sub("-", text)
    text = _MULTI_DASH_RE.sub("-", text)
    return text.strip("-")
