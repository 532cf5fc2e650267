"""Text helpers for name ordering and search"""

import unicodedata
from typing import Tuple


def fold(text: str) -> str:
    """Case- and accent-insensitive form of a string ("Ângela" -> "angela")"""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def name_sort_key(name: str) -> Tuple[str, str, str]:
    """
    Locale-style ordering key for display names.

    Primary order ignores case and accents; ties fall back to the
    case-folded form and finally the raw string so ordering is total.
    """
    return fold(name), name.casefold(), name


def normalize_search(text: str) -> str:
    return text.strip().casefold()
