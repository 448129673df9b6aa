"""
This module maps free-text calendar summaries to canonical waste types.
"""
import unicodedata
from typing import List, Tuple

# Ordered: the first keyword found in the normalized label wins.
KEYWORD_TYPES: List[Tuple[str, str]] = [
    ("hausmull", "general-waste"),
    ("hausmuell", "general-waste"),
    ("rest", "general-waste"),
    ("bio", "organic"),
    ("papier", "paper"),
    ("paper", "paper"),
    ("gelb", "recyclable-bag"),
    ("plast", "plastic"),
    ("glas", "glass"),
]

_TRANSLITERATIONS = {"ü": "ue", "ä": "ae", "ö": "oe", "ß": "ss"}


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("ß", "ss")


def _transliterate(text: str) -> str:
    for umlaut, replacement in _TRANSLITERATIONS.items():
        text = text.replace(umlaut, replacement)
    return _strip_accents(text)


def normalize_label(label: str) -> Tuple[str, str]:
    """Returns the accent-stripped and the transliterated case-folded label."""
    folded = (label or "").casefold()
    return _strip_accents(folded), _transliterate(folded)


def classify(label: str) -> str:
    """
    Maps a calendar summary such as "Restmüll 14-tägig" to a canonical type.

    Labels that match no keyword are returned unchanged so an unknown
    collection is still shown instead of being dropped.
    """
    candidates = normalize_label(label)
    for keyword, waste_type in KEYWORD_TYPES:
        if any(keyword in candidate for candidate in candidates):
            return waste_type
    return label
