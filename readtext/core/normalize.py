"""Unicode character-class replacement applied to texts on request."""

import unicodedata
from typing import Dict

# Unicode general category → replacement
CATEGORY_REPLACEMENTS: Dict[str, str] = {
    "Pd": "-",      # dash punctuation
    "Zs": " ",      # space separators
    "Pi": "'",      # initial quote
    "Pf": "'",      # final quote
    "Co": "",       # private use
    "Cn": "",       # unassigned
}


def replace_special_characters(text: str, mapping: Dict[str, str] = CATEGORY_REPLACEMENTS) -> str:
    return "".join(mapping.get(unicodedata.category(ch), ch) for ch in text)
