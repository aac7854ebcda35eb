"""
Display-name formatting: title case with a few exceptions.

    "frederick, md"          -> "Frederick, MD"
    "rio de janeiro, brazil" -> "Rio de Janeiro, Brazil"
    "o'connor"               -> "O'Connor"
"""

from __future__ import annotations

from typing import Any

# Lowercase unless they open the part
CONNECTORS = frozenset({"of", "the", "and", "de", "da", "do", "dos", "das"})


def format_location_name(text: Any) -> Any:
    """Canonical display casing. Non-text input comes back unchanged."""
    if not isinstance(text, str):
        return text
    parts = [p.strip() for p in text.split(",")]
    return ", ".join(_format_part(p) for p in parts if p)


def _format_part(part: str) -> str:
    # "md", "NSW": a bare 2-3 letter part is a code
    if 2 <= len(part) <= 3 and part.isascii() and part.isalpha():
        return part.upper()

    words = part.split()
    out = []
    for i, word in enumerate(words):
        if i > 0 and word.lower() in CONNECTORS:
            out.append(word.lower())
        else:
            out.append(_capitalize_word(word))
    return " ".join(out)


def _capitalize_word(word: str) -> str:
    return "-".join(_capitalize_apostrophes(piece) for piece in word.split("-"))


def _capitalize_apostrophes(piece: str) -> str:
    segments = piece.split("'")
    out = [_capitalize(segments[0])]
    for segment in segments[1:]:
        # Possessive "s" stays lowercase: "St. John's"
        out.append(segment.lower() if len(segment) == 1 else _capitalize(segment))
    return "'".join(out)


def _capitalize(segment: str) -> str:
    # title(), not upper(): "ß".upper() is "SS"
    return segment[:1].title() + segment[1:].lower()
