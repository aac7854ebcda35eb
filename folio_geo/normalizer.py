"""
Turn free-form location text into a city token plus a tagged modifier.

    "Frederick Maryland"   -> city="Frederick", modifier="Maryland" (state)
    "london , , on"        -> city="london",    modifier="on"       (state)
    "Springfield, Georgia" -> city="Springfield", modifier="Georgia" (ambiguous)

Never raises: anything that cannot be split becomes a city-only query.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from folio_geo.gazetteer import GazetteerStore
from folio_geo.models import ModifierType

logger = logging.getLogger(__name__)

_QUOTES = str.maketrans({"‘": "'", "’": "'", "‚": "'", "“": '"', "”": '"', "„": '"'})
_COMMA_RUN_RE = re.compile(r"\s*(?:,\s*)+")
_WHITESPACE_RE = re.compile(r"\s+")
# Stray punctuation around a token, e.g. "Tokyo!" or "Paris;"
_TOKEN_STRIP = " ;:!?"


@dataclass(frozen=True)
class NormalizedQuery:
    city_token: str
    modifier_token: Optional[str] = None
    modifier_type: ModifierType = ModifierType.NONE
    raw_query: str = ""

    @property
    def text(self) -> str:
        """Canonical "city, modifier" rendering (at most one comma)."""
        if self.modifier_token:
            return f"{self.city_token}, {self.modifier_token}"
        return self.city_token


def clean_text(text: Any) -> str:
    """Quotes, whitespace and comma runs normalized; no leading/trailing commas."""
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    text = _WHITESPACE_RE.sub(" ", text.translate(_QUOTES)).strip()
    text = _COMMA_RUN_RE.sub(", ", text)
    return text.strip(", ")


class QueryNormalizer:
    def __init__(self, store: GazetteerStore):
        self.store = store

    def classify(self, modifier: Optional[str]) -> ModifierType:
        if not modifier:
            return ModifierType.NONE
        is_state = self.store.is_state_alias(modifier)
        is_country = self.store.is_country_alias(modifier)
        if is_state and is_country:
            return ModifierType.AMBIGUOUS
        if is_state:
            return ModifierType.STATE
        if is_country:
            return ModifierType.COUNTRY
        return ModifierType.NONE

    def normalize(self, text: Any) -> NormalizedQuery:
        raw = "" if text is None else text if isinstance(text, str) else str(text)
        cleaned = clean_text(raw)
        segments = [s.strip(_TOKEN_STRIP) for s in cleaned.split(",")] if cleaned else []
        segments = [s for s in segments if s]

        if not segments:
            return NormalizedQuery(city_token="", raw_query=raw)

        if len(segments) == 2:
            return self._build(segments[0], segments[1], raw)

        if len(segments) > 2:
            for segment in segments[1:]:
                if self.classify(segment) is not ModifierType.NONE:
                    return self._build(segments[0], segment, raw)
            # Nothing recognizable after the city: treat it as one comma-less phrase
            cleaned = " ".join(segments)

        city, modifier = self._split_suffix(cleaned.strip(_TOKEN_STRIP))
        return self._build(city, modifier, raw)

    def _build(self, city: str, modifier: Optional[str], raw: str) -> NormalizedQuery:
        modifier_type = self.classify(modifier)
        query = NormalizedQuery(
            city_token=city,
            modifier_token=modifier or None,
            modifier_type=modifier_type,
            raw_query=raw,
        )
        logger.debug("Normalized %r -> city=%r modifier=%r (%s)",
                     raw, query.city_token, query.modifier_token, modifier_type.value)
        return query

    def _split_suffix(self, text: str) -> tuple[str, Optional[str]]:
        """Longest known state/country name at the end of a comma-less query."""
        words = text.split(" ")
        longest = min(len(words) - 1, self.store.max_alias_words)
        for size in range(longest, 0, -1):
            suffix = " ".join(words[-size:]).strip(_TOKEN_STRIP)
            if not suffix or self.classify(suffix) is ModifierType.NONE:
                continue
            city = " ".join(words[:-size]).strip(_TOKEN_STRIP)
            if not city:
                continue
            # Lowercase "md" or "on" only counts when a place by that name lies
            # there, so "Paris in" does not become Paris, Indiana
            compact = suffix.replace(".", "")
            if (len(compact) <= 2 and " " not in compact and not suffix.isupper()
                    and not self._has_place(city, suffix)):
                continue
            return city, suffix
        return text, None

    def _has_place(self, city: str, modifier: str) -> bool:
        states = self.store.states_for_alias(modifier)
        country = self.store.country_for_alias(modifier)
        return any(
            (e.country_code, e.state_code) in states or e.country_code == country
            for e in self.store.candidates(city)
        )
