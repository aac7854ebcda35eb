"""
Pick the single gazetteer entry a NormalizedQuery refers to.

Resolution order:
  1. Candidates = entries whose folded city name equals the folded city token.
  2. State or country modifier: filter by it, a single survivor wins.
  3. Ambiguous modifier ("Georgia", "GA"): a country-filter singleton beats a
     state-filter singleton unless the dataset's collision-priority table says
     otherwise for that modifier. No singleton means the modifier is ignored.
  4. Otherwise narrow to the survivors (if several), apply the default-country
     override table ("london" -> GB), else take the first declared candidate.
  5. No candidates at all: NotFound.

Deterministic and data driven; proximity-based disambiguation belongs to the
upstream provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from folio_geo.gazetteer import GazetteerEntry, GazetteerStore, fold
from folio_geo.models import ModifierType
from folio_geo.normalizer import NormalizedQuery

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLocation:
    gazetteer_key: str
    display_city: str
    display_state_or_province: Optional[str]
    display_country: str
    entry: GazetteerEntry

    @property
    def display_name(self) -> str:
        """US places as "Frederick, MD", others as "London, ON, Canada" or "Tokyo, Japan"."""
        if self.display_state_or_province and self.entry.country_code == "US":
            return f"{self.display_city}, {self.display_state_or_province}"
        if self.display_state_or_province:
            return f"{self.display_city}, {self.display_state_or_province}, {self.display_country}"
        return f"{self.display_city}, {self.display_country}"

    @classmethod
    def from_entry(cls, entry: GazetteerEntry) -> "ResolvedLocation":
        return cls(
            gazetteer_key=entry.key,
            display_city=entry.city_name,
            display_state_or_province=entry.state_code,
            display_country=entry.country_name,
            entry=entry,
        )


@dataclass(frozen=True)
class NotFound:
    raw_query: str


Resolution = Union[ResolvedLocation, NotFound]


class AmbiguityResolver:
    def __init__(self, store: GazetteerStore):
        self.store = store

    def resolve(self, query: NormalizedQuery) -> Resolution:
        candidates = self.store.candidates(query.city_token)
        if not candidates:
            logger.debug("No gazetteer entry for %r", query.raw_query)
            return NotFound(raw_query=query.raw_query)

        pool = candidates
        modifier = query.modifier_token or ""

        if query.modifier_type is ModifierType.STATE:
            survivors = self._by_state(candidates, modifier)
            if len(survivors) == 1:
                return self._done(query, survivors[0], "state modifier")
            pool = survivors or candidates

        elif query.modifier_type is ModifierType.COUNTRY:
            survivors = self._by_country(candidates, modifier)
            if len(survivors) == 1:
                return self._done(query, survivors[0], "country modifier")
            pool = survivors or candidates

        elif query.modifier_type is ModifierType.AMBIGUOUS:
            by_country = self._by_country(candidates, modifier)
            by_state = self._by_state(candidates, modifier)
            order = [("country", by_country), ("state", by_state)]
            if self.store.collision_priority.get(fold(modifier)) == "state":
                order.reverse()
            for label, survivors in order:
                if len(survivors) == 1:
                    return self._done(query, survivors[0], f"ambiguous modifier as {label}")

        return self._done(query, self._fallback(query.city_token, pool), "default")

    def _by_state(self, entries, modifier: str) -> tuple[GazetteerEntry, ...]:
        targets = self.store.states_for_alias(modifier)
        return tuple(e for e in entries if (e.country_code, e.state_code) in targets)

    def _by_country(self, entries, modifier: str) -> tuple[GazetteerEntry, ...]:
        code = self.store.country_for_alias(modifier)
        return tuple(e for e in entries if e.country_code == code)

    def _fallback(self, city: str, pool: tuple[GazetteerEntry, ...]) -> GazetteerEntry:
        override = self.store.default_override(city)
        if override:
            country_code, state_code = override
            for entry in pool:
                if entry.country_code == country_code and (
                    state_code is None or entry.state_code == state_code
                ):
                    return entry
        return pool[0]

    def _done(self, query: NormalizedQuery, entry: GazetteerEntry, reason: str) -> ResolvedLocation:
        logger.debug("Resolved %r -> %s (%s)", query.raw_query, entry.key, reason)
        return ResolvedLocation.from_entry(entry)
