"""
Paginated search, per-state browsing, suggestions and dataset statistics.

Ordering is the same everywhere: entries whose city name starts with the query
come first, then the remaining substring matches; each group is alphabetical
by folded city name with declared dataset order breaking ties. Sorting happens
once when the index is built, so a query is a single ordered scan.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from folio_geo.gazetteer import GazetteerEntry, GazetteerStore, fold
from folio_geo.models import GazetteerStats, Pagination, SearchFilters, SearchPage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Row:
    entry: GazetteerEntry
    city_key: str
    state_key: str


class SearchIndex:
    def __init__(self, store: GazetteerStore):
        self.store = store
        rows = [
            (position, _Row(e, fold(e.city_name), fold(e.state_name or "")))
            for position, e in enumerate(store.entries)
        ]
        rows.sort(key=lambda item: (item[1].city_key, item[0]))
        self._rows = tuple(row for _, row in rows)

    # ── Search ────────────────────────────────────────────────────────

    def search(
        self,
        query: Optional[str] = "",
        filters: Union[SearchFilters, dict, None] = None,
        pagination: Union[Pagination, dict, None] = None,
        include_state_names: bool = False,
    ) -> SearchPage:
        filters = _coerce(SearchFilters, filters)
        pagination = _coerce(Pagination, pagination)

        rows: Iterable[_Row] = self._rows
        if filters.country:
            code = self.store.country_for_alias(filters.country)
            if code is None:
                logger.debug("Unknown country filter %r", filters.country)
                return _page([], pagination, filters)
            rows = [r for r in rows if r.entry.country_code == code]
        if filters.region:
            region = self.store.region_for(filters.region)
            if region is None:
                logger.debug("Unknown region filter %r", filters.region)
                return _page([], pagination, filters)
            rows = [r for r in rows if r.entry.region == region]

        matches = _match(rows, fold(query or ""), include_state_names)
        return _page(matches, pagination, filters)

    def by_state(
        self,
        country_code: str,
        state_code: str,
        query: Optional[str] = None,
        pagination: Union[Pagination, dict, None] = None,
    ) -> SearchPage:
        """Entries of one state/province, optionally narrowed by a city query."""
        pagination = _coerce(Pagination, pagination)
        filters = SearchFilters(country=country_code)

        code = self.store.country_for_alias(country_code or "")
        state = (state_code or "").strip().upper()
        if code is None or (code, state) not in self.store.subdivisions:
            logger.debug("Unknown state %s-%s", country_code, state_code)
            return _page([], pagination, filters)

        rows = [
            r for r in self._rows
            if r.entry.country_code == code and r.entry.state_code == state
        ]
        return _page(_match(rows, fold(query or ""), False), pagination, filters)

    # ── Suggest ───────────────────────────────────────────────────────

    def suggest(
        self,
        prefix: Optional[str] = None,
        limit: int = 10,
        rng: Optional[random.Random] = None,
    ) -> list[GazetteerEntry]:
        """
        Prefix completions in search order, or a random sample of the dataset
        (without replacement) when no prefix is given.
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        key = fold(prefix or "")
        if not key:
            rng = rng or random.Random()
            return rng.sample(list(self.store.entries), min(limit, len(self.store.entries)))

        out: list[GazetteerEntry] = []
        for row in self._rows:
            if len(out) >= limit:
                break
            if row.city_key.startswith(key):
                out.append(row.entry)
        return out

    # ── Stats ─────────────────────────────────────────────────────────

    def stats(self) -> GazetteerStats:
        entries = self.store.entries
        by_state = Counter(
            f"{e.country_code}-{e.state_code}" for e in entries if e.state_code
        )
        return GazetteerStats(
            version=self.store.version,
            total_entries=len(entries),
            total_countries=len(self.store.countries),
            total_subdivisions=len(self.store.subdivisions),
            capitals=sum(1 for e in entries if e.is_capital),
            by_region=dict(Counter(e.region for e in entries)),
            by_country=dict(Counter(e.country_code for e in entries)),
            by_state=dict(by_state),
        )


def _match(rows: Iterable[_Row], key: str, include_state_names: bool) -> list[GazetteerEntry]:
    if not key:
        return [r.entry for r in rows]
    prefix: list[GazetteerEntry] = []
    substring: list[GazetteerEntry] = []
    for row in rows:
        if row.city_key.startswith(key):
            prefix.append(row.entry)
        elif key in row.city_key or (include_state_names and key in row.state_key):
            substring.append(row.entry)
    return prefix + substring


def _page(matches: list[GazetteerEntry], pagination: Pagination, filters: SearchFilters) -> SearchPage:
    start = pagination.offset
    items = matches[start:start + pagination.limit]
    return SearchPage(
        items=items,
        total_count=len(matches),
        page_index=start // pagination.limit if pagination.limit else 0,
        page_size=pagination.limit,
        filters=filters,
    )


def _coerce(model, value):
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    return model.model_validate(value)
