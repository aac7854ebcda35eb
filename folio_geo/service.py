"""
Cache-aware location lookup.

Wires the gazetteer components together the way a weather endpoint uses them:

    text -> normalize -> resolve -> display name + upstream query
         -> cache key -> cache hit, or await fetch() and store the payload

The HTTP client itself stays outside: callers pass an async `fetch(query, units)`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from folio_geo.cache import ResponseCache, get_cache, make_cache_key
from folio_geo.formatting import format_location_name
from folio_geo.gazetteer import GazetteerStore, get_store
from folio_geo.models import LookupResult
from folio_geo.normalizer import NormalizedQuery, QueryNormalizer
from folio_geo.resolver import AmbiguityResolver, NotFound, Resolution, ResolvedLocation
from folio_geo.search import SearchIndex

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, str], Awaitable[Any]]


@dataclass(frozen=True)
class PreparedQuery:
    normalized: NormalizedQuery
    resolution: Resolution
    display_name: str
    upstream_query: str

    @property
    def resolved(self) -> bool:
        return isinstance(self.resolution, ResolvedLocation)


def upstream_query_for(location: ResolvedLocation) -> str:
    """Provider query string: "Frederick,MD,US" in the US, "London,GB" elsewhere."""
    entry = location.entry
    if entry.country_code == "US" and entry.state_code:
        return f"{entry.city_name},{entry.state_code},{entry.country_code}"
    return f"{entry.city_name},{entry.country_code}"


@dataclass
class LocationService:
    """Everything needed to turn user text into a cached upstream lookup."""
    store: GazetteerStore
    normalizer: QueryNormalizer
    resolver: AmbiguityResolver
    search_index: SearchIndex
    cache: ResponseCache

    @classmethod
    def build(
        cls,
        store: Optional[GazetteerStore] = None,
        cache: Optional[ResponseCache] = None,
    ) -> "LocationService":
        store = store or get_store()
        return cls(
            store=store,
            normalizer=QueryNormalizer(store),
            resolver=AmbiguityResolver(store),
            search_index=SearchIndex(store),
            cache=cache if cache is not None else get_cache(),
        )

    def prepare(self, text: Any) -> PreparedQuery:
        normalized = self.normalizer.normalize(text)
        resolution = self.resolver.resolve(normalized)

        if isinstance(resolution, NotFound):
            # Unknown place: the provider gets the user's text as typed
            fallback = normalized.text
            return PreparedQuery(
                normalized=normalized,
                resolution=resolution,
                display_name=format_location_name(fallback),
                upstream_query=fallback,
            )

        return PreparedQuery(
            normalized=normalized,
            resolution=resolution,
            display_name=format_location_name(resolution.display_name),
            upstream_query=upstream_query_for(resolution),
        )

    async def lookup(
        self,
        text: Any,
        fetch: Fetcher,
        units: str = "metric",
        endpoint: str = "weather",
        ttl_seconds: Optional[float] = None,
    ) -> LookupResult:
        prepared = self.prepare(text)
        if not prepared.upstream_query:
            raise ValueError("Location query is empty")

        key = make_cache_key(endpoint, prepared.upstream_query, units)
        payload = self.cache.get(key)
        from_cache = payload is not None

        if not from_cache:
            logger.info("Cache miss for %s, fetching %r", endpoint, prepared.upstream_query)
            payload = await fetch(prepared.upstream_query, units)
            self.cache.set(key, payload, ttl_seconds)

        return LookupResult(
            query=prepared.normalized.raw_query,
            display_name=prepared.display_name,
            upstream_query=prepared.upstream_query,
            resolved=prepared.resolved,
            from_cache=from_cache,
            payload=payload,
        )
