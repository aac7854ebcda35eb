"""
Pydantic models for the objects that cross the package boundary:
search requests and pages, dataset/cache statistics and lookup results.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from folio_geo.gazetteer import GazetteerEntry


# ── Enums ──────────────────────────────────────────────────────────────

class ModifierType(str, Enum):
    STATE = "state"
    COUNTRY = "country"
    AMBIGUOUS = "ambiguous"    # names both a state/province and a country
    NONE = "none"


# ── Search ────────────────────────────────────────────────────────────

class SearchFilters(BaseModel):
    country: Optional[str] = Field(None, description="ISO-2 code or any country alias")
    region: Optional[str] = Field(None, description="Region name, case-insensitive")

    model_config = {"frozen": True}


class Pagination(BaseModel):
    limit: int = Field(20, ge=0)
    offset: int = Field(0, ge=0)

    model_config = {"frozen": True}


class SearchPage(BaseModel):
    """One page of search results. Computed per call, never persisted."""
    items: list[GazetteerEntry]
    total_count: int
    page_index: int
    page_size: int
    filters: SearchFilters = Field(default_factory=SearchFilters)


# ── Stats ─────────────────────────────────────────────────────────────

class GazetteerStats(BaseModel):
    version: str
    total_entries: int
    total_countries: int
    total_subdivisions: int
    capitals: int
    by_region: dict[str, int] = Field(default_factory=dict)
    by_country: dict[str, int] = Field(default_factory=dict)
    # Keyed "US-MD", "CA-ON"
    by_state: dict[str, int] = Field(default_factory=dict)


class CacheStats(BaseModel):
    size: int
    max_entries: int
    default_ttl_seconds: float
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0


# ── Lookup ────────────────────────────────────────────────────────────

class LookupResult(BaseModel):
    query: str
    display_name: str
    upstream_query: str
    resolved: bool
    from_cache: bool
    payload: Any = None
