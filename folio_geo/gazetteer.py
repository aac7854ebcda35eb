"""
Static gazetteer of countries, states/provinces and a curated city list.

The dataset ships as a versioned JSON file (data/gazetteer.json) and is loaded
once into an immutable GazetteerStore. Everything downstream (normalizer,
resolver, search) receives the store explicitly, so tests can swap in a tiny
fixture dataset built with GazetteerStore.from_dict().

Design:
  - Every city becomes one GazetteerEntry, unique by
    (folded city name, state code, country code).
  - Entries keep the order they are declared in the file; that order is the
    last-resort tie breaker for ambiguous names.
  - Country and state names, codes and aliases are folded (lowercase,
    diacritics and periods removed) into lookup tables.
  - Default-country overrides and modifier collision priorities are data,
    not code, so newly found collisions only need a dataset bump.
"""

from __future__ import annotations

import json
import logging
import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from folio_geo.config import get_settings

logger = logging.getLogger(__name__)


class GazetteerDataError(ValueError):
    """Raised when a gazetteer dataset is missing or inconsistent."""


_QUOTES = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"'})
_WHITESPACE_RE = re.compile(r"\s+")


def fold(value: str) -> str:
    """
    Comparison key for place names.
    "Montréal" -> "montreal", "  St. Louis " -> "st louis", "U.S." -> "u s".
    """
    if not isinstance(value, str):
        return ""
    decomposed = unicodedata.normalize("NFKD", value.translate(_QUOTES))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    stripped = stripped.casefold().replace(".", " ")
    return _WHITESPACE_RE.sub(" ", stripped).strip()


# ── Records ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Country:
    code: str                  # ISO-2, "US"
    name: str                  # "United States"
    region: str                # "North America"
    capital: Optional[str] = None
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class Subdivision:
    country_code: str
    code: str                  # "MD", "ON", "NSW"
    name: str                  # "Maryland"
    capital: Optional[str] = None
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class GazetteerEntry:
    city_name: str
    country_code: str
    country_name: str
    region: str
    state_code: Optional[str] = None
    state_name: Optional[str] = None
    is_capital: bool = False

    @property
    def key(self) -> str:
        return f"{fold(self.city_name)}|{self.state_code or ''}|{self.country_code}"


# ── Store ─────────────────────────────────────────────────────────────

class GazetteerStore:
    """
    Read-only place dataset with lookup indexes.

    Built once, never mutated afterwards: every collection it exposes is a
    tuple, frozenset or MappingProxyType, so concurrent readers need no lock.
    """

    def __init__(
        self,
        version: str,
        countries: Mapping[str, Country],
        subdivisions: Mapping[tuple[str, str], Subdivision],
        entries: tuple[GazetteerEntry, ...],
        default_overrides: Mapping[str, tuple[str, Optional[str]]],
        collision_priority: Mapping[str, str],
    ):
        self.version = version
        self.countries = MappingProxyType(dict(countries))
        self.subdivisions = MappingProxyType(dict(subdivisions))
        self.entries = entries
        self.default_overrides = MappingProxyType(dict(default_overrides))
        self.collision_priority = MappingProxyType(dict(collision_priority))
        self.regions = tuple(dict.fromkeys(c.region for c in self.countries.values()))

        by_city: dict[str, list[GazetteerEntry]] = {}
        by_state: dict[tuple[str, str], list[GazetteerEntry]] = {}
        for entry in entries:
            by_city.setdefault(fold(entry.city_name), []).append(entry)
            if entry.state_code:
                by_state.setdefault((entry.country_code, entry.state_code), []).append(entry)
        self._by_city = MappingProxyType({k: tuple(v) for k, v in by_city.items()})
        self._by_state = MappingProxyType({k: tuple(v) for k, v in by_state.items()})

        country_aliases: dict[str, str] = {}
        for country in self.countries.values():
            for alias in (country.code, country.name, *country.aliases):
                country_aliases.setdefault(fold(alias), country.code)
        self._country_aliases = MappingProxyType(country_aliases)

        # One alias can name several subdivisions ("wa": Washington and Western Australia)
        state_aliases: dict[str, set[tuple[str, str]]] = {}
        for sub in self.subdivisions.values():
            for alias in (sub.code, sub.name, *sub.aliases):
                state_aliases.setdefault(fold(alias), set()).add((sub.country_code, sub.code))
        self._state_aliases = MappingProxyType({k: frozenset(v) for k, v in state_aliases.items()})

        self.max_alias_words = max(
            (len(k.split()) for k in (*self._country_aliases, *self._state_aliases)),
            default=1,
        )

    # ── Construction ──────────────────────────────────────────────────

    @classmethod
    def load(cls, path: str | Path) -> "GazetteerStore":
        file_path = Path(path)
        if not file_path.exists():
            raise GazetteerDataError(f"Missing gazetteer dataset: {file_path}")
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        store = cls.from_dict(data)
        logger.info("Gazetteer %s loaded from %s: %d entries, %d countries, %d subdivisions",
                    store.version, file_path.name, len(store.entries),
                    len(store.countries), len(store.subdivisions))
        return store

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GazetteerStore":
        """Validate a raw dataset dict and build the store."""
        countries: dict[str, Country] = {}
        for row in data.get("countries", []):
            code = str(row.get("code", "")).upper()
            if not re.fullmatch(r"[A-Z]{2}", code):
                raise GazetteerDataError(f"Invalid ISO-2 country code: {row.get('code')!r}")
            if not row.get("region"):
                raise GazetteerDataError(f"No region defined for country {code}")
            countries[code] = Country(
                code=code,
                name=row["name"],
                region=row["region"],
                capital=row.get("capital"),
                aliases=tuple(row.get("aliases", ())),
            )

        subdivisions: dict[tuple[str, str], Subdivision] = {}
        for country_code, rows in data.get("subdivisions", {}).items():
            if country_code not in countries:
                raise GazetteerDataError(f"Subdivisions listed for unknown country {country_code}")
            for row in rows:
                sub = Subdivision(
                    country_code=country_code,
                    code=str(row["code"]).upper(),
                    name=row["name"],
                    capital=row.get("capital"),
                    aliases=tuple(row.get("aliases", ())),
                )
                subdivisions[(country_code, sub.code)] = sub

        entries: list[GazetteerEntry] = []
        seen: set[str] = set()

        def add(city: str, country: Country, sub: Optional[Subdivision]) -> None:
            city = city.strip()
            is_capital = fold(city) == fold(country.capital or "") or (
                sub is not None and fold(city) == fold(sub.capital or "")
            )
            entry = GazetteerEntry(
                city_name=city,
                country_code=country.code,
                country_name=country.name,
                region=country.region,
                state_code=sub.code if sub else None,
                state_name=sub.name if sub else None,
                is_capital=is_capital,
            )
            if entry.key in seen:
                raise GazetteerDataError(f"Duplicate gazetteer entry: {entry.key}")
            seen.add(entry.key)
            entries.append(entry)

        for country_code, block in data.get("cities", {}).items():
            country = countries.get(country_code)
            if country is None:
                raise GazetteerDataError(f"No region defined for country {country_code}")
            if isinstance(block, list):
                for city in block:
                    add(city, country, None)
                continue
            for state_code, cities in block.items():
                sub = subdivisions.get((country_code, state_code))
                if sub is None:
                    raise GazetteerDataError(f"Unknown subdivision {country_code}-{state_code}")
                for city in cities:
                    add(city, country, sub)

        overrides: dict[str, tuple[str, Optional[str]]] = {}
        for city, target in data.get("default_country_overrides", {}).items():
            country_code, _, state_code = str(target).upper().partition("-")
            if country_code not in countries:
                raise GazetteerDataError(f"Override for {city!r} points at unknown country {target}")
            overrides[fold(city)] = (country_code, state_code or None)

        priority: dict[str, str] = {}
        for modifier, preferred in data.get("modifier_collision_priority", {}).items():
            if preferred not in ("state", "country"):
                raise GazetteerDataError(
                    f"Collision priority for {modifier!r} must be 'state' or 'country'"
                )
            priority[fold(modifier)] = preferred

        return cls(
            version=str(data.get("version", "unversioned")),
            countries=countries,
            subdivisions=subdivisions,
            entries=tuple(entries),
            default_overrides=overrides,
            collision_priority=priority,
        )

    # ── Lookups ───────────────────────────────────────────────────────

    def candidates(self, city: str) -> tuple[GazetteerEntry, ...]:
        """All entries named `city`, in declared order."""
        return self._by_city.get(fold(city), ())

    def entries_in_state(self, country_code: str, state_code: str) -> tuple[GazetteerEntry, ...]:
        return self._by_state.get((country_code.upper(), state_code.upper()), ())

    def country_for_alias(self, text: str) -> Optional[str]:
        """Country code for a name, code or alias ("uk" -> "GB"), else None."""
        return self._country_aliases.get(fold(text))

    def states_for_alias(self, text: str) -> frozenset[tuple[str, str]]:
        """(country, state) pairs a state name or abbreviation can refer to."""
        return self._state_aliases.get(fold(text), frozenset())

    def is_country_alias(self, text: str) -> bool:
        return fold(text) in self._country_aliases

    def is_state_alias(self, text: str) -> bool:
        return fold(text) in self._state_aliases

    def default_override(self, city: str) -> Optional[tuple[str, Optional[str]]]:
        return self.default_overrides.get(fold(city))

    def region_for(self, name: str) -> Optional[str]:
        key = fold(name)
        for region in self.regions:
            if fold(region) == key:
                return region
        return None


# Singleton store, loaded lazily from the configured path
@lru_cache(maxsize=1)
def get_store() -> GazetteerStore:
    return GazetteerStore.load(get_settings().gazetteer.data_path)
