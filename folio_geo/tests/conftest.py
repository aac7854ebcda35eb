"""Shared fixtures: a tiny hand-written gazetteer plus the packaged one."""

from __future__ import annotations

import copy

import pytest

from folio_geo.config import get_settings
from folio_geo.gazetteer import GazetteerStore

FIXTURE_DATA = {
    "version": "test.1",
    "countries": [
        {"code": "US", "name": "United States", "region": "North America", "capital": "Washington",
         "aliases": ["usa", "u.s.", "united states of america"]},
        {"code": "CA", "name": "Canada", "region": "North America", "capital": "Ottawa"},
        {"code": "GB", "name": "United Kingdom", "region": "Europe", "capital": "London",
         "aliases": ["uk", "england"]},
        {"code": "GE", "name": "Georgia", "region": "Europe", "capital": "Tbilisi"},
        {"code": "FR", "name": "France", "region": "Europe", "capital": "Paris"},
        {"code": "MD", "name": "Moldova", "region": "Europe", "capital": "Chișinău"},
    ],
    "subdivisions": {
        "US": [
            {"code": "MD", "name": "Maryland", "capital": "Annapolis"},
            {"code": "GA", "name": "Georgia", "capital": "Atlanta"},
            {"code": "IL", "name": "Illinois", "capital": "Springfield"},
            {"code": "MA", "name": "Massachusetts", "capital": "Boston"},
            {"code": "KY", "name": "Kentucky", "capital": "Frankfort"},
            {"code": "TX", "name": "Texas", "capital": "Austin"},
            {"code": "DC", "name": "District of Columbia", "capital": "Washington",
             "aliases": ["d.c."]},
        ],
        "CA": [
            {"code": "ON", "name": "Ontario", "capital": "Toronto"},
        ],
    },
    "cities": {
        "US": {
            "MD": ["Frederick", "Annapolis", "Baltimore"],
            "GA": ["Atlanta", "Columbus"],
            "IL": ["Springfield", "Chicago"],
            "MA": ["Springfield", "Boston"],
            "KY": ["London", "Frankfort"],
            "TX": ["Austin", "Paris"],
            "DC": ["Washington"],
        },
        "CA": {
            "ON": ["London", "Toronto", "Ottawa"],
        },
        "GB": ["London", "Manchester"],
        "GE": ["Tbilisi", "Columbus"],
        "FR": ["Paris", "Saint-Denis"],
        "MD": ["Chișinău"],
    },
    "default_country_overrides": {"london": "GB", "paris": "FR"},
    "modifier_collision_priority": {},
}


@pytest.fixture
def raw_data() -> dict:
    """Deep copy, so tests can mutate it before building a store."""
    return copy.deepcopy(FIXTURE_DATA)


@pytest.fixture(scope="module")
def store() -> GazetteerStore:
    return GazetteerStore.from_dict(copy.deepcopy(FIXTURE_DATA))


@pytest.fixture(scope="module")
def real_store() -> GazetteerStore:
    return GazetteerStore.load(get_settings().gazetteer.data_path)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
