"""
Central configuration loaded from environment variables with sensible defaults.
Nothing here is secret; every knob can be overridden per process.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

_DEFAULT_GAZETTEER = Path(__file__).resolve().parent / "data" / "gazetteer.json"


@dataclass(frozen=True)
class GazetteerConfig:
    # Static, versioned dataset shipped with the package
    data_path: str = os.getenv("GAZETTEER_PATH", str(_DEFAULT_GAZETTEER))


@dataclass(frozen=True)
class CacheConfig:
    max_entries: int = int(os.getenv("CACHE_MAX_ENTRIES", "1000"))
    # Seconds a cached upstream payload stays valid
    default_ttl: float = float(os.getenv("CACHE_DEFAULT_TTL", "300"))
    sweep_interval: float = float(os.getenv("CACHE_SWEEP_INTERVAL", "120"))


@dataclass(frozen=True)
class SearchConfig:
    default_limit: int = int(os.getenv("SEARCH_DEFAULT_LIMIT", "20"))
    max_limit: int = int(os.getenv("SEARCH_MAX_LIMIT", "100"))
    suggest_default_limit: int = int(os.getenv("SUGGEST_DEFAULT_LIMIT", "10"))
    suggest_max_limit: int = int(os.getenv("SUGGEST_MAX_LIMIT", "20"))


@dataclass(frozen=True)
class SchedulerConfig:
    enabled: bool = os.getenv("SCHEDULER_ENABLED", "true").lower() == "true"


@dataclass(frozen=True)
class Settings:
    gazetteer: GazetteerConfig = field(default_factory=GazetteerConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    env: str = os.getenv("APP_ENV", "development")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
