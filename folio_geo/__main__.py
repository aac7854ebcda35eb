"""CLI entrypoint for folio_geo."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict

from folio_geo.config import get_settings
from folio_geo.formatting import format_location_name
from folio_geo.logging_config import setup_logging
from folio_geo.models import Pagination, SearchFilters


def main(argv: list[str] | None = None) -> None:
    setup_logging()

    parser = argparse.ArgumentParser(prog="folio-geo")
    sub = parser.add_subparsers(dest="command", required=True)

    resolve_parser = sub.add_parser("resolve")
    resolve_parser.add_argument("text")

    format_parser = sub.add_parser("format")
    format_parser.add_argument("text")

    search_parser = sub.add_parser("search")
    search_parser.add_argument("query", nargs="?", default="")
    search_parser.add_argument("--country")
    search_parser.add_argument("--region")
    search_parser.add_argument("--states", action="store_true", help="also match state/province names")
    search_parser.add_argument("--limit", type=int)
    search_parser.add_argument("--offset", type=int, default=0)

    state_parser = sub.add_parser("by-state")
    state_parser.add_argument("country")
    state_parser.add_argument("state")
    state_parser.add_argument("--query")
    state_parser.add_argument("--limit", type=int)
    state_parser.add_argument("--offset", type=int, default=0)

    suggest_parser = sub.add_parser("suggest")
    suggest_parser.add_argument("prefix", nargs="?")
    suggest_parser.add_argument("--limit", type=int)

    sub.add_parser("stats")

    args = parser.parse_args(argv)

    if args.command == "resolve":
        _resolve(args.text)
    elif args.command == "format":
        _print({"input": args.text, "formatted": format_location_name(args.text)})
    elif args.command == "search":
        _search(args.query, args.country, args.region, args.states, args.limit, args.offset)
    elif args.command == "by-state":
        _by_state(args.country, args.state, args.query, args.limit, args.offset)
    elif args.command == "suggest":
        _suggest(args.prefix, args.limit)
    elif args.command == "stats":
        _stats()


def _print(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _clamp(value: int | None, default: int, maximum: int) -> int:
    if value is None:
        return default
    return max(0, min(value, maximum))


def _resolve(text: str) -> None:
    from folio_geo.resolver import ResolvedLocation
    from folio_geo.service import LocationService

    prepared = LocationService.build().prepare(text)
    out = {
        "query": prepared.normalized.raw_query,
        "city": prepared.normalized.city_token,
        "modifier": prepared.normalized.modifier_token,
        "modifier_type": prepared.normalized.modifier_type.value,
        "resolved": prepared.resolved,
        "display_name": prepared.display_name,
        "upstream_query": prepared.upstream_query,
    }
    if isinstance(prepared.resolution, ResolvedLocation):
        out["gazetteer_key"] = prepared.resolution.gazetteer_key
        out["entry"] = asdict(prepared.resolution.entry)
    _print(out)


def _search(query: str, country, region, states: bool, limit, offset: int) -> None:
    from folio_geo.gazetteer import get_store
    from folio_geo.search import SearchIndex

    settings = get_settings().search
    page = SearchIndex(get_store()).search(
        query,
        SearchFilters(country=country, region=region),
        Pagination(limit=_clamp(limit, settings.default_limit, settings.max_limit),
                   offset=max(0, offset)),
        include_state_names=states,
    )
    _print(page.model_dump())


def _by_state(country: str, state: str, query, limit, offset: int) -> None:
    from folio_geo.gazetteer import get_store
    from folio_geo.search import SearchIndex

    settings = get_settings().search
    page = SearchIndex(get_store()).by_state(
        country,
        state,
        query,
        Pagination(limit=_clamp(limit, settings.default_limit, settings.max_limit),
                   offset=max(0, offset)),
    )
    _print(page.model_dump())


def _suggest(prefix, limit) -> None:
    from folio_geo.gazetteer import get_store
    from folio_geo.search import SearchIndex

    settings = get_settings().search
    items = SearchIndex(get_store()).suggest(
        prefix,
        _clamp(limit, settings.suggest_default_limit, settings.suggest_max_limit),
    )
    _print([asdict(e) for e in items])


def _stats() -> None:
    from folio_geo.gazetteer import get_store
    from folio_geo.search import SearchIndex

    _print(SearchIndex(get_store()).stats().model_dump())


if __name__ == "__main__":
    main()
