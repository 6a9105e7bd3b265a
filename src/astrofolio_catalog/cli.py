from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Sequence

from astrofolio_catalog.config import CatalogConfig
from astrofolio_catalog.coordinates import format_dec_dms, format_ra_hms
from astrofolio_catalog.crossref import find_cross_references
from astrofolio_catalog.exceptions import CatalogError
from astrofolio_catalog.export import OPENNGC_SOURCE_URL, download_source, export_catalog
from astrofolio_catalog.importer import SOURCE_FORMATS, import_catalog
from astrofolio_catalog.readers import get_layout
from astrofolio_catalog.schema import Catalog, CatalogObject
from astrofolio_catalog.search import search_catalog, search_near
from astrofolio_catalog.store import CatalogStore

LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _configure_logging(verbosity: int) -> None:
    logging.basicConfig(
        level=LOG_LEVELS.get(max(0, verbosity), logging.DEBUG),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _object_payload(obj: CatalogObject) -> dict[str, Any]:
    payload = obj.to_record()
    payload["aliases"] = list(obj.aliases)
    payload["ra_hms"] = format_ra_hms(obj.ra_hours)
    payload["dec_dms"] = format_dec_dms(obj.dec_degrees)
    return payload


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=True, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="astrofolio-catalog",
        description="Import, search and cross-reference deep-sky object catalogs.",
    )
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite catalog database path (default: $ASTROFOLIO_CATALOG_DB or data/astrofolio_catalog.db).",
    )
    parser.add_argument(
        "--verbosity",
        type=int,
        default=1,
        help="Logging verbosity (0=warnings only, 1=import progress, 2=debug).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Replace a catalog with the rows of a source file.")
    import_parser.add_argument("catalog", help="Catalog code or name (M, NGC, IC, C, Sh).")
    import_parser.add_argument("path", help="Source file (plugin CSV, OpenNGC CSV or VizieR fixed-width).")
    import_parser.add_argument(
        "--format",
        dest="source_format",
        choices=SOURCE_FORMATS,
        default="auto",
        help="Source format (default: detect from suffix and header).",
    )
    import_parser.add_argument("--batch-size", type=int, default=None, help="Rows per insert batch.")
    import_parser.add_argument("--layout", default=None, help="Fixed-width layout name for VizieR sources (default: VII/118).")

    search_parser = subparsers.add_parser("search", help="Substring search across all catalogs.")
    search_parser.add_argument("query")
    search_parser.add_argument("--limit", type=int, default=None, help="Maximum results.")

    xref_parser = subparsers.add_parser("xref", help="Show alternate names and catalogs for a designation.")
    xref_parser.add_argument("name")

    near_parser = subparsers.add_parser("near", help="Objects within a radius of a sky position.")
    near_parser.add_argument("ra", help="Right ascension (decimal hours or HH:MM:SS).")
    near_parser.add_argument(
        "dec",
        help="Declination (decimal degrees or +DD:MM:SS; put '--' before a negative sexagesimal value).",
    )
    near_parser.add_argument("--radius", type=float, default=1.0, help="Search radius in degrees (default: 1).")
    near_parser.add_argument("--limit", type=int, default=None, help="Maximum results.")

    subparsers.add_parser("stats", help="Expected and stored object counts per catalog.")

    export_parser = subparsers.add_parser("export", help="Write a catalog as plugin CSV.")
    export_parser.add_argument("catalog")
    export_parser.add_argument("path")

    download_parser = subparsers.add_parser("download", help="Fetch a catalog source file over HTTP.")
    download_parser.add_argument("path", help="Destination file.")
    download_parser.add_argument("--url", default=OPENNGC_SOURCE_URL, help="Source URL (default: OpenNGC NGC.csv).")
    download_parser.add_argument("--timeout-s", type=float, default=None, help="HTTP timeout seconds.")
    return parser


def _run(args: argparse.Namespace, config: CatalogConfig) -> Any:
    if args.command == "download":
        target = download_source(args.url, args.path, timeout=config.http_timeout_s)
        return {"url": args.url, "path": str(target)}

    config.db_path.parent.mkdir(parents=True, exist_ok=True)
    with CatalogStore(config.db_path) as store:
        if args.command == "import":
            result = import_catalog(
                store,
                Path(args.path),
                args.catalog,
                source_format=args.source_format,
                layout=get_layout(args.layout) if args.layout else None,
                batch_size=config.batch_size,
                max_logged_errors=config.max_logged_errors,
            )
            return result.as_dict()
        if args.command == "search":
            limit = config.search_limit if args.limit is None else args.limit
            return [_object_payload(obj) for obj in search_catalog(store, args.query, limit)]
        if args.command == "xref":
            reference = find_cross_references(store, args.name)
            return None if reference is None else reference.as_dict()
        if args.command == "near":
            limit = config.search_limit if args.limit is None else args.limit
            matches = search_near(store, args.ra, args.dec, args.radius, limit)
            return [
                {**_object_payload(obj), "separation_deg": round(separation, 4)}
                for obj, separation in matches
            ]
        if args.command == "stats":
            return store.catalog_stats()
        if args.command == "export":
            count = export_catalog(store, args.catalog, args.path)
            return {"catalog": Catalog.parse(args.catalog).value, "exported": count, "path": args.path}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbosity)

    try:
        config = CatalogConfig.from_env().with_overrides(
            db_path=Path(args.db) if args.db else None,
            batch_size=getattr(args, "batch_size", None),
            http_timeout_s=getattr(args, "timeout_s", None),
        )
    except ValueError as exc:
        parser.error(str(exc))

    try:
        payload = _run(args, config)
    except (CatalogError, ValueError, OSError) as exc:
        logging.getLogger(__name__).error("%s", exc)
        return 1

    _print_json(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
