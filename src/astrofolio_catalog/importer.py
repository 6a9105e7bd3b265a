from __future__ import annotations

import logging
from pathlib import Path

from astrofolio_catalog.exceptions import CatalogFormatError, RowError
from astrofolio_catalog.mappers import MAPPERS, missing_plugin_columns
from astrofolio_catalog.readers import (
    DIALECT_OPENNGC,
    DIALECT_PLUGIN,
    NGC2000_LAYOUT,
    FixedWidthLayout,
    RawRow,
    detect_dialect,
    read_delimited_rows,
    read_fixed_width_rows,
)
from astrofolio_catalog.schema import Catalog, CatalogObject, ImportResult
from astrofolio_catalog.store import DEFAULT_BATCH_SIZE, CatalogStore

logger = logging.getLogger(__name__)

SOURCE_FORMATS = ("auto", "csv", "openngc", "vizier")
FIXED_WIDTH_SUFFIXES = {".dat", ".txt", ".fwf"}
PROGRESS_EVERY_ROWS = 1000
DEFAULT_MAX_LOGGED_ERRORS = 10


def _resolve_format(path: Path, source_format: str) -> str:
    if source_format not in SOURCE_FORMATS:
        raise CatalogFormatError(f"Unsupported source format '{source_format}' (expected one of {', '.join(SOURCE_FORMATS)})")
    if source_format != "auto":
        return source_format
    if path.suffix.lower() in FIXED_WIDTH_SUFFIXES:
        return "vizier"
    return "csv"


def _load_rows(path: Path, source_format: str, layout: FixedWidthLayout | None) -> tuple[str, list[RawRow]]:
    if source_format == "vizier":
        resolved_layout = layout or NGC2000_LAYOUT
        return resolved_layout.dialect, read_fixed_width_rows(path, resolved_layout)

    header, rows = read_delimited_rows(path)
    dialect = DIALECT_OPENNGC if source_format == "openngc" else detect_dialect(header)

    if dialect == DIALECT_OPENNGC:
        missing = [column for column in ("Name", "RA", "Dec") if column not in header]
    else:
        missing = missing_plugin_columns(header)
    if missing:
        raise CatalogFormatError(f"Catalog source {path.name} is missing required columns: {', '.join(missing)}")

    return dialect, rows


def parse_catalog_file(
    path: Path,
    catalog: Catalog | str,
    *,
    source_format: str = "auto",
    layout: FixedWidthLayout | None = None,
    max_logged_errors: int = DEFAULT_MAX_LOGGED_ERRORS,
) -> tuple[list[CatalogObject], ImportResult]:
    """Parse ``path`` into objects of ``catalog`` without touching storage.

    The returned result carries the error and skip counts; ``imported`` is the
    number of rows that mapped cleanly.
    """
    resolved_catalog = Catalog.parse(catalog)
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Catalog source file not found: {path}")

    dialect, rows = _load_rows(path, _resolve_format(path, source_format), layout)
    mapper = MAPPERS.get(dialect, MAPPERS[DIALECT_PLUGIN])

    result = ImportResult(catalog=resolved_catalog)
    objects: list[CatalogObject] = []

    for processed, row in enumerate(rows, start=1):
        try:
            if row.malformed:
                raise RowError(str(row.error), line_number=row.line_number)
            obj = mapper(row, resolved_catalog)
        except RowError as exc:
            result.errors += 1
            if result.errors <= max_logged_errors:
                logger.warning("Skipping malformed row in %s: %s", path.name, exc)
        else:
            if obj is None:
                result.skipped += 1
            else:
                objects.append(obj)
                result.imported += 1

        if processed % PROGRESS_EVERY_ROWS == 0:
            logger.info(
                "%s: %d rows processed (%d parsed, %d errors)",
                path.name,
                processed,
                result.imported,
                result.errors,
            )

    if result.errors > max_logged_errors:
        logger.warning("%s: %d further malformed rows not logged", path.name, result.errors - max_logged_errors)

    return objects, result


def import_catalog(
    store: CatalogStore,
    path: Path | str,
    catalog: Catalog | str,
    *,
    source_format: str = "auto",
    layout: FixedWidthLayout | None = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
    max_logged_errors: int = DEFAULT_MAX_LOGGED_ERRORS,
) -> ImportResult:
    """Replace the stored rows of ``catalog`` with the contents of ``path``."""
    objects, result = parse_catalog_file(
        Path(path),
        catalog,
        source_format=source_format,
        layout=layout,
        max_logged_errors=max_logged_errors,
    )

    stored = store.replace_catalog(result.catalog, objects, batch_size=batch_size)
    if stored != result.imported:
        logger.info(
            "%s: %d parsed rows collapsed to %d stored rows (repeated designations keep the last row)",
            result.catalog.value,
            result.imported,
            stored,
        )
    result.imported = stored

    logger.info(
        "Imported catalog %s from %s: %d objects, %d errors, %d skipped",
        result.catalog.value,
        Path(path).name,
        result.imported,
        result.errors,
        result.skipped,
    )
    return result
