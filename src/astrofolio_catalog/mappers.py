from __future__ import annotations

import re
from typing import Any, Callable

from astrofolio_catalog.coordinates import parse_dec_degrees, parse_ra_hours
from astrofolio_catalog.exceptions import CoordinateError, RowError
from astrofolio_catalog.normalization import (
    NGC2000_TYPE_MAP,
    OPENNGC_TYPE_MAP,
    catalog_for_designation,
    compact_spaces,
    dedupe_str_list,
    format_size,
    normalize_designation,
    normalize_object_type,
    split_aliases,
)
from astrofolio_catalog.readers import DIALECT_NGC2000, DIALECT_OPENNGC, DIALECT_PLUGIN, RawRow
from astrofolio_catalog.schema import PLUGIN_REQUIRED_COLUMNS, Catalog, CatalogObject

RowMapper = Callable[[RawRow, Catalog], "CatalogObject | None"]

# Header aliases accepted by the plugin CSV dialect.
PLUGIN_COLUMN_ALIASES = {
    "designation": ("designation", "name", "id", "primary_id"),
    "common_name": ("common_name", "common_names", "common name"),
    "object_type": ("object_type", "type"),
    "constellation": ("constellation", "const"),
    "ra_hours": ("ra_hours", "ra"),
    "dec_degrees": ("dec_degrees", "dec"),
    "magnitude": ("magnitude", "mag"),
    "size": ("size", "angular_size"),
    "distance": ("distance", "distance_ly"),
    "notes": ("notes", "description"),
    "aliases": ("aliases", "alternate_names"),
}

_OPENNGC_NAME_RE = re.compile(r"^(NGC|IC)\s*0*([0-9]+)(.*)$", re.IGNORECASE)
_NGC2000_NAME_RE = re.compile(r"^(I)?\s*0*([0-9]+)\s*([A-Za-z]?)$")


def _text(value: Any) -> str:
    if value is None:
        return ""
    text = compact_spaces(str(value))
    return "" if text.lower() == "nan" else text


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _to_float(value: Any) -> float | None:
    text = _text(value)
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _strict_float(value: Any, label: str, line_number: int) -> float | None:
    text = _text(value)
    if not text:
        return None
    try:
        return float(text)
    except ValueError as exc:
        raise RowError(f"invalid {label} {text!r}", line_number=line_number) from exc


def _coordinates(ra_raw: Any, dec_raw: Any, line_number: int) -> tuple[float, float]:
    try:
        return parse_ra_hours(ra_raw), parse_dec_degrees(dec_raw)
    except CoordinateError as exc:
        raise RowError(str(exc), line_number=line_number) from exc


def _catalog_number(value: Any) -> str:
    match = re.search(r"\d+", _text(value))
    if not match:
        return ""
    return str(int(match.group(0)))


def _pick(fields: dict[str, str], logical_name: str) -> str:
    lowered = {key.strip().lower(): value for key, value in fields.items()}
    for candidate in PLUGIN_COLUMN_ALIASES[logical_name]:
        if candidate in lowered:
            return _text(lowered[candidate])
    return ""


def missing_plugin_columns(header: list[str]) -> list[str]:
    lowered = {column.strip().lower() for column in header}
    missing: list[str] = []
    for logical_name in PLUGIN_REQUIRED_COLUMNS:
        if not any(candidate in lowered for candidate in PLUGIN_COLUMN_ALIASES[logical_name]):
            missing.append(logical_name)
    return missing


def map_plugin_row(row: RawRow, catalog: Catalog) -> CatalogObject:
    designation = normalize_designation(_pick(row.fields, "designation"))
    if not designation:
        raise RowError("missing designation", line_number=row.line_number)

    ra_hours, dec_degrees = _coordinates(
        _pick(row.fields, "ra_hours"),
        _pick(row.fields, "dec_degrees"),
        row.line_number,
    )

    magnitude = _strict_float(_pick(row.fields, "magnitude"), "magnitude", row.line_number)
    aliases = [alias for alias in split_aliases(_pick(row.fields, "aliases")) if alias != designation]

    return CatalogObject(
        catalog=catalog,
        designation=designation,
        common_name=_optional_text(_pick(row.fields, "common_name")),
        object_type=normalize_object_type(_pick(row.fields, "object_type")),
        constellation=_pick(row.fields, "constellation"),
        ra_hours=ra_hours,
        dec_degrees=dec_degrees,
        magnitude=magnitude,
        angular_size=_optional_text(_pick(row.fields, "size")),
        distance=_optional_text(_pick(row.fields, "distance")),
        notes=_pick(row.fields, "notes"),
        aliases=aliases,
    )


def _openngc_aliases(
    *,
    designation: str,
    name_designation: str,
    m_number: str,
    ngc_values: str,
    ic_values: str,
    common_names: list[str],
    identifiers_raw: str,
) -> list[str]:
    candidates: list[str] = []
    if name_designation:
        candidates.append(name_designation)
    if m_number:
        candidates.append(f"M{m_number}")
    for value in ngc_values.split(","):
        number = _catalog_number(value)
        if number:
            candidates.append(f"NGC{number}")
    for value in ic_values.split(","):
        number = _catalog_number(value)
        if number:
            candidates.append(f"IC{number}")
    candidates.extend(common_names[:5])
    identifiers = [compact_spaces(token) for token in identifiers_raw.split(",") if token.strip()]
    candidates.extend(identifiers[:8])
    return [item for item in dedupe_str_list(candidates) if item != designation]


def map_openngc_row(row: RawRow, catalog: Catalog) -> CatalogObject | None:
    """Map an OpenNGC row onto ``catalog``; ``None`` when the row belongs elsewhere."""
    fields = row.fields
    name = _text(fields.get("Name"))
    if not name:
        raise RowError("missing Name", line_number=row.line_number)

    name_match = _OPENNGC_NAME_RE.match(name)
    name_designation = ""
    name_catalog: Catalog | None = None
    if name_match:
        suffix = name_match.group(3).strip()
        name_designation = f"{name_match.group(1).upper()}{int(name_match.group(2))}{suffix}"
        name_catalog = Catalog.NGC if name_match.group(1).upper() == "NGC" else Catalog.IC

    m_number = _catalog_number(fields.get("M"))

    if catalog is Catalog.MESSIER:
        if not m_number:
            return None
        designation = f"M{m_number}"
    elif name_catalog is catalog:
        designation = name_designation
    else:
        return None

    ra_hours, dec_degrees = _coordinates(fields.get("RA"), fields.get("Dec"), row.line_number)

    magnitude = _to_float(fields.get("V-Mag"))
    if magnitude is None:
        magnitude = _to_float(fields.get("B-Mag"))

    common_names = [compact_spaces(value) for value in _text(fields.get("Common names")).split(",") if value.strip()]

    aliases = _openngc_aliases(
        designation=designation,
        name_designation=name_designation or name,
        m_number=m_number,
        ngc_values=_text(fields.get("NGC")),
        ic_values=_text(fields.get("IC")),
        common_names=common_names,
        identifiers_raw=_text(fields.get("Identifiers")),
    )

    return CatalogObject(
        catalog=catalog,
        designation=designation,
        common_name=common_names[0] if common_names else None,
        object_type=normalize_object_type(fields.get("Type"), OPENNGC_TYPE_MAP),
        constellation=_text(fields.get("Const")),
        ra_hours=ra_hours,
        dec_degrees=dec_degrees,
        magnitude=magnitude,
        angular_size=format_size(_to_float(fields.get("MajAx")), _to_float(fields.get("MinAx"))),
        distance=None,
        notes=_text(fields.get("OpenNGC notes")),
        aliases=aliases,
    )


def map_ngc2000_row(row: RawRow, catalog: Catalog) -> CatalogObject | None:
    fields = row.fields
    name = _text(fields.get("Name"))
    match = _NGC2000_NAME_RE.match(name)
    if not match:
        raise RowError(f"unrecognized NGC 2000.0 name {name!r}", line_number=row.line_number)

    prefix = "IC" if match.group(1) else "NGC"
    designation = f"{prefix}{int(match.group(2))}{match.group(3).upper()}"
    if catalog_for_designation(designation) is not catalog:
        return None

    ra_text = f"{_text(fields.get('RAh'))} {_text(fields.get('RAm'))}"
    dec_text = f"{_text(fields.get('DE-'))}{_text(fields.get('DEd'))} {_text(fields.get('DEm'))}"
    ra_hours, dec_degrees = _coordinates(ra_text, dec_text, row.line_number)

    size = _to_float(fields.get("size"))

    return CatalogObject(
        catalog=catalog,
        designation=designation,
        object_type=normalize_object_type(fields.get("Type"), NGC2000_TYPE_MAP),
        constellation=_text(fields.get("Const")),
        ra_hours=ra_hours,
        dec_degrees=dec_degrees,
        magnitude=_to_float(fields.get("mag")),
        angular_size=format_size(size),
        notes=_text(fields.get("Desc")),
    )


MAPPERS: dict[str, RowMapper] = {
    DIALECT_PLUGIN: map_plugin_row,
    DIALECT_OPENNGC: map_openngc_row,
    DIALECT_NGC2000: map_ngc2000_row,
}
