from __future__ import annotations

import re
from typing import Iterable

from astrofolio_catalog.schema import Catalog


_SPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_MESSIER_RE = re.compile(r"^(?:M|MESSIER)\s*0*(\d+)$", re.IGNORECASE)
_NGC_RE = re.compile(r"^NGC\s*0*(\d+)\s*([A-Z]?)$", re.IGNORECASE)
_IC_RE = re.compile(r"^IC\s*0*(\d+)\s*([A-Z]?)$", re.IGNORECASE)
_CALDWELL_RE = re.compile(r"^(?:C|CALDWELL)\s*0*(\d+)$", re.IGNORECASE)
_SHARPLESS_RE = re.compile(r"^(?:SH\s*2|SH2|SHARPLESS)\s*[- ]?\s*0*(\d+)$", re.IGNORECASE)

OPENNGC_TYPE_MAP = {
    "*": "Star",
    "**": "Double Star",
    "*Ass": "Asterism",
    "Cl+N": "Cluster + Nebula",
    "Dup": "Duplicate",
    "EmN": "Emission Nebula",
    "G": "Galaxy",
    "GCl": "Globular Cluster",
    "GGroup": "Galaxy Group",
    "GPair": "Galaxy Pair",
    "GTrpl": "Galaxy Triplet",
    "HII": "HII Region",
    "Neb": "Nebula",
    "NonEx": "Nonexistent",
    "Nova": "Nova",
    "OCl": "Open Cluster",
    "Other": "Other",
    "PN": "Planetary Nebula",
    "RfN": "Reflection Nebula",
    "SNR": "Supernova Remnant",
}

# NGC 2000.0 (VizieR VII/118) classification codes.
NGC2000_TYPE_MAP = {
    "Gx": "Galaxy",
    "OC": "Open Cluster",
    "Gb": "Globular Cluster",
    "Nb": "Nebula",
    "Pl": "Planetary Nebula",
    "C+N": "Cluster + Nebula",
    "Ast": "Asterism",
    "Kt": "Knot",
    "***": "Triple Star",
    "D*": "Double Star",
    "*": "Star",
    "?": "Uncertain",
    "-": "Nonexistent",
    "PD": "Plate Defect",
}

UNKNOWN_OBJECT_TYPE = "Unknown"


def compact_spaces(value: str) -> str:
    return _SPACE_RE.sub(" ", str(value).strip())


def normalize_text(value: str | None) -> str:
    if value is None:
        return ""
    return _NON_ALNUM_RE.sub("", str(value).lower())


def normalize_designation(raw_designation: str | None) -> str:
    """Return the compact canonical form used as the stored designation."""
    if not raw_designation:
        return ""

    value = compact_spaces(raw_designation)

    messier = _MESSIER_RE.match(value)
    if messier:
        return f"M{int(messier.group(1))}"

    ngc = _NGC_RE.match(value)
    if ngc:
        return f"NGC{int(ngc.group(1))}{ngc.group(2).upper()}"

    ic = _IC_RE.match(value)
    if ic:
        return f"IC{int(ic.group(1))}{ic.group(2).upper()}"

    caldwell = _CALDWELL_RE.match(value)
    if caldwell:
        return f"C{int(caldwell.group(1))}"

    sharpless = _SHARPLESS_RE.match(value)
    if sharpless:
        return f"Sh2-{int(sharpless.group(1))}"

    return value


def catalog_for_designation(designation: str | None) -> Catalog | None:
    canonical = normalize_designation(designation)
    if not canonical:
        return None
    if re.fullmatch(r"M\d+", canonical):
        return Catalog.MESSIER
    if re.fullmatch(r"NGC\d+[A-Z]?", canonical):
        return Catalog.NGC
    if re.fullmatch(r"IC\d+[A-Z]?", canonical):
        return Catalog.IC
    if re.fullmatch(r"C\d+", canonical):
        return Catalog.CALDWELL
    if canonical.startswith("Sh2-"):
        return Catalog.SHARPLESS
    return None


def normalize_object_type(code: str | None, type_map: dict[str, str] | None = None) -> str:
    text = compact_spaces(code or "")
    if not text:
        return UNKNOWN_OBJECT_TYPE
    if type_map and text in type_map:
        return type_map[text]
    for mapping in (OPENNGC_TYPE_MAP, NGC2000_TYPE_MAP):
        if text in mapping:
            return mapping[text]
    return text


def dedupe_str_list(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for value in values:
        if not value:
            continue
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def split_aliases(aliases_text: str | None) -> list[str]:
    if not aliases_text:
        return []
    values = [compact_spaces(value) for value in str(aliases_text).split(",")]
    return dedupe_str_list(value for value in values if value)


def join_aliases(values: Iterable[str]) -> str:
    return ", ".join(split_aliases(",".join(values)))


def format_size(major_arcmin: float | None, minor_arcmin: float | None = None) -> str | None:
    if major_arcmin is None:
        return None
    if minor_arcmin is not None:
        return f"{major_arcmin:g}×{minor_arcmin:g}'"
    return f"{major_arcmin:g}'"
