from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from astrofolio_catalog.exceptions import UnknownCatalogError


class Catalog(Enum):
    MESSIER = "M"
    NGC = "NGC"
    IC = "IC"
    CALDWELL = "C"
    SHARPLESS = "Sh"

    @classmethod
    def parse(cls, tag: "Catalog | str") -> "Catalog":
        """Resolve a catalog from its code or name, case-insensitively."""
        if isinstance(tag, Catalog):
            return tag
        key = "".join(str(tag).split()).lower()
        resolved = _CATALOG_ALIASES.get(key)
        if resolved is None:
            raise UnknownCatalogError(str(tag))
        return resolved


_CATALOG_ALIASES = {
    "m": Catalog.MESSIER,
    "messier": Catalog.MESSIER,
    "ngc": Catalog.NGC,
    "newgeneralcatalogue": Catalog.NGC,
    "ic": Catalog.IC,
    "indexcatalogue": Catalog.IC,
    "c": Catalog.CALDWELL,
    "cal": Catalog.CALDWELL,
    "caldwell": Catalog.CALDWELL,
    "sh": Catalog.SHARPLESS,
    "sh2": Catalog.SHARPLESS,
    "sharpless": Catalog.SHARPLESS,
}


@dataclass(frozen=True)
class CatalogInfo:
    catalog: Catalog
    name: str
    description: str
    total_objects: int
    source_url: str

    @property
    def code(self) -> str:
        return self.catalog.value


CATALOG_REGISTRY: dict[Catalog, CatalogInfo] = {
    Catalog.MESSIER: CatalogInfo(
        catalog=Catalog.MESSIER,
        name="Messier Catalogue",
        description="110 deep-sky objects listed by Charles Messier (1730-1817).",
        total_objects=110,
        source_url="https://en.wikipedia.org/wiki/Messier_object",
    ),
    Catalog.NGC: CatalogInfo(
        catalog=Catalog.NGC,
        name="New General Catalogue",
        description="NGC objects from OpenNGC / NGC 2000.0.",
        total_objects=7840,
        source_url="https://en.wikipedia.org/wiki/New_General_Catalogue",
    ),
    Catalog.IC: CatalogInfo(
        catalog=Catalog.IC,
        name="Index Catalogue",
        description="IC objects from OpenNGC / NGC 2000.0.",
        total_objects=5386,
        source_url="https://en.wikipedia.org/wiki/Index_Catalogue",
    ),
    Catalog.CALDWELL: CatalogInfo(
        catalog=Catalog.CALDWELL,
        name="Caldwell Catalogue",
        description="109 deep-sky objects selected by Patrick Moore (1995).",
        total_objects=109,
        source_url="https://en.wikipedia.org/wiki/Caldwell_catalogue",
    ),
    Catalog.SHARPLESS: CatalogInfo(
        catalog=Catalog.SHARPLESS,
        name="Sharpless Catalogue",
        description="HII regions from the Sharpless (Sh2) catalogue.",
        total_objects=200,
        source_url="https://en.wikipedia.org/wiki/Sharpless_catalog",
    ),
}


# Column order of the plugin CSV dialect; also the export format.
PLUGIN_CSV_COLUMNS = [
    "designation",
    "common_name",
    "object_type",
    "constellation",
    "ra_hours",
    "dec_degrees",
    "magnitude",
    "size",
    "distance",
    "notes",
    "aliases",
]

PLUGIN_REQUIRED_COLUMNS = ["designation", "ra_hours", "dec_degrees"]

OBJECT_COLUMNS = [
    "catalog",
    "designation",
    "common_name",
    "object_type",
    "constellation",
    "ra_hours",
    "dec_degrees",
    "magnitude",
    "angular_size",
    "distance",
    "notes",
    "aliases",
]


# Stored rows may come back through pandas, where SQL NULL turns into NaN.
def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _optional_str(value: Any) -> str | None:
    if _is_missing(value):
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: Any) -> float | None:
    if _is_missing(value):
        return None
    return float(value)


@dataclass
class CatalogObject:
    catalog: Catalog
    designation: str
    ra_hours: float
    dec_degrees: float
    object_type: str = "Unknown"
    common_name: str | None = None
    constellation: str = ""
    magnitude: float | None = None
    angular_size: str | None = None
    distance: str | None = None
    notes: str = ""
    aliases: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        if self.common_name:
            return f"{self.designation} - {self.common_name}"
        return self.designation

    def to_record(self) -> dict[str, Any]:
        return {
            "catalog": self.catalog.value,
            "designation": self.designation,
            "common_name": self.common_name,
            "object_type": self.object_type,
            "constellation": self.constellation,
            "ra_hours": self.ra_hours,
            "dec_degrees": self.dec_degrees,
            "magnitude": self.magnitude,
            "angular_size": self.angular_size,
            "distance": self.distance,
            "notes": self.notes,
            "aliases": ", ".join(self.aliases),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CatalogObject":
        aliases_text = _optional_str(record.get("aliases")) or ""
        return cls(
            catalog=Catalog.parse(record["catalog"]),
            designation=str(record["designation"]),
            common_name=_optional_str(record.get("common_name")),
            object_type=_optional_str(record.get("object_type")) or "Unknown",
            constellation=_optional_str(record.get("constellation")) or "",
            ra_hours=float(record["ra_hours"]),
            dec_degrees=float(record["dec_degrees"]),
            magnitude=_optional_float(record.get("magnitude")),
            angular_size=_optional_str(record.get("angular_size")),
            distance=_optional_str(record.get("distance")),
            notes=_optional_str(record.get("notes")) or "",
            aliases=[item.strip() for item in aliases_text.split(",") if item.strip()],
        )


@dataclass
class ImportResult:
    catalog: Catalog
    imported: int = 0
    errors: int = 0
    skipped: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "catalog": self.catalog.value,
            "imported": self.imported,
            "errors": self.errors,
            "skipped": self.skipped,
        }


@dataclass
class CrossReference:
    designation: str
    catalog: Catalog
    alternate_names: list[str] = field(default_factory=list)
    catalogs: list[Catalog] = field(default_factory=list)
    related: list[CatalogObject] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {
            "designation": self.designation,
            "catalog": self.catalog.value,
            "alternate_names": list(self.alternate_names),
            "catalogs": [catalog.value for catalog in self.catalogs],
            "related": [obj.designation for obj in self.related],
        }
