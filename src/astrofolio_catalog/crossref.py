from __future__ import annotations

from astrofolio_catalog.normalization import (
    catalog_for_designation,
    compact_spaces,
    dedupe_str_list,
    normalize_designation,
    normalize_text,
)
from astrofolio_catalog.schema import Catalog, CatalogObject, CrossReference
from astrofolio_catalog.store import CatalogStore

# Preferred primary catalog when the same designation is stored more than once.
CATALOG_PRIORITY = {
    Catalog.MESSIER: 0,
    Catalog.NGC: 1,
    Catalog.IC: 2,
    Catalog.CALDWELL: 3,
    Catalog.SHARPLESS: 4,
}


def _identifier_key(value: str | None) -> str:
    return normalize_text(normalize_designation(value))


def _alias_keys(obj: CatalogObject) -> set[str]:
    keys = {_identifier_key(alias) for alias in obj.aliases}
    if obj.common_name:
        keys.add(_identifier_key(obj.common_name))
    keys.discard("")
    return keys


def _find_primary(store: CatalogStore, objects: list[CatalogObject], name: str, key: str) -> CatalogObject | None:
    exact = store.find_by_designation(normalize_designation(name))
    if exact:
        return min(exact, key=lambda obj: (CATALOG_PRIORITY[obj.catalog], obj.designation))
    for obj in objects:
        if _identifier_key(obj.designation) == key:
            return obj
    by_alias = sorted(store.find_by_alias(name), key=lambda obj: (CATALOG_PRIORITY[obj.catalog], obj.designation))
    return by_alias[0] if by_alias else None


def find_cross_references(store: CatalogStore, name: str | None) -> CrossReference | None:
    """Resolve ``name`` to its primary designation, alternate names and catalogs.

    Exact designation matches win; otherwise each object's alternate-name list
    is scanned. Related objects are other stored rows that share a designation
    with the match (for example C20 listing NGC7000 as an alias).
    """
    text = compact_spaces(name or "")
    key = _identifier_key(text)
    if not key:
        return None

    objects = sorted(store.iter_objects(), key=lambda obj: (CATALOG_PRIORITY[obj.catalog], obj.designation))
    primary = _find_primary(store, objects, text, key)
    if primary is None:
        return None

    primary_key = _identifier_key(primary.designation)
    identity = {primary_key} | {_identifier_key(alias) for alias in primary.aliases}
    identity.discard("")

    related = [
        obj
        for obj in objects
        if (obj.catalog, obj.designation) != (primary.catalog, primary.designation)
        and (_identifier_key(obj.designation) in identity or primary_key in _alias_keys(obj))
    ]

    names: list[str] = []
    if primary.common_name:
        names.append(primary.common_name)
    names.extend(primary.aliases)
    for obj in related:
        names.append(obj.designation)
        if obj.common_name:
            names.append(obj.common_name)
    # "NGC 7000" and "NGC7000" name the same thing; keep the first spelling.
    seen_keys = {primary_key}
    alternate_names: list[str] = []
    for value in dedupe_str_list(names):
        value_key = _identifier_key(value)
        if value_key and value_key not in seen_keys:
            seen_keys.add(value_key)
            alternate_names.append(value)

    catalogs: list[Catalog] = [primary.catalog]
    catalogs.extend(obj.catalog for obj in related)
    for alias in primary.aliases:
        implied = catalog_for_designation(alias)
        if implied is not None:
            catalogs.append(implied)
    ordered_catalogs = sorted(set(catalogs), key=lambda catalog: CATALOG_PRIORITY[catalog])

    return CrossReference(
        designation=primary.designation,
        catalog=primary.catalog,
        alternate_names=alternate_names,
        catalogs=ordered_catalogs,
        related=related,
    )
