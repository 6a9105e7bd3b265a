from __future__ import annotations

import astropy.units as u
import numpy as np
from astropy.coordinates import SkyCoord

from astrofolio_catalog.coordinates import parse_dec_degrees, parse_ra_hours
from astrofolio_catalog.normalization import normalize_designation
from astrofolio_catalog.schema import CatalogObject
from astrofolio_catalog.store import CatalogStore

MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 10000


def search_catalog(store: CatalogStore, query: str | None, limit: int = DEFAULT_SEARCH_LIMIT) -> list[CatalogObject]:
    """Case-insensitive substring search over designation, common name, type and aliases.

    Spaced designations also match their compact stored form (``NGC 224``
    finds ``NGC224``). Designations starting with the query come first, then
    the rest alphabetically by designation.
    """
    text = " ".join(str(query or "").split())
    if len(text) < MIN_QUERY_LENGTH:
        return []

    capped = max(0, min(int(limit), MAX_SEARCH_LIMIT))
    if capped == 0:
        return []
    return store.search_rows(text, capped, compact=normalize_designation(text))


def search_near(
    store: CatalogStore,
    ra_hours: float | str,
    dec_degrees: float | str,
    radius_degrees: float,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[tuple[CatalogObject, float]]:
    """Objects within ``radius_degrees`` of a position, nearest first, with separations in degrees."""
    if radius_degrees <= 0:
        raise ValueError("radius_degrees must be positive")

    center = SkyCoord(
        ra=parse_ra_hours(ra_hours) * u.hourangle,
        dec=parse_dec_degrees(dec_degrees) * u.deg,
        frame="icrs",
    )

    frame = store.objects_frame()
    if frame.empty:
        return []
    targets = SkyCoord(
        ra=frame["ra_hours"].to_numpy(dtype=float) * u.hourangle,
        dec=frame["dec_degrees"].to_numpy(dtype=float) * u.deg,
        frame="icrs",
    )
    separations = center.separation(targets).deg

    within = np.flatnonzero(separations <= radius_degrees)
    ordered = within[np.argsort(separations[within], kind="stable")][: max(0, int(limit))]

    return [
        (CatalogObject.from_record(frame.iloc[int(index)].to_dict()), float(separations[index]))
        for index in ordered
    ]
