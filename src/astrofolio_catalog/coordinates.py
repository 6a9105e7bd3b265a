"""Right ascension / declination parsing and formatting.

Parsing accepts the shapes found in catalog exports:

- ``05:34:31.94`` / ``05 34 31.94`` / ``05h34m31.94s`` (sexagesimal)
- ``05 34.5`` (degrees or hours with decimal minutes, NGC 2000.0 style)
- ``5.5758`` (already decimal)

Declinations take an optional leading sign which applies to the whole value,
so ``-00 30 00`` is -0.5 degrees.
"""

from __future__ import annotations

import math
import re
import warnings

import astropy.units as u
from astropy.coordinates import Angle
from astropy.utils.exceptions import AstropyWarning

from astrofolio_catalog.exceptions import CoordinateError

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def _parse_value(raw: str | float | int | None, unit: u.UnitBase, label: str) -> float:
    if raw is None:
        raise CoordinateError(f"Missing {label}")
    if isinstance(raw, (int, float)):
        value = float(raw)
        if math.isnan(value):
            raise CoordinateError(f"Missing {label}")
        return value

    text = " ".join(str(raw).strip().split())
    if not text:
        raise CoordinateError(f"Missing {label}")

    if _DECIMAL_RE.match(text):
        return float(text)

    # Minutes or seconds of exactly 60 only warn in astropy; treat them as bad input.
    with warnings.catch_warnings():
        warnings.simplefilter("error", AstropyWarning)
        try:
            return float(Angle(text, unit=unit).to_value(unit))
        except (ValueError, AstropyWarning) as exc:
            raise CoordinateError(f"Unrecognized {label}: {raw!r}") from exc


def parse_ra_hours(raw: str | float | int | None) -> float:
    hours = _parse_value(raw, u.hourangle, "right ascension")
    if not 0.0 <= hours < 24.0:
        raise CoordinateError(f"Right ascension out of range [0, 24): {raw!r}")
    return hours


def parse_dec_degrees(raw: str | float | int | None) -> float:
    degrees = _parse_value(raw, u.deg, "declination")
    if not -90.0 <= degrees <= 90.0:
        raise CoordinateError(f"Declination out of range [-90, 90]: {raw!r}")
    return degrees


def format_ra_hms(ra_hours: float, precision: int = 2) -> str:
    return Angle(ra_hours, unit=u.hourangle).to_string(
        unit=u.hourangle,
        sep=":",
        precision=precision,
        pad=True,
    )


def format_dec_dms(dec_degrees: float, precision: int = 1) -> str:
    return Angle(dec_degrees, unit=u.deg).to_string(
        unit=u.deg,
        sep=":",
        precision=precision,
        pad=True,
        alwayssign=True,
    )
