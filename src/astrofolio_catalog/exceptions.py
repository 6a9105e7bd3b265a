from __future__ import annotations


class CatalogError(Exception):
    """Base class for catalog subsystem errors."""


class UnknownCatalogError(CatalogError, ValueError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"Unknown catalog: {tag!r}")
        self.tag = tag


class CatalogFormatError(CatalogError, ValueError):
    """A source file cannot be read as a catalog at all (missing header, bad layout)."""


class CoordinateError(CatalogError, ValueError):
    """A right ascension or declination string could not be parsed."""


class RowError(CatalogError, ValueError):
    """A single source row could not be turned into a catalog object."""

    def __init__(self, message: str, *, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number
