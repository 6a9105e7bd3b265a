from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from astrofolio_catalog.exceptions import CatalogFormatError

logger = logging.getLogger(__name__)

DIALECT_PLUGIN = "plugin"
DIALECT_OPENNGC = "openngc"
DIALECT_NGC2000 = "ngc2000"


@dataclass
class RawRow:
    line_number: int
    fields: dict[str, str] = field(default_factory=dict)
    error: str | None = None

    @property
    def malformed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class FixedWidthColumn:
    name: str
    first_byte: int
    last_byte: int
    required: bool = False


@dataclass(frozen=True)
class FixedWidthLayout:
    """Byte layout of a fixed-width export, numbered as in a VizieR ReadMe (1-based, inclusive)."""

    name: str
    columns: tuple[FixedWidthColumn, ...]
    dialect: str = DIALECT_PLUGIN

    @property
    def names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def colspecs(self) -> list[tuple[int, int]]:
        return [(column.first_byte - 1, column.last_byte) for column in self.columns]

    @property
    def min_line_length(self) -> int:
        required = [column.first_byte for column in self.columns if column.required]
        return max(required) if required else 1


# VizieR VII/118 (NGC 2000.0, Sinnott 1988), ngc2000.dat
NGC2000_LAYOUT = FixedWidthLayout(
    name="VII/118",
    dialect=DIALECT_NGC2000,
    columns=(
        FixedWidthColumn("Name", 1, 5, required=True),
        FixedWidthColumn("Type", 7, 9),
        FixedWidthColumn("RAh", 11, 12, required=True),
        FixedWidthColumn("RAm", 14, 17, required=True),
        FixedWidthColumn("DE-", 20, 20),
        FixedWidthColumn("DEd", 21, 22, required=True),
        FixedWidthColumn("DEm", 24, 25, required=True),
        FixedWidthColumn("Source", 27, 27),
        FixedWidthColumn("Const", 30, 32),
        FixedWidthColumn("l_size", 33, 33),
        FixedWidthColumn("size", 34, 38),
        FixedWidthColumn("mag", 41, 44),
        FixedWidthColumn("n_mag", 45, 45),
        FixedWidthColumn("Desc", 47, 96),
    ),
)

LAYOUTS: dict[str, FixedWidthLayout] = {
    "ngc2000": NGC2000_LAYOUT,
    "vii/118": NGC2000_LAYOUT,
}


def get_layout(name: str) -> FixedWidthLayout:
    layout = LAYOUTS.get(name.strip().lower())
    if layout is None:
        known = ", ".join(sorted(LAYOUTS))
        raise CatalogFormatError(f"Unknown fixed-width layout '{name}' (known: {known})")
    return layout


def sniff_delimiter(header_line: str) -> str:
    return ";" if header_line.count(";") > header_line.count(",") else ","


def detect_dialect(header: list[str]) -> str:
    columns = {column.strip() for column in header}
    if {"Name", "RA", "Dec"}.issubset(columns):
        return DIALECT_OPENNGC
    return DIALECT_PLUGIN


def read_delimited_rows(
    path: Path,
    *,
    delimiter: str | None = None,
    encoding: str = "utf-8-sig",
) -> tuple[list[str], list[RawRow]]:
    """Read a header-first delimited file.

    Rows with fewer fields than the header come back marked malformed rather
    than raising, so one bad row never stops the rest of the file.
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog source file not found: {path}")

    with path.open("r", encoding=encoding, errors="replace", newline="") as handle:
        header_line = handle.readline()
        if not header_line.strip():
            raise CatalogFormatError(f"Catalog source has no header row: {path}")

        resolved_delimiter = delimiter or sniff_delimiter(header_line)
        header = [column.strip() for column in next(csv.reader([header_line], delimiter=resolved_delimiter))]
        if len(header) < 2:
            raise CatalogFormatError(f"Catalog header has fewer than two columns: {path}")

        rows: list[RawRow] = []
        reader = csv.reader(handle, delimiter=resolved_delimiter)
        for values in reader:
            line_number = reader.line_num + 1
            if not values or all(not value.strip() for value in values):
                continue
            if len(values) < len(header):
                rows.append(
                    RawRow(
                        line_number=line_number,
                        error=f"expected {len(header)} fields, found {len(values)}",
                    )
                )
                continue
            rows.append(
                RawRow(
                    line_number=line_number,
                    fields={column: values[index].strip() for index, column in enumerate(header)},
                )
            )

    logger.debug("Read %d rows from %s (delimiter=%r)", len(rows), path, resolved_delimiter)
    return header, rows


def _is_skippable_fixed_width_line(line: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return True
    return set(stripped) <= {"-", "=", " ", "+", "|"}


def read_fixed_width_rows(
    path: Path,
    layout: FixedWidthLayout,
    *,
    encoding: str = "latin-1",
) -> list[RawRow]:
    if not path.exists():
        raise FileNotFoundError(f"Catalog source file not found: {path}")

    text = path.read_text(encoding=encoding, errors="replace")

    rows_by_line: dict[int, RawRow] = {}
    kept_lines: list[str] = []
    kept_numbers: list[int] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if _is_skippable_fixed_width_line(line):
            continue
        if len(line.rstrip()) < layout.min_line_length:
            rows_by_line[line_number] = RawRow(
                line_number=line_number,
                error=f"line too short for layout {layout.name} ({len(line.rstrip())} < {layout.min_line_length})",
            )
            continue
        kept_lines.append(line)
        kept_numbers.append(line_number)

    if kept_lines:
        frame = pd.read_fwf(
            io.StringIO("\n".join(kept_lines)),
            colspecs=layout.colspecs,
            names=layout.names,
            header=None,
            dtype=str,
            keep_default_na=False,
        ).fillna("")
        required = [column.name for column in layout.columns if column.required]
        for line_number, record in zip(kept_numbers, frame.to_dict(orient="records")):
            fields = {name: str(value).strip() for name, value in record.items()}
            blank = [name for name in required if not fields.get(name)]
            rows_by_line[line_number] = RawRow(
                line_number=line_number,
                fields=fields,
                error=f"missing required columns: {', '.join(blank)}" if blank else None,
            )

    rows = [rows_by_line[number] for number in sorted(rows_by_line)]
    logger.debug("Read %d fixed-width rows from %s (layout %s)", len(rows), path, layout.name)
    return rows
