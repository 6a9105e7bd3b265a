"""SQLite storage for catalog objects.

One row per ``(catalog, designation)``. Imports replace a whole catalog at a
time: the catalog's rows are deleted and the new rows written in batches inside
a single transaction, so a failed import leaves the previous data in place.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any, Iterable, Iterator

import pandas as pd

from astrofolio_catalog.normalization import normalize_designation, normalize_text
from astrofolio_catalog.schema import CATALOG_REGISTRY, OBJECT_COLUMNS, Catalog, CatalogObject

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 100

SCHEMA = """
CREATE TABLE IF NOT EXISTS catalogs (
    code TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    total_objects INTEGER DEFAULT 0,
    source_url TEXT
);

CREATE TABLE IF NOT EXISTS objects (
    id INTEGER PRIMARY KEY,
    catalog TEXT NOT NULL REFERENCES catalogs(code),
    designation TEXT NOT NULL,
    common_name TEXT,
    object_type TEXT NOT NULL DEFAULT 'Unknown',
    constellation TEXT NOT NULL DEFAULT '',
    ra_hours REAL NOT NULL,
    dec_degrees REAL NOT NULL,
    magnitude REAL,
    angular_size TEXT,
    distance TEXT,
    notes TEXT NOT NULL DEFAULT '',
    aliases TEXT NOT NULL DEFAULT '',
    UNIQUE(catalog, designation)
);

CREATE INDEX IF NOT EXISTS idx_objects_designation ON objects(designation);
CREATE INDEX IF NOT EXISTS idx_objects_common_name ON objects(common_name);
CREATE INDEX IF NOT EXISTS idx_objects_type ON objects(object_type);
CREATE INDEX IF NOT EXISTS idx_objects_constellation ON objects(constellation);
"""

_SELECT_COLUMNS = ", ".join(OBJECT_COLUMNS)
_INSERT_SQL = (
    f"INSERT OR REPLACE INTO objects ({_SELECT_COLUMNS}) "
    f"VALUES ({', '.join('?' for _ in OBJECT_COLUMNS)})"
)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _batched(values: Iterable[Any], size: int) -> Iterator[list[Any]]:
    batch: list[Any] = []
    for value in values:
        batch.append(value)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch


class CatalogStore:
    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self.db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> "CatalogStore":
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    def connect(self) -> None:
        if self._conn is not None:
            return
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.executescript(SCHEMA)
        self._seed_catalogs()
        self._conn.commit()

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _seed_catalogs(self) -> None:
        assert self._conn is not None
        self._conn.executemany(
            """
            INSERT INTO catalogs (code, name, description, total_objects, source_url)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(code) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                total_objects = excluded.total_objects,
                source_url = excluded.source_url
            """,
            [
                (info.code, info.name, info.description, info.total_objects, info.source_url)
                for info in CATALOG_REGISTRY.values()
            ],
        )

    def replace_catalog(
        self,
        catalog: Catalog,
        objects: Iterable[CatalogObject],
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> int:
        """Truncate ``catalog`` and write ``objects`` in batches; returns rows stored."""
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        conn = self.connection
        with conn:
            deleted = conn.execute("DELETE FROM objects WHERE catalog = ?", (catalog.value,)).rowcount
            logger.debug("Cleared %d existing %s rows", deleted, catalog.value)

            for batch in _batched(objects, batch_size):
                records = [obj.to_record() for obj in batch]
                conn.executemany(_INSERT_SQL, [tuple(record[column] for column in OBJECT_COLUMNS) for record in records])

        return self.count(catalog)

    def count(self, catalog: Catalog | None = None) -> int:
        if catalog is None:
            row = self.connection.execute("SELECT COUNT(*) FROM objects").fetchone()
        else:
            row = self.connection.execute(
                "SELECT COUNT(*) FROM objects WHERE catalog = ?", (catalog.value,)
            ).fetchone()
        return int(row[0])

    def get_object(self, catalog: Catalog, designation: str) -> CatalogObject | None:
        row = self.connection.execute(
            f"SELECT {_SELECT_COLUMNS} FROM objects WHERE catalog = ? AND designation = ?",
            (catalog.value, designation),
        ).fetchone()
        return self._row_to_object(row) if row else None

    def find_by_designation(self, designation: str) -> list[CatalogObject]:
        rows = self.connection.execute(
            f"SELECT {_SELECT_COLUMNS} FROM objects WHERE UPPER(designation) = UPPER(?) ORDER BY catalog",
            (designation,),
        ).fetchall()
        return [self._row_to_object(row) for row in rows]

    def find_by_alias(self, name: str) -> list[CatalogObject]:
        """Objects whose alternate names or common name match ``name`` (spacing and case ignored)."""
        key = normalize_text(normalize_designation(name))
        if not key:
            return []
        matches: list[CatalogObject] = []
        for obj in self.iter_objects():
            candidates = [*obj.aliases, obj.common_name or ""]
            if any(normalize_text(normalize_designation(value)) == key for value in candidates):
                matches.append(obj)
        return matches

    def objects_in_catalog(self, catalog: Catalog, limit: int | None = None) -> list[CatalogObject]:
        sql = f"SELECT {_SELECT_COLUMNS} FROM objects WHERE catalog = ? ORDER BY designation"
        params: list[Any] = [catalog.value]
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return [self._row_to_object(row) for row in self.connection.execute(sql, params).fetchall()]

    def iter_objects(self) -> Iterator[CatalogObject]:
        cursor = self.connection.execute(f"SELECT {_SELECT_COLUMNS} FROM objects ORDER BY catalog, designation")
        for row in cursor:
            yield self._row_to_object(row)

    def search_rows(self, query: str, limit: int, *, compact: str | None = None) -> list[CatalogObject]:
        """LIKE search; ``compact`` is the query's designation form (``NGC 224`` -> ``NGC224``)
        and is matched against designations and aliases alongside ``query``."""
        compact = compact or query
        params = {
            "pattern": f"%{_escape_like(query)}%",
            "prefix": f"{_escape_like(query)}%",
            "compact_pattern": f"%{_escape_like(compact)}%",
            "compact_prefix": f"{_escape_like(compact)}%",
            "limit": int(limit),
        }
        rows = self.connection.execute(
            f"""
            SELECT {_SELECT_COLUMNS} FROM objects
            WHERE designation LIKE :pattern ESCAPE '\\'
               OR common_name LIKE :pattern ESCAPE '\\'
               OR object_type LIKE :pattern ESCAPE '\\'
               OR aliases LIKE :pattern ESCAPE '\\'
               OR designation LIKE :compact_pattern ESCAPE '\\'
               OR aliases LIKE :compact_pattern ESCAPE '\\'
            ORDER BY
                CASE
                    WHEN designation LIKE :prefix ESCAPE '\\' THEN 0
                    WHEN designation LIKE :compact_prefix ESCAPE '\\' THEN 0
                    ELSE 1
                END,
                designation COLLATE NOCASE ASC,
                catalog ASC
            LIMIT :limit
            """,
            params,
        ).fetchall()
        return [self._row_to_object(row) for row in rows]

    def objects_frame(self, catalog: Catalog | None = None) -> pd.DataFrame:
        sql = f"SELECT {_SELECT_COLUMNS} FROM objects"
        params: tuple[Any, ...] = ()
        if catalog is not None:
            sql += " WHERE catalog = ?"
            params = (catalog.value,)
        sql += " ORDER BY catalog, designation"
        return pd.read_sql_query(sql, self.connection, params=params)

    def catalog_stats(self) -> list[dict[str, Any]]:
        rows = self.connection.execute(
            """
            SELECT c.code, c.name, c.total_objects, COUNT(o.id) AS actual_objects
            FROM catalogs c
            LEFT JOIN objects o ON o.catalog = c.code
            GROUP BY c.code
            ORDER BY c.name ASC
            """
        ).fetchall()
        return [
            {
                "code": row["code"],
                "name": row["name"],
                "total_objects": int(row["total_objects"] or 0),
                "actual_objects": int(row["actual_objects"]),
            }
            for row in rows
        ]

    def _row_to_object(self, row: sqlite3.Row) -> CatalogObject:
        return CatalogObject.from_record({column: row[column] for column in OBJECT_COLUMNS})
