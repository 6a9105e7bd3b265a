from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import requests

from astrofolio_catalog.export import download_source, export_catalog
from astrofolio_catalog.importer import import_catalog
from astrofolio_catalog.schema import OBJECT_COLUMNS, Catalog, CatalogObject
from astrofolio_catalog.store import CatalogStore


def _messier_objects() -> list[CatalogObject]:
    return [
        CatalogObject(
            Catalog.MESSIER,
            "M1",
            5.575538888888889,
            22.0145,
            object_type="Supernova Remnant",
            common_name="Crab Nebula",
            constellation="Tau",
            magnitude=8.4,
            angular_size="6×4'",
            distance="6500 ly",
            notes="Remnant of SN 1054, first seen by Chinese astronomers",
            aliases=["NGC1952", "Taurus A"],
        ),
        CatalogObject(Catalog.MESSIER, "M13", 16.694888888888887, 36.46027777777778, object_type="Globular Cluster"),
        CatalogObject(Catalog.MESSIER, "M31", 0.7123, 41.2692, common_name="Andromeda Galaxy", magnitude=3.44),
        CatalogObject(Catalog.MESSIER, "M42", 5.5881, -5.3911, common_name="Orion Nebula", aliases=["NGC1976"]),
        CatalogObject(Catalog.MESSIER, "M57", 18.8931, 33.0292, common_name="Ring Nebula"),
    ]


class StoreTests(unittest.TestCase):
    def test_replace_catalog_batches_and_truncates(self) -> None:
        with CatalogStore() as store:
            self.assertEqual(store.replace_catalog(Catalog.MESSIER, _messier_objects(), batch_size=2), 5)
            store.replace_catalog(Catalog.NGC, [CatalogObject(Catalog.NGC, "NGC224", 0.7123, 41.2692)])
            self.assertEqual(store.replace_catalog(Catalog.MESSIER, _messier_objects()[:2]), 2)
            self.assertEqual(store.count(), 3)
            self.assertEqual(store.count(Catalog.NGC), 1)
            with self.assertRaises(ValueError):
                store.replace_catalog(Catalog.MESSIER, [], batch_size=0)

    def test_lookups(self) -> None:
        with CatalogStore() as store:
            store.replace_catalog(Catalog.MESSIER, _messier_objects())
            m1 = store.get_object(Catalog.MESSIER, "M1")
            self.assertIsNone(store.get_object(Catalog.NGC, "M1"))
            self.assertEqual([obj.designation for obj in store.find_by_designation("m42")], ["M42"])
            self.assertEqual([obj.designation for obj in store.find_by_alias("NGC 1952")], ["M1"])
            self.assertEqual([obj.designation for obj in store.find_by_alias("ring nebula")], ["M57"])
            self.assertEqual(
                [obj.designation for obj in store.objects_in_catalog(Catalog.MESSIER, limit=2)],
                ["M1", "M13"],
            )

        assert m1 is not None
        self.assertEqual(m1.to_record(), _messier_objects()[0].to_record())
        self.assertEqual(m1.display_name, "M1 - Crab Nebula")

    def test_stats_and_frame(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            db_path = Path(tmp_dir) / "nested" / "catalog.db"
            with CatalogStore(db_path) as store:
                store.replace_catalog(Catalog.MESSIER, _messier_objects())
            with CatalogStore(db_path) as store:
                stats = {row["code"]: row for row in store.catalog_stats()}
                frame = store.objects_frame(Catalog.MESSIER)

        self.assertEqual(set(stats), {"M", "NGC", "IC", "C", "Sh"})
        self.assertEqual(stats["M"]["total_objects"], 110)
        self.assertEqual(stats["M"]["actual_objects"], 5)
        self.assertEqual(stats["NGC"]["total_objects"], 7840)
        self.assertEqual(stats["IC"]["actual_objects"], 0)
        self.assertEqual(list(frame.columns), OBJECT_COLUMNS)
        self.assertEqual(len(frame), 5)

        m13 = CatalogObject.from_record(frame[frame["designation"] == "M13"].iloc[0].to_dict())
        self.assertIsNone(m13.magnitude)
        self.assertIsNone(m13.common_name)
        self.assertEqual(m13.aliases, [])


class ExportTests(unittest.TestCase):
    def test_export_reimports_to_same_rows(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "export" / "messier.csv"
            with CatalogStore() as source:
                source.replace_catalog(Catalog.MESSIER, _messier_objects())
                written = export_catalog(source, "M", path)
                expected = [obj.to_record() for obj in source.objects_in_catalog(Catalog.MESSIER)]

            with CatalogStore() as target:
                result = import_catalog(target, path, Catalog.MESSIER)
                actual = [obj.to_record() for obj in target.objects_in_catalog(Catalog.MESSIER)]

        self.assertEqual(written, 5)
        self.assertEqual((result.imported, result.errors), (5, 0))
        self.assertEqual(actual, expected)

    def test_download_writes_response_body(self) -> None:
        session = mock.Mock()
        session.get.return_value = mock.Mock(content=b"Name;Type;RA;Dec\n", raise_for_status=mock.Mock())
        with tempfile.TemporaryDirectory() as tmp_dir:
            target = download_source(
                "https://example.invalid/NGC.csv",
                Path(tmp_dir) / "sources" / "NGC.csv",
                timeout=5.0,
                session=session,
            )
            body = target.read_bytes()

        session.get.assert_called_once_with("https://example.invalid/NGC.csv", timeout=5.0)
        self.assertEqual(body, b"Name;Type;RA;Dec\n")

    def test_download_raises_for_http_errors(self) -> None:
        response = mock.Mock(content=b"")
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        session = mock.Mock()
        session.get.return_value = response
        with tempfile.TemporaryDirectory() as tmp_dir:
            destination = Path(tmp_dir) / "NGC.csv"
            with self.assertRaises(requests.HTTPError):
                download_source("https://example.invalid/NGC.csv", destination, session=session)
            self.assertFalse(destination.exists())


if __name__ == "__main__":
    unittest.main()
