import unittest

from astrofolio_catalog.exceptions import UnknownCatalogError
from astrofolio_catalog.normalization import (
    NGC2000_TYPE_MAP,
    OPENNGC_TYPE_MAP,
    catalog_for_designation,
    format_size,
    join_aliases,
    normalize_designation,
    normalize_object_type,
    normalize_text,
    split_aliases,
)
from astrofolio_catalog.schema import Catalog


class NormalizationTests(unittest.TestCase):
    def test_designation_normalization(self) -> None:
        self.assertEqual(normalize_designation("M 31"), "M31")
        self.assertEqual(normalize_designation("Messier 031"), "M31")
        self.assertEqual(normalize_designation("NGC 0224"), "NGC224")
        self.assertEqual(normalize_designation("ngc224a"), "NGC224A")
        self.assertEqual(normalize_designation("IC  434"), "IC434")
        self.assertEqual(normalize_designation("Caldwell 20"), "C20")
        self.assertEqual(normalize_designation("Sh 2-155"), "Sh2-155")
        self.assertEqual(normalize_designation("Sh2-155"), "Sh2-155")
        self.assertEqual(normalize_designation("  Barnard   33 "), "Barnard 33")
        self.assertEqual(normalize_designation(None), "")

    def test_text_normalization(self) -> None:
        self.assertEqual(normalize_text("M 31"), normalize_text("m31"))
        self.assertEqual(normalize_text("North-America Nebula"), "northamericanebula")
        self.assertEqual(normalize_text(None), "")

    def test_catalog_inference(self) -> None:
        self.assertIs(catalog_for_designation("M 42"), Catalog.MESSIER)
        self.assertIs(catalog_for_designation("NGC7000"), Catalog.NGC)
        self.assertIs(catalog_for_designation("IC 434"), Catalog.IC)
        self.assertIs(catalog_for_designation("C20"), Catalog.CALDWELL)
        self.assertIs(catalog_for_designation("Sh 2-155"), Catalog.SHARPLESS)
        self.assertIsNone(catalog_for_designation("Andromeda Galaxy"))
        self.assertIsNone(catalog_for_designation(""))

    def test_object_type_mapping(self) -> None:
        self.assertEqual(normalize_object_type("G", OPENNGC_TYPE_MAP), "Galaxy")
        self.assertEqual(normalize_object_type("OCl"), "Open Cluster")
        self.assertEqual(normalize_object_type("Gb", NGC2000_TYPE_MAP), "Globular Cluster")
        self.assertEqual(normalize_object_type("C+N"), "Cluster + Nebula")
        self.assertEqual(normalize_object_type("Dark Nebula"), "Dark Nebula")
        self.assertEqual(normalize_object_type("   "), "Unknown")
        self.assertEqual(normalize_object_type(None), "Unknown")

    def test_alias_lists(self) -> None:
        self.assertEqual(split_aliases(" NGC 1952 , Taurus A,,NGC 1952"), ["NGC 1952", "Taurus A"])
        self.assertEqual(split_aliases(None), [])
        self.assertEqual(join_aliases(["NGC224", " Andromeda Galaxy ", "NGC224"]), "NGC224, Andromeda Galaxy")

    def test_size_formatting(self) -> None:
        self.assertEqual(format_size(12.0, 7.0), "12×7'")
        self.assertEqual(format_size(177.83, 69.66), "177.83×69.66'")
        self.assertEqual(format_size(120.0), "120'")
        self.assertIsNone(format_size(None, 3.0))


class CatalogTagTests(unittest.TestCase):
    def test_parse_codes_and_names(self) -> None:
        self.assertIs(Catalog.parse("m"), Catalog.MESSIER)
        self.assertIs(Catalog.parse("Messier"), Catalog.MESSIER)
        self.assertIs(Catalog.parse("NGC"), Catalog.NGC)
        self.assertIs(Catalog.parse("index catalogue"), Catalog.IC)
        self.assertIs(Catalog.parse("caldwell"), Catalog.CALDWELL)
        self.assertIs(Catalog.parse("Sh2"), Catalog.SHARPLESS)
        self.assertIs(Catalog.parse(Catalog.IC), Catalog.IC)

    def test_unknown_tag(self) -> None:
        with self.assertRaises(UnknownCatalogError) as ctx:
            Catalog.parse("Abell")
        self.assertEqual(ctx.exception.tag, "Abell")
        self.assertIsInstance(ctx.exception, ValueError)


if __name__ == "__main__":
    unittest.main()
