import math
import unittest

from astrofolio_catalog.coordinates import (
    format_dec_dms,
    format_ra_hms,
    parse_dec_degrees,
    parse_ra_hours,
)
from astrofolio_catalog.exceptions import CoordinateError


class RightAscensionTests(unittest.TestCase):
    def test_sexagesimal_shapes(self) -> None:
        expected = 5 + 34 / 60 + 31.94 / 3600
        self.assertAlmostEqual(parse_ra_hours("05:34:31.94"), expected, places=9)
        self.assertAlmostEqual(parse_ra_hours("05 34 31.94"), expected, places=9)
        self.assertAlmostEqual(parse_ra_hours("05h34m31.94s"), expected, places=9)

    def test_decimal_minutes_and_decimal_hours(self) -> None:
        self.assertAlmostEqual(parse_ra_hours("20 58.8"), 20.98, places=9)
        self.assertAlmostEqual(parse_ra_hours("5.5758"), 5.5758, places=9)
        self.assertAlmostEqual(parse_ra_hours(12), 12.0, places=9)

    def test_out_of_range_and_garbage(self) -> None:
        for raw in ("24:00:00", "12:61:00", "12:30:75", "not-a-ra", "", None, math.nan, "-01:00:00"):
            with self.subTest(raw=raw):
                with self.assertRaises(CoordinateError):
                    parse_ra_hours(raw)

    def test_fractional_minutes_cannot_take_seconds(self) -> None:
        with self.assertRaises(CoordinateError):
            parse_ra_hours("05 34.5 10")


class DeclinationTests(unittest.TestCase):
    def test_signed_sexagesimal(self) -> None:
        self.assertAlmostEqual(parse_dec_degrees("+22:00:52.2"), 22 + 52.2 / 3600, places=9)
        self.assertAlmostEqual(parse_dec_degrees("-05 23 28"), -(5 + 23 / 60 + 28 / 3600), places=9)
        self.assertAlmostEqual(parse_dec_degrees("+41d16m09s"), 41 + 16 / 60 + 9 / 3600, places=9)

    def test_negative_zero_degrees_keeps_sign(self) -> None:
        self.assertAlmostEqual(parse_dec_degrees("-00 30 00"), -0.5, places=9)
        self.assertAlmostEqual(parse_dec_degrees("-00 30.0"), -0.5, places=9)

    def test_range_limits(self) -> None:
        self.assertEqual(parse_dec_degrees("-90"), -90.0)
        self.assertEqual(parse_dec_degrees("+90:00:00"), 90.0)
        with self.assertRaises(CoordinateError):
            parse_dec_degrees("+91 00")
        with self.assertRaises(CoordinateError):
            parse_dec_degrees("+45:60:00")


class FormattingTests(unittest.TestCase):
    def test_format_values(self) -> None:
        self.assertEqual(format_ra_hms(5.5), "05:30:00.00")
        self.assertEqual(format_dec_dms(-0.5), "-00:30:00.0")
        self.assertEqual(format_dec_dms(22.5), "+22:30:00.0")

    def test_formatted_strings_parse_back(self) -> None:
        for ra_hours, dec_degrees in ((0.7123, 41.269), (5.5755, -5.3911), (20.98, 44.3333)):
            with self.subTest(ra=ra_hours, dec=dec_degrees):
                self.assertAlmostEqual(parse_ra_hours(format_ra_hms(ra_hours)), ra_hours, places=5)
                self.assertAlmostEqual(parse_dec_degrees(format_dec_dms(dec_degrees)), dec_degrees, places=4)


if __name__ == "__main__":
    unittest.main()
