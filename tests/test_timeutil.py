"""
Unit tests for the HH:MM time helpers.

Intervals are half-open [start, end): touching endpoints never overlap.
"""

import unittest

from astroschedule import timeutil
from astroschedule.errors import InvalidTimeFormatError, InvalidTimeRangeError


class TestValidateFormat(unittest.TestCase):
    def test_accepts_24_hour_times(self) -> None:
        for value in ("00:00", "09:30", "12:00", "23:59"):
            timeutil.validate_format(value)

    def test_rejects_malformed_times(self) -> None:
        for value in ("24:00", "12:60", "9:00", "0930", "ab:cd", "", " 09:00"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTimeFormatError):
                    timeutil.validate_format(value)


class TestConversions(unittest.TestCase):
    def test_to_minutes(self) -> None:
        self.assertEqual(timeutil.to_minutes("00:00"), 0)
        self.assertEqual(timeutil.to_minutes("09:30"), 570)
        self.assertEqual(timeutil.to_minutes("23:59"), 1439)

    def test_to_minutes_malformed_raises(self) -> None:
        with self.assertRaises(InvalidTimeFormatError):
            timeutil.to_minutes("nope")

    def test_from_minutes(self) -> None:
        self.assertEqual(timeutil.from_minutes(570), "09:30")
        self.assertEqual(timeutil.from_minutes(0), "00:00")

    def test_format_time_pads_single_digit_hour(self) -> None:
        self.assertEqual(timeutil.format_time("9:05"), "09:05")
        self.assertEqual(timeutil.format_time(" 10:15 "), "10:15")
        with self.assertRaises(InvalidTimeFormatError):
            timeutil.format_time("9:5")

    def test_duration(self) -> None:
        self.assertEqual(timeutil.duration("09:00", "10:30"), 90)


class TestRangeAndOverlap(unittest.TestCase):
    def test_validate_range(self) -> None:
        timeutil.validate_range("09:00", "09:01")
        with self.assertRaises(InvalidTimeRangeError):
            timeutil.validate_range("10:00", "10:00")
        with self.assertRaises(InvalidTimeRangeError):
            timeutil.validate_range("11:00", "10:00")

    def test_partial_overlap(self) -> None:
        self.assertTrue(timeutil.overlaps("09:00", "10:00", "09:30", "10:30"))

    def test_containment(self) -> None:
        self.assertTrue(timeutil.overlaps("09:00", "12:00", "10:00", "11:00"))
        self.assertTrue(timeutil.overlaps("10:00", "11:00", "09:00", "12:00"))

    def test_touching_boundaries_do_not_overlap(self) -> None:
        self.assertFalse(timeutil.overlaps("09:00", "10:00", "10:00", "11:00"))
        self.assertFalse(timeutil.overlaps("10:00", "11:00", "09:00", "10:00"))

    def test_overlap_is_symmetric(self) -> None:
        cases = [
            ("09:00", "10:00", "09:30", "10:30"),
            ("09:00", "10:00", "10:00", "11:00"),
            ("08:00", "09:00", "13:00", "14:00"),
            ("08:00", "18:00", "12:00", "12:30"),
        ]
        for a, b, c, d in cases:
            with self.subTest(case=(a, b, c, d)):
                self.assertEqual(timeutil.overlaps(a, b, c, d), timeutil.overlaps(c, d, a, b))

    def test_accepts_minute_offsets(self) -> None:
        self.assertTrue(timeutil.overlaps(540, 600, 570, 630))
        self.assertFalse(timeutil.overlaps(540, 600, 600, 660))

    def test_compare(self) -> None:
        self.assertEqual(timeutil.compare("09:00", "10:00"), -1)
        self.assertEqual(timeutil.compare("10:00", "10:00"), 0)
        self.assertEqual(timeutil.compare("10:01", "10:00"), 1)


if __name__ == "__main__":
    unittest.main()
