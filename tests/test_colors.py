"""
Tests for colors -- hex parsing, 8-bit to 6-bit scaling, and ColorSet.

Tests cover:
- decode_color() with and without '#' prefix
- Floor division by 4 for every channel
- Rejection of wrong lengths and non-hex characters
- Color.from_rgb() range checks
- ColorSet exactly-7 invariant (empty, short, oversized)
- Default palette and resolve_colors() fallback
- parse_color_list() comma splitting
"""

import unittest

import pytest

from firefly.colors import (
    COLOR_SCALE_DIVISOR,
    DEFAULT_PALETTE,
    NATIVE_CHANNEL_MAX,
    ZONE_COUNT,
    Color,
    ColorSet,
    decode_color,
    parse_color_list,
    resolve_colors,
)
from firefly.exceptions import InvalidColorCount, InvalidColorFormat


class TestDecodeColor(unittest.TestCase):
    """Test decode_color()."""

    def test_white(self):
        self.assertEqual(decode_color("#ffffff"), Color(63, 63, 63))

    def test_black_without_prefix(self):
        self.assertEqual(decode_color("000000"), Color(0, 0, 0))

    def test_magenta(self):
        self.assertEqual(decode_color("#ff00ff"), Color(63, 0, 63))

    def test_uppercase(self):
        self.assertEqual(decode_color("#FF8000"), Color(63, 32, 0))

    def test_floor_division(self):
        """0x03 -> 0, 0x04 -> 1, 0x07 -> 1 (truncating, not rounding)."""
        self.assertEqual(decode_color("030407"), Color(0, 1, 1))

    def test_surrounding_whitespace(self):
        self.assertEqual(decode_color("  #0000ff "), Color(0, 0, 63))

    def test_returns_color_tuple(self):
        color = decode_color("#102030")
        self.assertIsInstance(color, Color)
        self.assertEqual(len(color), 3)
        self.assertEqual(color.to_bytes(), bytes([0x10 // 4, 0x20 // 4, 0x30 // 4]))

    def test_short_string(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color("#fff")

    def test_long_string(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color("#fffffff")

    def test_non_hex(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color("gggggg")

    def test_empty(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color("")

    def test_only_prefix(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color("#")

    def test_double_prefix(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color("##ffffff")

    def test_int_parser_leniency_rejected(self):
        """Signs, underscores and 0x prefixes that int() accepts are invalid."""
        for value in ("+fffff", "ff_fff", "0xffff", "ff fff"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidColorFormat):
                    decode_color(value)

    def test_not_a_string(self):
        with self.assertRaises(InvalidColorFormat):
            decode_color(0xFFFFFF)

    def test_error_is_value_error(self):
        with self.assertRaises(ValueError):
            decode_color("zzzzzz")


@pytest.mark.parametrize("value", [
    "000000", "#000000", "ffffff", "#123456", "abcdef", "#fedcba", "7f7f7f", "#80ff01",
])
def test_decode_matches_bytewise_division(value):
    digits = value.lstrip('#')
    expected = [int(digits[i:i + 2], 16) // COLOR_SCALE_DIVISOR for i in (0, 2, 4)]
    color = decode_color(value)
    assert list(color) == expected
    assert all(0 <= channel <= NATIVE_CHANNEL_MAX for channel in color)


class TestColorFromRgb(unittest.TestCase):
    """Test Color.from_rgb()."""

    def test_scaling(self):
        self.assertEqual(Color.from_rgb(255, 128, 3), Color(63, 32, 0))

    def test_out_of_range(self):
        with self.assertRaises(InvalidColorFormat):
            Color.from_rgb(256, 0, 0)
        with self.assertRaises(InvalidColorFormat):
            Color.from_rgb(0, -1, 0)

    def test_non_integer(self):
        with self.assertRaises(InvalidColorFormat):
            Color.from_rgb(1.5, 0, 0)


class TestColorSet(unittest.TestCase):
    """Test the exactly-7 ColorSet container."""

    def _colors(self, n):
        return tuple(Color(i, i, i) for i in range(n))

    def test_seven_colors(self):
        cs = ColorSet(self._colors(7))
        self.assertEqual(len(cs), ZONE_COUNT)
        self.assertEqual(cs[6], Color(6, 6, 6))
        self.assertEqual(list(cs), list(self._colors(7)))

    def test_empty_rejected(self):
        with self.assertRaises(InvalidColorCount) as ctx:
            ColorSet(())
        self.assertEqual(ctx.exception.count, 0)

    def test_short_rejected(self):
        with self.assertRaises(InvalidColorCount):
            ColorSet(self._colors(6))

    def test_oversized_rejected(self):
        with self.assertRaises(InvalidColorCount) as ctx:
            ColorSet(self._colors(8))
        self.assertEqual(ctx.exception.count, 8)

    def test_list_input_stored_as_tuple(self):
        cs = ColorSet(list(self._colors(7)))
        self.assertIsInstance(cs.colors, tuple)

    def test_non_color_rejected(self):
        with self.assertRaises(InvalidColorFormat):
            ColorSet(((1, 2, 3),) * 7)

    def test_channel_above_native_max_rejected(self):
        colors = list(self._colors(6)) + [Color(64, 0, 0)]
        with self.assertRaises(InvalidColorFormat):
            ColorSet(tuple(colors))

    def test_non_int_channel_rejected(self):
        colors = list(self._colors(6)) + [Color(1.5, 0, 0)]
        with self.assertRaises(InvalidColorFormat):
            ColorSet(tuple(colors))

    def test_bool_channel_rejected(self):
        colors = list(self._colors(6)) + [Color(True, 0, 0)]
        with self.assertRaises(InvalidColorFormat):
            ColorSet(tuple(colors))

    def test_frozen(self):
        cs = ColorSet(self._colors(7))
        with self.assertRaises(Exception):
            cs.colors = ()

    def test_to_bytes(self):
        cs = ColorSet(self._colors(7))
        data = cs.to_bytes()
        self.assertEqual(len(data), 21)
        self.assertEqual(data[18:21], bytes([6, 6, 6]))

    def test_from_hex_count_checked_before_decoding(self):
        """A wrong count is reported as a count error even with bad strings."""
        with self.assertRaises(InvalidColorCount):
            ColorSet.from_hex(["nothex"] * 3)

    def test_from_hex_bad_color(self):
        values = list(DEFAULT_PALETTE[:6]) + ["#12345"]
        with self.assertRaises(InvalidColorFormat):
            ColorSet.from_hex(values)

    def test_default_palette(self):
        cs = ColorSet.default()
        self.assertEqual(cs[0], Color(63, 0, 0))
        self.assertEqual(cs[1], Color(0, 63, 0))
        self.assertEqual(cs[2], Color(63, 63, 0))
        self.assertEqual(cs[3], Color(0, 0, 63))
        self.assertEqual(cs[4], Color(0, 63, 63))
        self.assertEqual(cs[5], Color(63, 0, 63))
        self.assertEqual(cs[6], Color(63, 63, 63))

    def test_coerce_passthrough(self):
        cs = ColorSet.default()
        self.assertIs(ColorSet.coerce(cs), cs)

    def test_coerce_sequence(self):
        cs = ColorSet.coerce(list(self._colors(7)))
        self.assertIsInstance(cs, ColorSet)


class TestParseColorList(unittest.TestCase):

    def test_empty(self):
        self.assertEqual(parse_color_list(""), [])
        self.assertEqual(parse_color_list(None), [])

    def test_split_and_strip(self):
        self.assertEqual(parse_color_list("#ff0000, 00ff00 ,#0000ff"),
                         ["#ff0000", "00ff00", "#0000ff"])

    def test_blank_is_empty(self):
        self.assertEqual(parse_color_list("   "), [])

    def test_keeps_empty_items(self):
        self.assertEqual(parse_color_list("ff0000,,00ff00,"), ["ff0000", "", "00ff00", ""])

    def test_commas_only(self):
        self.assertEqual(parse_color_list(",,,,,,,"), [""] * 8)


class TestResolveColors(unittest.TestCase):

    def test_no_values_uses_default(self):
        self.assertEqual(resolve_colors([]), ColorSet.default())

    def test_no_values_uses_fallback(self):
        fallback = ["#000000"] * 7
        self.assertEqual(resolve_colors([], fallback), ColorSet((Color(0, 0, 0),) * 7))

    def test_seven_values(self):
        cs = resolve_colors(["ffffff"] * 7)
        self.assertEqual(cs[3], Color(63, 63, 63))

    def test_wrong_count_is_fatal(self):
        for n in (1, 6, 8):
            with self.subTest(n=n):
                with self.assertRaises(InvalidColorCount):
                    resolve_colors(["ffffff"] * n)
