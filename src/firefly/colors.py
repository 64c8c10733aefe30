"""
Color parsing and scaling for the keyboard's seven lighting zones.

The firmware works with 6-bit channels (0-63), not the usual 8-bit (0-255),
so every channel parsed from a hex string is divided by 4 before it goes on
the wire::

    "#ff8000" -> (255, 128, 0) -> Color(63, 32, 0)
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from typing import Iterable, Iterator, List, NamedTuple, Sequence, Tuple, Union

from .exceptions import InvalidColorCount, InvalidColorFormat

log = logging.getLogger(__name__)

# Number of independently colorable zones on the keyboard
ZONE_COUNT = 7

# 8-bit -> 6-bit channel scaling (native intensity range 0-63)
COLOR_SCALE_DIVISOR = 4
NATIVE_CHANNEL_MAX = 255 // COLOR_SCALE_DIVISOR

HEX_COLOR_LENGTH = 6
_HEX_DIGITS = frozenset(string.hexdigits)

# Zone 0..6, in the order the firmware expects
DEFAULT_PALETTE: Tuple[str, ...] = (
    "#ff0000",
    "#00ff00",
    "#ffff00",
    "#0000ff",
    "#00ffff",
    "#ff00ff",
    "#ffffff",
)


class Color(NamedTuple):
    """One zone color in device-native scale (each channel 0-63)."""
    red: int
    green: int
    blue: int

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> 'Color':
        """Scale 8-bit channels (0-255) down to the device range."""
        channels = (red, green, blue)
        for value in channels:
            if not isinstance(value, int) or not 0 <= value <= 255:
                raise InvalidColorFormat(channels, "channels must be integers 0-255")
        return cls(*(value // COLOR_SCALE_DIVISOR for value in channels))

    def to_bytes(self) -> bytes:
        return bytes(self)


def decode_color(value: str) -> Color:
    """Parse ``rrggbb`` / ``#rrggbb`` into a device-scaled Color.

    Raises:
        InvalidColorFormat: Wrong length or a non-hex character.
    """
    if not isinstance(value, str):
        raise InvalidColorFormat(value, "expected a string")

    digits = value.strip()
    if digits.startswith('#'):
        digits = digits[1:]

    if len(digits) != HEX_COLOR_LENGTH:
        raise InvalidColorFormat(
            value, f"expected {HEX_COLOR_LENGTH} hex digits, got {len(digits)}")
    # int(x, 16) tolerates '+', '_' and whitespace; the device format doesn't
    if not _HEX_DIGITS.issuperset(digits):
        raise InvalidColorFormat(value, "contains non-hex characters")

    channels = [int(digits[i:i + 2], 16) for i in range(0, HEX_COLOR_LENGTH, 2)]
    return Color.from_rgb(*channels)


def parse_color_list(value: str) -> List[str]:
    """Split a comma-delimited color list.

    ``""``, blank and ``None`` give an empty list (meaning: use the default
    palette).  Otherwise every item is kept, empty ones included, so
    ``"a,b,"`` is three items and fails the count or format check later.
    """
    if not value or not value.strip():
        return []
    return [item.strip() for item in value.split(',')]


@dataclass(frozen=True)
class ColorSet:
    """Exactly seven zone colors, zone 0 first.

    The count is checked on construction, so any ColorSet that exists is
    safe to encode.  Short or long input is rejected, never padded or cut.
    """
    colors: Tuple[Color, ...]

    def __post_init__(self):
        colors = tuple(self.colors)
        if len(colors) != ZONE_COUNT:
            raise InvalidColorCount(len(colors), ZONE_COUNT)
        for color in colors:
            if not isinstance(color, Color):
                raise InvalidColorFormat(color, "expected a Color")
            if any(isinstance(channel, bool) or not isinstance(channel, int)
                   for channel in color):
                raise InvalidColorFormat(color, "channels must be integers")
            if any(not 0 <= channel <= NATIVE_CHANNEL_MAX for channel in color):
                raise InvalidColorFormat(
                    color, f"channels must be 0-{NATIVE_CHANNEL_MAX} in device scale")
        object.__setattr__(self, 'colors', colors)

    @classmethod
    def from_hex(cls, values: Iterable[str]) -> 'ColorSet':
        """Decode a sequence of hex strings (count is checked first)."""
        values = list(values)
        if len(values) != ZONE_COUNT:
            raise InvalidColorCount(len(values), ZONE_COUNT)
        return cls(tuple(decode_color(v) for v in values))

    @classmethod
    def default(cls) -> 'ColorSet':
        return cls.from_hex(DEFAULT_PALETTE)

    @classmethod
    def coerce(cls, colors: Union['ColorSet', Sequence[Color]]) -> 'ColorSet':
        """Return *colors* as a ColorSet, validating plain sequences."""
        if isinstance(colors, ColorSet):
            return colors
        return cls(tuple(colors))

    def to_bytes(self) -> bytes:
        """Zone triples concatenated in order (21 bytes)."""
        return b''.join(color.to_bytes() for color in self.colors)

    def __iter__(self) -> Iterator[Color]:
        return iter(self.colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, index: int) -> Color:
        return self.colors[index]


def resolve_colors(values: Sequence[str], fallback: Sequence[str] = DEFAULT_PALETTE) -> ColorSet:
    """Build the ColorSet for a run from user-supplied hex strings.

    No values means *fallback* (the default palette unless configured
    otherwise).  Any count other than 0 or 7 is an error.
    """
    if not values:
        log.debug("No colors given, using palette %s", ",".join(fallback))
        return ColorSet.from_hex(fallback)
    return ColorSet.from_hex(values)
