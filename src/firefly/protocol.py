#!/usr/bin/env python3
"""
Command encoding for the 04D9:A1CD RGB keyboard lighting interface.

A lighting change is always three packets, sent in this order:

  1. Header:  8 bytes, HID SET_REPORT control transfer.
              Constant ``30 00 00 00 00 55 aa 00`` (mode-select preamble).
  2. Colors:  64 bytes, interrupt OUT transfer on EP 0x04.
              7 zones × (R, G, B) in device scale 0-63, then zero padding.
  3. Effect:  8 bytes, HID SET_REPORT control transfer.
              ``08 <effect> 3f 01 00 <color index> c4 3b``

The firmware never answers, so a malformed packet just produces wrong
lighting.  Bytes marked constant below must be reproduced exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

from .colors import Color, ColorSet, ZONE_COUNT
from .effects import Effect
from .exceptions import ColorIndexOutOfRange

# =========================================================================
# Constants
# =========================================================================

# Header packet (firmware handshake / mode select), never changes
HEADER_PAYLOAD = bytes([0x30, 0x00, 0x00, 0x00, 0x00, 0x55, 0xAA, 0x00])

# Color table: 7 zones × 3 channels, zero-padded to one interrupt report
COLOR_PAYLOAD_SIZE = 64
COLOR_DATA_SIZE = ZONE_COUNT * 3

# Effect packet layout
EFFECT_PAYLOAD_SIZE = 8
EFFECT_CMD = 0x08
EFFECT_OFFSET_CODE = 1
EFFECT_OFFSET_COLOR_INDEX = 5
_EFFECT_TEMPLATE = bytes([EFFECT_CMD, 0x00, 0x3F, 0x01, 0x00, 0x00, 0xC4, 0x3B])

# Color index: 0-6 = animate one zone, 7 = loop through all zones
COLOR_INDEX_LOOP = 7
COLOR_INDEX_MAX = COLOR_INDEX_LOOP


def validate_color_index(color_index: int) -> int:
    """Return *color_index* if it is 0-7, else raise ColorIndexOutOfRange."""
    if isinstance(color_index, bool) or not isinstance(color_index, int):
        raise ColorIndexOutOfRange(color_index, COLOR_INDEX_MAX)
    if not 0 <= color_index <= COLOR_INDEX_MAX:
        raise ColorIndexOutOfRange(color_index, COLOR_INDEX_MAX)
    return color_index


# =========================================================================
# Packet builders
# =========================================================================

class CommandEncoder:
    """Builds the three lighting packets."""

    @staticmethod
    def build_header() -> bytes:
        return HEADER_PAYLOAD

    @staticmethod
    def build_colors(colors: Union[ColorSet, Sequence[Color]]) -> bytes:
        """Build the 64-byte color table.

        Args:
            colors: ColorSet, or any sequence of exactly 7 Colors.

        Raises:
            InvalidColorCount: Not exactly 7 colors.
        """
        data = ColorSet.coerce(colors).to_bytes()
        return data + bytes(COLOR_PAYLOAD_SIZE - len(data))

    @staticmethod
    def build_effect(effect: Effect, color_index: int = COLOR_INDEX_LOOP) -> bytes:
        """Build the 8-byte effect selector.

        Raises:
            InvalidEffect: Unknown effect name or code.
            ColorIndexOutOfRange: color_index outside 0-7.
        """
        effect = Effect.coerce(effect)
        validate_color_index(color_index)

        packet = bytearray(_EFFECT_TEMPLATE)
        packet[EFFECT_OFFSET_CODE] = int(effect)
        packet[EFFECT_OFFSET_COLOR_INDEX] = color_index
        return bytes(packet)


# =========================================================================
# Public API
# =========================================================================

@dataclass(frozen=True)
class LightingCommand:
    """The three packets of one lighting change, in send order."""
    header: bytes
    colors: bytes
    effect: bytes

    def packets(self) -> Iterator[Tuple[str, bytes]]:
        """Yield ``(name, payload)`` in the order the firmware expects."""
        yield 'header', self.header
        yield 'colors', self.colors
        yield 'effect', self.effect

    def __iter__(self) -> Iterator[Tuple[str, bytes]]:
        return self.packets()


def encode_command(
    colors: Union[ColorSet, Sequence[Color]],
    effect: Effect,
    color_index: int = COLOR_INDEX_LOOP,
) -> LightingCommand:
    """Validate input and build all three packets.

    Both preconditions (7 colors, index 0-7) are checked before any
    packet is built, so a failure here means nothing reaches the device.
    """
    colors = ColorSet.coerce(colors)
    effect = Effect.coerce(effect)
    validate_color_index(color_index)

    return LightingCommand(
        header=CommandEncoder.build_header(),
        colors=CommandEncoder.build_colors(colors),
        effect=CommandEncoder.build_effect(effect, color_index),
    )
