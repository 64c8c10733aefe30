"""
Firefly - RGB keyboard lighting control

Controls the lighting of the 04d9:a1cd USB RGB keyboard: seven color zones
plus one of twelve effects built into the firmware.

Usage:
    # As a library
    from firefly import ColorSet, Effect, send_lighting
    send_lighting(ColorSet.default(), Effect.WAVE)

    # Command line
    firefly -e static                 Default palette, static lighting
    firefly -e breathe --ci 0         Breathe zone 0 only
"""

from firefly.__version__ import __version__

from firefly.colors import DEFAULT_PALETTE, Color, ColorSet, decode_color
from firefly.conf import DeviceConfig, load_settings
from firefly.device import DeviceSession, PyUsbTransport, UsbTransport, send_lighting
from firefly.effects import Effect
from firefly.exceptions import (
    ColorIndexOutOfRange,
    DeviceNotFound,
    FireflyError,
    InvalidColorCount,
    InvalidColorFormat,
    TransportFailure,
)
from firefly.protocol import CommandEncoder, LightingCommand, encode_command

__all__ = [
    # Version
    "__version__",
    # Colors / effects
    "Color",
    "ColorSet",
    "DEFAULT_PALETTE",
    "decode_color",
    "Effect",
    # Encoding
    "CommandEncoder",
    "LightingCommand",
    "encode_command",
    # Device
    "DeviceConfig",
    "DeviceSession",
    "PyUsbTransport",
    "UsbTransport",
    "load_settings",
    "send_lighting",
    # Errors
    "FireflyError",
    "InvalidColorFormat",
    "InvalidColorCount",
    "ColorIndexOutOfRange",
    "DeviceNotFound",
    "TransportFailure",
]
