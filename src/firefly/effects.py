"""Lighting effects built into the keyboard firmware.

The numeric value of each member is sent verbatim in the effect packet, so
members must never be renumbered or reordered.
"""

from __future__ import annotations

from enum import IntEnum
from typing import List, Union

from .exceptions import InvalidEffect


class Effect(IntEnum):
    """Firmware effect codes (effect packet byte 1)."""
    STATIC = 0
    BREATHE = 1
    FADE = 2
    GETTING_OFF = 3
    LITTLE_STARS = 4
    LASER = 5
    WAVE = 6
    NEON = 7
    RAINDROP = 8
    RIPPLE = 9
    WAVE2 = 10
    SWIRL = 11

    @property
    def cli_name(self) -> str:
        """Lower-case, dash-separated spelling (``getting-off``)."""
        return self.name.lower().replace('_', '-')

    @classmethod
    def from_name(cls, name: str) -> 'Effect':
        """Look up an effect by name.

        Case-insensitive; ``-`` and ``_`` are interchangeable, so
        ``LITTLE_STARS``, ``little-stars`` and ``Little_Stars`` all match.

        Raises:
            InvalidEffect: Unknown name.
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip().upper().replace('-', '_')
        try:
            return cls[key]
        except KeyError:
            raise InvalidEffect(name, effect_names()) from None

    @classmethod
    def coerce(cls, value: Union['Effect', str, int]) -> 'Effect':
        """Accept an Effect, a name, or a firmware code 0-11.

        Raises:
            InvalidEffect: Unknown name or code.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.from_name(value)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise InvalidEffect(value, effect_names())


def effect_names() -> List[str]:
    """CLI spellings of all effects, in code order."""
    return [effect.cli_name for effect in Effect]
