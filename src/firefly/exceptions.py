"""Error hierarchy for Firefly.

Every failure the controller can hit is terminal: nothing is retried and
nothing is recovered locally.  The hierarchy only exists so callers (the CLI,
or a future retry policy) can tell a bad argument apart from a missing device
or a transfer that failed halfway through the packet sequence.

```
FireflyError
├── ConfigurationError
│   ├── InvalidColorFormat
│   ├── InvalidColorCount
│   ├── ColorIndexOutOfRange
│   ├── InvalidEffect
│   └── ConfigFileInvalid
└── DeviceError
    ├── DeviceNotFound
    └── TransportFailure
```

Validation errors also derive from ``ValueError`` so argparse ``type=``
callbacks can raise them directly.
"""

from __future__ import annotations

from typing import Optional


class FireflyError(Exception):
    """Base for all Firefly errors.

    Attributes:
        user_message: Short message suitable for the terminal.
        technical_message: Detailed message for debug logging.
        hint: Optional suggestion for fixing the problem.
    """

    def __init__(
        self,
        user_message: str,
        technical_message: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(user_message)
        self.user_message = user_message
        self.technical_message = technical_message or user_message
        self.hint = hint

    def __str__(self) -> str:
        return self.user_message

    def get_full_message(self) -> str:
        """User message plus the hint, if any."""
        if self.hint:
            return f"{self.user_message}\n  Hint: {self.hint}"
        return self.user_message


# =========================================================================
# Configuration / input validation
# =========================================================================

class ConfigurationError(FireflyError):
    """Input or configuration is invalid; nothing was sent to the device."""


class InvalidColorFormat(ConfigurationError, ValueError):
    """A color string is not 6 hex digits (optionally prefixed with '#')."""

    def __init__(self, value: object, reason: str = "expected 6 hex digits, e.g. #ff8800"):
        super().__init__(
            f"Invalid color {value!r}: {reason}",
            hint="Colors are written as rrggbb or #rrggbb",
        )
        self.value = value


class InvalidColorCount(ConfigurationError, ValueError):
    """A color set does not hold exactly one color per zone."""

    def __init__(self, count: int, expected: int = 7):
        super().__init__(
            f"Exactly {expected} colors are required, got {count}",
            hint="Pass a comma-separated list of 7 colors, or omit --colors "
                 "to use the default palette",
        )
        self.count = count
        self.expected = expected


class ColorIndexOutOfRange(ConfigurationError, ValueError):
    """Effect color index is outside 0-7."""

    def __init__(self, index: object, maximum: int = 7):
        super().__init__(
            f"Color index out of bounds: {index!r} (expected 0-{maximum})",
            hint=f"Use 0-{maximum - 1} for a single zone or {maximum} to loop all zones",
        )
        self.index = index


class InvalidEffect(ConfigurationError, ValueError):
    """Effect name is not in the firmware catalog."""

    def __init__(self, name: object, choices: Optional[list] = None):
        hint = f"Choose one of: {', '.join(choices)}" if choices else None
        super().__init__(f"Unknown effect {name!r}", hint=hint)
        self.name = name


class ConfigFileInvalid(ConfigurationError):
    """Config file cannot be read, is not valid JSON, or has bad values."""

    def __init__(self, path: str, detail: str):
        super().__init__(
            f"Invalid config file {path}",
            technical_message=f"Config file {path}: {detail}",
            hint=f"Fix or remove {path} ({detail})",
        )
        self.path = path
        self.detail = detail


# =========================================================================
# Device / transport
# =========================================================================

class DeviceError(FireflyError):
    """The keyboard could not be reached or did not accept a transfer."""


class DeviceNotFound(DeviceError):
    """No USB device matches the configured vendor/product ID."""

    def __init__(self, vendor_id: int, product_id: int):
        super().__init__(
            f"Device not found: {vendor_id:04x}:{product_id:04x}",
            hint="Check the keyboard is plugged in (lsusb) and that you "
                 "have permission to access it (udev rule or sudo)",
        )
        self.vendor_id = vendor_id
        self.product_id = product_id


class TransportFailure(DeviceError):
    """A USB operation failed (open, claim, transfer, release or timeout).

    The original pyusb error is chained as ``__cause__``.
    """

    def __init__(self, step: str, detail: str):
        super().__init__(
            f"USB {step} failed: {detail}",
            technical_message=f"USB transport failure during {step}: {detail}",
        )
        self.step = step
        self.detail = detail
