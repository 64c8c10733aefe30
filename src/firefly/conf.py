"""Device selection and defaults for Firefly.

Config is read from ~/.config/firefly/config.json (XDG-compliant).  Every
key is optional::

    {
      "vendor_id": "0x04d9",
      "product_id": "0xa1cd",
      "interface": 2,
      "endpoint": "0x04",
      "timeout_ms": 1000,
      "colors": ["#ff0000", "#00ff00", "#ffff00", "#0000ff",
                 "#00ffff", "#ff00ff", "#ffffff"]
    }

The file only chooses which device to talk to and the palette used when
``--colors`` is omitted.  Nothing is ever written back.

Usage:
    from firefly.conf import load_settings

    settings = load_settings()
    settings.device.vendor_id   # 0x04d9
    settings.palette            # tuple of 7 hex strings
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .colors import DEFAULT_PALETTE, ColorSet
from .exceptions import ConfigFileInvalid, FireflyError

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'firefly')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

# =========================================================================
# USB identifiers and transfer parameters
# =========================================================================

VENDOR_ID = 0x04D9
PRODUCT_ID = 0xA1CD

LIGHTING_INTERFACE = 2

# HID SET_REPORT: host-to-device | class | interface
CTRL_REQUEST_TYPE = 0x21
CTRL_REQUEST = 0x09           # SET_REPORT
CTRL_VALUE = 0x0300           # report type 3 (feature), report ID 0

INTERRUPT_ENDPOINT = 0x04     # EP 4 OUT

TRANSFER_TIMEOUT_MS = 1000


@dataclass(frozen=True)
class DeviceConfig:
    """Which USB device to open and how to address it.

    Passed explicitly into DeviceSession / PyUsbTransport so tests can
    swap in other values without touching module state.
    """
    vendor_id: int = VENDOR_ID
    product_id: int = PRODUCT_ID
    interface: int = LIGHTING_INTERFACE
    request_type: int = CTRL_REQUEST_TYPE
    request: int = CTRL_REQUEST
    value: int = CTRL_VALUE
    endpoint: int = INTERRUPT_ENDPOINT
    timeout_ms: int = TRANSFER_TIMEOUT_MS

    @property
    def index(self) -> int:
        """wIndex of the control transfers (the target interface)."""
        return self.interface

    def describe(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x} interface {self.interface}"


@dataclass(frozen=True)
class Settings:
    """Everything a run reads from the config file."""
    device: DeviceConfig = field(default_factory=DeviceConfig)
    palette: Tuple[str, ...] = DEFAULT_PALETTE


# =========================================================================
# Loading
# =========================================================================

def load_config(path: Optional[str] = None) -> dict:
    """Load the raw config dict.  Missing file gives an empty dict.

    Raises:
        ConfigFileInvalid: Unreadable file, bad JSON, or not a JSON object.
    """
    path = path or CONFIG_PATH
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        log.debug("No config file at %s, using defaults", path)
        return {}
    except json.JSONDecodeError as e:
        raise ConfigFileInvalid(path, f"invalid JSON: {e}") from e
    except OSError as e:
        raise ConfigFileInvalid(path, str(e)) from e

    if not isinstance(data, dict):
        raise ConfigFileInvalid(path, "top level must be a JSON object")
    log.debug("Loaded config from %s: %s", path, sorted(data))
    return data


def _parse_int(path: str, key: str, value, maximum: int) -> int:
    """Accept ints or numeric strings (``"0x04d9"``, ``"1234"``)."""
    if isinstance(value, bool):
        raise ConfigFileInvalid(path, f"{key} must be an integer, got {value!r}")
    if isinstance(value, str):
        try:
            value = int(value, 0)
        except ValueError:
            raise ConfigFileInvalid(path, f"{key} must be an integer, got {value!r}") from None
    if not isinstance(value, int):
        raise ConfigFileInvalid(path, f"{key} must be an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise ConfigFileInvalid(path, f"{key} out of range: {value}")
    return value


# key -> (DeviceConfig field, max value)
_DEVICE_KEYS = {
    'vendor_id': ('vendor_id', 0xFFFF),
    'product_id': ('product_id', 0xFFFF),
    'interface': ('interface', 0xFF),
    'endpoint': ('endpoint', 0xFF),
    'timeout_ms': ('timeout_ms', 60_000),
}


def settings_from_dict(data: dict, path: str = CONFIG_PATH) -> Settings:
    """Validate a raw config dict into Settings."""
    overrides = {}
    for key, (attr, maximum) in _DEVICE_KEYS.items():
        if key in data:
            overrides[attr] = _parse_int(path, key, data[key], maximum)

    unknown = set(data) - set(_DEVICE_KEYS) - {'colors'}
    if unknown:
        log.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(sorted(unknown)))

    palette = DEFAULT_PALETTE
    if 'colors' in data:
        colors = data['colors']
        if not isinstance(colors, list) or not all(isinstance(c, str) for c in colors):
            raise ConfigFileInvalid(path, "colors must be a list of hex strings")
        try:
            ColorSet.from_hex(colors)
        except FireflyError as e:
            raise ConfigFileInvalid(path, f"colors: {e}") from e
        palette = tuple(colors)

    return Settings(device=replace(DeviceConfig(), **overrides), palette=palette)


def load_settings(path: Optional[str] = None) -> Settings:
    """Load and validate the config file (defaults if it doesn't exist)."""
    path = path or CONFIG_PATH
    return settings_from_dict(load_config(path), path)
