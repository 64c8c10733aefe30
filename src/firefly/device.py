#!/usr/bin/env python3
"""
USB session layer for the 04D9:A1CD RGB keyboard.

Sequence for one lighting change (all steps mandatory, never reordered)::

    find device by VID/PID
    open, detach kernel driver from interface 2
    claim interface 2
    control  SET_REPORT  header  (8 bytes)
    interrupt EP 0x04    colors  (64 bytes)
    control  SET_REPORT  effect  (8 bytes)
    release interface 2

The ``UsbTransport`` ABC abstracts the raw USB I/O so that:
  • Tests can inject a mock transport (no real hardware needed).
  • ``PyUsbTransport`` provides real USB via pyusb (libusb backend).

Linux dependencies:
  • pyusb:  ``pip install pyusb``  (needs libusb1, ``apt install libusb-1.0-0``)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence, Union

import usb.core
import usb.util

from .colors import Color, ColorSet
from .conf import DeviceConfig
from .effects import Effect
from .exceptions import DeviceNotFound, FireflyError, TransportFailure
from .protocol import COLOR_INDEX_LOOP, LightingCommand, encode_command

log = logging.getLogger(__name__)


# =========================================================================
# Abstract USB transport
# =========================================================================

class UsbTransport(ABC):
    """Abstract USB transport, mockable for testing."""

    @abstractmethod
    def open(self) -> None:
        """Find and open the device, detaching any kernel driver."""

    @abstractmethod
    def close(self) -> None:
        """Drop the device handle."""

    @abstractmethod
    def claim_interface(self, interface: int) -> None:
        """Claim *interface* for exclusive use."""

    @abstractmethod
    def release_interface(self, interface: int) -> None:
        """Release a previously claimed interface."""

    @abstractmethod
    def control_write(self, request_type: int, request: int, value: int,
                      index: int, data: bytes, timeout: int) -> int:
        """Host-to-device control transfer.  Returns bytes transferred."""

    @abstractmethod
    def interrupt_write(self, endpoint: int, data: bytes, timeout: int) -> int:
        """Interrupt OUT transfer.  Returns bytes transferred."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the device is currently open."""


# =========================================================================
# Real transport: PyUSB  (libusb backend)
# =========================================================================

class PyUsbTransport(UsbTransport):
    """Real USB transport using pyusb (libusb backend).

    Every pyusb failure (including timeouts) surfaces as TransportFailure
    with the original error chained.

    Requires: ``pip install pyusb`` + ``apt install libusb-1.0-0``
    """

    def __init__(self, config: Optional[DeviceConfig] = None):
        self.config = config or DeviceConfig()
        self._device = None
        self._detached: Optional[int] = None

    def open(self) -> None:
        cfg = self.config
        try:
            self._device = usb.core.find(idVendor=cfg.vendor_id, idProduct=cfg.product_id)
        except usb.core.NoBackendError as e:
            raise TransportFailure("open", f"no libusb backend available ({e})") from e
        except usb.core.USBError as e:
            raise TransportFailure("open", str(e)) from e

        if self._device is None:
            raise DeviceNotFound(cfg.vendor_id, cfg.product_id)

        log.info("Found device %04x:%04x", cfg.vendor_id, cfg.product_id)

        # Linux: usbhid owns the interface until we detach it
        try:
            if self._device.is_kernel_driver_active(cfg.interface):
                self._device.detach_kernel_driver(cfg.interface)
                self._detached = cfg.interface
                log.debug("Detached kernel driver from interface %d", cfg.interface)
        except NotImplementedError:
            log.debug("Kernel driver detach not supported on this platform")
        except usb.core.USBError as e:
            self.close()
            raise TransportFailure("kernel driver detach", str(e)) from e

    def close(self) -> None:
        if self._device is None:
            return
        device, self._device = self._device, None
        # attach_kernel_driver reopens the handle, so reattach before disposing
        if self._detached is not None:
            interface, self._detached = self._detached, None
            try:
                device.attach_kernel_driver(interface)
                log.debug("Reattached kernel driver to interface %d", interface)
            except (usb.core.USBError, NotImplementedError) as e:
                log.warning("Could not reattach kernel driver to interface %d: %s",
                            interface, e)
        usb.util.dispose_resources(device)
        log.info("Device closed")

    def _require_open(self, step: str):
        if self._device is None:
            raise TransportFailure(step, "transport not open")
        return self._device

    def claim_interface(self, interface: int) -> None:
        device = self._require_open("claim interface")
        try:
            usb.util.claim_interface(device, interface)
        except usb.core.USBError as e:
            raise TransportFailure("claim interface", str(e)) from e
        log.info("Claimed interface %d", interface)

    def release_interface(self, interface: int) -> None:
        device = self._require_open("release interface")
        try:
            usb.util.release_interface(device, interface)
        except usb.core.USBError as e:
            raise TransportFailure("release interface", str(e)) from e
        log.info("Released interface %d", interface)

    def control_write(self, request_type: int, request: int, value: int,
                      index: int, data: bytes, timeout: int) -> int:
        device = self._require_open("control transfer")
        try:
            written = device.ctrl_transfer(request_type, request, value, index,
                                           data, timeout=timeout)
        except usb.core.USBError as e:
            raise TransportFailure("control transfer", str(e)) from e
        if written != len(data):
            raise TransportFailure(
                "control transfer", f"short write ({written}/{len(data)} bytes)")
        return written

    def interrupt_write(self, endpoint: int, data: bytes, timeout: int) -> int:
        device = self._require_open("interrupt transfer")
        try:
            written = device.write(endpoint, data, timeout=timeout)
        except usb.core.USBError as e:
            raise TransportFailure("interrupt transfer", str(e)) from e
        if written != len(data):
            raise TransportFailure(
                "interrupt transfer", f"short write ({written}/{len(data)} bytes)")
        return written

    @property
    def is_open(self) -> bool:
        return self._device is not None

    @property
    def device(self):
        """Raw pyusb device handle (for diagnostics)."""
        return self._device


# =========================================================================
# Session
# =========================================================================

class DeviceSession:
    """Owns the open device and claimed interface for one run.

    Use as a context manager: the interface is released and the handle
    closed on every exit path, including transfer failures::

        with DeviceSession(config) as session:
            session.send(command)
    """

    def __init__(self, config: Optional[DeviceConfig] = None,
                 transport: Optional[UsbTransport] = None):
        self.config = config or DeviceConfig()
        self.transport = transport if transport is not None else PyUsbTransport(self.config)
        self._claimed = False

    def open(self) -> None:
        self.transport.open()
        try:
            self.transport.claim_interface(self.config.interface)
        except BaseException:
            self.transport.close()
            raise
        self._claimed = True

    def close(self) -> None:
        """Release the interface (if claimed), then close the transport."""
        try:
            if self._claimed:
                self._claimed = False
                self.transport.release_interface(self.config.interface)
        finally:
            self.transport.close()

    @property
    def is_claimed(self) -> bool:
        return self._claimed

    def _control(self, name: str, payload: bytes) -> None:
        cfg = self.config
        log.debug("-> %s (control, %d bytes): %s", name, len(payload), payload.hex(' '))
        self.transport.control_write(cfg.request_type, cfg.request, cfg.value,
                                     cfg.index, payload, cfg.timeout_ms)

    def _interrupt(self, name: str, payload: bytes) -> None:
        cfg = self.config
        log.debug("-> %s (interrupt EP 0x%02x, %d bytes): %s",
                  name, cfg.endpoint, len(payload), payload.hex(' '))
        self.transport.interrupt_write(cfg.endpoint, payload, cfg.timeout_ms)

    def send_header(self, payload: bytes) -> None:
        self._control('header', payload)

    def send_colors(self, payload: bytes) -> None:
        self._interrupt('colors', payload)

    def send_effect(self, payload: bytes) -> None:
        self._control('effect', payload)

    def send(self, command: LightingCommand) -> None:
        """Transmit header, colors, effect.  Stops at the first failure."""
        if not self._claimed:
            raise TransportFailure("send", "interface not claimed")
        self.send_header(command.header)
        self.send_colors(command.colors)
        self.send_effect(command.effect)
        log.info("Lighting command sent")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
            return False
        # Keep the original error; a release failure here is secondary
        try:
            self.close()
        except FireflyError as e:
            log.warning("Cleanup after failed send also failed: %s", e)
        return False


# =========================================================================
# Public API
# =========================================================================

def send_lighting(
    colors: Union[ColorSet, Sequence[Color]],
    effect: Effect,
    color_index: int = COLOR_INDEX_LOOP,
    config: Optional[DeviceConfig] = None,
    transport: Optional[UsbTransport] = None,
) -> LightingCommand:
    """Encode and send one lighting change.

    Input is validated before the device is touched.

    Returns:
        The LightingCommand that was sent.

    Raises:
        ConfigurationError: Bad colors / effect / color index.
        DeviceNotFound: No matching USB device.
        TransportFailure: Any USB step failed.
    """
    command = encode_command(colors, effect, color_index)
    with DeviceSession(config, transport) as session:
        session.send(command)
    return command
