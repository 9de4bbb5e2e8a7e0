"""Bluetooth LE transport built on ``bleak``.

Scans for the first advertisement whose name matches a known controller
family (or a fixed address), connects, and writes frames to the first known
write characteristic the peripheral exposes.
"""

from __future__ import annotations

import asyncio
import logging

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from ..errors import DiscoveryError, TransportError, UnknownDeviceError
from ..protocol.variants import (
    WRITE_CHARACTERISTIC_UUIDS,
    DeviceIdentity,
    resolve_variant,
    variant_layout,
)
from .base import DeviceHandle

logger = logging.getLogger(__name__)

SCAN_TIMEOUT = 10.0
CONNECT_TIMEOUT = 10.0
# Gap between writes for devices whose variant is not recognised.
COMMAND_DELAY = 0.015

_BLE_ERRORS = (BleakError, OSError, asyncio.TimeoutError)


class BleakTransport:
    """Discovers, connects and writes to one LED controller.

    Usage::

        transport = BleakTransport()
        handle = await transport.find_device()
        await transport.write_frame(handle, frame_bytes)
        await transport.close(handle)
    """

    def __init__(
        self,
        address: str | None = None,
        scan_timeout: float = SCAN_TIMEOUT,
        command_delay: float | None = None,
    ) -> None:
        self._address = address
        self._scan_timeout = scan_timeout
        self._command_delay = command_delay
        self._write_lock = asyncio.Lock()
        self._last_write = 0.0
        self._advertisements: dict[str, AdvertisementData] = {}

    def _matches(self, device: BLEDevice, adv: AdvertisementData) -> bool:
        self._advertisements[device.address] = adv
        if self._address:
            return device.address.lower() == self._address.lower()
        name = device.name or adv.local_name
        if not name:
            return False
        try:
            resolve_variant(name)
        except UnknownDeviceError:
            return False
        logger.debug("Found compatible device: %s (%s)", name, device.address)
        return True

    async def find_device(self) -> DeviceHandle:
        """Scan for a device and connect to it.

        Raises:
            DiscoveryError: If nothing matches within the scan timeout, the
                connection fails, or no known write characteristic exists.
        """
        self._advertisements.clear()
        logger.info("Scanning for compatible BLE devices (%.0fs)...", self._scan_timeout)
        try:
            device = await BleakScanner.find_device_by_filter(
                self._matches, timeout=self._scan_timeout
            )
        except _BLE_ERRORS as e:
            raise DiscoveryError(f"Bluetooth scan failed: {e}") from e

        if device is None:
            target = self._address or "any compatible device"
            raise DiscoveryError(
                f"No LED device found for {target} within {self._scan_timeout:.0f} seconds"
            )

        adv = self._advertisements.get(device.address)
        self._advertisements.clear()
        identity = DeviceIdentity(
            name=device.name or (adv.local_name if adv else None) or "",
            address=device.address,
            service_uuids=tuple(adv.service_uuids) if adv else (),
        )

        client = BleakClient(device, timeout=CONNECT_TIMEOUT)
        try:
            await client.connect()
        except _BLE_ERRORS as e:
            raise DiscoveryError(f"Could not connect to {device.address}: {e}") from e

        write_char = None
        for uuid in WRITE_CHARACTERISTIC_UUIDS:
            write_char = client.services.get_characteristic(uuid)
            if write_char is not None:
                break
        if write_char is None:
            await self._disconnect(client)
            raise DiscoveryError(
                f"Could not find a write characteristic on {device.address}. "
                f"Tried: {list(WRITE_CHARACTERISTIC_UUIDS)}"
            )

        logger.info("Connected to %s (%s)", identity.name, identity.address)
        logger.debug("Using write characteristic %s", write_char.uuid)
        delay = self._command_delay
        if delay is None:
            delay = _variant_delay(identity)
        return DeviceHandle(
            identity=identity, client=client, write_char=write_char, command_delay=delay
        )

    async def write_frame(self, handle: DeviceHandle, frame: bytes) -> None:
        """Write one frame, spacing consecutive writes by the command delay.

        Raises:
            TransportError: If the link is down or the write fails.
        """
        client = handle.client
        if client is None or not client.is_connected:
            raise TransportError("Not connected to device")

        loop = asyncio.get_running_loop()
        async with self._write_lock:
            delay = COMMAND_DELAY if handle.command_delay is None else handle.command_delay
            wait = self._last_write + delay - loop.time()
            if wait > 0:
                await asyncio.sleep(wait)
            response = "write" in handle.write_char.properties
            logger.debug("TX %s (response=%s)", frame.hex(" "), response)
            try:
                await client.write_gatt_char(handle.write_char, frame, response=response)
            except _BLE_ERRORS as e:
                raise TransportError(f"Write to {handle.identity.address} failed: {e}") from e
            finally:
                self._last_write = loop.time()

    async def close(self, handle: DeviceHandle) -> None:
        """Disconnect the link behind ``handle``."""
        if handle.client is not None:
            await self._disconnect(handle.client)
        handle.client = None

    async def _disconnect(self, client: BleakClient) -> None:
        try:
            await client.disconnect()
        except _BLE_ERRORS as e:
            logger.warning("Error closing device: %s", e)
        else:
            logger.info("Disconnected")


def _variant_delay(identity: DeviceIdentity) -> float:
    try:
        return variant_layout(resolve_variant(identity)).command_delay
    except UnknownDeviceError:
        return COMMAND_DELAY
