"""High-level controller for one LED strip session.

``BleLedController`` is the only object callers need: it discovers the
device, works out which variant it is, and turns method calls into frames
written through the transport. The protocol is write-only, so a returned
call means the frame reached the transport, not that the firmware applied it.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable

from .errors import (
    ElkBledomError,
    NotConnectedError,
    TransportError,
    UnknownDeviceError,
    UnknownEffectError,
)
from .models.effects import Effect, lookup_effect
from .models.schedule import ScheduleDirection, WeekdaySet
from .protocol.commands import (
    encode_brightness,
    encode_color,
    encode_color_temperature,
    encode_effect,
    encode_effect_speed,
    encode_exit_effect,
    encode_generic,
    encode_power,
    encode_schedule,
    encode_time_sync,
)
from .protocol.variants import DeviceIdentity, DeviceVariant, resolve_variant, variant_layout
from .transport.base import DeviceHandle, Transport

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class BleLedController:
    """Command facade for a single ELK-BLEDOM style controller.

    Usage::

        async with BleLedController(BleakTransport()) as strip:
            await strip.power_on()
            await strip.set_color(255, 0, 0)
            await strip.set_brightness(80)

    Not safe for concurrent use: issue one command at a time.
    """

    def __init__(
        self,
        transport: Transport,
        fallback_variant: DeviceVariant | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._transport = transport
        self._fallback_variant = fallback_variant
        self._clock = clock
        self._handle: DeviceHandle | None = None
        self._variant: DeviceVariant | None = None
        self._state = ConnectionState.DISCONNECTED

        # Last values written; the device cannot be queried.
        self.is_on: bool | None = None
        self.rgb_color: tuple[int, int, int] | None = None
        self.brightness: int | None = None
        self.effect: Effect | None = None
        self.effect_speed: int | None = None
        self.color_temp_kelvin: int | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def variant(self) -> DeviceVariant | None:
        return self._variant

    @property
    def identity(self) -> DeviceIdentity | None:
        return self._handle.identity if self._handle else None

    @property
    def device_type_name(self) -> str:
        if self._variant is None:
            return "Unknown"
        return variant_layout(self._variant).display_name

    async def __aenter__(self) -> BleLedController:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ─── SESSION ──────────────────────────────────────────────────────

    async def connect(self) -> DeviceVariant:
        """Discover the device, resolve its variant and sync its clock.

        Raises:
            DiscoveryError: If no device is found.
            UnknownDeviceError: If the device name matches no variant and
                no fallback variant was given.
        """
        if self.connected:
            return self._variant

        handle: DeviceHandle | None = None
        try:
            handle = await self._transport.find_device()
            try:
                variant = self._resolve(handle)
            except UnknownDeviceError:
                await self._transport.close(handle)
                raise

            self._handle = handle
            self._variant = variant
            self._state = ConnectionState.CONNECTED
            logger.info(
                "Connected to %s (%s) as %s",
                handle.identity.name, handle.identity.address, self.device_type_name,
            )

            if variant_layout(variant).syncs_time:
                try:
                    await self._transport.write_frame(handle, self._time_sync_frame())
                except TransportError as e:
                    logger.warning("Clock sync failed, continuing without it: %s", e)
        except asyncio.CancelledError:
            await self._drop(handle)
            raise
        return variant

    def _resolve(self, handle: DeviceHandle) -> DeviceVariant:
        try:
            return resolve_variant(handle.identity)
        except UnknownDeviceError:
            if self._fallback_variant is None:
                raise
            logger.warning(
                "Unrecognised device %r, falling back to %s",
                handle.identity.name, self._fallback_variant.value,
            )
            return self._fallback_variant

    async def close(self) -> None:
        """Close the session. Safe to call when already disconnected."""
        handle = self._handle
        self._reset()
        if handle is not None:
            await self._transport.close(handle)

    def _reset(self) -> None:
        self._handle = None
        self._variant = None
        self._state = ConnectionState.DISCONNECTED

    async def _drop(self, handle: DeviceHandle | None) -> None:
        """Reset the session and release the link behind it."""
        self._reset()
        if handle is None:
            return
        try:
            await self._transport.close(handle)
        except (ElkBledomError, OSError) as e:
            logger.warning("Error closing dropped link: %s", e)

    def _require_variant(self) -> DeviceVariant:
        if not self.connected:
            raise NotConnectedError("Not connected to device. Call connect() first.")
        return self._variant

    async def _write(self, *frames: bytes) -> None:
        handle = self._handle
        for frame in frames:
            logger.debug("Writing frame %s", frame.hex(" "))
            try:
                await self._transport.write_frame(handle, frame)
            except (TransportError, asyncio.CancelledError):
                logger.warning("Write failed, session dropped")
                await self._drop(handle)
                raise

    # ─── COMMANDS ─────────────────────────────────────────────────────

    async def power_on(self) -> None:
        await self._write(encode_power(self._require_variant(), True))
        self.is_on = True
        logger.info("LED strip powered on")

    async def power_off(self) -> None:
        await self._write(encode_power(self._require_variant(), False))
        self.is_on = False
        logger.info("LED strip powered off")

    async def set_color(self, red: int, green: int, blue: int) -> None:
        """Show a static RGB color, leaving any running effect first."""
        variant = self._require_variant()
        frame = encode_color(variant, red, green, blue)
        await self._write(*self._leave_effect(variant), frame)
        self.rgb_color = (red, green, blue)
        self.effect = None
        logger.info("Color set to RGB(%d, %d, %d)", red, green, blue)

    async def set_brightness(self, percent: int) -> None:
        await self._write(encode_brightness(self._require_variant(), percent))
        self.brightness = percent
        logger.info("Brightness set to %d%%", percent)

    async def set_color_temperature(self, kelvin: int) -> None:
        """Show white light at ``kelvin`` (2700-6500)."""
        variant = self._require_variant()
        frame = encode_color_temperature(variant, kelvin)
        await self._write(*self._leave_effect(variant), frame)
        self.color_temp_kelvin = kelvin
        self.effect = None
        logger.info("Color temperature set to %dK", kelvin)

    async def set_effect(self, effect: str | int) -> None:
        """Start an effect program by name or ``Effect`` code.

        Raises:
            UnknownEffectError: If the name or code is not in the table.
        """
        variant = self._require_variant()
        if isinstance(effect, str):
            effect = Effect(lookup_effect(effect))
        else:
            try:
                effect = Effect(effect)
            except ValueError:
                raise UnknownEffectError(f"Unknown effect code {effect!r}") from None
        await self._write(encode_effect(variant, effect))
        self.effect = effect
        logger.info("Effect set to %s", effect.name.lower())

    async def set_effect_speed(self, percent: int) -> None:
        variant = self._require_variant()
        frame = encode_effect_speed(variant, percent)
        if self.effect is None:
            logger.warning("Setting effect speed without an active effect")
        await self._write(frame)
        self.effect_speed = percent
        logger.info("Effect speed set to %d", percent)

    async def set_schedule_on(
        self, days: WeekdaySet, hour: int, minute: int, enabled: bool = True
    ) -> None:
        await self._set_schedule(ScheduleDirection.ON, days, hour, minute, enabled)

    async def set_schedule_off(
        self, days: WeekdaySet, hour: int, minute: int, enabled: bool = True
    ) -> None:
        await self._set_schedule(ScheduleDirection.OFF, days, hour, minute, enabled)

    async def _set_schedule(self, direction, days, hour, minute, enabled) -> None:
        frame = encode_schedule(self._require_variant(), direction, days, hour, minute, enabled)
        await self._write(frame)
        logger.info(
            "Schedule %s set for %02d:%02d (enabled=%s)",
            direction.name.lower(), hour, minute, enabled,
        )

    async def set_custom_time(
        self, hour: int, minute: int, second: int, day_of_week: int
    ) -> None:
        """Set the device clock. ``day_of_week`` is 1 (Monday) to 7."""
        frame = encode_time_sync(self._require_variant(), hour, minute, second, day_of_week)
        await self._write(frame)
        logger.info("Device time set to %02d:%02d:%02d day %d", hour, minute, second, day_of_week)

    async def sync_time(self) -> None:
        """Set the device clock from the local wall clock."""
        self._require_variant()
        await self._write(self._time_sync_frame())

    def _time_sync_frame(self) -> bytes:
        now = self._clock()
        return encode_time_sync(
            self._variant, now.hour, now.minute, now.second, now.isoweekday()
        )

    async def send_generic(
        self, opcode: int, sub_id: int, arg1: int = 0, arg2: int = 0, arg3: int = 0
    ) -> None:
        """Send a raw command for features without a dedicated method."""
        frame = encode_generic(self._require_variant(), opcode, sub_id, arg1, arg2, arg3)
        await self._write(frame)

    def _leave_effect(self, variant: DeviceVariant) -> tuple[bytes, ...]:
        if self.effect is None:
            return ()
        return (encode_exit_effect(variant),)
