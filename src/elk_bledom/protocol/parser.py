"""Frame decoders, the inverse of the encoders in ``commands``.

The controllers never answer, so nothing on the wire needs decoding in
normal use. These exist to inspect captured traffic and to check that
every encoder is lossless.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models.effects import effect_name
from ..models.schedule import ScheduleDirection, ScheduleEntry, decode_weekday_set
from .commands import (
    EFFECT_MODE,
    MAX_COLOR_TEMP_K,
    MIN_COLOR_TEMP_K,
    ColorMode,
    Opcode,
    scale,
)
from .framing import Frame, parse_frame
from .variants import DeviceVariant, variant_layout


@dataclass
class PowerCommand:
    on: bool


@dataclass
class ColorCommand:
    red: int
    green: int
    blue: int


@dataclass
class ExitEffectCommand:
    pass


@dataclass
class BrightnessCommand:
    percent: int


@dataclass
class ColorTemperatureCommand:
    """Decoded temperature frame.

    ``kelvin`` is the nearest temperature for ``code``; the 8-bit code
    cannot distinguish every kelvin value in the range.
    """

    code: int
    kelvin: int


@dataclass
class EffectCommand:
    code: int
    name: str | None


@dataclass
class EffectSpeedCommand:
    percent: int


@dataclass
class TimeSyncCommand:
    hour: int
    minute: int
    second: int
    day_of_week: int


def decode_power(variant: DeviceVariant, frame: Frame) -> PowerCommand | None:
    """Match the payload against the variant's on/off templates."""
    if frame.opcode != Opcode.POWER:
        return None
    layout = variant_layout(variant)
    if frame.payload == layout.power_on:
        return PowerCommand(on=True)
    if frame.payload == layout.power_off:
        return PowerCommand(on=False)
    return None


def decode_color(variant: DeviceVariant, frame: Frame):
    """Decode a COLOR frame into RGB, temperature or exit-effect."""
    if frame.opcode != Opcode.COLOR:
        return None
    mode, a, b, c = frame.payload[:4]
    if mode == ColorMode.RGB:
        return ColorCommand(red=a, green=b, blue=c)
    if mode == ColorMode.TEMPERATURE:
        span = MAX_COLOR_TEMP_K - MIN_COLOR_TEMP_K
        return ColorTemperatureCommand(code=a, kelvin=MIN_COLOR_TEMP_K + scale(a, 255, span))
    if mode == ColorMode.EXIT_EFFECT:
        return ExitEffectCommand()
    return None


def decode_brightness(variant: DeviceVariant, frame: Frame) -> BrightnessCommand | None:
    if frame.opcode != Opcode.BRIGHTNESS:
        return None
    native_max = variant_layout(variant).brightness_max
    return BrightnessCommand(percent=scale(frame.payload[0], native_max, 100))


def decode_effect(variant: DeviceVariant, frame: Frame) -> EffectCommand | None:
    if frame.opcode != Opcode.EFFECT or frame.payload[1] != EFFECT_MODE:
        return None
    code = frame.payload[0]
    return EffectCommand(code=code, name=effect_name(code))


def decode_effect_speed(variant: DeviceVariant, frame: Frame) -> EffectSpeedCommand | None:
    if frame.opcode != Opcode.EFFECT_SPEED:
        return None
    layout = variant_layout(variant)
    level = frame.payload[0]
    if layout.speed_inverted:
        level = layout.speed_max - level
    return EffectSpeedCommand(percent=scale(level, layout.speed_max, 100))


def decode_schedule(variant: DeviceVariant, frame: Frame) -> ScheduleEntry | None:
    if frame.opcode != Opcode.SCHEDULE:
        return None
    days, hour, minute, enabled, direction = frame.payload[:5]
    if direction not in set(ScheduleDirection) or hour > 23 or minute > 59:
        return None
    return ScheduleEntry(
        direction=ScheduleDirection(direction),
        days=decode_weekday_set(days),
        hour=hour,
        minute=minute,
        enabled=bool(enabled),
    )


def decode_time_sync(variant: DeviceVariant, frame: Frame) -> TimeSyncCommand | None:
    if frame.opcode != Opcode.TIME_SYNC:
        return None
    hour, minute, second, day_of_week = frame.payload[:4]
    return TimeSyncCommand(hour, minute, second, day_of_week)


def decode(variant: DeviceVariant, data: bytes):
    """Parse raw bytes and dispatch to the matching decoder.

    Returns the decoded command dataclass, the raw ``Frame`` if the opcode
    has no decoder, or ``None`` if the framing is invalid.
    """
    frame = parse_frame(variant, data)
    if frame is None:
        return None

    decoders = {
        Opcode.POWER: decode_power,
        Opcode.COLOR: decode_color,
        Opcode.BRIGHTNESS: decode_brightness,
        Opcode.EFFECT: decode_effect,
        Opcode.EFFECT_SPEED: decode_effect_speed,
        Opcode.SCHEDULE: decode_schedule,
        Opcode.TIME_SYNC: decode_time_sync,
    }
    decoder = decoders.get(frame.opcode)
    if decoder:
        result = decoder(variant, frame)
        if result is not None:
            return result
    return frame
