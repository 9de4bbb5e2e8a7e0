"""Opcode constants and frame encoders for every command category.

Each encoder validates its arguments, then returns one complete frame for
the given variant. Nothing here performs I/O.
"""

from __future__ import annotations

from enum import IntEnum

from ..errors import InvalidInputError
from ..models.schedule import ScheduleDirection, ScheduleEntry, WeekdaySet
from .framing import build_frame
from .variants import DeviceVariant, variant_layout

MIN_COLOR_TEMP_K = 2700
MAX_COLOR_TEMP_K = 6500


class Opcode(IntEnum):
    """Command opcodes (third byte of every frame)."""

    BRIGHTNESS = 0x01
    EFFECT_SPEED = 0x02
    EFFECT = 0x03
    POWER = 0x04
    COLOR = 0x05
    SCHEDULE = 0x82
    TIME_SYNC = 0x83


class ColorMode(IntEnum):
    """First payload byte of a COLOR frame."""

    EXIT_EFFECT = 0x01
    TEMPERATURE = 0x02
    RGB = 0x03


# Second payload byte of an EFFECT frame.
EFFECT_MODE = 0x03


def _check_range(name: str, value: int, low: int, high: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise InvalidInputError(f"{name} must be {low}-{high}, got {value!r}")
    return value


def scale(value: int, in_max: int, out_max: int) -> int:
    """Map ``0..in_max`` linearly onto ``0..out_max``, rounding half up."""
    return (2 * value * out_max + in_max) // (2 * in_max)


def kelvin_to_code(kelvin: int) -> int:
    """Map a color temperature onto the 8-bit device code."""
    code = scale(kelvin - MIN_COLOR_TEMP_K, MAX_COLOR_TEMP_K - MIN_COLOR_TEMP_K, 255)
    return max(0, min(255, code))


def encode_power(variant: DeviceVariant, on: bool) -> bytes:
    """Build a power frame from the variant's on/off payload template."""
    layout = variant_layout(variant)
    payload = layout.power_on if on else layout.power_off
    return build_frame(variant, Opcode.POWER, payload)


def encode_color(variant: DeviceVariant, red: int, green: int, blue: int) -> bytes:
    """Build an RGB color frame.

    Args:
        red: Red channel 0-255.
        green: Green channel 0-255.
        blue: Blue channel 0-255.
    """
    _check_range("Red", red, 0, 255)
    _check_range("Green", green, 0, 255)
    _check_range("Blue", blue, 0, 255)
    return build_frame(variant, Opcode.COLOR, bytes([ColorMode.RGB, red, green, blue]))


def encode_exit_effect(variant: DeviceVariant) -> bytes:
    """Build the frame that drops the device out of a running effect."""
    return build_frame(variant, Opcode.COLOR, bytes([ColorMode.EXIT_EFFECT]))


def encode_brightness(variant: DeviceVariant, percent: int) -> bytes:
    """Build a brightness frame.

    Args:
        percent: Brightness 0-100, scaled onto the variant's native range.
    """
    _check_range("Brightness", percent, 0, 100)
    level = scale(percent, 100, variant_layout(variant).brightness_max)
    return build_frame(variant, Opcode.BRIGHTNESS, bytes([level]))


def encode_color_temperature(variant: DeviceVariant, kelvin: int) -> bytes:
    """Build a white color temperature frame.

    Args:
        kelvin: Color temperature 2700-6500 K. 2700 maps to code 0 and
            6500 to code 255.
    """
    _check_range("Color temperature", kelvin, MIN_COLOR_TEMP_K, MAX_COLOR_TEMP_K)
    return build_frame(
        variant, Opcode.COLOR, bytes([ColorMode.TEMPERATURE, kelvin_to_code(kelvin)])
    )


def encode_effect(variant: DeviceVariant, effect_code: int) -> bytes:
    """Build a frame that starts an effect program.

    Args:
        effect_code: Protocol code from the effect table.
    """
    _check_range("Effect code", effect_code, 0, 255)
    return build_frame(variant, Opcode.EFFECT, bytes([effect_code, EFFECT_MODE]))


def encode_effect_speed(variant: DeviceVariant, percent: int) -> bytes:
    """Build an effect speed frame.

    Args:
        percent: Perceived speed 0-100. Variants flagged ``speed_inverted``
            receive the complement so that 100 is always fastest.
    """
    _check_range("Effect speed", percent, 0, 100)
    layout = variant_layout(variant)
    level = scale(percent, 100, layout.speed_max)
    if layout.speed_inverted:
        level = layout.speed_max - level
    return build_frame(variant, Opcode.EFFECT_SPEED, bytes([level]))


def encode_schedule(
    variant: DeviceVariant,
    direction: ScheduleDirection,
    days: WeekdaySet,
    hour: int,
    minute: int,
    enabled: bool = True,
) -> bytes:
    """Build a schedule frame.

    On and off timers share the SCHEDULE opcode; the fifth payload byte
    tells them apart. Payload order is
    ``[weekday mask, hour, minute, enabled, direction]``.
    """
    try:
        direction = ScheduleDirection(direction)
    except ValueError:
        raise InvalidInputError(f"Unknown schedule direction {direction!r}") from None
    entry = ScheduleEntry(direction, days, hour, minute, enabled)
    return encode_schedule_entry(variant, entry)


def encode_schedule_entry(variant: DeviceVariant, entry: ScheduleEntry) -> bytes:
    """Build a schedule frame from an already validated entry."""
    payload = bytes([
        entry.days,
        entry.hour,
        entry.minute,
        1 if entry.enabled else 0,
        entry.direction,
    ])
    return build_frame(variant, Opcode.SCHEDULE, payload)


def encode_time_sync(
    variant: DeviceVariant, hour: int, minute: int, second: int, day_of_week: int
) -> bytes:
    """Build a clock set frame.

    Args:
        hour: 0-23.
        minute: 0-59.
        second: 0-59.
        day_of_week: 1 (Monday) to 7 (Sunday).
    """
    _check_range("Hour", hour, 0, 23)
    _check_range("Minute", minute, 0, 59)
    _check_range("Second", second, 0, 59)
    _check_range("Day of week", day_of_week, 1, 7)
    return build_frame(
        variant, Opcode.TIME_SYNC, bytes([hour, minute, second, day_of_week])
    )


def encode_generic(
    variant: DeviceVariant,
    opcode: int,
    sub_id: int,
    arg1: int = 0,
    arg2: int = 0,
    arg3: int = 0,
) -> bytes:
    """Build an arbitrary frame for commands without a dedicated encoder."""
    for name, value in (
        ("Opcode", opcode), ("Sub id", sub_id),
        ("Arg1", arg1), ("Arg2", arg2), ("Arg3", arg3),
    ):
        _check_range(name, value, 0, 255)
    return build_frame(variant, opcode, bytes([sub_id, arg1, arg2, arg3]))
