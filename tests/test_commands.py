"""Tests for the frame encoders."""

import pytest

from elk_bledom.errors import InvalidInputError
from elk_bledom.models.schedule import ScheduleDirection, Weekday
from elk_bledom.protocol.commands import (
    ColorMode,
    Opcode,
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
    kelvin_to_code,
    scale,
)
from elk_bledom.protocol.variants import DeviceVariant

ELK = DeviceVariant.ELK_BLE


def test_opcode_values():
    """Verify opcodes match the captured traffic."""
    assert Opcode.BRIGHTNESS == 0x01
    assert Opcode.EFFECT_SPEED == 0x02
    assert Opcode.EFFECT == 0x03
    assert Opcode.POWER == 0x04
    assert Opcode.COLOR == 0x05
    assert Opcode.SCHEDULE == 0x82
    assert Opcode.TIME_SYNC == 0x83
    assert ColorMode.RGB == 0x03


def test_power_on_elk_ble():
    """ELK-BLE uses its own power-on template."""
    assert encode_power(ELK, True) == bytes.fromhex("7e 00 04 f0 00 01 ff 00 ef")


@pytest.mark.parametrize("variant", [
    DeviceVariant.LED_BLE, DeviceVariant.MELK,
    DeviceVariant.ELK_BULB, DeviceVariant.ELK_LAMPL,
])
def test_power_on_other_variants(variant):
    """The remaining variants share the 0x01 power-on payload."""
    assert encode_power(variant, True) == bytes.fromhex("7e 00 04 01 00 00 00 00 ef")


def test_power_off():
    """Power off is the same frame for every variant."""
    for variant in DeviceVariant:
        assert encode_power(variant, False) == bytes.fromhex("7e 00 04 00 00 00 ff 00 ef")


def test_encode_color():
    """Color frame carries the RGB mode byte then R, G, B unscaled."""
    assert encode_color(ELK, 255, 128, 1) == bytes.fromhex("7e 00 05 03 ff 80 01 00 ef")


@pytest.mark.parametrize("rgb", [(256, 0, 0), (0, -1, 0), (0, 0, 300)])
def test_encode_color_out_of_range(rgb):
    """Channels outside 0-255 raise."""
    with pytest.raises(InvalidInputError):
        encode_color(ELK, *rgb)


def test_encode_color_rejects_non_int():
    """Floats and bools are not channel values."""
    with pytest.raises(InvalidInputError):
        encode_color(ELK, 1.5, 0, 0)
    with pytest.raises(InvalidInputError):
        encode_color(ELK, True, 0, 0)


def test_invalid_input_is_value_error():
    """InvalidInputError can be caught as ValueError."""
    with pytest.raises(ValueError):
        encode_brightness(ELK, 101)


def test_encode_exit_effect():
    """Exit-effect frame is COLOR with mode 0x01."""
    assert encode_exit_effect(ELK) == bytes.fromhex("7e 00 05 01 00 00 00 00 ef")


def test_encode_brightness():
    """Native range is 0-100 so the byte equals the percentage."""
    assert encode_brightness(ELK, 80) == bytes.fromhex("7e 00 01 50 00 00 00 00 ef")
    assert encode_brightness(ELK, 0)[3] == 0
    assert encode_brightness(ELK, 100)[3] == 100


def test_brightness_monotonic():
    """Brightness byte never decreases as the percentage rises."""
    levels = [encode_brightness(ELK, pct)[3] for pct in range(101)]
    assert levels == sorted(levels)


def test_brightness_bounds():
    with pytest.raises(InvalidInputError):
        encode_brightness(ELK, 101)
    with pytest.raises(InvalidInputError):
        encode_brightness(ELK, -1)


def test_scale_rounds_half_up():
    """Linear scaling rounds .5 upward."""
    assert scale(1, 2, 1) == 1
    assert scale(1, 4, 2) == 1
    assert scale(50, 100, 255) == 128
    assert scale(100, 100, 255) == 255


def test_color_temperature_endpoints():
    """2700 K maps to 0 and 6500 K to 255."""
    assert encode_color_temperature(ELK, 2700) == bytes.fromhex("7e 00 05 02 00 00 00 00 ef")
    assert encode_color_temperature(ELK, 6500) == bytes.fromhex("7e 00 05 02 ff 00 00 00 ef")


def test_color_temperature_midpoint():
    """4600 K sits halfway and rounds up to 128."""
    assert kelvin_to_code(4600) == 128


@pytest.mark.parametrize("kelvin", [2699, 6501, 0, 10000])
def test_color_temperature_out_of_range(kelvin):
    with pytest.raises(InvalidInputError):
        encode_color_temperature(ELK, kelvin)


def test_encode_effect():
    """Effect frame carries the code then the effect mode byte."""
    assert encode_effect(ELK, 0x89) == bytes.fromhex("7e 00 03 89 03 00 00 00 ef")


def test_encode_effect_bounds():
    with pytest.raises(InvalidInputError):
        encode_effect(ELK, 256)


def test_effect_speed_identity():
    """Non-inverted variants send the percentage as-is."""
    assert encode_effect_speed(ELK, 20) == bytes.fromhex("7e 00 02 14 00 00 00 00 ef")


def test_effect_speed_inverted_for_melk():
    """MELK receives the complement so 100 is still fastest."""
    assert encode_effect_speed(DeviceVariant.MELK, 20)[3] == 80
    assert encode_effect_speed(DeviceVariant.MELK, 100)[3] == 0
    assert encode_effect_speed(DeviceVariant.MELK, 0)[3] == 100


def test_effect_speed_bounds():
    with pytest.raises(InvalidInputError):
        encode_effect_speed(ELK, 101)


def test_encode_schedule():
    """Payload order is mask, hour, minute, enabled, direction."""
    frame = encode_schedule(
        ELK, ScheduleDirection.ON, Weekday.MONDAY | Weekday.THURSDAY, 8, 30, True
    )
    assert frame == bytes([0x7E, 0x00, 0x82, 0b0001001, 8, 30, 1, 0, 0xEF])


def test_encode_schedule_off_disabled():
    frame = encode_schedule(ELK, ScheduleDirection.OFF, Weekday.ALL, 23, 59, False)
    assert frame == bytes([0x7E, 0x00, 0x82, 0x7F, 23, 59, 0, 1, 0xEF])


@pytest.mark.parametrize("hour, minute", [(24, 0), (0, 60), (-1, 0)])
def test_encode_schedule_out_of_range(hour, minute):
    with pytest.raises(InvalidInputError):
        encode_schedule(ELK, ScheduleDirection.ON, Weekday.ALL, hour, minute)


def test_encode_schedule_bad_direction():
    with pytest.raises(InvalidInputError):
        encode_schedule(ELK, 2, Weekday.ALL, 8, 0)


def test_encode_time_sync():
    """Time sync payload is hour, minute, second, day of week."""
    frame = encode_time_sync(ELK, 13, 45, 7, 3)
    assert frame == bytes.fromhex("7e 00 83 0d 2d 07 03 00 ef")


@pytest.mark.parametrize("args", [(24, 0, 0, 1), (0, 60, 0, 1), (0, 0, 60, 1), (0, 0, 0, 0), (0, 0, 0, 8)])
def test_encode_time_sync_out_of_range(args):
    with pytest.raises(InvalidInputError):
        encode_time_sync(ELK, *args)


def test_encode_generic():
    """Generic frames place sub id and arguments after the opcode."""
    assert encode_generic(ELK, 0x05, 0x03, 1, 2, 3) == bytes.fromhex("7e 00 05 03 01 02 03 00 ef")
    with pytest.raises(InvalidInputError):
        encode_generic(ELK, 0x100, 0)


def test_schedule_on_and_off_share_opcode():
    """Only the last payload byte separates an on timer from an off timer."""
    on = encode_schedule(ELK, ScheduleDirection.ON, Weekday.WEEK_DAYS, 7, 0)
    off = encode_schedule(ELK, ScheduleDirection.OFF, Weekday.WEEK_DAYS, 7, 0)
    assert on[2] == off[2] == 0x82
    assert on[:7] == off[:7]
    assert (on[7], off[7]) == (0x00, 0x01)
