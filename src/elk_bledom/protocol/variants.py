"""Device variant registry and per-variant frame layout table.

The five supported controller families speak the same frame format but
disagree on a few constants: the power-on payload, the GATT characteristic
used for writes, whether the effect speed byte runs backwards and whether the
firmware keeps a clock worth syncing. Every such difference lives in
``LAYOUTS`` so the codec itself stays variant agnostic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from ..errors import UnknownDeviceError

ELK_WRITE_UUID = "0000fff3-0000-1000-8000-00805f9b34fb"
ELK_READ_UUID = "0000fff4-0000-1000-8000-00805f9b34fb"
LEDBLE_WRITE_UUID = "0000ffe1-0000-1000-8000-00805f9b34fb"
LEDBLE_READ_UUID = "0000ffe2-0000-1000-8000-00805f9b34fb"


class DeviceVariant(Enum):
    """Known controller families."""

    ELK_BLE = "ELK-BLE"
    LED_BLE = "LEDBLE"
    MELK = "MELK"
    ELK_BULB = "ELK-BULB"
    ELK_LAMPL = "ELK-LAMPL"


@dataclass(frozen=True)
class DeviceIdentity:
    """What discovery knows about a peripheral before connecting."""

    name: str = ""
    address: str = ""
    service_uuids: tuple[str, ...] = ()


@dataclass(frozen=True)
class VariantLayout:
    """Constant framing and scaling parameters for one variant."""

    display_name: str
    write_uuid: str
    read_uuid: str
    power_on: bytes
    power_off: bytes = b"\x00\x00\x00\xff\x00"
    prefix: int = 0x7E
    header: int = 0x00
    terminator: int = 0xEF
    frame_size: int = 9
    brightness_max: int = 100
    speed_max: int = 100
    speed_inverted: bool = False
    syncs_time: bool = False
    command_delay: float = 0.015


_DEFAULT_POWER_ON = b"\x01\x00\x00\x00\x00"

LAYOUTS: Mapping[DeviceVariant, VariantLayout] = MappingProxyType({
    DeviceVariant.ELK_BLE: VariantLayout(
        display_name="ELK-BLE",
        write_uuid=ELK_WRITE_UUID,
        read_uuid=ELK_READ_UUID,
        power_on=b"\xf0\x00\x01\xff\x00",
        syncs_time=True,
    ),
    DeviceVariant.LED_BLE: VariantLayout(
        display_name="LEDBLE",
        write_uuid=LEDBLE_WRITE_UUID,
        read_uuid=LEDBLE_READ_UUID,
        power_on=_DEFAULT_POWER_ON,
    ),
    DeviceVariant.MELK: VariantLayout(
        display_name="MELK",
        write_uuid=ELK_WRITE_UUID,
        read_uuid=ELK_READ_UUID,
        power_on=_DEFAULT_POWER_ON,
        # MELK firmware treats a larger speed byte as a slower effect.
        speed_inverted=True,
    ),
    DeviceVariant.ELK_BULB: VariantLayout(
        display_name="ELK-BULB",
        write_uuid=ELK_WRITE_UUID,
        read_uuid=ELK_READ_UUID,
        power_on=_DEFAULT_POWER_ON,
        syncs_time=True,
    ),
    DeviceVariant.ELK_LAMPL: VariantLayout(
        display_name="ELK-LAMPL",
        write_uuid=ELK_WRITE_UUID,
        read_uuid=ELK_READ_UUID,
        power_on=_DEFAULT_POWER_ON,
        syncs_time=True,
    ),
})

# Priority order matters: the first fragment found in the name wins.
NAME_FRAGMENTS: tuple[tuple[str, DeviceVariant], ...] = (
    ("ELK-BLE", DeviceVariant.ELK_BLE),
    ("LEDBLE", DeviceVariant.LED_BLE),
    ("MELK", DeviceVariant.MELK),
    ("ELK-BULB", DeviceVariant.ELK_BULB),
    ("ELK-LAMPL", DeviceVariant.ELK_LAMPL),
)

WRITE_CHARACTERISTIC_UUIDS: tuple[str, ...] = tuple(
    dict.fromkeys(layout.write_uuid for layout in LAYOUTS.values())
)


def variant_layout(variant: DeviceVariant) -> VariantLayout:
    """Return the layout table entry for ``variant``."""
    return LAYOUTS[variant]


def resolve_variant(identity: DeviceIdentity | str | None) -> DeviceVariant:
    """Classify a device by its advertised name.

    Args:
        identity: A ``DeviceIdentity`` or a bare advertised name.

    Raises:
        UnknownDeviceError: If no known name fragment occurs in the name.
    """
    name = identity.name if isinstance(identity, DeviceIdentity) else identity
    if name:
        upper = name.upper()
        for fragment, variant in NAME_FRAGMENTS:
            if fragment in upper:
                return variant
    raise UnknownDeviceError(
        f"Unknown device {name!r}. Known: {[f for f, _ in NAME_FRAGMENTS]}"
    )
