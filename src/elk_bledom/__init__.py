"""Protocol encoder and BLE controller for ELK-BLEDOM style LED strips."""

from .controller import BleLedController, ConnectionState
from .errors import (
    DiscoveryError,
    ElkBledomError,
    InvalidInputError,
    NotConnectedError,
    TransportError,
    UnknownDeviceError,
    UnknownEffectError,
)
from .models.effects import EFFECTS, Effect, lookup_effect
from .models.schedule import ScheduleDirection, Weekday, encode_weekday_set, parse_days
from .protocol.variants import DeviceIdentity, DeviceVariant, resolve_variant

__version__ = "0.1.0"
