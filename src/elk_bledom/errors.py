"""Exception hierarchy shared by the protocol, transport and controller layers."""

from __future__ import annotations


class ElkBledomError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInputError(ElkBledomError, ValueError):
    """A numeric argument is outside its allowed range."""


class UnknownDeviceError(ElkBledomError, LookupError):
    """The advertised identity does not match any known device variant."""


class UnknownEffectError(ElkBledomError, LookupError):
    """The requested effect name is not in the effect table."""


class DiscoveryError(ElkBledomError, ConnectionError):
    """No compatible device could be found or connected."""


class TransportError(ElkBledomError, ConnectionError):
    """Writing a frame to the device failed."""


class NotConnectedError(ElkBledomError, ConnectionError):
    """A command was issued while no session is open."""
