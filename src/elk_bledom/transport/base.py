"""Interface between the command controller and a concrete transport."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from ..protocol.variants import DeviceIdentity


@dataclass
class DeviceHandle:
    """An open link to one peripheral.

    ``identity`` is all the controller inspects; ``client``, ``write_char``
    and ``command_delay`` belong to the transport that created the handle.
    """

    identity: DeviceIdentity
    client: Any = field(default=None, repr=False)
    write_char: Any = field(default=None, repr=False)
    command_delay: float | None = None


class Transport(Protocol):
    """What the controller needs from a BLE stack."""

    async def find_device(self) -> DeviceHandle:
        """Discover and connect to a device. Raises ``DiscoveryError``."""
        ...

    async def write_frame(self, handle: DeviceHandle, frame: bytes) -> None:
        """Write one frame. Raises ``TransportError``."""
        ...

    async def close(self, handle: DeviceHandle) -> None:
        """Release the link behind ``handle``."""
        ...
