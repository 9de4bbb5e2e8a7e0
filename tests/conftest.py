"""Shared fixtures: an in-memory transport standing in for BLE hardware."""

from __future__ import annotations

import asyncio

import pytest

from elk_bledom.errors import DiscoveryError, TransportError
from elk_bledom.protocol.variants import DeviceIdentity
from elk_bledom.transport.base import DeviceHandle


class FakeTransport:
    """Records every frame written; can be told to fail."""

    def __init__(self, name: str = "ELK-BLEDOM", address: str = "AA:BB:CC:DD:EE:FF"):
        self.identity = DeviceIdentity(name=name, address=address)
        self.frames: list[bytes] = []
        self.closed: list[DeviceHandle] = []
        self.fail_discovery = False
        self.fail_writes = False
        self.block_writes = False

    async def find_device(self) -> DeviceHandle:
        if self.fail_discovery:
            raise DiscoveryError("No LED device found")
        return DeviceHandle(identity=self.identity)

    async def write_frame(self, handle: DeviceHandle, frame: bytes) -> None:
        if self.block_writes:
            await asyncio.Event().wait()
        if self.fail_writes:
            raise TransportError("write failed")
        self.frames.append(frame)

    async def close(self, handle: DeviceHandle) -> None:
        self.closed.append(handle)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
