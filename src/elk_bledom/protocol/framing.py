"""Frame builder and parser for ELK-BLEDOM command frames.

Frame layout::

    +--------+--------+---------+-------------------------+------------+
    | Prefix | Header | Opcode  |        Payload          | Terminator |
    | 1 byte | 1 byte | 1 byte  | 5 bytes, zero padded    |   1 byte   |
    +--------+--------+---------+-------------------------+------------+

- Prefix: 0x7E on every documented variant
- Header: 0x00 on every documented variant
- Terminator: 0xEF on every documented variant

The device never answers, so a frame is the whole unit of output. The
prefix, header and terminator bytes come from the variant layout table.
"""

from __future__ import annotations

from dataclasses import dataclass

from .variants import DeviceVariant, variant_layout

PAYLOAD_SIZE = 5
FRAME_SIZE = 3 + PAYLOAD_SIZE + 1


@dataclass(frozen=True)
class Frame:
    """A parsed protocol frame."""

    opcode: int
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"Frame(opcode=0x{self.opcode:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def build_frame(variant: DeviceVariant, opcode: int, payload: bytes = b"") -> bytes:
    """Build a fixed-length frame for ``variant``.

    Args:
        variant: Device variant whose layout supplies the framing bytes.
        opcode: Single-byte command opcode.
        payload: Up to five payload bytes; the rest is zero padded.

    Returns:
        A ``bytes`` object ready to be written to the GATT characteristic.
    """
    layout = variant_layout(variant)
    body_size = layout.frame_size - 4
    if len(payload) > body_size:
        raise ValueError(
            f"Payload must be at most {body_size} bytes, got {len(payload)}"
        )
    body = payload + b"\x00" * (body_size - len(payload))
    return bytes([layout.prefix, layout.header, opcode]) + body + bytes([layout.terminator])


def parse_frame(variant: DeviceVariant, data: bytes) -> Frame | None:
    """Parse a raw frame back into opcode and payload.

    Returns:
        A ``Frame`` if the bytes carry the framing of ``variant``,
        or ``None`` if the length, prefix, header or terminator is wrong.
    """
    layout = variant_layout(variant)
    if len(data) != layout.frame_size:
        return None
    if data[0] != layout.prefix or data[1] != layout.header:
        return None
    if data[-1] != layout.terminator:
        return None
    return Frame(opcode=data[2], payload=bytes(data[3:-1]))
