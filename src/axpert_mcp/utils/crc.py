"""CRC-16 checksum used by Voltronic / Axpert RS232 frames.

This is the XMODEM polynomial (0x1021) evaluated a nibble at a time with a
16-entry table. After the accumulator is computed, each of its two bytes is
bumped by one if it collides with a byte the device treats as a control
character, so a checksum can never be mistaken for ``(``, CR or LF.
"""

from __future__ import annotations

CRC_TABLE = (
    0x0000, 0x1021, 0x2042, 0x3063, 0x4084, 0x50A5, 0x60C6, 0x70E7,
    0x8108, 0x9129, 0xA14A, 0xB16B, 0xC18C, 0xD1AD, 0xE1CE, 0xF1EF,
)

RESERVED_BYTES = frozenset({0x28, 0x0D, 0x0A})


def crc16(data: bytes) -> int:
    """Compute the raw 16-bit accumulator over ``data``.

    No reserved-byte adjustment is applied; see :func:`checksum` for the
    value that actually goes on the wire.
    """
    crc = 0
    for byte in data:
        for nibble in (byte >> 4, byte & 0x0F):
            da = ((crc >> 8) >> 4) & 0xFF
            crc = ((crc << 4) & 0xFFFF) ^ CRC_TABLE[(da ^ nibble) & 0x0F]
    return crc


def _escape(value: int) -> int:
    if value in RESERVED_BYTES:
        return (value + 1) & 0xFF
    return value


def checksum(data: bytes) -> tuple[int, int]:
    """Return the transmitted checksum of ``data`` as ``(high, low)`` bytes."""
    crc = crc16(data)
    return _escape((crc >> 8) & 0xFF), _escape(crc & 0xFF)


def checksum_bytes(data: bytes) -> bytes:
    """Return the two checksum bytes in wire order (high byte first)."""
    return bytes(checksum(data))
