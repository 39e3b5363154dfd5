"""Frame builder and parser for the Voltronic RS232 protocol.

Frame layout::

    +--------------------+---------------+---------------+------+
    |   ASCII payload    | Checksum high | Checksum low  |  CR  |
    |  variable length   |    1 byte     |    1 byte     | 0x0D |
    +--------------------+---------------+---------------+------+

- Payload: printable ASCII, e.g. ``QPIGS`` or ``(230.0 50.0 ...``
- Checksum: see :mod:`axpert_mcp.utils.crc`, high byte first
- Terminator: a single carriage return

Incoming frames must end exactly at the terminator; bytes after it are
treated as a malformed frame rather than silently dropped.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import (
    ChecksumMismatchError,
    InternalInconsistencyError,
    InvalidArgumentError,
    MalformedFrameError,
)
from ..utils.crc import checksum_bytes

TERMINATOR = b"\r"
CHECKSUM_SIZE = 2
NAK_PAYLOAD = "(NAK"
ACK_PAYLOAD = "(ACK"


def _encode_payload(payload: str, terminator: bytes) -> bytes:
    try:
        data = payload.encode("ascii")
    except UnicodeEncodeError as e:
        raise InvalidArgumentError(
            f"Payload {payload!r} contains non-ASCII characters"
        ) from e
    if terminator in data:
        raise InvalidArgumentError(
            f"Payload {payload!r} contains the frame terminator"
        )
    return data


@dataclass(frozen=True, eq=False)
class Frame:
    """A validated protocol frame.

    Two frames are equal when their encoded bytes are equal.
    """

    payload: str
    terminator: bytes = TERMINATOR

    @property
    def checksum(self) -> bytes:
        return checksum_bytes(self.payload.encode("ascii"))

    @property
    def raw(self) -> bytes:
        """The bytes that go on the wire."""
        return build_frame(self.payload, self.terminator)

    @property
    def is_nak(self) -> bool:
        return self.payload.upper() == NAK_PAYLOAD

    @property
    def is_ack(self) -> bool:
        return self.payload.upper() == ACK_PAYLOAD

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Frame):
            return NotImplemented
        return self.raw == other.raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __repr__(self) -> str:
        return f"Frame(payload={self.payload!r}, checksum={self.checksum.hex()})"


def build_frame(payload: str, terminator: bytes = TERMINATOR) -> bytes:
    """Encode a payload as ``payload + checksum + terminator``.

    Args:
        payload: ASCII command or response text.
        terminator: Single terminator byte, carriage return by default.

    Returns:
        The encoded frame ready to be written to the transport.

    Raises:
        InvalidArgumentError: If the payload is not ASCII or contains the
            terminator byte.
    """
    data = _encode_payload(payload, terminator)
    return data + checksum_bytes(data) + terminator


def parse_frame(data: bytes, terminator: bytes = TERMINATOR) -> Frame:
    """Validate a received frame and strip it back to its payload.

    Args:
        data: Bytes received from the device, ending with the terminator.
        terminator: Single terminator byte, carriage return by default.

    Raises:
        MalformedFrameError: If the frame is too short, does not end with the
            terminator, carries bytes after a terminator or is not ASCII.
        ChecksumMismatchError: If the checksum does not match the payload.
    """
    if len(data) < CHECKSUM_SIZE + len(terminator):
        raise MalformedFrameError(f"Frame too short: {data!r}")
    if not data.endswith(terminator):
        raise MalformedFrameError(f"Frame does not end with terminator: {data!r}")

    body = data[: -len(terminator)]
    payload = body[:-CHECKSUM_SIZE]
    received = body[-CHECKSUM_SIZE:]
    if terminator in payload:
        raise MalformedFrameError(f"Unexpected data after terminator: {data!r}")

    expected = checksum_bytes(payload)
    if expected != received:
        raise ChecksumMismatchError(expected, received)

    try:
        text = payload.decode("ascii")
    except UnicodeDecodeError as e:
        raise MalformedFrameError(f"Payload is not ASCII: {payload!r}") from e
    return Frame(payload=text, terminator=terminator)


def verify_frame(data: bytes, terminator: bytes = TERMINATOR) -> Frame:
    """Parse a frame, then re-encode it and compare with the input.

    Raises:
        InternalInconsistencyError: If the re-encoded frame differs from
            ``data``. This indicates a codec bug, not a transmission error.
    """
    frame = parse_frame(data, terminator)
    if frame.raw != data:
        raise InternalInconsistencyError(
            f"Re-encoding {frame.payload!r} gave {frame.raw!r}, expected {data!r}"
        )
    return frame
