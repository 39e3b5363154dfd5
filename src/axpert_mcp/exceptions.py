"""Exception hierarchy for the inverter protocol layer."""

from __future__ import annotations


class InverterError(Exception):
    """Base class for every error raised by this package."""


class FrameError(InverterError):
    """A wire frame could not be validated."""


class ChecksumMismatchError(FrameError):
    """The checksum carried by a frame does not match its payload."""

    def __init__(self, expected: bytes, received: bytes) -> None:
        super().__init__(
            f"Checksum mismatch: expected {expected.hex()}, received {received.hex()}"
        )
        self.expected = expected
        self.received = received


class MalformedFrameError(FrameError):
    """The frame is truncated, badly terminated or not ASCII."""


class InternalInconsistencyError(FrameError):
    """The codec disagrees with its own encoding of a payload."""


class OperationError(InverterError):
    """Base class for failures of a single device operation."""


class InvalidArgumentError(OperationError, ValueError):
    """A command argument was missing, unexpected or rejected by its rule.

    Always raised before any byte is written to the transport.
    """


class ReadTimeoutError(OperationError, TimeoutError):
    """No complete frame arrived before the read deadline."""

    def __init__(self, timeout: float, received: bytes = b"") -> None:
        super().__init__(
            f"Read timeout of {timeout:g}s reached after {len(received)} byte(s)"
        )
        self.timeout = timeout
        self.received = received


class FrameCorruptError(OperationError):
    """The response frame failed validation (see ``__cause__``)."""


class NegativeAcknowledgementError(OperationError):
    """The device answered ``(NAK``."""


class ResultParseError(OperationError):
    """A checksum-valid payload could not be interpreted by its parser."""

    def __init__(self, message: str, payload: str) -> None:
        super().__init__(message)
        self.payload = payload
