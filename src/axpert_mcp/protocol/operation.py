"""Device operations: a command template, a result parser and an I/O policy.

An operation is the single externally callable unit of the protocol::

    status = DEVICE_STATUS.issue(connection)

Every call builds a fresh frame, writes it, waits for one response frame and
hands its payload to the parser. Operations hold no mutable state and can be
shared freely; only the transport needs exclusive access while a call runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..exceptions import (
    FrameCorruptError,
    FrameError,
    NegativeAcknowledgementError,
    ResultParseError,
)
from ..transport.reader import (
    DEFAULT_READ_TIMEOUT,
    DEFAULT_RETRY_INTERVAL,
    Transport,
    read_frame,
)
from .commands import CommandTemplate
from .framing import TERMINATOR, Frame, parse_frame
from .parser import ResultParser

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class DeviceOperation(Generic[T]):
    """One complete request/response exchange with the device.

    Args:
        command: Template (or plain command text) for the request.
        parser: Converts the response payload into the result.
        error_on_nak: Raise :class:`NegativeAcknowledgementError` when the
            device answers ``(NAK``. When ``False`` the NAK payload is given
            to the parser like any other response.
        read_timeout: Seconds to wait for a complete response frame.
        retry_interval: Seconds to sleep between empty polls.
        terminator: Single byte ending every frame.
    """

    command: CommandTemplate
    parser: ResultParser[T]
    error_on_nak: bool = True
    read_timeout: float = DEFAULT_READ_TIMEOUT
    retry_interval: float = DEFAULT_RETRY_INTERVAL
    terminator: bytes = TERMINATOR

    def __post_init__(self) -> None:
        if not isinstance(self.command, CommandTemplate):
            object.__setattr__(self, "command", CommandTemplate(self.command))
        if not callable(self.parser):
            raise TypeError(f"Expected a callable parser, got {self.parser!r}")
        if len(self.terminator) != 1:
            raise ValueError(
                f"Terminator must be a single byte, got {self.terminator!r}"
            )
        if self.read_timeout <= 0 or self.retry_interval < 0:
            raise ValueError("read_timeout must be positive and retry_interval non-negative")

    def build_frame(self, arg: Any = None) -> Frame:
        """Build the request frame for ``arg`` without touching any transport."""
        return self.command.build_frame(arg, self.terminator)

    def issue(self, transport: Transport, arg: Any = None) -> T:
        """Send the command and return the parsed response.

        Raises:
            InvalidArgumentError: Bad ``arg``; nothing was written.
            ReadTimeoutError: No complete frame before ``read_timeout``.
            FrameCorruptError: The response failed checksum or framing checks.
            NegativeAcknowledgementError: The device answered ``(NAK``.
            ResultParseError: The parser could not interpret the payload.
        """
        frame = self.build_frame(arg)
        logger.debug("Sending %s", frame)
        transport.write(frame.raw)
        raw = read_frame(
            transport,
            terminator=self.terminator,
            timeout=self.read_timeout,
            retry_interval=self.retry_interval,
        )
        return self.parse_response(raw)

    def parse_response(self, raw: bytes) -> T:
        """Validate a raw response frame and run the parser on its payload."""
        try:
            frame = parse_frame(raw, self.terminator)
        except FrameError as e:
            raise FrameCorruptError(f"{self.command}: {e}") from e
        logger.debug("Received %s", frame)

        if self.error_on_nak and frame.is_nak:
            logger.warning("%s was rejected by the device (NAK)", self.command)
            raise NegativeAcknowledgementError(
                f"Received NAK for {self.command}; the command is not supported "
                f"or a value was out of range"
            )
        return self.parse_payload(frame.payload)

    def parse_payload(self, payload: str) -> T:
        """Run the parser, normalising any failure to :class:`ResultParseError`."""
        try:
            return self.parser(payload)
        except Exception as e:
            raise ResultParseError(
                f"Could not parse the {self.command} result {payload!r} "
                f"({type(e).__name__}: {e})",
                payload,
            ) from e

    def __str__(self) -> str:
        return f"DeviceOperation({self.command})"
