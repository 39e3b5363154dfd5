"""Polling read loop that drains a byte source into one complete frame.

The loop is single-threaded and cooperative: it asks the transport for one
byte at a time and sleeps for ``retry_interval`` whenever none is available.
The deadline is checked after every poll that does not complete the frame,
so a device streaming bytes without a terminator still times out.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

from ..exceptions import ReadTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_READ_TIMEOUT = 2.0
DEFAULT_RETRY_INTERVAL = 0.05


class Transport(Protocol):
    """Anything that can carry one request and its response.

    ``read_one_or_none`` must not block; it returns ``None`` when no byte is
    currently available.
    """

    def write(self, data: bytes) -> int | None:
        ...

    def read_one_or_none(self) -> Optional[int]:
        ...


def read_frame(
    source: Transport,
    terminator: bytes = b"\r",
    timeout: float = DEFAULT_READ_TIMEOUT,
    retry_interval: float = DEFAULT_RETRY_INTERVAL,
) -> bytes:
    """Read bytes from ``source`` until ``terminator`` has been received.

    Args:
        source: Non-blocking byte source.
        terminator: Single byte that ends a frame.
        timeout: Seconds allowed since the loop started.
        retry_interval: Seconds to sleep after an empty poll.

    Returns:
        Every byte read, terminator included.

    Raises:
        ReadTimeoutError: If the deadline passes before the terminator.
    """
    if len(terminator) != 1:
        raise ValueError(f"Terminator must be a single byte, got {terminator!r}")

    end = terminator[0]
    buffer = bytearray()
    started = time.monotonic()
    while True:
        byte = source.read_one_or_none()
        if byte is not None:
            buffer.append(byte)
            if byte == end:
                return bytes(buffer)
        if time.monotonic() - started > timeout:
            logger.debug("Timed out with partial frame %r", bytes(buffer))
            raise ReadTimeoutError(timeout, bytes(buffer))
        if byte is None:
            time.sleep(retry_interval)
