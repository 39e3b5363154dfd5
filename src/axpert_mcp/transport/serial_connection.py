"""RS232 connection to a Voltronic / Axpert inverter.

The inverter talks 2400 baud, 8 data bits, no parity, one stop bit. The port
is opened with a zero read timeout so single-byte reads never block, which
is what :func:`~axpert_mcp.transport.reader.read_frame` expects.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

import serial

if TYPE_CHECKING:
    from ..protocol.operation import DeviceOperation

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 2400
WRITE_TIMEOUT = 1.0


@dataclass
class PortInfo:
    """Settings of the opened serial port."""

    port: str = ""
    baudrate: int = DEFAULT_BAUDRATE


class SerialConnection:
    """Manages the serial link to the inverter.

    Only one command may be outstanding on the link, so :meth:`issue` holds
    a lock for the whole request/response exchange.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        status = conn.issue(catalog.DEVICE_STATUS)
        conn.close()
    """

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE) -> None:
        self._port_info = PortInfo(port=port, baudrate=baudrate)
        self._serial: serial.Serial | None = None
        self._lock = threading.Lock()

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def port_info(self) -> PortInfo:
        return self._port_info

    def open(self) -> PortInfo:
        """Open the serial port.

        Raises:
            ConnectionError: If the port cannot be opened.
        """
        if self.connected:
            return self._port_info
        try:
            self._serial = serial.Serial(
                port=self._port_info.port,
                baudrate=self._port_info.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=0,
                write_timeout=WRITE_TIMEOUT,
            )
        except serial.SerialException as e:
            raise ConnectionError(
                f"Could not open serial port {self._port_info.port!r}. "
                f"Ensure the inverter is connected and you have permissions. "
                f"Last error: {e}"
            ) from e

        logger.info(
            "Connected to %s at %d baud",
            self._port_info.port,
            self._port_info.baudrate,
        )
        return self._port_info

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is None:
            return
        try:
            self._serial.close()
        except serial.SerialException as e:
            logger.warning("Error closing port: %s", e)
        finally:
            self._serial = None
            logger.info("Disconnected")

    def write(self, data: bytes) -> Optional[int]:
        """Write an encoded frame to the port.

        Raises:
            ConnectionError: If not connected.
        """
        port = self._require_port()
        # Drop anything left over from an earlier, abandoned exchange.
        port.reset_input_buffer()
        written = port.write(data)
        port.flush()
        return written

    def read_one_or_none(self) -> Optional[int]:
        """Return the next received byte, or ``None`` if none is waiting."""
        data = self._require_port().read(1)
        if not data:
            return None
        return data[0]

    def issue(self, operation: DeviceOperation, arg: Any = None) -> Any:
        """Run ``operation`` on this link with exclusive access."""
        with self._lock:
            return operation.issue(self, arg)

    def _require_port(self) -> serial.Serial:
        if not self.connected:
            raise ConnectionError("Not connected to device")
        return self._serial
