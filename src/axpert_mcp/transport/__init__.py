"""Transport layer: the polling read loop and the RS232 connection."""

from .reader import Transport, read_frame
from .serial_connection import SerialConnection
