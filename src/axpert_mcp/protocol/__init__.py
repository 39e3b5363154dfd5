"""Protocol layer: framing, checksum, command templates, operations and parsers."""

from .framing import Frame, build_frame, parse_frame, verify_frame
from .commands import CommandTemplate
from .operation import DeviceOperation
