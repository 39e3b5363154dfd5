"""Tests for the polling read loop."""

import time
from unittest.mock import patch

import pytest

from axpert_mcp.exceptions import ReadTimeoutError
from axpert_mcp.protocol.operation import DeviceOperation
from axpert_mcp.protocol.parser import parse_protocol_id
from axpert_mcp.transport.reader import read_frame

from conftest import FakeTransport


def test_reads_until_terminator():
    """The terminator is included and nothing after it is consumed."""
    transport = FakeTransport(list(b"(ACK\x01\x02\rEXTRA"))
    assert read_frame(transport) == b"(ACK\x01\x02\r"
    assert transport.read_one_or_none() == ord("E")


def test_sleeps_on_empty_polls():
    transport = FakeTransport([None, None, ord("("), None, ord("\r")])
    with patch("axpert_mcp.transport.reader.time.sleep") as sleep:
        assert read_frame(transport, retry_interval=0.02) == b"(\r"
    assert sleep.call_count == 3
    sleep.assert_called_with(0.02)


def test_timeout_when_terminator_never_arrives():
    transport = FakeTransport(list(b"(123"))
    started = time.monotonic()
    with pytest.raises(ReadTimeoutError) as exc:
        read_frame(transport, timeout=0.05, retry_interval=0.01)
    assert time.monotonic() - started < 1.0
    assert exc.value.received == b"(123"
    assert isinstance(exc.value, TimeoutError)


def test_custom_terminator():
    transport = FakeTransport(list(b"abc\ndef"))
    assert read_frame(transport, terminator=b"\n") == b"abc\n"


def test_terminator_must_be_single_byte():
    with pytest.raises(ValueError):
        read_frame(FakeTransport(), terminator=b"\r\n")


class StreamingTransport:
    """Always has another non-terminator byte ready."""

    def __init__(self, byte: int = ord("X")) -> None:
        self.byte = byte
        self.polls = 0

    def write(self, data: bytes) -> int:
        return len(data)

    def read_one_or_none(self):
        self.polls += 1
        return self.byte


def test_timeout_while_bytes_keep_arriving():
    """A stream with no terminator times out instead of reading forever."""
    transport = StreamingTransport()
    started = time.monotonic()
    with pytest.raises(ReadTimeoutError) as exc:
        read_frame(transport, timeout=0.05, retry_interval=0.01)
    assert time.monotonic() - started < 1.0
    assert exc.value.received == b"X" * transport.polls


def test_streaming_timeout_does_not_sleep():
    with patch("axpert_mcp.transport.reader.time.sleep") as sleep:
        with pytest.raises(ReadTimeoutError):
            read_frame(StreamingTransport(), timeout=0.02)
    sleep.assert_not_called()


def test_operation_times_out_on_endless_stream():
    operation = DeviceOperation("QPI", parse_protocol_id, read_timeout=0.05)
    with pytest.raises(ReadTimeoutError):
        operation.issue(StreamingTransport())
