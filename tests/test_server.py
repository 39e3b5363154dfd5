"""Tests for the MCP tool layer, run against scripted device replies."""

import json
import sys
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeTransport

from axpert_mcp.exceptions import ReadTimeoutError
from axpert_mcp.protocol import catalog
from axpert_mcp.transport.serial_connection import PortInfo


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_instance.prompt.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch.dict(sys.modules, {}):
        with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
            # Remove cached server module so it re-imports with our mock
            sys.modules.pop("axpert_mcp.server", None)
            import axpert_mcp.server as server_mod

    return server_mod


def _replying(*payloads):
    """A connection whose device answers each command with the next payload."""
    transports = [FakeTransport.replying(p) for p in payloads]
    conn = MagicMock()
    conn.port_info = PortInfo(port="/dev/ttyUSB0")
    conn.issue.side_effect = lambda op, arg=None: op.issue(transports.pop(0), arg)
    conn.transports = list(transports)
    return conn


def test_tools_require_connection():
    server = _get_server_module()
    with pytest.raises(RuntimeError, match="connect"):
        server.get_device_status()


def test_get_device_mode():
    server = _get_server_module()
    conn = _replying("(L")
    with patch.object(server, "_get_connection", return_value=conn):
        assert server.get_device_mode() == {"result": "line"}


def test_query_nak_is_reported_as_error():
    server = _get_server_module()
    conn = _replying("(NAK")
    with patch.object(server, "_get_connection", return_value=conn):
        result = server.get_warnings()
    assert result["error_type"] == "NegativeAcknowledgementError"
    assert "QPIWS" in result["error"]


def test_setter_nak_is_a_false_result():
    server = _get_server_module()
    conn = _replying("(NAK")
    with patch.object(server, "_get_connection", return_value=conn):
        assert server.set_battery_type("user") == {"result": False}


def test_run_command_formats_argument():
    server = _get_server_module()
    conn = _replying("(ACK")
    with patch.object(server, "_get_connection", return_value=conn):
        result = server.run_command("set_output_source_priority", "sbu")
    assert result == {"result": True, "command": "set_output_source_priority"}
    assert conn.transports[0].written.startswith(b"POP02")


def test_run_command_accepts_padded_code():
    server = _get_server_module()
    conn = _replying("(ACK")
    with patch.object(server, "_get_connection", return_value=conn):
        result = server.run_command("set_output_source_priority", "02")
    assert result["result"] is True
    assert conn.transports[0].written.startswith(b"POP02")


def test_run_command_splits_machine_number():
    server = _get_server_module()
    conn = _replying("(ACK")
    with patch.object(server, "_get_connection", return_value=conn):
        result = server.run_command("set_maximum_charging_current", "30, 1")
    assert result["result"] is True
    assert conn.transports[0].written.startswith(b"MCHGC130")


def test_run_command_invalid_argument_writes_nothing():
    server = _get_server_module()
    conn = _replying("(ACK")
    with patch.object(server, "_get_connection", return_value=conn):
        result = server.run_command("set_output_frequency", "55")
    assert result["error_type"] == "InvalidArgumentError"
    assert conn.transports[0].written == b""


def test_run_command_unknown_name():
    server = _get_server_module()
    result = server.run_command("make_coffee")
    assert "Unknown command" in result["error"]


def test_list_commands_covers_catalog():
    server = _get_server_module()
    listed = {c["name"]: c for c in server.list_commands()["commands"]}
    assert set(listed) == set(catalog.COMMANDS)
    assert listed["device_status"]["command"] == "QPIGS"
    assert listed["set_battery_type"]["takes_input"] is True
    assert listed["set_battery_type"]["error_on_nak"] is False


def test_parallel_status_defaults_to_machine_zero():
    server = _get_server_module()
    conn = _replying("(NAK")
    with patch.object(server, "_get_connection", return_value=conn):
        server.get_parallel_status()
    assert conn.transports[0].written.startswith(b"QPGS0")


def test_connect_identifies_device():
    server = _get_server_module()
    mock_conn = MagicMock()
    mock_conn.connected = True
    mock_conn.open.return_value = PortInfo(port="/dev/ttyUSB0", baudrate=2400)
    mock_conn.issue.side_effect = [30, "92931509101901"]

    with patch.object(server, "SerialConnection", return_value=mock_conn):
        result = server.connect("/dev/ttyUSB0")

    assert result == {
        "connected": True,
        "port": "/dev/ttyUSB0",
        "baudrate": 2400,
        "protocol_id": 30,
        "serial_number": "92931509101901",
    }
    assert server.disconnect() == {"disconnected": True}
    mock_conn.close.assert_called_once()


def test_connect_warns_when_device_is_silent():
    server = _get_server_module()
    mock_conn = MagicMock()
    mock_conn.open.return_value = PortInfo(port="/dev/ttyUSB0")
    mock_conn.issue.side_effect = ReadTimeoutError(2.0)

    with patch.object(server, "SerialConnection", return_value=mock_conn):
        result = server.connect("/dev/ttyUSB0")

    assert result["connected"] is True
    assert "did not identify" in result["warning"]


def test_fault_code_resource():
    server = _get_server_module()
    codes = json.loads(server.resource_fault_codes())
    assert codes["00"] == "No faults"
    assert codes["72"] == "Output circuit failed"
