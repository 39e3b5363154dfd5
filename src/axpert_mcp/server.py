"""MCP server entry point for Voltronic / Axpert hybrid inverters.

Exposes the command catalog as tools, resources, and prompts via the Model
Context Protocol using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .exceptions import OperationError
from .models.base import to_jsonable
from .models.constants import (
    FAULT_DESCRIPTIONS,
    BatteryType,
    ChargerSourcePriority,
    OutputSourcePriority,
)
from .protocol import catalog
from .protocol.operation import DeviceOperation
from .transport.serial_connection import DEFAULT_BAUDRATE, SerialConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "axpert-inverter",
    instructions="MCP server for Voltronic / Axpert solar hybrid inverters over RS232",
)

# Global connection state
_connection: SerialConnection | None = None


def _get_connection() -> SerialConnection:
    """Get the active serial connection, raising if not connected."""
    if _connection is None or not _connection.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _connection


def _issue(operation: DeviceOperation, arg: Any = None) -> dict[str, Any]:
    """Run an operation and shape the outcome as a tool result."""
    conn = _get_connection()
    try:
        result = conn.issue(operation, arg)
    except OperationError as e:
        logger.warning("%s failed: %s", operation, e)
        return {"error": str(e), "error_type": type(e).__name__}
    return {"result": to_jsonable(result)}


def _parse_argument(argument: str | None) -> Any:
    # "solar_first,2" -> ["solar_first", "2"] for commands taking a machine number.
    if argument is None or not argument.strip():
        return None
    if "," in argument:
        return [part.strip() for part in argument.split(",")]
    return argument.strip()


def _describe(name: str, operation: DeviceOperation) -> dict[str, Any]:
    template = operation.command
    return {
        "name": name,
        "command": template.text,
        "takes_input": template.takes_input,
        "error_on_nak": operation.error_on_nak,
    }


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str, baudrate: int = DEFAULT_BAUDRATE) -> dict[str, Any]:
    """Open the RS232 connection to the inverter.

    Queries the protocol ID and serial number to confirm the device answers.

    Args:
        port: Serial device, e.g. "/dev/ttyUSB0" or "COM3".
        baudrate: Line speed, 2400 for all known models.
    """
    global _connection
    if _connection is not None and _connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _connection.port_info.port,
        }

    _connection = SerialConnection(port, baudrate)
    info = _connection.open()

    result: dict[str, Any] = {
        "connected": True,
        "port": info.port,
        "baudrate": info.baudrate,
    }
    try:
        result["protocol_id"] = _connection.issue(catalog.PROTOCOL_ID)
        result["serial_number"] = _connection.issue(catalog.SERIAL_NUMBER)
    except OperationError as e:
        logger.warning("Device identification failed: %s", e)
        result["warning"] = f"Connected, but the device did not identify: {e}"
    return result


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the RS232 connection."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


# ─── GENERIC COMMAND TOOLS ────────────────────────────────────────────

@mcp.tool()
def list_commands() -> dict[str, Any]:
    """List every command in the catalog and whether it takes an argument."""
    return {
        "commands": [
            _describe(name, op) for name, op in catalog.COMMANDS.items()
        ]
    }


@mcp.tool()
def run_command(name: str, argument: str | None = None) -> dict[str, Any]:
    """Run any catalog command by name.

    Args:
        name: Catalog name, e.g. "device_status" or "set_battery_type".
        argument: Command input, e.g. "sbu" or "54.0". Commands that also take
                  a parallel machine number accept "value,machine".
    """
    try:
        operation = catalog.get_operation(name)
    except KeyError as e:
        return {"error": str(e.args[0])}
    result = _issue(operation, _parse_argument(argument))
    result["command"] = name
    return result


# ─── STATUS TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Retrieve protocol ID, serial number and firmware versions."""
    conn = _get_connection()
    info: dict[str, Any] = {"port": conn.port_info.port}
    for key, operation in (
        ("protocol_id", catalog.PROTOCOL_ID),
        ("serial_number", catalog.SERIAL_NUMBER),
        ("main_cpu_firmware", catalog.MAIN_CPU_FIRMWARE),
        ("other_cpu_firmware", catalog.OTHER_CPU_FIRMWARE),
    ):
        outcome = _issue(operation)
        info[key] = outcome.get("result", outcome.get("error"))
    return info


@mcp.tool()
def get_device_status() -> dict[str, Any]:
    """Read live status: voltages, power, battery and PV figures (QPIGS)."""
    return _issue(catalog.DEVICE_STATUS)


@mcp.tool()
def get_device_mode() -> dict[str, Any]:
    """Read the operating mode: power_on, standby, line, battery or fault."""
    return _issue(catalog.DEVICE_MODE)


@mcp.tool()
def get_device_rating() -> dict[str, Any]:
    """Read ratings and current configuration (QPIRI)."""
    return _issue(catalog.DEVICE_RATING)


@mcp.tool()
def get_warnings() -> dict[str, Any]:
    """Read active warnings and faults (QPIWS)."""
    return _issue(catalog.DEVICE_WARNING_STATUS)


@mcp.tool()
def get_device_flags() -> dict[str, Any]:
    """Read enabled/disabled flags such as buzzer and backlight (QFLAG)."""
    return _issue(catalog.DEVICE_FLAGS)


@mcp.tool()
def get_default_settings() -> dict[str, Any]:
    """Read the factory default settings (QDI)."""
    return _issue(catalog.DEFAULT_SETTINGS)


@mcp.tool()
def get_parallel_status(machine: int = 0) -> dict[str, Any]:
    """Read the status of one unit in a parallel installation (QPGSn).

    Args:
        machine: Parallel machine number (0-9). 0 works for a single unit.
    """
    return _issue(catalog.PARALLEL_DEVICE_STATUS, machine)


# ─── SETTING TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def set_output_source_priority(priority: str) -> dict[str, Any]:
    """Set the output source priority.

    Args:
        priority: One of "utility", "solar", "sbu".
    """
    return _issue(catalog.SET_OUTPUT_SOURCE_PRIORITY, priority)


@mcp.tool()
def set_charger_source_priority(priority: str) -> dict[str, Any]:
    """Set the battery charger source priority.

    Args:
        priority: One of "utility_first", "solar_first",
                  "solar_and_utility", "solar_only".
    """
    return _issue(catalog.SET_CHARGER_SOURCE_PRIORITY, priority)


@mcp.tool()
def set_battery_type(battery_type: str) -> dict[str, Any]:
    """Set the battery type.

    Args:
        battery_type: One of "agm", "flooded", "user".
    """
    return _issue(catalog.SET_BATTERY_TYPE, battery_type)


@mcp.tool()
def set_output_frequency(frequency: int) -> dict[str, Any]:
    """Set the output frequency.

    Args:
        frequency: 50 or 60 (Hz).
    """
    return _issue(catalog.SET_OUTPUT_FREQUENCY, frequency)


# ─── RESOURCES ────────────────────────────────────────────────────────

@mcp.resource("axpert://device/info")
def resource_device_info() -> str:
    """Current connection and identification info."""
    if _connection is None or not _connection.connected:
        return json.dumps({"connected": False})
    return json.dumps({"connected": True, **get_device_info()})


@mcp.resource("axpert://device/status")
def resource_device_status() -> str:
    """Live device status."""
    return json.dumps(get_device_status())


@mcp.resource("axpert://catalog/commands")
def resource_command_catalog() -> str:
    """All known commands."""
    return json.dumps(list_commands())


@mcp.resource("axpert://catalog/fault-codes")
def resource_fault_codes() -> str:
    """Fault code descriptions reported by QPGS."""
    return json.dumps({code.code: text for code, text in FAULT_DESCRIPTIONS.items()})


@mcp.resource("axpert://catalog/settings")
def resource_setting_values() -> str:
    """Accepted values for the named setting tools."""
    return json.dumps({
        "output_source_priority": [m.to_json() for m in OutputSourcePriority if m.name != "UNKNOWN"],
        "charger_source_priority": [m.to_json() for m in ChargerSourcePriority if m.name != "UNKNOWN"],
        "battery_type": [m.to_json() for m in BatteryType if m.name != "UNKNOWN"],
    })


# ─── PROMPTS ──────────────────────────────────────────────────────────

@mcp.prompt()
def diagnose_system() -> str:
    """Walk through a health check of the inverter."""
    return """Check the health of the inverter.

1. Use get_device_mode to see whether it is on line, battery or in fault.
2. Use get_warnings and explain each active warning and its level.
3. Use get_device_status and look at battery voltage, load percentage,
   inverter temperature and PV input.
4. Compare against get_device_rating (cut-off, float and bulk voltages).

Summarise anything abnormal and suggest setting changes, but do not change
any setting without asking first."""


@mcp.prompt()
def optimize_solar_usage(goal: str) -> str:
    """Suggest source priorities for a goal.

    Args:
        goal: e.g. "maximise self consumption" or "protect the battery".
    """
    return f"""Read the current configuration with get_device_rating and the
live figures with get_device_status. Suggest output and charger source
priorities for: {goal}

Consider:
- Output source priority (utility, solar, sbu)
- Charger source priority (utility_first, solar_first, solar_and_utility, solar_only)
- Battery re-charge and re-discharge voltages relative to the cut-off voltage

Use set_output_source_priority and set_charger_source_priority only after
confirming with the user."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
