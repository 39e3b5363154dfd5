"""Response parsing for device payloads.

A result parser is any callable taking the checksum-verified response payload
(e.g. ``"(230.0 50.0 ..."``) and returning a typed value. Parsers may raise
anything; :class:`~axpert_mcp.protocol.operation.DeviceOperation` turns every
failure into a :class:`~axpert_mcp.exceptions.ResultParseError`.
"""

from __future__ import annotations

import re
from typing import Callable, TypeVar

from ..models.constants import (
    BatteryStatus,
    BatteryType,
    ChargerSourcePriority,
    DeviceMode,
    DeviceTopology,
    DeviceType,
    FaultCode,
    InputVoltageSensitivity,
    OutputMode,
    OutputSourcePriority,
    PvParallelOkMode,
    PvPowerBalanceMode,
    WarningLevel,
)
from ..models.rating import DefaultSettings, DeviceRating
from ..models.status import (
    DeviceFlags,
    DeviceStatus,
    DeviceWarning,
    ParallelDeviceStatus,
)
from .framing import ACK_PAYLOAD

T = TypeVar("T")

ResultParser = Callable[[str], T]

_TRUE = {"1", "y", "t", "true"}
_FALSE = {"0", "n", "f", "false"}


# ─── FIELD HELPERS ───────────────────────────────────────────────────


def strip_response(payload: str) -> str:
    """Remove the leading ``(`` every data response starts with."""
    if not payload.startswith("("):
        raise ValueError(f"Response {payload!r} does not start with '('")
    return payload[1:]


def data_fields(payload: str, minimum: int = 0) -> list[str]:
    """Split a space separated response into its fields.

    Raises:
        ValueError: If fewer than ``minimum`` fields are present.
    """
    fields = strip_response(payload).split()
    if len(fields) < minimum:
        raise ValueError(f"Expected at least {minimum} fields, got {len(fields)}")
    return fields


def to_bool(text: str) -> bool:
    """Parse the device's boolean spellings (``1``/``0``, ``y``/``n``...)."""
    value = text.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid value for bool: {text!r}")


def _bits(text: str) -> list[bool]:
    return [to_bool(c) for c in text]


def _decode_hex_digits(version: str) -> str:
    # Each character is a hex digit rendered in decimal, e.g. "0A" -> "010".
    return ".".join(
        "".join(str(int(c, 16)) for c in part) for part in version.split(".")
    )


# ─── COMMAND PARSERS ─────────────────────────────────────────────────


def parse_ack(payload: str) -> bool:
    """``True`` if the device acknowledged a setter command."""
    return payload.upper() == ACK_PAYLOAD


def parse_protocol_id(payload: str) -> int:
    """QPI: ``(PI30`` -> ``30``."""
    body = strip_response(payload)
    if not body.upper().startswith("PI"):
        raise ValueError(f"Unexpected protocol id response {payload!r}")
    return int(body[2:], 10)


def parse_serial_number(payload: str) -> str:
    """QID: ``(92931701100132`` -> ``"92931701100132"``."""
    return strip_response(payload).strip()


def parse_firmware_version(payload: str) -> str:
    """QVFW / QVFW2: ``(VERFW:00072.70`` -> ``"00072.70"``."""
    body = strip_response(payload)
    prefix, sep, version = body.partition(":")
    if not sep or not prefix.upper().startswith("VERFW"):
        raise ValueError(f"Unexpected firmware response {payload!r}")
    return _decode_hex_digits(version.strip()).upper()


def parse_device_rating(payload: str) -> DeviceRating:
    """QPIRI: device rating information."""
    r = data_fields(payload, 25)
    return DeviceRating(
        utility_voltage=float(r[0]),
        utility_current=float(r[1]),
        output_voltage=float(r[2]),
        output_frequency=float(r[3]),
        output_current=float(r[4]),
        output_va=int(r[5], 10),
        output_watts=int(r[6], 10),
        battery_voltage=float(r[7]),
        battery_recharge_voltage=float(r[8]),
        battery_cutoff_voltage=float(r[9]),
        battery_bulk_charge_voltage=float(r[10]),
        battery_float_charge_voltage=float(r[11]),
        battery_type=BatteryType(r[12]),
        maximum_utility_charge_current=int(r[13], 10),
        maximum_charge_current=int(r[14], 10),
        input_voltage_sensitivity=InputVoltageSensitivity(r[15]),
        output_source_priority=OutputSourcePriority(r[16]),
        charger_source_priority=ChargerSourcePriority(r[17]),
        maximum_parallel_units=int(r[18], 10),
        device_type=DeviceType(r[19]),
        device_topology=DeviceTopology(r[20]),
        output_mode=OutputMode(r[21]),
        battery_redischarge_voltage=float(r[22]),
        pv_parallel_ok_mode=PvParallelOkMode(r[23]),
        pv_power_balance_mode=PvPowerBalanceMode(r[24]),
    )


_FLAG_NAMES = {
    "a": "enable_buzzer",
    "b": "enable_bypass_to_utility_on_overload",
    "j": "enable_power_saving",
    "k": "enable_lcd_timeout_escape_to_default_page",
    "u": "enable_overload_restart",
    "v": "enable_over_temperature_restart",
    "x": "enable_lcd_backlight",
    "y": "enable_primary_source_interrupt_alarm",
    "z": "enable_fault_code_recording",
}


def parse_device_flags(payload: str) -> DeviceFlags:
    """QFLAG: ``(EbkuvxzDajy`` -> enabled/disabled flags."""
    body = strip_response(payload)
    match = re.fullmatch(r"(?:E([a-z]*))?(?:D([a-z]*))?", body)
    if match is None:
        raise ValueError(f"Unexpected flag response {payload!r}")
    enabled, disabled = match.group(1) or "", match.group(2) or ""

    values: dict[str, bool] = {}
    for letters, state in ((enabled, True), (disabled, False)):
        for letter in letters:
            name = _FLAG_NAMES.get(letter)
            if name is not None:
                values[name] = state
    return DeviceFlags(**values)


def parse_device_status(payload: str) -> DeviceStatus:
    """QPIGS: general status parameters."""
    r = data_fields(payload, 17)
    status = _bits(r[16])
    if len(status) < 8:
        raise ValueError(f"Expected 8 status bits, got {r[16]!r}")
    return DeviceStatus(
        utility_voltage=float(r[0]),
        utility_frequency=float(r[1]),
        output_voltage=float(r[2]),
        output_frequency=float(r[3]),
        output_va=int(r[4], 10),
        output_watts=int(r[5], 10),
        output_load_percent=int(r[6], 10),
        dc_bus_voltage=int(r[7], 10),
        battery_voltage=float(r[8]),
        battery_charge_current=int(r[9], 10),
        battery_capacity_remaining=int(r[10], 10),
        inverter_temperature_celsius=int(r[11], 10),
        pv_input_current=float(r[12]),
        pv_input_voltage=float(r[13]),
        solar_charge_controller_battery_voltage=float(r[14]),
        battery_discharge_current=int(r[15], 10),
        add_sbu_priority_version=status[0],
        configuration_changed=status[1],
        solar_charge_controller_firmware_changed=status[2],
        load_on=status[3],
        battery_voltage_stable=status[4],
        charger_enabled=status[5],
        charging_from_solar_charge_controller=status[6],
        charging_from_utility=status[7],
        pv_charging_power=int(r[19], 10) if len(r) > 19 else None,
    )


def parse_device_mode(payload: str) -> DeviceMode:
    """QMOD: ``(B`` -> :attr:`DeviceMode.BATTERY`."""
    return DeviceMode(strip_response(payload).strip().upper())


# (description, level); None means "fault if the inverter fault bit is set,
# otherwise warning".
_WARNING_BITS: list[tuple[str, WarningLevel | None]] = [
    ("Reserved", WarningLevel.NONE),
    ("Inverter fault", WarningLevel.FAULT),
    ("Bus voltage is too high", WarningLevel.FAULT),
    ("Bus voltage is too low", WarningLevel.FAULT),
    ("Bus soft start failed", WarningLevel.FAULT),
    ("Utility input failure", WarningLevel.WARNING),
    ("Output short circuited", WarningLevel.WARNING),
    ("Inverter voltage too low", WarningLevel.FAULT),
    ("Output voltage is too high", WarningLevel.FAULT),
    ("Over temperature", None),
    ("Fan is locked", None),
    ("Battery voltage is too high", None),
    ("Battery voltage is too low", WarningLevel.FAULT),
    ("Reserved", WarningLevel.NONE),
    ("Battery under shutdown", WarningLevel.WARNING),
    ("Reserved", WarningLevel.NONE),
    ("Overload", None),
    ("EEPROM fault", WarningLevel.WARNING),
    ("Inverter over current", WarningLevel.FAULT),
    ("Inverter soft start failed", WarningLevel.FAULT),
    ("Self test fail", WarningLevel.FAULT),
    ("Over voltage on DC output of inverter", WarningLevel.FAULT),
    ("Battery connection is open", WarningLevel.FAULT),
    ("Current sensor failed", WarningLevel.FAULT),
    ("Battery short", WarningLevel.FAULT),
    ("Power limit", WarningLevel.WARNING),
    ("PV voltage high", WarningLevel.WARNING),
    ("MPPT overload fault", WarningLevel.WARNING),
    ("MPPT overload warning", WarningLevel.WARNING),
    ("Battery too low to charge", WarningLevel.WARNING),
    ("Reserved", WarningLevel.NONE),
    ("Reserved", WarningLevel.NONE),
]


def parse_warning_status(payload: str) -> list[DeviceWarning]:
    """QPIWS: the active warnings, in bit order.

    A ``NONE`` level marks a reserved bit, which may mean the device reports
    something this parser does not know about yet.
    """
    bits = _bits(strip_response(payload).strip())
    inverter_fault = len(bits) > 1 and bits[1]
    warnings = []
    for index, active in enumerate(bits[: len(_WARNING_BITS)]):
        if not active:
            continue
        description, level = _WARNING_BITS[index]
        if level is None:
            level = WarningLevel.FAULT if inverter_fault else WarningLevel.WARNING
        warnings.append(DeviceWarning(description=description, level=level))
    return warnings


def parse_default_settings(payload: str) -> DefaultSettings:
    """QDI: factory default settings."""
    r = data_fields(payload, 25)
    return DefaultSettings(
        output_voltage=float(r[0]),
        output_frequency=float(r[1]),
        maximum_utility_charge_current=int(r[2], 10),
        battery_cutoff_voltage=float(r[3]),
        battery_float_charge_voltage=float(r[4]),
        battery_bulk_charge_voltage=float(r[5]),
        battery_recharge_voltage=float(r[6]),
        maximum_charge_current=int(r[7], 10),
        input_voltage_sensitivity=InputVoltageSensitivity(r[8]),
        output_source_priority=OutputSourcePriority(r[9]),
        charger_source_priority=ChargerSourcePriority(r[10]),
        battery_type=BatteryType(r[11]),
        # The device reports "buzzer silenced", not "buzzer enabled".
        enable_buzzer=not to_bool(r[12]),
        enable_power_saving=to_bool(r[13]),
        enable_overload_restart=to_bool(r[14]),
        enable_over_temperature_restart=to_bool(r[15]),
        enable_lcd_backlight=to_bool(r[16]),
        enable_primary_source_interrupt_alarm=to_bool(r[17]),
        enable_fault_code_recording=to_bool(r[18]),
        enable_bypass_to_utility_on_overload=to_bool(r[19]),
        enable_lcd_timeout_escape_to_default_page=to_bool(r[20]),
        output_mode=OutputMode(r[21]),
        battery_redischarge_voltage=float(r[22]),
        pv_parallel_ok_mode=PvParallelOkMode(r[23]),
        pv_power_balance_mode=PvPowerBalanceMode(r[24]),
    )


def parse_integer_list(payload: str) -> list[int]:
    """QMCHGCR / QMUCHGCR: ``(010 020 030`` -> ``[10, 20, 30]``."""
    return [int(s, 10) for s in data_fields(payload, 1)]


def parse_boolean(payload: str) -> bool:
    """QBOOT: ``(1`` -> ``True``."""
    return to_bool(strip_response(payload))


def parse_output_mode(payload: str) -> OutputMode:
    """QOPM: ``(01`` -> :attr:`OutputMode.PARALLEL`."""
    return OutputMode(str(int(strip_response(payload), 10)))


def parse_parallel_status(payload: str) -> ParallelDeviceStatus:
    """QPGSn: status of one unit in a parallel installation."""
    r = data_fields(payload, 26)
    status = r[19]
    if len(status) < 8:
        raise ValueError(f"Expected 8 status bits, got {status!r}")
    return ParallelDeviceStatus(
        parallel_number_exists=to_bool(r[0]),
        serial_number=r[1],
        device_mode=DeviceMode(r[2]),
        fault_code=FaultCode(r[3]),
        utility_voltage=float(r[4]),
        utility_frequency=float(r[5]),
        output_voltage=float(r[6]),
        output_frequency=float(r[7]),
        output_va=int(r[8], 10),
        output_watts=int(r[9], 10),
        load_percentage=int(r[10], 10),
        battery_voltage=float(r[11]),
        battery_charge_current=int(r[12], 10),
        battery_capacity=int(r[13], 10),
        pv_input_voltage=float(r[14]),
        total_charge_current=int(r[15], 10),
        total_output_va=int(r[16], 10),
        total_output_watts=int(r[17], 10),
        total_load_percentage=int(r[18], 10),
        solar_charge_controller_enabled=to_bool(status[0]),
        charging_from_utility=to_bool(status[1]),
        charging_from_solar_charge_controller=to_bool(status[2]),
        battery_status=BatteryStatus(status[3:5]),
        line_status_ok=not to_bool(status[5]),
        load_on=to_bool(status[6]),
        configuration_changed=to_bool(status[7]),
        output_mode=OutputMode(r[20]),
        charger_source_priority=ChargerSourcePriority(r[21]),
        maximum_charge_current=int(r[22], 10),
        device_maximum_charge_current=int(r[23], 10),
        pv_input_current=int(r[24], 10),
        battery_discharge_current=int(r[25], 10),
    )
