"""Known inverter commands, each bound to its result parser.

Commands source: HS_MS_MSX RS232 protocol, 2014-08-22 revision.

Query commands raise on ``(NAK``. Setter commands are built with
``error_on_nak=False`` and return ``True`` for ``(ACK`` and ``False`` for
anything else, so a rejected setting is a normal result rather than an error.
"""

from __future__ import annotations

from typing import Any, Callable

from ..models.constants import (
    BatteryType,
    ChargerSourcePriority,
    CodedEnum,
    InputVoltageSensitivity,
    OutputMode,
    OutputSourcePriority,
    PvParallelOkMode,
    PvPowerBalanceMode,
)
from .commands import CommandTemplate
from .operation import DeviceOperation
from .parser import (
    parse_ack,
    parse_boolean,
    parse_default_settings,
    parse_device_flags,
    parse_device_mode,
    parse_device_rating,
    parse_device_status,
    parse_firmware_version,
    parse_integer_list,
    parse_output_mode,
    parse_parallel_status,
    parse_protocol_id,
    parse_serial_number,
    parse_warning_status,
)

VOLTAGE_PATTERN = r"\d{2}\.\d"


# ─── ARGUMENT FORMATTERS ─────────────────────────────────────────────


def _integer(width: int) -> Callable[[Any], str]:
    def fmt(value: Any) -> str:
        return str(int(value)).rjust(width, "0")

    return fmt


def _voltage(value: Any) -> str:
    return f"{float(value):04.1f}"


def _coded(enum: type[CodedEnum], width: int) -> Callable[[Any], str]:
    def fmt(value: Any) -> str:
        return enum.code_for(value).rjust(width, "0")

    return fmt


def _split_machine(value: Any) -> tuple[Any, int]:
    # Accepts either ``value`` or ``(value, parallel_machine_number)``.
    if isinstance(value, (tuple, list)):
        setting, machine = value
        return setting, int(machine)
    return value, 0


def _charging_current(width: int) -> Callable[[Any], str]:
    def fmt(value: Any) -> str:
        current, machine = _split_machine(value)
        return f"{machine}{str(int(current)).rjust(width, '0')}"

    return fmt


def _parallel_charger_priority(value: Any) -> str:
    priority, machine = _split_machine(value)
    return f"{machine}{ChargerSourcePriority.code_for(priority).rjust(2, '0')}"


def _parallel_output_mode(value: Any) -> str:
    mode, machine = _split_machine(value)
    return f"{OutputMode.code_for(mode)}{machine}"


def _setter(command: CommandTemplate | str) -> DeviceOperation[bool]:
    return DeviceOperation(command=command, parser=parse_ack, error_on_nak=False)


# ─── QUERIES ─────────────────────────────────────────────────────────

PROTOCOL_ID = DeviceOperation("QPI", parse_protocol_id)

SERIAL_NUMBER = DeviceOperation("QID", parse_serial_number)

MAIN_CPU_FIRMWARE = DeviceOperation("QVFW", parse_firmware_version)

OTHER_CPU_FIRMWARE = DeviceOperation("QVFW2", parse_firmware_version)

DEVICE_RATING = DeviceOperation("QPIRI", parse_device_rating)

DEVICE_FLAGS = DeviceOperation("QFLAG", parse_device_flags)

DEVICE_STATUS = DeviceOperation("QPIGS", parse_device_status)

DEVICE_MODE = DeviceOperation("QMOD", parse_device_mode)

DEVICE_WARNING_STATUS = DeviceOperation("QPIWS", parse_warning_status)

DEFAULT_SETTINGS = DeviceOperation("QDI", parse_default_settings)

ACCEPTED_CHARGE_CURRENT_VALUES = DeviceOperation("QMCHGCR", parse_integer_list)

ACCEPTED_UTILITY_CHARGE_CURRENT_VALUES = DeviceOperation("QMUCHGCR", parse_integer_list)

DSP_BOOTSTRAP_STATUS = DeviceOperation("QBOOT", parse_boolean)

OUTPUT_MODE = DeviceOperation("QOPM", parse_output_mode)

# Machine number 0 is correct for a single, non-parallel unit.
PARALLEL_DEVICE_STATUS = DeviceOperation(
    CommandTemplate("QPGS{input}", input_rule=r"\d", formatter=_integer(1), default=0),
    parse_parallel_status,
)


# ─── SETTERS ─────────────────────────────────────────────────────────

RESET_TO_DEFAULT = _setter("PF")

SET_OUTPUT_FREQUENCY = _setter(
    CommandTemplate("F{input}", input_rule={"50", "60"}, formatter=_integer(2))
)

SET_OUTPUT_SOURCE_PRIORITY = _setter(
    CommandTemplate(
        "POP{input}",
        input_rule={"00", "01", "02"},
        formatter=_coded(OutputSourcePriority, 2),
    )
)

SET_BATTERY_RECHARGE_VOLTAGE = _setter(
    CommandTemplate("PBCV{input}", input_rule=VOLTAGE_PATTERN, formatter=_voltage)
)

SET_BATTERY_REDISCHARGE_VOLTAGE = _setter(
    CommandTemplate("PBDV{input}", input_rule=VOLTAGE_PATTERN, formatter=_voltage)
)

SET_CHARGER_SOURCE_PRIORITY = _setter(
    CommandTemplate(
        "PCP{input}",
        input_rule={"00", "01", "02", "03"},
        formatter=_coded(ChargerSourcePriority, 2),
    )
)

# Argument: ``(priority, parallel_machine_number)``.
SET_PARALLEL_CHARGER_SOURCE_PRIORITY = _setter(
    CommandTemplate(
        "PPCP{input}",
        input_rule=r"\d0[0-3]",
        formatter=_parallel_charger_priority,
    )
)

SET_INPUT_VOLTAGE_SENSITIVITY = _setter(
    CommandTemplate(
        "PGR{input}",
        input_rule={"00", "01"},
        formatter=_coded(InputVoltageSensitivity, 2),
    )
)

SET_BATTERY_TYPE = _setter(
    CommandTemplate(
        "PBT{input}",
        input_rule={"00", "01", "02"},
        formatter=_coded(BatteryType, 2),
    )
)

SET_BATTERY_CUTOFF_VOLTAGE = _setter(
    CommandTemplate("PSDV{input}", input_rule=VOLTAGE_PATTERN, formatter=_voltage)
)

SET_BATTERY_CONSTANT_CHARGING_VOLTAGE = _setter(
    CommandTemplate("PCVV{input}", input_rule=VOLTAGE_PATTERN, formatter=_voltage)
)

SET_BATTERY_FLOAT_CHARGING_VOLTAGE = _setter(
    CommandTemplate("PBFT{input}", input_rule=VOLTAGE_PATTERN, formatter=_voltage)
)

SET_PV_PARALLEL_OK_MODE = _setter(
    CommandTemplate(
        "PPVOKC{input}",
        input_rule={"0", "1"},
        formatter=_coded(PvParallelOkMode, 1),
    )
)

SET_PV_POWER_BALANCE_MODE = _setter(
    CommandTemplate(
        "PSPB{input}",
        input_rule={"0", "1"},
        formatter=_coded(PvPowerBalanceMode, 1),
    )
)

# Argument: ``current`` or ``(current, parallel_machine_number)``.
# Currents of 100 A and above need SET_MAXIMUM_CHARGING_CURRENT_HIGH.
SET_MAXIMUM_CHARGING_CURRENT = _setter(
    CommandTemplate("MCHGC{input}", input_rule=r"\d{3}", formatter=_charging_current(2))
)

SET_MAXIMUM_CHARGING_CURRENT_HIGH = _setter(
    CommandTemplate("MNCHGC{input}", input_rule=r"\d{4}", formatter=_charging_current(3))
)

SET_MAXIMUM_UTILITY_CHARGING_CURRENT = _setter(
    CommandTemplate("MUCHGC{input}", input_rule=r"\d{3}", formatter=_charging_current(2))
)

# Argument: ``mode`` or ``(mode, parallel_machine_number)``.
SET_OUTPUT_MODE = _setter(
    CommandTemplate("POPM{input}", input_rule=r"[0-4]\d", formatter=_parallel_output_mode)
)


COMMANDS: dict[str, DeviceOperation] = {
    "protocol_id": PROTOCOL_ID,
    "serial_number": SERIAL_NUMBER,
    "main_cpu_firmware": MAIN_CPU_FIRMWARE,
    "other_cpu_firmware": OTHER_CPU_FIRMWARE,
    "device_rating": DEVICE_RATING,
    "device_flags": DEVICE_FLAGS,
    "device_status": DEVICE_STATUS,
    "device_mode": DEVICE_MODE,
    "device_warning_status": DEVICE_WARNING_STATUS,
    "default_settings": DEFAULT_SETTINGS,
    "accepted_charge_current_values": ACCEPTED_CHARGE_CURRENT_VALUES,
    "accepted_utility_charge_current_values": ACCEPTED_UTILITY_CHARGE_CURRENT_VALUES,
    "dsp_bootstrap_status": DSP_BOOTSTRAP_STATUS,
    "output_mode": OUTPUT_MODE,
    "parallel_device_status": PARALLEL_DEVICE_STATUS,
    "reset_to_default": RESET_TO_DEFAULT,
    "set_output_frequency": SET_OUTPUT_FREQUENCY,
    "set_output_source_priority": SET_OUTPUT_SOURCE_PRIORITY,
    "set_battery_recharge_voltage": SET_BATTERY_RECHARGE_VOLTAGE,
    "set_battery_redischarge_voltage": SET_BATTERY_REDISCHARGE_VOLTAGE,
    "set_charger_source_priority": SET_CHARGER_SOURCE_PRIORITY,
    "set_parallel_charger_source_priority": SET_PARALLEL_CHARGER_SOURCE_PRIORITY,
    "set_input_voltage_sensitivity": SET_INPUT_VOLTAGE_SENSITIVITY,
    "set_battery_type": SET_BATTERY_TYPE,
    "set_battery_cutoff_voltage": SET_BATTERY_CUTOFF_VOLTAGE,
    "set_battery_constant_charging_voltage": SET_BATTERY_CONSTANT_CHARGING_VOLTAGE,
    "set_battery_float_charging_voltage": SET_BATTERY_FLOAT_CHARGING_VOLTAGE,
    "set_pv_parallel_ok_mode": SET_PV_PARALLEL_OK_MODE,
    "set_pv_power_balance_mode": SET_PV_POWER_BALANCE_MODE,
    "set_maximum_charging_current": SET_MAXIMUM_CHARGING_CURRENT,
    "set_maximum_charging_current_high": SET_MAXIMUM_CHARGING_CURRENT_HIGH,
    "set_maximum_utility_charging_current": SET_MAXIMUM_UTILITY_CHARGING_CURRENT,
    "set_output_mode": SET_OUTPUT_MODE,
}


def get_operation(name: str) -> DeviceOperation:
    """Look up a catalog operation by name, e.g. ``"device_status"``."""
    key = name.strip().lower()
    if key not in COMMANDS:
        raise KeyError(f"Unknown command '{name}'. Valid: {sorted(COMMANDS)}")
    return COMMANDS[key]
