"""Enumerations for the coded values reported and accepted by the inverter.

Each enumeration's member values are the codes the device uses on the wire.
Decoding an unrecognised code yields the ``UNKNOWN`` member rather than
raising, so a firmware that reports a new value still produces a result.
Encoding (for setter commands) is strict: :meth:`CodedEnum.code_for` raises
``ValueError`` for ``UNKNOWN`` or anything it does not recognise.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

UNKNOWN_CODE = "?"


class CodedEnum(Enum):
    """Base for enumerations keyed by their device code."""

    @classmethod
    def _missing_(cls, value: object) -> CodedEnum:
        return cls.UNKNOWN

    @property
    def code(self) -> str:
        return self.value

    @classmethod
    def code_for(cls, value: Any) -> str:
        """Return the device code for a member, member name or code.

        ``"sbu"``, ``"SBU"``, ``OutputSourcePriority.SBU``, ``"2"`` and
        ``"02"`` all resolve to ``"2"`` for :class:`OutputSourcePriority`.
        """
        if isinstance(value, cls):
            member = value
        else:
            text = str(value).strip()
            try:
                member = cls[text.upper()]
            except KeyError:
                member = cls(text)
                if member.name == "UNKNOWN" and text.isdigit():
                    # Setter rules use the padded form, e.g. "02" for "2".
                    member = cls(text.lstrip("0") or "0")
        if member.name == "UNKNOWN":
            raise ValueError(f"Unknown {cls.__name__} {value!r}")
        return member.code

    def to_json(self) -> str:
        return self.name.lower()


class BatteryType(CodedEnum):
    """Battery chemistry; selects the default charge voltage ranges."""

    AGM = "0"
    FLOODED = "1"
    USER = "2"
    UNKNOWN = UNKNOWN_CODE


class DeviceMode(CodedEnum):
    POWER_ON = "P"
    STANDBY = "S"
    LINE = "L"
    BATTERY = "B"
    FAULT = "F"
    POWER_SAVING = "H"
    UNKNOWN = UNKNOWN_CODE


class InputVoltageSensitivity(CodedEnum):
    """Acceptable utility input range before switching away from utility."""

    APPLIANCE = "0"
    UPS = "1"
    UNKNOWN = UNKNOWN_CODE


class OutputSourcePriority(CodedEnum):
    UTILITY = "0"
    SOLAR = "1"
    SBU = "2"
    UNKNOWN = UNKNOWN_CODE


class ChargerSourcePriority(CodedEnum):
    UTILITY_FIRST = "0"
    SOLAR_FIRST = "1"
    SOLAR_AND_UTILITY = "2"
    SOLAR_ONLY = "3"
    UNKNOWN = UNKNOWN_CODE


class DeviceType(CodedEnum):
    GRID_TIE = "00"
    OFF_GRID = "01"
    HYBRID = "10"
    UNKNOWN = UNKNOWN_CODE


class DeviceTopology(CodedEnum):
    """Whether the output passes through an isolation transformer."""

    TRANSFORMERLESS = "0"
    TRANSFORMER = "1"
    UNKNOWN = UNKNOWN_CODE


class OutputMode(CodedEnum):
    SINGLE = "0"
    PARALLEL = "1"
    PHASE_1 = "2"
    PHASE_2 = "3"
    PHASE_3 = "4"
    UNKNOWN = UNKNOWN_CODE


class PvParallelOkMode(CodedEnum):
    """How many parallel units must see PV before it is reported OK."""

    ONE = "0"
    ALL = "1"
    UNKNOWN = UNKNOWN_CODE


class PvPowerBalanceMode(CodedEnum):
    """``CHARGE`` limits PV input to the charge current; ``CHARGE_AND_LOAD``
    also draws enough PV power to carry the load."""

    CHARGE = "0"
    CHARGE_AND_LOAD = "1"
    UNKNOWN = UNKNOWN_CODE


class BatteryStatus(CodedEnum):
    NORMAL = "00"
    UNDER = "01"
    OPEN = "10"
    UNKNOWN = UNKNOWN_CODE


class WarningLevel(Enum):
    NONE = "none"
    WARNING = "warning"
    FAULT = "fault"

    def to_json(self) -> str:
        return self.value


class FaultCode(CodedEnum):
    NO_FAULT = "00"
    FAN_LOCKED = "01"
    OVER_TEMPERATURE = "02"
    BATTERY_VOLTAGE_HIGH = "03"
    BATTERY_VOLTAGE_LOW = "04"
    OUTPUT_SHORT_CIRCUITED = "05"
    OUTPUT_VOLTAGE_HIGH = "06"
    OVERLOAD_TIME_OUT = "07"
    BUS_VOLTAGE_HIGH = "08"
    BUS_SOFT_START_FAILED = "09"
    MAIN_RELAY_FAILED = "11"
    INVERTER_OVER_CURRENT = "51"
    BUS_SOFT_START_FAILED_2 = "52"
    INVERTER_SOFT_START_FAILED = "53"
    SELF_TEST_FAILED = "54"
    DC_OUTPUT_OVER_VOLTAGE = "55"
    BATTERY_CONNECTION_OPEN = "56"
    CURRENT_SENSOR_FAILED = "57"
    OUTPUT_VOLTAGE_LOW = "58"
    INVERTER_NEGATIVE_POWER = "60"
    PARALLEL_VERSION_DIFFERENT = "71"
    OUTPUT_CIRCUIT_FAILED = "72"
    CAN_COMMUNICATION_FAILED = "80"
    PARALLEL_HOST_LINE_LOST = "81"
    PARALLEL_SYNC_SIGNAL_LOST = "82"
    PARALLEL_BATTERY_VOLTAGE_DIFFERENT = "83"
    PARALLEL_LINE_DIFFERENT = "84"
    PARALLEL_INPUT_CURRENT_UNBALANCED = "85"
    PARALLEL_OUTPUT_SETTING_DIFFERENT = "86"
    UNKNOWN = UNKNOWN_CODE

    @property
    def description(self) -> str:
        return FAULT_DESCRIPTIONS.get(self, "Unknown fault")


FAULT_DESCRIPTIONS: dict[FaultCode, str] = {
    FaultCode.NO_FAULT: "No faults",
    FaultCode.FAN_LOCKED: "Fan is locked",
    FaultCode.OVER_TEMPERATURE: "Over temperature",
    FaultCode.BATTERY_VOLTAGE_HIGH: "Battery voltage is too high",
    FaultCode.BATTERY_VOLTAGE_LOW: "Battery voltage is too low",
    FaultCode.OUTPUT_SHORT_CIRCUITED: "Output short circuited/Over temperature",
    FaultCode.OUTPUT_VOLTAGE_HIGH: "Output voltage is too high",
    FaultCode.OVERLOAD_TIME_OUT: "Overload time out",
    FaultCode.BUS_VOLTAGE_HIGH: "Bus voltage is too high",
    FaultCode.BUS_SOFT_START_FAILED: "Bus soft start failed",
    FaultCode.MAIN_RELAY_FAILED: "Main relay failed",
    FaultCode.INVERTER_OVER_CURRENT: "Inverter over current",
    FaultCode.BUS_SOFT_START_FAILED_2: "Bus soft start failed",
    FaultCode.INVERTER_SOFT_START_FAILED: "Inverter soft start failed",
    FaultCode.SELF_TEST_FAILED: "Self-test failed",
    FaultCode.DC_OUTPUT_OVER_VOLTAGE: "Inverter over voltage on DC output",
    FaultCode.BATTERY_CONNECTION_OPEN: "Battery connection is open",
    FaultCode.CURRENT_SENSOR_FAILED: "Current sensor failed",
    FaultCode.OUTPUT_VOLTAGE_LOW: "Output voltage is too low",
    FaultCode.INVERTER_NEGATIVE_POWER: "Inverter negative power",
    FaultCode.PARALLEL_VERSION_DIFFERENT: "Parallel version different",
    FaultCode.OUTPUT_CIRCUIT_FAILED: "Output circuit failed",
    FaultCode.CAN_COMMUNICATION_FAILED: "CAN communication failed",
    FaultCode.PARALLEL_HOST_LINE_LOST: "Parallel host line lost",
    FaultCode.PARALLEL_SYNC_SIGNAL_LOST: "Parallel synchronized signal lost",
    FaultCode.PARALLEL_BATTERY_VOLTAGE_DIFFERENT: (
        "Parallel battery voltage is detected as different"
    ),
    FaultCode.PARALLEL_LINE_DIFFERENT: (
        "Parallel line voltage or frequency is detected as different"
    ),
    FaultCode.PARALLEL_INPUT_CURRENT_UNBALANCED: "Parallel line input current unbalanced",
    FaultCode.PARALLEL_OUTPUT_SETTING_DIFFERENT: "Parallel output setting is different",
}
