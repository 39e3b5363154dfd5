"""Live status results: general status, parallel status, flags, warnings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .base import ResultModel
from .constants import (
    BatteryStatus,
    ChargerSourcePriority,
    DeviceMode,
    FaultCode,
    OutputMode,
    WarningLevel,
)


@dataclass(frozen=True)
class DeviceStatus(ResultModel):
    """General status parameters (QPIGS)."""

    utility_voltage: float
    utility_frequency: float
    output_voltage: float
    output_frequency: float
    output_va: int
    output_watts: int
    output_load_percent: int
    dc_bus_voltage: int
    battery_voltage: float
    battery_charge_current: int
    battery_capacity_remaining: int
    inverter_temperature_celsius: int
    pv_input_current: float
    pv_input_voltage: float
    solar_charge_controller_battery_voltage: float
    battery_discharge_current: int
    add_sbu_priority_version: bool
    configuration_changed: bool
    solar_charge_controller_firmware_changed: bool
    load_on: bool
    battery_voltage_stable: bool
    charger_enabled: bool
    charging_from_solar_charge_controller: bool
    charging_from_utility: bool
    # Only reported by newer firmware.
    pv_charging_power: Optional[int] = None


@dataclass(frozen=True)
class ParallelDeviceStatus(ResultModel):
    """Status of one unit in a parallel installation (QPGSn)."""

    parallel_number_exists: bool
    serial_number: str
    device_mode: DeviceMode
    fault_code: FaultCode
    utility_voltage: float
    utility_frequency: float
    output_voltage: float
    output_frequency: float
    output_va: int
    output_watts: int
    load_percentage: int
    battery_voltage: float
    battery_charge_current: int
    battery_capacity: int
    pv_input_voltage: float
    total_charge_current: int
    total_output_va: int
    total_output_watts: int
    total_load_percentage: int
    solar_charge_controller_enabled: bool
    charging_from_utility: bool
    charging_from_solar_charge_controller: bool
    battery_status: BatteryStatus
    line_status_ok: bool
    load_on: bool
    configuration_changed: bool
    output_mode: OutputMode
    charger_source_priority: ChargerSourcePriority
    maximum_charge_current: int
    device_maximum_charge_current: int
    pv_input_current: int
    battery_discharge_current: int


@dataclass(frozen=True)
class DeviceFlags(ResultModel):
    """Enabled/disabled device flags (QFLAG).

    A flag is ``None`` when the device did not report it.
    """

    enable_buzzer: Optional[bool] = None
    enable_bypass_to_utility_on_overload: Optional[bool] = None
    enable_power_saving: Optional[bool] = None
    enable_lcd_timeout_escape_to_default_page: Optional[bool] = None
    enable_overload_restart: Optional[bool] = None
    enable_over_temperature_restart: Optional[bool] = None
    enable_lcd_backlight: Optional[bool] = None
    enable_primary_source_interrupt_alarm: Optional[bool] = None
    enable_fault_code_recording: Optional[bool] = None


@dataclass(frozen=True)
class DeviceWarning(ResultModel):
    """One active entry of the warning status bitmap (QPIWS)."""

    description: str
    level: WarningLevel
