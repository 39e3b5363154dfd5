"""Device rating (QPIRI) and factory default (QDI) settings."""

from __future__ import annotations

from dataclasses import dataclass

from .base import ResultModel
from .constants import (
    BatteryType,
    ChargerSourcePriority,
    DeviceTopology,
    DeviceType,
    InputVoltageSensitivity,
    OutputMode,
    OutputSourcePriority,
    PvParallelOkMode,
    PvPowerBalanceMode,
)


@dataclass(frozen=True)
class DeviceRating(ResultModel):
    """Nameplate ratings and current configuration (QPIRI).

    Voltages are in volts, currents in amps, frequencies in hertz.
    """

    utility_voltage: float
    utility_current: float
    output_voltage: float
    output_frequency: float
    output_current: float
    output_va: int
    output_watts: int
    battery_voltage: float
    battery_recharge_voltage: float
    battery_cutoff_voltage: float
    battery_bulk_charge_voltage: float
    battery_float_charge_voltage: float
    battery_type: BatteryType
    maximum_utility_charge_current: int
    maximum_charge_current: int
    input_voltage_sensitivity: InputVoltageSensitivity
    output_source_priority: OutputSourcePriority
    charger_source_priority: ChargerSourcePriority
    maximum_parallel_units: int
    device_type: DeviceType
    device_topology: DeviceTopology
    output_mode: OutputMode
    battery_redischarge_voltage: float
    pv_parallel_ok_mode: PvParallelOkMode
    pv_power_balance_mode: PvPowerBalanceMode


@dataclass(frozen=True)
class DefaultSettings(ResultModel):
    """Factory default settings (QDI)."""

    output_voltage: float
    output_frequency: float
    maximum_utility_charge_current: int
    battery_cutoff_voltage: float
    battery_float_charge_voltage: float
    battery_bulk_charge_voltage: float
    battery_recharge_voltage: float
    maximum_charge_current: int
    input_voltage_sensitivity: InputVoltageSensitivity
    output_source_priority: OutputSourcePriority
    charger_source_priority: ChargerSourcePriority
    battery_type: BatteryType
    enable_buzzer: bool
    enable_power_saving: bool
    enable_overload_restart: bool
    enable_over_temperature_restart: bool
    enable_lcd_backlight: bool
    enable_primary_source_interrupt_alarm: bool
    enable_fault_code_recording: bool
    enable_bypass_to_utility_on_overload: bool
    enable_lcd_timeout_escape_to_default_page: bool
    output_mode: OutputMode
    battery_redischarge_voltage: float
    pv_parallel_ok_mode: PvParallelOkMode
    pv_power_balance_mode: PvPowerBalanceMode
