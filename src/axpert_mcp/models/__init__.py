"""Data models for command results and device codes."""

from .constants import (
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
from .rating import DefaultSettings, DeviceRating
from .status import DeviceFlags, DeviceStatus, DeviceWarning, ParallelDeviceStatus
