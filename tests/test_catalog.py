"""Tests for the command catalog."""

import pytest

from axpert_mcp.exceptions import InvalidArgumentError, NegativeAcknowledgementError
from axpert_mcp.models.constants import DeviceMode, OutputSourcePriority
from axpert_mcp.protocol import catalog
from axpert_mcp.protocol.operation import DeviceOperation

from conftest import FakeTransport


def test_all_entries_are_operations():
    for name, operation in catalog.COMMANDS.items():
        assert isinstance(operation, DeviceOperation), name


def test_queries_raise_on_nak_and_setters_do_not():
    for name, operation in catalog.COMMANDS.items():
        is_setter = name.startswith("set_") or name == "reset_to_default"
        assert operation.error_on_nak is not is_setter, name


def test_get_operation():
    assert catalog.get_operation("Device_Status") is catalog.DEVICE_STATUS
    with pytest.raises(KeyError):
        catalog.get_operation("make_coffee")


def test_query_payloads():
    assert catalog.PROTOCOL_ID.build_frame().raw == b"QPI\xbe\xac\r"
    assert catalog.DEVICE_STATUS.build_frame().payload == "QPIGS"
    assert catalog.OTHER_CPU_FIRMWARE.build_frame().payload == "QVFW2"


def test_parallel_status_machine_number():
    assert catalog.PARALLEL_DEVICE_STATUS.build_frame().payload == "QPGS0"
    assert catalog.PARALLEL_DEVICE_STATUS.build_frame(2).payload == "QPGS2"
    with pytest.raises(InvalidArgumentError):
        catalog.PARALLEL_DEVICE_STATUS.build_frame(12)


def test_set_output_source_priority():
    op = catalog.SET_OUTPUT_SOURCE_PRIORITY
    assert op.build_frame("sbu").payload == "POP02"
    assert op.build_frame(OutputSourcePriority.SOLAR).payload == "POP01"
    assert op.build_frame("0").payload == "POP00"
    assert op.build_frame("02").payload == "POP02"
    assert op.build_frame("00").payload == "POP00"
    with pytest.raises(InvalidArgumentError):
        op.build_frame("bogus")
    with pytest.raises(InvalidArgumentError):
        op.build_frame("unknown")


def test_set_output_frequency():
    assert catalog.SET_OUTPUT_FREQUENCY.build_frame(50).payload == "F50"
    assert catalog.SET_OUTPUT_FREQUENCY.build_frame("60").payload == "F60"
    with pytest.raises(InvalidArgumentError):
        catalog.SET_OUTPUT_FREQUENCY.build_frame(55)


def test_voltage_setters():
    assert catalog.SET_BATTERY_RECHARGE_VOLTAGE.build_frame(46).payload == "PBCV46.0"
    assert catalog.SET_BATTERY_CUTOFF_VOLTAGE.build_frame("42.5").payload == "PSDV42.5"
    assert catalog.SET_BATTERY_FLOAT_CHARGING_VOLTAGE.build_frame(27).payload == "PBFT27.0"
    with pytest.raises(InvalidArgumentError):
        catalog.SET_BATTERY_RECHARGE_VOLTAGE.build_frame(100)
    with pytest.raises(InvalidArgumentError):
        catalog.SET_BATTERY_RECHARGE_VOLTAGE.build_frame("high")


def test_enum_setters():
    assert catalog.SET_CHARGER_SOURCE_PRIORITY.build_frame("solar_only").payload == "PCP03"
    assert catalog.SET_BATTERY_TYPE.build_frame("flooded").payload == "PBT01"
    assert catalog.SET_INPUT_VOLTAGE_SENSITIVITY.build_frame("ups").payload == "PGR01"
    assert catalog.SET_PV_PARALLEL_OK_MODE.build_frame("all").payload == "PPVOKC1"
    assert catalog.SET_PV_POWER_BALANCE_MODE.build_frame("charge").payload == "PSPB0"


def test_enum_setters_accept_padded_codes():
    """The padded wire values listed in each input rule are accepted as is."""
    assert catalog.SET_CHARGER_SOURCE_PRIORITY.build_frame("03").payload == "PCP03"
    assert catalog.SET_BATTERY_TYPE.build_frame("00").payload == "PBT00"
    assert catalog.SET_INPUT_VOLTAGE_SENSITIVITY.build_frame("01").payload == "PGR01"
    with pytest.raises(InvalidArgumentError):
        catalog.SET_CHARGER_SOURCE_PRIORITY.build_frame("04")


def test_parallel_setters():
    op = catalog.SET_PARALLEL_CHARGER_SOURCE_PRIORITY
    assert op.build_frame(("solar_only", 1)).payload == "PPCP103"
    assert catalog.SET_OUTPUT_MODE.build_frame("parallel").payload == "POPM10"
    assert catalog.SET_OUTPUT_MODE.build_frame(("phase_1", 2)).payload == "POPM22"
    with pytest.raises(InvalidArgumentError):
        op.build_frame(("solar_only", 1, 2))


def test_charging_current_setters():
    assert catalog.SET_MAXIMUM_CHARGING_CURRENT.build_frame(30).payload == "MCHGC030"
    assert catalog.SET_MAXIMUM_CHARGING_CURRENT.build_frame((30, 1)).payload == "MCHGC130"
    assert catalog.SET_MAXIMUM_CHARGING_CURRENT_HIGH.build_frame(120).payload == "MNCHGC0120"
    assert catalog.SET_MAXIMUM_UTILITY_CHARGING_CURRENT.build_frame(2).payload == "MUCHGC002"
    with pytest.raises(InvalidArgumentError):
        catalog.SET_MAXIMUM_CHARGING_CURRENT.build_frame(120)


def test_reset_takes_no_argument():
    with pytest.raises(InvalidArgumentError):
        catalog.RESET_TO_DEFAULT.build_frame("1")


def test_device_mode_exchange():
    transport = FakeTransport.replying("(L")
    assert catalog.DEVICE_MODE.issue(transport) is DeviceMode.LINE
    assert transport.written.startswith(b"QMOD")


def test_setter_exchange_acknowledged():
    transport = FakeTransport.replying("(ACK")
    assert catalog.SET_BATTERY_TYPE.issue(transport, "user") is True
    assert transport.written.startswith(b"PBT02")


def test_setter_exchange_rejected():
    assert catalog.SET_BATTERY_TYPE.issue(FakeTransport.replying("(NAK"), "agm") is False


def test_query_exchange_rejected():
    with pytest.raises(NegativeAcknowledgementError):
        catalog.DEVICE_FLAGS.issue(FakeTransport.replying("(NAK"))
