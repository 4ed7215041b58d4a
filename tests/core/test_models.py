from __future__ import annotations

from datetime import UTC, datetime

import pytest

from netlog_normalizer.core.errors import (
    InvalidDeviceTypeError,
    InvalidDeviceVendorError,
    InvalidSeverityError,
)
from netlog_normalizer.core.models import (
    DeviceType,
    DeviceVendor,
    LogRecord,
    Severity,
    capture_time,
    coerce_device_type,
    coerce_severity,
    default_device_type,
    parse_device_type,
    parse_device_vendor,
    parse_severity,
)


@pytest.mark.parametrize("severity", list(Severity))
def test_severity_string_round_trip(severity: Severity) -> None:
    assert parse_severity(str(severity)) is severity
    assert parse_severity(int(severity)) is severity


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("EMERG", Severity.EMERGENCY),
        ("crit", Severity.CRITICAL),
        (" Err ", Severity.ERROR),
        ("warn", Severity.WARNING),
        ("informational", Severity.INFO),
        ("7", Severity.DEBUG),
    ],
)
def test_severity_aliases(text: str, expected: Severity) -> None:
    assert parse_severity(text) is expected


@pytest.mark.parametrize("bad", ["verbose", "", "8", -1, 8, True])
def test_parse_severity_is_strict(bad: object) -> None:
    with pytest.raises(InvalidSeverityError):
        parse_severity(bad)  # type: ignore[arg-type]


def test_coerce_severity_defaults_to_info() -> None:
    assert coerce_severity("verbose") is Severity.INFO
    assert coerce_severity(None) is Severity.INFO
    assert coerce_severity(3.0) is Severity.ERROR
    assert coerce_severity(2.5) is Severity.INFO


@pytest.mark.parametrize("device", [d for d in DeviceType if d is not DeviceType.CUSTOM])
def test_device_type_string_round_trip(device: DeviceType) -> None:
    assert parse_device_type(str(device)) is device
    assert parse_device_type(device.label) is device


def test_device_type_aliases_and_errors() -> None:
    assert parse_device_type("NXOS") is DeviceType.CISCO_NXOS
    assert parse_device_type("ios-xe") is DeviceType.CISCO_IOS_XE
    assert parse_device_type("syslog") is DeviceType.GENERIC_SYSLOG

    with pytest.raises(InvalidDeviceTypeError):
        parse_device_type("junos")
    assert coerce_device_type("junos") is DeviceType.UNKNOWN
    assert coerce_device_type(42) is DeviceType.UNKNOWN


def test_device_vendor() -> None:
    assert parse_device_vendor("Cisco") is DeviceVendor.CISCO
    assert parse_device_vendor("hp") is DeviceVendor.HPE
    with pytest.raises(InvalidDeviceVendorError):
        parse_device_vendor("acme")

    assert default_device_type(DeviceVendor.CISCO) is DeviceType.CISCO_IOS
    assert default_device_type(DeviceVendor.GENERIC) is DeviceType.GENERIC_SYSLOG
    assert default_device_type(DeviceVendor.JUNIPER) is DeviceType.UNKNOWN


def test_capture_time_is_whole_seconds_utc() -> None:
    ts = capture_time()
    assert ts.tzinfo is UTC
    assert ts.microsecond == 0


def test_log_record_defaults_and_metadata() -> None:
    record = LogRecord()
    assert record.severity is Severity.INFO
    assert record.device_type is DeviceType.UNKNOWN
    assert record.process_id is None
    assert not record.is_valid()

    record.add_metadata("mnemonic", "UPDOWN")
    assert record.has_metadata("mnemonic")
    assert record.get_metadata("mnemonic") == "UPDOWN"
    assert record.get_metadata("missing") is None
    assert record.get_metadata("missing", "n/a") == "n/a"

    record.clear_metadata()
    assert record.metadata == {}


def test_log_record_from_raw() -> None:
    record = LogRecord.from_raw("opaque line", DeviceType.CISCO_ASA)
    assert record.message == "opaque line"
    assert record.raw_message == "opaque line"
    assert record.device_type is DeviceType.CISCO_ASA
    assert record.is_valid()


def test_log_record_str() -> None:
    record = LogRecord(
        message="Accepted password",
        severity=Severity.NOTICE,
        timestamp=datetime(2024, 1, 15, 10, 30, 45, tzinfo=UTC),
        facility="AUTH",
        hostname="server01",
        process_name="sshd",
        process_id=1234,
    )
    assert str(record) == "2024-01-15 10:30:45 UTC [notice] server01 AUTH[sshd:1234]: Accepted password"
