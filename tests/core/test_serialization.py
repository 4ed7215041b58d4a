from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from netlog_normalizer.core.errors import RecordDecodeError
from netlog_normalizer.core.models import DeviceType, LogRecord, Severity
from netlog_normalizer.core.serialization import (
    LogRecordDocument,
    record_from_dict,
    record_from_json,
    record_to_dict,
)


def _full_record() -> LogRecord:
    return LogRecord(
        message="Interface GigabitEthernet0/1, changed state to down",
        severity=Severity.ERROR,
        timestamp=datetime(2024, 1, 15, 10, 30, 45, tzinfo=UTC),
        device_type=DeviceType.CISCO_IOS,
        facility="LINK",
        hostname="core-rtr1",
        process_name="linkmgr",
        process_id=0,
        raw_message="%LINK-3-UPDOWN: Interface GigabitEthernet0/1, changed state to down",
        metadata={"mnemonic": "UPDOWN", "cisco_severity": "3"},
    )


def test_round_trip_preserves_fields() -> None:
    record = _full_record()
    restored = LogRecord.from_json(record.to_json())
    assert restored == record


def test_round_trip_keeps_empty_fields_empty() -> None:
    record = LogRecord(message="hello", timestamp=datetime(2024, 1, 1, tzinfo=UTC))
    restored = record_from_dict(record_to_dict(record))
    assert restored == record
    assert restored.hostname == ""
    assert restored.process_id is None
    assert restored.metadata == {}


def test_encoding_uses_stable_names_and_omits_empty_fields() -> None:
    data = record_to_dict(LogRecord(message="hi", timestamp=datetime(2024, 1, 15, 10, 30, 45, 999, tzinfo=UTC)))
    assert data == {
        "timestamp": "2024-01-15T10:30:45Z",
        "severity": "info",
        "message": "hi",
        "device_type": "unknown",
    }

    full = _full_record().to_dict()
    assert full["severity"] == "error"
    assert full["device_type"] == "cisco-ios"
    assert full["process_id"] == 0
    assert full["metadata"] == {"mnemonic": "UPDOWN", "cisco_severity": "3"}


def test_decode_is_lenient_about_taxonomy() -> None:
    record = record_from_dict(
        {
            "timestamp": "2024-01-15T10:30:45Z",
            "severity": "chatty",
            "device_type": "toaster",
            "message": "x",
            "future_field": [1, 2, 3],
        }
    )
    assert record.severity is Severity.INFO
    assert record.device_type is DeviceType.UNKNOWN
    assert record.timestamp == datetime(2024, 1, 15, 10, 30, 45, tzinfo=UTC)


def test_decode_accepts_aliases_and_missing_timestamp() -> None:
    record = record_from_dict({"severity": "warn", "device_type": "CiscoNXOS"})
    assert record.severity is Severity.WARNING
    assert record.device_type is DeviceType.CISCO_NXOS
    assert record.timestamp.tzinfo is not None
    assert record.message == ""


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[1, 2]",
        json.dumps({"process_id": -5}),
        json.dumps({"metadata": "flat"}),
    ],
)
def test_decode_rejects_structural_problems(payload: str) -> None:
    with pytest.raises(RecordDecodeError):
        record_from_json(payload)


def test_document_schema_fields() -> None:
    assert set(LogRecordDocument.model_fields) == {
        "timestamp",
        "severity",
        "message",
        "device_type",
        "facility",
        "hostname",
        "process_name",
        "process_id",
        "raw_message",
        "metadata",
    }


def test_decode_rejects_undecodable_bytes() -> None:
    with pytest.raises(RecordDecodeError):
        record_from_json(b"\xff")
