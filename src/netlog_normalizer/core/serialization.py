"""JSON encode/decode for LogRecord.

Field names are stable. Decoding is lenient about taxonomy values: unknown
severities become INFO and unknown device types become UNKNOWN, so records
written by newer or third-party producers still load.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator

from .errors import RecordDecodeError
from .models import DeviceType, LogRecord, Severity, capture_time, coerce_device_type, coerce_severity
from .timestamps import DEFAULT_TIMESTAMP_PARSER

_TS_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class LogRecordDocument(BaseModel):
    """Wire form of a LogRecord."""

    model_config = ConfigDict(extra="ignore")

    timestamp: datetime | None = Field(default=None, description="ISO-8601 UTC, second precision.")
    severity: Severity = Field(default=Severity.INFO, description="Lowercase severity name.")
    message: str = ""
    device_type: DeviceType = DeviceType.UNKNOWN
    facility: str | None = None
    hostname: str | None = None
    process_name: str | None = None
    process_id: int | None = Field(default=None, ge=0)
    raw_message: str | None = None
    metadata: dict[str, str] | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value: Any) -> datetime | None:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return DEFAULT_TIMESTAMP_PARSER.try_parse(value)
        return None

    @field_validator("severity", mode="before")
    @classmethod
    def _lenient_severity(cls, value: Any) -> Severity:
        return coerce_severity(value)

    @field_validator("device_type", mode="before")
    @classmethod
    def _lenient_device_type(cls, value: Any) -> DeviceType:
        return coerce_device_type(value)

    @field_serializer("timestamp")
    def _ser_timestamp(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return value.astimezone(UTC).strftime(_TS_FORMAT)

    @field_serializer("severity")
    def _ser_severity(self, value: Severity) -> str:
        return value.label

    @field_serializer("device_type")
    def _ser_device_type(self, value: DeviceType) -> str:
        return value.value

    @classmethod
    def from_record(cls, record: LogRecord) -> LogRecordDocument:
        return cls(
            timestamp=record.timestamp,
            severity=record.severity,
            message=record.message,
            device_type=record.device_type,
            facility=record.facility or None,
            hostname=record.hostname or None,
            process_name=record.process_name or None,
            process_id=record.process_id,
            raw_message=record.raw_message or None,
            metadata=dict(record.metadata) or None,
        )

    def to_record(self) -> LogRecord:
        ts = self.timestamp.astimezone(UTC) if self.timestamp is not None else capture_time()
        return LogRecord(
            message=self.message,
            severity=self.severity,
            timestamp=ts,
            device_type=self.device_type,
            facility=self.facility or "",
            hostname=self.hostname or "",
            process_name=self.process_name or "",
            process_id=self.process_id,
            raw_message=self.raw_message or "",
            metadata=dict(self.metadata or {}),
        )


def record_to_dict(record: LogRecord) -> dict[str, Any]:
    """Encode a record; empty optional fields are omitted."""
    return LogRecordDocument.from_record(record).model_dump(mode="json", exclude_none=True)


def record_to_json(record: LogRecord) -> str:
    return json.dumps(record_to_dict(record), ensure_ascii=False)


def record_from_dict(data: Mapping[str, Any]) -> LogRecord:
    """Decode a record mapping; raises RecordDecodeError on structural problems."""
    if not isinstance(data, Mapping):
        raise RecordDecodeError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        doc = LogRecordDocument.model_validate(dict(data))
    except ValidationError as exc:
        raise RecordDecodeError(str(exc)) from exc
    return doc.to_record()


def record_from_json(text: str | bytes) -> LogRecord:
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RecordDecodeError(f"Invalid JSON: {exc}") from exc
    return record_from_dict(data)
