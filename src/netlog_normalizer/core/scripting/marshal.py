"""Conversion from a script's result table to a LogRecord.

A key that is absent, has the wrong type, or cannot be read (a string that is
not valid UTF-8, an erroring metamethod) counts as "not provided" and the
record keeps its default for that field. Nothing here raises for a malformed
field.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from ..errors import ScriptError
from ..models import DeviceType, LogRecord, Severity, capture_time, coerce_severity
from .runtime import LuaRuntimeHandle, is_table, table_items

_STRING_FIELDS = ("message", "facility", "hostname", "process_name")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _read_table(runtime: LuaRuntimeHandle, value: Any) -> dict[Any, Any]:
    """Entries of a Lua table as a dict; unreadable tables are empty."""
    if not is_table(value):
        return {}
    try:
        return dict(table_items(runtime.plain_copy(value)))
    except (ScriptError, UnicodeDecodeError):
        return {}


def to_timestamp(value: Any) -> datetime:
    """Epoch seconds to an aware UTC datetime; anything else is the capture time."""
    if not _is_number(value):
        return capture_time()
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (OverflowError, OSError, ValueError):
        return capture_time()


def to_severity(value: Any) -> Severity:
    if isinstance(value, str) or _is_number(value):
        return coerce_severity(value)
    return Severity.INFO


def to_process_id(value: Any) -> int | None:
    if not _is_number(value):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    pid = int(value)
    return pid if pid >= 0 else None


def to_metadata(entries: dict[Any, Any]) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, val in entries.items():
        if not isinstance(key, str):
            continue
        if isinstance(val, str):
            out[key] = val
        elif _is_number(val):
            out[key] = str(val)
    return out


def table_to_record(
    table: Any,
    *,
    raw: str,
    device_type: DeviceType,
    runtime: LuaRuntimeHandle,
) -> LogRecord:
    """Build a LogRecord from a script table; `raw` and `device_type` always win."""
    fields = _read_table(runtime, table)
    record = LogRecord(
        timestamp=to_timestamp(fields.get("timestamp")),
        severity=to_severity(fields.get("severity")),
        process_id=to_process_id(fields.get("process_id")),
        metadata=to_metadata(_read_table(runtime, fields.get("metadata"))),
        device_type=device_type,
        raw_message=raw,
    )
    for name in _STRING_FIELDS:
        value = fields.get(name)
        if isinstance(value, str):
            setattr(record, name, value)
    return record
