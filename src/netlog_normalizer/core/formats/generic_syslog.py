"""Generic syslog parser (RFC 3164 / RFC 5424 / bare priority)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..models import DeviceType, LogRecord, Severity, capture_time, coerce_severity
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .base import NativeParser, clean_message

_NIL = "-"


def split_priority(pri: int) -> tuple[int, Severity]:
    """Decompose a syslog PRI into (facility code, severity)."""
    return pri >> 3, coerce_severity(pri & 0x07)


@dataclass(frozen=True, slots=True)
class GenericSyslogParser(NativeParser):
    """Parse syslog lines: RFC 3164 first, then RFC 5424, then a bare ``<PRI>``."""

    timestamps: TimestampParser = field(default=DEFAULT_TIMESTAMP_PARSER)

    detection_patterns = (re.compile(r"<\d+>"),)
    patterns = (
        r"<\d+>\w+\s+\d+\s+\d+:\d+:\d+\s+\S+\s+.+?:\s*.+",  # RFC 3164
        r"<\d+>\d+\s+\S+\s+\S+\s+\S+\s+\S+\s+\S+\s+\S*\s*.*",  # RFC 5424
        r"<\d+>.*",  # bare priority
    )

    _rfc3164 = re.compile(
        r"^<(?P<pri>\d{1,3})>"
        r"(?P<ts>\w{3}\s+\d{1,2}\s+\d{1,2}:\d{2}:\d{2})\s+"
        r"(?P<host>\S+)\s+"
        r"(?P<tag>[^:\s][^:]*?):\s*"
        r"(?P<msg>.+)$"
    )
    _rfc5424 = re.compile(
        r"^<(?P<pri>\d{1,3})>(?P<ver>\d{1,2})\s+"
        r"(?P<ts>\S+)\s+"
        r"(?P<host>\S+)\s+"
        r"(?P<app>\S+)\s+"
        r"(?P<proc>\S+)\s+"
        r"(?P<msgid>\S+)\s*"
        r"(?P<sd>-|(?:\[[^\]]*\])+)?\s*"
        r"(?P<msg>.*)$"
    )
    _priority = re.compile(r"<(?P<pri>\d{1,3})>(?P<rest>.*)")
    _tag = re.compile(r"^(?P<name>[^\[\]]+)\[(?P<pid>\d+)\]$")

    def device_type(self) -> DeviceType:
        return DeviceType.GENERIC_SYSLOG

    def parser_name(self) -> str:
        return "Generic Syslog Parser"

    def _parse(self, raw: str) -> LogRecord | None:
        line = raw.strip()
        for attempt in (self._parse_rfc3164, self._parse_rfc5424, self._parse_bare):
            record = attempt(line)
            if record is not None:
                return record
        return None

    @staticmethod
    def _syslog_meta(record: LogRecord, *, pri: int, facility: int, fmt: str) -> None:
        record.add_metadata("facility_code", str(facility))
        record.add_metadata("syslog_priority", str(pri))
        record.add_metadata("format", fmt)

    def _parse_rfc3164(self, line: str) -> LogRecord | None:
        m = self._rfc3164.match(line)
        if not m:
            return None

        pri = int(m.group("pri"))
        facility, severity = split_priority(pri)
        record = LogRecord(
            message=clean_message(m.group("msg")),
            severity=severity,
            timestamp=self.timestamps.parse(m.group("ts")),
            hostname=m.group("host"),
            process_name=m.group("tag").strip(),
        )

        tag = self._tag.match(record.process_name)
        if tag:
            record.process_name = tag.group("name")
            record.process_id = int(tag.group("pid"))

        self._syslog_meta(record, pri=pri, facility=facility, fmt="RFC3164")
        return record

    def _parse_rfc5424(self, line: str) -> LogRecord | None:
        m = self._rfc5424.match(line)
        if not m:
            return None

        pri = int(m.group("pri"))
        facility, severity = split_priority(pri)
        host = m.group("host")
        app = m.group("app")
        record = LogRecord(
            message=clean_message(m.group("msg").lstrip("\ufeff")),
            severity=severity,
            timestamp=self.timestamps.parse(m.group("ts")),
            hostname="" if host == _NIL else host,
            process_name="" if app == _NIL else app,
        )

        proc = m.group("proc")
        if proc != _NIL and proc.isdigit():
            record.process_id = int(proc)

        self._syslog_meta(record, pri=pri, facility=facility, fmt="RFC5424")
        record.add_metadata("syslog_version", m.group("ver"))
        record.add_metadata("message_id", m.group("msgid"))
        sd = m.group("sd")
        if sd and sd != _NIL:
            record.add_metadata("structured_data", sd)
        return record

    def _parse_bare(self, line: str) -> LogRecord | None:
        m = self._priority.search(line)
        if not m:
            return None

        pri = int(m.group("pri"))
        facility, severity = split_priority(pri)
        record = LogRecord(
            message=clean_message(m.group("rest")) or line,
            severity=severity,
            timestamp=capture_time(),
        )
        self._syslog_meta(record, pri=pri, facility=facility, fmt="basic_priority")
        return record
