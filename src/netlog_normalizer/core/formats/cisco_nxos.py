"""Cisco NX-OS parser."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..models import DeviceType, LogRecord
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .base import NativeParser, clean_message
from .cisco_ios import MESSAGE_ID, map_cisco_severity


@dataclass(frozen=True, slots=True)
class CiscoNXOSParser(NativeParser):
    """Parse NX-OS lines (``2024 Jan 15 10:30:45 switch %FAC-5-MNEMONIC: message``).

    Lines that are detected as NX-OS but do not fit the grammar are kept as
    unstructured INFO records.
    """

    timestamps: TimestampParser = field(default=DEFAULT_TIMESTAMP_PARSER)

    detection_patterns = (
        re.compile(r"%NXOS-"),
        re.compile(r"\d{4} \w+\s+\d+ \d+:\d+:\d+"),
    )
    patterns = (
        r"\d{4} \w+\s+\d+ \d+:\d+:\d+.*%NXOS-.*",
        r"%NXOS-\d+-[A-Z_]+:.*",
        r"\d{4} \w{3}\s+\d+ \d+:\d+:\d+\s+\S+\s+%[A-Z_]+-\d+-[A-Z_]+:.*",
    )

    _structured = re.compile(
        r"^\s*(?:<(?P<pri>\d{1,3})>)?"
        r"(?:(?P<ts>\d{4}\s+\w{3}\s+\d{1,2}\s+\d{1,2}:\d{2}:\d{2}(?:\.\d+)?)\s*:?\s+)?"
        r"(?:(?P<host>[A-Za-z][\w.-]*)\s*:?\s+)?"
        r"(?:%\$\s*(?P<vdc>[^%]*?)\s*%\$\s*)?"
        + MESSAGE_ID
        + r":\s*(?P<msg>.+)$"
    )

    def device_type(self) -> DeviceType:
        return DeviceType.CISCO_NXOS

    def parser_name(self) -> str:
        return "Cisco NX-OS Parser"

    def _parse(self, raw: str) -> LogRecord | None:
        m = self._structured.match(raw)
        if not m:
            record = LogRecord.from_raw(raw)
            record.add_metadata("parser_note", "unstructured NX-OS line")
            return record

        record = LogRecord(
            message=clean_message(m.group("msg")),
            severity=map_cisco_severity(m.group("sev")),
            timestamp=self.timestamps.parse(m.group("ts") or ""),
            facility=m.group("facility"),
            hostname=m.group("host") or "",
        )
        record.add_metadata("mnemonic", m.group("mnemonic"))
        record.add_metadata("cisco_severity", m.group("sev"))
        if m.group("vdc"):
            record.add_metadata("vdc", m.group("vdc"))
        if m.group("pri"):
            record.add_metadata("syslog_priority", m.group("pri"))
        return record
