"""Cisco IOS / IOS-XE parser."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime

from ..models import DeviceType, LogRecord, Severity, capture_time
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .base import NativeParser, clean_message, extract_hostname

# %FACILITY-SEVERITY-MNEMONIC
MESSAGE_ID = r"%(?P<facility>[A-Z][A-Z0-9_]*)-(?P<sev>\d+)-(?P<mnemonic>[A-Z][A-Z0-9_]*)"

CISCO_TIMESTAMP_RE = re.compile(
    r"\*?(\w{3}\s+\d{1,2}\s+\d{4}\s+\d{1,2}:\d{2}:\d{2}"
    r"|\w{3}\s+\d{1,2}\s+\d{1,2}:\d{2}:\d{2}(?:\.\d+)?"
    r"|\d{1,2}:\d{2}:\d{2}(?:\.\d+)?)"
)


def map_cisco_severity(digit: str | int) -> Severity:
    """Cisco severity digits are syslog levels; anything else is INFO."""
    try:
        value = int(digit)
    except (TypeError, ValueError):
        return Severity.INFO
    if 0 <= value <= 7:
        return Severity(value)
    return Severity.INFO


def parse_cisco_timestamp(text: str, parser: TimestampParser = DEFAULT_TIMESTAMP_PARSER) -> datetime:
    """Parse the timestamp portion of a Cisco line, or return the capture time."""
    m = CISCO_TIMESTAMP_RE.search(text)
    return parser.parse(m.group(1) if m else text)


@dataclass(frozen=True, slots=True)
class CiscoIOSParser(NativeParser):
    """Parse Cisco IOS lines, trying progressively looser grammars.

    1. standard:  ``*Mar 1 00:00:00.000: %FAC-5-MNEMONIC: message``
    2. priority:  ``<189>Mar 1 00:00:00: %FAC-5-MNEMONIC: message``
    3. simple:    a ``%FAC-5-MNEMONIC`` token anywhere in the line
    """

    device: DeviceType = DeviceType.CISCO_IOS
    name: str = "Cisco IOS Parser"
    timestamps: TimestampParser = field(default=DEFAULT_TIMESTAMP_PARSER)

    detection_patterns = (
        re.compile(r"%[A-Z][A-Z0-9_]*-\d+-[A-Z][A-Z0-9_]*:"),
        re.compile(r"\*\w+\s+\d+\s+\d+:\d+:\d+"),
        re.compile(r"%LINEPROTO-|%LINK-|%BGP-|%OSPF-"),
        re.compile(r"%SYS-|%CONFIG_I-|%SEC-"),
    )
    patterns = (
        r"\*\w+\s+\d+\s+\d+:\d+:\d+(?:\.\d+)?\s*:\s*%[A-Z_]+-\d+-[A-Z_]+:.*",
        r"<\d+>.+?:\s*%[A-Z_]+-\d+-[A-Z_]+:.*",
        r"\d+:\d+:\d+(?:\.\d+)?\s*:\s*%[A-Z_]+-\d+-[A-Z_]+:.*",
    )

    _standard = re.compile(
        r"^\s*(?:\d+:\s*)?\*?"
        r"(?P<ts>\w{3}\s+\d{1,2}(?:\s+\d{4})?\s+\d{1,2}:\d{2}:\d{2}(?:\.\d+)?)\s*:\s*"
        + MESSAGE_ID
        + r":\s*(?P<msg>.+)$"
    )
    _priority = re.compile(r"^\s*<(?P<pri>\d{1,3})>(?P<ts>.+?):\s*" + MESSAGE_ID + r":\s*(?P<msg>.+)$")
    _message_id = re.compile(MESSAGE_ID + r"(?P<colon>:)?")

    def device_type(self) -> DeviceType:
        return self.device

    def parser_name(self) -> str:
        return self.name

    def _parse(self, raw: str) -> LogRecord | None:
        for attempt in (self._parse_standard, self._parse_priority, self._parse_simple):
            record = attempt(raw)
            if record is not None:
                return record
        return None

    def _build(self, raw: str, m: re.Match[str], ts: datetime, message: str) -> LogRecord:
        record = LogRecord(
            message=message,
            severity=map_cisco_severity(m.group("sev")),
            timestamp=ts,
            facility=m.group("facility"),
            hostname=extract_hostname(raw),
        )
        record.add_metadata("mnemonic", m.group("mnemonic"))
        record.add_metadata("cisco_severity", m.group("sev"))
        return record

    def _parse_standard(self, raw: str) -> LogRecord | None:
        m = self._standard.search(raw)
        if not m:
            return None
        ts = self.timestamps.parse(m.group("ts"))
        return self._build(raw, m, ts, clean_message(m.group("msg")))

    def _parse_priority(self, raw: str) -> LogRecord | None:
        m = self._priority.search(raw)
        if not m:
            return None
        ts = parse_cisco_timestamp(m.group("ts"), self.timestamps)
        record = self._build(raw, m, ts, clean_message(m.group("msg")))
        # Cisco's own severity digit wins over the syslog PRI.
        record.add_metadata("syslog_priority", m.group("pri"))
        return record

    def _parse_simple(self, raw: str) -> LogRecord | None:
        m = self._message_id.search(raw)
        if not m:
            return None

        ts_match = CISCO_TIMESTAMP_RE.search(raw, 0, m.start())
        ts = self.timestamps.parse(ts_match.group(1)) if ts_match else capture_time()

        message = raw
        if m.group("colon"):
            rest = clean_message(raw[m.end() :])
            if rest:
                message = rest
        return self._build(raw, m, ts, message)
