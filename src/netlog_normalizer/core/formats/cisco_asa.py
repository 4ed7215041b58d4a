"""Cisco ASA / FWSM firewall parser."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..models import DeviceType, LogRecord, capture_time
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .base import NativeParser, clean_message, extract_hostname
from .cisco_ios import CISCO_TIMESTAMP_RE, map_cisco_severity

_EVENT_TYPES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^Built\s+(?:inbound|outbound)?", re.IGNORECASE), "connection_built"),
    (re.compile(r"^Teardown\s+", re.IGNORECASE), "connection_teardown"),
    (re.compile(r"^Deny\s+|\bdenied\b", re.IGNORECASE), "deny"),
    (re.compile(r"^Starting SSL handshake", re.IGNORECASE), "ssl_handshake"),
)


def classify_asa_event(message: str) -> str | None:
    """Coarse event category for common ASA messages."""
    for pattern, event in _EVENT_TYPES:
        if pattern.search(message):
            return event
    return None


@dataclass(frozen=True, slots=True)
class CiscoASAParser(NativeParser):
    """Parse ASA lines (``%ASA-6-302013: Built inbound TCP connection ...``).

    Lines detected only by connection keywords are kept as unstructured INFO
    records.
    """

    timestamps: TimestampParser = field(default=DEFAULT_TIMESTAMP_PARSER)

    detection_patterns = (
        re.compile(r"%ASA-"),
        re.compile(r"%FWSM-"),
        re.compile(r"Built\s+(inbound|outbound)"),
        re.compile(r"Teardown\s+(TCP|UDP)"),
    )
    patterns = (
        r"%ASA-\d+-\d+:.*",
        r"%FWSM-\d+-\d+:.*",
        r"Built\s+(inbound|outbound).*",
        r"Teardown\s+(TCP|UDP).*",
    )

    _structured = re.compile(
        r"^\s*(?:<(?P<pri>\d{1,3})>)?(?P<prefix>.*?)"
        r"%(?P<facility>ASA|FWSM)-(?P<sev>\d+)-(?P<msgid>\d{6}):\s*(?P<msg>.+)$"
    )

    def device_type(self) -> DeviceType:
        return DeviceType.CISCO_ASA

    def parser_name(self) -> str:
        return "Cisco ASA Parser"

    def _parse(self, raw: str) -> LogRecord | None:
        m = self._structured.match(raw)
        if not m:
            record = LogRecord.from_raw(raw)
            record.add_metadata("parser_note", "unstructured ASA line")
            return record

        ts_match = CISCO_TIMESTAMP_RE.search(m.group("prefix"))
        message = clean_message(m.group("msg"))
        record = LogRecord(
            message=message,
            severity=map_cisco_severity(m.group("sev")),
            timestamp=self.timestamps.parse(ts_match.group(1)) if ts_match else capture_time(),
            facility=m.group("facility"),
            hostname=extract_hostname(raw),
        )
        record.add_metadata("message_id", m.group("msgid"))
        record.add_metadata("cisco_severity", m.group("sev"))
        if m.group("pri"):
            record.add_metadata("syslog_priority", m.group("pri"))
        event = classify_asa_event(message)
        if event:
            record.add_metadata("event_type", event)
        return record
