"""Core data models: severity and device taxonomies plus the normalized log record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, IntEnum
from typing import Any

from .errors import InvalidDeviceTypeError, InvalidDeviceVendorError, InvalidSeverityError


class Severity(IntEnum):
    """Syslog severity levels (RFC 5424 numbering)."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @property
    def label(self) -> str:
        """Lowercase canonical name (e.g. "error")."""
        return self.name.lower()

    def __str__(self) -> str:
        return self.label


_SEVERITY_ALIASES: dict[str, Severity] = {
    "emergency": Severity.EMERGENCY,
    "emerg": Severity.EMERGENCY,
    "alert": Severity.ALERT,
    "critical": Severity.CRITICAL,
    "crit": Severity.CRITICAL,
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "notice": Severity.NOTICE,
    "note": Severity.NOTICE,
    "info": Severity.INFO,
    "informational": Severity.INFO,
    "debug": Severity.DEBUG,
}


def parse_severity(value: str | int) -> Severity:
    """Parse a severity name, alias or number (0..7).

    Raises InvalidSeverityError for anything outside the eight syslog levels;
    out-of-range numbers are rejected, never clamped.
    """
    if isinstance(value, bool):
        raise InvalidSeverityError(f"Invalid severity: {value!r}")

    if isinstance(value, int):
        if 0 <= value <= 7:
            return Severity(value)
        raise InvalidSeverityError(f"Invalid severity number: {value}")

    if not isinstance(value, str):
        raise InvalidSeverityError(f"Invalid severity: {value!r}")

    name = value.strip().lower()
    sev = _SEVERITY_ALIASES.get(name)
    if sev is not None:
        return sev

    if name.isdigit():
        num = int(name)
        if 0 <= num <= 7:
            return Severity(num)

    raise InvalidSeverityError(f"Invalid severity string: {value!r}")


def coerce_severity(value: Any, default: Severity = Severity.INFO) -> Severity:
    """Permissive severity parsing: return `default` instead of raising."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        return parse_severity(value)
    except InvalidSeverityError:
        return default


class DeviceType(str, Enum):
    """Device families a parser can be written for."""

    UNKNOWN = "unknown"
    CISCO_IOS = "cisco-ios"
    CISCO_IOS_XE = "cisco-ios-xe"
    CISCO_NXOS = "cisco-nx-os"
    CISCO_ASA = "cisco-asa"
    GENERIC_SYSLOG = "generic-syslog"
    CUSTOM = "custom"

    @property
    def label(self) -> str:
        """CamelCase name, the form parser scripts return (e.g. "CiscoNXOS")."""
        return _DEVICE_LABELS[self]

    def __str__(self) -> str:
        return self.value


_DEVICE_LABELS: dict[DeviceType, str] = {
    DeviceType.UNKNOWN: "Unknown",
    DeviceType.CISCO_IOS: "CiscoIOS",
    DeviceType.CISCO_IOS_XE: "CiscoIOSXE",
    DeviceType.CISCO_NXOS: "CiscoNXOS",
    DeviceType.CISCO_ASA: "CiscoASA",
    DeviceType.GENERIC_SYSLOG: "GenericSyslog",
    DeviceType.CUSTOM: "Custom",
}

_DEVICE_ALIASES: dict[str, DeviceType] = {
    **{dt.value: dt for dt in DeviceType},
    **{label.lower(): dt for dt, label in _DEVICE_LABELS.items()},
    "ios": DeviceType.CISCO_IOS,
    "ios-xe": DeviceType.CISCO_IOS_XE,
    "iosxe": DeviceType.CISCO_IOS_XE,
    "nxos": DeviceType.CISCO_NXOS,
    "nx-os": DeviceType.CISCO_NXOS,
    "asa": DeviceType.CISCO_ASA,
    "syslog": DeviceType.GENERIC_SYSLOG,
}


def parse_device_type(value: str) -> DeviceType:
    """Parse a device type name (case-insensitive, vendor aliases accepted).

    Raises InvalidDeviceTypeError for unrecognized strings.
    """
    if isinstance(value, DeviceType):
        return value
    if not isinstance(value, str):
        raise InvalidDeviceTypeError(f"Invalid device type: {value!r}")

    dt = _DEVICE_ALIASES.get(value.strip().lower())
    if dt is None:
        raise InvalidDeviceTypeError(f"Invalid device type string: {value!r}")
    return dt


def coerce_device_type(value: Any, default: DeviceType = DeviceType.UNKNOWN) -> DeviceType:
    """Permissive device type parsing: return `default` instead of raising."""
    try:
        return parse_device_type(value)
    except InvalidDeviceTypeError:
        return default


class DeviceVendor(str, Enum):
    """Hardware vendors."""

    UNKNOWN = "unknown"
    CISCO = "cisco"
    JUNIPER = "juniper"
    ARISTA = "arista"
    HPE = "hpe"
    GENERIC = "generic"

    def __str__(self) -> str:
        return self.value


def parse_device_vendor(value: str) -> DeviceVendor:
    """Parse a vendor name (case-insensitive; "hp" is accepted for HPE)."""
    if not isinstance(value, str):
        raise InvalidDeviceVendorError(f"Invalid device vendor: {value!r}")

    name = value.strip().lower()
    if name == "hp":
        return DeviceVendor.HPE
    try:
        return DeviceVendor(name)
    except ValueError as exc:
        raise InvalidDeviceVendorError(f"Invalid device vendor string: {value!r}") from exc


def default_device_type(vendor: DeviceVendor) -> DeviceType:
    """Fallback device type hint for a vendor."""
    if vendor is DeviceVendor.CISCO:
        return DeviceType.CISCO_IOS
    if vendor is DeviceVendor.GENERIC:
        return DeviceType.GENERIC_SYSLOG
    return DeviceType.UNKNOWN


def capture_time() -> datetime:
    """Current UTC time truncated to whole seconds."""
    return datetime.now(UTC).replace(microsecond=0)


@dataclass(slots=True)
class LogRecord:
    """Normalized log record produced by parsers.

    Parsers build records in stages; consumers should treat a returned record
    as read-only.
    """

    message: str = ""
    severity: Severity = Severity.INFO
    timestamp: datetime = field(default_factory=capture_time)
    device_type: DeviceType = DeviceType.UNKNOWN
    facility: str = ""
    hostname: str = ""
    process_name: str = ""
    process_id: int | None = None
    raw_message: str = ""  # verbatim input line
    metadata: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw_message: str, device_type: DeviceType = DeviceType.UNKNOWN) -> LogRecord:
        """Record for a line nothing could structure: raw text at INFO, capture time."""
        return cls(
            message=raw_message,
            severity=Severity.INFO,
            device_type=device_type,
            raw_message=raw_message,
        )

    def is_valid(self) -> bool:
        return bool(self.message)

    def add_metadata(self, key: str, value: str) -> None:
        self.metadata[key] = value

    def get_metadata(self, key: str, default: str | None = None) -> str | None:
        return self.metadata.get(key, default)

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def clear_metadata(self) -> None:
        self.metadata.clear()

    def __str__(self) -> str:
        parts = [self.timestamp.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC"), f"[{self.severity.label}]"]
        if self.hostname:
            parts.append(self.hostname)
        if self.facility:
            fac = self.facility
            if self.process_name:
                proc = self.process_name
                if self.process_id is not None:
                    proc = f"{proc}:{self.process_id}"
                fac = f"{fac}[{proc}]"
            parts.append(fac)
        return " ".join(parts) + f": {self.message}"

    def to_dict(self) -> dict[str, Any]:
        from .serialization import record_to_dict

        return record_to_dict(self)

    def to_json(self) -> str:
        from .serialization import record_to_json

        return record_to_json(self)

    @classmethod
    def from_dict(cls, data: Any) -> LogRecord:
        from .serialization import record_from_dict

        return record_from_dict(data)

    @classmethod
    def from_json(cls, text: str | bytes) -> LogRecord:
        from .serialization import record_from_json

        return record_from_json(text)
