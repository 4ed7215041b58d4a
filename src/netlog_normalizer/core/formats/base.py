"""Parser interface shared by native and scripted parsers."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import ClassVar, Protocol, runtime_checkable

from ..models import DeviceType, LogRecord

DEFAULT_VERSION = "1.0.0"


@runtime_checkable
class LogParser(Protocol):
    """Parser interface: return a LogRecord if the line is recognized, else None.

    On success `record.raw_message` is the input line and `record.device_type`
    is the parser's own device type.
    """

    def can_parse(self, raw: str) -> bool:
        """Cheap routing hint; True does not guarantee `parse` succeeds."""
        ...

    def parse(self, raw: str) -> LogRecord | None:
        """Parse one raw line into a LogRecord if recognized."""
        ...

    def parse_batch(self, raws: Iterable[str]) -> list[LogRecord]:
        """Parse lines sequentially, dropping the ones that do not parse."""
        ...

    def device_type(self) -> DeviceType: ...

    def parser_name(self) -> str: ...

    def version(self) -> str: ...

    def supported_patterns(self) -> list[str]:
        """Example regexes for documentation; not used for matching."""
        ...


def parse_batch(parser: LogParser, raws: Iterable[str]) -> list[LogRecord]:
    """Apply `parser.parse` to each line, keeping only successful results."""
    out: list[LogRecord] = []
    for raw in raws:
        record = parser.parse(raw)
        if record is not None:
            out.append(record)
    return out


_HOSTNAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"<\d+>(?:\w{3}\s+\d{1,2}\s+\d{1,2}:\d{2}:\d{2}\s+)?"
        r"(?!(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\s)([A-Za-z][\w.-]*):?\s"
    ),  # after priority
    re.compile(r"\d{1,2}:\d{2}:\d{2}(?:\.\d+)?\s+([A-Za-z][\w.-]*)\s*:?\s+%[A-Z_]+-\d+-"),  # before message id
    re.compile(r"^([A-Za-z][\w.-]*)\s*:?\s+%[A-Z_]+-\d+-"),  # bare host before message id
)
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def extract_hostname(message: str) -> str:
    """Best-effort hostname extraction; returns "" when nothing plausible is found."""
    for pattern in _HOSTNAME_PATTERNS:
        m = pattern.search(message)
        if not m:
            continue
        host = m.group(1)
        if len(host) > 1 and not host.isdigit():
            return host
    return ""


def clean_message(message: str) -> str:
    """Trim surrounding whitespace and drop control characters (tabs and newlines kept)."""
    return _CONTROL_RE.sub("", message.strip())


class NativeParser:
    """Stateless mixin for built-in parsers.

    Subclasses set `detection_patterns` and implement `_parse`, `device_type`
    and `parser_name`. `parse` stamps the raw line and device type on every
    record `_parse` returns.
    """

    __slots__ = ()

    detection_patterns: ClassVar[Sequence[re.Pattern[str]]] = ()
    patterns: ClassVar[Sequence[str]] = ()

    def _parse(self, raw: str) -> LogRecord | None:
        raise NotImplementedError

    def device_type(self) -> DeviceType:
        raise NotImplementedError

    def parser_name(self) -> str:
        raise NotImplementedError

    def version(self) -> str:
        return DEFAULT_VERSION

    def supported_patterns(self) -> list[str]:
        return list(self.patterns)

    def can_parse(self, raw: str) -> bool:
        return any(p.search(raw) for p in self.detection_patterns)

    def parse(self, raw: str) -> LogRecord | None:
        if not raw:
            return None
        record = self._parse(raw)
        if record is None:
            return None
        record.raw_message = raw
        record.device_type = self.device_type()
        return record

    def parse_batch(self, raws: Iterable[str]) -> list[LogRecord]:
        return parse_batch(self, raws)
