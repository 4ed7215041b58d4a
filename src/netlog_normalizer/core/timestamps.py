"""Multi-format timestamp parsing for network device logs."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo

from .models import capture_time

DEFAULT_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",  # 2024-01-01 12:00:00
    "%Y-%m-%dT%H:%M:%S",  # 2024-01-01T12:00:00
    "%Y-%m-%dT%H:%M:%SZ",  # 2024-01-01T12:00:00Z
    "%b %d %H:%M:%S",  # Jan 01 12:00:00
    "%b %d %Y %H:%M:%S",  # Jan 01 2024 12:00:00
    "%Y %b %d %H:%M:%S",  # 2024 Jan 01 12:00:00 (NX-OS)
    "%m/%d/%Y %H:%M:%S",  # 01/31/2024 12:00:00
    "%d/%m/%Y %H:%M:%S",  # 31/01/2024 12:00:00
    "%H:%M:%S",  # 12:00:00
)

_FRACTION_RE = re.compile(r"(\d{1,2}:\d{2}:\d{2})[.,]\d+")


def _has_year(fmt: str) -> bool:
    return "%Y" in fmt or "%y" in fmt


def _has_date(fmt: str) -> bool:
    return any(d in fmt for d in ("%d", "%m", "%b", "%j"))


@dataclass(frozen=True, slots=True)
class TimestampParser:
    """Try a list of layouts in order; naive results are read in `default_tz`.

    Layouts without a year take the current local year; time-only layouts take
    today's date.
    """

    custom_formats: Sequence[str] = ()
    default_tz: tzinfo = UTC

    def formats(self) -> list[str]:
        """Custom formats first, then the defaults."""
        return [*self.custom_formats, *DEFAULT_FORMATS]

    def with_formats(self, *formats: str) -> TimestampParser:
        """Return a parser that also tries `formats` (before the defaults)."""
        return TimestampParser(
            custom_formats=(*self.custom_formats, *formats),
            default_tz=self.default_tz,
        )

    def _to_utc(self, ts: datetime) -> datetime:
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=self.default_tz)
        return ts.astimezone(UTC)

    def _parse_with_format(self, text: str, fmt: str) -> datetime | None:
        now = datetime.now()
        try:
            if not _has_year(fmt) and _has_date(fmt):
                # Prefixing the year keeps Feb 29 parseable.
                return datetime.strptime(f"{now.year} {text}", f"%Y {fmt}")
            ts = datetime.strptime(text, fmt)
        except ValueError:
            return None

        if not _has_date(fmt):
            ts = ts.replace(year=now.year, month=now.month, day=now.day)
        return ts

    def try_parse(self, text: str) -> datetime | None:
        """Parse `text` into an aware UTC datetime, or None if no layout fits."""
        if not isinstance(text, str):
            return None
        clean = text.strip().lstrip("*").strip()
        if not clean:
            return None

        try:
            return self._to_utc(datetime.fromisoformat(clean.replace("Z", "+00:00"))).replace(
                microsecond=0
            )
        except ValueError:
            pass

        clean = _FRACTION_RE.sub(r"\1", clean)
        for fmt in self.formats():
            ts = self._parse_with_format(clean, fmt)
            if ts is not None:
                return self._to_utc(ts)
        return None

    def parse(self, text: str) -> datetime:
        """Parse `text`, falling back to the capture time."""
        ts = self.try_parse(text)
        return ts if ts is not None else capture_time()


DEFAULT_TIMESTAMP_PARSER = TimestampParser()


def parse_timestamp(text: str) -> datetime:
    """Parse with the default layouts, falling back to the capture time."""
    return DEFAULT_TIMESTAMP_PARSER.parse(text)
