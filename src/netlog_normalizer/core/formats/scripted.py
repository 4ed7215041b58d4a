"""Adapter exposing a Lua parser script through the LogParser interface."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..models import DeviceType, LogRecord
from ..scripting.engine import INLINE_SCRIPT_NAME, ScriptEngine
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .base import parse_batch


class ScriptedParser:
    """A parser backed by one `ScriptEngine`.

    Build with `from_file` or `from_string`. If the script failed to load the
    adapter stays usable but inert: `parse` returns None and `can_parse`
    returns False; `last_error` says why.
    """

    def __init__(
        self,
        *,
        path: Path | None = None,
        source: str | None = None,
        name: str = INLINE_SCRIPT_NAME,
        timestamps: TimestampParser = DEFAULT_TIMESTAMP_PARSER,
    ) -> None:
        if (path is None) == (source is None):
            raise ValueError("Exactly one of path or source is required")
        self._path = path
        self._source = source
        self._name = name
        self._engine = ScriptEngine(timestamps=timestamps)
        self.reload_script()

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> ScriptedParser:
        return cls(path=Path(path), **kwargs)

    @classmethod
    def from_string(cls, source: str, name: str = INLINE_SCRIPT_NAME, **kwargs) -> ScriptedParser:
        return cls(source=source, name=name, **kwargs)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def last_error(self) -> str:
        return self._engine.last_error

    def is_valid(self) -> bool:
        return self._engine.is_script_loaded()

    def reload_script(self) -> bool:
        """Re-run the original load (file or inline text), replacing engine state."""
        if self._path is not None:
            return self._engine.load_script(self._path)
        return self._engine.load_script_from_string(self._source or "", self._name)

    def can_parse(self, raw: str) -> bool:
        if not self.is_valid():
            return False
        return self._engine.can_parse(raw)

    def parse(self, raw: str) -> LogRecord | None:
        if not self.is_valid():
            return None
        return self._engine.parse(raw)

    def parse_batch(self, raws: Iterable[str]) -> list[LogRecord]:
        return parse_batch(self, raws)

    def device_type(self) -> DeviceType:
        if not self.is_valid():
            return DeviceType.UNKNOWN
        return self._engine.device_type()

    def parser_name(self) -> str:
        if not self.is_valid():
            return str(self._path) if self._path is not None else self._name
        return self._engine.parser_name()

    def version(self) -> str:
        return self._engine.version()

    def supported_patterns(self) -> list[str]:
        if not self.is_valid():
            return []
        return self._engine.supported_patterns()

    def __repr__(self) -> str:
        origin = str(self._path) if self._path is not None else self._name
        return f"ScriptedParser({origin!r}, valid={self.is_valid()})"
