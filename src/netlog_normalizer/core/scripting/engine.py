"""Scripting bridge: load a Lua parser script and call it through the parser contract.

A script must define `parse`, `can_parse`, `get_device_type` and
`get_parser_name`; `get_version` and `get_supported_patterns` are optional.
Scripts see the host helpers under the global `netlog` table.

Load failures are reported as `False` plus `last_error`. Failures while
parsing surface as `None` (or `False` for `can_parse`) and never raise.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..errors import ScriptError
from ..formats.base import DEFAULT_VERSION, parse_batch
from ..models import DeviceType, LogRecord, coerce_device_type
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .host_api import NAMESPACE, build_host_api
from .marshal import table_to_record
from .runtime import LuaRuntimeHandle, is_table, table_sequence

logger = logging.getLogger(__name__)

REQUIRED_FUNCTIONS = ("parse", "can_parse", "get_device_type", "get_parser_name")
INLINE_SCRIPT_NAME = "inline_script"


def _first(result: Any) -> Any:
    """Lua multiple returns arrive as a tuple; only the first value counts."""
    if isinstance(result, tuple):
        return result[0] if result else None
    return result


class ScriptEngine:
    """Owns one Lua runtime and at most one loaded script.

    Not thread-safe. Every load starts from a fresh runtime, so a failed load
    never leaves functions from an earlier script behind.
    """

    def __init__(self, *, timestamps: TimestampParser = DEFAULT_TIMESTAMP_PARSER) -> None:
        self._timestamps = timestamps
        self._runtime: LuaRuntimeHandle | None = None
        self._script_name = ""
        self._last_error = ""

    @property
    def script_name(self) -> str:
        return self._script_name

    @property
    def last_error(self) -> str:
        return self._last_error

    def is_script_loaded(self) -> bool:
        return self._runtime is not None

    def reset(self) -> None:
        """Drop the loaded script (if any) and clear the error state."""
        self._runtime = None
        self._script_name = ""
        self._last_error = ""

    # ---- loading ----

    def load_script(self, path: str | Path) -> bool:
        path = Path(path)
        self.reset()
        self._script_name = path.name
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return self._fail(f"Cannot open script file {path}: {exc}")
        return self._load(source)

    def load_script_from_string(self, source: str, name: str = INLINE_SCRIPT_NAME) -> bool:
        self.reset()
        self._script_name = name
        return self._load(source)

    def _load(self, source: str) -> bool:
        runtime = LuaRuntimeHandle()
        runtime.install_namespace(
            NAMESPACE,
            build_host_api(runtime, self._script_name, timestamps=self._timestamps),
        )
        try:
            runtime.execute(source, self._script_name)
        except ScriptError as exc:
            return self._fail(str(exc))

        for name in REQUIRED_FUNCTIONS:
            if not runtime.has_function(name):
                return self._fail(f"Required function '{name}' not found in script")

        self._runtime = runtime
        logger.debug("Loaded parser script %s", self._script_name)
        return True

    def _fail(self, message: str) -> bool:
        self._runtime = None
        self._last_error = message
        logger.warning("Failed to load parser script %s: %s", self._script_name, message)
        return False

    @classmethod
    def check_script(cls, path: str | Path) -> str | None:
        """Load `path` into a throwaway engine; return the error message or None."""
        engine = cls()
        if engine.load_script(path):
            return None
        return engine.last_error

    @classmethod
    def validate_script(cls, path: str | Path) -> bool:
        return cls.check_script(path) is None

    # ---- parser contract ----

    def _call(self, name: str, *args: Any) -> Any:
        if self._runtime is None:
            raise ScriptError("No script loaded")
        return _first(self._runtime.call(name, *args))

    def parse(self, raw: str) -> LogRecord | None:
        if self._runtime is None:
            self._last_error = "No script loaded"
            return None

        try:
            result = self._call("parse", raw)
        except ScriptError as exc:
            self._last_error = f"Script parse function failed: {exc}"
            logger.debug("%s: %s", self._script_name, self._last_error)
            return None

        if result is None:
            return None
        if not is_table(result):
            self._last_error = "Parse function must return a table or nil"
            logger.debug("%s: %s", self._script_name, self._last_error)
            return None
        device_type = self.device_type()
        try:
            return table_to_record(result, raw=raw, device_type=device_type, runtime=self._runtime)
        except Exception as exc:
            self._last_error = f"Cannot convert script result: {exc}"
            logger.debug("%s: %s", self._script_name, self._last_error)
            return None

    def can_parse(self, raw: str) -> bool:
        if self._runtime is None:
            return False
        try:
            return self._call("can_parse", raw) is True
        except ScriptError as exc:
            self._last_error = f"Script can_parse function failed: {exc}"
            logger.debug("%s: %s", self._script_name, self._last_error)
            return False

    def parse_batch(self, raws: Iterable[str]) -> list[LogRecord]:
        return parse_batch(self, raws)

    def device_type(self) -> DeviceType:
        if self._runtime is None:
            return DeviceType.UNKNOWN
        try:
            return coerce_device_type(self._call("get_device_type"))
        except ScriptError:
            return DeviceType.UNKNOWN

    def parser_name(self) -> str:
        if self._runtime is not None:
            try:
                name = self._call("get_parser_name")
            except ScriptError:
                name = None
            if isinstance(name, str) and name:
                return name
        return self._script_name

    def version(self) -> str:
        if self._runtime is not None and self._runtime.has_function("get_version"):
            try:
                value = self._call("get_version")
            except ScriptError:
                value = None
            if isinstance(value, str) and value:
                return value
        return DEFAULT_VERSION

    def supported_patterns(self) -> list[str]:
        if self._runtime is None or not self._runtime.has_function("get_supported_patterns"):
            return []
        try:
            result = self._call("get_supported_patterns")
            if not is_table(result):
                return []
            patterns = table_sequence(self._runtime.plain_copy(result))
        except (ScriptError, UnicodeDecodeError):
            return []
        return [p for p in patterns if isinstance(p, str)]
