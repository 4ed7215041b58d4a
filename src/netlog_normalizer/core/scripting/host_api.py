"""The `netlog` namespace exposed to parser scripts.

Every helper is permissive: bad input yields a safe default (INFO severity,
"Unknown" device type, capture time) rather than a Lua error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..models import capture_time, coerce_device_type, coerce_severity
from ..timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser
from .runtime import LuaRuntimeHandle

NAMESPACE = "netlog"

script_logger = logging.getLogger("netlog_normalizer.scripts")


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def build_host_api(
    runtime: LuaRuntimeHandle,
    script_name: str,
    *,
    timestamps: TimestampParser = DEFAULT_TIMESTAMP_PARSER,
) -> dict[str, Callable[..., Any]]:
    """Return the eight host functions bound to one runtime and script."""

    def create_log_entry(*_args: Any) -> Any:
        return runtime.new_table()

    def parse_timestamp(text: Any = None, *_args: Any) -> int:
        ts = timestamps.parse(text) if isinstance(text, str) else capture_time()
        return int(ts.timestamp())

    def parse_severity(text: Any = None, *_args: Any) -> int:
        return int(coerce_severity(text))

    def parse_device_type(text: Any = None, *_args: Any) -> str:
        return coerce_device_type(text).label

    def _logger_for(level: int) -> Callable[..., None]:
        def log(text: Any = None, *_args: Any) -> None:
            msg = _as_text(text)
            if msg is not None:
                script_logger.log(level, "[%s] %s", script_name, msg)

        return log

    return {
        "create_log_entry": create_log_entry,
        "parse_timestamp": parse_timestamp,
        "parse_severity": parse_severity,
        "parse_device_type": parse_device_type,
        "log_debug": _logger_for(logging.DEBUG),
        "log_info": _logger_for(logging.INFO),
        "log_warn": _logger_for(logging.WARNING),
        "log_error": _logger_for(logging.ERROR),
    }
