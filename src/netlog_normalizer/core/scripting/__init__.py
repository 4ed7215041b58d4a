"""Lua scripting bridge for user-supplied parsers."""

from __future__ import annotations

from .engine import REQUIRED_FUNCTIONS, ScriptEngine
from .host_api import NAMESPACE, build_host_api
from .marshal import table_to_record
from .runtime import LuaRuntimeHandle

__all__ = [
    "NAMESPACE",
    "REQUIRED_FUNCTIONS",
    "LuaRuntimeHandle",
    "ScriptEngine",
    "build_host_api",
    "table_to_record",
]
