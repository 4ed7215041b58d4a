"""Thin wrapper around one embedded Lua interpreter.

This is the only module that talks to `lupa` directly; the rest of the engine
sees `LuaRuntimeHandle`, `ScriptError` and the table helpers below.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

import lupa

from ..errors import ScriptError


def is_table(value: Any) -> bool:
    return lupa.lua_type(value) == "table"


def is_function(value: Any) -> bool:
    return lupa.lua_type(value) == "function"


def table_items(table: Any) -> Iterator[tuple[Any, Any]]:
    """Iterate the key/value pairs of a Lua table (order unspecified)."""
    yield from table.items()


def table_sequence(table: Any) -> list[Any]:
    """Values of the array part of a Lua table, in index order."""
    indexed = [(k, v) for k, v in table.items() if isinstance(k, int) and not isinstance(k, bool)]
    return [v for _, v in sorted(indexed, key=lambda kv: kv[0])]


# Shallow copy without metatables; string keys or values that are not valid
# UTF-8 are skipped. Builtins are captured before any script runs.
_PLAIN_COPY = """
local pairs, type = pairs, type
local valid = utf8 and utf8.len or function() return true end
return function(t)
    local out = {}
    for k, v in pairs(t) do
        if (type(k) ~= "string" or valid(k)) and (type(v) ~= "string" or valid(v)) then
            out[k] = v
        end
    end
    return out
end
"""


class LuaRuntimeHandle:
    """One Lua state. Not thread-safe; never share a handle between threads.

    The Python bridge (`python.eval`, builtins) is not exposed to scripts; the
    Lua standard libraries are.
    """

    def __init__(self) -> None:
        self._lua = lupa.LuaRuntime(
            unpack_returned_tuples=True,
            register_eval=False,
            register_builtins=False,
        )
        self._plain_copy = self._lua.execute(_PLAIN_COPY)

    def new_table(self, mapping: Mapping[str, Any] | None = None) -> Any:
        if mapping:
            return self._lua.table_from(dict(mapping))
        return self._lua.table()

    def plain_copy(self, table: Any) -> Any:
        """Copy `table` into a fresh table Python can read without decoding errors."""
        try:
            return self._plain_copy(table)
        except Exception as exc:  # __pairs metamethods run script code
            raise ScriptError(f"Cannot read table: {exc}") from exc

    def install_namespace(self, name: str, functions: Mapping[str, Callable[..., Any]]) -> None:
        """Expose `functions` to scripts as the global table `name`."""
        self._lua.globals()[name] = self._lua.table_from(dict(functions))

    def execute(self, source: str, chunk_name: str) -> None:
        """Compile and run a chunk's top-level code."""
        loaded = self._lua.globals()["load"](source, f"={chunk_name}", "t")
        if isinstance(loaded, tuple):
            # load() returns nil plus an error message on syntax errors.
            message = loaded[1] if len(loaded) > 1 else "unknown error"
            raise ScriptError(f"Failed to load script: {message}")
        if not is_function(loaded):
            raise ScriptError("Failed to load script: unknown error")

        try:
            loaded()
        except lupa.LuaError as exc:
            raise ScriptError(f"Failed to execute script: {exc}") from exc
        except Exception as exc:  # raised by a host callback during top-level code
            raise ScriptError(f"Failed to execute script: {exc}") from exc

    def has_function(self, name: str) -> bool:
        return is_function(self._lua.globals()[name])

    def call(self, name: str, *args: Any) -> Any:
        """Call global function `name`; any failure surfaces as ScriptError."""
        fn = self._lua.globals()[name]
        if not is_function(fn):
            raise ScriptError(f"Function '{name}' is not defined")
        try:
            return fn(*args)
        except lupa.LuaError as exc:
            raise ScriptError(str(exc)) from exc
        except Exception as exc:  # raised by a host callback
            raise ScriptError(f"{type(exc).__name__}: {exc}") from exc
