from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

SCRIPT_TEMPLATE = """
function can_parse(raw)
    return string.find(raw, "{keyword}", 1, true) ~= nil
end

function parse(raw)
    if not can_parse(raw) then
        return nil
    end
    local entry = netlog.create_log_entry()
    entry.message = raw
    entry.severity = "{severity}"
    entry.facility = "{keyword}"
    entry.metadata = {{ matched = "{keyword}" }}
    return entry
end

function get_device_type()
    return "{device}"
end

function get_parser_name()
    return "{name}"
end
"""


@pytest.fixture
def keyword_script() -> Callable[..., str]:
    """Lua parser source that accepts lines containing `keyword`."""

    def _source(keyword: str, *, device: str = "Custom", name: str | None = None, severity: str = "info") -> str:
        return SCRIPT_TEMPLATE.format(
            keyword=keyword,
            device=device,
            name=name or f"{keyword} parser",
            severity=severity,
        )

    return _source


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write(filename: str, source: str) -> Path:
        path = tmp_path / filename
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_device_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "*Mar  1 00:00:12.345: %SYS-5-CONFIG_I: Configured from console by vty0",
                    "",
                    "<34>Jan 15 10:30:45 server01 sshd[1234]: Accepted password for admin",
                    "%LINK-3-UPDOWN: Interface GigabitEthernet0/1, changed state to down",
                    "   ",
                    "2024 Jan 15 10:30:45 nexus01 %ETHPORT-5-IF_UP: Interface Ethernet1/1 is up",
                    "plain text nobody understands",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write
