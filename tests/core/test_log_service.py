from __future__ import annotations

import gzip
from collections.abc import Callable
from pathlib import Path

import pytest

from netlog_normalizer.core.config import NormalizerConfig
from netlog_normalizer.core.errors import InvalidSeverityError
from netlog_normalizer.core.formats.scripted import ScriptedParser
from netlog_normalizer.core.log_service import Normalizer
from netlog_normalizer.core.models import DeviceType, Severity
from netlog_normalizer.core.registry import DuplicatePolicy, ScriptRegistry


def test_normalize_uses_native_parsers() -> None:
    normalizer = Normalizer()
    record = normalizer.normalize("<34>Jan 15 10:30:45 server01 sshd[1234]: Accepted password for admin")
    assert record is not None
    assert record.device_type is DeviceType.GENERIC_SYSLOG
    assert record.process_name == "sshd"


def test_script_wins_over_native(keyword_script: Callable[..., str]) -> None:
    scripts = ScriptRegistry()
    scripts.register(ScriptedParser.from_string(keyword_script("LINK", device="Custom"), "link"))
    normalizer = Normalizer(scripts=scripts)

    raw = "%LINK-3-UPDOWN: Interface Gi0/1, changed state to down"
    detected = normalizer.detect(raw)
    assert detected is scripts.get("LINK parser")

    record = normalizer.normalize(raw)
    assert record is not None
    assert record.device_type is DeviceType.CUSTOM
    assert record.get_metadata("matched") == "LINK"


def test_falls_back_to_native_when_script_declines() -> None:
    scripts = ScriptRegistry()
    scripts.register(
        ScriptedParser.from_string(
            """
function can_parse(raw) return true end
function parse(raw) return nil end
function get_device_type() return "Custom" end
function get_parser_name() return "greedy" end
""",
            "greedy",
        )
    )
    normalizer = Normalizer(scripts=scripts)
    record = normalizer.normalize("%SYS-5-CONFIG_I: Configured from console")
    assert record is not None
    assert record.device_type is DeviceType.CISCO_IOS


def test_unparsed_lines() -> None:
    assert Normalizer().normalize("   ") is None

    record = Normalizer().normalize("plain text")
    assert record is not None
    assert record.message == "plain text"
    assert record.get_metadata("parser_note") == "no parser matched"

    assert Normalizer(keep_unparsed=False).normalize("plain text") is None


def test_normalize_lines_skips_blanks() -> None:
    records = Normalizer(keep_unparsed=False).normalize_lines(
        ["%SYS-5-CONFIG_I: Configured\n", "", "<13>bare\r\n", "opaque"]
    )
    assert [r.raw_message for r in records] == ["%SYS-5-CONFIG_I: Configured", "<13>bare"]


@pytest.mark.asyncio
async def test_iter_file_records(tmp_path: Path, write_device_log: Callable[[Path], None]) -> None:
    path = tmp_path / "devices.log"
    write_device_log(path)

    records = [r async for r in Normalizer().iter_file_records(path)]
    assert [r.device_type for r in records] == [
        DeviceType.CISCO_IOS,
        DeviceType.GENERIC_SYSLOG,
        DeviceType.CISCO_IOS,
        DeviceType.CISCO_NXOS,
        DeviceType.UNKNOWN,
    ]
    assert [r.get_metadata("line_number") for r in records] == ["1", "3", "4", "6", "7"]


@pytest.mark.asyncio
async def test_iter_file_records_filters(tmp_path: Path, write_device_log: Callable[[Path], None]) -> None:
    path = tmp_path / "devices.log"
    write_device_log(path)
    normalizer = Normalizer()

    severe = await normalizer.get_records(path, min_severity="error")
    assert [r.severity for r in severe] == [Severity.CRITICAL, Severity.ERROR]

    sshd = await normalizer.get_records(path, contains="sshd")
    assert [r.hostname for r in sshd] == ["server01"]

    with pytest.raises(InvalidSeverityError):
        await normalizer.get_records(path, min_severity="loud")


@pytest.mark.asyncio
async def test_iter_file_records_gzip(tmp_path: Path, write_device_log: Callable[[Path], None]) -> None:
    plain = tmp_path / "devices.log"
    write_device_log(plain)
    gz_path = tmp_path / "devices.log.gz"
    with gzip.open(gz_path, "wb") as f:
        f.write(plain.read_bytes())

    normalizer = Normalizer()
    from_plain = await normalizer.get_records(plain)
    from_gz = await normalizer.get_records(gz_path)
    assert [r.raw_message for r in from_gz] == [r.raw_message for r in from_plain]


@pytest.mark.asyncio
async def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        await Normalizer().get_records(tmp_path / "nope.log")


def test_from_config_loads_scripts(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    write_script: Callable[[str, str], Path],
    keyword_script: Callable[..., str],
) -> None:
    for name in ("NETLOG_PARSERS_DIR", "NETLOG_SCRIPT_SUFFIX", "NETLOG_DUPLICATE_POLICY", "NETLOG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    write_script("edge.nlp", keyword_script("EDGE"))

    normalizer = Normalizer.from_config(
        NormalizerConfig(parsers_dir=tmp_path, duplicate_policy=DuplicatePolicy.REPLACE),
        keep_unparsed=False,
    )
    assert normalizer.scripts.names() == ["EDGE parser"]
    assert normalizer.scripts.on_duplicate is DuplicatePolicy.REPLACE
    assert len(normalizer.factory) == 5
    assert normalizer.keep_unparsed is False

    record = normalizer.normalize("EDGE router reboot")
    assert record is not None
    assert record.facility == "EDGE"


def test_from_config_keyword_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("NETLOG_PARSERS_DIR", "NETLOG_SCRIPT_SUFFIX", "NETLOG_DUPLICATE_POLICY", "NETLOG_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    normalizer = Normalizer.from_config(NormalizerConfig(encoding="utf-8"), encoding="latin-1")
    assert normalizer.encoding == "latin-1"
    assert Normalizer.from_config(NormalizerConfig(encoding="latin-1")).encoding == "latin-1"
