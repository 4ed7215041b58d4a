from __future__ import annotations

import logging
from pathlib import Path

import pytest

from netlog_normalizer.core.config import NormalizerConfig, configure_logging, resolve_config
from netlog_normalizer.core.registry import DuplicatePolicy

ENV_VARS = ("NETLOG_PARSERS_DIR", "NETLOG_SCRIPT_SUFFIX", "NETLOG_DUPLICATE_POLICY", "NETLOG_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_env() -> None:
    cfg = resolve_config()
    assert cfg == NormalizerConfig()
    assert cfg.script_suffix == ".nlp"
    assert cfg.duplicate_policy is DuplicatePolicy.REJECT

    explicit = NormalizerConfig(encoding="latin-1")
    assert resolve_config(explicit) is explicit


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("NETLOG_PARSERS_DIR", str(tmp_path))
    monkeypatch.setenv("NETLOG_SCRIPT_SUFFIX", ".lua")
    monkeypatch.setenv("NETLOG_DUPLICATE_POLICY", "replace")
    monkeypatch.setenv("NETLOG_LOG_LEVEL", "debug")

    cfg = resolve_config(NormalizerConfig(encoding="latin-1"))
    assert cfg.parsers_dir == tmp_path
    assert cfg.script_suffix == ".lua"
    assert cfg.duplicate_policy is DuplicatePolicy.REPLACE
    assert cfg.log_level == "DEBUG"
    assert cfg.encoding == "latin-1"


@pytest.mark.parametrize(
    ("name", "value", "match"),
    [
        ("NETLOG_SCRIPT_SUFFIX", "nlp", "NETLOG_SCRIPT_SUFFIX"),
        ("NETLOG_DUPLICATE_POLICY", "merge", "NETLOG_DUPLICATE_POLICY"),
        ("NETLOG_LOG_LEVEL", "chatty", "NETLOG_LOG_LEVEL"),
    ],
)
def test_bad_env_values_raise(monkeypatch: pytest.MonkeyPatch, name: str, value: str, match: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=match):
        resolve_config()


def test_blank_env_values_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NETLOG_LOG_LEVEL", "  ")
    assert resolve_config().log_level == "INFO"


def test_configure_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("warning")
    monkeypatch.setenv("NETLOG_LOG_LEVEL", "DEBUG")
    configure_logging()

    assert [c["level"] for c in calls] == [logging.WARNING, logging.DEBUG]
    assert calls[0]["format"] == "%(asctime)s %(levelname)s %(name)s: %(message)s"


def test_configure_logging_from_config(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, object]] = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging(NormalizerConfig(log_level="ERROR"))
    configure_logging()

    assert [c["level"] for c in calls] == [logging.ERROR, logging.INFO]
