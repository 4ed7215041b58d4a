"""Normalizer configuration and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

from .registry import DEFAULT_SCRIPT_SUFFIX, DuplicatePolicy

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    # Directory of parser scripts; None disables script loading.
    parsers_dir: Path | None = None
    script_suffix: str = DEFAULT_SCRIPT_SUFFIX
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.REJECT
    log_level: str = "INFO"
    encoding: str = "utf-8"


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def resolve_config(cfg: NormalizerConfig | None = None) -> NormalizerConfig:
    """Return config with optional env overrides applied."""
    if cfg is None:
        cfg = NormalizerConfig()

    changes: dict[str, object] = {}

    parsers_dir = _env("NETLOG_PARSERS_DIR")
    if parsers_dir is not None:
        changes["parsers_dir"] = Path(parsers_dir).expanduser()

    suffix = _env("NETLOG_SCRIPT_SUFFIX")
    if suffix is not None:
        if not suffix.startswith(".") or len(suffix) < 2:
            raise ValueError("NETLOG_SCRIPT_SUFFIX must look like '.nlp'")
        changes["script_suffix"] = suffix

    policy = _env("NETLOG_DUPLICATE_POLICY")
    if policy is not None:
        try:
            changes["duplicate_policy"] = DuplicatePolicy.parse(policy)
        except ValueError as exc:
            raise ValueError(f"NETLOG_DUPLICATE_POLICY: {exc}") from exc

    level = _env("NETLOG_LOG_LEVEL")
    if level is not None:
        level = level.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"NETLOG_LOG_LEVEL must be one of: {', '.join(_LOG_LEVELS)}")
        changes["log_level"] = level

    if not changes:
        return cfg
    return replace(cfg, **changes)


def configure_logging(level: str | NormalizerConfig | None = None) -> None:
    """Configure a reasonable default logging setup for hosts embedding the normalizer.

    `level` may be a level name or a config; by default the resolved config
    (including `NETLOG_LOG_LEVEL`) decides.
    """
    if level is None:
        level = resolve_config()
    if isinstance(level, NormalizerConfig):
        level = level.log_level
    level_name = level.upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
