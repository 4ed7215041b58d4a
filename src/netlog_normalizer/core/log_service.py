"""Line and file normalization built on the parser registries.

This module is the main integration point: it picks a parser for each raw line
and turns log files (plain or gzip) into LogRecords.
"""

from __future__ import annotations

import gzip
import logging
from collections.abc import AsyncIterator, Iterable, Iterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

from .config import NormalizerConfig, resolve_config
from .formats import LogParser
from .models import LogRecord, Severity, parse_severity
from .registry import ParserFactory, ScriptRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str, decode_errors: str):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors=decode_errors)
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors=decode_errors) as f:
            yield f


async def _enumerate_async(iterable, start: int = 0):
    """Async enumerate helper for async iterators."""
    index = start
    async for item in iterable:
        yield index, item
        index += 1


def _resolve_min_severity(value: Severity | str | int | None) -> Severity | None:
    if value is None or isinstance(value, Severity):
        return value
    return parse_severity(value)


@dataclass(slots=True)
class Normalizer:
    """Route raw lines to scripted parsers first, then to the native factory.

    With `keep_unparsed` a line no parser accepts still yields a raw INFO
    record; otherwise it is dropped.
    """

    factory: ParserFactory = field(default_factory=ParserFactory.with_builtins)
    scripts: ScriptRegistry = field(default_factory=ScriptRegistry)
    keep_unparsed: bool = True
    encoding: str = "utf-8"

    @classmethod
    def from_config(cls, cfg: NormalizerConfig | None = None, **kwargs) -> Normalizer:
        """Build the builtin factory and load `cfg.parsers_dir` (env overrides applied).

        Keyword arguments are passed to the constructor and win over `cfg`.
        """
        cfg = resolve_config(cfg)
        factory = ParserFactory.with_builtins(on_duplicate=cfg.duplicate_policy)
        scripts = ScriptRegistry(on_duplicate=cfg.duplicate_policy)
        if cfg.parsers_dir is not None:
            scripts.load_directory(cfg.parsers_dir, cfg.script_suffix)
        return cls(factory=factory, scripts=scripts, **{"encoding": cfg.encoding, **kwargs})

    def _candidates(self, raw: str) -> Iterator[LogParser]:
        scripted = self.scripts.find_parser_for_message(raw)
        if scripted is not None:
            yield scripted
        native = self.factory.auto_detect(raw)
        if native is not None:
            yield native

    def detect(self, raw: str) -> LogParser | None:
        """The parser `normalize` would try first, or None."""
        return next(self._candidates(raw), None)

    def normalize(self, raw: str) -> LogRecord | None:
        if not raw or not raw.strip():
            return None
        for parser in self._candidates(raw):
            record = parser.parse(raw)
            if record is not None:
                return record
            logger.debug("%s accepted but did not parse: %r", parser.parser_name(), raw)

        if not self.keep_unparsed:
            return None
        record = LogRecord.from_raw(raw)
        record.add_metadata("parser_note", "no parser matched")
        return record

    def normalize_lines(self, lines: Iterable[str]) -> list[LogRecord]:
        out: list[LogRecord] = []
        for line in lines:
            record = self.normalize(line.rstrip("\r\n"))
            if record is not None:
                out.append(record)
        return out

    async def iter_file_records(
        self,
        log_path: str | Path,
        *,
        encoding: str | None = None,
        decode_errors: str = "replace",
        min_severity: Severity | str | int | None = None,
        contains: str | None = None,
    ) -> AsyncIterator[LogRecord]:
        """Yield a record per non-blank line.

        `min_severity` keeps records at least that severe (EMERGENCY is the most
        severe); `contains` is a plain substring filter on the raw line.
        """
        path = Path(log_path)
        if not path.is_file():
            raise FileNotFoundError(f"Log file not found: {path}")
        threshold = _resolve_min_severity(min_severity)

        async with _open_text(path, encoding=encoding or self.encoding, decode_errors=decode_errors) as f:
            async for line_no, line in _enumerate_async(f, start=1):
                line = line.rstrip("\r\n")
                if not line.strip():
                    continue
                if contains is not None and contains not in line:
                    continue

                record = self.normalize(line)
                if record is None:
                    continue
                if threshold is not None and record.severity > threshold:
                    continue
                record.add_metadata("line_number", str(line_no))
                yield record

    async def get_records(self, log_path: str | Path, **iter_kwargs) -> list[LogRecord]:
        """Collect iter_file_records into a list."""
        return [record async for record in self.iter_file_records(log_path, **iter_kwargs)]
