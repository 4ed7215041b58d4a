"""Parser selection: a named registry for scripted parsers and a priority factory
for native ones.

Both iterate in registration order. Re-registering a name (or device type) is
governed by `DuplicatePolicy`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum, IntEnum
from functools import partial
from pathlib import Path

from .errors import DuplicateParserError, ParserNotFoundError, ScriptLoadError
from .formats import (
    CiscoASAParser,
    CiscoIOSParser,
    CiscoNXOSParser,
    GenericSyslogParser,
    LogParser,
)
from .formats.scripted import ScriptedParser
from .models import DeviceType
from .timestamps import DEFAULT_TIMESTAMP_PARSER, TimestampParser

logger = logging.getLogger(__name__)

DEFAULT_SCRIPT_SUFFIX = ".nlp"

ParserCreator = Callable[[], LogParser]


class DuplicatePolicy(str, Enum):
    REJECT = "reject"
    REPLACE = "replace"

    @classmethod
    def parse(cls, value: str) -> DuplicatePolicy:
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            allowed = ", ".join(p.value for p in cls)
            raise ValueError(f"Duplicate policy must be one of: {allowed}") from exc


class PriorityTier(IntEnum):
    GENERIC_SYSLOG = 1
    OTHER = 2
    CISCO = 3


_CISCO_FAMILY = frozenset(
    {
        DeviceType.CISCO_IOS,
        DeviceType.CISCO_IOS_XE,
        DeviceType.CISCO_NXOS,
        DeviceType.CISCO_ASA,
    }
)


def tier_for(device_type: DeviceType) -> PriorityTier:
    if device_type in _CISCO_FAMILY:
        return PriorityTier.CISCO
    if device_type is DeviceType.GENERIC_SYSLOG:
        return PriorityTier.GENERIC_SYSLOG
    return PriorityTier.OTHER


@dataclass(frozen=True, slots=True)
class ParserInfo:
    name: str
    version: str
    device_type: DeviceType

    @classmethod
    def of(cls, parser: LogParser) -> ParserInfo:
        return cls(
            name=parser.parser_name(),
            version=parser.version(),
            device_type=parser.device_type(),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "device_type": self.device_type.label,
        }


class ScriptRegistry:
    """Named parsers (usually scripted), consulted in registration order."""

    def __init__(self, *, on_duplicate: DuplicatePolicy = DuplicatePolicy.REJECT) -> None:
        self.on_duplicate = on_duplicate
        self._parsers: dict[str, LogParser] = {}

    def register(self, parser: LogParser, name: str | None = None) -> str:
        """Register `parser` under `name` (default: its parser name) and return the name."""
        key = name or parser.parser_name()
        if key in self._parsers:
            if self.on_duplicate is DuplicatePolicy.REJECT:
                raise DuplicateParserError(f"Parser '{key}' is already registered")
            # REPLACE moves the entry to the end of the iteration order.
            del self._parsers[key]
            logger.info("Replacing registered parser %s", key)
        self._parsers[key] = parser
        return key

    def register_script(self, path: str | Path, name: str | None = None, **kwargs) -> str:
        parser = ScriptedParser.from_file(path, **kwargs)
        if not parser.is_valid():
            raise ScriptLoadError(f"{path}: {parser.last_error}")
        return self.register(parser, name)

    def load_directory(self, directory: str | Path, suffix: str = DEFAULT_SCRIPT_SUFFIX, **kwargs) -> int:
        """Register every `*suffix` script in `directory` (sorted by file name).

        Scripts that fail to load or collide with an existing name are logged and
        skipped. Returns the number of parsers registered.
        """
        root = Path(directory)
        if not root.is_dir():
            logger.warning("Parser directory not found: %s", root)
            return 0

        loaded = 0
        for path in sorted(root.iterdir()):
            if not path.is_file() or path.suffix != suffix:
                continue
            try:
                self.register_script(path, **kwargs)
            except (ScriptLoadError, DuplicateParserError) as exc:
                logger.warning("Skipping parser script: %s", exc)
                continue
            loaded += 1

        logger.info("Loaded %d parser script(s) from %s", loaded, root)
        return loaded

    def find_parser_for_message(self, raw: str) -> LogParser | None:
        for parser in self._parsers.values():
            if parser.can_parse(raw):
                return parser
        return None

    def get(self, name: str) -> LogParser | None:
        return self._parsers.get(name)

    def names(self) -> list[str]:
        return list(self._parsers)

    def parsers(self) -> list[LogParser]:
        return list(self._parsers.values())

    def parser_info(self, name: str) -> ParserInfo:
        parser = self._parsers.get(name)
        if parser is None:
            raise ParserNotFoundError(f"No parser registered as '{name}'")
        return ParserInfo.of(parser)

    def unregister(self, name: str) -> bool:
        return self._parsers.pop(name, None) is not None

    def clear(self) -> None:
        self._parsers.clear()

    def __len__(self) -> int:
        return len(self._parsers)

    def __contains__(self, name: object) -> bool:
        return name in self._parsers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._parsers))


class ParserFactory:
    """Native parser creators keyed by device type.

    `auto_detect` builds every registered parser, keeps those whose `can_parse`
    accepts the line and returns the one in the highest `PriorityTier`; within a
    tier the earliest registration wins.
    """

    def __init__(self, *, on_duplicate: DuplicatePolicy = DuplicatePolicy.REJECT) -> None:
        self.on_duplicate = on_duplicate
        self._creators: dict[DeviceType, ParserCreator] = {}

    @classmethod
    def with_builtins(
        cls,
        *,
        on_duplicate: DuplicatePolicy = DuplicatePolicy.REJECT,
        timestamps: TimestampParser = DEFAULT_TIMESTAMP_PARSER,
    ) -> ParserFactory:
        factory = cls(on_duplicate=on_duplicate)
        # NX-OS and ASA go first: their lines also carry IOS-style message ids.
        factory.register(DeviceType.CISCO_NXOS, partial(CiscoNXOSParser, timestamps=timestamps))
        factory.register(DeviceType.CISCO_ASA, partial(CiscoASAParser, timestamps=timestamps))
        factory.register(DeviceType.CISCO_IOS, partial(CiscoIOSParser, timestamps=timestamps))
        factory.register(
            DeviceType.CISCO_IOS_XE,
            partial(
                CiscoIOSParser,
                device=DeviceType.CISCO_IOS_XE,
                name="Cisco IOS-XE Parser",
                timestamps=timestamps,
            ),
        )
        factory.register(DeviceType.GENERIC_SYSLOG, partial(GenericSyslogParser, timestamps=timestamps))
        return factory

    def register(self, device_type: DeviceType, creator: ParserCreator) -> None:
        if device_type in self._creators:
            if self.on_duplicate is DuplicatePolicy.REJECT:
                raise DuplicateParserError(f"A parser for {device_type.label} is already registered")
            del self._creators[device_type]
            logger.info("Replacing parser creator for %s", device_type.label)
        self._creators[device_type] = creator

    def unregister(self, device_type: DeviceType) -> bool:
        return self._creators.pop(device_type, None) is not None

    def create(self, device_type: DeviceType) -> LogParser:
        creator = self._creators.get(device_type)
        if creator is None:
            raise ParserNotFoundError(f"No parser registered for {device_type.label}")
        return creator()

    def auto_detect(self, raw: str) -> LogParser | None:
        best: LogParser | None = None
        best_tier: PriorityTier | None = None
        for device_type, creator in self._creators.items():
            parser = creator()
            if not parser.can_parse(raw):
                continue
            tier = tier_for(device_type)
            if best_tier is None or tier > best_tier:
                best, best_tier = parser, tier
        return best

    def device_types(self) -> list[DeviceType]:
        return list(self._creators)

    def is_supported(self, device_type: DeviceType) -> bool:
        return device_type in self._creators

    def parser_info(self) -> list[ParserInfo]:
        return [ParserInfo.of(creator()) for creator in self._creators.values()]

    def __len__(self) -> int:
        return len(self._creators)

    def __contains__(self, device_type: object) -> bool:
        return device_type in self._creators
