"""Exception types raised by the normalization engine."""

from __future__ import annotations


class NetlogError(Exception):
    """Base class for all errors raised by netlog_normalizer."""


class InvalidSeverityError(NetlogError, ValueError):
    """Raised when a severity name or number is not one of the 8 syslog levels."""


class InvalidDeviceTypeError(NetlogError, ValueError):
    """Raised when a device type string is not recognized."""


class InvalidDeviceVendorError(NetlogError, ValueError):
    """Raised when a device vendor string is not recognized."""


class RecordDecodeError(NetlogError, ValueError):
    """Raised when a serialized record is structurally invalid."""


class ScriptLoadError(NetlogError):
    """Raised when a parser script cannot be loaded into a registry."""


class DuplicateParserError(NetlogError):
    """Raised when a parser name or device type is already registered."""


class ParserNotFoundError(NetlogError, LookupError):
    """Raised when a named parser or device type has no registration."""


class ScriptError(NetlogError):
    """Raised by the Lua runtime wrapper when a chunk or call fails."""
