"""Native log parsers for network devices.

`ScriptedParser` lives in `.scripted`; it is not imported here because it
depends on the scripting package, which itself imports `.base`.
"""

from __future__ import annotations

from .base import DEFAULT_VERSION, LogParser, NativeParser, clean_message, extract_hostname
from .cisco_asa import CiscoASAParser
from .cisco_ios import CiscoIOSParser, map_cisco_severity
from .cisco_nxos import CiscoNXOSParser
from .generic_syslog import GenericSyslogParser, split_priority

__all__ = [
    "DEFAULT_VERSION",
    "CiscoASAParser",
    "CiscoIOSParser",
    "CiscoNXOSParser",
    "GenericSyslogParser",
    "LogParser",
    "NativeParser",
    "clean_message",
    "extract_hostname",
    "map_cisco_severity",
    "split_priority",
]
