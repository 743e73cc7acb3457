"""
Log entries and display options.

An Entry is the immutable record passed from a logger to the manager and on to
every transport. ShowOptions controls which of its fields a transport renders.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)

TARGET_CONSOLE = "console"
TARGET_JSON = "json"
TARGET_JSON_ARRAY = "json-array"

TIMESTAMP_MODES = ("utc", "local", "elapsed")


@runtime_checkable
class Renderable(Protocol):
    """A message payload that knows how to render itself for an output target."""

    def format(self, *, color: bool, target: str) -> str: ...


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Entry:
    """A single log record."""

    level: str
    timestamp: datetime = field(default_factory=utc_now)
    message: Union[str, Renderable, None] = None
    data: Any = None
    pkg: Optional[str] = None
    sid: Optional[str] = None
    req_id: Optional[str] = None
    elapsed_ms: Optional[float] = None

    def render(self, color: bool = False, target: str = TARGET_CONSOLE) -> str:
        """Render the message payload, degrading to str() if formatting fails."""
        message = self.message
        if message is None:
            return ""
        if isinstance(message, str):
            return message
        try:
            return message.format(color=color, target=target)
        except Exception as e:
            logger.debug(f"Message formatting failed, falling back to str(): {e}")
            try:
                return str(message)
            except Exception:
                return repr(message)


_LEVEL_MODES = ("icon",)


@dataclass(frozen=True)
class ShowOptions:
    """Which entry fields transports display, and how.

    Attributes:
        level: True pads the name to the widest visible level, an int pads
            (negative right-aligns) or truncates, "icon" shows the level glyph
        timestamp: None, "utc", "local" or "elapsed"
        pkg: Show the package chain
        sid: Show the session id
        req_id: Show the request id
        elapsed: Show the entry's duration when it has one
        data: Show structured data
        color: Allow ANSI colour
        pkg_sep: Separator used to join package chains
    """

    level: Union[bool, int, str] = True
    timestamp: Optional[str] = None
    pkg: bool = False
    sid: bool = False
    req_id: bool = False
    elapsed: bool = True
    data: bool = True
    color: bool = True
    pkg_sep: str = "."

    def merged(self, opts: Optional[Mapping[str, Any]] = None, **kwargs) -> "ShowOptions":
        """Return a copy with valid options applied; unknown keys and bad values are ignored."""
        updates: Dict[str, Any] = {}
        names = {f.name for f in fields(self)}
        for key, value in {**dict(opts or {}), **kwargs}.items():
            if key not in names:
                logger.debug(f"Ignoring unknown show option '{key}'")
                continue
            if _valid_option(key, value):
                updates[key] = value
            else:
                logger.debug(f"Ignoring invalid value {value!r} for show option '{key}'")
        return replace(self, **updates) if updates else self

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _valid_option(key: str, value: Any) -> bool:
    if key == "level":
        return isinstance(value, (bool, int)) or value in _LEVEL_MODES
    if key == "timestamp":
        return value is None or value in TIMESTAMP_MODES
    if key == "pkg_sep":
        return isinstance(value, str)
    return isinstance(value, bool)
