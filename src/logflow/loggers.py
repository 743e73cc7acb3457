"""
Logger hierarchy.

A Logger carries inheritable context (package chain, session and request ids,
indentation) and turns level calls into entries for its LogManager. Children
copy that context by value, so parent and child never see each other's changes.
"""

import itertools
import time
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union
from uuid import uuid4

from .entry import Entry, utc_now
from .exceptions import LogflowError
from .levels import LevelRef
from .message import MessageHandle

if TYPE_CHECKING:
    from .manager import LogManager

_mark_ids = itertools.count(1)


class Logger:
    """Emitter of log entries with inheritable context.

    Level names of the manager's registry are available as attributes, each
    returning a MessageHandle::

        log.info.text("connected to").styled(host, "bold").emit()
    """

    def __init__(
        self,
        manager: "LogManager",
        pkg: Optional[str] = None,
        sid: Optional[str] = None,
        req_id: Optional[str] = None,
    ):
        self._manager = manager
        self.pkgs: List[str] = [pkg] if pkg else []
        self.sid = sid
        self.req_id = req_id
        self.indent_stack: List[str] = []
        self._threshold: Optional[int] = None
        self._marks: Dict[str, float] = {}

    def __getattr__(self, name: str) -> MessageHandle:
        if name.startswith("_"):
            raise AttributeError(name)
        levels = self._manager.levels
        if levels.is_level(name):
            return self.handle(name)
        raise AttributeError(f"'{type(self).__name__}' has no attribute or log level '{name}'")

    def __repr__(self) -> str:
        return f"Logger(pkg={self.pkg!r}, sid={self.sid!r}, req_id={self.req_id!r})"

    @property
    def manager(self) -> "LogManager":
        return self._manager

    @property
    def pkg(self) -> Optional[str]:
        """Package chain joined with the manager's separator."""
        if not self.pkgs:
            return None
        return self._manager.show.pkg_sep.join(self.pkgs)

    def get_child(
        self,
        pkg: Optional[str] = None,
        sid: Optional[str] = None,
        req_id: Optional[str] = None,
    ) -> "Logger":
        """Create a child that inherits a copy of this logger's context."""
        child = type(self)(self._manager, sid=sid or self.sid, req_id=req_id or self.req_id)
        child.pkgs = list(self.pkgs)
        if pkg:
            child.pkgs.append(pkg)
        child.indent_stack = list(self.indent_stack)
        child._threshold = self._threshold
        return child

    def with_request(self, req_id: Optional[str] = None) -> "Logger":
        """Child logger tagged with a request id, generated when not given."""
        return self.get_child(req_id=req_id or str(uuid4())[:8])

    # Thresholds

    @property
    def threshold(self) -> int:
        """This logger's own threshold, or the manager's when none is set."""
        if self._threshold is not None:
            return self._threshold
        return self._manager.threshold

    @threshold.setter
    def threshold(self, level: LevelRef) -> None:
        self.set_threshold(level)

    def set_threshold(self, level: LevelRef) -> "Logger":
        """Restrict this logger further than the transports already do."""
        levels = self._manager.levels
        self._threshold = levels.as_value(level)
        manager_threshold = self._manager.threshold
        if not levels.meets_threshold_value(self._threshold, manager_threshold):
            self._manager.emit(
                Entry(
                    level=levels.warn_level,
                    message=(
                        f"Logger threshold {levels.as_name(self._threshold)} is less restrictive than "
                        f"manager threshold {levels.as_name(manager_threshold)}; transport thresholds still apply"
                    ),
                    pkg=self.pkg,
                    sid=self.sid,
                    req_id=self.req_id,
                )
            )
        return self

    def clear_threshold(self) -> "Logger":
        self._threshold = None
        return self

    def meets_threshold(self, level: LevelRef) -> bool:
        """Whether an entry at this level would reach at least one transport."""
        levels = self._manager.levels
        rank = levels.as_value(level)
        if self._threshold is not None and not levels.meets_threshold_value(rank, self._threshold):
            return False
        return self._manager.transports.meets_any_threshold(rank)

    # Indentation

    @property
    def indent_prefix(self) -> str:
        return " ".join(self.indent_stack)

    def indent(self, n: Union[str, int, Iterable[str], None] = None) -> "Logger":
        """Push indentation: a string, a number of spaces, several strings, or one space."""
        if n is None:
            self.indent_stack.append(" ")
        elif isinstance(n, str):
            self.indent_stack.append(n)
        elif isinstance(n, int):
            self.indent_stack.append(" " * n)
        else:
            self.indent_stack.extend(str(part) for part in n)
        return self

    def outdent(self, n: int = 1) -> "Logger":
        for _ in range(min(n, len(self.indent_stack))):
            self.indent_stack.pop()
        return self

    def nodent(self) -> "Logger":
        self.indent_stack = []
        return self

    @contextmanager
    def indented(self, n: Union[str, int, Iterable[str], None] = None):
        """Indent for the duration of a with-block."""
        depth = len(self.indent_stack)
        self.indent(n)
        try:
            yield self
        finally:
            del self.indent_stack[depth:]

    # Performance marks

    def mark(self) -> str:
        """Record a high resolution mark and return its name."""
        name = f"mark.{next(_mark_ids)}"
        self._marks[name] = time.perf_counter()
        return name

    def demark(self, name: str, keep: bool = False) -> float:
        """Milliseconds elapsed since a mark. The mark is removed unless keep is set."""
        if name not in self._marks:
            raise LogflowError(f"No mark set for {name}")
        started = self._marks[name] if keep else self._marks.pop(name)
        return (time.perf_counter() - started) * 1000

    # Emission

    def handle(self, level: LevelRef) -> MessageHandle:
        """Message handle for a level; disabled when nothing would consume it."""
        name = self._manager.levels.as_name(level)
        return MessageHandle(self, name, self.meets_threshold(name))

    def log(self, level: LevelRef, message: Any = None, data: Any = None) -> Optional[Entry]:
        """Emit a message in one call."""
        handle = self.handle(level)
        if data is not None:
            handle.data(data)
        return handle.emit(message)

    def create_entry(
        self,
        level: LevelRef,
        message: Any,
        data: Any = None,
        elapsed_ms: Optional[float] = None,
    ) -> Entry:
        return Entry(
            level=self._manager.levels.as_name(level),
            timestamp=utc_now(),
            message=message,
            data=data,
            pkg=self.pkg,
            sid=self.sid,
            req_id=self.req_id,
            elapsed_ms=elapsed_ms,
        )

    def emit(self, entry: Entry) -> Optional[Entry]:
        """Forward an entry to the manager, filling in this logger's context.

        String messages are indented; missing package, session and request ids
        are taken from the logger. Returns None when this logger's own threshold
        rejects the entry.
        """
        levels = self._manager.levels
        if self._threshold is not None and not levels.meets_threshold(entry.level, self._threshold):
            return None
        updates: Dict[str, Any] = {}
        if isinstance(entry.message, str) and self.indent_stack:
            updates["message"] = f"{self.indent_prefix} {entry.message}"
        if entry.pkg is None and self.pkgs:
            updates["pkg"] = self.pkg
        if entry.sid is None and self.sid:
            updates["sid"] = self.sid
        if entry.req_id is None and self.req_id:
            updates["req_id"] = self.req_id
        if updates:
            entry = replace(entry, **updates)
        self._manager.emit(entry)
        return entry
