"""
Minimal message construction.

A MessageHandle is what ``logger.<level>`` returns. It collects text parts and
structured data, then builds an Entry and hands it to its logger on emit().
"""

import logging
from typing import TYPE_CHECKING, Any, List, Optional, Tuple, Union

from rich.color import ColorSystem
from rich.errors import StyleSyntaxError
from rich.style import Style

from .entry import TARGET_CONSOLE, Entry

if TYPE_CHECKING:
    from .loggers import Logger

logger = logging.getLogger(__name__)


class Message:
    """Text parts with optional rich styles, rendered on demand."""

    def __init__(self, parts: Optional[List[Tuple[str, Optional[str]]]] = None):
        self.parts: List[Tuple[str, Optional[str]]] = list(parts or [])

    def format(self, *, color: bool, target: str) -> str:
        styled = color and target == TARGET_CONSOLE
        out = []
        for text, style in self.parts:
            if styled and style:
                try:
                    text = Style.parse(style).render(text, color_system=ColorSystem.STANDARD)
                except StyleSyntaxError:
                    logger.debug(f"Ignoring unknown style '{style}'")
            out.append(text)
        return " ".join(out)

    def __str__(self) -> str:
        return self.format(color=False, target=TARGET_CONSOLE)

    def __repr__(self) -> str:
        return f"Message({str(self)!r})"


class MessageHandle:
    """Collects a message for one level and emits it through its logger."""

    def __init__(self, emitter: "Logger", level: str, enabled: bool):
        self._emitter = emitter
        self.level = level
        self.enabled = enabled
        self._parts: List[Tuple[str, Optional[str]]] = []
        self._data: Any = None
        self._elapsed_ms: Optional[float] = None

    def text(self, *parts: Any) -> "MessageHandle":
        for part in parts:
            self._parts.append((str(part), None))
        return self

    def styled(self, text: Any, style: str) -> "MessageHandle":
        self._parts.append((str(text), style))
        return self

    def data(self, data: Any) -> "MessageHandle":
        """Attach structured data; dictionaries merge into earlier ones."""
        if isinstance(data, dict) and isinstance(self._data, dict):
            self._data = {**self._data, **data}
        else:
            self._data = data
        return self

    def ewt(self, mark: Union[str, float, int], keep: bool = False) -> Optional[Entry]:
        """Emit with the elapsed time since a logger mark, or an explicit duration in ms."""
        if isinstance(mark, str):
            self._elapsed_ms = self._emitter.demark(mark, keep)
        else:
            self._elapsed_ms = float(mark)
        return self.emit()

    def emit(self, explicit: Any = None) -> Optional[Entry]:
        """Build the entry and dispatch it. Returns None when no transport wants this level."""
        if not self.enabled:
            return None
        if explicit is not None:
            self.text(explicit)
        parts = list(self._parts)
        prefix = self._emitter.indent_prefix
        if prefix:
            parts.insert(0, (prefix, None))
        entry = self._emitter.create_entry(
            self.level,
            Message(parts),
            data=self._data,
            elapsed_ms=self._elapsed_ms,
        )
        return self._emitter.emit(entry)

    def __call__(self, message: Any = None, data: Any = None) -> Optional[Entry]:
        """Shorthand for ``.data(data).emit(message)``."""
        if data is not None:
            self.data(data)
        return self.emit(message)
