"""
In-memory buffer transport.

Keeps the most recent entries in a capped FIFO so tests can inspect what the
pipeline produced without a real sink.
"""

import asyncio
import re
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Deque, List, Mapping, Optional, Pattern, Union

from ..entry import TARGET_CONSOLE, Entry
from ..exceptions import BufferAssertionError
from ..levels import LevelRef
from .base import Transport

if TYPE_CHECKING:
    from ..manager import LogManager


@dataclass(frozen=True)
class BufferEntry:
    """A captured entry with its message rendered to plain text."""

    message: str
    timestamp: datetime
    level: str
    data: Any = None


class BufferTransport(Transport):
    """Capped in-memory store of rendered entries.

    Args:
        manager: Owning log manager
        max_entries: Capacity; the oldest entry is evicted once exceeded
        delay_ready: Seconds setup() waits before reporting ready
    """

    type = "buffer"

    def __init__(
        self,
        manager: "LogManager",
        max_entries: int = 1000,
        delay_ready: float = 0.0,
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(manager, threshold=threshold, show=show)
        self.max_entries = max_entries
        self.delay_ready = delay_ready
        self._entries: Deque[BufferEntry] = deque(maxlen=max_entries)

    def __str__(self) -> str:
        return f"Buffer[{len(self._entries)}/{self.max_entries}]"

    async def setup(self) -> None:
        if self.delay_ready and self.delay_ready > 0:
            await asyncio.sleep(self.delay_ready)
        self._ready = True

    def _output(self, entry: Entry) -> None:
        self._entries.append(
            BufferEntry(
                message=entry.render(color=False, target=TARGET_CONSOLE),
                timestamp=entry.timestamp,
                level=entry.level,
                data=entry.data,
            )
        )

    # Queries

    def get_entries(self) -> List[BufferEntry]:
        return list(self._entries)

    def get_entries_by_level(self, level: str) -> List[BufferEntry]:
        return [e for e in self._entries if e.level.lower() == level.lower()]

    def get_last_entry(self) -> Optional[BufferEntry]:
        return self._entries[-1] if self._entries else None

    def get_messages(self) -> List[str]:
        return [e.message for e in self._entries]

    def get_all_text(self) -> str:
        return "\n".join(self.get_messages())

    def contains(self, text: str) -> bool:
        return any(text in e.message for e in self._entries)

    def matches(self, pattern: Union[str, Pattern[str]]) -> bool:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return any(regex.search(e.message) for e in self._entries)

    @property
    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    # Assertions

    def assert_contains(self, text: str) -> None:
        if not self.contains(text):
            raise BufferAssertionError(
                f'Expected log to contain "{text}" but it was not found.', self.get_messages()
            )

    def assert_count(self, expected: int) -> None:
        actual = self.count
        if actual != expected:
            raise BufferAssertionError(
                f"Expected {expected} log entries but found {actual}.", self.get_messages()
            )

    def assert_matches(self, pattern: Union[str, Pattern[str]]) -> None:
        if not self.matches(pattern):
            shown = pattern if isinstance(pattern, str) else pattern.pattern
            raise BufferAssertionError(
                f"Expected log to match pattern /{shown}/ but no match was found.", self.get_messages()
            )
