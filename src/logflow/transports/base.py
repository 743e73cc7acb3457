"""
Transport contract.

Every sink derives from Transport. The base class owns the lifecycle flags,
the threshold (own override or the manager's) and the display options (own
override or whatever the manager pushes).
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Optional

from ..entry import Entry, ShowOptions
from ..levels import LevelRef
from .formatters import format_duration

if TYPE_CHECKING:
    from ..manager import LogManager


class Transport(ABC):
    """Base class for all transports.

    Subclasses implement ``_output`` and, when they need to acquire resources
    or deliver asynchronously, ``setup``, ``flush`` and ``stop``.
    """

    type = "basic"

    def __init__(
        self,
        manager: "LogManager",
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        self._manager = manager
        self._ready = False
        self._alive = True
        self._threshold: Optional[int] = None
        if threshold is not None:
            self._threshold = manager.levels.as_value(threshold)
        self._own_show = show is not None
        self._show: ShowOptions = manager.show.merged(show) if show is not None else manager.show

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type!r}, ready={self._ready}, alive={self._alive})"

    @property
    def name(self) -> str:
        return self.type

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def alive(self) -> bool:
        return self._alive

    @property
    def manager(self) -> "LogManager":
        return self._manager

    # Threshold

    @property
    def threshold(self) -> int:
        """Own threshold override, else the manager's current threshold."""
        if self._threshold is not None:
            return self._threshold
        return self._manager.threshold

    @property
    def has_own_threshold(self) -> bool:
        return self._threshold is not None

    def set_threshold(self, level: LevelRef) -> "Transport":
        self._threshold = self._manager.levels.as_value(level)
        self.threshold_updated()
        return self

    def clear_threshold(self) -> "Transport":
        self._threshold = None
        self.threshold_updated()
        return self

    def threshold_updated(self) -> None:
        """Called whenever the effective threshold may have changed."""
        pass

    def meets_threshold_value(self, rank: int) -> bool:
        return self._manager.levels.meets_threshold_value(rank, self.threshold)

    def meets_threshold(self, entry: Entry) -> bool:
        return self.meets_threshold_value(self._manager.levels.as_value(entry.level))

    def meets_flush_threshold_value(self, rank: int) -> bool:
        levels = self._manager.levels
        return levels.meets_threshold_value(rank, levels.flush_rank)

    # Display options

    @property
    def show_options(self) -> ShowOptions:
        return self._show

    def show(self, opts: Mapping[str, Any], inherited: bool = False) -> "Transport":
        """Merge display options.

        Options pushed by the manager (``inherited``) are ignored once the
        transport holds its own override; direct calls create one.
        """
        if inherited and self._own_show:
            return self
        self._show = self._show.merged(opts)
        if not inherited:
            self._own_show = True
        return self

    def date_to_string(self, ts: Optional[datetime], mode: Optional[str]) -> Optional[str]:
        """Render a timestamp as ``utc``, ``local`` or ``elapsed`` since manager start."""
        if not isinstance(ts, datetime) or mode is None:
            return None
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        if mode == "utc":
            return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        if mode == "local":
            return ts.astimezone().isoformat(timespec="milliseconds")
        if mode == "elapsed":
            delta = ts - self._manager.start_time
            return format_duration(max(delta.total_seconds() * 1000, 0.0))
        return None

    # Lifecycle

    async def setup(self) -> None:
        """Acquire resources; the default transport is ready immediately."""
        self._ready = True

    def emit(self, entry: Entry) -> None:
        """Output an entry if this transport is alive and the level passes its threshold."""
        if not self._alive or not self.meets_threshold(entry):
            return
        self._output(entry)

    @abstractmethod
    def _output(self, entry: Entry) -> None:
        """Write or buffer one entry that passed the threshold."""
        pass

    async def flush(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def destroy(self) -> None:
        """Stop accepting entries, then release resources."""
        self._alive = False
        await self.stop()

    def match(self, other: "Transport") -> bool:
        return self.type == other.type

    def clear(self) -> None:
        """Discard any locally held state."""
        pass
