"""
Log manager.

Owns the level registry, the global threshold, the display options and the
transport manager. Entries that arrive before every transport is ready are
queued and delivered in arrival order once they are.
"""

import asyncio
import logging
from collections import deque
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Iterable, Mapping, Optional, Set, Union

from .entry import Entry, ShowOptions, utc_now
from .exceptions import TransportSetupError
from .levels import LevelDef, LevelRef, LevelRegistry, create_levels
from .loggers import Logger
from .transports.base import Transport
from .transports.manager import TransportManager

logger = logging.getLogger(__name__)


class ManagerState(Enum):
    """Lifecycle of a LogManager."""

    CONSTRUCTED = "constructed"
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"


class LogManager:
    """Gates and routes log entries to transports.

    Args:
        levels: Preset name, a LevelRegistry, or LevelDef records
        threshold: Global threshold; defaults to the registry's default level
        show: Initial display options
    """

    def __init__(
        self,
        levels: Union[str, LevelRegistry, Iterable[LevelDef]] = "std",
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        if isinstance(levels, LevelRegistry):
            self.levels = levels
        elif isinstance(levels, str):
            self.levels = create_levels(levels)
        else:
            self.levels = LevelRegistry(levels)

        if threshold is None:
            threshold = self.levels.default_level
        self._threshold = self.levels.as_value(threshold)
        self._show = ShowOptions().merged(show)
        self.transports = TransportManager(self)
        self.state = ManagerState.CONSTRUCTED
        self._queue: Deque[Entry] = deque()
        self._root: Optional[Logger] = None
        self._start_time = utc_now()
        self._start_task: Optional[asyncio.Task] = None
        self._late_setups: Set[asyncio.Task] = set()

    def __repr__(self) -> str:
        return (
            f"LogManager(levels={self.levels.name!r}, threshold={self.levels.as_name(self._threshold)}, "
            f"state={self.state.value}, transports={len(self.transports)})"
        )

    async def __aenter__(self) -> "LogManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    # Properties

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @property
    def running(self) -> bool:
        return self.state is ManagerState.RUNNING

    @property
    def queued(self) -> int:
        """Entries waiting for transports to become ready."""
        return len(self._queue)

    @property
    def threshold(self) -> int:
        return self._threshold

    @threshold.setter
    def threshold(self, level: LevelRef) -> None:
        self._threshold = self.levels.as_value(level)
        self.transports.threshold_updated()

    def set_threshold(self, level: LevelRef) -> "LogManager":
        self.threshold = level
        return self

    @property
    def show(self) -> ShowOptions:
        return self._show

    @show.setter
    def show(self, opts: Union[ShowOptions, Mapping[str, Any]]) -> None:
        if isinstance(opts, ShowOptions):
            opts = opts.to_dict()
        self._show = self._show.merged(opts)
        self.transports.show(opts)

    # Loggers

    def get_logger(
        self,
        pkg: Optional[str] = None,
        sid: Optional[str] = None,
        req_id: Optional[str] = None,
    ) -> Logger:
        """Return the root logger (or a child of it), starting the manager if needed."""
        if self._root is None:
            self._root = Logger(self)
        self.transports.ensure_default()
        if self.state is ManagerState.CONSTRUCTED:
            self._auto_start()
        if pkg or sid or req_id:
            return self._root.get_child(pkg=pkg, sid=sid, req_id=req_id)
        return self._root

    def _auto_start(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._start())
            return
        self.state = ManagerState.STARTING
        self._start_task = loop.create_task(self._start())
        self._start_task.add_done_callback(self._on_auto_start_done)

    def _on_auto_start_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Log manager failed to start: {error}")

    # Lifecycle

    async def start(self) -> None:
        """Set up all transports, then deliver queued entries in arrival order.

        Raises:
            TransportSetupError: A transport failed to become ready; the manager
                can be started again once the cause is fixed.
        """
        if self._start_task is not None:
            # Join the start scheduled by get_logger()
            task, self._start_task = self._start_task, None
            await asyncio.shield(task)
            return
        if self.state is ManagerState.STOPPED:
            logger.warning("start() called on a stopped log manager; ignored")
            return
        if self.state is not ManagerState.CONSTRUCTED:
            self.emit(
                Entry(
                    level=self.levels.warn_level,
                    pkg="logflow.manager",
                    message="Log manager already started; start() ignored",
                )
            )
            return
        await self._start()

    async def _start(self) -> None:
        self.state = ManagerState.STARTING
        try:
            await self.transports.start()
        except TransportSetupError:
            self.state = ManagerState.CONSTRUCTED
            raise
        self.state = ManagerState.RUNNING
        self._drain()

    async def stop(self) -> None:
        """Deliver what is queued, stop every transport in parallel and refuse further entries."""
        if self.state is ManagerState.STOPPED:
            return
        if self._start_task is not None and not self._start_task.done():
            try:
                await self._start_task
            except TransportSetupError:
                pass
        while self._late_setups:
            await asyncio.gather(*list(self._late_setups), return_exceptions=True)
        if self._queue:
            if self.state is ManagerState.RUNNING and self.transports.all_ready():
                self._drain()
            elif self.state is ManagerState.RUNNING and self.transports.any_ready():
                logger.warning(f"Delivering {len(self._queue)} queued entries to ready transports only")
                while self._queue:
                    self.transports.emit_ready(self._queue.popleft())
            else:
                logger.warning(f"Discarding {len(self._queue)} queued entries; transports never became ready")
                self._queue.clear()
        await self.transports.stop()
        self.state = ManagerState.STOPPED

    async def close(self) -> None:
        await self.stop()

    async def flush(self) -> None:
        """Deliver queued entries if possible and flush every transport."""
        if self.state is ManagerState.RUNNING and self.transports.all_ready():
            self._drain()
        await self.transports.flush()

    # Transports

    def add_transport(self, transport: Transport) -> Transport:
        """Register a transport; when already running it is set up right away."""
        self.transports.add(transport)
        if self.state is ManagerState.RUNNING and not transport.ready:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                asyncio.run(self._setup_late(transport))
            else:
                task = loop.create_task(self._setup_late(transport))
                self._late_setups.add(task)
                task.add_done_callback(self._late_setups.discard)
                task.add_done_callback(self._on_auto_start_done)
        return transport

    async def _setup_late(self, transport: Transport) -> None:
        try:
            await transport.setup()
        except Exception as e:
            logger.error(f"Transport '{transport}' failed to set up: {e}")
            raise TransportSetupError(str(transport), e) from e
        if self.transports.all_ready():
            self._drain()

    async def remove_transport(self, transport: Transport) -> None:
        await self.transports.remove(transport)
        if self.state is ManagerState.RUNNING and self.transports.all_ready():
            self._drain()

    # Emission

    def emit(self, entry: Entry) -> None:
        """Dispatch an entry, or queue it until all transports are ready."""
        if self.state is ManagerState.STOPPED:
            logger.debug(f"Dropping {entry.level} entry emitted after stop()")
            return
        if not self.transports.meets_any_threshold(self.levels.as_value(entry.level)):
            return
        if self.state is ManagerState.RUNNING and self.transports.all_ready():
            self._drain()
            self.transports.emit(entry)
        else:
            self._queue.append(entry)

    def _drain(self) -> None:
        while self._queue:
            self.transports.emit(self._queue.popleft())

    def meets_threshold(self, level: LevelRef, threshold: Optional[LevelRef] = None) -> bool:
        """Whether any transport would accept the level, optionally also checking a threshold."""
        rank = self.levels.as_value(level)
        if threshold is not None and not self.levels.meets_threshold_value(rank, self.levels.as_value(threshold)):
            return False
        return self.transports.meets_any_threshold(rank)

    def meets_flush_threshold(self, level: LevelRef) -> bool:
        return self.levels.meets_flush_threshold(level)
