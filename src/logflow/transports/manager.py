"""
Transport manager.

Owns the list of transports, fans entries out to them and runs their
lifecycle operations concurrently.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any, List, Mapping, Optional

from ..entry import Entry
from ..exceptions import TransportSetupError
from ..levels import LevelRef
from .base import Transport
from .console import ConsoleTransport

if TYPE_CHECKING:
    from ..manager import LogManager

logger = logging.getLogger(__name__)


class TransportManager:
    """Registry of live transports."""

    def __init__(self, manager: "LogManager"):
        self._manager = manager
        self.transports: List[Transport] = []

    def __len__(self) -> int:
        return len(self.transports)

    def __iter__(self):
        return iter(list(self.transports))

    def add(self, transport: Transport) -> Transport:
        """Register a transport ahead of the existing ones."""
        self.transports.insert(0, transport)
        return transport

    async def remove(self, transport: Transport) -> None:
        """Destroy a transport and drop it from the live set."""
        name = str(transport)
        if not any(t is transport for t in self.transports):
            logger.debug(f"Transport '{name}' is not registered")
            return
        await transport.destroy()
        self.transports = [t for t in self.transports if t is not transport and t.alive]
        self.emit(
            Entry(
                level=self._manager.levels.default_level,
                pkg="logflow.transport.remove",
                message=f"Removed transport '{name}'",
            )
        )

    def get(self, type_name: str) -> Optional[Transport]:
        """First registered transport of the given type."""
        for transport in self.transports:
            if transport.type == type_name:
                return transport
        return None

    def emit(self, entry: Entry) -> None:
        """Offer an entry to every transport; each applies its own threshold."""
        for transport in list(self.transports):
            transport.emit(entry)

    def meets_any_threshold(self, rank: int) -> bool:
        if not self.transports:
            return self._manager.levels.meets_threshold_value(rank, self._manager.threshold)
        return any(t.alive and t.meets_threshold_value(rank) for t in self.transports)

    def all_ready(self) -> bool:
        return all(t.ready for t in self.transports)

    def any_ready(self) -> bool:
        return any(t.ready for t in self.transports)

    def emit_ready(self, entry: Entry) -> None:
        """Offer an entry only to transports that finished setup."""
        for transport in list(self.transports):
            if transport.ready:
                transport.emit(entry)

    def ensure_default(self) -> None:
        """Install a console transport when none is registered."""
        if not self.transports:
            self.add(ConsoleTransport(self._manager))

    async def start(self) -> None:
        """Set up every transport that is not ready yet, concurrently."""
        self.ensure_default()
        pending = [t for t in self.transports if not t.ready]
        results = await asyncio.gather(*(t.setup() for t in pending), return_exceptions=True)
        for transport, result in zip(pending, results):
            if isinstance(result, TransportSetupError):
                raise result
            if isinstance(result, BaseException):
                raise TransportSetupError(str(transport), result) from result

    async def stop(self) -> None:
        """Stop all transports in parallel; one failure does not prevent the others."""
        transports = list(self.transports)
        results = await asyncio.gather(*(t.stop() for t in transports), return_exceptions=True)
        for transport, result in zip(transports, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to stop transport '{transport}': {result}")

    async def flush(self) -> None:
        transports = list(self.transports)
        results = await asyncio.gather(*(t.flush() for t in transports), return_exceptions=True)
        for transport, result in zip(transports, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to flush transport '{transport}': {result}")

    def set_threshold(self, level: LevelRef) -> None:
        """Give every registered transport its own threshold."""
        for transport in self.transports:
            transport.set_threshold(level)

    def threshold_updated(self) -> None:
        for transport in self.transports:
            transport.threshold_updated()

    def show(self, opts: Mapping[str, Any]) -> None:
        """Push display options to transports without their own override."""
        for transport in self.transports:
            transport.show(opts, inherited=True)
