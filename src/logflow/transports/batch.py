"""
Batched network delivery.

BatchingTransport buffers formatted records and delivers them in batches: when
the batch size is reached, when an entry meets the flush threshold, on a
periodic timer, and on stop(). At most one transmission is in flight; a batch
that cannot be delivered goes back to the front of the buffer.
"""

import asyncio
import logging
from abc import abstractmethod
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Set

from ..entry import Entry
from ..exceptions import ConflictingOptionsError
from ..levels import LevelRef
from ..resilience import RetryManager, RetryPolicy
from .base import Transport

if TYPE_CHECKING:
    from ..manager import LogManager

logger = logging.getLogger(__name__)


class BatchingTransport(Transport):
    """Base class for transports that deliver batches over the network.

    Args:
        manager: Owning log manager
        batch_size: Buffered records that trigger an immediate flush
        flush_interval: Seconds between timer flushes (0 disables the timer)
        max_buffer: Upper bound on buffered records; the oldest are dropped
        retry_policy: Attempts and backoff for each delivery
        timeout: Request timeout in seconds
    """

    type = "batch"

    def __init__(
        self,
        manager: "LogManager",
        batch_size: int = 100,
        flush_interval: float = 5.0,
        max_buffer: int = 10_000,
        retry_policy: Optional[RetryPolicy] = None,
        timeout: float = 10.0,
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        if max_buffer and max_buffer < batch_size:
            raise ConflictingOptionsError("batch_size", "max_buffer", "max_buffer must be at least batch_size")
        super().__init__(manager, threshold=threshold, show=show)
        self.batch_size = max(1, batch_size)
        self.flush_interval = flush_interval
        self.max_buffer = max_buffer
        self.retry_policy = retry_policy or RetryPolicy(base_delay=1.0)
        self.timeout = timeout
        self.buffer: List[Any] = []
        self.transmitting = False
        self.transmissions = 0
        self.dropped = 0
        self._timer: Optional[asyncio.Task] = None
        self._pending: Set[asyncio.Task] = set()

    @abstractmethod
    def format_record(self, entry: Entry) -> Any:
        """Convert an entry to the record buffered for delivery."""
        pass

    @abstractmethod
    async def _transmit(self, records: List[Any]) -> None:
        """Send one batch; raise on any failure."""
        pass

    async def _close(self) -> None:
        """Release connections after the final flush."""
        pass

    async def setup(self) -> None:
        if self.flush_interval and self.flush_interval > 0 and self._timer is None:
            self._timer = asyncio.get_running_loop().create_task(self._run_timer())
        self._ready = True

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.flush_interval)
            await self.flush()

    def _output(self, entry: Entry) -> None:
        try:
            record = self.format_record(entry)
        except Exception as e:
            logger.error(f"{self}: dropping {entry.level} entry that could not be formatted: {e}")
            return
        self.buffer.append(record)
        self._enforce_bound()
        rank = self._manager.levels.as_value(entry.level)
        if len(self.buffer) >= self.batch_size or self.meets_flush_threshold_value(rank):
            self._schedule_flush()

    def _enforce_bound(self) -> None:
        if self.max_buffer and len(self.buffer) > self.max_buffer:
            excess = len(self.buffer) - self.max_buffer
            del self.buffer[:excess]
            self.dropped += excess
            logger.warning(f"{self}: buffer limit {self.max_buffer} reached, dropped {excess} oldest records")

    def _detach(self) -> Optional[List[Any]]:
        """Take the whole buffer for transmission, or None when there is nothing to do."""
        if not self.buffer or self.transmitting:
            return None
        records, self.buffer = self.buffer, []
        self.transmitting = True
        return records

    async def _send(self, records: List[Any]) -> bool:
        self.transmissions += 1
        try:
            await self._deliver(records)
            return True
        except BaseException as e:
            # Records appended during the attempt stay behind the failed batch
            self.buffer[:0] = records
            self._enforce_bound()
            if not isinstance(e, Exception):
                logger.warning(f"{self}: delivery of {len(records)} records interrupted, returned to buffer")
                raise
            logger.error(f"{self}: delivery of {len(records)} records failed, returned to buffer: {e}")
            return False
        finally:
            self.transmitting = False

    async def _deliver(self, records: List[Any]) -> None:
        retry = RetryManager(self.retry_policy, name=f"{self} delivery")
        await retry.execute_with_retry(self._transmit, records)

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # emit() never blocks; the records wait for the next flush()
            logger.debug(f"{self}: no running event loop, {len(self.buffer)} records stay buffered")
            return
        records = self._detach()
        if records is None:
            return
        task = loop.create_task(self._send(records))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def flush(self) -> bool:
        """Deliver everything buffered. Returns False if the batch went back to the buffer."""
        records = self._detach()
        if records is None:
            return True
        return await self._send(records)

    async def wait_for_pending(self) -> None:
        """Wait for flushes scheduled by emit() to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
        await self.wait_for_pending()
        await self.flush()
        await self._close()

    def clear(self) -> None:
        self.buffer = []
