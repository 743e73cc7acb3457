"""
File transport.

Console formatting written to a file through a size-rotating handler. Lines
are held in memory and written in bulk.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Union

from ..entry import Entry
from ..exceptions import InvalidConfigurationError, TransportSetupError
from ..levels import LevelRef
from .console import ConsoleTransport
from .formatters import FORMAT_TEXT

if TYPE_CHECKING:
    from ..manager import LogManager

logger = logging.getLogger(__name__)

BUFSIZE = 4096
FILE_MODES = ("a", "w", "x")


class FileTransport(ConsoleTransport):
    """Buffered file writer with optional size based rotation.

    Args:
        manager: Owning log manager
        path: Log file path; parent directories are created on setup
        mode: "a" appends, "w" truncates, "x" fails if the file exists
        buffer_size: Bytes held in memory before writing
        max_bytes: Rotate once the file would exceed this size (0 disables)
        backup_count: Rotated files to keep
    """

    type = "file"

    def __init__(
        self,
        manager: "LogManager",
        path: Union[str, Path],
        mode: str = "a",
        buffer_size: int = BUFSIZE,
        max_bytes: int = 0,
        backup_count: int = 0,
        format: str = FORMAT_TEXT,
        color: bool = False,
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        if mode not in FILE_MODES:
            raise InvalidConfigurationError("mode", mode, " | ".join(FILE_MODES))
        super().__init__(manager, format=format, color=color, threshold=threshold, show=show)
        self.path = Path(path)
        self.mode = mode
        self.buffer_size = buffer_size
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self._handler: Optional[logging.handlers.RotatingFileHandler] = None
        self._lines: List[str] = []
        self._pending_bytes = 0

    def __str__(self) -> str:
        return f"File[{self.path}]"

    @property
    def pending(self) -> List[str]:
        return list(self._lines)

    async def setup(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.mode == "x" and self.path.exists():
                raise FileExistsError(f"Log file already exists: {self.path}")
            if self.mode == "w":
                # The rotating handler always appends
                self.path.write_text("", encoding="utf-8")
            handler = logging.handlers.RotatingFileHandler(
                self.path,
                mode="a",
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"Failed to open log file {self.path}: {e}")
            raise TransportSetupError(str(self), e) from e
        handler.setFormatter(logging.Formatter("%(message)s"))
        self._handler = handler
        self._ready = True

    def _output(self, entry: Entry) -> None:
        line = self.format_entry(entry)
        size = len(line.encode("utf-8")) + 1
        if self._pending_bytes + size > self.buffer_size:
            self._write_pending()
        self._lines.append(line)
        self._pending_bytes += size
        if self.meets_flush_threshold_value(self._manager.levels.as_value(entry.level)):
            self._write_pending()

    def _write_pending(self) -> None:
        if not self._lines or self._handler is None:
            return
        lines, self._lines = self._lines, []
        self._pending_bytes = 0
        for line in lines:
            self._handler.emit(logging.makeLogRecord({"msg": line, "levelno": logging.INFO}))
        self._handler.flush()

    async def flush(self) -> None:
        self._write_pending()

    async def stop(self) -> None:
        self._write_pending()
        if self._handler is not None:
            self._handler.close()
            self._handler = None

    def clear(self) -> None:
        self._lines = []
        self._pending_bytes = 0
