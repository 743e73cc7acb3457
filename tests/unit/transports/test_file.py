"""
Unit tests for the file transport.
"""

import json

import pytest

from logflow.entry import Entry
from logflow.exceptions import InvalidConfigurationError, TransportSetupError
from logflow.transports import FileTransport


def read_lines(path):
    return path.read_text(encoding="utf-8").splitlines()


@pytest.mark.unit
class TestFileTransport:
    """Test buffered writes, flush triggers and modes."""

    @pytest.mark.asyncio
    async def test_setup_creates_parent_directories(self, manager, temp_dir):
        path = temp_dir / "nested" / "logs" / "app.log"
        transport = FileTransport(manager, path)

        await transport.setup()

        assert transport.ready is True
        assert path.exists()
        await transport.stop()

    @pytest.mark.asyncio
    async def test_lines_are_buffered_until_flush(self, manager, temp_dir):
        path = temp_dir / "app.log"
        transport = FileTransport(manager, path)
        await transport.setup()

        transport.emit(Entry(level="INFO", message="first"))
        transport.emit(Entry(level="WARN", message="second"))
        assert path.read_text() == ""
        assert len(transport.pending) == 2

        await transport.flush()
        assert read_lines(path) == ["[INFO ] first", "[WARN ] second"]
        assert transport.pending == []
        await transport.stop()

    @pytest.mark.asyncio
    async def test_flush_threshold_level_writes_immediately(self, manager, temp_dir):
        path = temp_dir / "app.log"
        transport = FileTransport(manager, path)
        await transport.setup()

        transport.emit(Entry(level="INFO", message="context"))
        transport.emit(Entry(level="ERROR", message="failure"))

        assert read_lines(path) == ["[INFO ] context", "[ERROR] failure"]
        await transport.stop()

    @pytest.mark.asyncio
    async def test_full_buffer_is_written(self, manager, temp_dir):
        path = temp_dir / "app.log"
        transport = FileTransport(manager, path, buffer_size=30)
        await transport.setup()

        transport.emit(Entry(level="INFO", message="a" * 15))
        assert path.read_text() == ""
        transport.emit(Entry(level="INFO", message="b" * 15))

        assert read_lines(path) == ["[INFO ] " + "a" * 15]
        assert len(transport.pending) == 1
        await transport.stop()

    @pytest.mark.asyncio
    async def test_stop_writes_pending_lines(self, manager, temp_dir):
        path = temp_dir / "app.log"
        transport = FileTransport(manager, path)
        await transport.setup()

        transport.emit(Entry(level="INFO", message="last words"))
        await transport.stop()

        assert read_lines(path) == ["[INFO ] last words"]

    @pytest.mark.asyncio
    async def test_append_mode_keeps_existing_content(self, manager, temp_dir):
        path = temp_dir / "app.log"
        path.write_text("old line\n", encoding="utf-8")
        transport = FileTransport(manager, path, mode="a")
        await transport.setup()

        transport.emit(Entry(level="INFO", message="new line"))
        await transport.stop()

        assert read_lines(path) == ["old line", "[INFO ] new line"]

    @pytest.mark.asyncio
    async def test_write_mode_truncates(self, manager, temp_dir):
        path = temp_dir / "app.log"
        path.write_text("old line\n", encoding="utf-8")
        transport = FileTransport(manager, path, mode="w")
        await transport.setup()

        transport.emit(Entry(level="INFO", message="fresh"))
        await transport.stop()

        assert read_lines(path) == ["[INFO ] fresh"]

    @pytest.mark.asyncio
    async def test_exclusive_mode_fails_on_existing_file(self, manager, temp_dir):
        path = temp_dir / "app.log"
        path.write_text("taken\n", encoding="utf-8")
        transport = FileTransport(manager, path, mode="x")

        with pytest.raises(TransportSetupError) as exc_info:
            await transport.setup()

        assert isinstance(exc_info.value.cause, FileExistsError)
        assert transport.ready is False

    @pytest.mark.asyncio
    async def test_unwritable_location_fails_setup(self, manager, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        transport = FileTransport(manager, blocker / "app.log")

        with pytest.raises(TransportSetupError):
            await transport.setup()

    @pytest.mark.asyncio
    async def test_rotation(self, manager, temp_dir):
        path = temp_dir / "app.log"
        transport = FileTransport(manager, path, buffer_size=0, max_bytes=100, backup_count=2)
        await transport.setup()

        for i in range(20):
            transport.emit(Entry(level="INFO", message=f"line number {i:02d}"))
        await transport.stop()

        assert (temp_dir / "app.log.1").exists()
        assert not (temp_dir / "app.log.3").exists()

    @pytest.mark.asyncio
    async def test_json_format(self, manager, temp_dir):
        path = temp_dir / "app.jsonl"
        transport = FileTransport(manager, path, format="json")
        await transport.setup()

        transport.emit(Entry(level="INFO", message="structured", data={"n": 1}))
        await transport.stop()

        assert json.loads(read_lines(path)[0]) == {"level": "INFO", "msg": "structured", "data": {"n": 1}}

    def test_invalid_mode_raises(self, manager, temp_dir):
        with pytest.raises(InvalidConfigurationError):
            FileTransport(manager, temp_dir / "app.log", mode="r")

    def test_text_is_not_colored_by_default(self, manager, temp_dir):
        transport = FileTransport(manager, temp_dir / "app.log")

        assert transport.use_color is False
        assert str(transport) == f"File[{temp_dir / 'app.log'}]"
