"""
Unit tests for the console transport and its formatters.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from logflow.entry import Entry
from logflow.exceptions import InvalidConfigurationError
from logflow.manager import LogManager
from logflow.transports import ConsoleTransport
from logflow.transports.formatters import (
    build_json_object,
    format_duration,
    format_elapsed,
    pad_level,
    to_json,
)

FIXED_TS = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def console(manager):
    return manager.add_transport(ConsoleTransport(manager, color=False))


@pytest.mark.unit
class TestTextFormat:
    """Test plain text lines."""

    def test_basic_line(self, console):
        assert console.format_entry(Entry(level="INFO", message="hello")) == "[INFO ] hello"

    def test_level_is_padded_to_widest_visible_level(self, manager, console):
        manager.threshold = "spam"

        assert console.level_width == 7
        assert console.format_entry(Entry(level="INFO", message="hello")) == "[INFO   ] hello"

    def test_own_threshold_sets_width(self, manager):
        console = ConsoleTransport(manager, color=False, threshold="error")
        assert console.level_width == 5

    def test_hidden_level(self, manager):
        console = ConsoleTransport(manager, color=False, show={"level": False})
        assert console.format_entry(Entry(level="INFO", message="hello")) == "hello"

    def test_fixed_level_width(self, manager):
        console = ConsoleTransport(manager, color=False, show={"level": 3})
        assert console.format_entry(Entry(level="ERROR", message="x")) == "[ERR] x"

    def test_negative_width_pads_left(self, manager):
        console = ConsoleTransport(manager, color=False, show={"level": -6})
        assert console.format_entry(Entry(level="INFO", message="x")) == "[  INFO] x"

    def test_icon_level(self):
        manager = LogManager(levels="otlp")
        console = ConsoleTransport(manager, color=False, show={"level": "icon"})

        assert console.format_entry(Entry(level="WARN", message="x")) == "[⚠] x"

    def test_icon_falls_back_to_name(self, manager):
        console = ConsoleTransport(manager, color=False, show={"level": "icon"})
        assert console.format_entry(Entry(level="INFO", message="x")) == "[INFO ] x"

    def test_context_columns(self, manager):
        console = ConsoleTransport(manager, color=False, show={"pkg": True, "sid": True, "req_id": True})
        entry = Entry(level="INFO", message="hello", pkg="api.db", sid="s1", req_id="r1")

        assert console.format_entry(entry) == "[INFO ] api.db s1 r1 hello"

    def test_context_columns_hidden_by_default(self, console):
        entry = Entry(level="INFO", message="hello", pkg="api.db", sid="s1")
        assert console.format_entry(entry) == "[INFO ] hello"

    def test_data_is_appended_as_json(self, console):
        entry = Entry(level="INFO", message="hello", data={"a": 1})
        assert console.format_entry(entry) == '[INFO ] hello {"a": 1}'

    def test_data_can_be_hidden(self, manager):
        console = ConsoleTransport(manager, color=False, show={"data": False})
        assert console.format_entry(Entry(level="INFO", message="hello", data={"a": 1})) == "[INFO ] hello"

    def test_elapsed(self, console):
        entry = Entry(level="INFO", message="done", elapsed_ms=12.345)
        assert console.format_entry(entry) == "[INFO ] done (12.3 ms)"

    def test_utc_timestamp(self, manager):
        console = ConsoleTransport(manager, color=False, show={"timestamp": "utc"})
        line = console.format_entry(Entry(level="INFO", timestamp=FIXED_TS, message="x"))

        assert line == "2024-01-15T12:00:00.000Z [INFO ] x"

    def test_elapsed_timestamp(self, manager):
        console = ConsoleTransport(manager, color=False, show={"timestamp": "elapsed"})
        ts = manager.start_time + timedelta(milliseconds=2150)

        assert console.format_entry(Entry(level="INFO", timestamp=ts, message="x")) == "2.150s [INFO ] x"

    def test_unserialisable_data_degrades(self, console):
        line = console.format_entry(Entry(level="INFO", message="x", data={"obj": object()}))
        assert '"obj": "<object object at' in line

    def test_formatting_never_raises(self, console, monkeypatch):
        def explode(entry):
            raise RuntimeError("formatter bug")

        monkeypatch.setattr(console, "_format_entry", explode)
        assert console.format_entry(Entry(level="INFO", message="hello")) == "[INFO] hello"


@pytest.mark.unit
class TestJsonFormats:
    """Test single-line JSON and positional JSON arrays."""

    def test_json_object(self, manager):
        console = ConsoleTransport(manager, format="json")
        line = console.format_entry(Entry(level="INFO", message="hello", data={"a": 1}))

        assert json.loads(line) == {"level": "INFO", "msg": "hello", "data": {"a": 1}}

    def test_json_includes_enabled_fields(self, manager):
        console = ConsoleTransport(manager, format="json", show={"timestamp": "utc", "pkg": True})
        entry = Entry(level="WARN", timestamp=FIXED_TS, message="m", pkg="svc", elapsed_ms=5.0)

        assert json.loads(console.format_entry(entry)) == {
            "timestamp": "2024-01-15T12:00:00.000Z",
            "level": "WARN",
            "pkg": "svc",
            "msg": "m",
            "elapsed_ms": 5.0,
        }

    def test_json_array_positions(self, manager):
        console = ConsoleTransport(manager, format="json-array", show={"req_id": True})
        entry = Entry(level="INFO", message="hello", req_id="r1", data=[1, 2])

        assert json.loads(console.format_entry(entry)) == [None, "INFO", None, None, "r1", "hello", None, [1, 2]]

    def test_json_is_never_colored(self, manager, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        console = ConsoleTransport(manager, format="json", color=True)

        assert console.use_color is False
        assert "\x1b[" not in console.format_entry(Entry(level="ERROR", message="x"))

    def test_invalid_format_raises(self, manager):
        with pytest.raises(InvalidConfigurationError):
            ConsoleTransport(manager, format="xml")


@pytest.mark.unit
class TestColor:
    """Test ANSI colour gating."""

    def test_text_is_colored(self, manager, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        console = ConsoleTransport(manager, color=True)

        line = console.format_entry(Entry(level="ERROR", message="x"))
        assert line.startswith("\x1b[31m[ERROR]")

    def test_no_color_environment(self, manager, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        console = ConsoleTransport(manager, color=True)

        assert console.format_entry(Entry(level="ERROR", message="x")) == "[ERROR] x"

    def test_show_color_off(self, manager, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        console = ConsoleTransport(manager, color=True, show={"color": False})

        assert console.use_color is False


@pytest.mark.unit
class TestConsoleOutput:
    """Test writing to the output streams."""

    def test_emit_writes_to_stdout(self, console, capsys):
        console.emit(Entry(level="INFO", message="to stdout"))

        captured = capsys.readouterr()
        assert captured.out == "[INFO ] to stdout\n"
        assert captured.err == ""

    def test_emit_writes_to_stderr(self, manager, capsys):
        console = ConsoleTransport(manager, color=False, use_stderr=True)
        console.emit(Entry(level="INFO", message="to stderr"))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "to stderr" in captured.err

    def test_own_threshold_filters(self, manager, capsys):
        console = ConsoleTransport(manager, color=False, threshold="error")
        console.emit(Entry(level="WARN", message="dropped"))

        assert capsys.readouterr().out == ""

    def test_destroyed_transport_is_silent(self, console, capsys):
        import asyncio

        asyncio.run(console.destroy())
        console.emit(Entry(level="ERROR", message="late"))

        assert capsys.readouterr().out == ""
        assert str(console) == "Console[text,no-color]"


@pytest.mark.unit
class TestFormatters:
    """Test the formatter helpers."""

    def test_pad_level(self):
        assert pad_level("INFO", True, 5) == "INFO "
        assert pad_level("INFO", False, 5) == ""
        assert pad_level("VERBOSE", 4, 7) == "VERB"
        assert pad_level("INFO", -6, 5) == "  INFO"
        assert pad_level("INFO", "icon", 5, "ℹ") == "ℹ"

    def test_format_elapsed_precision(self):
        assert format_elapsed(250) == "(250 ms)"
        assert format_elapsed(5.0) == "(5.00 ms)"
        assert format_elapsed(0.5) == "(0.500 ms)"

    def test_format_duration(self):
        assert format_duration(850) == "850ms"
        assert format_duration(2150) == "2.150s"
        assert format_duration(184_200) == "3m04.2s"
        assert format_duration(3_723_000) == "1h02m03.0s"

    def test_to_json_falls_back_to_str(self):
        assert to_json({"when": FIXED_TS}) == '{"when": "2024-01-15 12:00:00+00:00"}'

    def test_to_json_keeps_unicode(self):
        assert to_json("héllo") == '"héllo"'

    def test_build_json_object_omits_none(self):
        assert build_json_object({"a": 1, "b": None}) == '{"a": 1}'
