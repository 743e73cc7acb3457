"""
Console transport.

Writes one line per entry to stdout (or stderr) as text, a JSON object or a
positional JSON array.
"""

import logging
import os
import sys
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from ..entry import TARGET_CONSOLE, TARGET_JSON, TARGET_JSON_ARRAY, Entry
from ..exceptions import InvalidConfigurationError, UnknownLevelError
from ..levels import LevelRef
from .base import Transport
from .formatters import (
    FORMAT_JSON,
    FORMAT_JSON_ARRAY,
    FORMAT_TEXT,
    OUTPUT_FORMATS,
    build_json_array,
    build_json_object,
    build_text_line,
    pad_level,
)

if TYPE_CHECKING:
    from ..manager import LogManager

logger = logging.getLogger(__name__)

_TARGETS = {
    FORMAT_TEXT: TARGET_CONSOLE,
    FORMAT_JSON: TARGET_JSON,
    FORMAT_JSON_ARRAY: TARGET_JSON_ARRAY,
}


class ConsoleTransport(Transport):
    """Synchronous line writer for terminals and log collectors."""

    type = "console"

    def __init__(
        self,
        manager: "LogManager",
        format: str = FORMAT_TEXT,
        color: bool = True,
        use_stderr: bool = False,
        threshold: Optional[LevelRef] = None,
        show: Optional[Mapping[str, Any]] = None,
    ):
        if format not in OUTPUT_FORMATS:
            raise InvalidConfigurationError("format", format, " | ".join(OUTPUT_FORMATS))
        super().__init__(manager, threshold=threshold, show=show)
        self.format = format
        self.color = color
        self.use_stderr = use_stderr
        self._level_width = 5
        self.threshold_updated()

    def __str__(self) -> str:
        return f"Console[{self.format},{'color' if self.color else 'no-color'}]"

    @property
    def use_color(self) -> bool:
        """Colour is only used for text output with colour enabled everywhere and NO_COLOR unset."""
        if self.format != FORMAT_TEXT:
            return False
        if not self.color or not self._show.color:
            return False
        return not os.environ.get("NO_COLOR")

    @property
    def level_width(self) -> int:
        return self._level_width

    def threshold_updated(self) -> None:
        self._level_width = self._manager.levels.max_width(self.threshold)

    def _output(self, entry: Entry) -> None:
        self.write(self.format_entry(entry))

    def write(self, line: str) -> None:
        stream = sys.stderr if self.use_stderr else sys.stdout
        stream.write(line + "\n")

    def format_entry(self, entry: Entry) -> str:
        """Render an entry in the configured format. Never raises."""
        try:
            return self._format_entry(entry)
        except Exception as e:
            logger.debug(f"Console formatting failed for {entry.level} entry: {e}")
            return f"[{entry.level}] {entry.render(color=False)}"

    def _format_entry(self, entry: Entry) -> str:
        show = self._show
        color = self.use_color
        target = _TARGETS[self.format]
        fields = self._select_fields(entry)
        msg = entry.render(color=color, target=target)

        if self.format == FORMAT_JSON:
            return build_json_object(
                {
                    "timestamp": fields["timestamp"],
                    "level": entry.level if show.level is not False else None,
                    "pkg": fields["pkg"],
                    "sid": fields["sid"],
                    "req_id": fields["req_id"],
                    "msg": msg,
                    "elapsed_ms": fields["elapsed_ms"],
                    "data": fields["data"],
                }
            )

        if self.format == FORMAT_JSON_ARRAY:
            return build_json_array(
                fields["timestamp"],
                entry.level if show.level is not False else None,
                fields["pkg"],
                fields["sid"],
                fields["req_id"],
                msg,
                fields["elapsed_ms"],
                fields["data"],
            )

        return build_text_line(
            timestamp=fields["timestamp"],
            level=self.styled_level(entry.level, color),
            msg=msg,
            color=color,
            **{k: fields[k] for k in ("pkg", "sid", "req_id", "elapsed_ms", "data")},
        )

    def _select_fields(self, entry: Entry) -> Dict[str, Any]:
        show = self._show
        return {
            "timestamp": self.date_to_string(entry.timestamp, show.timestamp),
            "pkg": entry.pkg if show.pkg else None,
            "sid": entry.sid if show.sid else None,
            "req_id": entry.req_id if show.req_id else None,
            "elapsed_ms": entry.elapsed_ms if show.elapsed else None,
            "data": entry.data if show.data else None,
        }

    def styled_level(self, level: str, color: bool) -> Optional[str]:
        """Bracketed, padded and optionally coloured level column, or None when hidden."""
        mode = self._show.level
        if mode is False:
            return None
        levels = self._manager.levels
        try:
            icon = levels.icon(level)
        except UnknownLevelError:
            icon = None
        text = f"[{pad_level(level, mode, self._level_width, icon)}]"
        if color:
            return levels.apply_color(text, level)
        return text
