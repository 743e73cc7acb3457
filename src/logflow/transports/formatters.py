"""
Entry formatters for console-style output.

Provides the text line layout, single-line JSON objects and positional JSON
arrays. Nothing in here raises on odd input; values that cannot be serialised
are rendered with str().
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union

from rich.color import ColorSystem
from rich.style import Style

logger = logging.getLogger(__name__)

FORMAT_TEXT = "text"
FORMAT_JSON = "json"
FORMAT_JSON_ARRAY = "json-array"
OUTPUT_FORMATS = (FORMAT_TEXT, FORMAT_JSON, FORMAT_JSON_ARRAY)

# Styles of the non-level columns in text output
COLUMN_STYLES: Dict[str, Style] = {
    "timestamp": Style(color="bright_black"),
    "pkg": Style(color="green"),
    "sid": Style(color="yellow", underline=True),
    "req_id": Style(color="bright_yellow"),
    "elapsed": Style(color="bright_black"),
}


def style_column(text: str, column: str, color: bool) -> str:
    """Apply the column's ANSI style when colour is on."""
    style = COLUMN_STYLES.get(column)
    if not color or style is None:
        return text
    return style.render(text, color_system=ColorSystem.STANDARD)


def to_json(value: Any) -> str:
    """Serialise to compact JSON, degrading to str() for unknown types."""
    try:
        return json.dumps(value, default=str, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.debug(f"JSON serialisation failed, using str(): {e}")
        return json.dumps(str(value), ensure_ascii=False)


def pad_level(name: str, mode: Union[bool, int, str], width: int, icon: Optional[str] = None) -> str:
    """Level text for display.

    ``mode`` True pads to ``width``, a positive int pads or truncates to that
    width, a negative int right-aligns, and "icon" uses the icon when one exists.
    """
    if mode == "icon" and not isinstance(mode, bool):
        if icon:
            return icon
        return name.ljust(width)
    if isinstance(mode, bool):
        return name.ljust(width) if mode else ""
    if isinstance(mode, int):
        if mode > 0:
            return name[:mode].ljust(mode)
        if mode < 0:
            return name[: -mode].rjust(-mode)
    return name


def format_elapsed(ms: float) -> str:
    """Duration suffix with precision scaled to magnitude, e.g. ``(12.3 ms)``."""
    if ms > 100:
        digits = 0
    elif ms > 10:
        digits = 1
    elif ms > 1:
        digits = 2
    else:
        digits = 3
    return f"({ms:.{digits}f} ms)"


def format_duration(ms: float) -> str:
    """Compact duration used for elapsed timestamps, e.g. ``850ms``, ``2.150s``, ``3m04.2s``."""
    if ms < 1000:
        return f"{ms:.0f}ms"
    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.3f}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m{seconds:04.1f}s"
    hours, minutes = divmod(int(minutes), 60)
    return f"{hours}h{minutes:02d}m{seconds:04.1f}s"


def build_text_line(
    *,
    timestamp: Optional[str],
    level: Optional[str],
    pkg: Optional[str],
    sid: Optional[str],
    req_id: Optional[str],
    msg: str,
    elapsed_ms: Optional[float],
    data: Any,
    color: bool,
) -> str:
    """Space separated text line from already-selected columns.

    ``level`` must already be padded and coloured; a None column is skipped.
    """
    parts: List[str] = []
    if timestamp:
        parts.append(style_column(timestamp, "timestamp", color))
    if level is not None:
        parts.append(level)
    if pkg:
        parts.append(style_column(pkg, "pkg", color))
    if sid:
        parts.append(style_column(sid, "sid", color))
    if req_id:
        parts.append(style_column(req_id, "req_id", color))
    if msg:
        parts.append(msg)
    if elapsed_ms:
        parts.append(style_column(format_elapsed(elapsed_ms), "elapsed", color))
    if data is not None:
        parts.append(to_json(data))
    return " ".join(parts)


def build_json_object(fields: Dict[str, Any]) -> str:
    """One JSON object; None values are omitted."""
    return to_json({k: v for k, v in fields.items() if v is not None})


def build_json_array(
    timestamp: Optional[str],
    level: Optional[str],
    pkg: Optional[str],
    sid: Optional[str],
    req_id: Optional[str],
    msg: Optional[str],
    elapsed_ms: Optional[float],
    data: Any,
) -> str:
    """Fixed-position array: timestamp, level, package, session, request, message, elapsed, data."""
    return to_json([timestamp, level, pkg, sid, req_id, msg, elapsed_ms, data])
