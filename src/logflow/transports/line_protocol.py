"""
InfluxDB line protocol encoding.

``measurement,tag1=v1,tag2=v2 field1=1i,field2="text" 1700000000000000000``
"""

import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

_KEY_SPECIALS = re.compile(r"([ ,=])")
_MEASUREMENT_SPECIALS = re.compile(r"([ ,])")
# A raw line break would end the line early
_LINE_BREAKS = str.maketrans({"\n": "\\n", "\r": "\\r"})

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def escape_key(value: str) -> str:
    """Escape a tag key, tag value or field key."""
    return _KEY_SPECIALS.sub(r"\\\1", str(value)).translate(_LINE_BREAKS)


def escape_measurement(value: str) -> str:
    return _MEASUREMENT_SPECIALS.sub(r"\\\1", str(value)).translate(_LINE_BREAKS)


def format_field_value(value: Any) -> str:
    """Encode a field value: quoted strings, ``i`` suffixed integers, floats and booleans."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"{value}i"
    if isinstance(value, float):
        return repr(value)
    text = str(value).replace("\\", "\\\\").replace('"', '\\"').translate(_LINE_BREAKS)
    return f'"{text}"'


def to_unix_ns(ts: datetime) -> int:
    """Nanoseconds since the epoch without float rounding."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    delta = ts - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def format_line(
    measurement: str,
    tags: Mapping[str, Optional[str]],
    fields: Mapping[str, Any],
    timestamp_ns: Optional[int] = None,
) -> str:
    """Build one line; empty tags and None fields are left out."""
    line = escape_measurement(measurement)
    for key, value in tags.items():
        if value is None or value == "":
            continue
        line += f",{escape_key(key)}={escape_key(value)}"

    encoded = [f"{escape_key(k)}={format_field_value(v)}" for k, v in fields.items() if v is not None]
    if not encoded:
        raise ValueError("Line protocol requires at least one field")
    line += " " + ",".join(encoded)

    if timestamp_ns is not None:
        line += f" {timestamp_ns}"
    return line
