"""
Built-in level sets.

Each preset is a tuple of LevelDef records; create_levels() turns one into a
fresh LevelRegistry.
"""

from typing import Dict, Tuple

from ..exceptions import ConfigurationError
from .registry import LevelDef, LevelRegistry

STD_LEVELS: Tuple[LevelDef, ...] = (
    LevelDef("FATAL", 0, "red", flush=True, aliases=("CRITICAL",)),
    LevelDef("ERROR", 1, "red", flush=True),
    LevelDef("WARN", 2, "yellow", warn=True, aliases=("WARNING",)),
    LevelDef("INFO", 3, "green", default=True),
    LevelDef("VERBOSE", 4, "cyan"),
    LevelDef("DEBUG", 5, "dim blue"),
    LevelDef("TRACE", 6, "bright_black"),
    LevelDef("SPAM", 7, "dim bright_black", lowest=True, aliases=("SILLY",)),
)

CLI_LEVELS: Tuple[LevelDef, ...] = (
    LevelDef("ERROR", 0, "red", flush=True),
    LevelDef("WARN", 1, "yellow", warn=True),
    LevelDef("HELP", 2, "cyan"),
    LevelDef("DATA", 3, "bright_black"),
    LevelDef("INFO", 4, "green", default=True),
    LevelDef("DEBUG", 5, "blue"),
    LevelDef("PROMPT", 6, "bright_black"),
    LevelDef("VERBOSE", 7, "cyan"),
    LevelDef("INPUT", 8, "bright_black"),
    LevelDef("SILLY", 9, "magenta", lowest=True),
)

MIN_LEVELS: Tuple[LevelDef, ...] = (
    LevelDef("ERROR", 1, "red", flush=True),
    LevelDef("WARN", 2, "yellow", warn=True),
    LevelDef("INFO", 3, "green", default=True),
    LevelDef("DEBUG", 5, "dim blue", lowest=True),
)

# Ranks are the OpenTelemetry severity numbers themselves
OTLP_LEVELS: Tuple[LevelDef, ...] = (
    LevelDef("FATAL", 21, "bright_red", icon="☠", flush=True),
    LevelDef("ERROR", 17, "red", icon="✗", flush=True),
    LevelDef("WARN", 13, "yellow", icon="⚠", warn=True),
    LevelDef("INFO", 9, "green", icon="ℹ", default=True),
    LevelDef("DEBUG", 5, "dim blue", icon="Δ"),
    LevelDef("TRACE", 1, "bright_black", icon="↳", lowest=True),
)

LEVEL_PRESETS: Dict[str, Tuple[LevelDef, ...]] = {
    "std": STD_LEVELS,
    "cli": CLI_LEVELS,
    "min": MIN_LEVELS,
    "otlp": OTLP_LEVELS,
}


def create_levels(name: str = "std") -> LevelRegistry:
    """Create a level registry from a named preset."""
    try:
        defs = LEVEL_PRESETS[name.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown level preset '{name}'",
            f"Choose one of: {', '.join(LEVEL_PRESETS)}",
        )
    return LevelRegistry(defs, name=name.lower())
