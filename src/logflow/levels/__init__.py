"""Severity levels: definitions, registry and built-in presets."""

from .presets import CLI_LEVELS, LEVEL_PRESETS, MIN_LEVELS, OTLP_LEVELS, STD_LEVELS, create_levels
from .registry import OTEL_SEVERITY_NUMBERS, LevelDef, LevelRef, LevelRegistry

__all__ = [
    "LevelDef",
    "LevelRef",
    "LevelRegistry",
    "OTEL_SEVERITY_NUMBERS",
    "LEVEL_PRESETS",
    "STD_LEVELS",
    "CLI_LEVELS",
    "MIN_LEVELS",
    "OTLP_LEVELS",
    "create_levels",
]
