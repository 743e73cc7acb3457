"""
Ordered severity level registry.

A registry is built once from a sequence of LevelDef records and never mutated
afterwards. It works out on its own whether larger ranks are more or less
severe, so callers only ever compare levels through it.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from rich.color import ColorSystem
from rich.errors import StyleSyntaxError
from rich.style import Style

from ..exceptions import ConfigurationError, UnknownLevelError

LevelRef = Union[str, int]

# OpenTelemetry severity numbers for well-known level names
OTEL_SEVERITY_NUMBERS: Dict[str, int] = {
    "TRACE": 1,
    "SPAM": 1,
    "SILLY": 1,
    "INPUT": 2,
    "DEBUG": 5,
    "VERBOSE": 6,
    "PROMPT": 6,
    "INFO": 9,
    "DATA": 10,
    "HELP": 10,
    "WARN": 13,
    "WARNING": 13,
    "ERROR": 17,
    "CRITICAL": 21,
    "FATAL": 21,
}


@dataclass(frozen=True)
class LevelDef:
    """Definition of a single severity level."""

    name: str
    rank: int
    style: str = ""
    icon: Optional[str] = None
    default: bool = False
    lowest: bool = False
    warn: bool = False
    flush: bool = False
    severity_number: Optional[int] = None
    aliases: Tuple[str, ...] = ()


class LevelRegistry:
    """Manages an ordered set of log levels.

    Provides name/rank conversion, threshold comparison, the flush threshold,
    column width calculation and per-level colouring.
    """

    def __init__(self, defs: Iterable[LevelDef], name: str = "custom"):
        self.name = name
        self._defs: Dict[str, LevelDef] = {}
        self._aliases: Dict[str, str] = {}
        self._by_rank: Dict[int, str] = {}

        for level in defs:
            key = level.name.upper()
            if key in self._defs or key in self._aliases:
                raise ConfigurationError(f"Duplicate level name '{key}' in registry '{name}'")
            if level.rank in self._by_rank:
                raise ConfigurationError(
                    f"Duplicate rank {level.rank} for levels '{self._by_rank[level.rank]}' "
                    f"and '{key}' in registry '{name}'"
                )
            self._defs[key] = level
            self._by_rank[level.rank] = key
            for alias in level.aliases:
                alias_key = alias.upper()
                if alias_key in self._defs or alias_key in self._aliases:
                    raise ConfigurationError(f"Duplicate level name '{alias_key}' in registry '{name}'")
                self._aliases[alias_key] = key

        if not self._defs:
            raise ConfigurationError(f"Level registry '{name}' has no levels")

        self.default_level = self._find("default") or ("INFO" if "INFO" in self._defs else self.names[0])
        self.warn_level = self._find("warn") or ("WARN" if "WARN" in self._defs else self.default_level)
        self.lowest_level = self._find("lowest") or self.default_level

        # Increasing means a larger rank is more severe
        self._increasing = self._infer_direction(name)

        flagged = [d.rank for d in self._defs.values() if d.flush]
        if flagged:
            self.flush_rank = self._least_severe(flagged)
        else:
            self.flush_rank = self._most_severe(list(self._by_rank))

        self._styles: Dict[str, Optional[Style]] = {}
        for key, level in self._defs.items():
            try:
                self._styles[key] = Style.parse(level.style) if level.style else None
            except StyleSyntaxError as e:
                raise ConfigurationError(f"Invalid style '{level.style}' for level '{key}': {e}")

    def __repr__(self) -> str:
        return f"LevelRegistry({self.name}: {', '.join(self.names)})"

    def _find(self, flag: str) -> Optional[str]:
        for key, level in self._defs.items():
            if getattr(level, flag):
                return key
        return None

    def _infer_direction(self, name: str) -> bool:
        """Compare a known more-severe level against a less severe one.

        Candidate pairs are tried in order until their ranks differ.
        """
        rank = {key: level.rank for key, level in self._defs.items()}
        pairs = [(self.warn_level, self.lowest_level)]
        flush_level = self._find("flush")
        if flush_level:
            pairs.append((flush_level, self.default_level))
        pairs.append((self.default_level, self.lowest_level))
        pairs.append((self.warn_level, self.default_level))
        for severe, mild in pairs:
            if rank[severe] != rank[mild]:
                return rank[severe] > rank[mild]
        if len(self._defs) == 1:
            return True
        raise ConfigurationError(
            f"Cannot tell whether larger ranks are more severe in registry '{name}'",
            help_text="Flag the least severe level with lowest=True or the warning level with warn=True",
        )

    def _most_severe(self, ranks: List[int]) -> int:
        return max(ranks) if self._increasing else min(ranks)

    def _least_severe(self, ranks: List[int]) -> int:
        return min(ranks) if self._increasing else max(ranks)

    @property
    def names(self) -> List[str]:
        """Canonical level names in definition order."""
        return list(self._defs)

    @property
    def defs(self) -> Dict[str, LevelDef]:
        return dict(self._defs)

    @property
    def increasing(self) -> bool:
        return self._increasing

    def get(self, level: LevelRef) -> LevelDef:
        """Return the definition for a level name, alias or rank."""
        return self._defs[self.as_name(level)]

    def as_value(self, level: LevelRef) -> int:
        """Convert a level name or rank to its rank."""
        if isinstance(level, str):
            key = level.upper()
            key = self._aliases.get(key, key)
            if key in self._defs:
                return self._defs[key].rank
        elif isinstance(level, int) and not isinstance(level, bool):
            if level in self._by_rank:
                return level
        raise UnknownLevelError(level, self.name)

    def as_name(self, level: LevelRef) -> str:
        """Convert a level name or rank to its canonical upper-case name."""
        if isinstance(level, str):
            key = level.upper()
            key = self._aliases.get(key, key)
            if key in self._defs:
                return key
        elif isinstance(level, int) and not isinstance(level, bool):
            if level in self._by_rank:
                return self._by_rank[level]
        raise UnknownLevelError(level, self.name)

    def is_level(self, level: LevelRef) -> bool:
        try:
            self.as_value(level)
        except UnknownLevelError:
            return False
        return True

    def meets_threshold_value(self, rank: int, threshold: int) -> bool:
        """Whether rank is at least as severe as threshold."""
        if self._increasing:
            return rank >= threshold
        return rank <= threshold

    def meets_threshold(self, level: LevelRef, threshold: LevelRef) -> bool:
        return self.meets_threshold_value(self.as_value(level), self.as_value(threshold))

    def meets_flush_threshold(self, level: LevelRef) -> bool:
        """Whether batching transports must deliver this level immediately."""
        return self.meets_threshold_value(self.as_value(level), self.flush_rank)

    def max_width(self, threshold: LevelRef) -> int:
        """Width of the widest level name at or above the threshold."""
        threshold_rank = self.as_value(threshold)
        width = 0
        for key, level in self._defs.items():
            if self.meets_threshold_value(level.rank, threshold_rank):
                width = max(width, len(key))
        return width

    def apply_color(self, text: str, level: str) -> str:
        """Wrap text in the ANSI codes of the level's style."""
        try:
            style = self._styles.get(self.as_name(level))
        except UnknownLevelError:
            return text
        if style is None:
            return text
        return style.render(text, color_system=ColorSystem.STANDARD)

    def icon(self, level: LevelRef) -> Optional[str]:
        return self.get(level).icon

    def severity_number(self, level: LevelRef) -> int:
        """OpenTelemetry severity number for a level."""
        definition = self.get(level)
        if definition.severity_number is not None:
            return definition.severity_number
        return OTEL_SEVERITY_NUMBERS.get(definition.name.upper(), 9)
