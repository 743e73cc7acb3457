"""
Unit tests for the level registry and presets.
"""

import pytest

from logflow.exceptions import ConfigurationError, UnknownLevelError
from logflow.levels import (
    LEVEL_PRESETS,
    OTLP_LEVELS,
    STD_LEVELS,
    LevelDef,
    LevelRegistry,
    create_levels,
)


@pytest.fixture
def std():
    return create_levels("std")


@pytest.mark.unit
class TestLevelConversion:
    """Test name and rank conversion."""

    def test_as_value_is_case_insensitive(self, std):
        assert std.as_value("info") == 3
        assert std.as_value("INFO") == 3
        assert std.as_value("Info") == 3

    def test_as_value_accepts_ranks(self, std):
        assert std.as_value(1) == 1

    def test_aliases_resolve_to_canonical_level(self, std):
        assert std.as_value("warning") == std.as_value("warn")
        assert std.as_name("critical") == "FATAL"
        assert std.as_name("silly") == "SPAM"

    def test_as_name_from_rank(self, std):
        assert std.as_name(0) == "FATAL"
        assert std.as_name(5) == "DEBUG"

    def test_unknown_rank_raises(self, std):
        with pytest.raises(UnknownLevelError) as exc_info:
            std.as_name(42)

        assert "no name for level: 42" in str(exc_info.value)
        assert exc_info.value.error_code == "LEVEL_UNKNOWN"

    def test_unknown_name_raises(self, std):
        with pytest.raises(UnknownLevelError):
            std.as_value("loud")

    def test_booleans_are_not_ranks(self, std):
        with pytest.raises(UnknownLevelError):
            std.as_value(True)

    def test_is_level(self, std):
        assert std.is_level("debug")
        assert std.is_level(7)
        assert not std.is_level("nope")
        assert not std.is_level(99)

    def test_get_returns_definition(self, std):
        level = std.get("warning")
        assert level.name == "WARN"
        assert level.warn is True


@pytest.mark.unit
class TestLevelOrdering:
    """Test threshold comparison in both directions."""

    def test_std_levels_are_decreasing(self, std):
        assert std.increasing is False

    def test_otlp_levels_are_increasing(self):
        assert create_levels("otlp").increasing is True

    @pytest.mark.parametrize("preset", sorted(LEVEL_PRESETS))
    def test_threshold_is_reflexive(self, preset):
        registry = create_levels(preset)
        for name in registry.names:
            assert registry.meets_threshold(name, name)

    @pytest.mark.parametrize("preset", sorted(LEVEL_PRESETS))
    def test_threshold_is_monotonic(self, preset):
        registry = create_levels(preset)
        by_severity = sorted(registry.defs.values(), key=lambda d: d.rank, reverse=registry.increasing)
        names = [d.name for d in by_severity]
        for threshold in names:
            results = [registry.meets_threshold(level, threshold) for level in names]
            # Most severe first: a run of True followed by a run of False
            assert results == sorted(results, reverse=True)

    def test_std_threshold(self, std):
        assert std.meets_threshold("error", "info")
        assert std.meets_threshold("info", "info")
        assert not std.meets_threshold("debug", "info")

    def test_otlp_threshold(self):
        otlp = create_levels("otlp")
        assert otlp.meets_threshold("fatal", "warn")
        assert not otlp.meets_threshold("info", "warn")

    def test_decreasing_custom_registry(self, four_levels):
        registry = LevelRegistry(four_levels)

        assert registry.increasing is False
        assert registry.default_level == "INFO"
        assert registry.meets_threshold("WARN", "INFO")
        assert not registry.meets_threshold("DEBUG", "INFO")

    def test_tie_broken_by_flush_level(self):
        registry = LevelRegistry([LevelDef("DEBUG", 1, default=True, lowest=True), LevelDef("ALERT", 2, flush=True)])

        assert registry.warn_level == "DEBUG"
        assert registry.increasing is True
        assert registry.meets_threshold("ALERT", "DEBUG")

    def test_warn_flag_on_default_level(self):
        registry = LevelRegistry([LevelDef("NOTE", 5, default=True, warn=True), LevelDef("CHATTER", 9, lowest=True)])

        assert registry.increasing is False
        assert not registry.meets_threshold("CHATTER", "NOTE")

    def test_undecidable_direction_raises(self):
        with pytest.raises(ConfigurationError, match="larger ranks are more severe"):
            LevelRegistry([LevelDef("WARN", 0), LevelDef("DEBUG", 1)])


@pytest.mark.unit
class TestFlushThreshold:
    """Test the level at which batching transports deliver immediately."""

    def test_std_flush_threshold_is_error(self, std):
        assert std.meets_flush_threshold("fatal")
        assert std.meets_flush_threshold("error")
        assert not std.meets_flush_threshold("warn")

    def test_otlp_flush_threshold_is_error(self):
        otlp = create_levels("otlp")
        assert otlp.meets_flush_threshold("ERROR")
        assert not otlp.meets_flush_threshold("WARN")

    def test_without_flags_only_most_severe_flushes(self, four_levels):
        registry = LevelRegistry(four_levels)

        assert registry.meets_flush_threshold("ERROR")
        assert not registry.meets_flush_threshold("WARN")


@pytest.mark.unit
class TestLevelDisplay:
    """Test column width, colours, icons and severity numbers."""

    def test_max_width_counts_visible_levels(self, std):
        assert std.max_width("info") == 5
        assert std.max_width("spam") == 7
        assert std.max_width("warn") == 5

    def test_apply_color_wraps_in_ansi(self, std):
        colored = std.apply_color("[ERROR]", "ERROR")

        assert colored.startswith("\x1b[31m")
        assert colored.endswith("\x1b[0m")
        assert "[ERROR]" in colored

    def test_apply_color_unknown_level_returns_text(self, std):
        assert std.apply_color("plain", "NOPE") == "plain"

    def test_level_without_style_is_not_colored(self):
        registry = LevelRegistry([LevelDef("INFO", 1)])
        assert registry.apply_color("x", "INFO") == "x"

    def test_icons(self):
        otlp = create_levels("otlp")
        assert otlp.icon("warn") == "⚠"
        assert create_levels("std").icon("warn") is None

    def test_severity_numbers(self, std):
        assert std.severity_number("info") == 9
        assert std.severity_number("warn") == 13
        assert std.severity_number("fatal") == 21
        assert std.severity_number("spam") == 1

    def test_explicit_severity_number_wins(self):
        registry = LevelRegistry([LevelDef("NOTICE", 1, severity_number=10)])
        assert registry.severity_number("notice") == 10

    def test_unnamed_severity_defaults_to_info(self):
        registry = LevelRegistry([LevelDef("CHATTY", 1)])
        assert registry.severity_number("chatty") == 9


@pytest.mark.unit
class TestRegistryConstruction:
    """Test validation when building a registry."""

    def test_duplicate_rank_raises(self):
        with pytest.raises(ConfigurationError, match="Duplicate rank"):
            LevelRegistry([LevelDef("A", 1), LevelDef("B", 1)])

    def test_duplicate_name_raises(self):
        with pytest.raises(ConfigurationError, match="Duplicate level name"):
            LevelRegistry([LevelDef("A", 1), LevelDef("a", 2)])

    def test_alias_clash_raises(self):
        with pytest.raises(ConfigurationError):
            LevelRegistry([LevelDef("A", 1, aliases=("B",)), LevelDef("B", 2)])

    def test_empty_registry_raises(self):
        with pytest.raises(ConfigurationError):
            LevelRegistry([])

    def test_invalid_style_raises(self):
        with pytest.raises(ConfigurationError, match="Invalid style"):
            LevelRegistry([LevelDef("A", 1, "not_a_colour")])

    def test_names_are_upper_cased_in_definition_order(self):
        registry = LevelRegistry([LevelDef("low", 1), LevelDef("high", 2, warn=True)])
        assert registry.names == ["LOW", "HIGH"]

    def test_names_returns_a_copy(self, std):
        std.names.append("EXTRA")
        assert "EXTRA" not in std.names

    def test_special_levels(self, std):
        assert std.default_level == "INFO"
        assert std.warn_level == "WARN"
        assert std.lowest_level == "SPAM"


@pytest.mark.unit
class TestPresets:
    """Test the built-in presets."""

    def test_create_levels_by_name(self):
        registry = create_levels("CLI")
        assert registry.name == "cli"
        assert "PROMPT" in registry.names

    def test_unknown_preset_raises(self):
        with pytest.raises(ConfigurationError, match="Unknown level preset"):
            create_levels("loud")

    def test_each_call_builds_a_new_registry(self):
        assert create_levels("std") is not create_levels("std")

    def test_otlp_ranks_are_severity_numbers(self):
        registry = LevelRegistry(OTLP_LEVELS)
        for level in OTLP_LEVELS:
            assert registry.severity_number(level.name) == level.rank

    def test_std_has_eight_levels(self):
        assert len(STD_LEVELS) == 8
