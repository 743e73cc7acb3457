"""
Configuration-related exceptions.

All exceptions raised while resolving levels, validating options and loading
configuration files. These fail fast at the call site.
"""

from typing import Any, List, Optional

from .base import ExceptionContext, LogflowError


class ConfigurationError(LogflowError):
    """Base class for configuration-related errors."""

    def __init__(self, message: str, help_text: Optional[str] = None):
        context = ExceptionContext(help_text=help_text) if help_text else None
        super().__init__(message, context)


class UnknownLevelError(ConfigurationError):
    """Raised when a level name or rank has no definition in the registry."""

    def __init__(self, level: Any, registry: Optional[str] = None):
        self.level = level
        self.registry = registry
        message = f"Cannot get log level: no name for level: {level}"
        super().__init__(message)
        self.error_code = "LEVEL_UNKNOWN"
        if registry:
            self.add_context(registry=registry)


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration contains invalid values."""

    def __init__(self, field: str, value: Any, expected: str):
        self.field = field
        self.value = value
        self.expected = expected
        message = f"Invalid configuration for '{field}': got {repr(value)}, expected {expected}"
        help_text = f"Check the value of '{field}' and ensure it matches: {expected}"
        super().__init__(message, help_text)
        self.error_code = "CONFIG_INVALID"


class ConflictingOptionsError(ConfigurationError):
    """Raised when two options cannot be used together."""

    def __init__(self, first: str, second: str, reason: Optional[str] = None):
        self.options = (first, second)
        message = f"Options '{first}' and '{second}' cannot be combined"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.error_code = "CONFIG_CONFLICT"


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        message = "Configuration validation failed:"
        for error in errors:
            message += f"\n  - {error}"
        super().__init__(message, "Fix the validation errors listed above")
        self.error_code = "CONFIG_VALIDATION"
