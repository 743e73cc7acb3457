"""
Root of the logflow exception tree.

Every error raised by logflow carries a message, and optionally a short code
for programmatic handling, a hint for the caller and a mapping of the values
involved. str() renders all of them for terminal output.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ExceptionContext:
    """Optional detail attached to a LogflowError."""

    help_text: Optional[str] = None
    error_code: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)


class LogflowError(Exception):
    """Base exception for all logflow errors.

    Attributes:
        message: What went wrong
        help_text: How the caller can fix it, when known
        error_code: Stable identifier such as ``LEVEL_UNKNOWN``
        context: Values involved in the failure
    """

    def __init__(self, message: str, context: Optional[ExceptionContext] = None):
        self.message = message
        detail = context or ExceptionContext()
        self.help_text = detail.help_text
        self.error_code = detail.error_code
        self.context = dict(detail.context)
        super().__init__(message)

    def __str__(self) -> str:
        lines = [self.message]
        if self.help_text:
            lines.append(f"  Help: {self.help_text}")
        shown = ", ".join(f"{k}: {v}" for k, v in self.context.items() if v is not None)
        if shown:
            lines.append(f"  Context: {shown}")
        return "\n".join(lines)

    def add_context(self, **kwargs) -> "LogflowError":
        """Attach more values; returns self so it can be chained into a raise."""
        self.context.update(kwargs)
        return self


class BufferAssertionError(LogflowError, AssertionError):
    """Raised by buffer transport assertion helpers when captured output does not match."""

    def __init__(self, message: str, messages: Optional[list] = None):
        self.messages = list(messages or [])
        dump = "\n".join(f"  - {m}" for m in self.messages) or "  (none)"
        super().__init__(f"{message}\nCaptured messages:\n{dump}")

    def __str__(self) -> str:
        return self.message
