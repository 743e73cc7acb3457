"""
Timing helpers.

TimedOperation and timed() emit entries that carry the measured duration in
``elapsed_ms`` so transports can render or export it.
"""

import time
from functools import wraps
from typing import Any, Dict, Optional

from .loggers import Logger


class TimedOperation:
    """Context manager for timing operations with automatic logging."""

    def __init__(
        self,
        operation: str,
        logger: Logger,
        context: Optional[Dict[str, Any]] = None,
        level: str = "info",
        failure_level: str = "error",
    ):
        self.operation = operation
        self.logger = logger
        self.context = context or {}
        self.level = level
        self.failure_level = failure_level
        self.start_time: Optional[float] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is None:
            return

        self.duration_ms = (time.perf_counter() - self.start_time) * 1000

        if exc_type is None:
            handle = self.logger.handle(self.level)
            handle.text(f"Completed operation: {self.operation}")
            handle.data({"operation": self.operation, "status": "success", **self.context})
        else:
            handle = self.logger.handle(self.failure_level)
            handle.text(f"Failed operation: {self.operation}: {exc_val}")
            handle.data(
                {
                    "operation": self.operation,
                    "status": "failed",
                    "error_type": exc_type.__name__,
                    **self.context,
                }
            )
        handle.ewt(self.duration_ms)


def timed(logger: Logger, operation: Optional[str] = None, level: str = "info"):
    """Decorator to time function execution."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            op_name = operation or f"{func.__module__}.{func.__name__}"
            with TimedOperation(op_name, logger, level=level):
                return func(*args, **kwargs)

        return wrapper

    return decorator
