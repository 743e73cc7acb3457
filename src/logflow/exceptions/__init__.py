"""
logflow Exception Hierarchy

Exception Hierarchy:
    LogflowError (base)
    ├── ConfigurationError
    │   ├── UnknownLevelError
    │   ├── InvalidConfigurationError
    │   ├── ConflictingOptionsError
    │   └── ConfigurationValidationError
    ├── TransportError
    │   ├── TransportSetupError
    │   └── DeliveryError
    └── BufferAssertionError

This package provides focused exception components:
- base: Core LogflowError base class and buffer assertion failures
- config: Level resolution and configuration exceptions
- transports: Transport setup and delivery exceptions
"""

from .base import BufferAssertionError, ExceptionContext, LogflowError
from .config import (
    ConfigurationError,
    ConfigurationValidationError,
    ConflictingOptionsError,
    InvalidConfigurationError,
    UnknownLevelError,
)
from .transports import DeliveryError, TransportError, TransportSetupError

__all__ = [
    # Base
    "LogflowError",
    "ExceptionContext",
    "BufferAssertionError",
    # Configuration
    "ConfigurationError",
    "UnknownLevelError",
    "InvalidConfigurationError",
    "ConflictingOptionsError",
    "ConfigurationValidationError",
    # Transports
    "TransportError",
    "TransportSetupError",
    "DeliveryError",
]
