"""
logflow: structured logging pipeline

Loggers create entries at named severity levels; a LogManager gates them by
threshold and fans them out to transports (console, file, in-memory buffer,
InfluxDB line protocol and OTLP/HTTP).

Architecture Overview:
- levels: Level definitions, registry and presets
- entry / message: Immutable log entries and styled message building
- loggers: Hierarchical loggers with indentation, marks and thresholds
- manager: LogManager lifecycle and the readiness queue
- transports: Sinks and the TransportManager
- config / builder: TOML and environment configuration
"""

__version__ = "0.1.0"

from .builder import create_log_manager
from .config import ConfigManager, LoggingConfig
from .entry import Entry, ShowOptions
from .exceptions import LogflowError
from .levels import LevelDef, LevelRegistry, create_levels
from .loggers import Logger
from .manager import LogManager, ManagerState
from .message import Message, MessageHandle
from .timing import TimedOperation, timed
from .transports import (
    BufferTransport,
    ConsoleTransport,
    FileTransport,
    InfluxTransport,
    OtlpTransport,
    Transport,
)

__all__ = [
    "__version__",
    "LogManager",
    "ManagerState",
    "Logger",
    "Entry",
    "ShowOptions",
    "Message",
    "MessageHandle",
    "LevelDef",
    "LevelRegistry",
    "create_levels",
    "Transport",
    "ConsoleTransport",
    "BufferTransport",
    "FileTransport",
    "InfluxTransport",
    "OtlpTransport",
    "LoggingConfig",
    "ConfigManager",
    "create_log_manager",
    "TimedOperation",
    "timed",
    "LogflowError",
]
