"""
Transports: sinks that consume entries.

- base: the Transport contract
- console / file: line output to streams and files
- buffer: in-memory capture for tests and inspection
- batch / influx / otlp: batched network delivery with retry
- manager: the TransportManager that owns and drives them
"""

from .base import Transport
from .batch import BatchingTransport
from .buffer import BufferEntry, BufferTransport
from .console import ConsoleTransport
from .file import FileTransport
from .http import HttpClient
from .influx import InfluxTransport
from .manager import TransportManager
from .otlp import OtlpTransport

__all__ = [
    "Transport",
    "BatchingTransport",
    "BufferEntry",
    "BufferTransport",
    "ConsoleTransport",
    "FileTransport",
    "HttpClient",
    "InfluxTransport",
    "OtlpTransport",
    "TransportManager",
]
