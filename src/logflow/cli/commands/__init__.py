"""CLI commands."""

from .config import config
from .emit import emit
from .levels import levels

__all__ = ["config", "emit", "levels"]
