"""Resilience helpers used by the network transports."""

from .retry import RetryManager, RetryPolicy

__all__ = ["RetryPolicy", "RetryManager"]
