"""
Utilities package for the relay.

Logging setup and Prometheus metrics.
"""

from chatrelay.utils.logger import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
