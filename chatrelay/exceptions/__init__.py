"""
Exceptions package for the relay.
"""

from chatrelay.exceptions.base_exceptions import (
    ErrorCategory,
    RelayException,
    ConfigError,
    ProviderError,
    DeliveryError,
    ValidationError,
    setup_exception_handlers,
)

__all__ = [
    "ErrorCategory",
    "RelayException",
    "ConfigError",
    "ProviderError",
    "DeliveryError",
    "ValidationError",
    "setup_exception_handlers",
]
