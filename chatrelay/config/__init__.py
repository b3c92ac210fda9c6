"""
Configuration package for the relay.

Environment-based settings, validation, and constants.
"""

from chatrelay.config.settings import (
    Settings,
    get_settings,
    reload_settings,
    validate_configuration,
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "validate_configuration",
]
