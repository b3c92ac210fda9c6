"""
Application configuration settings using Pydantic Settings.

This module provides centralized configuration management with
environment variable support, validation, and type safety.
"""

from enum import Enum
from functools import lru_cache
from typing import List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chatrelay.config.constants import (
    DEFAULT_API_AI_BASE_URL,
    DEFAULT_GRAPH_API_BASE_URL,
    DEFAULT_GRAPH_API_VERSION,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_NLU_LANGUAGE,
    DEFAULT_NLU_REQUEST_SOURCE,
    NLUBackend,
    RunMode,
)
from chatrelay.exceptions.base_exceptions import ConfigError


class Environment(str, Enum):
    """Application environment options."""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Environment Configuration
    ENVIRONMENT: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment"
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Server Configuration
    HOST: str = Field(
        default="0.0.0.0",
        description="Server host address"
    )
    PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # Logging Configuration
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )
    LOG_FORMAT: str = Field(
        default="text",
        pattern=r"^(json|text)$",
        description="Log output format"
    )

    # NLU Provider Configuration
    APIAI_PROJECT_ID: str = Field(
        default="",
        description="Dialogflow project id"
    )
    APIAI_SESSION_ID: str = Field(
        default="",
        description="Session id used by the console front-end"
    )
    API_AI_CLIENT_ACCESS_TOKEN: str = Field(
        default="",
        description="API.ai client access token"
    )
    API_AI_BASE_URL: str = Field(
        default=DEFAULT_API_AI_BASE_URL,
        description="API.ai v1 endpoint"
    )
    NLU_LANGUAGE: str = Field(
        default=DEFAULT_NLU_LANGUAGE,
        min_length=2,
        description="Language sent with every NLU query"
    )
    NLU_REQUEST_SOURCE: str = Field(
        default=DEFAULT_NLU_REQUEST_SOURCE,
        description="Request source reported to API.ai"
    )
    WEBHOOK_NLU_BACKEND: NLUBackend = Field(
        default=NLUBackend.API_AI,
        description="NLU adapter used by the webhook"
    )
    CONSOLE_NLU_BACKEND: NLUBackend = Field(
        default=NLUBackend.DIALOGFLOW,
        description="NLU adapter used by the console"
    )

    # Messenger Configuration
    FB_VERIFY_TOKEN: str = Field(
        default="",
        description="Webhook verification token"
    )
    FB_PAGE_TOKEN: str = Field(
        default="",
        description="Page access token for the Send API"
    )
    GRAPH_API_BASE_URL: str = Field(
        default=DEFAULT_GRAPH_API_BASE_URL,
        description="Graph API host"
    )
    GRAPH_API_VERSION: str = Field(
        default=DEFAULT_GRAPH_API_VERSION,
        pattern=r"^v\d+\.\d+$",
        description="Graph API version"
    )

    # Outbound HTTP
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=DEFAULT_HTTP_TIMEOUT_SECONDS,
        gt=0,
        le=300,
        description="Timeout for NLU and Send API calls"
    )

    # Reply templates
    ACTION_TEMPLATES_FILE: Optional[str] = Field(
        default=None,
        description="JSON file overriding the canned action replies"
    )

    # Monitoring Configuration
    METRICS_ENABLED: bool = Field(
        default=True,
        description="Expose Prometheus metrics"
    )

    @field_validator("API_AI_BASE_URL", "GRAPH_API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended."""
        return v.rstrip("/")

    def required_settings(self, mode: RunMode) -> List[Tuple[str, str]]:
        """List the (name, value) pairs a front-end cannot run without."""
        backend = (
            self.WEBHOOK_NLU_BACKEND if mode == RunMode.SERVER
            else self.CONSOLE_NLU_BACKEND
        )

        required: List[Tuple[str, str]] = []
        if backend == NLUBackend.API_AI:
            required.append(("API_AI_CLIENT_ACCESS_TOKEN", self.API_AI_CLIENT_ACCESS_TOKEN))
        else:
            required.append(("APIAI_PROJECT_ID", self.APIAI_PROJECT_ID))

        if mode == RunMode.SERVER:
            required.extend([
                ("FB_VERIFY_TOKEN", self.FB_VERIFY_TOKEN),
                ("FB_PAGE_TOKEN", self.FB_PAGE_TOKEN),
            ])
        else:
            required.append(("APIAI_SESSION_ID", self.APIAI_SESSION_ID))

        return required

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == Environment.PRODUCTION


def validate_configuration(settings: Settings, mode: RunMode) -> None:
    """
    Check that every setting the given front-end needs is present.

    Raises:
        ConfigError: listing all missing keys at once
    """
    missing = [name for name, value in settings.required_settings(mode) if not value]
    if missing:
        raise ConfigError(
            f"Missing required configuration: {', '.join(missing)}",
            missing_keys=missing,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached singleton).

    Returns:
        Settings: Configured application settings instance
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Force reload of application settings.

    Note:
        This clears the cache and creates a new settings instance.
        Useful for testing.
    """
    get_settings.cache_clear()
    return get_settings()
