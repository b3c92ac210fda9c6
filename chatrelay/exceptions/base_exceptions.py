"""
Base exception classes and error handling for the relay.

This module provides the exceptions raised across the relay and the
FastAPI handlers that render them.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from chatrelay.utils.logger import get_logger

# Initialize logger
logger = get_logger(__name__)


class ErrorCategory(str, Enum):
    """Error categorization for logging."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    PROVIDER = "provider"
    DELIVERY = "delivery"
    INTERNAL = "internal"


class RelayException(Exception):
    """
    Base exception class for all relay errors.

    This provides a consistent interface for error handling with
    structured error information and logging integration.
    """

    def __init__(
            self,
            message: str,
            error_code: str = "INTERNAL_ERROR",
            status_code: int = 500,
            details: Optional[Dict[str, Any]] = None,
            category: ErrorCategory = ErrorCategory.INTERNAL,
            caused_by: Optional[Exception] = None
    ):
        """
        Initialize relay exception.

        Args:
            message: Internal error message for logging
            error_code: Machine-readable error code
            status_code: HTTP status code when rendered by the API
            details: Additional error details
            category: Error category for monitoring
            caused_by: Original exception that caused this error
        """
        super().__init__(message)

        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        self.category = category
        self.caused_by = caused_by
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        error_dict = {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "category": self.category.value,
                "timestamp": self.timestamp.isoformat(),
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict

    def log_error(self, log: Optional[structlog.stdlib.BoundLogger] = None, **context) -> None:
        """
        Log the error with appropriate level and context.

        Args:
            log: Logger instance to use
            **context: Extra key-value pairs for the log event
        """
        log = log or logger

        log_data = {
            "error_code": self.error_code,
            "error_category": self.category.value,
            **context,
        }

        if self.details:
            log_data["details"] = self.details

        if self.caused_by:
            log_data["caused_by"] = str(self.caused_by)
            log_data["caused_by_type"] = type(self.caused_by).__name__

        if self.status_code >= 500:
            log.error(self.message, **log_data)
        else:
            log.warning(self.message, **log_data)


class ConfigError(RelayException):
    """Missing or invalid configuration. Fatal at startup."""

    def __init__(
            self,
            message: str = "Configuration error",
            missing_keys: Optional[List[str]] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if missing_keys:
            details["missing_keys"] = missing_keys

        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            status_code=500,
            category=ErrorCategory.CONFIGURATION,
            details=details,
            **kwargs
        )


class ProviderError(RelayException):
    """The NLU provider call failed."""

    def __init__(
            self,
            message: str = "NLU provider error",
            provider: Optional[str] = None,
            status_code: Optional[int] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if provider:
            details["provider"] = provider
        if status_code is not None:
            details["provider_status_code"] = status_code

        super().__init__(
            message=message,
            error_code="PROVIDER_ERROR",
            status_code=502,
            category=ErrorCategory.PROVIDER,
            details=details,
            **kwargs
        )


class DeliveryError(RelayException):
    """A Send API call failed."""

    def __init__(
            self,
            message: str = "Message delivery failed",
            recipient_id: Optional[str] = None,
            status_code: Optional[int] = None,
            response_body: Optional[Any] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if recipient_id:
            details["recipient_id"] = recipient_id
        if status_code is not None:
            details["send_api_status_code"] = status_code
        if response_body is not None:
            details["response_body"] = response_body

        super().__init__(
            message=message,
            error_code="DELIVERY_ERROR",
            status_code=502,
            category=ErrorCategory.DELIVERY,
            details=details,
            **kwargs
        )
        self.send_api_status_code = status_code


class ValidationError(RelayException):
    """Webhook verification failed."""

    def __init__(
            self,
            message: str = "Webhook verification failed",
            field: Optional[str] = None,
            **kwargs
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field

        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=403,
            category=ErrorCategory.VALIDATION,
            details=details,
            **kwargs
        )


async def relay_exception_handler(
        request: Request,
        exc: RelayException
) -> JSONResponse:
    """Render relay exceptions raised from a route."""
    exc.log_error(path=str(request.url.path), method=request.method)

    response_data = {
        "status": "error",
        **exc.to_dict(),
        "meta": {
            "path": str(request.url.path),
            "method": request.method,
        }
    }

    request_id = getattr(request.state, "request_id", None)
    if request_id:
        response_data["meta"]["request_id"] = request_id

    return JSONResponse(
        status_code=exc.status_code,
        content=response_data
    )


async def generic_exception_handler(
        request: Request,
        exc: Exception
) -> JSONResponse:
    """Handler for unexpected exceptions."""
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        error_id=error_id,
        error=str(exc),
        error_type=type(exc).__name__,
        path=str(request.url.path),
        method=request.method,
        exc_info=exc
    )

    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "error": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred",
                "error_id": error_id,
            }
        }
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(RelayException, relay_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
