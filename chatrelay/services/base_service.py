"""
Base Service Class

Common logging and best-effort task helpers shared by the services.
"""

import asyncio
from abc import ABC
from datetime import datetime, timezone
from typing import Any, Awaitable, Iterable

from chatrelay.utils.logger import get_logger


class BaseService(ABC):
    """Abstract base class for all services"""

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)
        self.service_name = self.__class__.__name__

    def log_operation(self, operation: str, **kwargs) -> None:
        """Log service operation with standard fields"""
        self.logger.info(
            "Service operation",
            service=self.service_name,
            operation=operation,
            timestamp=datetime.now(timezone.utc).isoformat(),
            **kwargs
        )

    def start_best_effort(self, coro: Awaitable[Any], label: str, **context) -> asyncio.Task:
        """
        Run ``coro`` as a background task whose failure is only logged.

        The caller does not wait for it; pass the task to
        ``drain_best_effort`` once the surrounding work is done.
        """
        task = asyncio.ensure_future(coro)

        def _on_done(done: asyncio.Task) -> None:
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                self.logger.warning(
                    "Best-effort task failed",
                    task=label,
                    error=str(error),
                    error_type=type(error).__name__,
                    **context
                )

        task.add_done_callback(_on_done)
        return task

    @staticmethod
    async def drain_best_effort(tasks: Iterable[asyncio.Task]) -> None:
        """Wait for best-effort tasks; their errors are already logged."""
        pending = list(tasks)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
