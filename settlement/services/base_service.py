"""
Base service class.

Provides common functionality for service classes: bound logging,
the standard result container and the timing decorator.
"""

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger


# Type variable for generic decorator return types
T = TypeVar("T")


@dataclass
class ServiceResult:
    """
    Standard service result container.

    Used to return structured results from service methods.
    """
    success: bool
    data: Any = None
    error: str | None = None
    error_code: str | None = None


class BaseService:
    """
    Base service class.

    Services read through short-lived sessions owned by their data
    sources, so no session is held here; subclasses get a logger bound
    to their class name.
    """

    def __init__(self) -> None:
        self.logger = logger.bind(service=self.__class__.__name__)


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator to log method entry/exit with timing.

    Logs:
    - Method entry with arguments
    - Method exit with duration
    - Exceptions if any

    Usage:
        @log_operation
        async def compute_settlement(self, caller_id: str, ...):
            ...

    Args:
        func: Async method to wrap

    Returns:
        Wrapped async method
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        start_time = time.time()

        self.logger.bind(
            function=func.__name__,
            args_count=len(args),
            kwargs_keys=list(kwargs.keys()),
        ).info(f"Starting {func.__name__}")

        try:
            result = await func(self, *args, **kwargs)
        except Exception as e:
            duration = time.time() - start_time
            self.logger.bind(
                function=func.__name__,
                duration_seconds=round(duration, 3),
                error=str(e),
                success=False,
            ).error(f"Failed {func.__name__}")
            raise

        duration = time.time() - start_time
        self.logger.bind(
            function=func.__name__,
            duration_seconds=round(duration, 3),
            success=True,
        ).info(f"Completed {func.__name__}")
        return result

    return wrapper
