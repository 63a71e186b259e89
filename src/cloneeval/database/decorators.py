"""
Database decorators for retry logic.
"""

import time
import sqlite3
from functools import wraps
from typing import TypeVar, Callable, Any, Optional
import logging

from ..exceptions import StoreError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def with_retry(max_attempts: int = 3, backoff_factor: float = 1.5) -> Callable:
    """
    Decorator to retry database reads on lock errors.

    Lock contention that outlasts ``max_attempts`` is raised as ``StoreError``.

    Args:
        max_attempts: Maximum number of attempts
        backoff_factor: Exponential backoff factor for retry delays

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception: Optional[Exception] = None

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except sqlite3.OperationalError as e:
                    last_exception = e
                    if "database is locked" in str(e) and attempt < max_attempts - 1:
                        sleep_time = backoff_factor ** attempt
                        logger.warning(
                            f"Database locked, retrying in {sleep_time:.2f}s "
                            f"(attempt {attempt + 1}/{max_attempts})"
                        )
                        time.sleep(sleep_time)
                        continue
                    raise StoreError(f"Database unavailable: {e}") from e

            raise StoreError(f"Database unavailable: {last_exception}")

        return wrapper
    return decorator
