# backend/chatline/services/base.py
"""
Base Service Pattern for the chat backend.

Provides common functionality for all service classes including:
- Transaction management
- Logging
- Performance monitoring
"""

import asyncio
from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Iterator, Optional, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import RepositoryException
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _finish_measurement(
    service: Any, operation_name: str, elapsed: float, error_type: Optional[str]
) -> None:
    if elapsed > settings.slow_operation_threshold_seconds:
        service.logger.warning(
            f"Slow operation detected: {operation_name} took {elapsed:.2f}s",
            extra={"operation": operation_name, "elapsed": elapsed},
        )
    prometheus_metrics.record_service_operation(
        service=service.__class__.__name__,
        operation=operation_name,
        duration=elapsed,
        status="error" if error_type else "success",
        error_type=error_type,
    )


class BaseService:
    """
    Base class for all service layer components.

    Provides common patterns for:
    - Database session management
    - Transaction handling
    - Performance monitoring
    """

    def __init__(self, db: Session):
        """
        Initialize base service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Context manager for database transactions.

        Usage:
            with self.transaction():
                # Do multiple operations
                self.db.add(entity)
                # Note: commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Database operation failed: {str(e)}") from e
        except Exception as e:
            self.logger.error(f"Unexpected error in transaction: {str(e)}")
            self.db.rollback()
            raise

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("send_message")
            def send_message(self, ...):
                # Method implementation

        Args:
            operation_name: Name of the operation for metrics

        Returns:
            Decorator function
        """

        def decorator(func: F) -> F:
            if asyncio.iscoroutinefunction(func):

                @wraps(func)
                async def async_wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                    start_time = time.perf_counter()
                    error_type = None
                    try:
                        return await func(self, *args, **kwargs)
                    except Exception as e:
                        error_type = type(e).__name__
                        raise
                    finally:
                        _finish_measurement(
                            self, operation_name, time.perf_counter() - start_time, error_type
                        )

                return cast(F, async_wrapper)

            @wraps(func)
            def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
                start_time = time.perf_counter()
                error_type = None
                try:
                    return func(self, *args, **kwargs)
                except Exception as e:
                    error_type = type(e).__name__
                    raise
                finally:
                    _finish_measurement(
                        self, operation_name, time.perf_counter() - start_time, error_type
                    )

            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Args:
            operation: Operation name
            **context: Additional context to log
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})
