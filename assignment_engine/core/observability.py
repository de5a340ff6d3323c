"""
Observability Infrastructure

Structured logging and operation metrics for the assignment engine.
"""

import functools
import logging
import sys
import time
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from prometheus_client import Counter, Histogram

from ..domain.shared.exceptions import DomainError
from .config import Settings, settings

F = TypeVar("F", bound=Callable[..., Any])

# Prometheus metrics
ENGINE_OPERATIONS = Counter(
    "assignment_engine_operations_total",
    "Total assignment engine operations",
    ["operation", "status"],
)

ENGINE_OPERATION_DURATION = Histogram(
    "assignment_engine_operation_duration_seconds",
    "Assignment engine operation duration",
    ["operation"],
)

NOTIFICATION_FAILURES = Counter(
    "assignment_engine_notification_failures_total",
    "Notification sink calls that raised",
    ["kind"],
)


def setup_structured_logging(config: Settings | None = None) -> None:
    """Configure structured logging with JSON or console output."""
    config = config or settings
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if config.LOG_FORMAT == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=config.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_error_with_context(
    error: Exception,
    operation: str,
    context: dict[str, Any] | None = None,
    severity: str = "error",
    include_traceback: bool = True,
) -> None:
    """Log errors with structured context."""
    logger = get_logger("error_tracking")

    error_data = {
        "operation": operation,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "severity": severity,
    }

    if getattr(error, "details", None):
        error_data["error_details"] = error.details

    if context:
        error_data.update(context)

    if severity == "error":
        logger.error("Error occurred", **error_data, exc_info=include_traceback)
    elif severity == "warning":
        logger.warning("Warning occurred", **error_data)
    else:
        logger.info("Issue occurred", **error_data)


def metrics_enabled(config: Settings | None = None) -> bool:
    return (config or settings).ENABLE_METRICS


def _bound_config(args: tuple) -> Settings | None:
    config = getattr(args[0], "config", None) if args else None
    return config if isinstance(config, Settings) else None


def monitor_operation(operation: str):
    """
    Decorator recording metrics and logs for a synchronous engine operation.

    Metrics follow ``ENABLE_METRICS`` of the bound instance's ``config``
    when it has one, and of the module settings otherwise. Logging is not
    affected.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            record = metrics_enabled(_bound_config(args))
            start_time = time.perf_counter()

            try:
                result = func(*args, **kwargs)
            except DomainError as e:
                if record:
                    ENGINE_OPERATIONS.labels(
                        operation=operation, status="rejected"
                    ).inc()
                logger.warning(
                    "Operation rejected",
                    operation=operation,
                    error_kind=e.error_type.value,
                    error=e.message,
                )
                raise
            except Exception as e:
                if record:
                    ENGINE_OPERATIONS.labels(operation=operation, status="error").inc()
                log_error_with_context(e, operation)
                raise

            duration = time.perf_counter() - start_time
            if record:
                ENGINE_OPERATIONS.labels(operation=operation, status="success").inc()
                ENGINE_OPERATION_DURATION.labels(operation=operation).observe(duration)
            logger.debug(
                "Operation completed",
                operation=operation,
                duration_seconds=duration,
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
