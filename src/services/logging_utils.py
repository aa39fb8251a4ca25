"""Service layer logging utilities.

Provides structured logging functions for service operations, so every
service logs with the same message shape and context fields.

Usage:
    from src.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="delete_ingredient",
        outcome="success",
        ingredient_id=7,
        price_points_removed=3,
    )
"""

import logging
from typing import Any

LOGGER_PREFIX = "pastry_cost.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger named ``pastry_cost.services.<module>``

    Example:
        >>> get_service_logger("src.services.food_cost_service").name
        'pastry_cost.services.food_cost_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The message is ``"<operation>: <outcome>"``; context fields travel in
    ``extra`` for structured handlers.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "calculate_food_cost")
        outcome: Outcome description (e.g., "success", "complete_with_warnings")
        level: Log level (default: INFO). Use DEBUG for per-line detail.
        **context: Additional context fields (entity IDs, counts, etc.)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
