"""Centralized logging infrastructure for the chat backend.

Provides environment-aware logging configured from application settings,
with consistent formatting across modules and a correlation id that ties
together every record emitted while answering one chat turn.

Usage:
    ```python
    from ragchat.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Embedding page processed", extra={"chunks": 40})
    ```
"""

from .config import (
    configure_testing_logging,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
    setup_logging_configuration,
)
from .factory import configure_logging, get_logger

__all__ = [
    "get_logger",
    "configure_logging",
    "configure_testing_logging",
    "get_correlation_id",
    "reset_correlation_id",
    "set_correlation_id",
    "setup_logging_configuration",
]
