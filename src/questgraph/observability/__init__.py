"""Observability module for questgraph.

Provides structured logging.
"""

from questgraph.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
]
