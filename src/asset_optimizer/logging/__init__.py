"""Logging setup for asset-optimizer.

Text or JSON output, optional rotating log file, and per-file worker tags
for runs that use the parallel file pool.
"""

from asset_optimizer.logging.config import configure_logging
from asset_optimizer.logging.context import (
    WorkerContextFilter,
    file_context,
    get_file_context,
)
from asset_optimizer.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "WorkerContextFilter",
    "configure_logging",
    "file_context",
    "get_file_context",
]
