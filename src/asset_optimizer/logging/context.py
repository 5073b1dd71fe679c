"""Per-file context for log records emitted from the worker pool.

When files are processed in parallel, log lines from different files
interleave. The walker wraps every file job in ``file_context`` so each
record carries a compact ``[Wnn:Fnnnn]`` tag and the relative path of
the asset being handled.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_worker_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "worker_id", default=None
)
_file_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_id", default=None
)
_asset: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "asset", default=None
)


def get_file_context() -> tuple[str | None, str | None, str | None]:
    """Return the current (worker_id, file_id, asset) triple."""
    return _worker_id.get(), _file_id.get(), _asset.get()


@contextmanager
def file_context(
    worker_id: str | None,
    file_id: str | None,
    asset: str | None = None,
) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with worker and file ids.

    Args:
        worker_id: Logical worker slot (e.g., "01"), None when run inline.
        file_id: Sequential file identifier (e.g., "F0042"), or None.
        asset: Path of the asset relative to the source root.

    Example:
        with file_context("01", "F0001", "gallery/art.jpg"):
            logger.info("Optimized")  # -> "[W01:F0001] ... Optimized"
    """
    tokens = (
        _worker_id.set(worker_id),
        _file_id.set(file_id),
        _asset.set(asset),
    )
    try:
        yield
    finally:
        _asset.reset(tokens[2])
        _file_id.reset(tokens[1])
        _worker_id.reset(tokens[0])


class WorkerContextFilter(logging.Filter):
    """Inject the current file context into every log record.

    Adds ``worker_id``, ``file_id`` and ``asset`` attributes for the JSON
    formatter, plus a ready-made ``worker_tag`` for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        worker_id, file_id, asset = get_file_context()

        record.worker_id = worker_id
        record.file_id = file_id
        record.asset = asset

        if worker_id and file_id:
            record.worker_tag = f"[W{worker_id}:{file_id}] "
        elif worker_id:
            record.worker_tag = f"[W{worker_id}] "
        else:
            record.worker_tag = ""

        return True
