"""Raw file copy and atomic output helpers.

Every writer in the pipeline produces its output under a hidden temp name
in the target directory and renames it into place, so an interrupted run
never leaves a truncated asset behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from pathlib import Path

from asset_optimizer.errors import CopyError

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".partial_"


def temp_output_path(target: Path) -> Path:
    """Unique temp path next to ``target`` that keeps its extension.

    ffmpeg picks the muxer from the extension, so only a prefix is added.
    Two writers aiming at the same target never share a temp file.
    """
    return target.with_name(f"{TEMP_PREFIX}{uuid.uuid4().hex[:8]}_{target.name}")


def commit_output(temp_path: Path, target: Path) -> None:
    """Atomically move a finished temp file to its final name."""
    os.replace(temp_path, target)


def discard_output(temp_path: Path) -> None:
    """Remove a temp file left by a failed write."""
    if temp_path.exists():
        try:
            temp_path.unlink()
            logger.debug("Cleaned up partial output: %s", temp_path)
        except OSError as e:
            logger.warning("Could not clean up partial output %s: %s", temp_path, e)


def copy_file(source: Path, target: Path) -> None:
    """Copy ``source`` to ``target`` byte for byte, keeping timestamps.

    Raises:
        CopyError: If the file cannot be read or written.
    """
    temp_path = temp_output_path(target)
    try:
        shutil.copyfile(source, temp_path)
        shutil.copystat(source, temp_path)
        commit_output(temp_path, target)
    except OSError as e:
        discard_output(temp_path)
        raise CopyError(f"Cannot copy {source} to {target}: {e}") from e


def ensure_directory(path: Path) -> bool:
    """Create ``path`` (and parents) if missing.

    Returns:
        True if the directory was created by this call.
    """
    if path.is_dir():
        return False
    path.mkdir(parents=True, exist_ok=True)
    return True
