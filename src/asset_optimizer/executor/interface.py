"""Executor protocols, transform requests and tool resolution.

The tree walker only talks to the media tools through the protocols in
this module, so tests can swap in recording fakes and a run without
ffmpeg simply has no video capability.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from asset_optimizer.errors import ToolNotAvailableError

# =============================================================================
# Transform requests
# =============================================================================


@dataclass(frozen=True)
class EncodeSettings:
    """Quality settings for every supported image encoder.

    All three are always supplied; the encoder for the image's real
    format picks the one that applies to it.
    """

    jpeg: int
    png: int
    webp: int


@dataclass(frozen=True)
class ImageMetadata:
    """Header information read before transforming an image."""

    width: int
    height: int
    format: str | None


@dataclass(frozen=True)
class ImageTransform:
    """One image re-encode: optional resize and blur, then encode."""

    encode: EncodeSettings
    resize_to_width: int | None = None
    blur: float | None = None


@dataclass(frozen=True)
class TranscodeOptions:
    """Arguments for one ffmpeg video transcode."""

    codec: str
    crf: int
    preset: str
    bitrate: str | None = None
    resize_to: tuple[int, int] | None = None
    row_multithread: bool = False
    audio_codec: str = "aac"


# =============================================================================
# Protocols
# =============================================================================


class ImageProcessor(Protocol):
    """Resize, blur and re-encode raster images."""

    def read_metadata(self, path: Path) -> ImageMetadata:
        """Raises ImageTransformError if the header cannot be read."""
        ...

    def transform(self, source: Path, target: Path, transform: ImageTransform) -> None:
        """Write the transformed image to ``target``.

        Raises ImageTransformError on failure; ``target`` is never left
        partially written.
        """
        ...


class VideoTranscoder(Protocol):
    """Transcode a video file into a new file."""

    def transcode(self, source: Path, target: Path, options: TranscodeOptions) -> None:
        """Raises TranscodeError on failure; ``target`` is never left
        partially written.
        """
        ...


# =============================================================================
# Tool Resolution
# =============================================================================


def get_tool_path(tool_name: str, configured: Path | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    A configured path wins when it exists; otherwise PATH is searched.

    Args:
        tool_name: Executable name (ffmpeg, ffprobe).
        configured: Path from config file or environment.

    Returns:
        Path to the tool or None.
    """
    if configured is not None and Path(configured).exists():
        return Path(configured)
    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    Raises:
        ToolNotAvailableError: If the tool is not installed.
    """
    path = get_tool_path(tool_name, configured)
    if path is None:
        raise ToolNotAvailableError(
            f"Required tool not available: {tool_name}. "
            "Install ffmpeg or set ASSET_OPTIMIZER_"
            f"{tool_name.upper()}_PATH / tools.{tool_name} in the config file."
        )
    return path

