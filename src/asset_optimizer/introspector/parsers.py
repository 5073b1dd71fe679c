"""Pure parsing functions for ffprobe JSON output.

No I/O, no side effects.
"""

from __future__ import annotations

import logging

from asset_optimizer.introspector.interface import VideoProbe

logger = logging.getLogger(__name__)


def validate_dimension(value: object, field_name: str, file_path: str | None = None):
    """Return ``value`` if it is a positive int, None otherwise.

    Args:
        value: Raw value from ffprobe JSON.
        field_name: Field name for the warning message.
        file_path: Optional file path for context in warning messages.
    """
    if value is None:
        return None
    context = f" in {file_path}" if file_path else ""
    if isinstance(value, bool) or not isinstance(value, int):
        logger.warning(
            "Expected int for %s%s, got %s", field_name, context, type(value).__name__
        )
        return None
    if value <= 0:
        logger.warning("Invalid %s %d%s", field_name, value, context)
        return None
    return value


def find_video_stream(streams: list[dict]) -> dict | None:
    """Return the first stream whose codec_type is video.

    Attached pictures (cover art) are ignored.
    """
    for stream in streams:
        if stream.get("codec_type") != "video":
            continue
        if stream.get("disposition", {}).get("attached_pic"):
            continue
        return stream
    return None


def parse_ffprobe_output(data: dict, file_path: str | None = None) -> VideoProbe:
    """Parse ffprobe ``-show_streams`` JSON into a VideoProbe.

    Args:
        data: Parsed ffprobe JSON.
        file_path: Optional file path for log context.

    Returns:
        VideoProbe; ``has_video_stream`` is False when no usable video
        stream exists.
    """
    stream = find_video_stream(data.get("streams") or [])
    if stream is None:
        return VideoProbe(width=None, height=None, has_video_stream=False)

    return VideoProbe(
        width=validate_dimension(stream.get("width"), "width", file_path),
        height=validate_dimension(stream.get("height"), "height", file_path),
        has_video_stream=True,
        codec=stream.get("codec_name"),
    )
