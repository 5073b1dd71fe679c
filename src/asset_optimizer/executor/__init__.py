"""Executors that write output assets.

- PillowImageProcessor: resize, blur and re-encode images
- FFmpegTranscoder: transcode videos with ffmpeg
- copy_file: atomic raw copy
"""

from asset_optimizer.executor.copy import copy_file, ensure_directory
from asset_optimizer.executor.image import PillowImageProcessor
from asset_optimizer.executor.interface import (
    EncodeSettings,
    ImageMetadata,
    ImageProcessor,
    ImageTransform,
    TranscodeOptions,
    VideoTranscoder,
    get_tool_path,
    require_tool,
)
from asset_optimizer.executor.transcode import FFmpegTranscoder, build_ffmpeg_command

__all__ = [
    "EncodeSettings",
    "FFmpegTranscoder",
    "ImageMetadata",
    "ImageProcessor",
    "ImageTransform",
    "PillowImageProcessor",
    "TranscodeOptions",
    "VideoTranscoder",
    "build_ffmpeg_command",
    "copy_file",
    "ensure_directory",
    "get_tool_path",
    "require_tool",
]
