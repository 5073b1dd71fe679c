"""Decide what transform to apply to an image or video.

Pure functions: they turn file metadata plus settings into the request
objects the executors consume. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from asset_optimizer.config.models import ImageSettings, VideoSettings
from asset_optimizer.executor.interface import (
    EncodeSettings,
    ImageMetadata,
    ImageTransform,
    TranscodeOptions,
)
from asset_optimizer.executor.transcode import H264_ENCODER, VP9_ENCODER, is_vp9
from asset_optimizer.introspector.interface import VideoProbe

# Codec chosen per extension when the source format is kept
PRESERVED_FORMAT_CODECS: dict[str, str] = {
    ".webm": VP9_ENCODER,
    ".mp4": H264_ENCODER,
}

# Audio encoder matching each output container
AUDIO_CODECS: dict[str, str] = {
    ".webm": "libopus",
}
DEFAULT_AUDIO_CODEC = "aac"


# =============================================================================
# Images
# =============================================================================


def image_needs_resize(metadata: ImageMetadata, settings: ImageSettings) -> bool:
    """True if the image is at least ``max_width`` wide.

    The threshold is inclusive: an image exactly ``max_width`` wide is
    still re-sampled to ``max_width``.
    """
    return settings.enable_resize and metadata.width >= settings.max_width


def plan_image_transform(
    metadata: ImageMetadata,
    settings: ImageSettings,
    blur_strength: float,
    should_blur: bool,
) -> ImageTransform:
    """Build the ImageTransform for one image."""
    return ImageTransform(
        encode=EncodeSettings(
            jpeg=settings.quality.jpeg,
            png=settings.quality.png,
            webp=settings.quality.webp,
        ),
        resize_to_width=(
            settings.max_width if image_needs_resize(metadata, settings) else None
        ),
        blur=blur_strength if should_blur else None,
    )


# =============================================================================
# Videos
# =============================================================================


@dataclass(frozen=True)
class VideoPlan:
    """Where a video is written and how it is encoded."""

    target: Path
    options: TranscodeOptions


def select_output(nominal_target: Path, settings: VideoSettings) -> tuple[Path, str]:
    """Choose the output path and encoder.

    When the source format is kept, the codec follows the extension
    (``.webm`` -> VP9, ``.mp4`` -> H.264, anything else -> configured
    codec). Otherwise the output is renamed to the configured format and
    encoded with the configured codec.

    Returns:
        Tuple of (output path, codec).
    """
    if settings.preserve_format:
        ext = nominal_target.suffix.lower()
        codec = PRESERVED_FORMAT_CODECS.get(ext, settings.formats.codec)
        return nominal_target, codec

    target = nominal_target.with_suffix(f".{settings.formats.output_format}")
    return target, settings.formats.codec


def compute_video_resize(
    probe: VideoProbe, settings: VideoSettings
) -> tuple[int, int] | None:
    """Target dimensions when either side exceeds its limit, else None.

    The frame is scaled to fit inside max_width x max_height with its
    aspect ratio kept and both sides rounded down to even numbers, which
    yuv420p encoders require.
    """
    if not settings.enable_resize or not probe.width or not probe.height:
        return None
    if probe.width <= settings.max_width and probe.height <= settings.max_height:
        return None

    scale = min(settings.max_width / probe.width, settings.max_height / probe.height)
    width = max(2, int(probe.width * scale) // 2 * 2)
    height = max(2, int(probe.height * scale) // 2 * 2)
    return width, height


def plan_video_transcode(
    nominal_target: Path, probe: VideoProbe, settings: VideoSettings
) -> VideoPlan:
    """Build the VideoPlan for one video that has a video stream."""
    target, codec = select_output(nominal_target, settings)
    vp9 = is_vp9(codec)
    options = TranscodeOptions(
        codec=codec,
        crf=settings.quality.crf,
        preset=settings.quality.preset,
        bitrate=None if vp9 else settings.quality.bitrate,
        resize_to=compute_video_resize(probe, settings),
        row_multithread=vp9,
        audio_codec=AUDIO_CODECS.get(target.suffix.lower(), DEFAULT_AUDIO_CODEC),
    )
    return VideoPlan(target=target, options=options)
