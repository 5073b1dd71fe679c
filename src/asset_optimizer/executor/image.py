"""Pillow-based image resize, blur and re-encode."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PIL import Image, ImageFilter

from asset_optimizer.errors import ImageTransformError
from asset_optimizer.executor.copy import (
    commit_output,
    discard_output,
    temp_output_path,
)
from asset_optimizer.executor.interface import (
    EncodeSettings,
    ImageMetadata,
    ImageTransform,
)

logger = logging.getLogger(__name__)

# Errors Pillow raises for unreadable, truncated or oversized images.
# UnidentifiedImageError is an OSError.
_PIL_ERRORS = (OSError, ValueError, SyntaxError, Image.DecompressionBombError)

# Camera JPEGs with an embedded preview frame open as MPO; only the primary
# frame is kept and written as a plain JPEG.
_SAVE_FORMATS = {"MPO": "JPEG"}


def encoder_options(image_format: str, encode: EncodeSettings) -> dict[str, Any]:
    """Pillow save() keyword arguments for ``image_format``.

    Only the setting for the real output encoder applies; formats without
    a quality knob are saved with Pillow's defaults.
    """
    fmt = image_format.upper()
    fmt = _SAVE_FORMATS.get(fmt, fmt)
    if fmt == "JPEG":
        return {"quality": encode.jpeg}
    if fmt == "PNG":
        return {"compress_level": encode.png}
    if fmt == "WEBP":
        return {"quality": encode.webp}
    return {}


def _filterable(image: Image.Image) -> Image.Image:
    # GaussianBlur refuses palette and bilevel images
    if image.mode == "P":
        return image.convert("RGBA" if "transparency" in image.info else "RGB")
    if image.mode == "1":
        return image.convert("L")
    return image


class PillowImageProcessor:
    """ImageProcessor backed by Pillow.

    The output keeps the source's format (a PNG stays a PNG). Resizing
    keeps the aspect ratio with LANCZOS resampling, and the blur is a
    Gaussian blur with the configured strength as its radius.
    """

    def read_metadata(self, path: Path) -> ImageMetadata:
        try:
            with Image.open(path) as image:
                width, height = image.size
                return ImageMetadata(width=width, height=height, format=image.format)
        except _PIL_ERRORS as e:
            raise ImageTransformError(f"Cannot read image {path}: {e}") from e

    def transform(self, source: Path, target: Path, transform: ImageTransform) -> None:
        temp_path = temp_output_path(target)
        try:
            with Image.open(source) as original:
                if original.format is None:
                    raise ImageTransformError(f"Unknown image format: {source}")
                image_format = _SAVE_FORMATS.get(original.format, original.format)
                original.load()
                image: Image.Image = original

                if transform.resize_to_width:
                    width, height = image.size
                    scale = transform.resize_to_width / width
                    new_height = max(1, round(height * scale))
                    image = image.resize(
                        (transform.resize_to_width, new_height),
                        Image.Resampling.LANCZOS,
                    )

                if transform.blur:
                    image = _filterable(image).filter(
                        ImageFilter.GaussianBlur(radius=transform.blur)
                    )

                image.save(
                    temp_path,
                    format=image_format,
                    **encoder_options(image_format, transform.encode),
                )
            commit_output(temp_path, target)
        except ImageTransformError:
            discard_output(temp_path)
            raise
        except _PIL_ERRORS as e:
            discard_output(temp_path)
            raise ImageTransformError(f"Cannot transform image {source}: {e}") from e

        logger.debug("Encoded %s as %s", target, image_format)
