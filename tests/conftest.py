"""Shared test fixtures for asset-optimizer."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from PIL import Image

from asset_optimizer.config.models import PolicyConfig


class MediaFactory:
    """Helpers that write and inspect small media files."""

    @staticmethod
    def image(
        path: Path,
        size: tuple[int, int] = (64, 48),
        fmt: str | None = None,
        mode: str = "RGB",
        pattern: bool = True,
    ) -> Path:
        """Write a checkerboard image so that a blur visibly changes pixels.

        Args:
            path: Destination; parent directories are created.
            size: (width, height).
            fmt: Pillow format name; derived from the extension if None.
            mode: Pillow image mode.
            pattern: Draw the checkerboard; large images are left plain.

        Returns:
            The path written.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        image = Image.new("RGB", size, (255, 255, 255))
        if pattern:
            pixels = image.load()
            for x in range(size[0]):
                for y in range(size[1]):
                    if (x // 4 + y // 4) % 2:
                        pixels[x, y] = (0, 0, 0)
        if mode != "RGB":
            image = image.convert(mode)
        image.save(path, format=fmt)
        return path

    @staticmethod
    def file(path: Path, content: bytes = b"data") -> Path:
        """Write an arbitrary file, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    @staticmethod
    def size(path: Path) -> tuple[int, int]:
        with Image.open(path) as image:
            return image.size

    @staticmethod
    def format(path: Path) -> str | None:
        with Image.open(path) as image:
            return image.format

    @staticmethod
    def sharpness(path: Path) -> float:
        """Mean absolute difference between horizontal neighbours.

        A sharp checkerboard scores high; a blurred one scores much lower.
        """
        with Image.open(path) as image:
            gray = image.convert("L")
            width, height = gray.size
            pixels = gray.load()
            total = 0
            for y in range(height):
                for x in range(width - 1):
                    total += abs(pixels[x, y] - pixels[x + 1, y])
            return total / (height * (width - 1))


@pytest.fixture
def media() -> type[MediaFactory]:
    """Return the media file helpers."""
    return MediaFactory


@pytest.fixture
def default_config() -> PolicyConfig:
    """Return a PolicyConfig with every default."""
    return PolicyConfig()


@pytest.fixture
def asset_tree(tmp_path: Path) -> tuple[Path, Path]:
    """Return (source_root, target_root) under a temporary working tree."""
    source = tmp_path / "assets"
    source.mkdir()
    return source, tmp_path / "dist" / "assets"


@pytest.fixture(autouse=True)
def reset_root_logger():
    """Restore root logger handlers after each test.

    configure_logging replaces the root handlers, and CliRunner swaps
    sys.stderr; stale handlers would write to closed streams.
    """
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
