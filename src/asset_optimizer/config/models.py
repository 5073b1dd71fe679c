"""Configuration data models.

This module defines the immutable dataclasses the pipeline runs on. They
are built once per run by the loader and then only read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


def normalize_extension(ext: str) -> str:
    """Return ``ext`` lowercased with exactly one leading dot."""
    ext = ext.strip().lower()
    if not ext:
        return ext
    return ext if ext.startswith(".") else f".{ext}"


def normalize_extensions(values) -> frozenset[str]:
    """Normalize an iterable of extensions into a frozenset."""
    return frozenset(normalize_extension(v) for v in values if v and v.strip())


@dataclass(frozen=True)
class FolderPolicy:
    """Include/exclude rules applied to folder basenames.

    A non-empty ``include`` is an allow-list and makes ``exclude``
    irrelevant. Otherwise every folder not in ``exclude`` is allowed.
    """

    include: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()


@dataclass(frozen=True)
class FilePolicy:
    """Include/exclude rules applied to file basenames and extensions.

    Exclusions (by name or extension) always win over the include list.
    """

    include: frozenset[str] = frozenset()
    exclude: frozenset[str] = frozenset()
    excluded_extensions: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ExtensionClasses:
    """Extension sets that drive file classification."""

    optimizable: frozenset[str] = frozenset({".jpg", ".jpeg", ".png", ".webp"})
    transcodable: frozenset[str] = frozenset({".mp4", ".webm", ".mov"})
    copy_only: frozenset[str] = frozenset({".svg", ".gif", ".ico"})


@dataclass(frozen=True)
class ImageQuality:
    """Per-format encoder settings."""

    jpeg: int = 80  # 0-100
    png: int = 9  # zlib compression level 0-9
    webp: int = 80  # 0-100

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0 <= self.jpeg <= 100:
            raise ValueError(f"jpeg quality must be 0-100, got {self.jpeg}")
        if not 0 <= self.png <= 9:
            raise ValueError(f"png compression level must be 0-9, got {self.png}")
        if not 0 <= self.webp <= 100:
            raise ValueError(f"webp quality must be 0-100, got {self.webp}")


@dataclass(frozen=True)
class ImageSettings:
    """Settings for optimizable images."""

    enable_resize: bool = True
    max_width: int = 1920
    quality: ImageQuality = field(default_factory=ImageQuality)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_width < 1:
            raise ValueError(f"max_width must be positive, got {self.max_width}")


@dataclass(frozen=True)
class VideoQuality:
    """Encoder rate control settings."""

    crf: int = 23
    preset: str = "medium"
    bitrate: str | None = None  # e.g. "2M"; ignored for VP9


@dataclass(frozen=True)
class VideoFormats:
    """Output container and codec used when the source format is not kept."""

    output_format: str = "mp4"
    codec: str = "libx264"


@dataclass(frozen=True)
class VideoSettings:
    """Settings for transcodable videos."""

    enable_processing: bool = True
    enable_resize: bool = True
    preserve_format: bool = True
    max_width: int = 1920
    max_height: int = 1080
    quality: VideoQuality = field(default_factory=VideoQuality)
    formats: VideoFormats = field(default_factory=VideoFormats)

    # Seconds before a running ffmpeg is killed (None = no limit)
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError(
                "max_width and max_height must be positive, "
                f"got {self.max_width}x{self.max_height}"
            )
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )


@dataclass(frozen=True)
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass(frozen=True)
class LoggingConfig:
    """Configuration for logging output."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass(frozen=True)
class PolicyConfig:
    """Complete, immutable configuration for one pipeline run."""

    folders: FolderPolicy = field(default_factory=FolderPolicy)
    files: FilePolicy = field(default_factory=FilePolicy)
    blur_folders: FolderPolicy = field(default_factory=FolderPolicy)
    blur_files: FilePolicy = field(default_factory=FilePolicy)
    extensions: ExtensionClasses = field(default_factory=ExtensionClasses)
    image: ImageSettings = field(default_factory=ImageSettings)
    video: VideoSettings = field(default_factory=VideoSettings)
    blur_strength: float = 10.0

    # Ambient settings
    workers: int = 1
    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.blur_strength <= 0:
            raise ValueError(
                f"blur_strength must be positive, got {self.blur_strength}"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
