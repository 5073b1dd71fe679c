"""Configuration file loading and validation.

The configuration document is JSON (``config.json``, the default) or YAML.
It is validated with Pydantic models and converted into the frozen
PolicyConfig dataclass tree used by the rest of the pipeline.

Configuration is resolved with the following precedence (highest first):
1. CLI arguments (passed directly to functions)
2. Environment variables (ASSET_OPTIMIZER_*)
3. Config file
4. Default values

Environment variables:
- ASSET_OPTIMIZER_CONFIG: Path to the config file
- ASSET_OPTIMIZER_FFMPEG_PATH: Path to ffmpeg executable
- ASSET_OPTIMIZER_FFPROBE_PATH: Path to ffprobe executable
- ASSET_OPTIMIZER_WORKERS: Number of parallel file workers
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from asset_optimizer.config.models import (
    ExtensionClasses,
    FilePolicy,
    FolderPolicy,
    ImageQuality,
    ImageSettings,
    LoggingConfig,
    PolicyConfig,
    ToolPathsConfig,
    VideoFormats,
    VideoQuality,
    VideoSettings,
    normalize_extensions,
)
from asset_optimizer.errors import ConfigLoadError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.json"


class _ConfigModel(BaseModel):
    """Base model: camelCase keys, unknown keys rejected."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel)


class IncludeExcludeModel(_ConfigModel):
    """Pydantic model for an include/exclude pair."""

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class ExtensionsModel(_ConfigModel):
    """Pydantic model for extension classes."""

    processable: list[str] = Field(
        default_factory=lambda: sorted(ExtensionClasses().optimizable)
    )
    video_processable: list[str] = Field(
        default_factory=lambda: sorted(ExtensionClasses().transcodable)
    )
    copy_only: list[str] = Field(
        default_factory=lambda: sorted(ExtensionClasses().copy_only)
    )
    exclude: list[str] = Field(default_factory=list)


class ImageQualityModel(_ConfigModel):
    """Pydantic model for image encoder settings."""

    jpeg: int = Field(default=80, ge=0, le=100)
    png: int = Field(default=9, ge=0, le=9)
    webp: int = Field(default=80, ge=0, le=100)


class ImageModel(_ConfigModel):
    """Pydantic model for image settings."""

    enable_resize: bool = True
    max_width: int = Field(default=1920, ge=1)
    quality: ImageQualityModel = Field(default_factory=ImageQualityModel)


class VideoQualityModel(_ConfigModel):
    """Pydantic model for video rate control."""

    crf: int = Field(default=23, ge=0, le=63)
    preset: str = "medium"
    bitrate: str | None = None


class VideoFormatsModel(_ConfigModel):
    """Pydantic model for the conversion target."""

    output_format: str = "mp4"
    codec: str = "libx264"


class VideoModel(_ConfigModel):
    """Pydantic model for video settings."""

    enable_processing: bool = True
    enable_resize: bool = True
    preserve_format: bool = True
    max_width: int = Field(default=1920, ge=1)
    max_height: int = Field(default=1080, ge=1)
    quality: VideoQualityModel = Field(default_factory=VideoQualityModel)
    formats: VideoFormatsModel = Field(default_factory=VideoFormatsModel)
    timeout_seconds: float | None = Field(default=None, gt=0)


class BlurModel(_ConfigModel):
    """Pydantic model for blur settings."""

    strength: float = Field(default=10.0, gt=0)
    folders: IncludeExcludeModel = Field(default_factory=IncludeExcludeModel)
    files: IncludeExcludeModel = Field(default_factory=IncludeExcludeModel)


class ToolsModel(_ConfigModel):
    """Pydantic model for external tool paths."""

    ffmpeg: str | None = None
    ffprobe: str | None = None


class LoggingModel(_ConfigModel):
    """Pydantic model for logging settings."""

    level: str = "info"
    file: str | None = None
    format: str = "text"


class ConfigModel(_ConfigModel):
    """Pydantic model for the whole configuration document."""

    folders: IncludeExcludeModel = Field(default_factory=IncludeExcludeModel)
    files: IncludeExcludeModel = Field(default_factory=IncludeExcludeModel)
    extensions: ExtensionsModel = Field(default_factory=ExtensionsModel)
    image: ImageModel = Field(default_factory=ImageModel)
    video: VideoModel = Field(default_factory=VideoModel)
    blur: BlurModel = Field(default_factory=BlurModel)
    workers: int = Field(default=1, ge=1)
    tools: ToolsModel = Field(default_factory=ToolsModel)
    logging: LoggingModel = Field(default_factory=LoggingModel)


def get_default_config_path(root: Path) -> Path:
    """Get the config file path for a working tree.

    Can be overridden by ASSET_OPTIMIZER_CONFIG environment variable.

    Args:
        root: Working tree containing the ``assets`` directory.

    Returns:
        Path to config file.
    """
    env_path = os.environ.get("ASSET_OPTIMIZER_CONFIG")
    if env_path:
        return Path(env_path)
    return root / DEFAULT_CONFIG_NAME


def _get_env_path(var_name: str) -> Path | None:
    """Get a path from environment variable.

    Args:
        var_name: Environment variable name.

    Returns:
        Path if set and valid, None otherwise.
    """
    value = os.environ.get(var_name)
    if value:
        path = Path(value)
        if path.exists():
            return path
        logger.warning(
            "Environment variable %s points to non-existent path: %s",
            var_name,
            value,
        )
    return None


def _get_env_int(var_name: str, default: int) -> int:
    """Get an integer from environment variable.

    Args:
        var_name: Environment variable name.
        default: Default value if not set.

    Returns:
        Integer value.
    """
    value = os.environ.get(var_name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid integer value for %s: %s", var_name, value)
        return default


def _convert_folder_policy(model: IncludeExcludeModel) -> FolderPolicy:
    return FolderPolicy(
        include=frozenset(model.include),
        exclude=frozenset(model.exclude),
    )


def _convert_file_policy(
    model: IncludeExcludeModel, excluded_extensions: list[str] | None = None
) -> FilePolicy:
    return FilePolicy(
        include=frozenset(model.include),
        exclude=frozenset(model.exclude),
        excluded_extensions=normalize_extensions(excluded_extensions or []),
    )


def _convert_extensions(model: ExtensionsModel) -> ExtensionClasses:
    return ExtensionClasses(
        optimizable=normalize_extensions(model.processable),
        transcodable=normalize_extensions(model.video_processable),
        copy_only=normalize_extensions(model.copy_only),
    )


def _convert_image(model: ImageModel) -> ImageSettings:
    return ImageSettings(
        enable_resize=model.enable_resize,
        max_width=model.max_width,
        quality=ImageQuality(
            jpeg=model.quality.jpeg,
            png=model.quality.png,
            webp=model.quality.webp,
        ),
    )


def _convert_video(model: VideoModel) -> VideoSettings:
    return VideoSettings(
        enable_processing=model.enable_processing,
        enable_resize=model.enable_resize,
        preserve_format=model.preserve_format,
        max_width=model.max_width,
        max_height=model.max_height,
        quality=VideoQuality(
            crf=model.quality.crf,
            preset=model.quality.preset,
            bitrate=model.quality.bitrate or None,
        ),
        formats=VideoFormats(
            output_format=model.formats.output_format.lstrip(".").lower(),
            codec=model.formats.codec,
        ),
        timeout_seconds=model.timeout_seconds,
    )


def _convert_tools(model: ToolsModel) -> ToolPathsConfig:
    return ToolPathsConfig(
        ffmpeg=(
            _get_env_path("ASSET_OPTIMIZER_FFMPEG_PATH")
            or (Path(model.ffmpeg).expanduser() if model.ffmpeg else None)
        ),
        ffprobe=(
            _get_env_path("ASSET_OPTIMIZER_FFPROBE_PATH")
            or (Path(model.ffprobe).expanduser() if model.ffprobe else None)
        ),
    )


def _convert_to_policy_config(model: ConfigModel) -> PolicyConfig:
    return PolicyConfig(
        folders=_convert_folder_policy(model.folders),
        files=_convert_file_policy(model.files, model.extensions.exclude),
        blur_folders=_convert_folder_policy(model.blur.folders),
        blur_files=_convert_file_policy(model.blur.files),
        extensions=_convert_extensions(model.extensions),
        image=_convert_image(model.image),
        video=_convert_video(model.video),
        blur_strength=model.blur.strength,
        workers=_get_env_int("ASSET_OPTIMIZER_WORKERS", model.workers),
        tools=_convert_tools(model.tools),
        logging=LoggingConfig(
            level=model.logging.level,
            file=Path(model.logging.file).expanduser() if model.logging.file else None,
            format=model.logging.format,
        ),
    )


def _format_validation_error(error: Exception) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    if isinstance(error, ValidationError):
        errors = error.errors()
        if errors:
            first_error = errors[0]
            loc = ".".join(str(x) for x in first_error.get("loc", []))
            msg = first_error.get("msg", str(error))
            if loc:
                return f"Config validation failed: {loc}: {msg}"
            return f"Config validation failed: {msg}"

    return f"Config validation failed: {error}"


def load_config_from_dict(data: dict[str, Any]) -> PolicyConfig:
    """Load and validate configuration from a dictionary.

    Args:
        data: Dictionary with camelCase configuration keys.

    Returns:
        Validated PolicyConfig.

    Raises:
        ConfigLoadError: If the data is invalid.
    """
    try:
        model = ConfigModel.model_validate(data)
    except ValidationError as e:
        raise ConfigLoadError(_format_validation_error(e)) from e

    try:
        return _convert_to_policy_config(model)
    except ValueError as e:
        raise ConfigLoadError(_format_validation_error(e)) from e


def _parse_document(path: Path, content: str) -> Any:
    """Parse JSON for ``.json`` files and YAML for everything else."""
    if path.suffix.lower() == ".json":
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Invalid JSON syntax in {path}: {e}") from e
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML syntax in {path}: {e}") from e


def load_config(path: Path) -> PolicyConfig:
    """Load and validate configuration from a file.

    Args:
        path: Path to a JSON or YAML config file.

    Returns:
        Validated PolicyConfig.

    Raises:
        ConfigLoadError: If the file is missing, unreadable or invalid.
    """
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f"Cannot read config file {path}: {e}") from e

    data = _parse_document(path, content)

    if data is None:
        raise ConfigLoadError(f"Config file is empty: {path}")

    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config file must contain a mapping: {path}")

    config = load_config_from_dict(data)
    logger.debug("Loaded config from %s", path)
    return config
