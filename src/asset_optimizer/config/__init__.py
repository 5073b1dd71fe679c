"""Configuration management for asset-optimizer.

Configuration is read once per run from a JSON or YAML document and
turned into an immutable PolicyConfig that is passed explicitly to the
tree walker.
"""

from asset_optimizer.config.loader import (
    get_default_config_path,
    load_config,
    load_config_from_dict,
)
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
    normalize_extension,
)

__all__ = [
    # Models
    "ExtensionClasses",
    "FilePolicy",
    "FolderPolicy",
    "ImageQuality",
    "ImageSettings",
    "LoggingConfig",
    "PolicyConfig",
    "ToolPathsConfig",
    "VideoFormats",
    "VideoQuality",
    "VideoSettings",
    "normalize_extension",
    # Loader
    "get_default_config_path",
    "load_config",
    "load_config_from_dict",
]
