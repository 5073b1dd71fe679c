"""Exception hierarchy for asset-optimizer.

Only ConfigLoadError is fatal. Every other error is raised by a single
file operation and resolved by the tree walker into a terminal outcome
for that file (skip, fallback copy, or a logged failure).
"""


class AssetOptimizerError(Exception):
    """Base class for all asset-optimizer errors."""


class ConfigLoadError(AssetOptimizerError):
    """Configuration could not be read or failed validation."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class MediaIntrospectionError(AssetOptimizerError):
    """Raised when video metadata cannot be probed."""


class ImageTransformError(AssetOptimizerError):
    """Raised when an image cannot be resized, blurred or re-encoded."""


class TranscodeError(AssetOptimizerError):
    """Raised when a video transcode fails, times out or produces no output."""


class CopyError(AssetOptimizerError):
    """Raised when a raw file copy fails."""


class ToolNotAvailableError(AssetOptimizerError):
    """Raised when a required external tool (ffmpeg, ffprobe) is missing."""
