"""Extension-driven file classification."""

from __future__ import annotations

from enum import Enum

from asset_optimizer.config.models import ExtensionClasses, normalize_extension


class FileClass(Enum):
    """Handling strategy for a file."""

    OPTIMIZABLE_IMAGE = "optimizable-image"
    TRANSCODABLE_VIDEO = "transcodable-video"
    # Explicitly configured as "copy without modification" (e.g. vector art)
    COPY_ONLY = "copy-only"
    # Not configured anywhere; still copied as-is
    OTHER = "other"


class FileClassifier:
    """Map file extensions to a FileClass.

    Priority is optimizable, then transcodable, then copy-only; anything
    else is OTHER. Without video capability the transcodable set is never
    consulted, so videos fall through to copy-only or OTHER.
    """

    def __init__(self, extensions: ExtensionClasses, video_capable: bool = True):
        self.extensions = extensions
        self.video_capable = video_capable

    def classify(self, ext: str) -> FileClass:
        ext = normalize_extension(ext)
        if ext in self.extensions.optimizable:
            return FileClass.OPTIMIZABLE_IMAGE
        if self.video_capable and ext in self.extensions.transcodable:
            return FileClass.TRANSCODABLE_VIDEO
        if ext in self.extensions.copy_only:
            return FileClass.COPY_ONLY
        return FileClass.OTHER
