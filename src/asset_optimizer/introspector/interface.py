"""VideoIntrospector interface for video metadata extraction."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from asset_optimizer.errors import MediaIntrospectionError

__all__ = ["MediaIntrospectionError", "VideoIntrospector", "VideoProbe"]


@dataclass(frozen=True)
class VideoProbe:
    """Dimensions of the primary video stream of a file."""

    width: int | None
    height: int | None
    has_video_stream: bool
    codec: str | None = None


class VideoIntrospector(Protocol):
    """Protocol for video probe implementations."""

    def probe(self, path: Path) -> VideoProbe:
        """Read video stream metadata.

        Args:
            path: Path to the video file.

        Returns:
            VideoProbe for the first video stream.

        Raises:
            MediaIntrospectionError: If the file cannot be probed.
        """
        ...
