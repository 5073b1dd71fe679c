"""Stub VideoIntrospector for development and testing."""

from pathlib import Path

from asset_optimizer.introspector.interface import MediaIntrospectionError, VideoProbe


class StubIntrospector:
    """Return canned probe results keyed by file name.

    Files listed in ``failing`` raise MediaIntrospectionError, files in
    ``results`` return their VideoProbe, and everything else reports a
    ``default`` probe (1920x1080 with a video stream).
    """

    def __init__(
        self,
        results: dict[str, VideoProbe] | None = None,
        failing: set[str] | None = None,
        default: VideoProbe | None = None,
    ) -> None:
        self.results = results or {}
        self.failing = failing or set()
        self.default = default or VideoProbe(
            width=1920, height=1080, has_video_stream=True, codec="h264"
        )
        self.probed: list[Path] = []

    def probe(self, path: Path) -> VideoProbe:
        self.probed.append(path)
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")
        if path.name in self.failing:
            raise MediaIntrospectionError(f"Stub probe failure for {path.name}")
        return self.results.get(path.name, self.default)
