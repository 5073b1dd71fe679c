"""FFprobe-based implementation of the VideoIntrospector protocol."""

import json
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from asset_optimizer.executor.interface import require_tool
from asset_optimizer.introspector.interface import MediaIntrospectionError, VideoProbe
from asset_optimizer.introspector.parsers import parse_ffprobe_output

DEFAULT_PROBE_TIMEOUT = 60.0


class FFprobeIntrospector:
    """Read video stream dimensions with ffprobe."""

    def __init__(
        self,
        ffprobe_path: Path | None = None,
        timeout: float | None = DEFAULT_PROBE_TIMEOUT,
    ) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Configured path to ffprobe; PATH is searched if None.
            timeout: Seconds before a hung ffprobe is abandoned.

        Raises:
            ToolNotAvailableError: If ffprobe cannot be found.
        """
        self._ffprobe_path = require_tool("ffprobe", ffprobe_path)
        self._timeout = timeout

    def probe(self, path: Path) -> VideoProbe:
        """Probe a video file.

        Raises:
            MediaIntrospectionError: If ffprobe fails, times out, or prints
                something that is not JSON.
        """
        if not path.exists():
            raise MediaIntrospectionError(f"File not found: {path}")

        try:
            data = self._run_ffprobe(path)
        except subprocess.CalledProcessError as e:
            raise MediaIntrospectionError(
                f"ffprobe failed for {path}: {(e.stderr or '').strip() or e}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise MediaIntrospectionError(
                f"ffprobe timed out after {self._timeout}s for {path}"
            ) from e
        except json.JSONDecodeError as e:
            raise MediaIntrospectionError(
                f"Invalid ffprobe output for {path}: {e}"
            ) from e
        except OSError as e:
            raise MediaIntrospectionError(f"Cannot run ffprobe for {path}: {e}") from e

        return parse_ffprobe_output(data, str(path))

    def _run_ffprobe(self, path: Path) -> dict:
        result = subprocess.run(  # nosec B603 - ffprobe path is resolved
            [
                str(self._ffprobe_path),
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                str(path),
            ],
            capture_output=True,
            text=True,
            errors="replace",
            check=True,
            timeout=self._timeout,
        )
        return json.loads(result.stdout)
