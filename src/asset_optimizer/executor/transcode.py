"""FFmpeg-based video transcoding.

Builds the ffmpeg command line from TranscodeOptions and runs it into a
temp file that is renamed into place only after ffmpeg succeeds and the
output is non-empty.
"""

import logging
import subprocess  # nosec B404 - subprocess is required for FFmpeg invocation
from pathlib import Path

from asset_optimizer.errors import TranscodeError
from asset_optimizer.executor.copy import (
    commit_output,
    discard_output,
    temp_output_path,
)
from asset_optimizer.executor.interface import TranscodeOptions, require_tool

logger = logging.getLogger(__name__)

VP9_ENCODER = "libvpx-vp9"
H264_ENCODER = "libx264"

# Friendly codec names accepted in the config, mapped to ffmpeg encoders
ENCODER_ALIASES: dict[str, str] = {
    "h264": H264_ENCODER,
    "avc": H264_ENCODER,
    "hevc": "libx265",
    "h265": "libx265",
    "vp9": VP9_ENCODER,
    "av1": "libaom-av1",
}

# Containers that benefit from moving the moov atom to the front
_FASTSTART_SUFFIXES = frozenset({".mp4", ".m4v", ".mov"})

# Number of stderr lines kept in error messages
_STDERR_TAIL = 5


def get_encoder(codec: str) -> str:
    """Map a configured codec name to an ffmpeg encoder name."""
    return ENCODER_ALIASES.get(codec.lower(), codec)


def is_vp9(codec: str) -> bool:
    return get_encoder(codec) == VP9_ENCODER


def build_ffmpeg_command(
    ffmpeg_path: Path,
    source: Path,
    output: Path,
    options: TranscodeOptions,
) -> list[str]:
    """Build the ffmpeg argument list for one transcode.

    CRF and preset are always set. VP9 runs in constant-quality mode
    (``-b:v 0``) with row multithreading and ignores any bitrate; other
    encoders get ``-b:v`` when a bitrate is configured.

    Args:
        ffmpeg_path: Path to the ffmpeg executable.
        source: Input video.
        output: File to write (its extension selects the container).
        options: Codec and quality settings.

    Returns:
        List of command arguments.
    """
    encoder = get_encoder(options.codec)
    cmd = [str(ffmpeg_path), "-y", "-hide_banner", "-nostdin", "-v", "error"]
    cmd.extend(["-i", str(source)])
    cmd.extend(["-c:v", encoder])
    cmd.extend(["-crf", str(options.crf), "-preset", options.preset])

    if encoder == VP9_ENCODER:
        cmd.extend(["-b:v", "0"])
        if options.row_multithread:
            cmd.extend(["-row-mt", "1"])
    elif options.bitrate:
        cmd.extend(["-b:v", options.bitrate])

    if options.resize_to:
        width, height = options.resize_to
        cmd.extend(["-vf", f"scale={width}:{height}"])

    cmd.extend(["-c:a", options.audio_codec])

    if output.suffix.lower() in _FASTSTART_SUFFIXES:
        cmd.extend(["-movflags", "+faststart"])

    cmd.append(str(output))
    return cmd


class FFmpegTranscoder:
    """VideoTranscoder backed by the ffmpeg CLI."""

    def __init__(
        self,
        ffmpeg_path: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the transcoder.

        Args:
            ffmpeg_path: Configured path to ffmpeg; PATH is searched if None.
            timeout: Seconds before ffmpeg is killed (None = no limit).

        Raises:
            ToolNotAvailableError: If ffmpeg cannot be found.
        """
        self.ffmpeg_path = require_tool("ffmpeg", ffmpeg_path)
        self.timeout = timeout

    def transcode(self, source: Path, target: Path, options: TranscodeOptions) -> None:
        temp_path = temp_output_path(target)
        cmd = build_ffmpeg_command(self.ffmpeg_path, source, temp_path, options)
        logger.debug("Running: %s", " ".join(cmd))

        try:
            result = subprocess.run(  # nosec B603 - ffmpeg path is resolved
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            discard_output(temp_path)
            raise TranscodeError(
                f"ffmpeg timed out after {self.timeout}s for {source}"
            ) from e
        except OSError as e:
            discard_output(temp_path)
            raise TranscodeError(f"Cannot run ffmpeg for {source}: {e}") from e

        if result.returncode != 0:
            discard_output(temp_path)
            lines = (result.stderr or "").strip().splitlines()
            tail = "\n".join(lines[-_STDERR_TAIL:])
            raise TranscodeError(
                f"ffmpeg exited with code {result.returncode} for {source}: {tail}"
            )

        if not self._verify_output(temp_path):
            discard_output(temp_path)
            raise TranscodeError(f"ffmpeg produced no output for {source}")

        try:
            commit_output(temp_path, target)
        except OSError as e:
            discard_output(temp_path)
            raise TranscodeError(
                f"Cannot move output into place {target}: {e}"
            ) from e

    @staticmethod
    def _verify_output(path: Path) -> bool:
        return path.exists() and path.stat().st_size > 0
