"""Human-readable and JSON output for the asset-optimizer command."""

from __future__ import annotations

from typing import Any

from asset_optimizer.config.models import PolicyConfig
from asset_optimizer.walker.models import Outcome, WalkResult

# Labels used in the outcome summary, in display order
OUTCOME_LABELS: dict[Outcome, str] = {
    Outcome.OPTIMIZED: "Optimized",
    Outcome.TRANSCODED: "Transcoded",
    Outcome.COPIED_UNMODIFIED: "Copied",
    Outcome.COPIED_AS_FALLBACK: "Copied (fallback)",
    Outcome.SKIPPED: "Skipped",
    Outcome.FAILED: "Failed",
}


def _join(names: frozenset[str]) -> str:
    return ", ".join(sorted(names))


def format_config_summary(
    config: PolicyConfig, blur_requested: bool, video_capable: bool
) -> str:
    """Format the configuration summary printed before a build.

    Args:
        config: Policy for the run.
        blur_requested: Whether blur is enabled for this run.
        video_capable: Whether ffmpeg/ffprobe were found.

    Returns:
        Multi-line summary string.
    """
    image = config.image
    lines = [
        "Configuration Summary:",
        f"  Max Width: {image.max_width}px",
        f"  JPEG Quality: {image.quality.jpeg}",
        f"  PNG Compression: {image.quality.png}",
        f"  WebP Quality: {image.quality.webp}",
        f"  Blur Strength: {config.blur_strength}",
    ]

    if blur_requested:
        folders, files = config.blur_folders, config.blur_files
        lines.append("Blur effect will be applied to images")
        if folders.include:
            lines.append(f"  Blur ONLY these folders: {_join(folders.include)}")
        elif folders.exclude:
            lines.append(f"  Blur excluded folders: {_join(folders.exclude)}")
        if files.include:
            lines.append(f"  Blur ONLY these files: {_join(files.include)}")
        elif files.exclude:
            lines.append(f"  Blur excluded files: {_join(files.exclude)}")
    else:
        lines.append("Images will be optimized for web")

    if config.folders.exclude:
        lines.append(f"Excluded folders: {_join(config.folders.exclude)}")

    if not config.video.enable_processing:
        lines.append("Video processing disabled")
    elif not video_capable:
        lines.append("Video processing unavailable (ffmpeg/ffprobe not found)")

    return "\n".join(lines)


def format_walk_summary(result: WalkResult) -> str:
    """Format the outcome summary printed after a build."""
    lines = [f"Processed {len(result.results)} files in {result.elapsed_seconds:.1f}s"]
    counts = result.counts
    for outcome, label in OUTCOME_LABELS.items():
        if counts[outcome]:
            lines.append(f"  {label}: {counts[outcome]}")

    if result.failures:
        lines.append("")
        lines.append("Failures:")
        for failure in result.failures:
            lines.append(f"  {failure.source}: {failure.error}")

    for path, error in result.errors:
        lines.append(f"Error: {path}: {error}")

    if result.interrupted:
        lines.append("(Interrupted before all files were processed)")
    return "\n".join(lines)


def format_walk_json(result: WalkResult) -> dict[str, Any]:
    """Format the outcome summary for JSON output."""
    output = result.to_summary_dict()
    output["results"] = [
        {
            "file": str(r.source),
            "target": str(r.target) if r.target else None,
            "outcome": r.outcome.value,
            "class": r.file_class.value if r.file_class else None,
            "blurred": r.blurred,
            "resized": r.resized,
            "error": r.error,
        }
        for r in result.results
    ]
    return output
