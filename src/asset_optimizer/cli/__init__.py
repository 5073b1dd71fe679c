"""CLI module for asset-optimizer."""

from __future__ import annotations

import dataclasses
import json
import logging
import signal
import threading
from pathlib import Path

import click

from asset_optimizer import __version__
from asset_optimizer.cli.exit_codes import ExitCode
from asset_optimizer.cli.formatting import (
    format_config_summary,
    format_walk_json,
    format_walk_summary,
)
from asset_optimizer.config import (
    LoggingConfig,
    PolicyConfig,
    get_default_config_path,
    load_config,
)
from asset_optimizer.errors import ConfigLoadError, ToolNotAvailableError
from asset_optimizer.executor import FFmpegTranscoder, PillowImageProcessor
from asset_optimizer.introspector import FFprobeIntrospector
from asset_optimizer.logging import configure_logging
from asset_optimizer.walker import TreeWalker

logger = logging.getLogger(__name__)

SOURCE_DIR = Path("assets")
OUTPUT_DIR = Path("dist") / "assets"


def _configure_logging(
    base: LoggingConfig,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Configure logging from the config file merged with CLI options.

    CLI values win over the ``logging`` section; unset options keep it.
    """
    overrides: dict = {}
    if log_level is not None:
        overrides["level"] = log_level.lower()
    if log_file is not None:
        overrides["file"] = log_file
    if log_json:
        overrides["format"] = "json"
    configure_logging(dataclasses.replace(base, **overrides))


def _build_video_services(
    config: PolicyConfig,
) -> tuple[FFprobeIntrospector | None, FFmpegTranscoder | None]:
    """Create the video prober and transcoder, or (None, None).

    A missing ffmpeg or ffprobe disables video handling for the run; video
    files are then copied unchanged.
    """
    if not config.video.enable_processing:
        logger.debug("Video processing disabled in config")
        return None, None

    try:
        introspector = FFprobeIntrospector(ffprobe_path=config.tools.ffprobe)
        transcoder = FFmpegTranscoder(
            ffmpeg_path=config.tools.ffmpeg,
            timeout=config.video.timeout_seconds,
        )
    except ToolNotAvailableError as e:
        logger.warning("Video processing unavailable: %s", e)
        return None, None
    return introspector, transcoder


def _install_interrupt_handler(stop_event: threading.Event):
    """Set ``stop_event`` on SIGINT. Returns the previous handler."""

    def handler(signum: int, frame: object) -> None:
        logger.info("Interrupt received, finishing files in progress...")
        stop_event.set()

    if threading.current_thread() is not threading.main_thread():
        return None
    return signal.signal(signal.SIGINT, handler)


@click.command()
@click.version_option(version=__version__, prog_name="asset-optimizer")
@click.option(
    "--blur",
    "--with-blur",
    "blur",
    is_flag=True,
    default=False,
    help="Apply the blur effect to images allowed by the blur rules.",
)
@click.option(
    "--root",
    "root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Working tree containing 'assets' (default: current directory).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $ASSET_OPTIMIZER_CONFIG or <root>/config.json).",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Number of files processed in parallel (default: config, 1).",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print the final summary as JSON.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
def main(
    blur: bool,
    root: Path | None,
    config_path: Path | None,
    workers: int | None,
    json_output: bool,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Optimize the images and videos under assets/ into dist/assets/."""
    root = root or Path.cwd()
    config_path = config_path or get_default_config_path(root)

    # Log config errors with the CLI overrides before the file is read
    _configure_logging(LoggingConfig(), log_level, log_file, log_json)

    try:
        config = load_config(config_path)
    except ConfigLoadError as e:
        logger.error("Failed to load config: %s", e)
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.CONFIG_ERROR) from e

    _configure_logging(config.logging, log_level, log_file, log_json)
    logger.info(
        "asset-optimizer %s starting: root=%s, config=%s",
        __version__,
        root,
        config_path,
    )

    introspector, transcoder = _build_video_services(config)
    stop_event = threading.Event()
    walker = TreeWalker(
        config,
        PillowImageProcessor(),
        introspector=introspector,
        transcoder=transcoder,
        workers=workers,
        stop_event=stop_event,
    )

    if not json_output:
        click.echo(format_config_summary(config, blur, walker.video_capable))
        click.echo("")

    previous_handler = _install_interrupt_handler(stop_event)
    try:
        result = walker.walk(root / SOURCE_DIR, root / OUTPUT_DIR, blur)
    except Exception as e:
        logger.exception("Build failed: %s", e)
        click.echo(f"Error: {e}", err=True)
        return
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    if json_output:
        click.echo(json.dumps(format_walk_json(result), indent=2))
    else:
        click.echo("")
        click.echo(format_walk_summary(result))

    if result.interrupted:
        raise SystemExit(ExitCode.INTERRUPTED)
