"""Exit codes for the asset-optimizer command.

Exit code ranges:
    0: Success (including runs with per-file failures)
    1-9: Run errors
    10-19: Validation errors (config, input)
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for the asset-optimizer CLI."""

    # Success (0)
    SUCCESS = 0

    # Run errors (1-9)
    INTERRUPTED = 2  # Ctrl+C / SIGINT

    # Validation errors (10-19)
    CONFIG_ERROR = 11
