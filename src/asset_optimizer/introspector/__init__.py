"""Introspector module for asset-optimizer.

- VideoIntrospector: Protocol defining the probe interface
- FFprobeIntrospector: Production implementation using ffprobe
- StubIntrospector: Stub implementation for testing
- MediaIntrospectionError: Exception for probe failures
"""

from asset_optimizer.introspector.ffprobe import FFprobeIntrospector
from asset_optimizer.introspector.interface import (
    MediaIntrospectionError,
    VideoIntrospector,
    VideoProbe,
)
from asset_optimizer.introspector.parsers import parse_ffprobe_output
from asset_optimizer.introspector.stub import StubIntrospector

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospectionError",
    "StubIntrospector",
    "VideoIntrospector",
    "VideoProbe",
    "parse_ffprobe_output",
]
