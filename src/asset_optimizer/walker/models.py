"""Data models for tree walks."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from asset_optimizer.policy.classifier import FileClass


class Outcome(Enum):
    """Terminal outcome of one source file."""

    OPTIMIZED = "optimized"
    TRANSCODED = "transcoded"
    COPIED_AS_FALLBACK = "copied_as_fallback"
    COPIED_UNMODIFIED = "copied_unmodified"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TraversalNode:
    """A directory waiting to be walked.

    ``blur_allowed`` is the AND of the run's blur flag and the blur rule of
    every folder from the root down to this one.
    """

    source: Path
    target: Path
    blur_allowed: bool


@dataclass(frozen=True)
class FileJob:
    """One file handed to the dispatch stage."""

    source: Path
    target: Path
    file_class: FileClass | None
    blur_allowed: bool = False
    # Set for files inside an excluded folder: copied, never transformed
    raw_copy: bool = False


@dataclass(frozen=True)
class FileResult:
    """What happened to one source file."""

    source: Path
    target: Path | None
    outcome: Outcome
    file_class: FileClass | None = None
    blurred: bool = False
    resized: bool = False
    error: str | None = None


@dataclass
class WalkResult:
    """Summary of a complete walk."""

    source_root: Path
    target_root: Path
    results: list[FileResult] = field(default_factory=list)
    directories_created: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    interrupted: bool = False
    elapsed_seconds: float = 0.0

    def add(self, result: FileResult) -> None:
        self.results.append(result)

    @property
    def counts(self) -> dict[Outcome, int]:
        counter = Counter(r.outcome for r in self.results)
        return {outcome: counter.get(outcome, 0) for outcome in Outcome}

    @property
    def failures(self) -> list[FileResult]:
        return [r for r in self.results if r.outcome is Outcome.FAILED]

    def outcome_for(self, source: Path) -> FileResult | None:
        """Return the result recorded for ``source``, if any."""
        for result in self.results:
            if result.source == source:
                return result
        return None

    def to_summary_dict(self) -> dict:
        """Get summary as a JSON-serializable dict."""
        return {
            "source": str(self.source_root),
            "target": str(self.target_root),
            "files": len(self.results),
            "outcomes": {o.value: n for o, n in self.counts.items()},
            "directories_created": self.directories_created,
            "failures": [
                {"file": str(r.source), "error": r.error} for r in self.failures
            ],
            "errors": [{"path": p, "error": e} for p, e in self.errors],
            "interrupted": self.interrupted,
            "elapsed_seconds": round(self.elapsed_seconds, 2),
        }
