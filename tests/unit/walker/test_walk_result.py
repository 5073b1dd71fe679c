"""Unit tests for walker/models.py."""

from pathlib import Path

from asset_optimizer.policy.classifier import FileClass
from asset_optimizer.walker.models import FileResult, Outcome, WalkResult


def _result() -> WalkResult:
    result = WalkResult(source_root=Path("assets"), target_root=Path("dist/assets"))
    result.add(
        FileResult(
            Path("assets/a.jpg"),
            Path("dist/assets/a.jpg"),
            Outcome.OPTIMIZED,
            FileClass.OPTIMIZABLE_IMAGE,
            blurred=True,
        )
    )
    result.add(FileResult(Path("assets/b.txt"), None, Outcome.SKIPPED))
    result.add(
        FileResult(Path("assets/c.jpg"), None, Outcome.FAILED, error="bad header")
    )
    return result


class TestWalkResult:
    """Tests for WalkResult aggregation."""

    def test_counts_cover_every_outcome(self) -> None:
        counts = _result().counts
        assert set(counts) == set(Outcome)
        assert counts[Outcome.OPTIMIZED] == 1
        assert counts[Outcome.TRANSCODED] == 0

    def test_failures(self) -> None:
        failures = _result().failures
        assert [f.source.name for f in failures] == ["c.jpg"]

    def test_outcome_for(self) -> None:
        result = _result()
        assert result.outcome_for(Path("assets/b.txt")).outcome is Outcome.SKIPPED
        assert result.outcome_for(Path("assets/missing")) is None

    def test_summary_dict(self) -> None:
        result = _result()
        result.elapsed_seconds = 1.234
        summary = result.to_summary_dict()

        assert summary["files"] == 3
        assert summary["outcomes"]["optimized"] == 1
        assert summary["outcomes"]["failed"] == 1
        assert summary["failures"] == [
            {"file": str(Path("assets/c.jpg")), "error": "bad header"}
        ]
        assert summary["elapsed_seconds"] == 1.23
        assert summary["interrupted"] is False
