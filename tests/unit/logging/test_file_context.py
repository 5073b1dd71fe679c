"""Unit tests for logging/context.py."""

import logging
import threading

from asset_optimizer.logging.context import (
    WorkerContextFilter,
    file_context,
    get_file_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg="test message",
        args=(),
        exc_info=None,
    )


class TestFileContext:
    """Tests for the file_context context manager."""

    def test_default_context_is_none(self) -> None:
        assert get_file_context() == (None, None, None)

    def test_sets_and_restores_values(self) -> None:
        """Values should be visible inside the block and reset after."""
        with file_context("03", "F0042", "gallery/art.jpg"):
            assert get_file_context() == ("03", "F0042", "gallery/art.jpg")
        assert get_file_context() == (None, None, None)

    def test_nested_contexts_restore_outer(self) -> None:
        with file_context("01", "F0001", "a.jpg"):
            with file_context("02", "F0002", "b.jpg"):
                assert get_file_context() == ("02", "F0002", "b.jpg")
            assert get_file_context() == ("01", "F0001", "a.jpg")

    def test_restored_on_exception(self) -> None:
        try:
            with file_context("01", "F0001", "a.jpg"):
                raise ValueError("boom")
        except ValueError:
            pass
        assert get_file_context() == (None, None, None)

    def test_context_is_per_thread(self) -> None:
        """A context set in one thread should not leak into another."""
        seen = []

        def worker() -> None:
            seen.append(get_file_context())

        with file_context("01", "F0001", "a.jpg"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [(None, None, None)]


class TestWorkerContextFilter:
    """Tests for WorkerContextFilter."""

    def test_filter_injects_tag_and_fields(self) -> None:
        record = _record()
        with file_context("05", "F0123", "team/ceo.jpg"):
            assert WorkerContextFilter().filter(record) is True

        assert record.worker_tag == "[W05:F0123] "
        assert record.worker_id == "05"
        assert record.file_id == "F0123"
        assert record.asset == "team/ceo.jpg"

    def test_filter_without_context(self) -> None:
        record = _record()
        WorkerContextFilter().filter(record)
        assert record.worker_tag == ""
        assert record.asset is None

    def test_inline_context_carries_asset_only(self) -> None:
        """Sequential runs tag the asset without a worker tag."""
        record = _record()
        with file_context(None, None, "hero.jpg"):
            WorkerContextFilter().filter(record)
        assert record.worker_tag == ""
        assert record.asset == "hero.jpg"
