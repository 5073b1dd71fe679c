"""Tree walker: mirror a source asset tree into an output tree.

The walker resolves the four policy axes at every node, carries the blur
decision down the tree by value, and hands each file to one of the
handling strategies (optimize, transcode, copy). A failure on one file is
resolved into a terminal Outcome for that file and never stops the walk.

Traversal uses an explicit worklist. Directories are created on the
traversal thread; file jobs either run inline (``workers == 1``) or are
submitted to a ThreadPoolExecutor.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import (
    FIRST_COMPLETED,
    Future,
    ThreadPoolExecutor,
    as_completed,
    wait,
)
from pathlib import Path

from asset_optimizer.config.models import PolicyConfig
from asset_optimizer.errors import (
    CopyError,
    ImageTransformError,
    MediaIntrospectionError,
    TranscodeError,
)
from asset_optimizer.executor.copy import copy_file, ensure_directory
from asset_optimizer.executor.interface import ImageProcessor, VideoTranscoder
from asset_optimizer.introspector.interface import VideoIntrospector
from asset_optimizer.logging import file_context
from asset_optimizer.policy.classifier import FileClass, FileClassifier
from asset_optimizer.policy.rules import RuleResolver
from asset_optimizer.policy.transforms import (
    plan_image_transform,
    plan_video_transcode,
)
from asset_optimizer.walker.models import (
    FileJob,
    FileResult,
    Outcome,
    TraversalNode,
    WalkResult,
)

logger = logging.getLogger(__name__)


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def _list_entries(directory: Path) -> list[Path]:
    """Non-hidden entries of ``directory`` sorted by name."""
    return sorted(
        (p for p in directory.iterdir() if not is_hidden(p)),
        key=lambda p: p.name,
    )


class _Dispatcher:
    """Runs file jobs inline or on a worker pool and collects their results.

    At most ``max_pending`` jobs are in flight; submit() waits for one to
    finish before queueing more.
    """

    PENDING_PER_WORKER = 4

    def __init__(self, walker: TreeWalker, result: WalkResult, workers: int):
        self.walker = walker
        self.result = result
        self.workers = workers
        self.max_pending = workers * self.PENDING_PER_WORKER
        self._pool = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
        self._futures: dict[Future, FileJob] = {}
        self._count = 0

    @property
    def pending(self) -> int:
        return len(self._futures)

    def submit(self, job: FileJob) -> None:
        self._count += 1
        # Worker ID is a logical slot, not the thread that runs the job
        worker_id = f"{((self._count - 1) % self.workers) + 1:02d}"
        file_id = f"F{self._count:04d}"

        if self._pool is None:
            self.result.add(self.walker.run_job(job, worker_id, file_id))
            return

        if len(self._futures) >= self.max_pending:
            done, _ = wait(self._futures, return_when=FIRST_COMPLETED)
            self._collect(done)

        future = self._pool.submit(self.walker.run_job, job, worker_id, file_id)
        self._futures[future] = job

    def drain(self) -> None:
        """Wait for every submitted job and record its result."""
        if self._pool is None:
            return
        try:
            self._collect(as_completed(list(self._futures)))
        finally:
            self._pool.shutdown(wait=True)

    def _collect(self, futures) -> None:
        for future in futures:
            job = self._futures.pop(future)
            try:
                self.result.add(future.result())
            except Exception as e:
                logger.exception("Unexpected error for %s: %s", job.source, e)
                self.result.add(
                    FileResult(
                        source=job.source,
                        target=job.target,
                        outcome=Outcome.FAILED,
                        file_class=job.file_class,
                        error=str(e),
                    )
                )


class TreeWalker:
    """Walk a source tree and write the processed mirror.

    Video handling is a capability: it is enabled only when both an
    introspector and a transcoder are supplied. Without it, video
    extensions are never classified as transcodable and fall through to
    copy-only or plain copy.
    """

    def __init__(
        self,
        config: PolicyConfig,
        images: ImageProcessor,
        introspector: VideoIntrospector | None = None,
        transcoder: VideoTranscoder | None = None,
        workers: int | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        """Initialize the walker.

        Args:
            config: Policy for the run.
            images: Image processor used for optimizable images.
            introspector: Video prober (required for video capability).
            transcoder: Video transcoder (required for video capability).
            workers: File job pool size; defaults to ``config.workers``.
            stop_event: Set from outside to stop dispatching new files.
        """
        self.config = config
        self.images = images
        self.introspector = introspector
        self.transcoder = transcoder
        self.workers = max(1, workers if workers is not None else config.workers)
        self.stop_event = stop_event or threading.Event()
        self.rules = RuleResolver(config)
        self.classifier = FileClassifier(
            config.extensions, video_capable=self.video_capable
        )
        self._source_root: Path | None = None
        # Video output path -> source that claimed it during this walk
        self._video_outputs: dict[Path, Path] = {}
        self._video_outputs_lock = threading.Lock()

    @property
    def video_capable(self) -> bool:
        return self.introspector is not None and self.transcoder is not None

    def walk(
        self, source_root: Path, target_root: Path, blur_requested: bool = False
    ) -> WalkResult:
        """Process ``source_root`` into ``target_root``.

        Args:
            source_root: Directory holding the source assets.
            target_root: Directory receiving the mirrored output.
            blur_requested: Whether blur is enabled for this run.

        Returns:
            WalkResult with one FileResult per visited file.
        """
        start = time.monotonic()
        result = WalkResult(source_root=source_root, target_root=target_root)

        if not source_root.is_dir():
            logger.error("Source directory not found: %s", source_root)
            result.errors.append((str(source_root), "source directory not found"))
            return result

        if not self._make_directory(target_root, result):
            return result

        self._source_root = source_root
        self._video_outputs.clear()
        dispatcher = _Dispatcher(self, result, self.workers)
        stack = [TraversalNode(source_root, target_root, blur_requested)]

        try:
            while stack:
                if self.stop_event.is_set():
                    result.interrupted = True
                    break
                node = stack.pop()
                children = self._visit(node, dispatcher, result)
                # Reversed so that siblings are popped in name order
                stack.extend(reversed(children))
        finally:
            dispatcher.drain()

        if self.stop_event.is_set():
            result.interrupted = True
            logger.warning("Walk interrupted, remaining files were not processed")

        result.elapsed_seconds = time.monotonic() - start
        return result

    def _visit(
        self, node: TraversalNode, dispatcher: _Dispatcher, result: WalkResult
    ) -> list[TraversalNode]:
        """Handle the entries of one directory and return its child nodes."""
        try:
            entries = _list_entries(node.source)
        except OSError as e:
            logger.error("Cannot read directory %s: %s", node.source, e)
            result.errors.append((str(node.source), str(e)))
            return []

        children: list[TraversalNode] = []
        for entry in entries:
            if self.stop_event.is_set():
                break
            target = node.target / entry.name

            if entry.is_dir():
                if entry.is_symlink():
                    self._skip_symlink(entry, result)
                    continue
                child = self._visit_directory(entry, target, node, dispatcher, result)
                if child is not None:
                    children.append(child)
                continue

            if not self.rules.file_is_processable(entry.name, entry.suffix):
                logger.info("Skipping excluded file: %s", self._relative(entry))
                result.add(
                    FileResult(
                        source=entry,
                        target=None,
                        outcome=Outcome.SKIPPED,
                        error="excluded by file policy",
                    )
                )
                continue

            dispatcher.submit(
                FileJob(
                    source=entry,
                    target=target,
                    file_class=self.classifier.classify(entry.suffix),
                    blur_allowed=node.blur_allowed,
                )
            )

        return children

    def _visit_directory(
        self,
        source: Path,
        target: Path,
        parent: TraversalNode,
        dispatcher: _Dispatcher,
        result: WalkResult,
    ) -> TraversalNode | None:
        if not self._make_directory(target, result):
            return None

        if not self.rules.folder_is_processable(source.name):
            logger.info("Skipping excluded folder: %s", self._relative(source))
            self._copy_subtree(source, target, dispatcher, result)
            return None

        folder_blur = self.rules.folder_allows_blur(source.name)
        if parent.blur_allowed and not folder_blur:
            logger.info("Excluding folder from blur: %s", self._relative(source))

        return TraversalNode(source, target, parent.blur_allowed and folder_blur)

    def _copy_subtree(
        self,
        source: Path,
        target: Path,
        dispatcher: _Dispatcher,
        result: WalkResult,
    ) -> None:
        """Copy every non-hidden entry below ``source`` without any policy."""
        stack = [(source, target)]
        while stack:
            src_dir, dst_dir = stack.pop()
            try:
                entries = _list_entries(src_dir)
            except OSError as e:
                logger.error("Cannot read directory %s: %s", src_dir, e)
                result.errors.append((str(src_dir), str(e)))
                continue

            subdirs = []
            for entry in entries:
                if self.stop_event.is_set():
                    return
                dst = dst_dir / entry.name
                if entry.is_dir():
                    if entry.is_symlink():
                        self._skip_symlink(entry, result)
                    elif self._make_directory(dst, result):
                        subdirs.append((entry, dst))
                    continue
                dispatcher.submit(
                    FileJob(source=entry, target=dst, file_class=None, raw_copy=True)
                )
            stack.extend(reversed(subdirs))

    # =========================================================================
    # File jobs
    # =========================================================================

    def run_job(self, job: FileJob, worker_id: str, file_id: str) -> FileResult:
        """Process one file under its logging context.

        Called inline or from a pool thread. Unexpected exceptions are
        logged and turned into a FAILED result.
        """
        if self.stop_event.is_set():
            return FileResult(
                source=job.source,
                target=None,
                outcome=Outcome.SKIPPED,
                file_class=job.file_class,
                error="interrupted",
            )

        asset = str(self._relative(job.source))
        context = (
            file_context(worker_id, file_id, asset)
            if self.workers > 1
            else file_context(None, None, asset)
        )
        with context:
            try:
                return self.process_file(job)
            except Exception as e:
                logger.exception("Unexpected error for %s: %s", job.source, e)
                return FileResult(
                    source=job.source,
                    target=job.target,
                    outcome=Outcome.FAILED,
                    file_class=job.file_class,
                    error=str(e),
                )

    def process_file(self, job: FileJob) -> FileResult:
        """Dispatch one file to its handling strategy."""
        if job.raw_copy:
            return self._copy(job, Outcome.COPIED_UNMODIFIED, "Copied as-is")

        if job.file_class is FileClass.OPTIMIZABLE_IMAGE:
            return self._optimize_image(job)
        if job.file_class is FileClass.TRANSCODABLE_VIDEO:
            return self._handle_video(job)
        return self._copy(
            job, Outcome.COPIED_UNMODIFIED, "Copied without modification"
        )

    def _optimize_image(self, job: FileJob) -> FileResult:
        name = job.source.name
        file_blur = self.rules.file_allows_blur(name)
        should_blur = job.blur_allowed and file_blur
        if job.blur_allowed and not file_blur:
            logger.info("Excluding file from blur: %s", name)

        try:
            metadata = self.images.read_metadata(job.source)
            transform = plan_image_transform(
                metadata,
                self.config.image,
                self.config.blur_strength,
                should_blur,
            )
            if should_blur:
                logger.info(
                    "Applying blur to %s (strength %s)", name, transform.blur
                )
            self.images.transform(job.source, job.target, transform)
        except ImageTransformError as e:
            logger.error("Error processing %s: %s", job.source, e)
            return FileResult(
                source=job.source,
                target=None,
                outcome=Outcome.FAILED,
                file_class=job.file_class,
                error=str(e),
            )

        logger.info("Optimized successfully: %s", name)
        return FileResult(
            source=job.source,
            target=job.target,
            outcome=Outcome.OPTIMIZED,
            file_class=job.file_class,
            blurred=should_blur,
            resized=transform.resize_to_width is not None,
        )

    def _handle_video(self, job: FileJob) -> FileResult:
        settings = self.config.video
        if not settings.enable_processing:
            return self._copy(
                job, Outcome.COPIED_UNMODIFIED, "Video processing disabled, copied"
            )

        # Only reachable with video capability
        assert self.introspector is not None and self.transcoder is not None

        try:
            probe = self.introspector.probe(job.source)
        except MediaIntrospectionError as e:
            logger.warning("Cannot probe %s: %s", job.source, e)
            return self._copy(job, Outcome.COPIED_AS_FALLBACK, "Copied original")

        if not probe.has_video_stream:
            logger.warning("No video stream in %s", job.source)
            return self._copy(job, Outcome.COPIED_AS_FALLBACK, "Copied original")

        plan = plan_video_transcode(job.target, probe, settings)
        self._claim_video_output(plan.target, job.source)
        logger.info(
            "Transcoding %s with %s%s",
            job.source.name,
            plan.options.codec,
            " (resize to {}x{})".format(*plan.options.resize_to)
            if plan.options.resize_to
            else "",
        )
        try:
            self.transcoder.transcode(job.source, plan.target, plan.options)
        except TranscodeError as e:
            logger.warning("Transcode failed for %s: %s", job.source, e)
            return self._copy(job, Outcome.COPIED_AS_FALLBACK, "Copied original")

        logger.info("Transcoded successfully: %s", plan.target.name)
        return FileResult(
            source=job.source,
            target=plan.target,
            outcome=Outcome.TRANSCODED,
            file_class=job.file_class,
            resized=plan.options.resize_to is not None,
        )

    def _copy(self, job: FileJob, outcome: Outcome, message: str) -> FileResult:
        """Copy the original to the nominal target, recording ``outcome``."""
        try:
            copy_file(job.source, job.target)
        except CopyError as e:
            logger.error("Error copying %s: %s", job.source, e)
            return FileResult(
                source=job.source,
                target=None,
                outcome=Outcome.FAILED,
                file_class=job.file_class,
                error=str(e),
            )

        if job.file_class is not None:
            logger.info("%s: %s (%s)", message, job.source.name, job.file_class.value)
        else:
            logger.info("%s: %s", message, job.source.name)
        return FileResult(
            source=job.source,
            target=job.target,
            outcome=outcome,
            file_class=job.file_class,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _make_directory(self, path: Path, result: WalkResult) -> bool:
        try:
            if ensure_directory(path):
                result.directories_created += 1
        except OSError as e:
            logger.error("Cannot create directory %s: %s", path, e)
            result.errors.append((str(path), str(e)))
            return False
        return True

    def _claim_video_output(self, target: Path, source: Path) -> None:
        """Warn when two sources convert to the same output file."""
        with self._video_outputs_lock:
            previous = self._video_outputs.setdefault(target, source)
        if previous != source:
            logger.warning(
                "Output %s is produced by both %s and %s; the last one wins",
                target.name,
                self._relative(previous),
                self._relative(source),
            )

    def _skip_symlink(self, path: Path, result: WalkResult) -> None:
        logger.warning("Skipping symlinked directory: %s", self._relative(path))
        result.add(
            FileResult(
                source=path,
                target=None,
                outcome=Outcome.SKIPPED,
                error="symlinked directory",
            )
        )

    def _relative(self, path: Path) -> Path:
        if self._source_root is not None:
            try:
                return path.relative_to(self._source_root)
            except ValueError:
                pass
        return path
