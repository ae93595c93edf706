"""
Module: splitter.exporter

Purpose:
    Batch export orchestrator. Resolves each image's split config, cuts it
    into cells and writes every cell as JPEG, processing images in
    parallel and isolating failures per image.

Key Classes:
    - BatchExporter: Runs an export with a codec and ExportConfig
    - BatchResult: Aggregate counts plus per-image failure details
    - ImageFailure: Path and cause of one failed image
    - OutputDirectoryError: Fatal, output directory could not be created

Key Functions:
    - export_images(): One-call wrapper around BatchExporter

Dependencies:
    - concurrent.futures: Thread pool execution
    - grid_splitter.splitter.partition: Cell cropping
    - grid_splitter.splitter.codec: Decode / JPEG encode

Used By:
    - cli: `grid-splitter split`

Concurrency:
    The global config is frozen and overrides are snapshotted before any
    work is submitted, so callers may keep editing while a batch runs.
    Workers share nothing mutable except the completion counter, an
    itertools.count whose next() is atomic, and the progress callback.
    Processed/failed totals are tallied from the futures.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from grid_splitter.core.errors import GridSplitterError
from grid_splitter.core.models import ImageSet, SplitConfig
from grid_splitter.core.models.overrides import (
    ConfigOverrides,
    OverrideSource,
    OverridesSnapshot,
    resolve,
)

from .codec import ImageCodec, PillowCodec
from .config import ExportConfig
from .naming import colliding_stems, plan_output_stems
from .partition import cell_filename, partition
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)

# Called as progress(completed, total) from worker threads
ProgressCallback = Callable[[int, int], None]


class OutputDirectoryError(GridSplitterError):
    """Output directory could not be created; the batch was not started."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class ImageStatus(str, Enum):
    """Outcome of one image."""
    PROCESSED = "processed"
    FAILED = "failed"
    SKIPPED = "skipped"  # Batch cancelled before the image started

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ImageFailure:
    """
    Why one image failed.

    Attributes:
        index: Position in the ImageSet
        path: Source path
        error: Human-readable cause
        error_type: Exception class name (e.g. "DecodeError")
    """
    index: int
    path: Path
    error: str
    error_type: str

    def __str__(self) -> str:
        return f"{self.path}: {self.error}"


@dataclass(frozen=True)
class _ImageOutcome:
    index: int
    status: ImageStatus
    cells_written: int = 0
    failure: Optional[ImageFailure] = None


@dataclass(frozen=True)
class BatchResult:
    """
    Result of one export run.

    Attributes:
        processed: Images whose every cell was written
        failed: Images that failed at any stage
        skipped: Images not started because the batch was cancelled
        cells_written: Total cell files written (failed images included)
        output_dir: Where cells were written
        errors: Per-image failure details, in image order
        timings: Phase timings (None if disabled)

    Invariants:
        - processed + failed + skipped == total
        - skipped == 0 unless the batch was cancelled
    """
    processed: int
    failed: int
    output_dir: Path
    skipped: int = 0
    cells_written: int = 0
    errors: Tuple[ImageFailure, ...] = ()
    timings: Optional[TimingLog] = field(default=None, compare=False, repr=False)

    @property
    def total(self) -> int:
        return self.processed + self.failed + self.skipped

    @property
    def ok(self) -> bool:
        """True when every image was processed."""
        return self.failed == 0 and self.skipped == 0

    def __iter__(self) -> Iterator[int]:
        """Unpacks as (processed, failed)."""
        return iter((self.processed, self.failed))


class BatchExporter:
    """
    Splits a set of images into grid cells on disk.

    Usage:
        exporter = BatchExporter(ExportConfig(jpeg_quality=90))
        result = exporter.export(images, global_config, overrides, Path("out"))
        print(f"{result.processed} ok, {result.failed} failed")

    Attributes:
        config: Export settings
        codec: Decode/encode collaborator (PillowCodec by default)
    """

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        codec: Optional[ImageCodec] = None,
    ):
        self.config = config or ExportConfig()
        self.codec = codec or PillowCodec(quality=self.config.jpeg_quality)

    def export(
        self,
        images: Union[ImageSet, Iterable[Union[str, Path]]],
        global_config: SplitConfig,
        overrides: OverrideSource,
        output_dir: Path,
        *,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BatchResult:
        """
        Export every image in the set.

        Each image is decoded, partitioned with its resolved config and
        written as {output_dir}/{stem}_{row}_{col}.jpg. A failure at any
        stage is logged and counted against that image only.

        Args:
            images: Sources in batch order (index = override key)
            global_config: Shared config for images without an override
            overrides: Per-image configs (ConfigOverrides, a snapshot,
                a plain index -> config mapping, or None)
            output_dir: Destination, created recursively if missing
            progress: Called as progress(completed, total) after each
                image, possibly from several threads at once
            cancel_event: When set, images not yet started are skipped

        Returns:
            BatchResult with processed + failed (+ skipped) == len(images)

        Raises:
            OutputDirectoryError: If output_dir cannot be created
        """
        batch_start = time.perf_counter()
        if not isinstance(images, ImageSet):
            images = ImageSet(images)
        output_dir = Path(output_dir)

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(f"Cannot create output directory {output_dir}: {e}", output_dir) from e

        # Frozen copies for the workers
        paths = images.paths
        config_snapshot = _snapshot_overrides(overrides)
        stems = plan_output_stems(images, disambiguate=self.config.disambiguate_stems)
        if not self.config.disambiguate_stems:
            collisions = colliding_stems(stems)
            if collisions:
                logger.warning(f"Sources share output stems, later cells will overwrite earlier ones: {collisions}")

        total = len(paths)
        timings = TimingLog() if self.config.record_timings else None
        completed = itertools.count(1)

        def run_one(index: int) -> _ImageOutcome:
            if cancel_event is not None and cancel_event.is_set():
                return _ImageOutcome(index, ImageStatus.SKIPPED)

            config = resolve(index, config_snapshot, global_config)
            outcome = self._export_image(index, paths[index], stems[index], config, output_dir, timings)
            _report_progress(progress, next(completed), total)
            return outcome

        outcomes: List[_ImageOutcome] = []
        if total:
            workers = self.config.worker_count(total)
            logger.info(f"Splitting {total} images into {output_dir} with {workers} threads")
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(run_one, index) for index in range(total)]
                for future in as_completed(futures):
                    outcomes.append(future.result())
        else:
            logger.info("No images to split")

        outcomes.sort(key=lambda o: o.index)
        result = BatchResult(
            processed=sum(1 for o in outcomes if o.status is ImageStatus.PROCESSED),
            failed=sum(1 for o in outcomes if o.status is ImageStatus.FAILED),
            skipped=sum(1 for o in outcomes if o.status is ImageStatus.SKIPPED),
            cells_written=sum(o.cells_written for o in outcomes),
            output_dir=output_dir,
            errors=tuple(o.failure for o in outcomes if o.failure is not None),
            timings=timings,
        )

        if timings is not None:
            timings.log_batch("total", time.perf_counter() - batch_start)
            logger.debug(timings.summary())
        logger.info(
            f"Split complete: {result.processed} processed, {result.failed} failed"
            + (f", {result.skipped} skipped" if result.skipped else "")
        )
        return result

    def _export_image(
        self,
        index: int,
        path: Path,
        stem: str,
        config: SplitConfig,
        output_dir: Path,
        timings: Optional[TimingLog],
    ) -> _ImageOutcome:
        """Decode, partition and write one image. Never raises."""
        phases: dict = {}
        written = 0
        try:
            with timed_phase(phases, "decode"):
                image = self.codec.decode(path)
            with timed_phase(phases, "partition"):
                grid = partition(image, config)
            for row, cells in enumerate(grid):
                for col, cell in enumerate(cells):
                    with timed_phase(phases, "encode"):
                        self.codec.encode_jpeg(cell, output_dir / cell_filename(stem, row, col))
                    written += 1
        except Exception as e:
            logger.warning(f"Failed to split {path}: {e}")
            return _ImageOutcome(
                index,
                ImageStatus.FAILED,
                cells_written=written,
                failure=ImageFailure(index=index, path=path, error=str(e), error_type=type(e).__name__),
            )
        finally:
            if timings is not None:
                timings.record_image(f"{index + 1}:{path.name}", phases)

        logger.debug(f"Split {path.name} into {written} cells")
        return _ImageOutcome(index, ImageStatus.PROCESSED, cells_written=written)


def _snapshot_overrides(overrides: OverrideSource) -> OverridesSnapshot:
    """Immutable copy of whatever override source the caller passed."""
    if overrides is None:
        return OverridesSnapshot({})
    if isinstance(overrides, OverridesSnapshot):
        return overrides
    if isinstance(overrides, ConfigOverrides):
        return overrides.snapshot()
    return ConfigOverrides(dict(overrides)).snapshot()


def _report_progress(progress: Optional[ProgressCallback], completed: int, total: int) -> None:
    if progress is None:
        return
    try:
        progress(completed, total)
    except Exception as e:
        logger.warning(f"Progress callback raised at {completed}/{total}: {e}")


def export_images(
    images: Union[ImageSet, Iterable[Union[str, Path]]],
    global_config: SplitConfig,
    output_dir: Path,
    *,
    overrides: OverrideSource = None,
    config: Optional[ExportConfig] = None,
    codec: Optional[ImageCodec] = None,
    progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[threading.Event] = None,
) -> BatchResult:
    """
    Split images with a fresh BatchExporter.

    Example:
        >>> result = export_images(["a.png", "b.png"], SplitConfig.new(2, 2), Path("out"))
        >>> processed, failed = result
    """
    exporter = BatchExporter(config, codec)
    return exporter.export(
        images,
        global_config,
        overrides,
        output_dir,
        progress=progress,
        cancel_event=cancel_event,
    )
