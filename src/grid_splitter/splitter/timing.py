"""
Module: splitter.timing

Purpose:
    Phase timings for an export run. Shows where a batch spends its time
    (decode, partition, encode) and which source images are slowest.

Key Classes:
    - ImageTiming: Phase durations for one image
    - TimingLog: Batch phases plus one ImageTiming per image

Key Functions:
    - timed_phase(): Accumulate the duration of a block into a phase dict

Used By:
    - splitter.exporter: Records per-image phases from worker threads
    - cli: `--timings` writes TimingLog.to_dict() as JSON
"""

from __future__ import annotations

import heapq
import json
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from statistics import fmean
from typing import Any, Dict, Iterator, List, Mapping, MutableMapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageTiming:
    """Seconds spent per phase on one image, keyed "{number}:{file name}"."""
    key: str
    phases: Mapping[str, float]

    @property
    def total(self) -> float:
        return sum(self.phases.values())

    @property
    def slowest_phase(self) -> tuple[str, float]:
        return max(self.phases.items(), key=lambda item: item[1])


@dataclass
class TimingLog:
    """
    Timings for one export run.

    Workers time their phases into a private dict and hand it over once
    through record_image(); the log itself is guarded by a lock.

    Attributes:
        batch_timings: phase -> seconds for whole-batch steps
        images: image key -> ImageTiming

    Example:
        >>> log = TimingLog()
        >>> log.record_image("1:scan.png", {"decode": 0.12, "encode": 0.30})
        >>> log.log_batch("total", 0.5)
        >>> print(log.summary())
    """
    batch_timings: Dict[str, float] = field(default_factory=dict)
    images: Dict[str, ImageTiming] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def image_timings(self) -> Dict[str, Dict[str, float]]:
        """Plain phase dicts per image key."""
        with self._lock:
            return {key: dict(timing.phases) for key, timing in self.images.items()}

    def log_batch(self, phase: str, duration: float) -> None:
        self.batch_timings[phase] = duration

    def record_image(self, image_key: str, phases: Mapping[str, float]) -> None:
        timing = ImageTiming(image_key, dict(phases))
        with self._lock:
            self.images[image_key] = timing

    def get_image_total(self, image_key: str) -> float:
        timing = self.images.get(image_key)
        return timing.total if timing is not None else 0.0

    def get_phase_averages(self) -> Dict[str, float]:
        """Mean seconds per phase over the images that ran that phase."""
        samples: Dict[str, List[float]] = {}
        for timing in self._snapshot():
            for phase, duration in timing.phases.items():
                samples.setdefault(phase, []).append(duration)
        return {phase: fmean(values) for phase, values in samples.items()}

    def get_slowest_images(self, n: int = 3) -> List[ImageTiming]:
        timed = [timing for timing in self._snapshot() if timing.phases]
        return heapq.nlargest(n, timed, key=lambda timing: timing.total)

    def _snapshot(self) -> List[ImageTiming]:
        with self._lock:
            return list(self.images.values())

    def summary(self) -> str:
        """Multi-line report for the debug log."""
        out = ["", "=== Export Timing Summary ==="]

        if self.batch_timings:
            out.append("Batch:")
            out.extend(f"  {phase:<20} {seconds:8.3f}s" for phase, seconds in sorted(self.batch_timings.items()))

        averages = self.get_phase_averages()
        if averages:
            out += ["", f"Per image (mean of {len(self.images)}):"]
            for phase, seconds in sorted(averages.items(), key=lambda item: item[1], reverse=True):
                out.append(f"  {phase:<20} {seconds:8.3f}s")

        slowest = self.get_slowest_images()
        if slowest:
            out += ["", "Slowest images:"]
            for timing in slowest:
                phase, seconds = timing.slowest_phase
                out.append(f"  {timing.key}: {timing.total:.3f}s (mostly {phase}, {seconds:.3f}s)")

        out.append("")
        return "\n".join(out)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_timings": dict(self.batch_timings),
            "image_timings": self.image_timings,
            "phase_averages": self.get_phase_averages(),
            "slowest_images": [
                {
                    "image": timing.key,
                    "total": timing.total,
                    "slowest_phase": timing.slowest_phase[0],
                    "phase_duration": timing.slowest_phase[1],
                }
                for timing in self.get_slowest_images(5)
            ],
        }

    def save(self, path: Path) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.debug(f"Wrote timings for {len(self.images)} images to {path}")


@contextmanager
def timed_phase(target: MutableMapping[str, float], phase: str) -> Iterator[None]:
    """
    Add the wall time of the block to target[phase].

    Repeated phases accumulate, so timing each cell's encode under
    "encode" yields the image's total encode time. The time is recorded
    even when the block raises.

    Example:
        >>> phases = {}
        >>> with timed_phase(phases, "decode"):
        ...     image = codec.decode(path)
    """
    started = time.perf_counter()
    try:
        yield
    finally:
        target[phase] = target.get(phase, 0.0) + (time.perf_counter() - started)
