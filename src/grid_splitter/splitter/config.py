"""
Module: splitter.config

Purpose:
    Configuration dataclass for batch export. Provides immutable settings
    for output encoding, worker count and output naming.

Key Classes:
    - ExportConfig: Settings for one export run

Dependencies:
    - dataclasses: For frozen dataclass support

Used By:
    - splitter.exporter: Uses ExportConfig for pipeline settings
    - cli: Builds ExportConfig from command-line flags
"""

import os
from dataclasses import dataclass
from typing import Optional

# Upper bound on default worker threads
MAX_DEFAULT_WORKERS = 8


@dataclass(frozen=True)
class ExportConfig:
    """
    Configuration for a batch export.

    Attributes:
        jpeg_quality: JPEG quality 1-95 for every output cell (default 75)
        max_workers: Worker threads; None picks min(cpu_count, 8)
        disambiguate_stems: Prefix outputs with the image number when two
            sources share a file stem (default True)
        record_timings: Collect per-image phase timings (default True)
    """
    jpeg_quality: int = 75
    max_workers: Optional[int] = None
    disambiguate_stems: bool = True
    record_timings: bool = True

    def __post_init__(self) -> None:
        if not 1 <= self.jpeg_quality <= 95:
            raise ValueError(f"jpeg_quality must be in 1-95: {self.jpeg_quality}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1: {self.max_workers}")

    def worker_count(self, job_count: int) -> int:
        """Threads to use for `job_count` images (always >= 1)."""
        if self.max_workers is not None:
            workers = self.max_workers
        else:
            workers = min(os.cpu_count() or 4, MAX_DEFAULT_WORKERS)
        return max(1, min(workers, job_count))
