"""
Module: splitter

Purpose:
    Grid partition and batch export pipeline. Turns decoded images plus
    resolved split configs into JPEG cells on disk.

Key Functions:
    - partition(): Crop an image into its grid of cells
    - export_images(): Parallel batch export

Key Classes:
    - BatchExporter: Batch export orchestrator
    - BatchResult: Processed/failed counts and failure details
    - ExportConfig: Settings for an export run
    - PillowCodec: Default decode/encode collaborator

Dependencies:
    - PIL: Decoding, cropping and JPEG encoding
    - grid_splitter.core.models: SplitConfig, overrides, ImageSet

Used By:
    - grid_splitter.cli: Command-line batch splitting
"""

from .codec import CodecError, DecodeError, EncodeError, ImageCodec, PillowCodec
from .config import ExportConfig
from .exporter import (
    BatchExporter,
    BatchResult,
    ImageFailure,
    OutputDirectoryError,
    ProgressCallback,
    export_images,
)
from .partition import cell_bounds, cell_filename, compute_boundaries, partition

__all__ = [
    "BatchExporter",
    "BatchResult",
    "CodecError",
    "DecodeError",
    "EncodeError",
    "ExportConfig",
    "ImageCodec",
    "ImageFailure",
    "OutputDirectoryError",
    "PillowCodec",
    "ProgressCallback",
    "cell_bounds",
    "cell_filename",
    "compute_boundaries",
    "export_images",
    "partition",
]
