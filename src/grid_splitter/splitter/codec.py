"""
Module: splitter.codec

Purpose:
    Image decode/encode collaborator for the export pipeline. Defines the
    ImageCodec interface and the Pillow-backed implementation used by
    default.

Key Classes:
    - ImageCodec: Abstract decode / encode_jpeg interface
    - PillowCodec: Standard implementation
    - CodecError, DecodeError, EncodeError: Per-image failures

Dependencies:
    - PIL.Image: Decoding and JPEG encoding

Used By:
    - splitter.exporter: Decodes sources and writes cells
"""

from __future__ import annotations

import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from PIL import Image

from grid_splitter.core.errors import GridSplitterError

logger = logging.getLogger(__name__)

# Modes JPEG can store directly; anything else is converted to RGB
JPEG_MODES = frozenset({"RGB", "L", "CMYK"})


class CodecError(GridSplitterError):
    """Image could not be decoded or encoded."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class DecodeError(CodecError):
    """Source image could not be read."""


class EncodeError(CodecError):
    """Cell could not be encoded or written."""


class ImageCodec(ABC):
    """
    Abstract interface for reading sources and writing cells.

    Implementations must be safe to call from several threads at once
    with different paths.
    """

    @abstractmethod
    def decode(self, path: Path) -> Image.Image:
        """
        Load an image fully into memory.

        Raises:
            DecodeError: If the file is missing or not a readable image
        """

    @abstractmethod
    def encode_jpeg(self, image: Image.Image, path: Path) -> None:
        """
        Write `image` to `path` as JPEG.

        Raises:
            EncodeError: If the image cannot be encoded or the file written
        """


class PillowCodec(ImageCodec):
    """
    Pillow-backed codec.

    Decoding forces a full load so the file handle is closed before the
    image is cropped. Encoding converts alpha/palette modes to RGB and
    writes atomically (temp file then rename) so a failed write never
    leaves a truncated cell behind.

    Attributes:
        quality: JPEG quality passed to Pillow
    """

    def __init__(self, quality: int = 75):
        self.quality = quality

    def decode(self, path: Path) -> Image.Image:
        path = Path(path)
        try:
            with Image.open(path) as source:
                source.load()
                # GIFs and other multi-frame files: first frame only
                image = source.copy()
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Cannot decode {path}: {e}", path) from e
        logger.debug(f"Decoded {path.name}: {image.size[0]}x{image.size[1]} {image.mode}")
        return image

    def encode_jpeg(self, image: Image.Image, path: Path) -> None:
        path = Path(path)
        if image.width == 0 or image.height == 0:
            raise EncodeError(f"Cannot encode empty {image.width}x{image.height} cell to {path.name}", path)

        if image.mode not in JPEG_MODES:
            image = image.convert("RGB")

        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                suffix=".jpg",
                dir=path.parent,
                delete=False,
            ) as f:
                temp_path = Path(f.name)
                image.save(f, format="JPEG", quality=self.quality)
            temp_path.replace(path)
        except (OSError, ValueError) as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise EncodeError(f"Cannot write {path}: {e}", path) from e
