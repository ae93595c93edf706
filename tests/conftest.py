import pytest
import sys
from pathlib import Path
from PIL import Image

# Add src to sys.path so we can import grid_splitter
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


# Common test fixtures
@pytest.fixture
def gradient():
    """Factory for RGB images whose pixels encode their coordinates."""
    def _make(width: int, height: int) -> Image.Image:
        img = Image.new("RGB", (width, height))
        img.putdata([
            (x % 256, y % 256, (x // 256) * 16 + (y // 256))
            for y in range(height)
            for x in range(width)
        ])
        return img

    return _make



@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple 200x100 test image on disk."""
    img = Image.new("RGB", (200, 100), color="white")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def image_factory(tmp_path: Path):
    """Write test images into tmp_path/src and return their paths."""
    src_dir = tmp_path / "src"
    src_dir.mkdir()

    def _make(name: str, size=(100, 200), mode="RGB", color="white") -> Path:
        path = src_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color=color).save(path)
        return path

    return _make


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Output directory path (not created)."""
    return tmp_path / "out"
