"""
Tests for splitter.exporter

Test Coverage:
- Failure isolation: processed + failed == total
- Progress callback: once per image, completed values 1..N
- Output naming and per-image overrides
- Override snapshot taken before workers start
- Cancellation and fatal output directory errors
"""

import logging
import threading

import pytest
from PIL import Image

from grid_splitter.core.models import ConfigOverrides, SplitConfig
from grid_splitter.splitter import BatchExporter, ExportConfig
from grid_splitter.splitter.codec import DecodeError, ImageCodec
from grid_splitter.splitter.exporter import OutputDirectoryError, export_images


class RecordingCodec(ImageCodec):
    """In-memory codec: decodes every path to a fixed image, records writes."""

    def __init__(self, size=(100, 200), fail_on=()):
        self.size = size
        self.fail_on = set(fail_on)
        self.written = []
        self._lock = threading.Lock()

    def decode(self, path):
        if path.name in self.fail_on:
            raise DecodeError(f"Cannot decode {path}", path)
        return Image.new("RGB", self.size)

    def encode_jpeg(self, image, path):
        with self._lock:
            self.written.append((path.name, image.size))


def _progress_recorder():
    calls = []
    lock = threading.Lock()

    def progress(completed, total):
        with lock:
            calls.append((completed, total))

    return calls, progress


# ─────────────────────────────────────────────────────────────────────────────
# Real files through PillowCodec
# ─────────────────────────────────────────────────────────────────────────────

def test_export_writes_cells_named_by_stem_row_col(image_factory, output_dir):
    # Arrange
    source = image_factory("page.png", size=(100, 200))

    # Act
    result = export_images([source], SplitConfig.new(2, 1), output_dir)

    # Assert
    assert (result.processed, result.failed) == (1, 0)
    assert sorted(p.name for p in output_dir.iterdir()) == ["page_1_1.jpg", "page_2_1.jpg"]
    for name in ("page_1_1.jpg", "page_2_1.jpg"):
        with Image.open(output_dir / name) as cell:
            assert cell.format == "JPEG"
            assert cell.size == (100, 100)


def test_export_with_corrupt_images_counts_failures(image_factory, output_dir, tmp_path):
    """N images, K unreadable: N-K processed, K failed, progress fires N times."""
    # Arrange
    good = [image_factory(f"good_{i:02d}.png", size=(40, 30)) for i in range(12)]
    bad = []
    for i in range(4):
        path = tmp_path / "src" / f"bad_{i}.jpg"
        path.write_bytes(b"\xff\xd8 truncated")
        bad.append(path)
    images = good[:6] + bad + good[6:]
    calls, progress = _progress_recorder()
    exporter = BatchExporter(ExportConfig(max_workers=4))

    # Act
    result = exporter.export(images, SplitConfig.new(2, 2), None, output_dir, progress=progress)

    # Assert
    assert result.processed == 12
    assert result.failed == 4
    assert result.total == 16
    assert result.cells_written == 48
    assert not result.ok
    assert sorted(c for c, _ in calls) == list(range(1, 17))
    assert {t for _, t in calls} == {16}
    assert [f.path.name for f in result.errors] == [p.name for p in bad]
    assert {f.error_type for f in result.errors} == {"DecodeError"}
    assert len(list(output_dir.glob("*.jpg"))) == 48


def test_export_missing_file_is_a_failure_not_fatal(image_factory, output_dir, tmp_path):
    ok = image_factory("ok.png")
    processed, failed = export_images([ok, tmp_path / "gone.png"], SplitConfig(), output_dir)
    assert (processed, failed) == (1, 1)


def test_export_rgba_and_gif_sources(image_factory, output_dir):
    rgba = image_factory("alpha.png", size=(20, 20), mode="RGBA", color=(0, 0, 255, 100))
    gif = image_factory("grey.gif", size=(20, 20), mode="L", color=50)
    result = export_images([rgba, gif], SplitConfig.new(1, 2), output_dir)
    assert result.ok
    assert len(list(output_dir.glob("*.jpg"))) == 4


def test_export_applies_jpeg_quality(sample_image, output_dir):
    exporter = BatchExporter(ExportConfig(jpeg_quality=90))
    assert exporter.codec.quality == 90
    assert exporter.export([sample_image], SplitConfig(), None, output_dir).ok


def test_export_when_output_is_a_file_then_fatal(sample_image, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    with pytest.raises(OutputDirectoryError) as exc:
        export_images([sample_image], SplitConfig(), blocker)
    assert exc.value.path == blocker


def test_export_creates_nested_output_directory(sample_image, tmp_path):
    target = tmp_path / "a" / "b" / "c"
    assert export_images([sample_image], SplitConfig(), target).ok
    assert (target / "sample_1_1.jpg").exists()


def test_export_empty_set_returns_zero_counts(output_dir):
    calls, progress = _progress_recorder()
    result = export_images([], SplitConfig(), output_dir, progress=progress)
    assert tuple(result) == (0, 0)
    assert calls == []
    assert output_dir.is_dir()


# ─────────────────────────────────────────────────────────────────────────────
# Config resolution with a recording codec
# ─────────────────────────────────────────────────────────────────────────────

def test_export_uses_override_only_for_overridden_image(output_dir):
    # Arrange
    codec = RecordingCodec()
    overrides = ConfigOverrides({1: SplitConfig.from_lines([0.5], [])})

    # Act
    result = BatchExporter(codec=codec).export(
        ["a.png", "b.png", "c.png"], SplitConfig(), overrides, output_dir
    )

    # Assert
    assert result.processed == 3
    assert sorted(codec.written) == [
        ("a_1_1.jpg", (100, 200)),
        ("b_1_1.jpg", (100, 100)),
        ("b_2_1.jpg", (100, 100)),
        ("c_1_1.jpg", (100, 200)),
    ]


def test_export_accepts_plain_mapping_overrides(output_dir):
    codec = RecordingCodec()
    BatchExporter(codec=codec).export(
        ["a.png"], SplitConfig(), {0: SplitConfig.new(1, 3)}, output_dir
    )
    assert len(codec.written) == 3


def test_export_snapshots_overrides_before_running(output_dir):
    """Edits made while the batch runs do not reach images not yet processed."""
    # Arrange
    codec = RecordingCodec()
    overrides = ConfigOverrides()

    def edit_during_run(completed, total):
        overrides.set(1, SplitConfig.new(4, 4))

    # Act
    BatchExporter(ExportConfig(max_workers=1), codec).export(
        ["a.png", "b.png"], SplitConfig(), overrides, output_dir, progress=edit_during_run
    )

    # Assert
    assert sorted(name for name, _ in codec.written) == ["a_1_1.jpg", "b_1_1.jpg"]
    assert overrides.has_override(1)


def test_export_duplicate_line_fails_that_image_only(image_factory, output_dir):
    # Arrange
    dup = image_factory("dup.png", size=(50, 100))
    fine = image_factory("fine.png", size=(50, 100))
    overrides = {0: SplitConfig(rows=3, cols=1, h_lines=(0.3, 0.3))}

    # Act
    result = BatchExporter().export([dup, fine], SplitConfig(), overrides, output_dir)

    # Assert
    assert (result.processed, result.failed) == (1, 1)
    assert result.errors[0].index == 0
    assert result.errors[0].error_type == "EncodeError"
    assert (output_dir / "dup_1_1.jpg").exists()
    assert (output_dir / "fine_1_1.jpg").exists()


def test_export_prefixes_colliding_stems(output_dir):
    codec = RecordingCodec()
    BatchExporter(codec=codec).export(
        ["a/scan.png", "b/scan.jpg", "other.png"], SplitConfig(), None, output_dir
    )
    assert sorted(name for name, _ in codec.written) == [
        "1_scan_1_1.jpg", "2_scan_1_1.jpg", "other_1_1.jpg",
    ]


def test_export_keep_stems_warns_about_collision(output_dir, caplog):
    codec = RecordingCodec()
    exporter = BatchExporter(ExportConfig(disambiguate_stems=False), codec)
    with caplog.at_level(logging.WARNING, logger="grid_splitter"):
        exporter.export(["a/scan.png", "b/scan.png"], SplitConfig(), None, output_dir)
    assert [name for name, _ in codec.written] == ["scan_1_1.jpg", "scan_1_1.jpg"]
    assert "overwrite" in caplog.text


def test_export_failure_is_logged(output_dir, caplog):
    codec = RecordingCodec(fail_on={"bad.png"})
    with caplog.at_level(logging.WARNING, logger="grid_splitter"):
        result = BatchExporter(codec=codec).export(["bad.png"], SplitConfig(), None, output_dir)
    assert result.failed == 1
    assert "Failed to split bad.png" in caplog.text


# ─────────────────────────────────────────────────────────────────────────────
# Progress and cancellation
# ─────────────────────────────────────────────────────────────────────────────

def test_progress_callback_exception_does_not_abort_batch(output_dir):
    def explode(completed, total):
        raise RuntimeError("ui gone")

    result = BatchExporter(codec=RecordingCodec()).export(
        ["a.png", "b.png"], SplitConfig(), None, output_dir, progress=explode
    )
    assert (result.processed, result.failed) == (2, 0)


def test_cancel_before_start_skips_everything(output_dir):
    calls, progress = _progress_recorder()
    cancel = threading.Event()
    cancel.set()

    result = BatchExporter(codec=RecordingCodec()).export(
        ["a.png", "b.png"], SplitConfig(), None, output_dir,
        progress=progress, cancel_event=cancel,
    )

    assert result.skipped == 2
    assert result.total == 2
    assert calls == []


def test_cancel_mid_batch_skips_remaining_images(output_dir):
    # Arrange
    codec = RecordingCodec()
    cancel = threading.Event()

    def cancel_after_first(completed, total):
        cancel.set()

    # Act
    result = BatchExporter(ExportConfig(max_workers=1), codec).export(
        ["a.png", "b.png", "c.png"], SplitConfig(), None, output_dir,
        progress=cancel_after_first, cancel_event=cancel,
    )

    # Assert
    assert (result.processed, result.failed, result.skipped) == (1, 0, 2)
    assert [name for name, _ in codec.written] == ["a_1_1.jpg"]


def test_timings_recorded_per_image(output_dir):
    result = BatchExporter(codec=RecordingCodec()).export(
        ["a.png", "b.png"], SplitConfig.new(2, 2), None, output_dir
    )
    assert set(result.timings.image_timings) == {"1:a.png", "2:b.png"}
    assert {"decode", "partition", "encode"} <= set(result.timings.image_timings["1:a.png"])
    assert "total" in result.timings.batch_timings


def test_timings_disabled(output_dir):
    exporter = BatchExporter(ExportConfig(record_timings=False), RecordingCodec())
    assert exporter.export(["a.png"], SplitConfig(), None, output_dir).timings is None


def test_export_prefix_never_overwrites_existing_stem(image_factory, output_dir):
    # Arrange
    sources = [
        image_factory("a/x.png", size=(20, 20)),
        image_factory("b/x.png", size=(20, 20)),
        image_factory("c/1_x.png", size=(20, 20)),
    ]

    # Act
    result = export_images(sources, SplitConfig(), output_dir)

    # Assert
    assert (result.processed, result.failed) == (3, 0)
    assert sorted(p.name for p in output_dir.iterdir()) == [
        "1_1_x_1_1.jpg", "2_x_1_1.jpg", "3_1_x_1_1.jpg",
    ]
