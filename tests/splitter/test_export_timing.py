"""
Tests for splitter.timing
"""

import json

from grid_splitter.splitter.timing import TimingLog, timed_phase


def test_timed_phase_accumulates_repeated_phase():
    phases = {}
    with timed_phase(phases, "encode"):
        pass
    first = phases["encode"]
    with timed_phase(phases, "encode"):
        pass
    assert phases["encode"] >= first
    assert list(phases) == ["encode"]


def test_timed_phase_records_on_exception():
    phases = {}
    try:
        with timed_phase(phases, "decode"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert "decode" in phases


def test_phase_averages_and_slowest():
    # Arrange
    log = TimingLog()
    log.record_image("1:a.png", {"decode": 0.2, "encode": 0.4})
    log.record_image("2:b.png", {"decode": 0.4, "encode": 1.0})

    # Act
    averages = log.get_phase_averages()
    slowest = log.get_slowest_images(1)

    # Assert
    assert abs(averages["decode"] - 0.3) < 1e-9
    assert abs(averages["encode"] - 0.7) < 1e-9
    assert slowest[0].key == "2:b.png"
    assert slowest[0].slowest_phase[0] == "encode"
    assert abs(log.get_image_total("1:a.png") - 0.6) < 1e-9


def test_summary_mentions_batch_and_images():
    log = TimingLog()
    log.log_batch("total", 1.5)
    log.record_image("1:a.png", {"decode": 0.1})
    text = log.summary()
    assert "=== Export Timing Summary ===" in text
    assert "total" in text
    assert "1:a.png" in text


def test_save_writes_json(tmp_path):
    log = TimingLog()
    log.record_image("1:a.png", {"decode": 0.1})
    path = tmp_path / "timings.json"
    log.save(path)
    data = json.loads(path.read_text())
    assert data["image_timings"] == {"1:a.png": {"decode": 0.1}}
    assert "phase_averages" in data
