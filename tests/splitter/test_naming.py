"""
Tests for splitter.naming
"""

from grid_splitter.core.models import ImageSet
from grid_splitter.splitter.naming import colliding_stems, plan_output_stems


def test_unique_stems_unchanged():
    images = ImageSet(["a/one.png", "b/two.jpg"])
    assert plan_output_stems(images) == ["one", "two"]


def test_colliding_stems_prefixed_with_position():
    images = ImageSet(["a/x.png", "b/y.png", "c/x.jpg"])
    assert plan_output_stems(images) == ["1_x", "y", "3_x"]


def test_collision_is_case_insensitive():
    images = ImageSet(["Scan.png", "scan.jpg"])
    assert plan_output_stems(images) == ["1_Scan", "2_scan"]


def test_same_path_twice_counts_as_collision():
    images = ImageSet(["p.png", "p.png"])
    assert plan_output_stems(images) == ["1_p", "2_p"]


def test_disambiguate_off_keeps_plain_stems():
    images = ImageSet(["a/x.png", "b/x.png"])
    assert plan_output_stems(images, disambiguate=False) == ["x", "x"]


def test_colliding_stems_reports_first_spelling_once():
    assert colliding_stems(["x", "y", "X", "x"]) == ["x"]
    assert colliding_stems(["a", "b"]) == []


def test_prefix_that_matches_another_stem_is_prefixed_again():
    """a/x.png -> 1_x must not land on c/1_x.png's own stem."""
    # Arrange
    images = ImageSet(["a/x.png", "b/x.png", "c/1_x.png"])

    # Act
    stems = plan_output_stems(images)

    # Assert
    assert stems == ["1_1_x", "2_x", "3_1_x"]
    assert len({stem.casefold() for stem in stems}) == 3


def test_planned_stems_unique_for_layered_collisions():
    images = ImageSet(["x.png", "X.jpg", "1_x.png", "1_1_x.png", "2_x.bmp"])
    stems = plan_output_stems(images)
    assert len({stem.casefold() for stem in stems}) == len(stems)
