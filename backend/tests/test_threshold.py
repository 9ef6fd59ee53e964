import pytest

from redlight.services.game import threshold


def test_cutoff_endpoints():
    assert threshold.cutoff(1) == pytest.approx(8.0)
    assert threshold.cutoff(40) == pytest.approx(0.3)


def test_cutoff_is_non_increasing_across_levels():
    values = [threshold.cutoff(level) for level in range(1, 41)]
    assert all(a >= b for a, b in zip(values, values[1:]))


def test_cutoff_clamps_out_of_range_levels():
    assert threshold.cutoff(0) == threshold.cutoff(1)
    assert threshold.cutoff(-5) == threshold.cutoff(1)
    assert threshold.cutoff(99) == threshold.cutoff(40)


def test_cutoff_midpoint_is_linear():
    expected = 8.0 - 19 * (8.0 - 0.3) / 39
    assert threshold.cutoff(20) == pytest.approx(expected)


def test_score_equal_to_cutoff_is_safe():
    level = 10
    limit = threshold.cutoff(level)
    assert not threshold.is_unsafe(limit, level)
    assert threshold.is_unsafe(limit + 0.001, level)


def test_danger_level_is_bounded():
    assert threshold.danger_level(None, 10) == 0.0
    assert threshold.danger_level(0.0, 10) == 0.0
    assert threshold.danger_level(threshold.cutoff(10) / 2, 10) == pytest.approx(0.5)
    assert threshold.danger_level(1000.0, 10) == 1.0
