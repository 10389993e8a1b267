"""Tests for the level function."""

import pytest
from pydantic import ValidationError

from repforge.progression.leveling import level_for_xp, level_progress, xp_for_level


class TestLevelForXP:
    @pytest.mark.parametrize(
        "xp, expected",
        [
            (0, 1),
            (30, 1),
            (99, 1),
            (100, 2),
            (110, 2),
            (399, 2),
            (400, 3),
            (899, 3),
            (900, 4),
            (10_000, 11),
        ],
    )
    def test_level_boundaries(self, xp, expected):
        assert level_for_xp(xp) == expected

    def test_monotonic(self):
        levels = [level_for_xp(xp) for xp in range(0, 5000, 7)]
        assert levels == sorted(levels)

    def test_never_below_one(self):
        assert min(level_for_xp(xp) for xp in range(0, 100)) == 1

    def test_negative_xp_rejected(self):
        with pytest.raises(ValueError):
            level_for_xp(-1)

    def test_custom_unit(self):
        assert level_for_xp(50, xp_unit=50) == 2

    def test_large_xp_is_exact(self):
        # (10**6)**2 * 100 is the first xp of level 10**6 + 1
        assert level_for_xp(100 * 10**12) == 10**6 + 1
        assert level_for_xp(100 * 10**12 - 1) == 10**6


class TestXPForLevel:
    @pytest.mark.parametrize("level", [1, 2, 3, 7, 25])
    def test_inverse_of_level_for_xp(self, level):
        start = xp_for_level(level)
        assert level_for_xp(start) == level
        if level > 1:
            assert level_for_xp(start - 1) == level - 1

    def test_level_zero_rejected(self):
        with pytest.raises(ValueError):
            xp_for_level(0)


class TestLevelProgress:
    def test_mid_level(self):
        progress = level_progress(110)
        assert progress.level == 2
        assert progress.xp_into_level == 10
        assert progress.xp_for_next_level == 290

    def test_fresh_account(self):
        assert level_progress(0).model_dump() == {"level": 1, "xp_into_level": 0, "xp_for_next_level": 100}

    def test_progress_is_immutable(self):
        progress = level_progress(0)
        with pytest.raises(ValidationError):
            progress.level = 5
