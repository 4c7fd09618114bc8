# =============================================================================
# tests/test_units.py - Unit Conversion Tests
# =============================================================================
# Run with: pytest tests/test_units.py -v
# =============================================================================

import pytest

from lib.units import format_dimension, mm_to_pt, mm_to_px, round_half_away_from_zero


class TestRounding:
    """Tests for round_half_away_from_zero."""

    @pytest.mark.parametrize("value,expected", [
        (0.5, 1),
        (1.5, 2),
        (2.5, 3),
        (2.4999, 2),
        (-2.5, -3),
        (-0.4, 0),
        (7.0, 7),
    ])
    def test_ties_round_away_from_zero(self, value, expected):
        assert round_half_away_from_zero(value) == expected

    def test_differs_from_builtin_round(self):
        """Built-in round() rounds ties to even."""
        assert round(2.5) == 2
        assert round_half_away_from_zero(2.5) == 3


class TestMmToPx:
    """Tests for mm_to_px."""

    def test_postcard_size_at_300_dpi(self):
        # 100mm = 1181.10px, 150mm = 1771.65px
        assert mm_to_px(100) == 1181
        assert mm_to_px(150) == 1772

    def test_one_inch(self):
        assert mm_to_px(25.4) == 300

    def test_custom_dpi(self):
        assert mm_to_px(25.4, dpi=72) == 72

    def test_axes_round_independently(self):
        """A 2:3 physical size does not give an exact 2:3 pixel box."""
        width, height = mm_to_px(100), mm_to_px(150)
        assert width * 3 != height * 2


class TestMmToPt:
    """Tests for mm_to_pt."""

    def test_one_inch_is_72_points(self):
        assert mm_to_pt(25.4) == pytest.approx(72.0)

    def test_bleed_page(self):
        # 100x150mm with 3mm bleed -> 106x156mm
        assert mm_to_pt(106) == pytest.approx(300.47, abs=0.01)
        assert mm_to_pt(156) == pytest.approx(442.20, abs=0.01)


class TestFormatDimension:
    """Tests for format_dimension."""

    @pytest.mark.parametrize("value,expected", [
        (100, "100"),
        (100.0, "100"),
        (3.0, "3"),
        (0, "0"),
        (100.5, "100.5"),
        (2.25, "2.25"),
    ])
    def test_formats(self, value, expected):
        assert format_dimension(value) == expected
