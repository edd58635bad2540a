"""
Tests for unit conversions (mm, pixels, dots, points, grid cells).
"""

import pytest

from print_designer.core.units import (
    DEFAULT_CELL,
    CellSize,
    cells_to_mm,
    dots_to_mm,
    fmt_mm,
    grid_rect_to_mm,
    mm_rect_to_grid,
    mm_to_cells,
    mm_to_dots,
    mm_to_pt,
    mm_to_px,
    pt_to_mm,
    px_to_mm,
    to_dots,
)


class TestPixels:
    """Tests for mm <-> px at a dpi assumption and zoom scale."""

    def test_one_inch_at_96_dpi(self):
        """25.4mm is 96px at the default screen density."""
        assert mm_to_px(25.4) == pytest.approx(96.0)

    def test_scale_multiplies(self):
        """Zoom scale multiplies the pixel size."""
        assert mm_to_px(10, dpi=96, scale=2.0) == pytest.approx(2 * mm_to_px(10, dpi=96))

    @pytest.mark.parametrize("mm", [0.0, 0.1, 12.5, 210.0, -3.0])
    def test_round_trip(self, mm):
        """px_to_mm undoes mm_to_px."""
        assert px_to_mm(mm_to_px(mm, dpi=300, scale=1.5), dpi=300, scale=1.5) == pytest.approx(mm)

    def test_zero_dpi_rejected(self):
        """A zero dpi is invalid configuration."""
        with pytest.raises(ValueError):
            mm_to_px(10, dpi=0)

    def test_zero_scale_rejected(self):
        with pytest.raises(ValueError):
            px_to_mm(10, scale=0)


class TestDots:
    """Tests for label printer dot conversions."""

    def test_203_dpi(self):
        """One inch at 203 dpi is 203 dots."""
        assert mm_to_dots(25.4, 203) == pytest.approx(203.0)

    def test_to_dots_rounds(self):
        """Command output uses whole dots."""
        assert to_dots(100, 203) == 799      # 799.21...
        assert to_dots(50, 203) == 400       # 399.6...
        assert isinstance(to_dots(1, 300), int)

    @pytest.mark.parametrize("dpi", [203, 300, 600])
    def test_round_trip(self, dpi):
        assert dots_to_mm(mm_to_dots(37.5, dpi), dpi) == pytest.approx(37.5)


class TestPoints:
    def test_72pt_is_one_inch(self):
        assert pt_to_mm(72) == pytest.approx(25.4)

    def test_round_trip(self):
        assert mm_to_pt(pt_to_mm(12)) == pytest.approx(12)


class TestGridCells:
    """Tests for grid cell <-> mm helpers."""

    def test_default_cell(self):
        """Default cell is 1.5mm x 3.75mm."""
        assert DEFAULT_CELL == CellSize(1.5, 3.75)
        assert cells_to_mm(32, 2) == pytest.approx((48.0, 7.5))

    def test_custom_cell(self):
        cell = CellSize(col_width_mm=2.0, row_height_mm=4.0)
        assert grid_rect_to_mm(1, 2, 10, 3, cell) == pytest.approx((2.0, 8.0, 20.0, 12.0))

    def test_rect_round_trip(self):
        """mm_rect_to_grid undoes grid_rect_to_mm."""
        mm = grid_rect_to_mm(3, 4, 12, 2)
        assert mm_rect_to_grid(*mm) == pytest.approx((3, 4, 12, 2))

    def test_cells_round_trip(self):
        assert mm_to_cells(*cells_to_mm(7, 9)) == pytest.approx((7, 9))

    def test_zero_cell_rejected(self):
        """A zero-sized cell cannot be divided by."""
        with pytest.raises(ValueError):
            mm_to_cells(10, 10, CellSize(0, 3.75))


class TestFormatting:
    @pytest.mark.parametrize("value, expected", [(210.0, "210"), (215.9, "215.9"), (0, "0"), (297, "297")])
    def test_fmt_mm(self, value, expected):
        assert fmt_mm(value) == expected
