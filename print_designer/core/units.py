"""
core/units.py - Unit conversions between millimetres, pixels, printer dots,
points and character-grid cells.

Millimetres are the native unit of page and label canvases; receipt and
text canvases are addressed in grid cells. Everything here is a pure
function over floats.
"""
from __future__ import annotations

from dataclasses import dataclass

MM_PER_INCH = 25.4
PT_PER_INCH = 72.0

# Screen assumption used by the editor when no device is involved.
SCREEN_DPI = 96.0

# Label printers ship in these densities only.
LABEL_DPIS = (203, 300, 600)


@dataclass(frozen=True)
class CellSize:
    """Physical size of one character cell, for previews and rulers."""
    col_width_mm: float = 1.5
    row_height_mm: float = 3.75


DEFAULT_CELL = CellSize()


def _check_positive(value: float, what: str) -> float:
    value = float(value)
    if value <= 0:
        raise ValueError(f"{what} must be positive, got {value}")
    return value


# ---------------------------------------------------------------------------
# mm <-> pixels / dots / points
# ---------------------------------------------------------------------------

def px_per_mm(dpi: float = SCREEN_DPI, scale: float = 1.0) -> float:
    return _check_positive(dpi, "dpi") / MM_PER_INCH * _check_positive(scale, "scale")


def mm_to_px(mm: float, dpi: float = SCREEN_DPI, scale: float = 1.0) -> float:
    return float(mm) * px_per_mm(dpi, scale)


def px_to_mm(px: float, dpi: float = SCREEN_DPI, scale: float = 1.0) -> float:
    return float(px) / px_per_mm(dpi, scale)


def mm_to_dots(mm: float, dpi: float) -> float:
    """Millimetres to printer dots; fractional, see to_dots() for command output."""
    return float(mm) * _check_positive(dpi, "dpi") / MM_PER_INCH


def dots_to_mm(dots: float, dpi: float) -> float:
    return float(dots) * MM_PER_INCH / _check_positive(dpi, "dpi")


def to_dots(mm: float, dpi: float) -> int:
    """Whole dots for printer commands (half rounds away from zero)."""
    value = mm_to_dots(mm, dpi)
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def pt_to_mm(pt: float) -> float:
    return float(pt) * MM_PER_INCH / PT_PER_INCH


def mm_to_pt(mm: float) -> float:
    return float(mm) * PT_PER_INCH / MM_PER_INCH


# ---------------------------------------------------------------------------
# grid cells <-> mm
# ---------------------------------------------------------------------------

def cols_to_mm(cols: float, cell: CellSize = DEFAULT_CELL) -> float:
    return float(cols) * cell.col_width_mm


def rows_to_mm(rows: float, cell: CellSize = DEFAULT_CELL) -> float:
    return float(rows) * cell.row_height_mm


def mm_to_cols(mm: float, cell: CellSize = DEFAULT_CELL) -> float:
    return float(mm) / _check_positive(cell.col_width_mm, "col_width_mm")


def mm_to_rows(mm: float, cell: CellSize = DEFAULT_CELL) -> float:
    return float(mm) / _check_positive(cell.row_height_mm, "row_height_mm")


def cells_to_mm(cols: float, rows: float, cell: CellSize = DEFAULT_CELL) -> tuple[float, float]:
    return cols_to_mm(cols, cell), rows_to_mm(rows, cell)


def mm_to_cells(width_mm: float, height_mm: float, cell: CellSize = DEFAULT_CELL) -> tuple[float, float]:
    return mm_to_cols(width_mm, cell), mm_to_rows(height_mm, cell)


def grid_rect_to_mm(col: float, row: float, col_span: float, row_span: float,
                    cell: CellSize = DEFAULT_CELL) -> tuple[float, float, float, float]:
    """(col, row, col_span, row_span) -> (x, y, width, height) in mm."""
    return (
        cols_to_mm(col, cell),
        rows_to_mm(row, cell),
        cols_to_mm(col_span, cell),
        rows_to_mm(row_span, cell),
    )


def mm_rect_to_grid(x: float, y: float, width: float, height: float,
                    cell: CellSize = DEFAULT_CELL) -> tuple[float, float, float, float]:
    """Inverse of grid_rect_to_mm(); fractional cells are kept."""
    return (
        mm_to_cols(x, cell),
        mm_to_rows(y, cell),
        mm_to_cols(width, cell),
        mm_to_rows(height, cell),
    )


def fmt_mm(value: float) -> str:
    """Compact millimetre number for CSS/paper hints: 210.0 -> '210', 215.9 -> '215.9'."""
    return f"{float(value):g}"
