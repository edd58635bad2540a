# print_designer/compilers/receipt.py
"""
Receipt compiler: character-grid layout with ESC/POS control sequences
embedded in the template. Literal text is stripped of control bytes so
that only the codes emitted here reach the printer.
"""
from __future__ import annotations

from typing import Optional, Tuple

from ..core import expressions
from ..core.models import ReceiptCanvas, ReceiptHLine, ReceiptText, ReceiptTextStyle
from .base import PrintHint
from .grid import GridCompiler

ESC = "\x1b"
GS = "\x1d"
FS = "\x1c"

INIT = ESC + "@"
CHINESE_MODE = FS + "&"
BOLD_ON, BOLD_OFF = ESC + "E\x01", ESC + "E\x00"
UNDERLINE_ON, UNDERLINE_OFF = ESC + "-\x01", ESC + "-\x00"
INVERT_ON, INVERT_OFF = GS + "B\x01", GS + "B\x00"
SIZE_NORMAL = GS + "!\x00"
ALIGN = {"left": ESC + "a\x00", "center": ESC + "a\x01", "right": ESC + "a\x02"}
CUT = {"full": GS + "V\x00", "partial": GS + "V\x01"}


def size_code(double_width: bool, double_height: bool) -> str:
    """GS ! n: high nibble is the width multiplier, low nibble the height."""
    n = (0x10 if double_width else 0) | (0x01 if double_height else 0)
    return GS + "!" + chr(n)


def feed_lines(n: int) -> str:
    return ESC + "d" + chr(max(0, min(int(n), 255)))


class ReceiptCompiler(GridCompiler):
    kind = "receipt"
    handlers = {
        ReceiptText: "compile_text",
        ReceiptHLine: "compile_hline",
    }

    escape = staticmethod(expressions.escape_control)

    def header(self, canvas: ReceiptCanvas) -> str:
        if canvas.encoding == "gb18030":
            return INIT + CHINESE_MODE
        return INIT

    def footer(self, canvas: ReceiptCanvas) -> str:
        cut = canvas.cut
        if cut is None or not cut.enabled:
            return ""
        return feed_lines(cut.feed_lines) + CUT.get(cut.mode, CUT["partial"])

    def style_codes(self, style: Optional[ReceiptTextStyle]) -> Tuple[str, str]:
        if style is None:
            return "", ""
        on, off = [], []
        if style.bold:
            on.append(BOLD_ON)
            off.append(BOLD_OFF)
        if style.underline:
            on.append(UNDERLINE_ON)
            off.append(UNDERLINE_OFF)
        if style.double_width or style.double_height:
            on.append(size_code(style.double_width, style.double_height))
            off.append(SIZE_NORMAL)
        if style.invert:
            on.append(INVERT_ON)
            off.append(INVERT_OFF)
        return "".join(on), "".join(reversed(off))

    def align_codes(self, align: str) -> Tuple[str, str]:
        return ALIGN.get(align, ALIGN["left"]), ALIGN["left"]

    def print_hint(self, canvas: ReceiptCanvas) -> Optional[PrintHint]:
        return PrintHint(encoding=canvas.encoding)
