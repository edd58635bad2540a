# print_designer/compilers/text.py
"""Plain-text compiler: the receipt grid without control sequences."""
from __future__ import annotations

from ..core.models import PlainHLine, PlainText
from .grid import GridCompiler


class TextCompiler(GridCompiler):
    kind = "text"
    handlers = {
        PlainText: "compile_text",
        PlainHLine: "compile_hline",
    }
