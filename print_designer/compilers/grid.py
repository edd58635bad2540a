# print_designer/compilers/grid.py
"""
Character-grid layout shared by the receipt and text compilers.

Each element handler returns a list of Segments (one per output line the
element occupies). assemble() paints segments row by row in paint order,
so a later segment overwrites the cells of an earlier one, and then turns
every row into one line of output.

Static text is laid out here: wrapped or clipped to the column span and
padded according to its alignment. Text that contains {{expressions}}
can't be measured until render time; each of its source lines is
written at the start column and left unpadded.
"""
from __future__ import annotations

import textwrap
from dataclasses import dataclass, replace
from itertools import groupby
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core import expressions
from ..core.models import GridCanvas, GridElement
from .base import OUT_OF_BOUNDS, BaseCompiler, CompileContext, CompileWarning

ALIGNMENTS = ("left", "center", "right")
TAB_SIZE = 4


@dataclass(frozen=True)
class Segment:
    element_id: str
    row: int
    col: int
    width: int                  # columns covered
    text: str                   # padded literal text, or template source when dynamic
    dynamic: bool = False
    scale: int = 1              # columns per character (2 for double width)
    line_rows: int = 1          # rows per line (2 for double height)
    align: str = "left"
    style: Any = None
    condition: Optional[str] = None


def layout_lines(text: str, width: int, wrap: str = "wrap") -> List[str]:
    """Break *text* into lines of at most *width* characters."""
    lines: List[str] = []
    for paragraph in text.split("\n"):
        paragraph = paragraph.expandtabs(TAB_SIZE)
        if wrap == "clip":
            lines.append(paragraph[:width])
        else:
            lines.extend(textwrap.wrap(paragraph, width=width) or [""])
    return lines


def align_text(line: str, width: int, align: str) -> str:
    if align == "center":
        return line.center(width)
    if align == "right":
        return line.rjust(width)
    return line.ljust(width)


class GridCompiler(BaseCompiler):
    """Receipt/text base; subclasses supply control codes."""

    @staticmethod
    def escape(text: str) -> str:
        return text

    # ---- device hooks ----

    def header(self, canvas: GridCanvas) -> str:
        return ""

    def footer(self, canvas: GridCanvas) -> str:
        return ""

    def style_codes(self, style: Any) -> Tuple[str, str]:
        return "", ""

    def align_codes(self, align: str) -> Tuple[str, str]:
        return "", ""

    # ---- pipeline hooks ----

    def wrap_conditional(self, fragment: List[Segment], condition: str) -> List[Segment]:
        return [replace(seg, condition=condition) for seg in fragment]

    def unknown_fragment(self, el, ctx: CompileContext) -> List[Segment]:
        return []

    # ---- element handlers ----

    def compile_text(self, el: GridElement, ctx: CompileContext) -> List[Segment]:
        style = el.style
        r = el.rect
        align = style.align if style.align in ALIGNMENTS else "left"
        scale = 2 if getattr(style, "double_width", False) else 1
        line_rows = 2 if getattr(style, "double_height", False) else 1
        capacity = max(1, r.col_span // scale)
        max_lines = max(1, r.row_span // line_rows)

        # (text, dynamic) per output line; a dynamic line is one source line
        lines: List[Tuple[str, bool]] = []
        source = el.content.source()
        if expressions.has_expression(source):
            for part in source.split("\n"):
                if expressions.has_expression(part):
                    lines.append((expressions.transform_literals(part, self.escape), True))
                else:
                    lines.extend((line, False) for line in layout_lines(self.escape(part), capacity, style.wrap))
        else:
            lines = [(line, False) for line in layout_lines(self.escape(source), capacity, style.wrap)]

        segments = []
        for i, (text, dynamic) in enumerate(lines[:max_lines]):
            segments.append(Segment(
                element_id=el.id,
                row=r.row + i * line_rows,
                col=r.col,
                width=max(1, r.col_span) if dynamic else capacity * scale,
                text=text if dynamic else align_text(text, capacity, align),
                dynamic=dynamic,
                scale=scale,
                line_rows=line_rows,
                align=align,
                style=style,
            ))
        return segments

    def compile_hline(self, el: GridElement, ctx: CompileContext) -> List[Segment]:
        char = self.escape((el.char or "-")[:1]) or "-"
        r = el.rect
        width = max(1, r.col_span)
        return [Segment(element_id=el.id, row=r.row, col=r.col, width=width, text=char * width)]

    # ---- assembly ----

    def _fit(self, segments: Sequence[Segment], ctx: CompileContext) -> List[Segment]:
        """Drop or clip segments that fall outside the canvas; warn once per element."""
        canvas: GridCanvas = ctx.canvas
        cols = canvas.cols
        flagged = set()

        def flag(seg: Segment, message: str) -> None:
            if seg.element_id not in flagged:
                flagged.add(seg.element_id)
                ctx.warnings.append(CompileWarning(OUT_OF_BOUNDS, message, seg.element_id))

        kept = []
        for seg in segments:
            last_row = seg.row + seg.line_rows - 1
            if seg.row < 0 or seg.col < 0 or seg.col >= cols:
                flag(seg, f"Element at col {seg.col}, row {seg.row} is outside the {cols}-column canvas")
                continue
            if not canvas.auto_rows and last_row >= canvas.min_rows:
                flag(seg, f"Element row {last_row} is below the last row ({canvas.min_rows - 1}) of a fixed-height canvas")
                continue
            if not seg.dynamic and seg.col + seg.width > cols:
                flag(seg, f"Element extends past column {cols} and was clipped")
                room = (cols - seg.col) // seg.scale
                seg = replace(seg, text=seg.text[:room], width=room * seg.scale)
            kept.append(seg)
        return kept

    def assemble(self, fragments: List[List[Segment]], ctx: CompileContext) -> str:
        canvas: GridCanvas = ctx.canvas
        segments = self._fit([seg for frag in fragments for seg in frag], ctx)

        n_rows = canvas.min_rows
        if canvas.auto_rows and segments:
            n_rows = max(n_rows, max(seg.row + seg.line_rows for seg in segments))

        by_row: Dict[int, List[Segment]] = {}
        consumed = set()
        for seg in segments:
            by_row.setdefault(seg.row, []).append(seg)
            for extra in range(1, seg.line_rows):
                consumed.add(seg.row + extra)

        body = []
        for row in range(n_rows):
            segs = by_row.get(row, [])
            if not segs and row in consumed:
                # printed by the double-height line above
                continue
            body.append(self.render_line(segs, canvas.cols))
        return self.header(canvas) + "".join(body) + self.footer(canvas)

    def render_line(self, segs: Sequence[Segment], cols: int) -> str:
        """One output line, newline included."""
        cells: List[Optional[Tuple[int, str]]] = [None] * cols
        for idx, seg in enumerate(segs):
            if seg.dynamic:
                for c in range(seg.col, min(cols, seg.col + seg.width)):
                    cells[c] = (idx, "")
                cells[seg.col] = (idx, seg.text)
                continue
            for i, ch in enumerate(seg.text):
                c = seg.col + i * seg.scale
                if c >= cols:
                    break
                cells[c] = (idx, ch)
                for k in range(1, seg.scale):
                    if c + k < cols:
                        cells[c + k] = (idx, "")

        runs: List[Tuple[Optional[int], str]] = []
        for owner, group in groupby(cells, key=lambda cell: None if cell is None else cell[0]):
            text = "".join(" " if cell is None else cell[1] for cell in group)
            runs.append((owner, text))
        while runs and runs[-1][0] is None:
            runs.pop()

        owners = [owner for owner, _ in runs if owner is not None]
        conditions = {segs[o].condition for o in owners}
        line_condition = conditions.pop() if len(conditions) == 1 else None

        parts = []
        for i, (owner, text) in enumerate(runs):
            if owner is None:
                parts.append(text)
                continue
            seg = segs[owner]
            on, off = self.style_codes(seg.style)
            if i == len(runs) - 1 and not seg.dynamic and not on:
                text = text.rstrip(" ")
            part = on + text + off
            if seg.condition and not line_condition:
                part = "{{#if " + seg.condition + "}}" + part + "{{/if}}"
            parts.append(part)
        line = "".join(parts) + "\n"

        if len(set(owners)) == 1:
            seg = segs[owners[0]]
            if seg.dynamic and seg.col == 0 and seg.width >= cols and seg.align != "left":
                # alignment is latched at the start of a line; reset after the feed
                on, off = self.align_codes(seg.align)
                line = on + line + off

        if line_condition:
            return "{{#if " + line_condition + "}}" + line + "{{/if}}"
        return line
