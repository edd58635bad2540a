"""
core/render.py - Raster preview of compiled receipt / text output.

The compiled template is replayed the way a thermal printer would read it:
ESC/POS style commands change the pen, printable characters land in the
next grid cell, and a newline feeds one row. Expressions are drawn as
their source text, and {{#if}} / {{/if}} tags are dropped so conditional
lines show up as if the condition held.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..compilers import compile_template
from .exceptions import KindMismatchError
from .models import Element, GridCanvas
from .settings import DesignerSettings
from .units import mm_to_px
from ..utils.log import get_logger

log = get_logger(__name__)

ESC, GS, FS = "\x1b", "\x1d", "\x1c"

MARGIN_PX = 8
MONO_FONTS = ("DejaVuSansMono.ttf", "LiberationMono-Regular.ttf", "Courier New.ttf", "cour.ttf")

_BLOCK_TAG = re.compile(r"\{\{[#/][^}]*\}\}")


@dataclass(frozen=True)
class Pen:
    bold: bool = False
    underline: bool = False
    invert: bool = False
    width: int = 1
    height: int = 1


@dataclass
class PreviewLine:
    cells: List[Tuple[str, Pen]] = field(default_factory=list)
    align: str = "left"
    cut: bool = False

    @property
    def columns(self) -> int:
        return sum(pen.width for _, pen in self.cells)

    @property
    def rows(self) -> int:
        return max((pen.height for _, pen in self.cells), default=1)


def parse_device_text(output: str) -> List[PreviewLine]:
    """Replay *output* into preview lines; unknown control bytes are skipped."""
    text = _BLOCK_TAG.sub("", output)
    pen = Pen()
    align = "left"
    lines = [PreviewLine()]

    i = 0
    while i < len(text):
        ch = text[i]
        if ch in (ESC, GS, FS):
            cmd = text[i + 1:i + 2]
            arg = ord(text[i + 2]) if i + 2 < len(text) else 0
            if ch == ESC and cmd == "@":
                pen, align = Pen(), "left"
                i += 2
            elif ch == FS:
                i += 2
            elif ch == ESC and cmd == "E":
                pen = replace(pen, bold=bool(arg & 1))
                i += 3
            elif ch == ESC and cmd == "-":
                pen = replace(pen, underline=bool(arg & 3))
                i += 3
            elif ch == ESC and cmd == "a":
                align = {1: "center", 2: "right"}.get(arg, "left")
                if not lines[-1].cells:
                    lines[-1].align = align
                i += 3
            elif ch == ESC and cmd == "d":
                for _ in range(arg):
                    lines.append(PreviewLine(align=align))
                i += 3
            elif ch == GS and cmd == "!":
                pen = replace(pen, width=((arg >> 4) & 7) + 1, height=(arg & 7) + 1)
                i += 3
            elif ch == GS and cmd == "B":
                pen = replace(pen, invert=bool(arg & 1))
                i += 3
            elif ch == GS and cmd == "V":
                lines[-1].cut = True
                i += 3
            else:
                i += 2
            continue

        if ch == "\n":
            lines.append(PreviewLine(align=align))
        elif ord(ch) >= 32:
            lines[-1].cells.append((ch, pen))
        i += 1

    if not lines[-1].cells and not lines[-1].cut and len(lines) > 1:
        lines.pop()
    return lines


@lru_cache(maxsize=16)
def _font(size: int) -> ImageFont.ImageFont:
    for name in MONO_FONTS:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    log.debug("No monospace TrueType font found, using Pillow's default font")
    return ImageFont.load_default()


def render_output(output: str, canvas: GridCanvas, dpi: int = 96) -> Image.Image:
    """Rasterise compiled grid output at *dpi*, one cell per character."""
    cell = canvas.cell_size
    cw = max(1, int(round(mm_to_px(cell.col_width_mm, dpi))))
    ch = max(1, int(round(mm_to_px(cell.row_height_mm, dpi))))

    lines = parse_device_text(output)
    width = canvas.cols * cw + 2 * MARGIN_PX
    height = sum(line.rows for line in lines) * ch + 2 * MARGIN_PX

    img = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(img)

    y = MARGIN_PX
    for line in lines:
        used = line.columns
        if line.align == "center":
            col = max(0, (canvas.cols - used) // 2)
        elif line.align == "right":
            col = max(0, canvas.cols - used)
        else:
            col = 0

        row_px = line.rows * ch
        for char, pen in line.cells:
            x = MARGIN_PX + col * cw
            box_w, box_h = pen.width * cw, pen.height * ch
            top = y + row_px - box_h
            fg = "black"
            if pen.invert:
                draw.rectangle([x, top, x + box_w - 1, top + box_h - 1], fill="black")
                fg = "white"
            font = _font(max(6, int(box_h * 0.8)))
            draw.text((x, top), char, font=font, fill=fg)
            if pen.bold:
                draw.text((x + 1, top), char, font=font, fill=fg)
            if pen.underline:
                draw.line([x, top + box_h - 1, x + box_w - 1, top + box_h - 1], fill=fg)
            col += pen.width

        y += row_px
        if line.cut:
            draw.line([MARGIN_PX, y, width - MARGIN_PX, y], fill="gray")

    return img


def render_preview(elements: Sequence[Element], canvas: GridCanvas,
                   settings: Optional[DesignerSettings] = None) -> Image.Image:
    """Compile a receipt/text template and rasterise the result."""
    if not isinstance(canvas, GridCanvas):
        raise KindMismatchError(f"Preview is only available for receipt and text canvases, not {canvas.kind!r}")
    settings = settings or DesignerSettings()
    result = compile_template(elements, canvas)
    return render_output(result.output, canvas, settings.preview_dpi)


def to_monochrome(img: Image.Image, darkness: int = 180) -> Image.Image:
    """Threshold to 1-bit the way a thermal head prints it."""
    return img.convert("L").point(lambda p: 255 if p > darkness else 0).convert("1")
