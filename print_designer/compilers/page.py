# print_designer/compilers/page.py
"""
Page compiler: absolutely positioned HTML blocks in millimetres.

Conversion to device pixels is left to whatever renders the markup, so
coordinates go out exactly as stored on the canvas.
"""
from __future__ import annotations

import math
from typing import List, Optional

from ..core import expressions
from ..core.models import (
    PageBarcode,
    PageCanvas,
    PageElement,
    PageHLine,
    PageImage,
    PageLine,
    PageQrCode,
    PageRect,
    PageText,
)
from ..core.units import fmt_mm
from .base import (
    BARCODE_PLACEHOLDER,
    EMPTY_IMAGE_SRC,
    MISSING_STYLE_FIELD,
    QRCODE_PLACEHOLDER,
    BaseCompiler,
    CompileContext,
    PrintHint,
)

DEFAULT_FONT_SIZE_PT = 12.0
DEFAULT_STROKE_MM = 0.3
DEFAULT_STROKE_COLOR = "#000000"
OBJECT_FITS = ("contain", "cover", "fill")

# Repeated-character rules: roughly three monospace characters per mm.
HLINE_CHARS_PER_MM = 3

_VERTICAL = {"top": "flex-start", "middle": "center", "bottom": "flex-end"}

_PLACEHOLDER_STYLES = [
    "display:flex",
    "align-items:center",
    "justify-content:center",
    "background:#fafafa",
    "border:1px dashed #ccc",
    "font-size:10pt",
]


def _attr(value: object) -> str:
    """Style/attribute value: escaped, expressions kept."""
    return expressions.html(str(value))


def _num(value: float) -> str:
    return f"{float(value):g}"


class PageCompiler(BaseCompiler):
    kind = "page"
    handlers = {
        PageText: "compile_text",
        PageRect: "compile_rect",
        PageLine: "compile_line",
        PageImage: "compile_image",
        PageBarcode: "compile_barcode",
        PageQrCode: "compile_qrcode",
        PageHLine: "compile_hline",
    }

    # ---- pipeline hooks ----

    def assemble(self, fragments: List[str], ctx: CompileContext) -> str:
        canvas: PageCanvas = ctx.canvas
        page_style = (
            f"position:relative;width:{fmt_mm(canvas.width_mm)}mm;"
            f"height:{fmt_mm(canvas.height_mm)}mm;overflow:hidden;"
        )
        body = "\n".join(fragments)
        return f'<div class="print-page" style="{page_style}">\n{body}\n</div>'

    def print_hint(self, canvas: PageCanvas) -> Optional[PrintHint]:
        return PrintHint(paper_size=f"{fmt_mm(canvas.width_mm)}mm {fmt_mm(canvas.height_mm)}mm")

    def unknown_fragment(self, el, ctx: CompileContext) -> str:
        type_name = (getattr(el, "type", "") or type(el).__name__).replace("--", "- -")
        return f"  <!-- Unknown element type: {_attr(type_name)} -->"

    # ---- helpers ----

    def _base_styles(self, el: PageElement, ctx: CompileContext) -> List[str]:
        r = el.rect
        styles = [
            "position:absolute",
            f"left:{r.x:.2f}mm",
            f"top:{r.y:.2f}mm",
            f"width:{r.width:.2f}mm",
            f"height:{r.height:.2f}mm",
            "box-sizing:border-box",
        ]
        if el.rotate_deg:
            styles.append(f"transform:rotate({_num(el.rotate_deg)}deg)")
            styles.append("transform-origin:center center")
        # CSS z-index is an integer; paint order already encodes z.
        styles.append(f"z-index:{ctx.index}")
        return styles

    @staticmethod
    def _div(el: PageElement, styles: List[str], inner: str = "") -> str:
        return f'  <div data-id="{_attr(el.id)}" style="{";".join(styles)}">{inner}</div>'

    def _stroke(self, el: PageElement, ctx: CompileContext, stroke_mm: Optional[float], color: Optional[str]) -> tuple[str, str]:
        if stroke_mm is None:
            ctx.warn(MISSING_STYLE_FIELD, f"{el.type} element has no stroke width, using {DEFAULT_STROKE_MM}mm", el)
            stroke_mm = DEFAULT_STROKE_MM
        return _num(stroke_mm), _attr(color or DEFAULT_STROKE_COLOR)

    # ---- element handlers ----

    def compile_text(self, el: PageText, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx)
        st = el.style

        if st.font_family:
            styles.append(f"font-family:{_attr(st.font_family)}")
        size = st.font_size_pt
        if size is None or size <= 0:
            ctx.warn(MISSING_STYLE_FIELD, f"Text element has no font size, using {_num(DEFAULT_FONT_SIZE_PT)}pt", el)
            size = DEFAULT_FONT_SIZE_PT
        styles.append(f"font-size:{_num(size)}pt")
        if st.bold:
            styles.append("font-weight:bold")
        if st.italic:
            styles.append("font-style:italic")
        if st.underline:
            styles.append("text-decoration:underline")
        if st.color:
            styles.append(f"color:{_attr(st.color)}")
        if st.align:
            styles.append(f"text-align:{_attr(st.align)}")
        if st.line_height:
            styles.append(f"line-height:{_num(st.line_height)}")
        if st.vertical_align in _VERTICAL:
            styles.append("display:flex")
            styles.append("flex-direction:column")
            styles.append(f"justify-content:{_VERTICAL[st.vertical_align]}")

        styles.append("overflow:hidden")
        styles.append("white-space:pre-wrap")
        styles.append("word-wrap:break-word")

        return self._div(el, styles, expressions.html(el.content.source()))

    def compile_rect(self, el: PageRect, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx)
        st = el.style
        width, color = self._stroke(el, ctx, st.stroke_mm, st.stroke_color)
        styles.append(f"border:{width}mm solid {color}")
        if st.fill_color:
            styles.append(f"background:{_attr(st.fill_color)}")
        if st.radius_mm:
            styles.append(f"border-radius:{_num(st.radius_mm)}mm")
        return self._div(el, styles)

    def compile_line(self, el: PageLine, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx)
        st = el.style
        width, color = self._stroke(el, ctx, st.stroke_mm, st.stroke_color)
        dash = "dashed" if st.dash == "dash" else "solid"
        styles.append(f"border-top:{width}mm {dash} {color}")
        styles.append("height:0")
        return self._div(el, styles)

    def compile_image(self, el: PageImage, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx)
        if not el.src:
            ctx.warn(EMPTY_IMAGE_SRC, "Image element has no source", el)
            styles.extend([
                "background:#f0f0f0",
                "display:flex",
                "align-items:center",
                "justify-content:center",
            ])
            return self._div(el, styles, "Image")

        fit = el.style.object_fit if el.style.object_fit in OBJECT_FITS else "contain"
        styles.append(f"object-fit:{fit}")
        return f'  <img data-id="{_attr(el.id)}" src="{_attr(el.src)}" style="{";".join(styles)}" />'

    def compile_barcode(self, el: PageBarcode, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx) + _PLACEHOLDER_STYLES + ["font-family:monospace"]
        data = el.data.source() or "123456789"
        ctx.warn(
            BARCODE_PLACEHOLDER,
            f"Barcode ({el.format}) compiled as placeholder; render the symbol downstream.",
            el,
        )
        return self._div(el, styles, f"||||| {expressions.html(data)} |||||")

    def compile_qrcode(self, el: PageQrCode, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx) + _PLACEHOLDER_STYLES
        data = el.data.source() or "https://example.com"
        ctx.warn(
            QRCODE_PLACEHOLDER,
            "QR code compiled as placeholder; render the symbol downstream.",
            el,
        )
        return self._div(el, styles, f"[ QR: {expressions.html(data)} ]")

    def compile_hline(self, el: PageHLine, ctx: CompileContext) -> str:
        styles = self._base_styles(el, ctx) + [
            "display:flex",
            "align-items:center",
            "justify-content:center",
            "overflow:hidden",
            "font-family:monospace",
            "letter-spacing:2px",
            "color:#666",
        ]
        char = (el.char or "-")[0]
        line = char * int(math.floor(el.rect.width * HLINE_CHARS_PER_MM))
        return self._div(el, styles, expressions.escape_html(line))
