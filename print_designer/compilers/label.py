# print_designer/compilers/label.py
"""
Label compiler: ZPL II command stream.

All positions are converted from millimetres to printer dots at the
canvas dpi. Field data goes through ^FH hex escaping only when a literal
actually contains a character ZPL treats as a command prefix.
"""
from __future__ import annotations

from typing import List, Optional

from ..core import expressions
from ..core.models import LabelBarcode, LabelBox, LabelCanvas, LabelElement, LabelQrCode, LabelText
from ..core.units import fmt_mm, to_dots
from .base import (
    MISSING_STYLE_FIELD,
    UNSUPPORTED_BARCODE_FORMAT,
    BaseCompiler,
    CompileContext,
    PrintHint,
)

ROTATIONS = ("N", "R", "I", "B")
QR_ECC_LEVELS = ("H", "Q", "M", "L")

DEFAULT_FONT_DOTS = 30
DEFAULT_BOX_THICKNESS = 1
DEFAULT_BARCODE_HEIGHT = 80
DEFAULT_MODULE_WIDTH = 2
DEFAULT_QR_MAGNIFICATION = 4


def _block_breaks(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\n", "\\&")


def field_data(source: str, block: bool = False) -> str:
    """
    ^FD...^FS for *source*, prefixed by ^FH when a literal needs hex escapes.

    With *block* set the field belongs to a ^FB text block, and newlines in
    literal text become the \\& line break; ZPL ignores raw CR/LF.
    """
    if block:
        source = expressions.transform_literals(source, _block_breaks)
    needs_hex = any(
        expressions.zpl_needs_hex(span.value)
        for span in expressions.split_spans(source)
        if not span.is_expr
    )
    body = expressions.zpl(source) if needs_hex else source
    return ("^FH" if needs_hex else "") + "^FD" + body + "^FS"


def _rotation(value: Optional[str]) -> str:
    value = (value or "N").upper()
    return value if value in ROTATIONS else "N"


def _yes_no(flag: bool) -> str:
    return "Y" if flag else "N"


class LabelCompiler(BaseCompiler):
    kind = "label"
    handlers = {
        LabelText: "compile_text",
        LabelBox: "compile_box",
        LabelBarcode: "compile_barcode",
        LabelQrCode: "compile_qrcode",
    }

    def assemble(self, fragments: List[str], ctx: CompileContext) -> str:
        canvas: LabelCanvas = ctx.canvas
        lines = [
            "^XA",
            "^CI28",
            f"^PW{to_dots(canvas.width_mm, canvas.dpi)}",
            f"^LL{to_dots(canvas.height_mm, canvas.dpi)}",
        ]
        if canvas.origin is not None:
            lines.append(f"^LH{to_dots(canvas.origin.x_mm, canvas.dpi)},{to_dots(canvas.origin.y_mm, canvas.dpi)}")
        lines.extend(fragments)
        lines.append("^XZ")
        return "\n".join(lines)

    def print_hint(self, canvas: LabelCanvas) -> Optional[PrintHint]:
        return PrintHint(paper_size=f"{fmt_mm(canvas.width_mm)}mm {fmt_mm(canvas.height_mm)}mm")

    def unknown_fragment(self, el, ctx: CompileContext) -> str:
        type_name = getattr(el, "type", "") or type(el).__name__
        # ^FX runs to the next caret or tilde.
        type_name = type_name.replace("^", "").replace("~", "")
        return f"^FX Unknown element type: {type_name}"

    # ---- helpers ----

    def _dots(self, value_mm: float, ctx: CompileContext) -> int:
        return to_dots(value_mm, ctx.canvas.dpi)

    def _origin(self, el: LabelElement, ctx: CompileContext) -> str:
        return f"^FO{self._dots(el.rect.x, ctx)},{self._dots(el.rect.y, ctx)}"

    @staticmethod
    def _positive(el: LabelElement, ctx: CompileContext, value: Optional[int], field: str, default: int) -> int:
        if value is None or int(value) <= 0:
            ctx.warn(MISSING_STYLE_FIELD, f"{el.type} element has no {field}, using {default}", el)
            return default
        return int(value)

    # ---- element handlers ----

    def compile_text(self, el: LabelText, ctx: CompileContext) -> str:
        st = el.style
        height = self._positive(el, ctx, st.font_height_dot, "font height", DEFAULT_FONT_DOTS)
        width = self._positive(el, ctx, st.font_width_dot, "font width", height)
        font = (st.font_name or "0")[:1]
        rot = _rotation(st.rotation)

        block_width = self._dots(el.rect.width, ctx)
        max_lines = max(1, self._dots(el.rect.height, ctx) // height)
        return (
            f"{self._origin(el, ctx)}^A{font}{rot},{height},{width}"
            f"^FB{block_width},{max_lines},0,L,0"
            f"{field_data(el.content.source(), block=True)}"
        )

    def compile_box(self, el: LabelBox, ctx: CompileContext) -> str:
        st = el.style
        thickness = self._positive(el, ctx, st.thickness_dot, "line thickness", DEFAULT_BOX_THICKNESS)
        color = "W" if (st.color or "B").upper() == "W" else "B"
        w = max(thickness, self._dots(el.rect.width, ctx))
        h = max(thickness, self._dots(el.rect.height, ctx))
        return f"{self._origin(el, ctx)}^GB{w},{h},{thickness},{color},0^FS"

    def compile_barcode(self, el: LabelBarcode, ctx: CompileContext) -> str:
        st = el.style
        height = self._positive(el, ctx, st.height_dot, "barcode height", DEFAULT_BARCODE_HEIGHT)
        module = self._positive(el, ctx, st.module_width_dot, "module width", DEFAULT_MODULE_WIDTH)
        rot = _rotation(st.rotation)
        hri = _yes_no(st.print_hri)

        fmt = (st.format or "code128").lower()
        if fmt == "ean13":
            symbol = f"^BE{rot},{height},{hri},N"
        elif fmt == "code39":
            symbol = f"^B3{rot},N,{height},{hri},N"
        else:
            if fmt != "code128":
                ctx.warn(UNSUPPORTED_BARCODE_FORMAT, f"Barcode format {st.format!r} not supported, using code128", el)
            symbol = f"^BC{rot},{height},{hri},N,N"

        return f"{self._origin(el, ctx)}^BY{module}{symbol}{field_data(el.data.source())}"

    def compile_qrcode(self, el: LabelQrCode, ctx: CompileContext) -> str:
        st = el.style
        model = 1 if st.model == 1 else 2
        mag = self._positive(el, ctx, st.magnification, "magnification", DEFAULT_QR_MAGNIFICATION)
        mag = min(mag, 10)
        ecc = (st.ecc or "M").upper()
        if ecc not in QR_ECC_LEVELS:
            ecc = "M"
        # QR field data carries "<ecc><input mode>," in front of the payload.
        data = field_data(f"{ecc}A,{el.data.source()}")
        return f"{self._origin(el, ctx)}^BQN,{model},{mag}{data}"
