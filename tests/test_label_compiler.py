"""
Tests for the label (ZPL) compiler.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import pytest

from print_designer.compilers import compile_template
from print_designer.compilers.base import MISSING_STYLE_FIELD, UNKNOWN_ELEMENT_TYPE, UNSUPPORTED_BARCODE_FORMAT
from print_designer.compilers.label import field_data
from print_designer.core.models import (
    LabelBarcode,
    LabelBarcodeStyle,
    LabelBox,
    LabelBoxStyle,
    LabelCanvas,
    LabelElement,
    LabelQrCode,
    LabelQrStyle,
    LabelText,
    LabelTextStyle,
    MmRect,
    Point,
)


@dataclass(frozen=True)
class LabelSticker(LabelElement):
    type: ClassVar[str] = "sticker"


@pytest.fixture()
def canvas():
    """100 x 50 mm at 203 dpi."""
    return LabelCanvas()


def _lines(result):
    return result.output.split("\n")


class TestFrame:
    def test_empty_label(self, canvas):
        result = compile_template([], canvas)
        assert _lines(result) == ["^XA", "^CI28", "^PW799", "^LL400", "^XZ"]
        assert result.print_hint.paper_size == "100mm 50mm"

    def test_origin_offset(self):
        result = compile_template([], LabelCanvas(origin=Point(2, 3)))
        assert "^LH16,24" in _lines(result)

    def test_dpi_changes_dots(self):
        result = compile_template([], LabelCanvas(dpi=300, width_mm=25.4, height_mm=25.4))
        assert "^PW300" in _lines(result)
        assert "^LL300" in _lines(result)


class TestFieldData:
    """Tests for ^FD escaping."""

    def test_plain(self):
        assert field_data("SKU {{sku}}") == "^FDSKU {{sku}}^FS"

    def test_hex_escape_only_literals(self):
        """Command characters in literals are hex escaped; expressions are not."""
        assert field_data("A^B_{{item_code}}") == "^FH^FDA_5EB_5F{{item_code}}^FS"

    def test_underscore_in_expression_only(self):
        assert field_data("{{item_code}}") == "^FD{{item_code}}^FS"

    @pytest.mark.parametrize("source", ["Line one\nLine two", "Line one\r\nLine two"])
    def test_block_line_breaks(self, source):
        """Newlines in a ^FB block become the \\& line break."""
        assert field_data(source, block=True) == "^FDLine one\\&Line two^FS"

    def test_block_line_breaks_with_hex(self):
        assert field_data("a_b\n{{x}}", block=True) == "^FH^FDa_5Fb\\&{{x}}^FS"


class TestElements:
    def test_text(self, canvas):
        el = LabelText(id="t", rect=MmRect(10, 5, 50, 10), content="SKU {{sku}}")
        result = compile_template([el], canvas)
        assert "^FO80,40^A0N,30,30^FB400,2,0,L,0^FDSKU {{sku}}^FS" in _lines(result)
        assert result.warnings == ()

    def test_text_multiline(self, canvas):
        el = LabelText(id="t", rect=MmRect(0, 0, 50, 20), content="Line one\nLine two {{n}}")
        out = compile_template([el], canvas).output
        assert "^FB400,5,0,L,0^FDLine one\\&Line two {{n}}^FS" in out
        assert "Line one\nLine two" not in out

    def test_text_rotation_and_font(self, canvas):
        style = LabelTextStyle(rotation="R", font_name="D", font_height_dot=20, font_width_dot=10)
        out = compile_template([LabelText(id="t", content="x", style=style)], canvas).output
        assert "^ADR,20,10" in out

    def test_text_missing_font_height(self, canvas):
        style = LabelTextStyle(font_height_dot=None)
        result = compile_template([LabelText(id="t", content="x", style=style)], canvas)
        assert [w.code for w in result.warnings] == [MISSING_STYLE_FIELD]
        assert "^A0N,30,30" in result.output

    def test_box(self, canvas):
        el = LabelBox(id="b", rect=MmRect(0, 0, 25.4, 50.8), style=LabelBoxStyle(thickness_dot=2))
        assert "^FO0,0^GB203,406,2,B,0^FS" in _lines(compile_template([el], canvas))

    def test_white_box(self, canvas):
        el = LabelBox(id="b", style=LabelBoxStyle(color="W"))
        assert ",W,0^FS" in compile_template([el], canvas).output

    def test_barcode(self, canvas):
        el = LabelBarcode(id="c", data="{{order}}")
        assert "^FO0,0^BY2^BCN,80,Y,N,N^FD{{order}}^FS" in _lines(compile_template([el], canvas))

    def test_barcode_no_hri(self, canvas):
        el = LabelBarcode(id="c", data="1", style=LabelBarcodeStyle(print_hri=False, height_dot=50, module_width_dot=3))
        assert "^BY3^BCN,50,N,N,N" in compile_template([el], canvas).output

    def test_barcode_ean13(self, canvas):
        el = LabelBarcode(id="c", data="590123412345", style=LabelBarcodeStyle(format="ean13"))
        result = compile_template([el], canvas)
        assert "^BEN,80,Y,N" in result.output
        assert result.warnings == ()

    def test_barcode_unsupported_format(self, canvas):
        el = LabelBarcode(id="c", data="1", style=LabelBarcodeStyle(format="upca"))
        result = compile_template([el], canvas)
        assert [w.code for w in result.warnings] == [UNSUPPORTED_BARCODE_FORMAT]
        assert "^BCN,80,Y,N,N" in result.output

    def test_qrcode(self, canvas):
        el = LabelQrCode(id="q", data="{{url}}")
        assert "^FO0,0^BQN,2,4^FDMA,{{url}}^FS" in _lines(compile_template([el], canvas))

    def test_qrcode_style(self, canvas):
        el = LabelQrCode(id="q", data="x", style=LabelQrStyle(model=1, magnification=6, ecc="H"))
        assert "^BQN,1,6^FDHA,x^FS" in compile_template([el], canvas).output


class TestPipeline:
    def test_unknown_type(self, canvas):
        result = compile_template([LabelSticker(id="s")], canvas)
        assert [w.code for w in result.warnings] == [UNKNOWN_ELEMENT_TYPE]
        assert "^FX Unknown element type: sticker" in _lines(result)
        assert result.output.endswith("^XZ")

    def test_visible_if(self, canvas):
        el = LabelText(id="t", content="FRAGILE", visible_if="fragile")
        out = compile_template([el], canvas).output
        assert "{{#if fragile}}\n^FO0,0" in out
        assert "^FDFRAGILE^FS\n{{/if}}\n^XZ" in out

    def test_hidden_and_z_order(self, canvas):
        elements = [
            LabelBox(id="b", z=2),
            LabelText(id="t", z=1, content="first"),
            LabelText(id="h", z=0, content="hidden", hidden=True),
        ]
        out = compile_template(elements, canvas).output
        assert "hidden" not in out
        assert out.index("^FDfirst") < out.index("^GB")

    def test_pure(self, canvas):
        elements = [LabelText(id="t", content="a^b"), LabelSticker(id="s")]
        assert compile_template(elements, canvas) == compile_template(elements, canvas)
