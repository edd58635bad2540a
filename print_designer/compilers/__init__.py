# print_designer/compilers/__init__.py
from __future__ import annotations

from typing import Dict, Sequence

from ..core.models import Canvas, Element, TemplateDoc, normalize_kind
from .base import BaseCompiler, CompileResult, CompileWarning, PrintHint
from .label import LabelCompiler
from .page import PageCompiler
from .receipt import ReceiptCompiler
from .text import TextCompiler

COMPILERS: Dict[str, BaseCompiler] = {
    "page": PageCompiler(),
    "label": LabelCompiler(),
    "receipt": ReceiptCompiler(),
    "text": TextCompiler(),
}


def get_compiler(kind: str) -> BaseCompiler:
    """Compiler for a canvas kind (aliases such as 'pdf' or 'zpl' accepted)."""
    return COMPILERS[normalize_kind(kind)]


def compile_template(elements: Sequence[Element], canvas: Canvas) -> CompileResult:
    return get_compiler(canvas.kind).compile(elements, canvas)


def compile_document(doc: TemplateDoc) -> CompileResult:
    return compile_template(doc.elements, doc.canvas)


__all__ = [
    "BaseCompiler",
    "CompileResult",
    "CompileWarning",
    "PrintHint",
    "PageCompiler",
    "LabelCompiler",
    "ReceiptCompiler",
    "TextCompiler",
    "get_compiler",
    "compile_template",
    "compile_document",
]
