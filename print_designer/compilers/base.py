# print_designer/compilers/base.py
"""
Shared compile pipeline.

Every compiler runs the same steps over a snapshot of (elements, canvas):

1. drop hidden elements
2. order the rest by z (paint order == emission order)
3. dispatch on the element class; unknown classes become a warning plus
   an inert fragment, never an exception
4. wrap fragments of elements with ``visible_if`` in a conditional block
5. escape literal text while leaving {{expressions}} untouched

Compilers hold no state between calls: all per-compile data lives on the
CompileContext created inside compile().
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.exceptions import KindMismatchError
from ..core.models import Canvas, Element
from ..utils.log import get_logger

log = get_logger(__name__)

# Warning codes
UNKNOWN_ELEMENT_TYPE = "UNKNOWN_ELEMENT_TYPE"
EMPTY_IMAGE_SRC = "EMPTY_IMAGE_SRC"
BARCODE_PLACEHOLDER = "BARCODE_PLACEHOLDER"
QRCODE_PLACEHOLDER = "QRCODE_PLACEHOLDER"
MISSING_STYLE_FIELD = "MISSING_STYLE_FIELD"
UNSUPPORTED_BARCODE_FORMAT = "UNSUPPORTED_BARCODE_FORMAT"
OUT_OF_BOUNDS = "OUT_OF_BOUNDS"


@dataclass(frozen=True)
class CompileWarning:
    code: str
    message: str
    element_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.element_id is not None:
            d["elementId"] = self.element_id
        return d


@dataclass(frozen=True)
class PrintHint:
    paper_size: Optional[str] = None
    encoding: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.paper_size is not None:
            d["paperSize"] = self.paper_size
        if self.encoding is not None:
            d["encoding"] = self.encoding
        return d


@dataclass(frozen=True)
class CompileResult:
    kind: str
    output: str
    print_hint: Optional[PrintHint] = None
    warnings: Tuple[CompileWarning, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"kind": self.kind, "output": self.output}
        if self.print_hint is not None:
            d["printHint"] = self.print_hint.to_dict()
        d["warnings"] = [w.to_dict() for w in self.warnings]
        return d


@dataclass
class CompileContext:
    canvas: Canvas
    warnings: List[CompileWarning] = field(default_factory=list)
    index: int = 0          # position of the current element in paint order

    def warn(self, code: str, message: str, element: Optional[Element] = None) -> None:
        self.warnings.append(CompileWarning(code, message, element.id if element is not None else None))


def paint_order(elements: Iterable[Element]) -> List[Element]:
    """Visible elements sorted by z; ties keep their document order."""
    return sorted((el for el in elements if not el.hidden), key=lambda el: el.z)


class BaseCompiler:
    """
    Template-method base for the four compilers.

    Subclasses set ``kind`` and ``handlers`` (element class -> method name)
    and implement ``unknown_fragment`` and ``assemble``.
    """

    kind: ClassVar[str] = ""
    handlers: ClassVar[Dict[type, str]] = {}

    def compile(self, elements: Sequence[Element], canvas: Canvas) -> CompileResult:
        if canvas.kind != self.kind:
            raise KindMismatchError(f"{type(self).__name__} cannot compile a {canvas.kind!r} canvas")

        ctx = CompileContext(canvas=canvas)
        fragments: List[Any] = []
        for index, el in enumerate(paint_order(elements)):
            ctx.index = index
            method = self.handlers.get(type(el))
            if method is None:
                type_name = getattr(el, "type", "") or type(el).__name__
                ctx.warn(UNKNOWN_ELEMENT_TYPE, f"Unknown element type: {type_name}", el)
                fragments.append(self.unknown_fragment(el, ctx))
                continue

            fragment = getattr(self, method)(el, ctx)
            if el.visible_if:
                fragment = self.wrap_conditional(fragment, el.visible_if)
            fragments.append(fragment)

        output = self.assemble(fragments, ctx)
        log.debug("compiled %d element(s) for %s, %d warning(s)", len(fragments), self.kind, len(ctx.warnings))
        return CompileResult(
            kind=self.kind,
            output=output,
            print_hint=self.print_hint(canvas),
            warnings=tuple(ctx.warnings),
        )

    def wrap_conditional(self, fragment: Any, condition: str) -> Any:
        return "{{#if " + condition + "}}\n" + fragment + "\n{{/if}}"

    def unknown_fragment(self, el: Element, ctx: CompileContext) -> Any:
        raise NotImplementedError

    def assemble(self, fragments: List[Any], ctx: CompileContext) -> str:
        raise NotImplementedError

    def print_hint(self, canvas: Canvas) -> Optional[PrintHint]:
        return None
