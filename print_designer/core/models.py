# print_designer/core/models.py
"""
Document model: canvases, elements and their styles for the four
canvas kinds, plus the TemplateDoc envelope and its JSON wire form.

Everything here is a frozen dataclass. Python attributes are snake_case;
dump() / load() map them to the camelCase keys used on the wire.
"""
from __future__ import annotations

import time
import types
import uuid
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Type, Union, get_args, get_origin, get_type_hints

from .exceptions import KindMismatchError, SchemaError
from .expressions import expression_body, split_spans
from .units import DEFAULT_CELL, LABEL_DPIS, CellSize

SCHEMA_NAME = "print_designer.template_doc"
SCHEMA_VERSION = 1

CANVAS_KINDS = ("page", "label", "receipt", "text")

# Kind names used by older documents.
KIND_ALIASES = {"pdf": "page", "zpl": "label", "escpos": "receipt"}


def new_id() -> str:
    return uuid.uuid4().hex


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalize_kind(kind: str) -> str:
    kind = KIND_ALIASES.get(kind, kind)
    if kind not in CANVAS_KINDS:
        raise SchemaError(f"Unknown canvas kind: {kind!r}")
    return kind


# ---------- Text content ----------

@dataclass(frozen=True)
class StaticText:
    text: str = ""

    kind: ClassVar[str] = "static"

    def source(self) -> str:
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "text": self.text}


@dataclass(frozen=True)
class ExprText:
    """A single substitution; *expr* is the body between the braces."""
    expr: str = ""
    raw: bool = False

    kind: ClassVar[str] = "hbs"

    def source(self) -> str:
        return "{{{" + self.expr + "}}}" if self.raw else "{{" + self.expr + "}}"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "hbs": {"expr": self.expr, "raw": self.raw}}


@dataclass(frozen=True)
class MixedText:
    parts: Tuple[Union[StaticText, ExprText], ...] = ()

    kind: ClassVar[str] = "mixed"

    def source(self) -> str:
        return "".join(p.source() for p in self.parts)

    def to_dict(self) -> Dict[str, Any]:
        parts = []
        for p in self.parts:
            if isinstance(p, ExprText):
                parts.append(p.to_dict())
            else:
                parts.append({"kind": "text", "text": p.text})
        return {"kind": self.kind, "parts": parts}


TextContent = Union[StaticText, ExprText, MixedText]
CONTENT_TYPES = (StaticText, ExprText, MixedText)


def parse_content(value: Any) -> TextContent:
    """
    Build a TextContent from a plain string or its serialized dict form.

    Strings are split with the expression lexer, so "Order {{id}}" becomes
    MixedText(StaticText("Order "), ExprText("id")).
    """
    if isinstance(value, CONTENT_TYPES):
        return value
    if value is None:
        return StaticText()
    if isinstance(value, str):
        parts = []
        for span in split_spans(value):
            if span.is_expr:
                body, raw = expression_body(span.value)
                parts.append(ExprText(body, raw))
            else:
                parts.append(StaticText(span.value))
        if not parts:
            return StaticText()
        if len(parts) == 1:
            return parts[0]
        return MixedText(tuple(parts))
    if isinstance(value, dict):
        kind = value.get("kind", "static")
        if kind in ("static", "text"):
            return StaticText(str(value.get("text", "")))
        if kind == "hbs":
            hbs = value.get("hbs") or {}
            return ExprText(str(hbs.get("expr", "")), bool(hbs.get("raw", False)))
        if kind == "mixed":
            parts = []
            for p in value.get("parts") or ():
                c = parse_content(p)
                if isinstance(c, MixedText):
                    parts.extend(c.parts)
                else:
                    parts.append(c)
            return MixedText(tuple(parts))
        raise SchemaError(f"Unknown text content kind: {kind!r}")
    raise SchemaError(f"Cannot read text content from {type(value).__name__}")


# ---------- Geometry ----------

@dataclass(frozen=True)
class MmRect:
    """Absolute rectangle in millimetres (page and label canvases)."""
    x: float = 0.0
    y: float = 0.0
    width: float = 10.0
    height: float = 10.0

    wire_keys: ClassVar[Dict[str, str]] = {"x": "xMm", "y": "yMm", "width": "wMm", "height": "hMm"}

    def start(self, axis: str) -> float:
        return self.x if axis == "x" else self.y

    def size(self, axis: str) -> float:
        return self.width if axis == "x" else self.height

    def moved_to(self, axis: str, value: float) -> "MmRect":
        if axis == "x":
            return replace(self, x=float(value))
        return replace(self, y=float(value))

    def offset(self, dx: float, dy: float) -> "MmRect":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class GridRect:
    """Character-grid rectangle (receipt and text canvases); whole cells only."""
    col: int = 0
    row: int = 0
    col_span: int = 1
    row_span: int = 1

    def __post_init__(self) -> None:
        for name in ("col", "row", "col_span", "row_span"):
            object.__setattr__(self, name, int(round(getattr(self, name))))

    def start(self, axis: str) -> int:
        return self.col if axis == "x" else self.row

    def size(self, axis: str) -> int:
        return self.col_span if axis == "x" else self.row_span

    def moved_to(self, axis: str, value: float) -> "GridRect":
        if axis == "x":
            return replace(self, col=int(round(value)))
        return replace(self, row=int(round(value)))

    def offset(self, dx: float, dy: float) -> "GridRect":
        return replace(self, col=int(round(self.col + dx)), row=int(round(self.row + dy)))


# ---------- Element base ----------

@dataclass(frozen=True)
class Element:
    id: str = ""
    name: Optional[str] = None
    z: float = 0.0
    locked: bool = False
    hidden: bool = False
    visible_if: Optional[str] = None

    type: ClassVar[str] = ""
    canvas_kind: ClassVar[str] = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "z", float(self.z))
        if self.visible_if is not None and not str(self.visible_if).strip():
            object.__setattr__(self, "visible_if", None)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"type": self.type}
        d.update(dump(self))
        return d


@dataclass(frozen=True)
class MmElement(Element):
    rect: MmRect = field(default_factory=MmRect)

    def __post_init__(self) -> None:
        super().__post_init__()
        if isinstance(self.rect, dict):
            object.__setattr__(self, "rect", load(MmRect, self.rect))


@dataclass(frozen=True)
class GridElement(Element):
    rect: GridRect = field(default_factory=GridRect)

    def __post_init__(self) -> None:
        super().__post_init__()
        if isinstance(self.rect, dict):
            object.__setattr__(self, "rect", load(GridRect, self.rect))


def _coerce_content(obj: Element, name: str) -> None:
    value = getattr(obj, name)
    if not isinstance(value, CONTENT_TYPES):
        object.__setattr__(obj, name, parse_content(value))


def _coerce_style(obj: Element, style_cls: type) -> None:
    value = getattr(obj, "style")
    if value is None:
        object.__setattr__(obj, "style", style_cls())
    elif isinstance(value, dict):
        object.__setattr__(obj, "style", load(style_cls, value))


# ---------- Page (absolute mm, rendered as markup) ----------

@dataclass(frozen=True)
class PageTextStyle:
    font_family: Optional[str] = None
    font_size_pt: Optional[float] = 12.0
    bold: bool = False
    italic: bool = False
    underline: bool = False
    color: Optional[str] = None
    align: Optional[str] = None             # left|center|right
    vertical_align: Optional[str] = None    # top|middle|bottom
    line_height: Optional[float] = None


@dataclass(frozen=True)
class ShapeStyle:
    stroke_mm: Optional[float] = 0.3
    stroke_color: Optional[str] = "#000000"
    fill_color: Optional[str] = None
    radius_mm: Optional[float] = None


@dataclass(frozen=True)
class LineStyle:
    stroke_mm: Optional[float] = 0.3
    stroke_color: Optional[str] = "#000000"
    dash: str = "solid"                     # solid|dash


@dataclass(frozen=True)
class ImageStyle:
    object_fit: str = "contain"             # contain|cover|fill


@dataclass(frozen=True)
class PageElement(MmElement):
    rotate_deg: float = 0.0

    canvas_kind: ClassVar[str] = "page"


@dataclass(frozen=True)
class PageText(PageElement):
    content: TextContent = field(default_factory=StaticText)
    style: PageTextStyle = field(default_factory=PageTextStyle)

    type: ClassVar[str] = "text"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "content")
        _coerce_style(self, PageTextStyle)


@dataclass(frozen=True)
class PageRect(PageElement):
    style: ShapeStyle = field(default_factory=ShapeStyle)

    type: ClassVar[str] = "rect"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_style(self, ShapeStyle)


@dataclass(frozen=True)
class PageLine(PageElement):
    style: LineStyle = field(default_factory=LineStyle)

    type: ClassVar[str] = "line"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_style(self, LineStyle)


@dataclass(frozen=True)
class PageImage(PageElement):
    src: str = ""
    style: ImageStyle = field(default_factory=ImageStyle)

    type: ClassVar[str] = "image"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_style(self, ImageStyle)


@dataclass(frozen=True)
class PageBarcode(PageElement):
    data: TextContent = field(default_factory=StaticText)
    format: str = "code128"                 # code128|ean13

    type: ClassVar[str] = "barcode"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "data")


@dataclass(frozen=True)
class PageQrCode(PageElement):
    data: TextContent = field(default_factory=StaticText)

    type: ClassVar[str] = "qrcode"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "data")


@dataclass(frozen=True)
class PageHLine(PageElement):
    char: str = "-"

    type: ClassVar[str] = "hline"


# ---------- Label (dot-addressed commands) ----------

@dataclass(frozen=True)
class LabelTextStyle:
    rotation: str = "N"                     # N|R|I|B
    font_name: Optional[str] = "0"
    font_height_dot: Optional[int] = 30
    font_width_dot: Optional[int] = 30


@dataclass(frozen=True)
class LabelBoxStyle:
    thickness_dot: Optional[int] = 2
    color: str = "B"                        # B|W


@dataclass(frozen=True)
class LabelBarcodeStyle:
    format: str = "code128"
    height_dot: Optional[int] = 80
    module_width_dot: Optional[int] = 2
    print_hri: bool = True
    rotation: str = "N"


@dataclass(frozen=True)
class LabelQrStyle:
    model: int = 2
    magnification: Optional[int] = 4
    ecc: str = "M"                          # H|Q|M|L


@dataclass(frozen=True)
class LabelElement(MmElement):
    canvas_kind: ClassVar[str] = "label"


@dataclass(frozen=True)
class LabelText(LabelElement):
    content: TextContent = field(default_factory=StaticText)
    style: LabelTextStyle = field(default_factory=LabelTextStyle)

    type: ClassVar[str] = "text"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "content")
        _coerce_style(self, LabelTextStyle)


@dataclass(frozen=True)
class LabelBox(LabelElement):
    style: LabelBoxStyle = field(default_factory=LabelBoxStyle)

    type: ClassVar[str] = "box"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_style(self, LabelBoxStyle)


@dataclass(frozen=True)
class LabelBarcode(LabelElement):
    data: TextContent = field(default_factory=StaticText)
    style: LabelBarcodeStyle = field(default_factory=LabelBarcodeStyle)

    type: ClassVar[str] = "barcode"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "data")
        _coerce_style(self, LabelBarcodeStyle)


@dataclass(frozen=True)
class LabelQrCode(LabelElement):
    data: TextContent = field(default_factory=StaticText)
    style: LabelQrStyle = field(default_factory=LabelQrStyle)

    type: ClassVar[str] = "qrcode"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "data")
        _coerce_style(self, LabelQrStyle)


# ---------- Receipt / text (character grid) ----------

@dataclass(frozen=True)
class ReceiptTextStyle:
    align: str = "left"                     # left|center|right
    bold: bool = False
    underline: bool = False
    double_width: bool = False
    double_height: bool = False
    invert: bool = False
    wrap: str = "wrap"                      # clip|wrap


@dataclass(frozen=True)
class PlainTextStyle:
    align: str = "left"
    wrap: str = "wrap"


@dataclass(frozen=True)
class ReceiptText(GridElement):
    content: TextContent = field(default_factory=StaticText)
    style: ReceiptTextStyle = field(default_factory=ReceiptTextStyle)

    type: ClassVar[str] = "text"
    canvas_kind: ClassVar[str] = "receipt"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "content")
        _coerce_style(self, ReceiptTextStyle)


@dataclass(frozen=True)
class ReceiptHLine(GridElement):
    char: str = "-"

    type: ClassVar[str] = "hline"
    canvas_kind: ClassVar[str] = "receipt"


@dataclass(frozen=True)
class PlainText(GridElement):
    content: TextContent = field(default_factory=StaticText)
    style: PlainTextStyle = field(default_factory=PlainTextStyle)

    type: ClassVar[str] = "text"
    canvas_kind: ClassVar[str] = "text"

    def __post_init__(self) -> None:
        super().__post_init__()
        _coerce_content(self, "content")
        _coerce_style(self, PlainTextStyle)


@dataclass(frozen=True)
class PlainHLine(GridElement):
    char: str = "-"

    type: ClassVar[str] = "hline"
    canvas_kind: ClassVar[str] = "text"


ELEMENT_TYPES: Dict[str, Dict[str, Type[Element]]] = {
    "page": {c.type: c for c in (PageText, PageRect, PageLine, PageImage, PageBarcode, PageQrCode, PageHLine)},
    "label": {c.type: c for c in (LabelText, LabelBox, LabelBarcode, LabelQrCode)},
    "receipt": {c.type: c for c in (ReceiptText, ReceiptHLine)},
    "text": {c.type: c for c in (PlainText, PlainHLine)},
}


def element_class(kind: str, type_name: str) -> Type[Element]:
    try:
        return ELEMENT_TYPES[kind][type_name]
    except KeyError:
        raise KindMismatchError(f"Element type {type_name!r} is not valid for a {kind!r} canvas") from None


# ---------- Canvas configuration ----------

PAPER_PRESETS_MM: Dict[str, Tuple[float, float]] = {
    "A3": (297.0, 420.0),
    "A4": (210.0, 297.0),
    "A5": (148.0, 210.0),
    "Letter": (215.9, 279.4),
    "Legal": (215.9, 355.6),
}


@dataclass(frozen=True)
class Paper:
    preset: str = "A4"                      # preset name or "custom"
    orientation: str = "portrait"
    width_mm: Optional[float] = None
    height_mm: Optional[float] = None

    def __post_init__(self) -> None:
        if self.preset == "custom":
            if not self.width_mm or not self.height_mm:
                raise SchemaError("Custom paper needs width_mm and height_mm")
        elif self.preset not in PAPER_PRESETS_MM:
            raise SchemaError(f"Unknown paper preset: {self.preset!r}")
        if self.orientation not in ("portrait", "landscape"):
            raise SchemaError(f"Unknown orientation: {self.orientation!r}")

    def size_mm(self) -> Tuple[float, float]:
        if self.preset == "custom":
            w, h = float(self.width_mm), float(self.height_mm)
        else:
            w, h = PAPER_PRESETS_MM[self.preset]
        if self.orientation == "landscape":
            w, h = h, w
        return w, h


@dataclass(frozen=True)
class Margins:
    top: float = 10.0
    right: float = 10.0
    bottom: float = 10.0
    left: float = 10.0


@dataclass(frozen=True)
class Point:
    x_mm: float = 0.0
    y_mm: float = 0.0


@dataclass(frozen=True)
class CutConfig:
    enabled: bool = True
    feed_lines: int = 3
    mode: str = "partial"                   # full|partial


@dataclass(frozen=True)
class PageCanvas:
    paper: Paper = field(default_factory=Paper)
    margins: Margins = field(default_factory=Margins)

    kind: ClassVar[str] = "page"
    unit: ClassVar[str] = "mm"
    wire_keys: ClassVar[Dict[str, str]] = {"margins": "marginMm"}

    @property
    def width_mm(self) -> float:
        return self.paper.size_mm()[0]

    @property
    def height_mm(self) -> float:
        return self.paper.size_mm()[1]


@dataclass(frozen=True)
class LabelCanvas:
    dpi: int = 203
    width_mm: float = 100.0
    height_mm: float = 50.0
    origin: Optional[Point] = None

    kind: ClassVar[str] = "label"
    unit: ClassVar[str] = "mm"
    wire_keys: ClassVar[Dict[str, str]] = {"origin": "originMm"}

    def __post_init__(self) -> None:
        if int(self.dpi) not in LABEL_DPIS:
            raise SchemaError(f"Label dpi must be one of {LABEL_DPIS}, got {self.dpi}")
        object.__setattr__(self, "dpi", int(self.dpi))


@dataclass(frozen=True)
class GridCanvas:
    cols: int = 32
    min_rows: int = 10
    auto_rows: bool = True
    cell: Optional[CellSize] = None

    unit: ClassVar[str] = "grid"
    wire_keys: ClassVar[Dict[str, str]] = {"cell": "cellMm"}

    def __post_init__(self) -> None:
        if int(self.cols) < 1:
            raise SchemaError("A grid canvas needs at least one column")

    @property
    def cell_size(self) -> CellSize:
        return self.cell or DEFAULT_CELL


@dataclass(frozen=True)
class ReceiptCanvas(GridCanvas):
    encoding: str = "utf8"                  # utf8|gb18030
    cut: Optional[CutConfig] = None

    kind: ClassVar[str] = "receipt"


@dataclass(frozen=True)
class TextCanvas(GridCanvas):
    cols: int = 80
    min_rows: int = 20

    kind: ClassVar[str] = "text"


Canvas = Union[PageCanvas, LabelCanvas, ReceiptCanvas, TextCanvas]
CANVAS_TYPES: Dict[str, type] = {c.kind: c for c in (PageCanvas, LabelCanvas, ReceiptCanvas, TextCanvas)}


def default_canvas(kind: str) -> Canvas:
    return CANVAS_TYPES[normalize_kind(kind)]()


def canvas_to_dict(canvas: Canvas) -> Dict[str, Any]:
    d: Dict[str, Any] = {"kind": canvas.kind, "unit": canvas.unit}
    d.update(dump(canvas))
    return d


def canvas_from_dict(data: Dict[str, Any]) -> Canvas:
    if not isinstance(data, dict):
        raise SchemaError("Canvas must be an object")
    kind = normalize_kind(data.get("kind", ""))
    return load(CANVAS_TYPES[kind], data)


# ---------- Editor state / metadata ----------

@dataclass(frozen=True)
class Viewport:
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0


@dataclass(frozen=True)
class Rulers:
    enabled: bool = True


@dataclass(frozen=True)
class GridSettings:
    enabled: bool = True
    size_mm: float = 5.0


@dataclass(frozen=True)
class Guide:
    id: str = ""
    axis: str = "x"
    pos: float = 0.0
    locked: bool = False
    label: Optional[str] = None


@dataclass(frozen=True)
class Guides:
    x: Tuple[Guide, ...] = ()
    y: Tuple[Guide, ...] = ()


@dataclass(frozen=True)
class SnapSettings:
    enabled: bool = True
    to_grid: bool = True
    to_guides: bool = True
    to_elements: bool = True
    tolerance_mm: float = 2.0


@dataclass(frozen=True)
class EditorState:
    """UI state persisted with the document; the core never interprets it."""
    viewport: Viewport = field(default_factory=Viewport)
    rulers: Rulers = field(default_factory=Rulers)
    grid: GridSettings = field(default_factory=GridSettings)
    guides: Guides = field(default_factory=Guides)
    snap: SnapSettings = field(default_factory=SnapSettings)


@dataclass(frozen=True)
class TemplateMeta:
    id: str = field(default_factory=new_id)
    name: str = "Untitled"
    kind: str = "page"
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    created_at: int = field(default_factory=_now_ms)
    updated_at: int = field(default_factory=_now_ms)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", normalize_kind(self.kind))


# ---------- Document ----------

def validate_elements(kind: str, elements: Iterable[Element]) -> None:
    """
    Check that every element belongs to *kind* and that ids are unique.

    Raises KindMismatchError / SchemaError; this is a structural check,
    done before anything reaches the engine or a compiler.
    """
    seen = set()
    for el in elements:
        if not isinstance(el, Element):
            raise SchemaError(f"Not an element: {el!r}")
        if el.canvas_kind != kind:
            raise KindMismatchError(
                f"Element {el.id or '<new>'} ({type(el).__name__}) cannot be placed on a {kind!r} canvas"
            )
        if not el.id:
            raise SchemaError("Element without id")
        if el.id in seen:
            raise SchemaError(f"Duplicate element id: {el.id}")
        seen.add(el.id)


@dataclass(frozen=True)
class TemplateDoc:
    meta: TemplateMeta
    canvas: Canvas
    elements: Tuple[Element, ...] = ()
    editor_state: EditorState = field(default_factory=EditorState)
    schema: str = SCHEMA_NAME
    version: int = SCHEMA_VERSION

    def __post_init__(self) -> None:
        object.__setattr__(self, "elements", tuple(self.elements))
        if self.schema != SCHEMA_NAME:
            raise SchemaError(f"Unsupported schema: {self.schema!r}")
        if self.version != SCHEMA_VERSION:
            raise SchemaError(f"Unsupported schema version: {self.version!r}")
        if self.meta.kind != self.canvas.kind:
            raise KindMismatchError(
                f"Document kind {self.meta.kind!r} does not match canvas kind {self.canvas.kind!r}"
            )
        validate_elements(self.canvas.kind, self.elements)

    @property
    def kind(self) -> str:
        return self.canvas.kind

    @classmethod
    def new(cls, kind: str, name: str = "Untitled", **meta: Any) -> "TemplateDoc":
        kind = normalize_kind(kind)
        return cls(meta=TemplateMeta(name=name, kind=kind, **meta), canvas=default_canvas(kind))

    def with_elements(self, elements: Iterable[Element]) -> "TemplateDoc":
        return replace(self, elements=tuple(elements), meta=replace(self.meta, updated_at=_now_ms()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "version": self.version,
            "meta": dump(self.meta),
            "editor": dump(self.editor_state),
            "canvas": canvas_to_dict(self.canvas),
            "elements": [el.to_dict() for el in self.elements],
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "TemplateDoc":
        if not isinstance(d, dict):
            raise SchemaError("Document must be an object")
        canvas = canvas_from_dict(d.get("canvas") or {})
        meta_raw = dict(d.get("meta") or {})
        meta_raw.setdefault("kind", canvas.kind)
        meta = load(TemplateMeta, meta_raw)
        elements = tuple(element_from_dict(e, canvas.kind) for e in d.get("elements") or ())
        return TemplateDoc(
            meta=meta,
            canvas=canvas,
            elements=elements,
            editor_state=load(EditorState, d.get("editor") or d.get("editorState") or {}),
            schema=d.get("schema", SCHEMA_NAME),
            version=d.get("version", SCHEMA_VERSION),
        )


def element_from_dict(d: Dict[str, Any], kind: str) -> Element:
    if not isinstance(d, dict):
        raise SchemaError("Element must be an object")
    cls = element_class(kind, d.get("type", ""))
    return load(cls, d)


# ---------------------------------------------------------------------------
# Serialization helpers (camelCase on the wire, snake_case in Python)
# ---------------------------------------------------------------------------

def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _wire_key(cls: type, name: str) -> str:
    return getattr(cls, "wire_keys", {}).get(name) or _camel(name)


def dump(obj: Any) -> Any:
    """Serialize a model object to JSON-compatible data; None fields are omitted."""
    if isinstance(obj, CONTENT_TYPES):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        out: Dict[str, Any] = {}
        for f in fields(obj):
            value = getattr(obj, f.name)
            if value is None:
                continue
            out[_wire_key(type(obj), f.name)] = dump(value)
        return out
    if isinstance(obj, (list, tuple)):
        return [dump(v) for v in obj]
    return obj


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType)


def _load_value(tp: Any, value: Any, where: str) -> Any:
    if tp is Any:
        return value
    if _is_union(tp):
        args = [a for a in get_args(tp) if a is not type(None)]
        if value is None:
            return None
        if set(args) <= set(CONTENT_TYPES):
            return parse_content(value)
        if len(args) == 1:
            return _load_value(args[0], value, where)
        return value
    origin = get_origin(tp)
    if origin in (tuple, list):
        if not isinstance(value, (list, tuple)):
            raise SchemaError(f"{where}: expected a list")
        item_tp = get_args(tp)[0] if get_args(tp) else Any
        return tuple(_load_value(item_tp, v, where) for v in value)
    if is_dataclass(tp):
        return load(tp, value)
    try:
        if tp is bool:
            return bool(value)
        if tp is int:
            return int(value)
        if tp is float:
            return float(value)
        if tp is str:
            return str(value)
    except (TypeError, ValueError) as e:
        raise SchemaError(f"{where}: {e}") from e
    return value


def load(cls: type, data: Any) -> Any:
    """Build dataclass *cls* from wire data. Unknown keys are ignored."""
    if isinstance(data, cls):
        return data
    if not isinstance(data, dict):
        raise SchemaError(f"{cls.__name__}: expected an object, got {type(data).__name__}")
    hints = get_type_hints(cls)
    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if not f.init:
            continue
        for key in (_wire_key(cls, f.name), f.name):
            if key in data:
                kwargs[f.name] = _load_value(hints[f.name], data[key], f"{cls.__name__}.{f.name}")
                break
    try:
        return cls(**kwargs)
    except TypeError as e:
        raise SchemaError(f"{cls.__name__}: {e}") from e
