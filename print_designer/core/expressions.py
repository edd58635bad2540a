"""
core/expressions.py - Split text into literal and {{expression}} spans.

Compiled templates are rendered later against job data, so every
``{{ ... }}`` / ``{{{ ... }}}`` span has to reach the output byte-for-byte
while the literal text around it is escaped for the target format.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, List

# Two braces = escaped substitution, three = raw. No '}' inside the body.
EXPR_PATTERN = re.compile(r"\{\{\{?[^}]+\}\}\}?")

LITERAL = "text"
EXPR = "expr"


@dataclass(frozen=True)
class Span:
    kind: str       # LITERAL | EXPR
    value: str

    @property
    def is_expr(self) -> bool:
        return self.kind == EXPR


def iter_spans(text: str) -> Iterator[Span]:
    """Yield literal and expression spans in source order; empty literals are skipped."""
    last = 0
    for m in EXPR_PATTERN.finditer(text):
        if m.start() > last:
            yield Span(LITERAL, text[last:m.start()])
        yield Span(EXPR, m.group(0))
        last = m.end()
    if last < len(text):
        yield Span(LITERAL, text[last:])


def split_spans(text: str) -> List[Span]:
    return list(iter_spans(text or ""))


def has_expression(text: str) -> bool:
    return bool(text) and EXPR_PATTERN.search(text) is not None


def transform_literals(text: str, escape: Callable[[str], str]) -> str:
    """Apply *escape* to literal spans only and join everything back in order."""
    return "".join(
        span.value if span.is_expr else escape(span.value)
        for span in iter_spans(text or "")
    )


def expression_body(span_value: str) -> tuple[str, bool]:
    """'{{ a }}' -> (' a ', False); '{{{a}}}' -> ('a', True). The body is not trimmed."""
    raw = span_value.startswith("{{{") and span_value.endswith("}}}")
    inner = span_value[3:-3] if raw else span_value[2:-2]
    return inner, raw


# ---------------------------------------------------------------------------
# Escapers
# ---------------------------------------------------------------------------

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
)


def escape_html(text: str) -> str:
    for ch, repl in _HTML_ESCAPES:
        text = text.replace(ch, repl)
    return text


# ZPL field data: '^' and '~' start commands. With ^FH in effect '_' is the
# hex indicator, so it has to be escaped as well.
_ZPL_ESCAPES = {"_": "_5F", "^": "_5E", "~": "_7E"}


def zpl_needs_hex(text: str) -> bool:
    return any(ch in _ZPL_ESCAPES for ch in text)


def escape_zpl(text: str) -> str:
    return "".join(_ZPL_ESCAPES.get(ch, ch) for ch in text)


_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def escape_control(text: str) -> str:
    """Drop control bytes (keeps \\t and \\n) so literal text can't inject device commands."""
    return _CONTROL_CHARS.sub("", text)


def html(text: str) -> str:
    return transform_literals(text, escape_html)


def zpl(text: str) -> str:
    return transform_literals(text, escape_zpl)


def device_text(text: str) -> str:
    return transform_literals(text, escape_control)
