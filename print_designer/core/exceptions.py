# print_designer/core/exceptions.py
"""
Error types for the document model and editing engine.

Only caller contract violations raise. Problems found while compiling a
document are reported as warnings on the compile result instead.
"""
from __future__ import annotations


class DesignerError(Exception):
    """Base exception for all designer errors."""


class SchemaError(DesignerError):
    """Document does not match the supported schema name, version or shape."""


class KindMismatchError(DesignerError):
    """Canvas kind, document kind and element types do not agree."""


class UnknownElementError(DesignerError):
    """An operation referenced an element id that is not in the document."""


def friendly_message(exc: BaseException) -> str:
    """Return a short, user-facing description for *exc*."""
    if isinstance(exc, KindMismatchError):
        return f"Document kind mismatch: {exc}"
    if isinstance(exc, SchemaError):
        return f"Invalid document: {exc}"
    if isinstance(exc, DesignerError):
        return str(exc)
    if isinstance(exc, FileNotFoundError):
        return f"File not found: {exc.filename}"
    if isinstance(exc, ValueError):
        return f"Invalid value: {exc}"
    return f"{type(exc).__name__}: {exc}"
