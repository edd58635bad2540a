# print_designer/app.py
"""
Command line entry point: compile a document, or render a preview image.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .compilers import compile_document
from .core.exceptions import DesignerError, friendly_message
from .core.models import TemplateDoc
from .core.render import render_preview, to_monochrome
from .core.settings import DesignerSettings, load_settings
from .utils.log import get_logger, setup_logging

log = get_logger(__name__)


def load_document(path: str | Path) -> TemplateDoc:
    """Read a TemplateDoc from a JSON file."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    return TemplateDoc.from_dict(data)


def _write(text: str, out: Optional[str]) -> None:
    if out:
        Path(out).write_text(text, encoding="utf-8", newline="")
        log.info("Wrote %s", out)
    else:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")


def cmd_compile(args: argparse.Namespace, settings: DesignerSettings) -> int:
    doc = load_document(args.document)
    result = compile_document(doc)
    for w in result.warnings:
        log.warning("%s: %s%s", w.code, w.message, f" (element {w.element_id})" if w.element_id else "")

    if args.json:
        _write(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), args.output)
    else:
        _write(result.output, args.output)
    return 0


def cmd_preview(args: argparse.Namespace, settings: DesignerSettings) -> int:
    doc = load_document(args.document)
    img = render_preview(doc.elements, doc.canvas, settings)
    if args.mono:
        img = to_monochrome(img, args.darkness)
    img.save(args.output)
    log.info("Preview saved to %s (%dx%d)", args.output, img.width, img.height)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="print_designer",
        description="Compile print layout templates to page markup, ZPL, ESC/POS or plain text.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--settings", help="settings JSON file (default: $PRINT_DESIGNER_SETTINGS)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", help="also write log output to this file")

    sub = parser.add_subparsers(dest="command", required=True)

    p_compile = sub.add_parser("compile", help="compile a template document")
    p_compile.add_argument("document", help="template document (JSON)")
    p_compile.add_argument("-o", "--output", help="write output here instead of stdout")
    p_compile.add_argument("--json", action="store_true", help="emit the full result (output, printHint, warnings)")
    p_compile.set_defaults(func=cmd_compile)

    p_preview = sub.add_parser("preview", help="render a receipt/text template to an image")
    p_preview.add_argument("document", help="template document (JSON)")
    p_preview.add_argument("-o", "--output", required=True, help="image file (format from extension)")
    p_preview.add_argument("--mono", action="store_true", help="threshold to 1-bit like a thermal head")
    p_preview.add_argument("--darkness", type=int, default=180, help="threshold for --mono (0-255)")
    p_preview.set_defaults(func=cmd_preview)

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.settings)
    except ValueError as e:
        print(f"[print_designer] {friendly_message(e)}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or settings.log_level, args.log_file)

    try:
        return args.func(args, settings)
    except (DesignerError, OSError, ValueError) as e:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"[print_designer] {friendly_message(e)}", file=sys.stderr)
        return 1


def main():
    sys.exit(run())


if __name__ == '__main__':
    main()
