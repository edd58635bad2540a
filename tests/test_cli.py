"""
Tests for the command line entry point (compile / preview).
"""
from __future__ import annotations

import json

import pytest

from print_designer import app
from print_designer.core.models import (
    GridRect,
    LabelText,
    MmRect,
    PageText,
    ReceiptText,
    TemplateDoc,
)
from print_designer.core.settings import SETTINGS_ENV_VAR


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    """No handlers installed by the CLI, no settings from the environment."""
    monkeypatch.setattr(app, "setup_logging", lambda *a, **k: None)
    monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)


def _write_doc(tmp_path, doc, name="doc.json"):
    path = tmp_path / name
    path.write_text(json.dumps(doc.to_dict()), encoding="utf-8")
    return path


@pytest.fixture()
def page_doc_path(tmp_path):
    doc = TemplateDoc.new("page").with_elements(
        [PageText(id="t1", rect=MmRect(0, 0, 50, 10), content="Order {{id}}")]
    )
    return _write_doc(tmp_path, doc)


@pytest.fixture()
def receipt_doc_path(tmp_path):
    doc = TemplateDoc.new("receipt").with_elements(
        [ReceiptText(id="t", rect=GridRect(0, 0, 32, 1), content="Thanks {{name}}")]
    )
    return _write_doc(tmp_path, doc, "receipt.json")


class TestCompile:
    def test_stdout(self, page_doc_path, capsys):
        assert app.run(["compile", str(page_doc_path)]) == 0
        out = capsys.readouterr().out
        assert "left:0.00mm;top:0.00mm;width:50.00mm;height:10.00mm" in out
        assert "Order {{id}}" in out

    def test_json(self, page_doc_path, capsys):
        assert app.run(["compile", str(page_doc_path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["kind"] == "page"
        assert data["printHint"] == {"paperSize": "210mm 297mm"}
        assert data["warnings"] == []

    def test_output_file(self, receipt_doc_path, tmp_path):
        out_path = tmp_path / "out.txt"
        assert app.run(["compile", str(receipt_doc_path), "-o", str(out_path)]) == 0
        text = out_path.read_text(encoding="utf-8")
        assert text.startswith("\x1b@Thanks {{name}}\n")

    def test_warnings_do_not_fail(self, tmp_path, capsys):
        doc = TemplateDoc.new("page").with_elements([PageText(id="t", content="x")])
        data = doc.to_dict()
        data["elements"][0]["style"] = {"fontSizePt": 0}
        path = tmp_path / "warn.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert app.run(["compile", str(path), "--json"]) == 0
        warnings = json.loads(capsys.readouterr().out)["warnings"]
        assert [w["code"] for w in warnings] == ["MISSING_STYLE_FIELD"]
        assert warnings[0]["elementId"] == "t"


class TestErrors:
    def test_missing_file(self, tmp_path, capsys):
        assert app.run(["compile", str(tmp_path / "nope.json")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        assert app.run(["compile", str(path)]) == 1
        assert "[print_designer]" in capsys.readouterr().err

    def test_kind_mismatch(self, tmp_path, capsys):
        """A label element in a page document is rejected at load time."""
        data = TemplateDoc.new("page").to_dict()
        data["elements"] = [dict(LabelText(id="x").to_dict(), type="box")]
        path = tmp_path / "mismatch.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        assert app.run(["compile", str(path)]) == 1
        assert "kind mismatch" in capsys.readouterr().err

    def test_bad_settings(self, tmp_path, page_doc_path, capsys):
        settings = tmp_path / "settings.json"
        settings.write_text(json.dumps({"history_limit": 0}), encoding="utf-8")
        assert app.run(["--settings", str(settings), "compile", str(page_doc_path)]) == 2

    def test_command_required(self):
        with pytest.raises(SystemExit):
            app.run([])


class TestPreview:
    def test_png(self, receipt_doc_path, tmp_path):
        out_path = tmp_path / "preview.png"
        assert app.run(["preview", str(receipt_doc_path), "-o", str(out_path)]) == 0
        assert out_path.exists()
        assert out_path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"

    def test_mono(self, receipt_doc_path, tmp_path):
        out_path = tmp_path / "preview.png"
        assert app.run(["preview", str(receipt_doc_path), "-o", str(out_path), "--mono"]) == 0
        assert out_path.exists()

    def test_page_not_previewable(self, page_doc_path, tmp_path, capsys):
        assert app.run(["preview", str(page_doc_path), "-o", str(tmp_path / "p.png")]) == 1
        assert "Preview is only available" in capsys.readouterr().err
