"""
Tests for settings persistence, friendly error messages and logging setup.
"""
from __future__ import annotations

import json
import logging

import pytest

from print_designer.core.exceptions import (
    DesignerError,
    KindMismatchError,
    SchemaError,
    UnknownElementError,
    friendly_message,
)
from print_designer.core.settings import (
    SETTINGS_ENV_VAR,
    DesignerSettings,
    load_settings,
    save_settings,
)
from print_designer.utils import log as log_mod


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettings:
    def test_defaults(self):
        s = DesignerSettings()
        assert s.history_limit == 50
        assert s.duplicate_offset == 10.0
        assert s.preview_dpi == 96
        assert s.log_level == "INFO"

    def test_round_trip(self, tmp_path):
        path = tmp_path / "settings.json"
        save_settings(DesignerSettings(history_limit=5, duplicate_offset=2, extra={"theme": "dark"}), path)
        loaded = load_settings(path)
        assert loaded.history_limit == 5
        assert loaded.duplicate_offset == 2.0
        assert loaded.extra == {"theme": "dark"}

    def test_unknown_keys_preserved(self):
        """Keys this version does not know survive a load/save cycle."""
        s = DesignerSettings.from_dict({"preview_dpi": 150, "recentFiles": ["a.json"]})
        assert s.to_dict()["recentFiles"] == ["a.json"]
        assert s.to_dict()["preview_dpi"] == 150

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_settings(tmp_path / "nope.json") == DesignerSettings()

    def test_corrupt_file_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_settings(path) == DesignerSettings()

    def test_non_object_gives_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_settings(path) == DesignerSettings()

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"history_limit": 0}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.json"
        path.write_text(json.dumps({"history_limit": 7}), encoding="utf-8")
        monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
        assert load_settings().history_limit == 7

    def test_no_path_no_env(self, monkeypatch):
        monkeypatch.delenv(SETTINGS_ENV_VAR, raising=False)
        assert load_settings() == DesignerSettings()


# ---------------------------------------------------------------------------
# Friendly messages
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("exc, expected", [
    (KindMismatchError("label vs page"), "Document kind mismatch: label vs page"),
    (SchemaError("bad version"), "Invalid document: bad version"),
    (UnknownElementError("no element 'x'"), "no element 'x'"),
    (ValueError("oops"), "Invalid value: oops"),
    (RuntimeError("boom"), "RuntimeError: boom"),
])
def test_friendly_message(exc, expected):
    assert friendly_message(exc) == expected


def test_friendly_message_file_not_found():
    exc = FileNotFoundError(2, "No such file", "doc.json")
    assert friendly_message(exc) == "File not found: doc.json"


def test_error_hierarchy():
    for cls in (SchemaError, KindMismatchError, UnknownElementError):
        assert issubclass(cls, DesignerError)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.fixture()
def fresh_logger(monkeypatch):
    logger = logging.getLogger("print_designer")
    saved_handlers, saved_level = list(logger.handlers), logger.level
    monkeypatch.setattr(log_mod, "_CONFIGURED", False)
    yield logger
    for h in logger.handlers:
        if h not in saved_handlers:
            h.close()
    logger.handlers = saved_handlers
    logger.setLevel(saved_level)


class TestLogging:
    def test_setup_is_one_shot(self, fresh_logger):
        before = len(fresh_logger.handlers)
        log_mod.setup_logging("DEBUG")
        log_mod.setup_logging("DEBUG")
        assert len(fresh_logger.handlers) == before + 1
        assert fresh_logger.level == logging.DEBUG

    def test_unknown_level_name_falls_back(self, fresh_logger):
        log_mod.setup_logging("chatty")
        assert fresh_logger.level == logging.INFO

    def test_file_handler(self, fresh_logger, tmp_path):
        path = tmp_path / "logs" / "designer.log"
        log_mod.setup_logging(logging.INFO, log_file=path)
        log_mod.get_logger("print_designer.test").info("hello file")
        for h in fresh_logger.handlers:
            h.flush()
        assert "hello file" in path.read_text(encoding="utf-8")
