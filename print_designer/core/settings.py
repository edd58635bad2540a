# print_designer/core/settings.py
"""
User settings, stored as a flat JSON object.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional

from ..utils.log import get_logger

log = get_logger(__name__)

SETTINGS_ENV_VAR = "PRINT_DESIGNER_SETTINGS"


@dataclass
class DesignerSettings:
    """
    Tunables for the editing engine, the preview renderer and the CLI.

    - history_limit:    undo entries kept before the oldest is dropped
    - duplicate_offset: positional delta for duplicated elements, in canvas units
    - preview_dpi:      pixel density used when rasterising previews
    - log_level:        level name passed to setup_logging()
    """
    history_limit: int = 50
    duplicate_offset: float = 10.0
    preview_dpi: int = 96
    log_level: str = "INFO"
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if int(self.history_limit) < 1:
            raise ValueError("history_limit must be at least 1")
        if int(self.preview_dpi) <= 0:
            raise ValueError("preview_dpi must be positive")
        self.history_limit = int(self.history_limit)
        self.preview_dpi = int(self.preview_dpi)
        self.duplicate_offset = float(self.duplicate_offset)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DesignerSettings":
        known = {k: data[k] for k in ("history_limit", "duplicate_offset", "preview_dpi", "log_level") if k in data}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **known)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        extra = d.pop("extra") or {}
        d.update(extra)
        return d


def load_settings(path: Optional[str | os.PathLike] = None) -> DesignerSettings:
    """
    Load settings from a JSON file.

    The path defaults to $PRINT_DESIGNER_SETTINGS. A missing or unreadable
    file falls back to defaults; a file with invalid values raises ValueError.
    """
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR) or None
    if path is None:
        return DesignerSettings()

    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except FileNotFoundError:
        log.debug("Settings file %s not found, using defaults", path)
        return DesignerSettings()
    except (OSError, json.JSONDecodeError) as e:
        log.warning("Could not read settings file %s: %s", path, e)
        return DesignerSettings()

    if not isinstance(raw, dict):
        log.warning("Settings file %s does not contain an object, using defaults", path)
        return DesignerSettings()
    return DesignerSettings.from_dict(raw)


def save_settings(settings: DesignerSettings, path: str | os.PathLike) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(settings.to_dict(), fh, indent=2)
