"""
Persistent UI preferences.

This module manages the file:

    data/settings.json

Design rationale:
- the scheduling core never reads preferences on its own
- front ends load a Settings object once and pass it in explicitly
- changes are saved back by the front end, not by the core

The file only stores display/checking preferences, never schedule data.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path

DEFAULT_FONT_SIZE = 13


@dataclass
class Settings:
    """Preferences shared by the CLI and any other front end."""

    include_tba: bool = True
    course_font_size: int = DEFAULT_FONT_SIZE
    course_filter: str = ""
    hidden_faculty: set[str] = field(default_factory=set)

    def is_visible(self, faculty_key: str) -> bool:
        return faculty_key not in self.hidden_faculty


def _default_settings_path() -> Path:
    """
    Return the default path of settings.json inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "settings.json"


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load Settings from settings.json.

    Returns defaults if the file does not exist or is invalid; unknown keys
    are ignored and values of the wrong type fall back to their default.
    """
    settings_path = Path(path) if path is not None else _default_settings_path()

    if not settings_path.exists():
        return Settings()

    try:
        data = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return Settings()
    if not isinstance(data, dict):
        return Settings()

    out = Settings()
    if isinstance(data.get("include_tba"), bool):
        out.include_tba = data["include_tba"]

    size = data.get("course_font_size")
    if isinstance(size, int) and not isinstance(size, bool) and size > 0:
        out.course_font_size = size

    if isinstance(data.get("course_filter"), str):
        out.course_filter = data["course_filter"]

    hidden = data.get("hidden_faculty", [])
    if isinstance(hidden, list):
        out.hidden_faculty = {str(x).strip() for x in hidden if isinstance(x, str) and x.strip()}

    return out


def save_settings(settings: Settings, path: str | Path | None = None) -> None:
    """
    Save Settings to settings.json, creating parent directories if needed.
    """
    settings_path = Path(path) if path is not None else _default_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    payload = asdict(settings)
    payload["hidden_faculty"] = sorted(settings.hidden_faculty)

    settings_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
