"""
Unit tests for persisted preferences.

Storage contract:
- Missing/invalid file -> defaults
- Values of the wrong type fall back to their default
- hidden_faculty is stored as a sorted list
"""

import json
import tempfile
import unittest
from pathlib import Path

from schedgrid.settings import Settings, load_settings, save_settings


class TestSettings(unittest.TestCase):
    def test_load_missing_file_returns_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.assertEqual(load_settings(Path(d) / "missing.json"), Settings())

    def test_corrupt_file_returns_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "settings.json"
            p.write_text("{not json", encoding="utf-8")
            self.assertEqual(load_settings(p), Settings())

    def test_save_and_load_roundtrip(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "nested" / "settings.json"
            save_settings(Settings(include_tba=False, course_filter="CS", hidden_faculty={"Smith", "Lee"}), p)
            loaded = load_settings(p)
            self.assertFalse(loaded.include_tba)
            self.assertEqual(loaded.course_filter, "CS")
            self.assertEqual(loaded.hidden_faculty, {"Lee", "Smith"})
            self.assertFalse(loaded.is_visible("Lee"))

            data = json.loads(p.read_text(encoding="utf-8"))
            self.assertEqual(data["hidden_faculty"], ["Lee", "Smith"])

    def test_wrong_types_fall_back(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            p = Path(d) / "settings.json"
            p.write_text(json.dumps({"include_tba": "no", "course_font_size": -3, "hidden_faculty": "Smith"}), encoding="utf-8")
            self.assertEqual(load_settings(p), Settings())


if __name__ == "__main__":
    unittest.main()
