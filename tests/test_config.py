from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from bellows import config
from bellows.config import BellowsConfig


class ConfigBehaviorTests(unittest.TestCase):
    def test_defaults(self) -> None:
        defaults = BellowsConfig()
        self.assertEqual(defaults.array_count_threshold, 3)
        self.assertEqual(defaults.array_count_threshold_folded, 0)
        self.assertTrue(defaults.line_count_enabled)
        self.assertTrue(defaults.unfold_single_item_arrays)
        self.assertEqual(defaults.pin_max_string_length, 30)
        self.assertEqual(defaults.pin_path_abbreviate_threshold, 20)

    def test_missing_file_gives_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("bellows.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config_data(), {})
                self.assertEqual(config.load_config(), BellowsConfig())

    def test_file_values_override_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text('{"array_count_threshold": 5, "line_count": false}', encoding="utf-8")
            with mock.patch("bellows.config.CONFIG_PATH", config_path):
                loaded = config.load_config()
        self.assertEqual(loaded.array_count_threshold, 5)
        self.assertFalse(loaded.line_count_enabled)
        self.assertEqual(loaded.pin_max_string_length, 30)

    def test_explicit_path_wins(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            explicit = Path(tmp) / "custom.json"
            explicit.write_text('{"pin_max_string_length": 8}', encoding="utf-8")
            with mock.patch("bellows.config.CONFIG_PATH", Path(tmp) / "unused.json"):
                self.assertEqual(config.load_config(explicit).pin_max_string_length, 8)

    def test_malformed_json_warns_and_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("{not json", encoding="utf-8")
            with self.assertLogs("bellows.config", "WARNING"):
                self.assertEqual(config.load_config(config_path), BellowsConfig())

    def test_non_object_json_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("[1, 2]", encoding="utf-8")
            self.assertEqual(config.load_config_data(config_path), {})

    def test_invalid_values_fall_back_per_key(self) -> None:
        data = {
            "array_count_threshold": -1,
            "array_count_threshold_folded": True,
            "line_count": "yes",
            "pin_path_abbreviate_threshold": 12,
            "unknown_key": 1,
        }
        with self.assertLogs("bellows.config", "WARNING") as logs:
            loaded = BellowsConfig.from_mapping(data)
        self.assertEqual(len(logs.records), 3)
        self.assertEqual(loaded, BellowsConfig(pin_path_abbreviate_threshold=12))

    def test_with_overrides_validates(self) -> None:
        base = BellowsConfig()
        self.assertEqual(base.with_overrides(array_count_threshold=1).array_count_threshold, 1)
        with self.assertLogs("bellows.config", "WARNING"):
            self.assertEqual(base.with_overrides(line_count=0), base)


if __name__ == "__main__":
    unittest.main()
