"""Static display configuration.

Read once from ``config.json`` in the platform config directory. Malformed or
missing config falls back to defaults, one key at a time.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "bellows"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


@dataclass(frozen=True)
class BellowsConfig:
    """Thresholds and toggles for annotations and fold summaries.

    ``array_count_threshold`` is the minimum item count before an open array
    is annotated; ``array_count_threshold_folded`` is the same for a folded
    one. ``pin_path_abbreviate_threshold`` is the display-path length above
    which leading segments are cut to one character.
    """

    array_count_threshold: int = 3
    array_count_threshold_folded: int = 0
    line_count: bool = True
    unfold_single_item_arrays: bool = True
    pin_max_string_length: int = 30
    pin_path_abbreviate_threshold: int = 20

    @property
    def line_count_enabled(self) -> bool:
        return self.line_count

    @classmethod
    def from_mapping(cls, data: dict[str, object]) -> BellowsConfig:
        """Build a config from raw JSON data, keeping defaults for invalid keys."""
        defaults = cls()
        values: dict[str, object] = {}
        for item in fields(cls):
            if item.name not in data:
                continue
            raw = data[item.name]
            default = getattr(defaults, item.name)
            if isinstance(default, bool):
                if isinstance(raw, bool):
                    values[item.name] = raw
                    continue
            elif isinstance(raw, int) and not isinstance(raw, bool) and raw >= 0:
                values[item.name] = raw
                continue
            logger.warning("Ignoring invalid config value %s=%r", item.name, raw)
        return replace(defaults, **values)

    def with_overrides(self, **overrides: object) -> BellowsConfig:
        """Return a copy with ``overrides`` validated like file values."""
        merged = asdict(self)
        merged.update(overrides)
        return BellowsConfig.from_mapping(merged)


def load_config_data(path: Path | None = None) -> dict[str, object]:
    """Load the raw JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except Exception as exc:
        logger.warning("Could not read config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Path | None = None) -> BellowsConfig:
    """Load the display configuration, falling back to defaults."""
    return BellowsConfig.from_mapping(load_config_data(path))
