from __future__ import annotations

import json
import os
from typing import Any

from .logger import get_logger
from .pixel_size import DEFAULT_TOTAL_PIXEL_LIMIT, EdgeConstraint

_logger = get_logger("settings")


def _positive_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if value > 0 else None


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "total_pixel_limit": DEFAULT_TOTAL_PIXEL_LIMIT,
        "short_edge": None,
        "long_edge": None,
        "decode_eagerly": False,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except (OSError, ValueError) as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            parent = os.path.dirname(self.settings_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except OSError as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def total_pixel_limit(self) -> float:
        value = _positive_number(self.get("total_pixel_limit"))
        if value is None:
            _logger.warning("saved total_pixel_limit invalid: %r", self.get("total_pixel_limit"))
            return DEFAULT_TOTAL_PIXEL_LIMIT
        return value

    @property
    def short_edge(self) -> float | None:
        return _positive_number(self.get("short_edge"))

    @property
    def long_edge(self) -> float | None:
        return _positive_number(self.get("long_edge"))

    @property
    def decode_eagerly(self) -> bool:
        return bool(self.get("decode_eagerly", False))

    def edge_constraint(self) -> EdgeConstraint:
        return EdgeConstraint(self.short_edge, self.long_edge)
