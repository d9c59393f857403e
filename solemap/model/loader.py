# solemap/model/loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from .reading import SIDES


class ConfigLoader:
    """
    Loads the SoleMap YAML configuration into validated plain settings.

    Expected document:

        solemap:
          side: LEFT
          session:
            duration_s: 20
          clinical:
            peak_warning_kpa: 200
          console:
            max_lines: 500
            history_limit: 10
          peripheral:
            service_uuid: "..."
            characteristic_uuid: "..."

    Every section is optional; missing keys keep their defaults. After
    load(), `self.settings` holds keyword arguments for SoleMapConfig.
    """

    def __init__(self, config_path: str | Path):
        self.config_path = Path(config_path)
        self.settings: Dict[str, Any] = {}

    # ---------------------------------------------------------------------
    # YAML utility
    # ---------------------------------------------------------------------
    def _load_yaml(self) -> dict:
        if not self.config_path.exists():
            raise FileNotFoundError(f"Missing config file: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    # ---------------------------------------------------------------------
    # Public entry point
    # ---------------------------------------------------------------------
    def load(self) -> Dict[str, Any]:
        self.settings.clear()

        data = self._load_yaml()
        root = data.get("solemap") if isinstance(data, dict) else None
        if not isinstance(root, dict):
            raise ValueError(f"{self.config_path.name} is missing 'solemap' root node")

        if "side" in root:
            side = str(root["side"]).upper()
            if side not in SIDES:
                raise ValueError(f"side must be one of {SIDES}, got '{root['side']}'")
            self.settings["side"] = side

        session = self._section(root, "session")
        if "duration_s" in session:
            self.settings["duration_s"] = self._positive_int(session, "duration_s")

        clinical = self._section(root, "clinical")
        if "peak_warning_kpa" in clinical:
            self.settings["peak_warning_kpa"] = self._positive_int(clinical, "peak_warning_kpa", allow_zero=True)

        console = self._section(root, "console")
        if "max_lines" in console:
            self.settings["console_max_lines"] = self._positive_int(console, "max_lines")
        if "history_limit" in console:
            self.settings["history_limit"] = self._positive_int(console, "history_limit")

        peripheral = self._section(root, "peripheral")
        for key in ("service_uuid", "characteristic_uuid"):
            if key in peripheral:
                self.settings[key] = str(peripheral[key])

        return dict(self.settings)

    # ---------------------------------------------------------------------
    # Validation helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _section(root: dict, name: str) -> dict:
        sec = root.get(name) or {}
        if not isinstance(sec, dict):
            raise ValueError(f"'{name}' must be a mapping")
        return sec

    @staticmethod
    def _positive_int(sec: dict, key: str, *, allow_zero: bool = False) -> int:
        raw = sec[key]
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValueError(f"'{key}' must be an integer (got {raw!r})")
        if raw < 0 or (raw == 0 and not allow_zero):
            raise ValueError(f"'{key}' must be {'>= 0' if allow_zero else '> 0'} (got {raw})")
        return int(raw)
