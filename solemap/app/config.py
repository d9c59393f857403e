# solemap/app/config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from solemap.core.errors import ConfigError
from solemap.model.loader import ConfigLoader

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "metadata" / "solemap.yml"


@dataclass(frozen=True)
class SoleMapConfig:
    side: str = "LEFT"
    duration_s: int = 20
    peak_warning_kpa: int = 200
    console_max_lines: int = 500
    history_limit: int = 10
    service_uuid: str = ""
    characteristic_uuid: str = ""


def load_config(path: Optional[str | Path] = None) -> SoleMapConfig:
    """
    Load configuration from YAML (packaged defaults when `path` is None).
    Loader failures are reported as ConfigError.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    loader = ConfigLoader(config_path)
    try:
        settings = loader.load()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(
            "Failed to load configuration.",
            hint=str(e),
            details={"config_path": str(config_path)},
        ) from None

    return SoleMapConfig(**settings)
