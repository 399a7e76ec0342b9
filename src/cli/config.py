"""YAML config discovery and loading."""

import os
from pathlib import Path
from typing import Optional

import yaml

from .config_models import BrewlogConfig

CONFIG_ENV_VAR = "BREWLOG_CONFIG"


def config_locations() -> list[Path]:
    """Candidate paths, highest priority first."""
    candidates = []
    if os.getenv(CONFIG_ENV_VAR):
        candidates.append(Path(os.environ[CONFIG_ENV_VAR]).expanduser())
    candidates += [
        Path.cwd() / "brewlog.yaml",
        Path.home() / ".brewlog" / "config.yaml",
        Path.home() / "brewlog" / "config.yaml",
    ]
    return candidates


def find_config() -> Optional[Path]:
    return next((p for p in config_locations() if p.is_file()), None)


def load_config_model(config_path: Optional[Path] = None) -> BrewlogConfig:
    """Read and validate config; defaults apply when no file exists.

    Raises ValueError on unparseable YAML or values that fail validation.
    """
    path = config_path or find_config()
    raw: dict = {}
    if path is not None and path.exists():
        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

    try:
        return BrewlogConfig.from_dict(raw)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}") from e
