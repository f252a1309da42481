"""
Configuration loader — reads a static scaffold config file.

A config file lets a run skip the interactive questions entirely:

    # expresskit.yml
    language: TypeScript
    features:
      - eslint
      - jest

Missing keys fall back to the question defaults when the values are
handed to ``StaticConfig``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from expresskit.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Default config filename
SCAFFOLD_CONFIG_FILE = "expresskit.yml"

_KNOWN_KEYS = ("language", "features")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Return ``expresskit.yml`` in the given directory (default: cwd), if any."""
    candidate = (start_dir or Path.cwd()).resolve() / SCAFFOLD_CONFIG_FILE
    return candidate if candidate.is_file() else None


def load_static_config(path: Path) -> dict[str, Any]:
    """Load and sanity-check a static scaffold configuration.

    Args:
        path: Path to a YAML file.

    Returns:
        Mapping with any of ``language`` / ``features``.

    Raises:
        ConfigError: If the file is missing, unreadable, or not a mapping.
    """
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading scaffold config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "scaffold" key or be flat
    if isinstance(data.get("scaffold"), dict):
        data = data["scaffold"]

    unknown = sorted(set(data) - set(_KNOWN_KEYS))
    if unknown:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))

    values = {key: data[key] for key in _KNOWN_KEYS if key in data}
    features = values.get("features")
    if features is not None and not isinstance(features, (list, str)):
        raise ConfigError(f"'features' must be a list in {path}")
    return values
