"""Configuration loader: YAML file + explicit overrides + env."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from primebets.core.config.schema import Config


def load_config(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """
    Load configuration.

    Resolution order for config file:
        1. Explicit ``config_path`` argument
        2. ``PRIMEBETS_CONFIG`` env variable
        3. ``./config.yaml`` in cwd

    ``overrides`` (e.g. CLI flags) are deep-merged over the YAML data.

    Values priority (handled by pydantic-settings):
        env vars  >  .env file  >  overrides  >  YAML  >  defaults
    """
    data = _load_yaml(_resolve_path(config_path))
    if overrides:
        data = _deep_merge(data, overrides)
    return Config(**data)


def _resolve_path(config_path: str | Path | None = None) -> Path | None:
    if config_path:
        return Path(config_path)

    env = os.environ.get("PRIMEBETS_CONFIG")
    if env:
        return Path(env)

    default = Path("config.yaml")
    return default if default.exists() else None


def _load_yaml(path: Path | None) -> dict[str, Any]:
    """Load YAML file, return empty dict if not found."""
    if not path or not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
