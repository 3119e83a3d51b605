"""Configuration module."""

from primebets.core.config.loader import load_config
from primebets.core.config.schema import Config

__all__ = ["Config", "load_config"]
