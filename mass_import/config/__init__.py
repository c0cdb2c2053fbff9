"""Configuration module - exports Settings, load_config and build_import_config."""

from mass_import.config.loader import build_import_config, load_config
from mass_import.config.settings import Settings

__all__ = ["Settings", "build_import_config", "load_config"]
