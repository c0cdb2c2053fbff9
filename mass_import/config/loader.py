"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Import defaults checked into the repo
#   2. .env file           - Local overrides (not committed)
#   3. Environment vars    - Set by the job runner
#   4. CLI flags           - Per-run overrides (applied by build_import_config)
#
# load_config() reads the YAML file first, then deep-merges the
# environment-backed Settings values on top.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import pydantic
import yaml

from mass_import.config.settings import Settings
from mass_import.models.session import ImportConfig
from mass_import.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
            an empty base layer.
        settings: Settings instance to merge; built from the environment
            when omitted.

    Returns:
        Fully resolved configuration dictionary with ``import``,
        ``duplicates``, ``storage`` and ``logging`` sections.

    Raises:
        ConfigurationError: If the YAML file cannot be parsed or is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Could not parse {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "duplicates": {
            "threshold": settings.duplicate_threshold,
            "hard_cutoff_m": settings.duplicate_hard_cutoff_m,
            "search_radius_m": settings.duplicate_search_radius_m,
            "max_candidates": settings.max_candidates,
            "weights": settings.similarity_weights().model_dump(),
        },
        "storage": {
            "catalog_db_path": settings.catalog_db_path,
            "audit_db_path": settings.audit_db_path,
            "timeout_seconds": settings.storage_timeout_seconds,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def build_import_config(
    base: Mapping[str, Any] | None = None,
    **overrides: Any,
) -> ImportConfig:
    """Validate an ``import`` config section plus overrides into an ImportConfig.

    ``None`` overrides are ignored so argparse defaults don't clobber YAML
    values.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    merged: dict[str, Any] = dict(base or {})
    merged.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ImportConfig.model_validate(merged)
    except pydantic.ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(f"Invalid import configuration: {problems}") from exc


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
