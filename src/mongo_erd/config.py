"""
Configuration resolution for ERD runs.

Builds a single ErdConfig from command flags, environment variables, an
optional YAML config file and hardcoded defaults, in that order of
precedence.
"""

from __future__ import annotations

import logging
import os
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from mongo_erd.exceptions import ConfigError
from mongo_erd.models import ErdConfig

logger = logging.getLogger(__name__)

# Environment variables consulted for each config field
ENV_VARS = {
    "url": "MONGO_URL",
    "db_name": "MONGO_DB",
    "sample_size": "ERD_SAMPLE_SIZE",
    "port": "PORT",
}

_INT_FIELDS = {
    "sample_size",
    "junction_max_fields",
    "junction_min_relationships",
    "max_workers",
    "max_depth",
    "port",
}


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load config values from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    known = {f.name for f in fields(ErdConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {', '.join(unknown)}")

    logger.info(f"Loaded config from {path}")
    return {k: v for k, v in data.items() if k in known}


def collect_values(
    overrides: Optional[Mapping[str, Any]] = None,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Merge the explicitly configured values for one run.

    Args:
        overrides: Values given explicitly as command flags (None means unset)
        config_file: Optional YAML file with ErdConfig field names as keys
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Field name -> value for every field set by a flag, the environment
        or the config file. Fields left to their defaults are absent.
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_file:
        values.update(load_config_file(config_file))

    for name, env_var in ENV_VARS.items():
        if environ.get(env_var):
            values[name] = environ[env_var]

    for name, value in (overrides or {}).items():
        if value is not None:
            values[name] = value

    for name in _INT_FIELDS & set(values):
        try:
            values[name] = int(values[name])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{name} must be an integer, got {values[name]!r}") from e

    return values


def resolve_config(
    overrides: Optional[Mapping[str, Any]] = None,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ErdConfig:
    """Resolve the validated ErdConfig for one run (see collect_values)."""
    return ErdConfig(**collect_values(overrides, config_file, environ))
