"""Configuration hierarchy: merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.imgcache/config.yaml)
  3. Project config   (./imgcache.yaml)
  4. Environment variables (IMGCACHE_*)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from imgcache.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".imgcache" / "config.yaml"
_PROJECT_CONFIG_NAME = "imgcache.yaml"

_ENV_MAP: dict[str, str] = {
    "IMGCACHE_CACHE_ROOT": "cache_root",
    "IMGCACHE_SUB_DIR": "sub_dir",
    "IMGCACHE_TIMEOUT": "timeout",
    "IMGCACHE_PREFETCH_WORKERS": "prefetch_workers",
    "IMGCACHE_LOG_LEVEL": "log_level",
}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Returns a merged dict with the final resolved values.
    """
    config = get_defaults()
    for path in (_GLOBAL_CONFIG_PATH, _find_project_config()):
        if path is not None:
            config.update(_load_yaml_config(path) or {})
    config.update(_load_env_vars())

    # Only override when explicitly set
    for key, value in runtime_overrides.items():
        if value is not None:
            config[key] = value

    return config


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Return the mapping in a YAML file, or None if it is missing or unusable."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None
    return data


def _find_project_config() -> Path | None:
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / _PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def _load_env_vars() -> dict[str, str]:
    # Values stay strings; CacheManager.from_config converts and validates them
    return {key: os.environ[env] for env, key in _ENV_MAP.items() if env in os.environ}
