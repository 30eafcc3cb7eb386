"""Configuration loading for blogship.

Settings live in ``blogship.yaml`` at the project root and are merged over
DEFAULT_CONFIG. Secrets (deploy key, hosting repository, custom domain) are
never read from the file; the file only names the environment variables the
CI platform provides them in.

Key functions:
- load_config: Load blogship.yaml merged over the defaults.
- require_env: Read a configured environment variable or fail.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "blogship.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content",
    "output_dir": "public",
    "trunk_branch": "master",
    "marker_file": "CNAME",
    "generator": {
        "command": "hugo --destination {output}",
    },
    "publish": {
        "commit_message": "Content update",
        "remote": "origin",
        "author_name": "blogship",
        "author_email": "blogship@localhost",
        "strict_host_key_checking": False,
    },
    "env": {
        "deploy_key": "GITHUB_REPO_KEY",
        "repository": "GITHUB_REPO_NAME",
        "cname": "GITHUB_CNAME",
    },
}


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            base[key] = _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(project_root: Path) -> dict[str, Any]:
    """Load configuration from blogship.yaml.

    Nested sections (``generator``, ``publish``, ``env``) merge key by key,
    so a file only needs the values it changes.

    Args:
        project_root: Root directory of the blog project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    config_path = project_root / CONFIG_FILENAME
    if not config_path.exists():
        return config
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"{config_path}: invalid YAML: {exc}") from exc
    if loaded is None:
        return config
    if not isinstance(loaded, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")
    return _merge(config, loaded)


def require_env(config: Mapping[str, Any], key: str, environ: Mapping[str, str]) -> str:
    """Return the value of the environment variable configured under ``env.<key>``.

    Raises:
        ConfigError: If the variable is not set or empty.
    """
    name = config["env"][key]
    value = environ.get(name, "").strip()
    if not value:
        raise ConfigError(f"Environment variable {name} ({key}) is not set")
    return value
