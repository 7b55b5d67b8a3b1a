"""
Configuration loading.

A project config is a YAML file, optionally layered over a ``base.yaml``
in the same directory. String values may reference the environment as
``${VAR}`` or ``${VAR:default}``, which keeps warehouse credentials out
of the files. Minimal configs only need: project (and usually
warehouse.url).
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from conformer.config.settings import DedupConfig, PipelineConfig
from conformer.exceptions import ConfigError

_SECTIONS = frozenset(
    {
        "project",
        "staging",
        "warehouse",
        "sources",
        "dedup",
        "limits",
        "corrections",
        "processing",
        "output",
    }
)

_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def _expand_env(match: re.Match[str]) -> str:
    return os.environ.get(match["name"], match["default"] or "")


def _interpolate(node: Any) -> Any:
    """Replace environment references in every string below ``node``."""
    if isinstance(node, dict):
        return {key: _interpolate(value) for key, value in node.items()}
    if isinstance(node, list):
        return [_interpolate(item) for item in node]
    if isinstance(node, str):
        return _ENV_REFERENCE.sub(_expand_env, node)
    return node


def _layer(lower: dict[str, Any], upper: dict[str, Any]) -> dict[str, Any]:
    """Lay ``upper`` over ``lower``; nested mappings combine key by key."""
    layered = dict(lower)
    for key, value in upper.items():
        below = layered.get(key)
        if isinstance(below, dict) and isinstance(value, dict):
            value = _layer(below, value)
        layered[key] = value
    return layered


def load_yaml(path: Path) -> dict[str, Any]:
    """Read one YAML mapping with environment references expanded."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e
    except yaml.YAMLError as e:
        msg = f"Malformed YAML in {path}: {e}"
        raise ConfigError(msg) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping: {path}"
        raise ConfigError(msg)
    return _interpolate(data)


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> PipelineConfig:
    """
    Load pipeline configuration from YAML file(s).

    Keys of the ``dedup.keys`` mapping override per entity type, so a
    project can change the customer key without restating the others.

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional base configuration; defaults to a ``base.yaml``
            next to the main file when one exists.

    Returns:
        Fully validated PipelineConfig instance.

    Raises:
        ConfigError: If the configuration is incomplete or invalid.
    """
    if base_path is None:
        candidate = config_path.parent / "base.yaml"
        if candidate.exists() and candidate != config_path:
            base_path = candidate
    data = load_yaml(base_path) if base_path is not None else {}
    data = _layer(data, load_yaml(config_path))

    if not data.get("project"):
        msg = "Config must specify 'project' name"
        raise ConfigError(msg)

    unknown = sorted(set(data) - _SECTIONS)
    if unknown:
        msg = f"Unknown config section(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    # Dedup keys given in YAML extend the defaults per entity type
    dedup = data.get("dedup")
    if isinstance(dedup, dict) and isinstance(dedup.get("keys"), dict):
        data["dedup"] = {**dedup, "keys": {**DedupConfig().keys, **dedup["keys"]}}

    try:
        return PipelineConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e
