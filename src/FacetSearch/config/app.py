"""Root configuration: YAML files layered into one validated `AppConfig`."""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from pathlib import Path
from typing import Any, Mapping

import yaml

from FacetSearch.config.backend import BackendConfig, check_backend, load_backend
from FacetSearch.config.facets import FacetsConfig, check_facets, load_facets
from FacetSearch.config.runtime import RuntimeConfig, check_runtime, load_runtime

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Validated configuration of every domain."""

    runtime: RuntimeConfig
    backend: BackendConfig
    facets: FacetsConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Build an `AppConfig` from an already merged mapping.

    All sections are loaded before any is checked, so type errors surface
    ahead of constraint errors.
    """
    config = AppConfig(runtime=load_runtime(raw), backend=load_backend(raw), facets=load_facets(raw))
    check_runtime(config.runtime)
    check_backend(config.backend)
    check_facets(config.facets)
    return config


def load_config(*paths: Path) -> AppConfig:
    """Load one or more YAML files, later files overriding earlier ones.

    Args:
        paths: Config files; `DEFAULT_CONFIG_PATH` when none is given.

    Returns:
        Validated configuration of the merged files.
    """
    layers = [read_yaml(path) for path in (paths or (DEFAULT_CONFIG_PATH,))]
    return parse_config_dict(reduce(deep_merge, layers, {}))


def read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file whose root is a mapping; an empty file reads as ``{}``."""
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{path}: root must be a mapping")
    return dict(data)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge `override` into a copy of `base`; nested mappings merge, anything else is replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            value = deep_merge(current, value)
        merged[key] = value
    return merged
