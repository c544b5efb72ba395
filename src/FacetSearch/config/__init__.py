"""Public configuration API for FacetSearch."""

from __future__ import annotations

from FacetSearch.config.app import DEFAULT_CONFIG_PATH, AppConfig, load_config, parse_config_dict
from FacetSearch.config.backend import BackendConfig
from FacetSearch.config.facets import FacetsConfig
from FacetSearch.config.filters import load_filter_state, parse_filter_state
from FacetSearch.config.runtime import RuntimeConfig

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "BackendConfig",
    "FacetsConfig",
    "RuntimeConfig",
    "load_config",
    "load_filter_state",
    "parse_config_dict",
    "parse_filter_state",
]
