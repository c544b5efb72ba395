"""Logging settings from the optional ``log`` section."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from FacetSearch.config.common import expect_bool, expect_choice, expect_str, get_section

_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    level: str = "INFO"
    to_file: bool = False
    dir: str = "log"  # noqa: A003 - config key


def load_runtime(raw: Mapping[str, Any]) -> RuntimeConfig:
    """Read ``log.level`` (case-insensitive), ``log.to_file`` and ``log.dir``.

    Raises:
        TypeError: If a value has the wrong type.
        ValueError: If the level is not a logging level name.
    """
    section = get_section(raw, "log", required=False)
    return RuntimeConfig(
        level=expect_choice(section.get("level", "INFO"), _LOG_LEVELS, "log.level").upper(),
        to_file=expect_bool(section.get("to_file", False), "log.to_file"),
        dir=expect_str(section.get("dir", "log"), "log.dir"),
    )


def check_runtime(config: RuntimeConfig) -> None:
    if config.to_file and not config.dir.strip():
        raise ValueError("log.dir must not be empty when log.to_file is set")
