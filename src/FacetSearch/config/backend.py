"""Backend domain configuration: search proxy location and paging."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

from FacetSearch.config.common import (
    expect_number,
    expect_str,
    expect_str_list,
    get_section,
    require,
)

API_PATH_ENV = "FACETSEARCH_API_PATH"


@dataclass(frozen=True, slots=True)
class BackendConfig:
    """Store validated backend settings.

    Attributes:
        api_path: Base URL of the backend API.
        index: Index (or alias) used for term suggestions.
        search_path: Document search endpoint relative to `api_path`.
        timeout: HTTP timeout in seconds.
        pagination_size: Documents per result page.
        fulltext_fields: Fields searched by free-text filters.
    """

    api_path: str
    index: str
    search_path: str = "search"
    timeout: float = 60.0
    pagination_size: int = 20
    fulltext_fields: tuple[str, ...] = ("ocr",)


def load_backend(raw: Mapping[str, Any]) -> BackendConfig:
    """Load backend domain config from raw mapping.

    The ``FACETSEARCH_API_PATH`` environment variable overrides
    ``backend.api_path``.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "backend", required=True)
    api_path = os.getenv(API_PATH_ENV, "").strip()
    if not api_path:
        api_path = expect_str(require(section, "api_path", "backend.api_path"), "backend.api_path")
    return BackendConfig(
        api_path=api_path,
        index=expect_str(require(section, "index", "backend.index"), "backend.index"),
        search_path=expect_str(section.get("search_path", "search"), "backend.search_path"),
        timeout=expect_number(section.get("timeout", 60.0), "backend.timeout"),
        pagination_size=expect_number(section.get("pagination_size", 20), "backend.pagination_size", integer=True),
        fulltext_fields=tuple(
            expect_str_list(section.get("fulltext_fields", ["ocr"]), "backend.fulltext_fields")
        ),
    )


def check_backend(config: BackendConfig) -> None:
    """Validate backend domain constraints.

    Raises:
        ValueError: If values violate backend constraints.
    """
    if not config.api_path.strip():
        raise ValueError("backend.api_path must not be empty")
    if not config.api_path.startswith(("http://", "https://")):
        raise ValueError("backend.api_path must be an http(s) URL")
    if not config.index.strip():
        raise ValueError("backend.index must not be empty")
    if config.timeout <= 0:
        raise ValueError("backend.timeout must be positive")
    if config.pagination_size <= 0:
        raise ValueError("backend.pagination_size must be positive")
    if not config.fulltext_fields:
        raise ValueError("backend.fulltext_fields must include at least one field")
