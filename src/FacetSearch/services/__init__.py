"""Search service layer for FacetSearch.

Provides the search service and the factory wiring it to the configured
backend.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from FacetSearch.services.search import FacetSearchService, SearchBackend

if TYPE_CHECKING:
    from FacetSearch.config import AppConfig


def create_search_service(config: AppConfig, backend: SearchBackend | None = None) -> FacetSearchService:
    """Create a search service from configuration.

    Args:
        config: Application configuration.
        backend: Optional backend; defaults to an HTTP proxy client.

    Returns:
        Configured FacetSearchService instance.
    """
    from FacetSearch.sources.elasticsearch.query import FilterQueryCompiler

    if backend is None:
        from FacetSearch.sources.elasticsearch.client import SearchProxyClient

        backend = SearchProxyClient(
            config.backend.api_path,
            search_path=config.backend.search_path,
            timeout=config.backend.timeout,
        )

    compiler = FilterQueryCompiler(
        config.facets.registry,
        fulltext_fields=config.backend.fulltext_fields,
    )
    return FacetSearchService(
        compiler=compiler,
        backend=backend,
        index=config.backend.index,
        page_size=config.backend.pagination_size,
    )


__all__ = [
    "FacetSearchService",
    "SearchBackend",
    "create_search_service",
]
