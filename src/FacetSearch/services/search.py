"""Search service layer: filtered search, term suggestions and CSV export."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from FacetSearch.core.models import SearchContext, SearchPage, TermSuggestion
from FacetSearch.sources.elasticsearch.aggregation import (
    DEFAULT_SUGGESTION_LIMIT,
    build_suggestion_query,
    parse_suggestion_response,
)
from FacetSearch.sources.elasticsearch.parser import parse_search_response
from FacetSearch.sources.elasticsearch.query import FilterQueryCompiler
from FacetSearch.sources.elasticsearch.request import build_csv_body, build_search_body
from FacetSearch.utils.log import log


class SearchBackend(Protocol):
    """Protocol for the HTTP boundary executing compiled bodies."""

    def search(self, body: dict[str, Any]) -> dict[str, Any]:
        """Run a document search body."""
        raise NotImplementedError

    def proxy_search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        """Run a raw search/aggregation body against an index."""
        raise NotImplementedError

    def download_csv(self, body: dict[str, Any], *, filename: str) -> bytes:
        """Return CSV bytes for a search body."""
        raise NotImplementedError

    def close(self) -> None:
        """Close resources held by the backend."""
        raise NotImplementedError


@dataclass(slots=True)
class FacetSearchService:
    """Application service running filtered searches through one backend.

    Every call compiles the filters fresh; nothing is cached between calls.
    Searches are numbered so that a response arriving after a newer search
    was issued is returned with ``stale=True``.
    """

    compiler: FilterQueryCompiler
    backend: SearchBackend
    index: str
    page_size: int = 20
    _generation: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def search_body(self, context: SearchContext, *, page: int = 1) -> dict[str, Any]:
        """Return the search body for a 1-based result page."""
        if page < 1:
            raise ValueError("page must be >= 1")
        return build_search_body(
            self.compiler,
            context,
            from_=(page - 1) * self.page_size,
            size=self.page_size,
        )

    def search(self, context: SearchContext, *, page: int = 1) -> SearchPage:
        """Search documents matching the context filters.

        Args:
            context: Filters and optional sort.
            page: 1-based result page.

        Returns:
            Parsed result page, flagged stale if superseded meanwhile.
        """
        body = self.search_body(context, page=page)
        generation = self._next_generation()
        payload = self.backend.search(body)
        result = parse_search_response(payload)

        if generation != self._generation:
            log.debug("Search superseded: generation=%d latest=%d", generation, self._generation)
            result = SearchPage(hits=result.hits, total=result.total, stale=True)
        log.info("Search completed: total=%d hits=%d page=%d", result.total, len(result.hits), page)
        return result

    def suggest_terms(
        self,
        context: SearchContext,
        facet_key: str,
        *,
        typed: str | None = None,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> list[TermSuggestion]:
        """List values of a facet still available under the other filters.

        Args:
            context: Active filters; the facet's own filter is ignored.
            facet_key: Registry key of the facet.
            typed: Optional text the values must contain (case-insensitive).
            limit: Maximum number of suggestions.

        Returns:
            Suggestions ordered per the facet's configured order.
        """
        facet = self.compiler.facet(facet_key)
        if facet.kind != "terms":
            raise ValueError(f"Facet {facet_key} is not a terms facet")
        if limit <= 0:
            raise ValueError("limit must be positive")

        body = build_suggestion_query(self.compiler, context.filters, facet, typed=typed, limit=limit)
        payload = self.backend.proxy_search(context.index or self.index, body)
        suggestions = list(parse_suggestion_response(payload, facet))
        log.info("Suggestions: facet=%s typed=%r count=%d", facet_key, typed, len(suggestions))
        return suggestions

    def export_csv(self, context: SearchContext, output_path: Path) -> Path:
        """Export every document matching the context filters as CSV.

        The export body carries the same compiled query as `search`.

        Args:
            context: Filters and optional sort.
            output_path: Destination file.

        Returns:
            The written file path.
        """
        body = build_csv_body(self.compiler, context)
        content = self.backend.download_csv(body, filename=output_path.name)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(content)
        log.info("CSV saved to %s (%d bytes)", output_path, len(content))
        return output_path

    def close(self) -> None:
        """Close the backend and release external resources."""
        try:
            self.backend.close()
        except Exception as error:  # noqa: BLE001 - close failure must be isolated
            log.warning("Search backend close failed: %s", error)

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation
