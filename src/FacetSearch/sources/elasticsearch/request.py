"""Request bodies for document search and CSV export.

Both bodies embed the same compiled query so that an export always contains
the documents shown on screen.
"""

from __future__ import annotations

from typing import Any

from FacetSearch.core.models import SearchContext
from FacetSearch.sources.elasticsearch.query import FilterQueryCompiler, build_highlight


def build_search_body(
    compiler: FilterQueryCompiler,
    context: SearchContext,
    *,
    from_: int,
    size: int,
) -> dict[str, Any]:
    """Build a document search body.

    Args:
        compiler: Filter compiler.
        context: Filters and optional sort.
        from_: Offset of the first hit.
        size: Page size.

    Returns:
        JSON-serializable body without null entries.
    """
    body = {
        "size": size,
        "from": from_,
        "query": compiler.compile_filter(context.filters).to_dict(),
        "sort": _sort_expression(context),
        "track_total_hits": True,
        "highlight": build_highlight(context.filters),
    }
    return {k: v for k, v in body.items() if v is not None}


def build_csv_body(compiler: FilterQueryCompiler, context: SearchContext) -> dict[str, Any]:
    """Build a CSV export body for the same filters as `build_search_body`."""
    body = {
        "query": compiler.compile_filter(context.filters).to_dict(),
        "sort": _sort_expression(context),
    }
    return {k: v for k, v in body.items() if v is not None}


def _sort_expression(context: SearchContext) -> list[Any] | None:
    if context.sort is None:
        return None
    return [dict(item) for item in context.sort.expression]
