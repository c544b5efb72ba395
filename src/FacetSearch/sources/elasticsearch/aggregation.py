"""Term suggestion aggregations for facet widgets.

A suggestion request lists the distinct values of one facet that are still
available under every *other* active filter. When the user has typed some
text, the base query is narrowed with a synthetic wildcard filter on the facet
and the terms aggregation only keeps values containing the text.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from FacetSearch.core.filters import FieldSpec, FilterState, terms_entry
from FacetSearch.core.models import TermSuggestion
from FacetSearch.core.wildcard import encode_wildcard
from FacetSearch.sources.elasticsearch.query import FilterQueryCompiler, raw_field
from FacetSearch.utils.log import log

AGG_NAME = "termsList"
EXTRA_AGG_NAME = "extra"
DEFAULT_SUGGESTION_LIMIT = 15

_CLASS_SPECIAL = frozenset("\\]^-[")


def build_include_pattern(typed: str) -> str:
    """Build a case-insensitive "contains" regexp for a terms `include`.

    Each character becomes a two-case class (``a`` -> ``[aA]``), so matching
    does not depend on case folding in the indexed values.
    """
    parts: list[str] = []
    for char in typed.lower():
        chars = char + char.upper()
        parts.append("[" + "".join(f"\\{c}" if c in _CLASS_SPECIAL else c for c in chars) + "]")
    return ".*" + "".join(parts) + ".*"


def build_suggestion_query(
    compiler: FilterQueryCompiler,
    filters: FilterState,
    facet: FieldSpec,
    typed: str | None = None,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> dict[str, Any]:
    """Build the aggregation request body listing values of `facet`.

    Args:
        compiler: Filter compiler used for the base query.
        filters: Active filters. The facet's own filter is ignored.
        facet: Facet to list values for.
        typed: Text typed by the user, if any.
        limit: Maximum number of buckets.

    Returns:
        Request body with ``size: 0``, ``query`` and ``aggs``.
    """
    context_filters = {key: entry for key, entry in filters.items() if entry.spec != facet}
    override = None
    if typed:
        override = terms_entry(facet, encode_wildcard(typed))
    query = compiler.compile_filter(context_filters, override)

    terms: dict[str, Any] = {
        "field": raw_field(facet.field),
        "size": limit,
        "order": {"_key": "asc"} if facet.order == "key_asc" else {"_count": "desc"},
    }
    if typed:
        terms["include"] = build_include_pattern(typed)

    agg: dict[str, Any] = {"terms": terms}
    if facet.extra_query_field is not None:
        agg["aggs"] = {EXTRA_AGG_NAME: {"filter": facet.extra_query_field.to_dict()}}
    aggs: dict[str, Any] = {AGG_NAME: agg}

    path = facet.nested_path
    if path is not None:
        aggs = {path: {"nested": {"path": path}, "aggs": aggs}}

    log.debug("Suggestion query: field=%s typed=%r limit=%d", facet.field, typed, limit)
    return {"size": 0, "query": query.to_dict(), "aggs": aggs}


def parse_suggestion_response(payload: Mapping[str, Any], facet: FieldSpec) -> Iterator[TermSuggestion]:
    """Yield term suggestions from an aggregation response.

    Buckets are unwrapped through the nested aggregation when the facet is
    nested. When the facet has an extra clause, the count comes from the
    ``extra`` sub-aggregation. Zero counts are skipped.

    Raises:
        ValueError: If the response has no bucket list for the facet.
    """
    buckets = _extract_buckets(payload, facet)
    use_extra = facet.extra_query_field is not None
    return (
        suggestion
        for suggestion in (_bucket_suggestion(bucket, use_extra) for bucket in buckets)
        if suggestion.count > 0
    )


def _extract_buckets(payload: Mapping[str, Any], facet: FieldSpec) -> list[Mapping[str, Any]]:
    aggregations = payload.get("aggregations") if isinstance(payload, Mapping) else None
    if not isinstance(aggregations, Mapping):
        raise ValueError("Suggestion response has no aggregations")
    path = facet.nested_path
    if path is not None:
        aggregations = aggregations.get(path)
        if not isinstance(aggregations, Mapping):
            raise ValueError(f"Suggestion response has no nested aggregation: {path}")
    terms = aggregations.get(AGG_NAME)
    buckets = terms.get("buckets") if isinstance(terms, Mapping) else None
    if not isinstance(buckets, list):
        raise ValueError(f"Suggestion response has no buckets for {facet.field}")
    return [b for b in buckets if isinstance(b, Mapping)]


def _bucket_suggestion(bucket: Mapping[str, Any], use_extra: bool) -> TermSuggestion:
    count = bucket.get("doc_count", 0)
    extra = bucket.get(EXTRA_AGG_NAME)
    if use_extra and isinstance(extra, Mapping):
        count = extra.get("doc_count", 0)
    return TermSuggestion(term=str(bucket.get("key", "")), count=int(count))
