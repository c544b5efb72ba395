"""Search response parser."""

from __future__ import annotations

from typing import Any, Mapping

from FacetSearch.core.models import SearchHit, SearchPage


def parse_search_response(payload: Mapping[str, Any]) -> SearchPage:
    """Parse an Elasticsearch search response into a `SearchPage`.

    Raises:
        ValueError: If the response has no ``hits`` section.
    """
    hits_obj = payload.get("hits") if isinstance(payload, Mapping) else None
    if not isinstance(hits_obj, Mapping):
        raise ValueError("Search response has no hits")

    hits: list[SearchHit] = []
    for item in hits_obj.get("hits") or []:
        if not isinstance(item, Mapping):
            continue
        source = item.get("_source")
        highlight = item.get("highlight")
        hits.append(
            SearchHit(
                id=_safe_str(item.get("_id")),
                source=source if isinstance(source, Mapping) else {},
                highlight=_parse_highlight(highlight),
            )
        )
    return SearchPage(hits=tuple(hits), total=_parse_total(hits_obj.get("total"), default=len(hits)))


def _parse_total(value: Any, *, default: int) -> int:
    """Read ``hits.total`` in both the object and the legacy integer form."""
    if isinstance(value, Mapping):
        value = value.get("value")
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _parse_highlight(value: Any) -> dict[str, tuple[str, ...]]:
    if not isinstance(value, Mapping):
        return {}
    out: dict[str, tuple[str, ...]] = {}
    for field, fragments in value.items():
        if isinstance(fragments, list):
            out[str(field)] = tuple(str(f) for f in fragments)
    return out


def _safe_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
