"""Filter state parsing.

A filter file maps facet keys from the registry to user values:

    party: ["PS", "contains:ecolo"]     # terms: exact values or substring
    year: {min: 1981, max: "1988-06"}   # dates: open bounds allowed
    text: "chômage"                     # query: free text

Terms values prefixed with ``contains:`` become wildcard special values.
Date bounds are normalized to a 4-digit year.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Any, Mapping

from dateutil import parser as dt_parser

from FacetSearch.config.app import read_yaml
from FacetSearch.config.common import expect_mapping, expect_str, expect_str_list
from FacetSearch.core.filters import FacetRegistry, FilterEntry, dates_entry, query_entry, terms_entry
from FacetSearch.core.wildcard import encode_wildcard

CONTAINS_PREFIX = "contains:"
_DEFAULT_DATE = datetime(2000, 1, 1)


def load_filter_state(path: Path, registry: FacetRegistry) -> dict[str, FilterEntry]:
    """Load a YAML filter file."""
    return parse_filter_state(read_yaml(path), registry)


def parse_filter_state(raw: Mapping[str, Any], registry: FacetRegistry) -> dict[str, FilterEntry]:
    """Parse a filter mapping into a filter state keyed by facet key.

    Args:
        raw: Mapping of facet key to user value.
        registry: Facet registry resolving keys to specs.

    Returns:
        Filter state. Facets with a null value are left out.

    Raises:
        TypeError: If a value does not fit its facet kind.
        ValueError: If a facet key is unknown or a date bound is invalid.
    """
    state: dict[str, FilterEntry] = {}
    for key, value in raw.items():
        if value is None:
            continue
        spec = registry.require(str(key))
        if spec.kind == "terms":
            values = [value] if isinstance(value, str) else expect_str_list(value, str(key))
            state[key] = terms_entry(spec, *(_parse_term(v) for v in values if v.strip()))
        elif spec.kind == "dates":
            bounds = expect_mapping(value, str(key))
            unknown = {str(k) for k in bounds.keys()} - {"min", "max"}
            if unknown:
                raise ValueError(f"{key} has unknown bounds: {sorted(unknown)}")
            state[key] = dates_entry(
                spec,
                min=_parse_year(bounds.get("min"), f"{key}.min"),
                max=_parse_year(bounds.get("max"), f"{key}.max"),
            )
        else:
            text = expect_str(value, str(key)).strip()
            if text:
                state[key] = query_entry(spec, text)
    return state


def _parse_term(value: str) -> str:
    term = value.strip()
    if term.startswith(CONTAINS_PREFIX):
        return encode_wildcard(term[len(CONTAINS_PREFIX):].strip())
    return term


def _parse_year(value: Any, config_key: str) -> str | None:
    """Normalize a date bound to a 4-digit year string."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"{config_key} must be a year or a date")
    if isinstance(value, int):
        return f"{value:04d}"
    if isinstance(value, date):
        return f"{value.year:04d}"
    text = expect_str(value, config_key).strip()
    if not text:
        return None
    if text.isdigit():
        return f"{int(text):04d}"
    try:
        parsed = dt_parser.parse(text, default=_DEFAULT_DATE)
    except (ValueError, OverflowError) as error:
        raise ValueError(f"{config_key} is not a valid date: {text}") from error
    return f"{parsed.year:04d}"
