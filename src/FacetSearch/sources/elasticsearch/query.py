"""Elasticsearch filter compiler.

Compiles the active `FilterState` into one Elasticsearch query clause.

Rules per filter kind
- terms -> bool.should over the values, each against `<field>.raw`:
           wildcard-encoded values -> case-insensitive `*<value>*` wildcard,
           other values            -> exact `terms` match
- dates -> range on the field with `format: yyyy`, absent bounds omitted
- query -> simple_query_string on the full-text field(s)

Then, per entry
- `extra_query_field` set -> bool.must[clause, extra]
- dotted field            -> nested query on the path before the first dot,
                             applied after the extra clause so that it is
                             inside the nested scope too

Entries are AND-ed. No entry compiles to match_all, a single entry is
returned as is.
"""

from __future__ import annotations

from typing import Any, Sequence

from FacetSearch.core.clauses import Bool, MatchAll, Nested, QueryClause, Range, SimpleQueryString, Terms, Wildcard
from FacetSearch.core.filters import DateRange, FacetRegistry, FieldSpec, FilterEntry, FilterState, nested_path
from FacetSearch.core.wildcard import decode_wildcard, is_wildcard
from FacetSearch.utils.log import log

DEFAULT_FULLTEXT_FIELDS: tuple[str, ...] = ("ocr",)
DATE_FORMAT = "yyyy"
HIGHLIGHT_FRAGMENTS = 2
HIGHLIGHT_FRAGMENT_SIZE = 50


class FilterKindMismatchError(ValueError):
    """Raised when a filter entry does not match its facet spec."""


def raw_field(field: str) -> str:
    """Return the untokenized sub-field used for exact and wildcard matching."""
    return f"{field}.raw"


class FilterQueryCompiler:
    """Compile filter states against an explicit facet registry."""

    def __init__(
        self,
        registry: FacetRegistry,
        *,
        fulltext_fields: Sequence[str] = DEFAULT_FULLTEXT_FIELDS,
    ) -> None:
        """Initialize the compiler.

        Args:
            registry: Facet specs available to this compiler.
            fulltext_fields: Fields searched by free-text (`query`) filters.
        """
        self.registry = registry
        self.fulltext_fields = tuple(fulltext_fields)

    def facet(self, key: str) -> FieldSpec:
        """Return the registered spec for facet `key`."""
        return self.registry.require(key)

    def compile_one(self, field: str, entry: FilterEntry) -> QueryClause | None:
        """Compile a single filter entry.

        Args:
            field: Index field the entry applies to.
            entry: Active filter entry.

        Returns:
            The clause for this entry, or None when the entry carries no
            constraint (empty terms list).

        Raises:
            FilterKindMismatchError: If the entry kind or value shape does not
                match the facet spec.
        """
        _check_entry(field, entry)

        if entry.kind == "terms":
            values = tuple(entry.value)
            if not values:
                log.debug("Skipping empty terms filter: field=%s", field)
                return None
            query: QueryClause = Bool(should=tuple(_term_clause(field, v) for v in values))
        elif entry.kind == "dates":
            bounds = entry.value
            query = Range(field=field, gte=bounds.min, lte=bounds.max, format=DATE_FORMAT)
        else:
            query = SimpleQueryString(query=entry.value, fields=self.fulltext_fields)

        if entry.spec.extra_query_field is not None:
            query = Bool(must=(query, entry.spec.extra_query_field))

        path = nested_path(field)
        if path is not None:
            query = Nested(path=path, query=query)
        return query

    def compile_filter(
        self,
        filters: FilterState,
        suggestion_override: FilterEntry | None = None,
    ) -> QueryClause:
        """Compile the whole filter state into one clause.

        Args:
            filters: Active filters keyed by filter key.
            suggestion_override: Extra entry AND-ed on top of the filters. The
                current filter of the same facet is dropped in favour of it.

        Returns:
            match_all, the single clause, or a bool.must conjunction.
        """
        entries = list(filters.values())
        if suggestion_override is not None:
            entries = [e for e in entries if e.spec != suggestion_override.spec]
            entries.append(suggestion_override)

        clauses: list[QueryClause] = []
        for entry in entries:
            clause = self.compile_one(entry.spec.field, entry)
            if clause is not None:
                clauses.append(clause)

        log.debug("Compiled %d filter clause(s) from %d entries", len(clauses), len(entries))
        if not clauses:
            return MatchAll()
        if len(clauses) == 1:
            return clauses[0]
        return Bool(must=tuple(clauses))


def build_highlight(filters: FilterState) -> dict[str, Any]:
    """Return the highlight request for the free-text filters in `filters`."""
    fields = [
        {entry.spec.field: {"number_of_fragments": HIGHLIGHT_FRAGMENTS, "fragment_size": HIGHLIGHT_FRAGMENT_SIZE}}
        for entry in filters.values()
        if entry.kind == "query"
    ]
    return {"fields": fields}


def _term_clause(field: str, value: str) -> QueryClause:
    if is_wildcard(value):
        return Wildcard(field=raw_field(field), value=f"*{decode_wildcard(value)}*", case_insensitive=True)
    return Terms(field=raw_field(field), values=(value,))


def _check_entry(field: str, entry: FilterEntry) -> None:
    if entry.kind != entry.spec.kind:
        raise FilterKindMismatchError(
            f"Filter on {field} has kind {entry.kind!r} but its facet is {entry.spec.kind!r}"
        )
    value = entry.value
    if entry.kind == "terms":
        valid = isinstance(value, (tuple, list)) and all(isinstance(v, str) for v in value)
    elif entry.kind == "dates":
        valid = isinstance(value, DateRange)
    else:
        valid = isinstance(value, str)
    if not valid:
        raise FilterKindMismatchError(f"Filter on {field} has an invalid {entry.kind} value: {value!r}")
