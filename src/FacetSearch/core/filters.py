from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Literal, Mapping, Union

from FacetSearch.core.clauses import QueryClause

FilterKind = Literal["terms", "dates", "query"]
TermsOrder = Literal["key_asc", "count_desc"]

FILTER_KINDS: frozenset[str] = frozenset({"terms", "dates", "query"})
TERMS_ORDERS: frozenset[str] = frozenset({"key_asc", "count_desc"})


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Static description of one filterable field.

    Attributes:
        field: Index field name. A dot (``"<nested>.<subfield>"``) means the
            field lives inside a nested object; it is the only nesting signal.
        kind: Filter kind: terms / dates / query.
        order: Bucket order for term suggestions.
        extra_query_field: Fixed clause intersected with every query against
            this field, independent of the user's own value.
        label: Optional display label.
    """

    field: str
    kind: FilterKind
    order: TermsOrder = "count_desc"
    extra_query_field: QueryClause | None = None
    label: str | None = None

    @property
    def nested_path(self) -> str | None:
        """Path of the nested object, or None for a flat field."""
        return nested_path(self.field)


@dataclass(frozen=True, slots=True)
class DateRange:
    """Year-granularity bounds; a missing bound means an open range."""

    min: str | None = None  # noqa: A003 - mirrors the filter payload
    max: str | None = None  # noqa: A003 - mirrors the filter payload


FilterValue = Union[tuple[str, ...], DateRange, str]


@dataclass(frozen=True, slots=True)
class FilterEntry:
    """One active filter: the facet spec, its kind, and the user's value.

    Value shape depends on `kind`:

    - terms: tuple of literal or wildcard-encoded strings
    - dates: `DateRange`
    - query: free-text string
    """

    spec: FieldSpec
    kind: FilterKind
    value: FilterValue


FilterState = Mapping[str, FilterEntry]


def nested_path(field: str) -> str | None:
    """Return the nested object path of a dotted field name."""
    if "." not in field:
        return None
    return field.split(".", 1)[0]


class FacetRegistry(Mapping[str, FieldSpec]):
    """Read-only registry of facet specs keyed by facet name."""

    __slots__ = ("_specs",)

    def __init__(self, specs: Mapping[str, FieldSpec]) -> None:
        self._specs = MappingProxyType(dict(specs))

    def __getitem__(self, key: str) -> FieldSpec:
        return self._specs[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"FacetRegistry({dict(self._specs)!r})"

    def require(self, key: str) -> FieldSpec:
        """Return the spec for `key`.

        Raises:
            ValueError: If the facet is not registered.
        """
        spec = self._specs.get(key)
        if spec is None:
            raise ValueError(f"Unknown facet: {key}")
        return spec


def terms_entry(spec: FieldSpec, *values: str) -> FilterEntry:
    return FilterEntry(spec=spec, kind="terms", value=tuple(values))


def dates_entry(spec: FieldSpec, min: str | None = None, max: str | None = None) -> FilterEntry:  # noqa: A002
    return FilterEntry(spec=spec, kind="dates", value=DateRange(min=min, max=max))


def query_entry(spec: FieldSpec, text: str) -> FilterEntry:
    return FilterEntry(spec=spec, kind="query", value=text)
