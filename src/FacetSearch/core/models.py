from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from FacetSearch.core.filters import FilterState


@dataclass(frozen=True, slots=True)
class SortSpec:
    """Named sort option.

    Attributes:
        label: Name used to select the sort (CLI / config).
        expression: Engine sort expression passed through unchanged.
    """

    label: str
    expression: Sequence[Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class SearchContext:
    """Everything a search request depends on besides paging."""

    filters: FilterState = field(default_factory=dict)
    sort: SortSpec | None = None
    index: str | None = None


@dataclass(frozen=True, slots=True)
class SearchHit:
    """One matching document.

    Attributes:
        id: Engine document id.
        source: Stored document fields.
        highlight: Highlighted excerpts keyed by field.
    """

    id: str
    source: Mapping[str, Any]
    highlight: Mapping[str, Sequence[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "source", MappingProxyType(dict(self.source)))
        object.__setattr__(self, "highlight", MappingProxyType(dict(self.highlight)))


@dataclass(frozen=True, slots=True)
class SearchPage:
    """One page of hits and the total hit count.

    `stale` is set when a newer search was issued before this one completed.
    """

    hits: Sequence[SearchHit]
    total: int
    stale: bool = False


@dataclass(frozen=True, slots=True)
class TermSuggestion:
    term: str
    count: int
