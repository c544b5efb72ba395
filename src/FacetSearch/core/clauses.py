"""Structured query clauses understood by the search engine.

Clauses form a closed set of frozen dataclasses. The compiler only builds and
combines them; `to_dict()` renders the Elasticsearch query DSL payload.

Supported clause types:
- `MatchAll`          -> {"match_all": {}}
- `Bool`              -> {"bool": {"must": [...], "should": [...]}}
- `Nested`            -> {"nested": {"path": ..., "query": ...}}
- `Range`             -> {"range": {field: {"gte", "lte", "format"}}}
- `Wildcard`          -> {"wildcard": {field: {"value", "case_insensitive"}}}
- `Terms`             -> {"terms": {field: [...]}}
- `Term`              -> {"term": {field: value}}
- `SimpleQueryString` -> {"simple_query_string": {"query", "fields"}}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union


@dataclass(frozen=True, slots=True)
class MatchAll:
    def to_dict(self) -> dict[str, Any]:
        return {"match_all": {}}


@dataclass(frozen=True, slots=True)
class Bool:
    """Boolean combination: every `must` clause and at least one `should` clause."""

    must: tuple[QueryClause, ...] = ()
    should: tuple[QueryClause, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.must:
            body["must"] = [c.to_dict() for c in self.must]
        if self.should:
            body["should"] = [c.to_dict() for c in self.should]
        return {"bool": body}


@dataclass(frozen=True, slots=True)
class Nested:
    path: str
    query: QueryClause

    def to_dict(self) -> dict[str, Any]:
        return {"nested": {"path": self.path, "query": self.query.to_dict()}}


@dataclass(frozen=True, slots=True)
class Range:
    """Range clause; an absent bound is omitted from the payload, not sent as null."""

    field: str
    gte: str | None = None
    lte: str | None = None
    format: str | None = None  # noqa: A003 - engine parameter name

    def to_dict(self) -> dict[str, Any]:
        params = {"gte": self.gte, "lte": self.lte, "format": self.format}
        return {"range": {self.field: {k: v for k, v in params.items() if v is not None}}}


@dataclass(frozen=True, slots=True)
class Wildcard:
    field: str
    value: str
    case_insensitive: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"wildcard": {self.field: {"value": self.value, "case_insensitive": self.case_insensitive}}}


@dataclass(frozen=True, slots=True)
class Terms:
    field: str
    values: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"terms": {self.field: list(self.values)}}


@dataclass(frozen=True, slots=True)
class Term:
    field: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"term": {self.field: self.value}}


@dataclass(frozen=True, slots=True)
class SimpleQueryString:
    query: str
    fields: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"simple_query_string": {"query": self.query, "fields": list(self.fields)}}


QueryClause = Union[MatchAll, Bool, Nested, Range, Wildcard, Terms, Term, SimpleQueryString]


def parse_clause(value: Any, config_key: str) -> QueryClause:
    """Parse a query DSL mapping into a `QueryClause`.

    Args:
        value: Mapping with exactly one clause type key, e.g.
            ``{"term": {"type": "profession"}}``.
        config_key: Full key path used in error messages.

    Returns:
        Parsed clause.

    Raises:
        TypeError: If the clause shape is invalid.
        ValueError: If the clause type is unknown or parameters are missing.
    """
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    if len(value) != 1:
        raise ValueError(f"{config_key} must contain exactly one clause type")

    clause_type, body = next(iter(value.items()))
    key = f"{config_key}.{clause_type}"
    if clause_type == "match_all":
        return MatchAll()
    if not isinstance(body, Mapping):
        raise TypeError(f"{key} must be an object")

    if clause_type == "bool":
        unknown = {str(k) for k in body.keys()} - {"must", "should"}
        if unknown:
            raise ValueError(f"{key} has unknown operators: {sorted(unknown)}")
        return Bool(
            must=_parse_clause_list(body.get("must"), f"{key}.must"),
            should=_parse_clause_list(body.get("should"), f"{key}.should"),
        )
    if clause_type == "nested":
        path = body.get("path")
        if not isinstance(path, str) or not path:
            raise ValueError(f"{key}.path must be a non-empty string")
        if "query" not in body:
            raise ValueError(f"Missing required config: {key}.query")
        return Nested(path=path, query=parse_clause(body["query"], f"{key}.query"))

    field, params = _single_field(body, key)
    if clause_type == "range":
        if not isinstance(params, Mapping):
            raise TypeError(f"{key}.{field} must be an object")
        return Range(
            field=field,
            gte=_optional_str(params.get("gte"), f"{key}.{field}.gte"),
            lte=_optional_str(params.get("lte"), f"{key}.{field}.lte"),
            format=_optional_str(params.get("format"), f"{key}.{field}.format"),
        )
    if clause_type == "wildcard":
        if isinstance(params, str):
            return Wildcard(field=field, value=params)
        if not isinstance(params, Mapping) or not isinstance(params.get("value"), str):
            raise TypeError(f"{key}.{field}.value must be a string")
        return Wildcard(
            field=field,
            value=params["value"],
            case_insensitive=bool(params.get("case_insensitive", False)),
        )
    if clause_type == "terms":
        if not isinstance(params, list) or not all(isinstance(v, str) for v in params):
            raise TypeError(f"{key}.{field} must be a list of strings")
        return Terms(field=field, values=tuple(params))
    if clause_type == "term":
        if isinstance(params, Mapping):
            params = params.get("value")
        if not isinstance(params, str):
            raise TypeError(f"{key}.{field} must be a string")
        return Term(field=field, value=params)

    raise ValueError(f"{config_key} has unsupported clause type: {clause_type}")


def _parse_clause_list(value: Any, config_key: str) -> tuple[QueryClause, ...]:
    if value is None:
        return ()
    if isinstance(value, Mapping):
        return (parse_clause(value, config_key),)
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    return tuple(parse_clause(item, f"{config_key}[{idx}]") for idx, item in enumerate(value))


def _single_field(body: Mapping[str, Any], config_key: str) -> tuple[str, Any]:
    if len(body) != 1:
        raise ValueError(f"{config_key} must target exactly one field")
    field, params = next(iter(body.items()))
    if not isinstance(field, str) or not field:
        raise TypeError(f"{config_key} field name must be a non-empty string")
    return field, params


def _optional_str(value: Any, config_key: str) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise TypeError(f"{config_key} must be a string")
    return str(value)
