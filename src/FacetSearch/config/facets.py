"""Facet domain configuration: facet registry and sort options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from FacetSearch.config.common import expect_choice, expect_mapping, expect_optional_str, expect_str, require
from FacetSearch.core.clauses import parse_clause
from FacetSearch.core.filters import FILTER_KINDS, TERMS_ORDERS, FacetRegistry, FieldSpec
from FacetSearch.core.models import SortSpec

_ALLOWED_FACET_KEYS = {"field", "kind", "order", "extra_query_field", "label"}


@dataclass(frozen=True, slots=True)
class FacetsConfig:
    """Store the validated facet registry and sort options."""

    registry: FacetRegistry
    sorts: tuple[SortSpec, ...] = ()

    def sort(self, label: str) -> SortSpec:
        """Return the sort option named `label`.

        Raises:
            ValueError: If no sort has this label.
        """
        for option in self.sorts:
            if option.label == label:
                return option
        raise ValueError(f"Unknown sort: {label}")


def load_facets(raw: Mapping[str, Any]) -> FacetsConfig:
    """Load facet domain config from raw mapping.

    Args:
        raw: Root configuration mapping.

    Returns:
        Parsed facet registry and sort options.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing or values are unknown.
    """
    facets_obj = raw.get("facets")
    if facets_obj is None:
        raise ValueError("Missing required config: facets")
    facets_obj = expect_mapping(facets_obj, "facets")

    specs: dict[str, FieldSpec] = {}
    for key, value in facets_obj.items():
        if not isinstance(key, str):
            raise TypeError("facets keys must be strings")
        specs[key] = parse_field_spec(value, f"facets.{key}")

    sorts_obj = raw.get("sorts") or []
    if not isinstance(sorts_obj, list):
        raise TypeError("sorts must be a list")
    sorts = tuple(_parse_sort(item, f"sorts[{idx}]") for idx, item in enumerate(sorts_obj))
    return FacetsConfig(registry=FacetRegistry(specs), sorts=sorts)


def check_facets(config: FacetsConfig) -> None:
    """Validate facet domain constraints.

    Raises:
        ValueError: If values violate facet constraints.
    """
    if not config.registry:
        raise ValueError("facets must include at least one facet")
    for key, spec in config.registry.items():
        if not spec.field.strip():
            raise ValueError(f"facets.{key}.field must not be empty")
        if spec.field.startswith(".") or spec.field.endswith("."):
            raise ValueError(f"facets.{key}.field must not start or end with a dot")
    labels = [option.label for option in config.sorts]
    if len(labels) != len(set(labels)):
        raise ValueError("sorts labels must be unique")


def parse_field_spec(value: Any, config_key: str) -> FieldSpec:
    """Parse one facet mapping into a `FieldSpec`.

    Raises:
        TypeError: If the facet shape/types are invalid.
        ValueError: If keys are missing or unknown.
    """
    section = expect_mapping(value, config_key)
    unknown = {str(k) for k in section.keys()} - _ALLOWED_FACET_KEYS
    if unknown:
        raise ValueError(f"{config_key} has unknown keys: {sorted(unknown)}")

    field = expect_str(require(section, "field", f"{config_key}.field"), f"{config_key}.field").strip()
    kind = expect_choice(require(section, "kind", f"{config_key}.kind"), FILTER_KINDS, f"{config_key}.kind")
    order = expect_choice(section.get("order", "count_desc"), TERMS_ORDERS, f"{config_key}.order")

    extra_obj = section.get("extra_query_field")
    extra = parse_clause(extra_obj, f"{config_key}.extra_query_field") if extra_obj is not None else None

    return FieldSpec(
        field=field,
        kind=kind,
        order=order,
        extra_query_field=extra,
        label=expect_optional_str(section.get("label"), f"{config_key}.label"),
    )


def _parse_sort(value: Any, config_key: str) -> SortSpec:
    section = expect_mapping(value, config_key)
    label = expect_str(require(section, "label", f"{config_key}.label"), f"{config_key}.label").strip()
    if not label:
        raise ValueError(f"{config_key}.label must not be empty")
    expression = require(section, "expression", f"{config_key}.expression")
    if isinstance(expression, Mapping):
        expression = [expression]
    if not isinstance(expression, list) or not all(isinstance(item, Mapping) for item in expression):
        raise TypeError(f"{config_key}.expression must be an object or a list of objects")
    return SortSpec(label=label, expression=tuple(dict(item) for item in expression))
