"""Shared validators for configuration and filter files.

Every validator takes the dotted key path of the value it checks so that
error messages point at the offending YAML entry, e.g. ``facets.year.kind``.
Type problems raise `TypeError`; missing or out-of-range values raise
`ValueError`.
"""

from __future__ import annotations

from typing import Any, Collection, Mapping


def get_section(raw: Mapping[str, Any], key: str, *, required: bool) -> Mapping[str, Any]:
    """Return a top-level section, or an empty mapping for a missing optional one.

    Raises:
        ValueError: If section is required but missing.
        TypeError: If section is not a mapping.
    """
    section = raw.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing required config: {key}")
        return {}
    return expect_mapping(section, key)


def require(section: Mapping[str, Any], field: str, config_key: str) -> Any:
    """Return ``section[field]``, raising `ValueError` naming `config_key` if absent."""
    if field not in section:
        raise ValueError(f"Missing required config: {config_key}")
    return section[field]


def expect_mapping(value: Any, config_key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{config_key} must be an object")
    return value


def expect_str(value: Any, config_key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{config_key} must be a string")
    return value


def expect_optional_str(value: Any, config_key: str) -> str | None:
    return None if value is None else expect_str(value, config_key)


def expect_choice(value: Any, choices: Collection[str], config_key: str) -> str:
    """Return `value` stripped and lower-cased if it is one of `choices`."""
    text = expect_str(value, config_key).strip().lower()
    if text not in choices:
        raise ValueError(f"{config_key} must be one of {sorted(choices)}")
    return text


def expect_bool(value: Any, config_key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{config_key} must be a boolean")
    return value


def expect_number(value: Any, config_key: str, *, integer: bool = False) -> Any:
    """Validate a YAML number; booleans are rejected.

    Args:
        value: Raw value.
        config_key: Full key path for error messages.
        integer: Accept only integers and return an ``int``.

    Returns:
        The integer as-is when `integer`, else the value as ``float``.
    """
    if isinstance(value, bool):
        raise TypeError(f"{config_key} must be a number")
    if integer:
        if not isinstance(value, int):
            raise TypeError(f"{config_key} must be an integer")
        return value
    if not isinstance(value, (int, float)):
        raise TypeError(f"{config_key} must be a number")
    return float(value)


def expect_str_list(value: Any, config_key: str) -> list[str]:
    """Validate a list of strings, naming the failing item's index."""
    if not isinstance(value, list):
        raise TypeError(f"{config_key} must be a list")
    for idx, item in enumerate(value):
        if not isinstance(item, str):
            raise TypeError(f"{config_key}[{idx}] must be a string")
    return list(value)
