"""Include/exclude filtering of nested JSON objects by dotted keys."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable

_log = logging.getLogger(__name__)


class FilterType(Enum):
    """Whether the listed keys are kept or removed."""

    INCLUDE = 0
    EXCLUDE = 1

    def __str__(self) -> str:
        return self.name.capitalize()


def by_type(filter_type: FilterType, keys: Iterable[str], data: dict[str, Any]) -> dict[str, Any]:
    """Filter ``data`` by ``keys`` according to ``filter_type``."""
    if filter_type is FilterType.INCLUDE:
        return include_keys(data, keys)
    if filter_type is FilterType.EXCLUDE:
        return exclude_keys(data, keys)
    raise ValueError(f"unknown filter type: {filter_type}")


def include_keys(data: dict[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Return a new object holding only the values found at the dotted ``keys``."""
    result: dict[str, Any] = {}
    for key in keys:
        value = _get_nested_value(data, key)
        if value is not None:
            _set_nested_value(result, key, value)
        else:
            _log.warning("Attempted to include missing config: %s", key)
    return result


def exclude_keys(data: dict[str, Any], keys: Iterable[str]) -> dict[str, Any]:
    """Return a copy of ``data`` without the values at the dotted ``keys``."""
    result = _deep_copy(data)
    for key in keys:
        _remove_nested_key(result, key.split("."))
    return result


def _get_nested_value(data: dict[str, Any], key: str) -> Any:
    parts = key.split(".")
    current = data
    for position, part in enumerate(parts):
        if part not in current:
            return None
        value = current[part]
        if not isinstance(value, dict):
            return value
        if position == len(parts) - 1:
            return value
        current = value
    return current


def _set_nested_value(target: dict[str, Any], key: str, value: Any) -> None:
    *parents, last = key.split(".")
    current = target
    for part in parents:
        current.setdefault(part, {})
        if isinstance(current[part], dict):
            current = current[part]
    current[last] = value


def _remove_nested_key(target: dict[str, Any], parts: list[str]) -> None:
    if not parts:
        return
    head, *rest = parts
    if head not in target:
        _log.warning("Attempted to exclude missing config: %s", ".".join(parts))
        return
    if not rest:
        del target[head]
        return
    nested = target[head]
    if isinstance(nested, dict):
        _remove_nested_key(nested, rest)
        if not nested:
            del target[head]


def _deep_copy(original: dict[str, Any]) -> dict[str, Any]:
    return {
        key: _deep_copy(value) if isinstance(value, dict) else value
        for key, value in original.items()
    }