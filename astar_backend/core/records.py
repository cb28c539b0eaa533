"""
Record data validation against a table schema.

Dependencies: astar_backend.core.property_types
System role: Flexible record validation
"""

from typing import Any

from astar_backend.core.property_types import validate_property_value

MAX_BATCH_SIZE = 1000
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000


def validate_record_data(
    properties: dict[str, dict],
    data: dict[str, Any],
    type_schemas: dict[str, dict] | None = None,
    partial: bool = False,
) -> list[str]:
    """
    Validate record values against the table's property definitions.

    Args:
        properties: Table schema (key -> definition dict)
        data: Values keyed by property key
        type_schemas: Catalog validation schema per type id
        partial: Skip the required-property check (updates of single fields)

    Returns:
        list[str]: Error messages prefixed with the property key
    """
    type_schemas = type_schemas or {}
    errors: list[str] = []

    for key in data:
        if key not in properties:
            errors.append(f"{key}: Unknown property")

    for key, definition in properties.items():
        if key not in data:
            if definition.get("required") and not partial:
                errors.append(f"{key}: Required property is missing")
            continue
        value = data[key]
        if definition.get("required") and value in (None, "", []):
            errors.append(f"{key}: Required property must have a value")
            continue
        type_id = definition.get("type_id", "")
        for message in validate_property_value(
            type_id,
            value,
            type_schemas.get(type_id),
            definition.get("config"),
        ):
            errors.append(f"{key}: {message}")

    return errors


def matches_filters(data: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    """Equality filter per property; list values match when they contain the filter value."""
    for key, expected in (filters or {}).items():
        actual = data.get(key)
        if isinstance(actual, list) and not isinstance(expected, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


def matches_search(data: dict[str, Any], search: str | None) -> bool:
    """Case-insensitive substring search over string values."""
    if not search:
        return True
    needle = search.lower()
    for value in data.values():
        if isinstance(value, str) and needle in value.lower():
            return True
        if isinstance(value, list) and any(isinstance(v, str) and needle in v.lower() for v in value):
            return True
    return False


def sort_key(data: dict[str, Any], key: str):
    """Sort key placing missing values last and grouping by value kind."""
    value = data.get(key)
    if value is None:
        return (2, "")
    if isinstance(value, bool):
        return (0, int(value))
    if isinstance(value, (int, float)):
        return (0, value)
    return (1, str(value).lower())
