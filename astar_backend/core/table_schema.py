"""
Flexible table schema rules.

A table schema is a mapping of property key to property definition plus an
optional display order. Definitions are stored as JSON on the table row; the
functions here validate them and apply schema edits, always returning new
objects so callers can persist the result in one update.

Dependencies: astar_backend.core.property_types
System role: Schema validation for user-defined tables
"""

import re
from dataclasses import dataclass, field
from typing import Any

from astar_backend.core.property_types import BUILTIN_TYPE_IDS

MAX_TABLES_PER_WORKSPACE = 50
MAX_PROPERTIES_PER_TABLE = 100
MAX_NAME_LENGTH = 255

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


@dataclass
class SelectOption:
    """Choice offered by select and multi_select properties."""

    value: str
    label: str
    color: str | None = None

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Option value must not be blank")
        if not self.label or not self.label.strip():
            raise ValueError("Option label must not be blank")
        if self.color is not None and not HEX_COLOR_PATTERN.match(self.color):
            raise ValueError("Color must be a valid hex color code (e.g., #FF5733)")

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "label": self.label, "color": self.color}


@dataclass
class PropertyDefinition:
    """Column definition of a flexible table."""

    type_id: str
    display_name: str
    config: dict[str, Any] = field(default_factory=dict)
    required: bool = False
    description: str | None = None

    def validate(self, known_type_ids: frozenset[str] | set[str] = BUILTIN_TYPE_IDS) -> None:
        """
        Check the definition against the catalog.

        Args:
            known_type_ids: Type ids available in the catalog

        Raises:
            ValueError: On unknown type, bad display name or bad options
        """
        if self.type_id not in known_type_ids:
            raise ValueError(f"Unknown type ID: {self.type_id}")
        if not self.display_name or not self.display_name.strip():
            raise ValueError("Display name must not be blank")
        if len(self.display_name) > MAX_NAME_LENGTH:
            raise ValueError("Display name too long (max 255 characters)")
        if not isinstance(self.config, dict):
            raise ValueError("Config must be an object")
        for option in self.config.get("options") or []:
            if isinstance(option, dict):
                SelectOption(
                    value=option.get("value", ""),
                    label=option.get("label", ""),
                    color=option.get("color"),
                )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type_id": self.type_id,
            "display_name": self.display_name,
            "config": self.config,
            "required": self.required,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertyDefinition":
        return cls(
            type_id=data["type_id"],
            display_name=data["display_name"],
            config=data.get("config") or {},
            required=bool(data.get("required", False)),
            description=data.get("description"),
        )


def validate_table_name(name: str) -> str:
    """Return the trimmed name or raise ValueError."""
    if name is None or not name.strip():
        raise ValueError("Table name must not be blank")
    if len(name) > MAX_NAME_LENGTH:
        raise ValueError("Table name must not exceed 255 characters")
    return name.strip()


def _validate_key(key: str) -> None:
    if key is None or not key.strip():
        raise ValueError("Property key must not be blank")


def add_property(
    properties: dict[str, dict],
    order: list[str],
    key: str,
    definition: PropertyDefinition,
    known_type_ids: frozenset[str] | set[str] = BUILTIN_TYPE_IDS,
) -> tuple[dict[str, dict], list[str]]:
    """
    Add a property to a schema.

    Returns:
        tuple: (new properties, new order)

    Raises:
        ValueError: On blank/duplicate key, invalid definition or limit reached
    """
    _validate_key(key)
    if key in properties:
        raise ValueError(f"Property with key '{key}' already exists in this table")
    if len(properties) >= MAX_PROPERTIES_PER_TABLE:
        raise ValueError(
            f"Table cannot have more than {MAX_PROPERTIES_PER_TABLE} properties"
        )
    definition.validate(known_type_ids)
    new_properties = {**properties, key: definition.to_dict()}
    new_order = [k for k in order if k in properties] + [key]
    return new_properties, new_order


def update_property(
    properties: dict[str, dict],
    key: str,
    definition: PropertyDefinition,
    known_type_ids: frozenset[str] | set[str] = BUILTIN_TYPE_IDS,
) -> dict[str, dict]:
    if key not in properties:
        raise ValueError(f"Property with key '{key}' does not exist")
    definition.validate(known_type_ids)
    return {**properties, key: definition.to_dict()}


def remove_property(
    properties: dict[str, dict],
    order: list[str],
    key: str,
) -> tuple[dict[str, dict], list[str]]:
    if key not in properties:
        raise ValueError(f"Property with key '{key}' does not exist")
    new_properties = {k: v for k, v in properties.items() if k != key}
    return new_properties, [k for k in order if k != key]


def reorder_properties(properties: dict[str, dict], new_order: list[str]) -> list[str]:
    if len(new_order) != len(properties) or set(new_order) != set(properties):
        raise ValueError("New order must contain exactly the same properties")
    return list(new_order)


def ordered_keys(properties: dict[str, dict], order: list[str] | None) -> list[str]:
    """Keys in display order; keys missing from `order` follow in key order."""
    order = order or []
    listed = [k for k in order if k in properties]
    remaining = sorted(k for k in properties if k not in listed)
    return listed + remaining


def ordered_properties(
    properties: dict[str, dict], order: list[str] | None
) -> list[tuple[str, dict]]:
    return [(key, properties[key]) for key in ordered_keys(properties, order)]


TABLE_TEMPLATES: dict[str, dict[str, Any]] = {
    "task": {
        "description": "Task tracking",
        "properties": {
            "title": {"type_id": "text", "display_name": "Title", "required": True},
            "status": {
                "type_id": "select",
                "display_name": "Status",
                "config": {
                    "options": [
                        {"value": "todo", "label": "To do", "color": "#9E9E9E"},
                        {"value": "in_progress", "label": "In progress", "color": "#2196F3"},
                        {"value": "done", "label": "Done", "color": "#4CAF50"},
                    ]
                },
            },
            "assignee": {"type_id": "user", "display_name": "Assignee"},
            "due_date": {"type_id": "date", "display_name": "Due date"},
        },
        "order": ["title", "status", "assignee", "due_date"],
    },
    "expense_log": {
        "description": "Simple expense log",
        "properties": {
            "date": {"type_id": "date", "display_name": "Date", "required": True},
            "description": {"type_id": "text", "display_name": "Description"},
            "amount": {"type_id": "number", "display_name": "Amount", "config": {"precision": 2}},
            "paid": {"type_id": "checkbox", "display_name": "Paid"},
        },
        "order": ["date", "description", "amount", "paid"],
    },
    "contact": {
        "description": "Client and counterpart contacts",
        "properties": {
            "name": {"type_id": "text", "display_name": "Name", "required": True},
            "email": {"type_id": "email", "display_name": "Email"},
            "phone": {"type_id": "phone", "display_name": "Phone"},
            "website": {"type_id": "url", "display_name": "Website"},
            "notes": {"type_id": "long_text", "display_name": "Notes"},
        },
        "order": ["name", "email", "phone", "website", "notes"],
    },
}
