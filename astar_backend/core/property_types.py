"""
Property type catalog definitions and value validation.

Built-in property types seeded into the catalog, the set of protected
system types, and the per-type validation applied to record values.

Dependencies: None (pure domain layer)
System role: Type system for flexible tables
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

CATEGORY_BASIC = "basic"
CATEGORY_ADVANCED = "advanced"
CATEGORY_RELATION = "relation"
CATEGORY_SYSTEM = "system"
CATEGORIES = (CATEGORY_BASIC, CATEGORY_ADVANCED, CATEGORY_RELATION, CATEGORY_SYSTEM)

SYSTEM_TYPE_IDS = frozenset(
    {"text", "long_text", "number", "checkbox", "date", "select", "multi_select"}
)

TYPE_ID_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
PHONE_PATTERN = re.compile(r"^[+\d\s()-]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

BUILTIN_PROPERTY_TYPES: list[dict[str, Any]] = [
    {
        "id": "text",
        "category": CATEGORY_BASIC,
        "description": "Single line text",
        "icon": "type",
        "ui_component": "TextInput",
        "validation_schema": {"max_length": 255},
        "default_config": {"placeholder": ""},
    },
    {
        "id": "long_text",
        "category": CATEGORY_BASIC,
        "description": "Multi-line text",
        "icon": "align-left",
        "ui_component": "TextArea",
        "validation_schema": {"max_length": 10000},
        "default_config": {"rows": 4},
    },
    {
        "id": "number",
        "category": CATEGORY_BASIC,
        "description": "Numeric value",
        "icon": "hash",
        "ui_component": "NumberInput",
        "validation_schema": {},
        "default_config": {"precision": 0, "format": "plain"},
    },
    {
        "id": "checkbox",
        "category": CATEGORY_BASIC,
        "description": "True/false toggle",
        "icon": "check-square",
        "ui_component": "Checkbox",
        "validation_schema": {},
        "default_config": {"default": False},
    },
    {
        "id": "date",
        "category": CATEGORY_BASIC,
        "description": "Calendar date",
        "icon": "calendar",
        "ui_component": "DatePicker",
        "validation_schema": {},
        "default_config": {"format": "YYYY-MM-DD"},
    },
    {
        "id": "datetime",
        "category": CATEGORY_ADVANCED,
        "description": "Date with time",
        "icon": "clock",
        "ui_component": "DateTimePicker",
        "validation_schema": {},
        "default_config": {"format": "YYYY-MM-DD HH:mm"},
    },
    {
        "id": "select",
        "category": CATEGORY_BASIC,
        "description": "Single choice from options",
        "icon": "chevron-down",
        "ui_component": "Select",
        "validation_schema": {},
        "default_config": {"options": []},
    },
    {
        "id": "multi_select",
        "category": CATEGORY_BASIC,
        "description": "Multiple choices from options",
        "icon": "list",
        "ui_component": "MultiSelect",
        "validation_schema": {},
        "default_config": {"options": []},
    },
    {
        "id": "email",
        "category": CATEGORY_ADVANCED,
        "description": "Email address",
        "icon": "mail",
        "ui_component": "EmailInput",
        "validation_schema": {},
        "default_config": {},
    },
    {
        "id": "phone",
        "category": CATEGORY_ADVANCED,
        "description": "Phone number",
        "icon": "phone",
        "ui_component": "PhoneInput",
        "validation_schema": {},
        "default_config": {},
    },
    {
        "id": "url",
        "category": CATEGORY_ADVANCED,
        "description": "Web link",
        "icon": "link",
        "ui_component": "UrlInput",
        "validation_schema": {},
        "default_config": {},
    },
    {
        "id": "user",
        "category": CATEGORY_RELATION,
        "description": "Reference to tenant users",
        "icon": "user",
        "ui_component": "UserPicker",
        "validation_schema": {},
        "default_config": {"multiple": False},
    },
    {
        "id": "file",
        "category": CATEGORY_RELATION,
        "description": "Attached files",
        "icon": "paperclip",
        "ui_component": "FileUpload",
        "validation_schema": {},
        "default_config": {"multiple": True},
    },
]

BUILTIN_TYPE_IDS = frozenset(t["id"] for t in BUILTIN_PROPERTY_TYPES)


def is_system_type(type_id: str) -> bool:
    return type_id in SYSTEM_TYPE_IDS


def _option_values(config: dict[str, Any] | None) -> set[str]:
    options = (config or {}).get("options") or []
    values = set()
    for option in options:
        if isinstance(option, dict) and option.get("value") is not None:
            values.add(str(option["value"]))
        elif isinstance(option, str):
            values.add(option)
    return values


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float, Decimal)) or isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def validate_property_value(
    type_id: str,
    value: Any,
    schema: dict[str, Any] | None = None,
    config: dict[str, Any] | None = None,
) -> list[str]:
    """
    Validate a record value against its property type.

    Args:
        type_id: Catalog type id of the property
        value: Candidate value (JSON-decoded)
        schema: Catalog validation schema for the type
        config: Property config (select options, bounds)

    Returns:
        list[str]: Error messages, empty when the value is valid
    """
    schema = schema or {}
    config = config or {}

    if value is None:
        if schema.get("nullable", True) is False or config.get("nullable", True) is False:
            return ["Value must not be null"]
        return []

    errors: list[str] = []

    if type_id in ("text", "long_text"):
        if not isinstance(value, str):
            return ["Value must be a string"]
        max_length = config.get("max_length", schema.get("max_length"))
        if max_length is not None and len(value) > int(max_length):
            errors.append(f"Value exceeds maximum length of {max_length}")

    elif type_id == "number":
        if not _is_number(value):
            return ["Value must be a number"]
        minimum = config.get("min", schema.get("min"))
        maximum = config.get("max", schema.get("max"))
        if minimum is not None and value < minimum:
            errors.append(f"Value must be at least {minimum}")
        if maximum is not None and value > maximum:
            errors.append(f"Value must be at most {maximum}")

    elif type_id == "checkbox":
        if not isinstance(value, bool):
            errors.append("Value must be a boolean")

    elif type_id == "date":
        if not isinstance(value, str) or not DATE_PATTERN.match(value):
            return ["Value must be a date string (YYYY-MM-DD)"]
        try:
            date.fromisoformat(value)
        except ValueError:
            errors.append("Value must be a valid calendar date")

    elif type_id == "datetime":
        if not isinstance(value, str):
            return ["Value must be an ISO-8601 datetime string"]
        try:
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            errors.append("Value must be an ISO-8601 datetime string")

    elif type_id == "select":
        if not isinstance(value, str):
            return ["Value must be a string"]
        allowed = _option_values(config)
        if allowed and value not in allowed:
            errors.append(f"Value '{value}' is not one of the configured options")

    elif type_id == "multi_select":
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return ["Value must be a list of strings"]
        allowed = _option_values(config)
        invalid = [v for v in value if allowed and v not in allowed]
        if invalid:
            errors.append(f"Values {invalid} are not configured options")

    elif type_id == "email":
        if not isinstance(value, str) or "@" not in value:
            errors.append("Value must be a valid email address")

    elif type_id == "url":
        if not isinstance(value, str) or not value.startswith(("http://", "https://")):
            errors.append("Value must start with http:// or https://")

    elif type_id == "phone":
        if not isinstance(value, str) or not PHONE_PATTERN.match(value):
            errors.append("Value must be a valid phone number")

    elif type_id in ("user", "file"):
        if isinstance(value, list):
            if not all(isinstance(v, str) for v in value):
                errors.append("Value must be a string or a list of strings")
        elif not isinstance(value, str):
            errors.append("Value must be a string or a list of strings")

    return errors


def coerce_csv_value(type_id: str, raw: str) -> Any:
    """
    Convert a CSV cell into the JSON value stored for a property type.

    Empty cells become None. Values that cannot be converted are returned
    as-is so validation reports them.
    """
    if raw is None or raw == "":
        return None
    if type_id == "number":
        try:
            number = float(raw)
        except ValueError:
            return raw
        if not math.isfinite(number):
            return raw
        return int(number) if number.is_integer() else number
    if type_id == "checkbox":
        lowered = raw.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        return raw
    if type_id in ("multi_select", "user", "file"):
        return [part.strip() for part in raw.split(";") if part.strip()]
    return raw


def format_csv_value(value: Any) -> str:
    """Inverse of `coerce_csv_value` for exports."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ";".join(str(v) for v in value)
    return str(value)
