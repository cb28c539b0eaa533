"""
Role naming rules.

Dependencies: None (pure domain layer)
System role: RBAC validation
"""

import re

ROLE_NAME_PATTERN = re.compile(r"^[a-z0-9_]+$")
HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
MAX_ROLE_NAME_LENGTH = 100
MAX_DISPLAY_NAME_LENGTH = 255
MAX_ROLES_PER_TENANT = 50


def validate_role_name(name: str) -> str:
    """Return the name or raise ValueError."""
    if name is None or not name.strip():
        raise ValueError("Role name must not be blank")
    if len(name) > MAX_ROLE_NAME_LENGTH:
        raise ValueError("Role name must not exceed 100 characters")
    if not ROLE_NAME_PATTERN.match(name):
        raise ValueError(
            "Role name can only contain lowercase letters, numbers, and underscores"
        )
    if name.isdigit():
        raise ValueError("Role name cannot consist only of digits")
    return name


def validate_color(color: str | None) -> str | None:
    if color is not None and not HEX_COLOR_PATTERN.match(color):
        raise ValueError("Color must be a valid hex color code (e.g., #FF5733)")
    return color


def validate_display_name(display_name: str | None) -> str | None:
    if display_name is not None and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValueError("Display name too long (max 255 characters)")
    return display_name


def copy_name_candidates(name: str):
    """Yield `<name>_copy`, `<name>_copy_2`, ... trimmed to the name limit."""
    base = f"{name}_copy"
    yield base[:MAX_ROLE_NAME_LENGTH]
    for attempt in range(2, MAX_ROLES_PER_TENANT + 2):
        suffix = f"_{attempt}"
        yield base[: MAX_ROLE_NAME_LENGTH - len(suffix)] + suffix
