"""
Tag naming rules.

Dependencies: None (pure domain layer)
System role: Tag validation and normalization
"""

import random
import re

HEX_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
MAX_TAG_NAME_LENGTH = 50
_WHITESPACE = re.compile(r"\s+")

TAG_PALETTE = (
    "#F44336",
    "#E91E63",
    "#9C27B0",
    "#3F51B5",
    "#2196F3",
    "#009688",
    "#4CAF50",
    "#FF9800",
    "#795548",
    "#607D8B",
)


def normalize_tag_name(name: str) -> str:
    """Trim, lowercase and collapse inner whitespace."""
    return _WHITESPACE.sub(" ", name.strip()).lower()


def validate_tag_name(name: str) -> str:
    if name is None or not name.strip():
        raise ValueError("Tag name must not be blank")
    cleaned = _WHITESPACE.sub(" ", name.strip())
    if len(cleaned) > MAX_TAG_NAME_LENGTH:
        raise ValueError("Tag name must not exceed 50 characters")
    return cleaned


def validate_tag_color(color: str) -> str:
    if not color or not HEX_COLOR_PATTERN.match(color):
        raise ValueError("Color must be a valid hex color code (e.g., #FF5733)")
    return color


def random_palette_color(rng: random.Random | None = None) -> str:
    return (rng or random).choice(TAG_PALETTE)
