"""
User account and profile rules.

Dependencies: None (pure domain layer)
System role: User profile validation
"""

import re

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_EMAIL_LENGTH = 255
MAX_DISPLAY_NAME_LENGTH = 255
MAX_AVATAR_URL_LENGTH = 2048


def validate_email(email: str) -> str:
    """Return the trimmed, lower-cased address or raise ValueError."""
    if email is None or not email.strip():
        raise ValueError("Email cannot be blank")
    email = email.strip().lower()
    if len(email) > MAX_EMAIL_LENGTH:
        raise ValueError("Email cannot exceed 255 characters")
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Email must be a valid email address")
    return email


def validate_display_name(display_name: str | None) -> str | None:
    """None clears the name; a given name must not be blank."""
    if display_name is None:
        return None
    if not display_name.strip():
        raise ValueError("Display name cannot be blank if provided")
    if len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        raise ValueError("Display name cannot exceed 255 characters")
    return display_name.strip()


def validate_avatar_url(avatar_url: str | None) -> str | None:
    if avatar_url is None:
        return None
    if not avatar_url.strip():
        raise ValueError("Avatar URL cannot be blank if provided")
    if len(avatar_url) > MAX_AVATAR_URL_LENGTH:
        raise ValueError("Avatar URL cannot exceed 2048 characters")
    if not avatar_url.startswith(("http://", "https://")):
        raise ValueError("Avatar URL must start with http:// or https://")
    return avatar_url.strip()
