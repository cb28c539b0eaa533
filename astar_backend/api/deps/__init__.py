"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_current_principal,
    get_current_user,
    get_service_cache,
    get_settings_dependency,
    require_authority,
    require_permission,
)

__all__ = [
    "get_current_principal",
    "get_current_user",
    "get_service_cache",
    "get_settings_dependency",
    "require_authority",
    "require_permission",
]
