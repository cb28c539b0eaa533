"""API routers."""

from .attachments import router as attachments_router
from .auth import router as auth_router
from .editor import router as editor_router
from .expenses import router as expenses_router
from .health import router as health_router
from .property_types import router as property_types_router
from .records import router as records_router
from .reports import router as reports_router
from .roles import router as roles_router
from .roles import user_roles_router
from .tables import router as tables_router
from .tags import router as tags_router
from .tenants import router as tenants_router
from .users import router as users_router
from .workspaces import router as workspaces_router

__all__ = [
    "attachments_router",
    "auth_router",
    "editor_router",
    "expenses_router",
    "health_router",
    "property_types_router",
    "records_router",
    "reports_router",
    "roles_router",
    "tables_router",
    "tags_router",
    "tenants_router",
    "user_roles_router",
    "users_router",
    "workspaces_router",
]
