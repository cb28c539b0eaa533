"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base and mixins: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - apply_tenant_context(): Row-Level Security binding for PostgreSQL

Dependencies: sqlalchemy, astar_backend.configs
System role: Database adapter providing tenant-isolated persistent storage.
"""

from astar_backend.boundary.db.base import (
    AuditMixin,
    Base,
    SoftDeleteMixin,
    TenantMixin,
    TimestampMixin,
    UUIDMixin,
)
from astar_backend.boundary.db.connection import (
    apply_tenant_context,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "TenantMixin",
    "AuditMixin",
    "SoftDeleteMixin",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    "apply_tenant_context",
]
