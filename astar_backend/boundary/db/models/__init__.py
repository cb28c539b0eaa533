"""
Database models package.

Exports every ORM model so that importing this package registers all tables
with Base.metadata.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Database model definitions for domain entities
"""

from astar_backend.boundary.db.models.tenant_model import (
    TenantMembershipModel,
    TenantModel,
    UserModel,
)
from astar_backend.boundary.db.models.role_model import (
    RoleModel,
    RolePermissionModel,
    UserRoleModel,
)
from astar_backend.boundary.db.models.workspace_model import WorkspaceModel
from astar_backend.boundary.db.models.property_type_model import PropertyTypeModel
from astar_backend.boundary.db.models.table_model import RecordModel, TableModel
from astar_backend.boundary.db.models.editor_model import (
    DocumentMetadataModel,
    DocumentNodeModel,
    DocumentNodeType,
    DocumentRevisionModel,
)
from astar_backend.boundary.db.models.tag_model import TagModel, TagScope
from astar_backend.boundary.db.models.expense_model import ExpenseModel, expense_tags
from astar_backend.boundary.db.models.attachment_model import (
    AttachmentModel,
    AttachmentStatus,
)

__all__ = [
    "TenantModel",
    "UserModel",
    "TenantMembershipModel",
    "RoleModel",
    "RolePermissionModel",
    "UserRoleModel",
    "WorkspaceModel",
    "PropertyTypeModel",
    "TableModel",
    "RecordModel",
    "DocumentNodeModel",
    "DocumentNodeType",
    "DocumentRevisionModel",
    "DocumentMetadataModel",
    "TagModel",
    "TagScope",
    "ExpenseModel",
    "expense_tags",
    "AttachmentModel",
    "AttachmentStatus",
]
