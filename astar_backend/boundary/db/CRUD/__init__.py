"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from astar_backend.boundary.db.CRUD import expense_crud, tag_crud

    # Use singleton instances
    expense = await expense_crud.get_for_tenant(db, tenant_id, expense_id)
"""

from astar_backend.boundary.db.CRUD.base_crud import BaseCRUD
from astar_backend.boundary.db.CRUD.tenant_crud import (
    MembershipCRUD,
    TenantCRUD,
    UserCRUD,
    membership_crud,
    tenant_crud,
    user_crud,
)
from astar_backend.boundary.db.CRUD.role_crud import (
    RoleCRUD,
    RolePermissionCRUD,
    UserRoleCRUD,
    role_crud,
    role_permission_crud,
    user_role_crud,
)
from astar_backend.boundary.db.CRUD.workspace_crud import WorkspaceCRUD, workspace_crud
from astar_backend.boundary.db.CRUD.property_type_crud import PropertyTypeCRUD, property_type_crud
from astar_backend.boundary.db.CRUD.table_crud import RecordCRUD, TableCRUD, record_crud, table_crud
from astar_backend.boundary.db.CRUD.editor_crud import (
    DocumentMetadataCRUD,
    DocumentNodeCRUD,
    DocumentRevisionCRUD,
    document_metadata_crud,
    document_node_crud,
    document_revision_crud,
)
from astar_backend.boundary.db.CRUD.tag_crud import TagCRUD, tag_crud
from astar_backend.boundary.db.CRUD.expense_crud import ExpenseCRUD, expense_crud
from astar_backend.boundary.db.CRUD.attachment_crud import AttachmentCRUD, attachment_crud

__all__ = [
    "BaseCRUD",
    "TenantCRUD",
    "UserCRUD",
    "MembershipCRUD",
    "RoleCRUD",
    "RolePermissionCRUD",
    "UserRoleCRUD",
    "WorkspaceCRUD",
    "PropertyTypeCRUD",
    "TableCRUD",
    "RecordCRUD",
    "DocumentNodeCRUD",
    "DocumentRevisionCRUD",
    "DocumentMetadataCRUD",
    "TagCRUD",
    "ExpenseCRUD",
    "AttachmentCRUD",
    "tenant_crud",
    "user_crud",
    "membership_crud",
    "role_crud",
    "role_permission_crud",
    "user_role_crud",
    "workspace_crud",
    "property_type_crud",
    "table_crud",
    "record_crud",
    "document_node_crud",
    "document_revision_crud",
    "document_metadata_crud",
    "tag_crud",
    "expense_crud",
    "attachment_crud",
]
