"""Service orchestrators."""

from .attachment_service import AttachmentService
from .auth_service import AuthService
from .authorization_service import AuthorizationService
from .document_service import DocumentService
from .expense_service import ExpenseService
from .folder_service import FolderService
from .property_type_service import PropertyTypeService
from .record_service import RecordService
from .report_service import ReportService
from .role_service import RoleService, UserRoleService
from .table_service import TableService
from .tag_service import TagService
from .tenant_service import TenantService
from .user_service import UserService
from .workspace_service import WorkspaceService

__all__ = [
    "AttachmentService",
    "AuthService",
    "AuthorizationService",
    "DocumentService",
    "ExpenseService",
    "FolderService",
    "PropertyTypeService",
    "RecordService",
    "ReportService",
    "RoleService",
    "TableService",
    "TagService",
    "TenantService",
    "UserRoleService",
    "UserService",
    "WorkspaceService",
]
