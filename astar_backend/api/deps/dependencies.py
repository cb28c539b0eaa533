"""
Dependency injection container.

Factory functions for FastAPI dependencies: cached boundary clients,
per-request services, and the authentication chain
(bearer token -> principal -> tenant member -> permission check).

Dependencies: astar_backend.configs, astar_backend.application, astar_backend.boundary
System role: DI container for service injection
"""

from functools import lru_cache
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.api.error_handling import error_body, to_http_exception
from astar_backend.application.services import (
    AttachmentService,
    AuthService,
    AuthorizationService,
    DocumentService,
    ExpenseService,
    FolderService,
    PropertyTypeService,
    RecordService,
    ReportService,
    RoleService,
    TableService,
    TagService,
    TenantService,
    UserRoleService,
    UserService,
    WorkspaceService,
)
from astar_backend.boundary.auth import extract_claims
from astar_backend.boundary.db import apply_tenant_context, get_async_db
from astar_backend.configs import Settings, get_settings
from astar_backend.core.exceptions import AstarException, AuthenticationError, PermissionDeniedError, TenantContextError
from astar_backend.core.permissions import parse_permission
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.core.tenancy import set_tenant_context

bearer_scheme = HTTPBearer(auto_error=False)


class ServiceCache:
    """Container for cached boundary clients."""

    def __init__(self):
        self._jwks_client = None
        self._jwt_validator = None
        self._file_storage = None

    @property
    def jwks_client(self):
        """Get cached JWKS client with its circuit breaker."""
        if self._jwks_client is None:
            from astar_backend.boundary.auth import CircuitBreaker, JwksClient

            auth = get_settings().auth
            self._jwks_client = JwksClient(
                jwks_url=auth.jwks_url,
                cache_ttl=auth.jwks_cache_ttl,
                timeout=auth.jwks_timeout,
                retry_attempts=auth.jwks_retry_attempts,
                breaker=CircuitBreaker(
                    failure_threshold=auth.breaker_failure_threshold,
                    recovery_time_seconds=auth.breaker_recovery_seconds,
                ),
            )
        return self._jwks_client

    @property
    def jwt_validator(self):
        """Get cached JWT validator."""
        if self._jwt_validator is None:
            from astar_backend.boundary.auth import JwtValidator

            auth = get_settings().auth
            self._jwt_validator = JwtValidator(
                jwks_client=self.jwks_client,
                audience=auth.audience,
                issuer=auth.expected_issuer,
                algorithms=auth.algorithms,
            )
        return self._jwt_validator

    @property
    def file_storage(self):
        """Get cached attachment storage backend."""
        if self._file_storage is None:
            from astar_backend.boundary.storage.factory import create_file_storage

            self._file_storage = create_file_storage(get_settings().storage)
        return self._file_storage

    def clear(self) -> None:
        """Clear all cached instances."""
        self._jwks_client = None
        self._jwt_validator = None
        self._file_storage = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


# Authentication


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_async_db),
) -> AuthenticatedUser:
    """
    Resolve the caller from the bearer token.

    Args:
        credentials: Bearer credentials (injected)
        db: Async database session (injected)

    Returns:
        AuthenticatedUser: Tenant member or setup-mode principal

    Raises:
        HTTPException(401): Missing or invalid token
        HTTPException(403): Not a member of the token's tenant
        HTTPException(503): Signing keys unavailable
    """
    if credentials is None or not credentials.credentials:
        raise to_http_exception(AuthenticationError("Bearer token is required"))

    settings = get_settings()
    cache = get_service_cache()
    try:
        raw_claims = await cache.jwt_validator.validate(credentials.credentials)
        claims = extract_claims(
            raw_claims,
            org_id_claim=settings.auth.org_id_claim,
            namespace=settings.auth.custom_claim_namespace,
        )
        return await AuthService(db).resolve_principal(claims)
    except AstarException as e:
        raise to_http_exception(e)


async def get_current_user(
    principal: AuthenticatedUser = Depends(get_current_principal),
    db: AsyncSession = Depends(get_async_db),
) -> AuthenticatedUser:
    """
    Require a tenant member and bind the tenant to the request.

    Raises:
        HTTPException(403): Setup-mode principal without a tenant
    """
    if principal.setup_mode or principal.tenant_id is None:
        raise to_http_exception(TenantContextError("This endpoint requires an organization token"))
    set_tenant_context(principal.tenant_id, principal.user_id)
    await apply_tenant_context(db, principal.tenant_id)
    return principal


def require_permission(permission: str) -> Callable:
    """
    Build a dependency that requires `permission` as written.

    The rule must grant the action on the resource at a scope covering the
    requested one, so `table.delete.all` is not satisfied by an OWN, TEAM
    or single-resource rule.

    Args:
        permission: Permission string such as `table.view.all`

    Returns:
        Dependency returning the authenticated user
    """
    parse_permission(permission)

    async def checker(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not user.can(permission):
            raise to_http_exception(
                PermissionDeniedError(
                    f"Missing permission: {permission}",
                    {"permission": permission},
                )
            )
        return user

    return checker


def require_authority(authority: str) -> Callable:
    """Dependency requiring an authority such as `SCOPE_auth.view_my_tenants`."""

    async def checker(principal: AuthenticatedUser = Depends(get_current_principal)) -> AuthenticatedUser:
        if principal.setup_mode and not principal.has_authority(authority):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=error_body(f"Missing authority: {authority}", "FORBIDDEN"),
            )
        return principal

    return checker


# Services


def get_tenant_service(db: AsyncSession = Depends(get_async_db)) -> TenantService:
    return TenantService(db=db)


def get_user_service(db: AsyncSession = Depends(get_async_db)) -> UserService:
    return UserService(db=db)


def get_auth_service(db: AsyncSession = Depends(get_async_db)) -> AuthService:
    return AuthService(db=db)


def get_authorization_service(db: AsyncSession = Depends(get_async_db)) -> AuthorizationService:
    return AuthorizationService(db=db)


def get_role_service(db: AsyncSession = Depends(get_async_db)) -> RoleService:
    return RoleService(db=db)


def get_user_role_service(db: AsyncSession = Depends(get_async_db)) -> UserRoleService:
    return UserRoleService(db=db)


def get_workspace_service(db: AsyncSession = Depends(get_async_db)) -> WorkspaceService:
    """
    Get workspace service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        WorkspaceService: Workspace service instance
    """
    return WorkspaceService(db=db)


def get_property_type_service(db: AsyncSession = Depends(get_async_db)) -> PropertyTypeService:
    return PropertyTypeService(db=db)


def get_table_service(db: AsyncSession = Depends(get_async_db)) -> TableService:
    return TableService(db=db)


def get_record_service(db: AsyncSession = Depends(get_async_db)) -> RecordService:
    return RecordService(db=db)


def get_folder_service(db: AsyncSession = Depends(get_async_db)) -> FolderService:
    return FolderService(db=db)


def get_document_service(db: AsyncSession = Depends(get_async_db)) -> DocumentService:
    return DocumentService(db=db)


def get_tag_service(db: AsyncSession = Depends(get_async_db)) -> TagService:
    return TagService(db=db)


def get_attachment_service(db: AsyncSession = Depends(get_async_db)) -> AttachmentService:
    """
    Get attachment service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        AttachmentService: Service bound to the configured storage backend
    """
    storage_settings = get_settings().storage
    return AttachmentService(
        db=db,
        storage=get_service_cache().file_storage,
        max_file_size=storage_settings.max_file_size,
        temporary_expiry_hours=storage_settings.temporary_expiry_hours,
        url_expiry_seconds=storage_settings.presigned_url_expiry,
    )


def get_expense_service(db: AsyncSession = Depends(get_async_db)) -> ExpenseService:
    return ExpenseService(db=db)


def get_report_service(db: AsyncSession = Depends(get_async_db)) -> ReportService:
    return ReportService(db=db)
