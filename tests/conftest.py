"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory database session, tenant/member/workspace fixtures,
authenticated principals and a local file storage root
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid

import pytest

from astar_backend.core.permissions import parse_permission
from astar_backend.core.principal import AuthenticatedUser

ALL_PERMISSIONS = [
    f"{resource}.manage.all"
    for resource in (
        "table",
        "record",
        "document",
        "directory",
        "workspace",
        "role",
        "user",
        "tenant",
        "settings",
        "property_type",
    )
]


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    import astar_backend.boundary.db.models  # noqa: F401
    from astar_backend.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def tenant(test_async_db) -> dict:
    """Active tenant mapped to the `org_acme` organization."""
    from astar_backend.application.services.tenant_service import TenantService

    return await TenantService(test_async_db).create_tenant("acme-law", "Acme Law", auth0_org_id="org_acme")


@pytest.fixture
async def member(test_async_db, tenant):
    """User with an active membership in `tenant`."""
    from astar_backend.boundary.db.CRUD.tenant_crud import membership_crud, user_crud

    user = await user_crud.create(
        test_async_db, auth0_sub="auth0|alice", email="alice@example.com", display_name="Alice"
    )
    await membership_crud.create(test_async_db, tenant_id=tenant["id"], user_id=user.id, is_active=True)
    return user


@pytest.fixture
async def workspace(test_async_db, tenant, member) -> dict:
    from astar_backend.application.services.workspace_service import WorkspaceService

    return await WorkspaceService(test_async_db).create_workspace(
        tenant["id"], "Litigation", description="Court cases", created_by=member.id
    )


@pytest.fixture
async def catalog(test_async_db) -> int:
    """Seed the built-in property types."""
    from astar_backend.application.services.property_type_service import PropertyTypeService

    return await PropertyTypeService(test_async_db).seed_builtin_types()


@pytest.fixture
def tenant_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def admin_principal(tenant_id, user_id) -> AuthenticatedUser:
    """Tenant member holding every permission at ALL scope."""
    return AuthenticatedUser(
        auth0_sub="auth0|admin",
        user_id=user_id,
        tenant_id=tenant_id,
        roles=["admin"],
        permissions={parse_permission(p) for p in ALL_PERMISSIONS},
        email="admin@example.com",
    )


@pytest.fixture
def viewer_principal(tenant_id, user_id) -> AuthenticatedUser:
    """Tenant member that may only view tables and records."""
    return AuthenticatedUser(
        auth0_sub="auth0|viewer",
        user_id=user_id,
        tenant_id=tenant_id,
        roles=["viewer"],
        permissions={parse_permission("table.view.all"), parse_permission("record.view.all")},
    )


@pytest.fixture
def storage_root(tmp_path):
    """Directory used as the local file storage root."""
    root = tmp_path / "storage"
    root.mkdir()
    return root
