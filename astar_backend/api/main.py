"""
FastAPI application with assembled routers.

Initializes the FastAPI app with all API routers and configures the
uvicorn server.

Dependencies: fastapi, astar_backend.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from astar_backend.api.deps.dependencies import get_service_cache
from astar_backend.application.services.property_type_service import PropertyTypeService
from astar_backend.boundary.db.connection import get_async_session_factory
from astar_backend.boundary.db.create_tables import create_all_tables
from astar_backend.configs import get_settings
from astar_backend.observability import configure_logging
from astar_backend.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import (
    attachments_router,
    auth_router,
    editor_router,
    expenses_router,
    health_router,
    property_types_router,
    records_router,
    reports_router,
    roles_router,
    tables_router,
    tags_router,
    tenants_router,
    user_roles_router,
    users_router,
    workspaces_router,
)

API_PREFIX = "/api/v1"


async def seed_catalog() -> int:
    """Insert missing built-in property types."""
    session_factory = get_async_session_factory()
    async with session_factory() as session:
        inserted = await PropertyTypeService(session).seed_builtin_types()
        await session.commit()
    return inserted


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger("uvicorn")
    settings = get_settings()

    # Startup
    if settings.database.create_schema:
        logger.info("Creating database schema...")
        await create_all_tables()
    inserted = await seed_catalog()
    logger.info("Property type catalog ready (%d inserted)", inserted)

    yield

    # Shutdown
    get_service_cache().clear()
    logger.info("Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.observability.level, settings.observability.json_format)

    app = FastAPI(
        title="Astar Management API",
        description="Multi-tenant practice management: expenses, tags, attachments, roles, tables and documents",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last so it runs first and every log line carries the id
    if settings.observability.request_logging:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(tenants_router, prefix=API_PREFIX)
    app.include_router(roles_router, prefix=API_PREFIX)
    app.include_router(user_roles_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)
    app.include_router(workspaces_router, prefix=API_PREFIX)
    app.include_router(property_types_router, prefix=API_PREFIX)
    app.include_router(tables_router, prefix=API_PREFIX)
    app.include_router(records_router, prefix=API_PREFIX)
    app.include_router(editor_router, prefix=API_PREFIX)
    app.include_router(tags_router, prefix=API_PREFIX)
    app.include_router(attachments_router, prefix=API_PREFIX)
    app.include_router(expenses_router, prefix=API_PREFIX)
    app.include_router(reports_router, prefix=API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "astar_backend.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
