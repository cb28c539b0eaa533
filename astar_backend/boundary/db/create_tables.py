"""
Database table creation.

Creates all tables defined in ORM models using SQLAlchemy metadata and,
on PostgreSQL, enables Row-Level Security on tenant-owned tables.

Dependencies: sqlalchemy, astar_backend.boundary.db
System role: Database schema initialization

Usage:
    python -m astar_backend.boundary.db.create_tables
"""

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from astar_backend.boundary.db.base import Base
from astar_backend.boundary.db.connection import get_async_engine

# Import all models to register them with Base.metadata
import astar_backend.boundary.db.models  # noqa: F401

logger = logging.getLogger(__name__)

RLS_TABLES = (
    "roles",
    "user_roles",
    "workspaces",
    "tables",
    "records",
    "document_nodes",
    "document_revisions",
    "document_metadata",
    "tags",
    "expenses",
    "attachments",
)


def rls_statements(table: str) -> list[str]:
    """SQL enabling a tenant isolation policy on one table."""
    policy = f"{table}_tenant_isolation"
    return [
        f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY",
        f"DROP POLICY IF EXISTS {policy} ON {table}",
        (
            f"CREATE POLICY {policy} ON {table} "
            "USING (tenant_id = current_setting('app.current_tenant_id', true)::uuid)"
        ),
    ]


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Create all database tables from registered ORM models.

    Idempotent: CREATE TABLE IF NOT EXISTS for each model, policies are
    dropped and recreated.

    Args:
        engine: Engine to use (defaults to the configured engine)

    Raises:
        SQLAlchemyError: If database connection fails or table creation fails
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        if conn.dialect.name == "postgresql":
            for table in RLS_TABLES:
                for statement in rls_statements(table):
                    await conn.execute(text(statement))
    logger.info("Database schema ready", extra={"tables": len(Base.metadata.tables)})


async def drop_all_tables(engine: AsyncEngine | None = None) -> None:
    """
    Drop all database tables and their data.

    WARNING: Irreversible data loss. Only use in development environments.
    """
    engine = engine or get_async_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    logger.warning("All tables dropped")


if __name__ == "__main__":
    asyncio.run(create_all_tables())
