"""
Tenant, user and membership ORM models.

A tenant is one law firm. Users are identified by their Auth0 subject and
join tenants through memberships; users are never provisioned from tokens.

Dependencies: sqlalchemy, astar_backend.boundary.db.base
System role: Multi-tenant identity persistence
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from astar_backend.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow


class TenantModel(Base, UUIDMixin, TimestampMixin):
    """
    Tenant ORM model.

    Attributes:
        slug: URL-safe unique identifier (lowercase, digits, hyphens)
        name: Display name
        auth0_org_id: Auth0 organization mapped to this tenant
        is_active: Inactive tenants reject authentication
    """

    __tablename__ = "tenants"

    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    auth0_org_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class UserModel(Base, UUIDMixin, TimestampMixin):
    """Application user keyed by Auth0 subject."""

    __tablename__ = "users"

    auth0_sub: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    memberships = relationship("TenantMembershipModel", back_populates="user")


class TenantMembershipModel(Base, UUIDMixin, TimestampMixin):
    """Link between a user and a tenant."""

    __tablename__ = "tenant_users"
    __table_args__ = (UniqueConstraint("tenant_id", "user_id", name="uq_tenant_users"),)

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("UserModel", back_populates="memberships")
