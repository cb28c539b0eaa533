"""
Tag service orchestrator.

Dependencies: astar_backend.boundary.db.CRUD.tag_crud, astar_backend.core.tags
System role: Tag use case orchestration
"""

import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.base import utcnow
from astar_backend.boundary.db.CRUD.tag_crud import SORT_COLUMNS, tag_crud
from astar_backend.boundary.db.models.tag_model import TagModel, TagScope
from astar_backend.core.exceptions import DuplicateError, NotFoundError, PermissionDeniedError, ValidationError
from astar_backend.core.tags import (
    normalize_tag_name,
    random_palette_color,
    validate_tag_color,
    validate_tag_name,
)

logger = logging.getLogger(__name__)


def tag_to_dict(tag: TagModel) -> dict:
    return {
        "id": tag.id,
        "name": tag.name,
        "name_normalized": tag.name_normalized,
        "color": tag.color,
        "scope": tag.scope.value,
        "owner_id": tag.owner_id,
        "usage_count": tag.usage_count,
        "last_used_at": tag.last_used_at,
        "created_at": tag.created_at,
        "updated_at": tag.updated_at,
    }


class TagService:
    """Tag service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_model(self, tenant_id: UUID, user_id: UUID, tag_id: UUID) -> TagModel:
        """
        Load a live tag visible to the caller.

        Raises:
            NotFoundError: Missing, deleted, another tenant's, or someone else's personal tag
        """
        tag = await tag_crud.get_live(self.db, tenant_id, tag_id)
        if tag is None or (tag.scope is TagScope.PERSONAL and tag.owner_id != user_id):
            raise NotFoundError("Tag", tag_id)
        return tag

    async def _ensure_unique(self, tenant_id: UUID, normalized: str, exclude_id: UUID | None = None) -> None:
        existing = await tag_crud.get_by_normalized(self.db, tenant_id, normalized)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateError(
                f"Tag with name '{existing.name}' already exists",
                {"name": existing.name},
            )

    async def create_tag(
        self,
        tenant_id: UUID,
        user_id: UUID,
        name: str,
        color: str | None = None,
        scope: TagScope = TagScope.TENANT,
    ) -> dict:
        """
        Create a tag.

        Args:
            tenant_id: Caller's tenant
            user_id: Creator, owner of PERSONAL tags
            name: Display name
            color: Hex colour (random palette colour when None)
            scope: TENANT or PERSONAL

        Returns:
            dict: Created tag

        Raises:
            ValidationError: Bad name or colour
            DuplicateError: Normalized name already used in the tenant
        """
        try:
            name = validate_tag_name(name)
            color = validate_tag_color(color) if color is not None else random_palette_color()
        except ValueError as e:
            raise ValidationError(str(e)) from e

        normalized = normalize_tag_name(name)
        await self._ensure_unique(tenant_id, normalized)

        tag = await tag_crud.create(
            self.db,
            tenant_id=tenant_id,
            name=name,
            name_normalized=normalized,
            color=color,
            scope=scope,
            owner_id=user_id if scope is TagScope.PERSONAL else None,
            usage_count=0,
            created_by=user_id,
            updated_by=user_id,
        )
        logger.info("Tag created", extra={"tag_id": str(tag.id), "scope": scope.value})
        return tag_to_dict(tag)

    async def get_tag(self, tenant_id: UUID, user_id: UUID, tag_id: UUID) -> dict:
        return tag_to_dict(await self.get_model(tenant_id, user_id, tag_id))

    async def list_tags(
        self,
        tenant_id: UUID,
        user_id: UUID,
        scope: TagScope | None = None,
        search: str | None = None,
        sort_by: str = "name",
        descending: bool = False,
    ) -> list[dict]:
        if sort_by not in SORT_COLUMNS:
            raise ValidationError(
                f"Cannot sort tags by '{sort_by}'",
                field="sort_by",
                details={"allowed": sorted(SORT_COLUMNS)},
            )
        tags = await tag_crud.list_visible(
            self.db, tenant_id, user_id, scope=scope, search=search, sort_by=sort_by, descending=descending
        )
        return [tag_to_dict(t) for t in tags]

    async def suggestions(
        self,
        tenant_id: UUID,
        user_id: UUID,
        prefix: str | None = None,
        limit: int = 10,
    ) -> list[dict]:
        tags = await tag_crud.suggestions(self.db, tenant_id, user_id, prefix=prefix, limit=limit)
        return [tag_to_dict(t) for t in tags]

    async def update_tag(
        self,
        tenant_id: UUID,
        user_id: UUID,
        tag_id: UUID,
        name: str | None = None,
        color: str | None = None,
    ) -> dict:
        """Rename or recolour a tag. Scope and owner never change."""
        tag = await self.get_model(tenant_id, user_id, tag_id)
        try:
            if name is not None:
                name = validate_tag_name(name)
            if color is not None:
                color = validate_tag_color(color)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        if name is not None:
            normalized = normalize_tag_name(name)
            await self._ensure_unique(tenant_id, normalized, exclude_id=tag.id)
            tag.name = name
            tag.name_normalized = normalized
        if color is not None:
            tag.color = color
        tag.updated_by = user_id
        await self.db.flush()
        return tag_to_dict(tag)

    async def delete_tag(self, tenant_id: UUID, user_id: UUID, tag_id: UUID) -> None:
        tag = await self.get_model(tenant_id, user_id, tag_id)
        if tag.scope is TagScope.PERSONAL and tag.owner_id != user_id:
            raise PermissionDeniedError("Only the owner can delete a personal tag")
        tag.deleted_at = utcnow()
        tag.deleted_by = user_id
        await self.db.flush()
        logger.info("Tag deleted", extra={"tag_id": str(tag_id)})

    async def find_or_create(self, tenant_id: UUID, user_id: UUID, names: Iterable[str]) -> list[dict]:
        """
        Resolve tag names to tags, creating missing TENANT tags.

        Names differing only by case or spacing resolve to the same tag.

        Raises:
            ValidationError: Invalid name
            DuplicateError: Name held by another user's personal tag
        """
        resolved: dict[str, TagModel] = {}
        for raw in names:
            try:
                name = validate_tag_name(raw)
            except ValueError as e:
                raise ValidationError(str(e), field="names") from e
            normalized = normalize_tag_name(name)
            if normalized in resolved:
                continue
            tag = await tag_crud.get_by_normalized(self.db, tenant_id, normalized)
            if tag is not None and tag.scope is TagScope.PERSONAL and tag.owner_id != user_id:
                raise DuplicateError(f"Tag with name '{name}' already exists", {"name": name})
            if tag is None:
                tag = await tag_crud.create(
                    self.db,
                    tenant_id=tenant_id,
                    name=name,
                    name_normalized=normalized,
                    color=random_palette_color(),
                    scope=TagScope.TENANT,
                    owner_id=None,
                    usage_count=0,
                    created_by=user_id,
                    updated_by=user_id,
                )
            resolved[normalized] = tag
        return [tag_to_dict(t) for t in resolved.values()]

    async def increment_usage(self, tenant_id: UUID, tag_ids: Iterable[UUID]) -> int:
        tags = await tag_crud.get_many(self.db, tenant_id, tag_ids)
        now = utcnow()
        for tag in tags:
            tag.usage_count = (tag.usage_count or 0) + 1
            tag.last_used_at = now
        await self.db.flush()
        return len(tags)
