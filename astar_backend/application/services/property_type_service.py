"""
Property type catalog service.

Lists, seeds and edits the catalog of types flexible table properties can
use. Built-in system types are protected.

Dependencies: astar_backend.boundary.db.CRUD, astar_backend.core.property_types
System role: Property type catalog orchestration
"""

import logging
from collections import Counter

from sqlalchemy.ext.asyncio import AsyncSession

from astar_backend.boundary.db.CRUD.property_type_crud import property_type_crud
from astar_backend.boundary.db.models.property_type_model import PropertyTypeModel
from astar_backend.core.exceptions import BusinessRuleError, DuplicateError, NotFoundError
from astar_backend.core.property_types import (
    BUILTIN_PROPERTY_TYPES,
    CATEGORIES,
    TYPE_ID_PATTERN,
    is_system_type,
)

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = ("validation_schema", "default_config", "description", "icon", "ui_component", "category")


def property_type_to_dict(entry: PropertyTypeModel) -> dict:
    return {
        "id": entry.id,
        "category": entry.category,
        "validation_schema": entry.validation_schema or {},
        "default_config": entry.default_config or {},
        "description": entry.description,
        "icon": entry.icon,
        "ui_component": entry.ui_component,
        "is_active": entry.is_active,
        "is_custom": entry.is_custom,
        "is_system": is_system_type(entry.id),
    }


def _validate_category(category: str) -> str:
    if category not in CATEGORIES:
        raise ValueError(f"Invalid category: {category} (expected one of {', '.join(CATEGORIES)})")
    return category


class PropertyTypeService:
    """Property type catalog operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_model(self, type_id: str) -> PropertyTypeModel:
        entry = await property_type_crud.get_by_id(self.db, type_id)
        if entry is None:
            raise NotFoundError("Property type", type_id)
        return entry

    def _ensure_not_system(self, type_id: str, operation: str) -> None:
        if is_system_type(type_id):
            raise BusinessRuleError(
                f"System property type '{type_id}' cannot be {operation}",
                {"type_id": type_id},
            )

    async def seed_builtin_types(self) -> int:
        """
        Insert missing built-in types. Existing rows are left untouched.

        Returns:
            int: Number of types inserted
        """
        inserted = 0
        for definition in BUILTIN_PROPERTY_TYPES:
            if await property_type_crud.get_by_id(self.db, definition["id"]) is not None:
                continue
            await property_type_crud.create(self.db, is_active=True, is_custom=False, **definition)
            inserted += 1
        if inserted:
            logger.info("Seeded built-in property types", extra={"inserted": inserted})
        return inserted

    async def list_types(self, active_only: bool = False) -> list[dict]:
        entries = await property_type_crud.list_types(self.db, active_only=active_only)
        return [property_type_to_dict(e) for e in entries]

    async def get_type(self, type_id: str) -> dict:
        return property_type_to_dict(await self._get_model(type_id))

    async def list_by_category(self, category: str, active_only: bool = True) -> list[dict]:
        _validate_category(category)
        entries = await property_type_crud.list_types(self.db, active_only=active_only, category=category)
        return [property_type_to_dict(e) for e in entries]

    async def list_builtin(self) -> list[dict]:
        entries = await property_type_crud.list_types(self.db, is_custom=False)
        return [property_type_to_dict(e) for e in entries]

    async def list_custom(self) -> list[dict]:
        entries = await property_type_crud.list_types(self.db, is_custom=True)
        return [property_type_to_dict(e) for e in entries]

    async def list_categories(self) -> list[str]:
        return list(CATEGORIES)

    async def summary(self) -> dict:
        """Counts per category plus active and custom totals."""
        entries = await property_type_crud.list_types(self.db)
        by_category = Counter(e.category for e in entries)
        return {
            "total": len(entries),
            "active": sum(1 for e in entries if e.is_active),
            "custom": sum(1 for e in entries if e.is_custom),
            "by_category": {category: by_category.get(category, 0) for category in CATEGORIES},
        }

    async def active_type_ids(self) -> set[str]:
        return await property_type_crud.active_ids(self.db)

    async def get_active_types(self) -> dict[str, PropertyTypeModel]:
        entries = await property_type_crud.list_types(self.db, active_only=True)
        return {e.id: e for e in entries}

    async def create_custom_type(
        self,
        type_id: str,
        category: str,
        validation_schema: dict | None = None,
        default_config: dict | None = None,
        description: str | None = None,
        icon: str | None = None,
        ui_component: str | None = None,
    ) -> dict:
        """
        Register a custom type.

        Raises:
            ValueError: Id does not match `^[a-z][a-z0-9_]*$` or unknown category
            DuplicateError: Id already in the catalog
        """
        if not type_id or not TYPE_ID_PATTERN.match(type_id):
            raise ValueError(
                "Type ID must start with a lowercase letter and contain only lowercase letters, digits and underscores"
            )
        _validate_category(category)
        if await property_type_crud.get_by_id(self.db, type_id) is not None:
            raise DuplicateError(f"Property type already exists: {type_id}", {"type_id": type_id})

        entry = await property_type_crud.create(
            self.db,
            id=type_id,
            category=category,
            validation_schema=validation_schema or {},
            default_config=default_config or {},
            description=description,
            icon=icon,
            ui_component=ui_component,
            is_active=True,
            is_custom=True,
        )
        logger.info("Custom property type created", extra={"type_id": type_id})
        return property_type_to_dict(entry)

    async def patch_type(self, type_id: str, **changes) -> dict:
        self._ensure_not_system(type_id, "updated")
        entry = await self._get_model(type_id)
        for field_name in PATCHABLE_FIELDS:
            value = changes.get(field_name)
            if value is None:
                continue
            if field_name == "category":
                _validate_category(value)
            setattr(entry, field_name, value)
        await self.db.flush()
        return property_type_to_dict(entry)

    async def set_active(self, type_id: str, active: bool) -> dict:
        if not active:
            self._ensure_not_system(type_id, "deactivated")
        entry = await self._get_model(type_id)
        entry.is_active = active
        await self.db.flush()
        logger.info("Property type activation changed", extra={"type_id": type_id, "is_active": active})
        return property_type_to_dict(entry)

    async def delete_type(self, type_id: str) -> None:
        self._ensure_not_system(type_id, "deleted")
        entry = await self._get_model(type_id)
        await property_type_crud.delete_by_id(self.db, entry.id)
        logger.info("Property type deleted", extra={"type_id": type_id})
