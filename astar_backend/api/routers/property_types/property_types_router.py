"""
Property type catalog endpoints.

Routes:
- GET /property-types - List types (filters: active_only, category, custom)
- GET /property-types/summary - Counts per category
- GET /property-types/categories - Category names
- POST /property-types - Register custom type
- GET /property-types/{type_id} - Get type
- PATCH /property-types/{type_id} - Update custom type
- POST /property-types/{type_id}/activate - Activate
- POST /property-types/{type_id}/deactivate - Deactivate
- DELETE /property-types/{type_id} - Delete custom type

Dependencies: astar_backend.application.services.property_type_service
System role: Type catalog HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Query

from astar_backend.api.deps.dependencies import get_property_type_service, require_permission
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.property_type_service import PropertyTypeService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.property_type import (
    CreatePropertyTypeRequest,
    PropertyTypeResponse,
    PropertyTypeSummaryResponse,
    UpdatePropertyTypeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/property-types", tags=["property-types"])


@router.get("", response_model=list[PropertyTypeResponse])
@handle_domain_errors
async def list_property_types(
    active_only: bool = False,
    category: str | None = Query(None, description="basic, advanced, relation or system"),
    custom: bool | None = Query(None, description="Only custom (true) or only built-in (false)"),
    user: AuthenticatedUser = Depends(require_permission("property_type.view.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> list[PropertyTypeResponse]:
    if category is not None:
        entries = await property_type_service.list_by_category(category, active_only=active_only)
    elif custom is True:
        entries = await property_type_service.list_custom()
    elif custom is False:
        entries = await property_type_service.list_builtin()
    else:
        entries = await property_type_service.list_types(active_only=active_only)
    return [PropertyTypeResponse(**e) for e in entries]


@router.get("/summary", response_model=PropertyTypeSummaryResponse)
@handle_domain_errors
async def get_property_type_summary(
    user: AuthenticatedUser = Depends(require_permission("property_type.view.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> PropertyTypeSummaryResponse:
    return PropertyTypeSummaryResponse(**await property_type_service.summary())


@router.get("/categories", response_model=list[str])
@handle_domain_errors
async def list_categories(
    user: AuthenticatedUser = Depends(require_permission("property_type.view.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> list[str]:
    return await property_type_service.list_categories()


@router.post("", response_model=PropertyTypeResponse, status_code=201)
@handle_domain_errors
async def create_property_type(
    request: CreatePropertyTypeRequest,
    user: AuthenticatedUser = Depends(require_permission("property_type.create.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> PropertyTypeResponse:
    """
    Register a custom property type.

    Raises:
        HTTPException(400): Invalid id or category
        HTTPException(409): Id already in the catalog
    """
    logger.info("Creating property type", extra={"type_id": request.id})
    entry = await property_type_service.create_custom_type(
        request.id,
        request.category,
        validation_schema=request.validation_schema,
        default_config=request.default_config,
        description=request.description,
        icon=request.icon,
        ui_component=request.ui_component,
    )
    return PropertyTypeResponse(**entry)


@router.get("/{type_id}", response_model=PropertyTypeResponse)
@handle_domain_errors
async def get_property_type(
    type_id: str,
    user: AuthenticatedUser = Depends(require_permission("property_type.view.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> PropertyTypeResponse:
    return PropertyTypeResponse(**await property_type_service.get_type(type_id))


@router.patch("/{type_id}", response_model=PropertyTypeResponse)
@handle_domain_errors
async def update_property_type(
    type_id: str,
    request: UpdatePropertyTypeRequest,
    user: AuthenticatedUser = Depends(require_permission("property_type.edit.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> PropertyTypeResponse:
    entry = await property_type_service.patch_type(type_id, **request.model_dump(exclude_none=True))
    return PropertyTypeResponse(**entry)


@router.post("/{type_id}/activate", response_model=PropertyTypeResponse)
@handle_domain_errors
async def activate_property_type(
    type_id: str,
    user: AuthenticatedUser = Depends(require_permission("property_type.manage.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> PropertyTypeResponse:
    return PropertyTypeResponse(**await property_type_service.set_active(type_id, True))


@router.post("/{type_id}/deactivate", response_model=PropertyTypeResponse)
@handle_domain_errors
async def deactivate_property_type(
    type_id: str,
    user: AuthenticatedUser = Depends(require_permission("property_type.manage.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> PropertyTypeResponse:
    return PropertyTypeResponse(**await property_type_service.set_active(type_id, False))


@router.delete("/{type_id}", status_code=204)
@handle_domain_errors
async def delete_property_type(
    type_id: str,
    user: AuthenticatedUser = Depends(require_permission("property_type.delete.all")),
    property_type_service: PropertyTypeService = Depends(get_property_type_service),
) -> None:
    await property_type_service.delete_type(type_id)
