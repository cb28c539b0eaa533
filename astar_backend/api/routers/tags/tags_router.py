"""
Tag API endpoints.

Routes:
- GET /tags - Tags visible to the caller (tenant tags plus own personal tags)
- POST /tags - Create tag
- GET /tags/suggestions - Most used tags, optionally by prefix
- POST /tags/find-or-create - Resolve names, creating missing tenant tags
- GET /tags/{tag_id} - Get tag
- PUT /tags/{tag_id} - Rename / recolour
- DELETE /tags/{tag_id} - Soft delete

Dependencies: astar_backend.application.services.tag_service
System role: Tag HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from astar_backend.api.deps.dependencies import get_current_user, get_tag_service
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.tag_service import TagService
from astar_backend.boundary.db.models.tag_model import TagScope
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.tag import (
    CreateTagRequest,
    FindOrCreateTagsRequest,
    TagResponse,
    UpdateTagRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagResponse])
@handle_domain_errors
async def list_tags(
    scope: TagScope | None = None,
    search: str | None = None,
    sort_by: str = "name",
    descending: bool = False,
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    tags = await tag_service.list_tags(
        user.tenant_id,
        user.user_id,
        scope=scope,
        search=search,
        sort_by=sort_by,
        descending=descending,
    )
    return [TagResponse(**t) for t in tags]


@router.post("", response_model=TagResponse, status_code=201)
@handle_domain_errors
async def create_tag(
    request: CreateTagRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """
    Create a tag.

    Raises:
        HTTPException(400): Invalid name or colour
        HTTPException(409): Name already used (case-insensitive)
    """
    logger.info("Creating tag", extra={"scope": request.scope.value})
    tag = await tag_service.create_tag(
        user.tenant_id,
        user.user_id,
        request.name,
        color=request.color,
        scope=request.scope,
    )
    return TagResponse(**tag)


@router.get("/suggestions", response_model=list[TagResponse])
@handle_domain_errors
async def tag_suggestions(
    prefix: str | None = None,
    limit: int = Query(10, ge=1, le=50),
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    tags = await tag_service.suggestions(user.tenant_id, user.user_id, prefix=prefix, limit=limit)
    return [TagResponse(**t) for t in tags]


@router.post("/find-or-create", response_model=list[TagResponse])
@handle_domain_errors
async def find_or_create_tags(
    request: FindOrCreateTagsRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> list[TagResponse]:
    tags = await tag_service.find_or_create(user.tenant_id, user.user_id, request.names)
    return [TagResponse(**t) for t in tags]


@router.get("/{tag_id}", response_model=TagResponse)
@handle_domain_errors
async def get_tag(
    tag_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    return TagResponse(**await tag_service.get_tag(user.tenant_id, user.user_id, tag_id))


@router.put("/{tag_id}", response_model=TagResponse)
@handle_domain_errors
async def update_tag(
    tag_id: UUID,
    request: UpdateTagRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    tag = await tag_service.update_tag(
        user.tenant_id, user.user_id, tag_id, name=request.name, color=request.color
    )
    return TagResponse(**tag)


@router.delete("/{tag_id}", status_code=204)
@handle_domain_errors
async def delete_tag(
    tag_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    tag_service: TagService = Depends(get_tag_service),
) -> None:
    await tag_service.delete_tag(user.tenant_id, user.user_id, tag_id)
