"""
Attachment API endpoints.

Routes:
- POST /attachments - Upload file (multipart); stored as TEMPORARY
- GET /attachments?expense_id= - Attachments of an expense
- POST /attachments/cleanup - Delete expired temporary uploads of the tenant
- GET /attachments/{attachment_id} - Attachment metadata
- GET /attachments/{attachment_id}/download - File content
- GET /attachments/{attachment_id}/url - Time-limited download URL
- POST /attachments/{attachment_id}/link - Link to expense
- POST /attachments/{attachment_id}/unlink - Unlink from expense
- DELETE /attachments/{attachment_id} - Delete file and metadata

Dependencies: astar_backend.application.services.attachment_service
System role: File attachment HTTP API
"""

import logging
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import Response

from astar_backend.api.deps.dependencies import get_attachment_service, get_current_user
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.attachment_service import AttachmentService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.attachment import (
    AttachmentResponse,
    DownloadUrlResponse,
    LinkAttachmentRequest,
)
from astar_backend.models.common import CountResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attachments", tags=["attachments"])


@router.post("", response_model=AttachmentResponse, status_code=201)
@handle_domain_errors
async def upload_attachment(
    file: UploadFile = File(...),
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentResponse:
    """
    Upload a receipt or document.

    Raises:
        HTTPException(400): Empty file, too large or MIME type not allowed
    """
    content = await file.read()
    logger.info(
        "Uploading attachment",
        extra={"original_name": file.filename, "size": len(content)},
    )
    attachment = await attachment_service.upload(
        user.tenant_id,
        user.user_id,
        file.filename or "upload",
        file.content_type or "application/octet-stream",
        content,
    )
    return AttachmentResponse(**attachment)


@router.get("", response_model=list[AttachmentResponse])
@handle_domain_errors
async def list_attachments(
    expense_id: UUID = Query(...),
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> list[AttachmentResponse]:
    attachments = await attachment_service.list_by_expense(user.tenant_id, expense_id)
    return [AttachmentResponse(**a) for a in attachments]


@router.post("/cleanup", response_model=CountResponse)
@handle_domain_errors
async def cleanup_attachments(
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> CountResponse:
    return CountResponse(count=await attachment_service.cleanup_expired(tenant_id=user.tenant_id))


@router.get("/{attachment_id}", response_model=AttachmentResponse)
@handle_domain_errors
async def get_attachment(
    attachment_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentResponse:
    return AttachmentResponse(**await attachment_service.get_attachment(user.tenant_id, attachment_id))


@router.get("/{attachment_id}/download")
@handle_domain_errors
async def download_attachment(
    attachment_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> Response:
    content, mime_type, original_name = await attachment_service.download(user.tenant_id, attachment_id)
    return Response(
        content=content,
        media_type=mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(original_name)}"},
    )


@router.get("/{attachment_id}/url", response_model=DownloadUrlResponse)
@handle_domain_errors
async def get_download_url(
    attachment_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> DownloadUrlResponse:
    return DownloadUrlResponse(**await attachment_service.download_url(user.tenant_id, attachment_id))


@router.post("/{attachment_id}/link", response_model=AttachmentResponse)
@handle_domain_errors
async def link_attachment(
    attachment_id: UUID,
    request: LinkAttachmentRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentResponse:
    attachment = await attachment_service.link_to_expense(user.tenant_id, attachment_id, request.expense_id)
    return AttachmentResponse(**attachment)


@router.post("/{attachment_id}/unlink", response_model=AttachmentResponse)
@handle_domain_errors
async def unlink_attachment(
    attachment_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> AttachmentResponse:
    return AttachmentResponse(**await attachment_service.unlink(user.tenant_id, attachment_id))


@router.delete("/{attachment_id}", status_code=204)
@handle_domain_errors
async def delete_attachment(
    attachment_id: UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
) -> None:
    await attachment_service.delete_attachment(user.tenant_id, attachment_id, user_id=user.user_id)
