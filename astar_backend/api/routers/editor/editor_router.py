"""
Document tree API endpoints.

Routes:
- GET /editor/tree?workspace_id= - Nested folder/document tree
- GET /editor/children?workspace_id=&parent_id= - Direct children
- POST /editor/folders - Create folder
- GET /editor/folders/{folder_id} - Get folder
- PUT /editor/folders/{folder_id}/title - Rename folder
- PUT /editor/folders/{folder_id}/parent - Move folder
- POST /editor/folders/{folder_id}/archive, /unarchive - Archive subtree
- DELETE /editor/folders/{folder_id} - Delete folder subtree
- POST /editor/documents - Create document
- GET /editor/documents/{document_id} - Document with latest revision
- PUT /editor/documents/{document_id} - Save new revision
- PUT /editor/documents/{document_id}/metadata - Metadata, tags, flags
- PUT /editor/documents/{document_id}/parent - Move document
- POST /editor/documents/{document_id}/archive, /unarchive
- DELETE /editor/documents/{document_id} - Delete document
- GET /editor/documents/{document_id}/revisions - Revision history
- GET /editor/documents/{document_id}/revisions/{number} - One revision with content

Dependencies: astar_backend.application.services.folder_service, document_service
System role: Document management HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from astar_backend.api.deps.dependencies import (
    get_document_service,
    get_folder_service,
    require_permission,
)
from astar_backend.api.error_handling import handle_domain_errors
from astar_backend.application.services.document_service import DocumentService
from astar_backend.application.services.folder_service import FolderService
from astar_backend.core.principal import AuthenticatedUser
from astar_backend.models.common import CountResponse
from astar_backend.models.editor import (
    CreateDocumentRequest,
    CreateFolderRequest,
    DocumentResponse,
    MoveNodeRequest,
    NodeResponse,
    RenameRequest,
    RevisionResponse,
    TreeNodeResponse,
    UpdateDocumentMetadataRequest,
    UpdateDocumentRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/editor", tags=["editor"])


@router.get("/tree", response_model=list[TreeNodeResponse])
@handle_domain_errors
async def get_tree(
    workspace_id: UUID = Query(...),
    include_archived: bool = False,
    user: AuthenticatedUser = Depends(require_permission("document.view.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> list[TreeNodeResponse]:
    tree = await folder_service.get_tree(user.tenant_id, workspace_id, include_archived=include_archived)
    return [TreeNodeResponse(**node) for node in tree]


@router.get("/children", response_model=list[NodeResponse])
@handle_domain_errors
async def list_children(
    workspace_id: UUID = Query(...),
    parent_id: UUID | None = Query(None, description="Folder id; omit for the workspace root"),
    include_archived: bool = False,
    user: AuthenticatedUser = Depends(require_permission("document.view.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> list[NodeResponse]:
    nodes = await folder_service.list_children(
        user.tenant_id, workspace_id, parent_id=parent_id, include_archived=include_archived
    )
    return [NodeResponse(**n) for n in nodes]


# Folders


@router.post("/folders", response_model=NodeResponse, status_code=201)
@handle_domain_errors
async def create_folder(
    request: CreateFolderRequest,
    user: AuthenticatedUser = Depends(require_permission("directory.create.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> NodeResponse:
    logger.info("Creating folder", extra={"workspace_id": str(request.workspace_id)})
    folder = await folder_service.create_folder(
        user.tenant_id,
        request.workspace_id,
        request.title,
        parent_id=request.parent_id,
        user_id=user.user_id,
    )
    return NodeResponse(**folder)


@router.get("/folders/{folder_id}", response_model=NodeResponse)
@handle_domain_errors
async def get_folder(
    folder_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("directory.view.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> NodeResponse:
    return NodeResponse(**await folder_service.get_folder(user.tenant_id, folder_id))


@router.put("/folders/{folder_id}/title", response_model=NodeResponse)
@handle_domain_errors
async def rename_folder(
    folder_id: UUID,
    request: RenameRequest,
    user: AuthenticatedUser = Depends(require_permission("directory.edit.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> NodeResponse:
    """Rename a folder; descendant paths follow the new slug."""
    folder = await folder_service.rename_folder(
        user.tenant_id, folder_id, request.title, user_id=user.user_id
    )
    return NodeResponse(**folder)


@router.put("/folders/{folder_id}/parent", response_model=NodeResponse)
@handle_domain_errors
async def move_folder(
    folder_id: UUID,
    request: MoveNodeRequest,
    user: AuthenticatedUser = Depends(require_permission("directory.edit.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> NodeResponse:
    """
    Move a folder under another folder or to the workspace root.

    Raises:
        HTTPException(400): Target is the folder itself or a descendant
        HTTPException(409): Target already holds an item with the same name
    """
    folder = await folder_service.move_folder(
        user.tenant_id, folder_id, request.parent_id, user_id=user.user_id
    )
    return NodeResponse(**folder)


@router.post("/folders/{folder_id}/archive", response_model=NodeResponse)
@handle_domain_errors
async def archive_folder(
    folder_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("directory.edit.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> NodeResponse:
    folder = await folder_service.set_archived(user.tenant_id, folder_id, True, user_id=user.user_id)
    return NodeResponse(**folder)


@router.post("/folders/{folder_id}/unarchive", response_model=NodeResponse)
@handle_domain_errors
async def unarchive_folder(
    folder_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("directory.edit.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> NodeResponse:
    folder = await folder_service.set_archived(user.tenant_id, folder_id, False, user_id=user.user_id)
    return NodeResponse(**folder)


@router.delete("/folders/{folder_id}", response_model=CountResponse)
@handle_domain_errors
async def delete_folder(
    folder_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("directory.delete.all")),
    folder_service: FolderService = Depends(get_folder_service),
) -> CountResponse:
    """Delete a folder with everything below it; returns the number of nodes removed."""
    return CountResponse(count=await folder_service.delete_folder(user.tenant_id, folder_id))


# Documents


@router.post("/documents", response_model=DocumentResponse, status_code=201)
@handle_domain_errors
async def create_document(
    request: CreateDocumentRequest,
    user: AuthenticatedUser = Depends(require_permission("document.create.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    logger.info("Creating document", extra={"workspace_id": str(request.workspace_id)})
    document = await document_service.create_document(
        user.tenant_id,
        request.workspace_id,
        request.title,
        content=request.content,
        parent_id=request.parent_id,
        content_type=request.content_type,
        summary=request.summary,
        user_id=user.user_id,
        metadata=request.metadata,
        tags=request.tags,
    )
    logger.info("Document created successfully", extra={"document_id": str(document["id"])})
    return DocumentResponse(**document)


@router.get("/documents/{document_id}", response_model=DocumentResponse)
@handle_domain_errors
async def get_document(
    document_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("document.view.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return DocumentResponse(**await document_service.get_document(user.tenant_id, document_id))


@router.put("/documents/{document_id}", response_model=DocumentResponse)
@handle_domain_errors
async def update_document(
    document_id: UUID,
    request: UpdateDocumentRequest,
    user: AuthenticatedUser = Depends(require_permission("document.edit.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """Save a new revision. Omitted fields carry over from the latest revision."""
    document = await document_service.update_document(
        user.tenant_id,
        document_id,
        title=request.title,
        content=request.content,
        content_type=request.content_type,
        summary=request.summary,
        user_id=user.user_id,
    )
    return DocumentResponse(**document)


@router.put("/documents/{document_id}/metadata", response_model=DocumentResponse)
@handle_domain_errors
async def update_document_metadata(
    document_id: UUID,
    request: UpdateDocumentMetadataRequest,
    user: AuthenticatedUser = Depends(require_permission("document.edit.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    document = await document_service.update_metadata(
        user.tenant_id,
        document_id,
        metadata=request.metadata,
        tags=request.tags,
        is_published=request.is_published,
        is_favorited=request.is_favorited,
    )
    return DocumentResponse(**document)


@router.put("/documents/{document_id}/parent", response_model=DocumentResponse)
@handle_domain_errors
async def move_document(
    document_id: UUID,
    request: MoveNodeRequest,
    user: AuthenticatedUser = Depends(require_permission("document.edit.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    document = await document_service.move_document(
        user.tenant_id, document_id, request.parent_id, user_id=user.user_id
    )
    return DocumentResponse(**document)


@router.post("/documents/{document_id}/archive", response_model=DocumentResponse)
@handle_domain_errors
async def archive_document(
    document_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("document.edit.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return DocumentResponse(**await document_service.set_archived(user.tenant_id, document_id, True))


@router.post("/documents/{document_id}/unarchive", response_model=DocumentResponse)
@handle_domain_errors
async def unarchive_document(
    document_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("document.edit.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return DocumentResponse(**await document_service.set_archived(user.tenant_id, document_id, False))


@router.delete("/documents/{document_id}", status_code=204)
@handle_domain_errors
async def delete_document(
    document_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("document.delete.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> None:
    await document_service.delete_document(user.tenant_id, document_id)


@router.get("/documents/{document_id}/revisions", response_model=list[RevisionResponse])
@handle_domain_errors
async def list_revisions(
    document_id: UUID,
    user: AuthenticatedUser = Depends(require_permission("document.view.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> list[RevisionResponse]:
    revisions = await document_service.list_revisions(user.tenant_id, document_id)
    return [RevisionResponse(**r) for r in revisions]


@router.get("/documents/{document_id}/revisions/{revision_number}", response_model=RevisionResponse)
@handle_domain_errors
async def get_revision(
    document_id: UUID,
    revision_number: int,
    user: AuthenticatedUser = Depends(require_permission("document.view.all")),
    document_service: DocumentService = Depends(get_document_service),
) -> RevisionResponse:
    revision = await document_service.get_revision(user.tenant_id, document_id, revision_number)
    return RevisionResponse(**revision)
