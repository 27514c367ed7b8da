"""Document endpoints for the API."""

from fastapi import APIRouter, Query, Response, status

from settlernote.document_tree import build_document_tree, count_documents, format_document_tree
from settlernote.schemas import Document, Permission
from settlernote.toc import extract_toc, format_toc
from settlernote.utils.logging_config import get_logger
from server.dependencies import CurrentUser, StoreDep
from server.models import (
    DocumentCreateRequest,
    DocumentTreeResponse,
    DocumentUpdateRequest,
    ErrorResponse,
    ShareRequest,
    TocResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/documents", tags=["documents"])

COMMON_RESPONSES = {
    401: {"model": ErrorResponse, "description": "No session"},
    404: {"model": ErrorResponse, "description": "Document or user not found"},
}


@router.get("", response_model=list[Document], response_model_exclude_none=True, responses=COMMON_RESPONSES)
async def list_documents(
    store: StoreDep, user: CurrentUser, parent_id: str | None = Query(default=None, alias="parentId")
) -> list[Document]:
    """List live documents under a parent.

    **Query Parameters**
    - **parentId** (`str`, optional): parent document id; root documents when omitted

    **Returns**
    - **list[Document]**: documents ordered by position, each with owner and children summaries
    """
    return store.list(parent_id or None)


@router.get("/tree", response_model=DocumentTreeResponse, responses=COMMON_RESPONSES)
async def document_tree(store: StoreDep, user: CurrentUser) -> DocumentTreeResponse:
    """Return every live document nested under its parent, plus a text outline."""
    tree = build_document_tree(store.all())
    return DocumentTreeResponse(tree=tree, outline=format_document_tree(tree), count=count_documents(tree))


@router.post(
    "",
    response_model=Document,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=COMMON_RESPONSES,
)
async def create_document(store: StoreDep, user: CurrentUser, body: DocumentCreateRequest) -> Document:
    """Create a document owned by the signed-in user.

    **Parameters**

    - **body** (`DocumentCreateRequest`): title, icon, parentId and optional content

    **Returns**

    - **Document**: the new document, positioned after the owner's last sibling
    """
    return store.create(user, title=body.title, icon=body.icon, parent_id=body.parent_id, content=body.content)


@router.get("/{document_id}", response_model=Document, response_model_exclude_none=True, responses=COMMON_RESPONSES)
async def get_document(document_id: str, store: StoreDep, user: CurrentUser) -> Document:
    """Return one document with its owner, permissions and children summaries."""
    return store.get(document_id)


@router.patch("/{document_id}", response_model=Document, response_model_exclude_none=True, responses=COMMON_RESPONSES)
async def update_document(
    document_id: str, store: StoreDep, user: CurrentUser, body: DocumentUpdateRequest
) -> Document:
    """Overwrite the fields present in the body; absent fields keep their values."""
    changes = body.model_dump(exclude_unset=True)
    if changes.get("title", "") is None:
        del changes["title"]
    if "content" in changes:
        changes["content"] = body.content
    logger.debug("Updating document", extra={"document_id": document_id, "fields": sorted(changes)})
    return store.update(document_id, **changes)


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**COMMON_RESPONSES, 403: {"model": ErrorResponse, "description": "Not the owner"}},
)
async def delete_document(document_id: str, store: StoreDep, user: CurrentUser) -> Response:
    """Delete a document and its descendants (owner only)."""
    store.delete(document_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/toc", response_model=TocResponse, responses=COMMON_RESPONSES)
async def document_toc(document_id: str, store: StoreDep, user: CurrentUser) -> TocResponse:
    """Return the document's headings as entries and as a text outline."""
    entries = extract_toc(store.get(document_id).content)
    return TocResponse(entries=entries, outline=format_toc(entries))


@router.post(
    "/{document_id}/permissions",
    response_model=Permission,
    status_code=status.HTTP_201_CREATED,
    responses={**COMMON_RESPONSES, 403: {"model": ErrorResponse, "description": "Not the owner"}},
)
async def share_document(document_id: str, store: StoreDep, user: CurrentUser, body: ShareRequest) -> Permission:
    """Share a document with another user (owner only)."""
    return store.share(document_id, user, body.email, body.role)
