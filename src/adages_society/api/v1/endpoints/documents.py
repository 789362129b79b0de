# src/adages_society/api/v1/endpoints/documents.py
"""Society document library."""

from fastapi import APIRouter, Query, status

from adages_society.api.v1.dependencies import AdminUserDep, OptionalUserDep, SessionDep
from adages_society.core.roles import is_admin
from adages_society.db.time import utcnow
from adages_society.models import Document
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.content import DocumentCreate, DocumentResponse, DocumentUpdate
from adages_society.services.activity import log_activity

router = APIRouter(prefix="/documents", tags=["documents"])

_REQUIRED_FIELDS = ("title", "file_url", "file_name")


@router.get("", response_model=ApiResponse[list[DocumentResponse]])
async def list_documents(
    current_user: OptionalUserDep,
    db: SessionDep,
    category: str | None = Query(None),
    include_hidden: bool = Query(False),
) -> ApiResponse[list[DocumentResponse]]:
    """List documents; only admins may ask for unpublished and hidden rows."""
    query = db.query(Document).filter(Document.deleted_at.is_(None))
    if not (include_hidden and current_user is not None and is_admin(current_user.role)):
        query = query.filter(Document.published.is_(True), Document.hidden_at.is_(None))
    if category:
        query = query.filter(Document.category == category)
    documents = query.order_by(Document.order_index.asc(), Document.created_at.desc()).all()
    return ApiResponse(data=[DocumentResponse.model_validate(d) for d in documents])


@router.post(
    "", response_model=ApiResponse[DocumentResponse], status_code=status.HTTP_201_CREATED
)
async def create_document(
    payload: DocumentCreate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[DocumentResponse]:
    document = Document(**payload.model_dump(), created_by=admin.id)
    db.add(document)
    db.flush()
    log_activity(db, admin.id, "create_document", "document", document.id)
    db.commit()
    db.refresh(document)
    return ApiResponse(data=DocumentResponse.model_validate(document), message="Document created")


@router.put("/{document_id}", response_model=ApiResponse[DocumentResponse])
async def update_document(
    document_id: int, payload: DocumentUpdate, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[DocumentResponse]:
    document = get_live_or_404(db, Document, document_id, detail="Document not found")
    changes = payload.model_dump(exclude_unset=True)
    hidden = changes.pop("hidden", None)
    for key, value in changes.items():
        if value is None and (key in _REQUIRED_FIELDS or key in ("published", "order_index")):
            continue
        setattr(document, key, value)
    if hidden is not None:
        document.hidden_at = utcnow() if hidden else None
    document.updated_at = utcnow()
    log_activity(
        db, admin.id, "update_document", "document", document.id, {"fields": sorted(changes)}
    )
    db.commit()
    db.refresh(document)
    return ApiResponse(data=DocumentResponse.model_validate(document), message="Document updated")


@router.delete("/{document_id}", response_model=ApiResponse[None])
async def delete_document(
    document_id: int, admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    document = get_live_or_404(db, Document, document_id, detail="Document not found")
    document.deleted_at = utcnow()
    log_activity(db, admin.id, "delete_document", "document", document.id)
    db.commit()
    return ApiResponse(message="Document deleted")
