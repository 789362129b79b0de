# src/adages_society/api/v1/endpoints/citations.py
"""Reader-submitted citations for adages."""

from fastapi import APIRouter, Query, status

from adages_society.api.v1.dependencies import AdminUserDep, SessionDep, VerifiedUserDep
from adages_society.db.time import utcnow
from adages_society.models import Adage, Citation
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.content import CitationCreate, CitationResponse, CitationUpdate
from adages_society.services.notifications import notify

router = APIRouter(prefix="/citations", tags=["citations"])


@router.get("", response_model=ApiResponse[list[CitationResponse]])
async def list_citations(
    db: SessionDep,
    adage_id: int | None = Query(None),
    verified: bool | None = Query(None),
) -> ApiResponse[list[CitationResponse]]:
    query = db.query(Citation).filter(Citation.deleted_at.is_(None))
    if adage_id is not None:
        query = query.filter(Citation.adage_id == adage_id)
    if verified is not None:
        query = query.filter(Citation.verified.is_(verified))
    citations = query.order_by(Citation.created_at.desc(), Citation.id.desc()).all()
    return ApiResponse(data=[CitationResponse.model_validate(c) for c in citations])


@router.post(
    "", response_model=ApiResponse[CitationResponse], status_code=status.HTTP_201_CREATED
)
async def submit_citation(
    payload: CitationCreate, current_user: VerifiedUserDep, db: SessionDep
) -> ApiResponse[CitationResponse]:
    """Submit a source for an adage; it stays unverified until an admin checks it."""
    get_live_or_404(db, Adage, payload.adage_id, detail="Adage not found")
    citation = Citation(
        adage_id=payload.adage_id,
        source_text=payload.source_text.strip(),
        source_url=payload.source_url,
        source_type=payload.source_type,
        submitted_by=current_user.id,
        verified=False,
    )
    db.add(citation)
    db.commit()
    db.refresh(citation)
    return ApiResponse(
        data=CitationResponse.model_validate(citation),
        message="Citation submitted for review",
    )


@router.patch("/{citation_id}", response_model=ApiResponse[CitationResponse])
async def update_citation(
    citation_id: int, payload: CitationUpdate, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[CitationResponse]:
    citation = get_live_or_404(db, Citation, citation_id, detail="Citation not found")
    was_verified = citation.verified
    for key, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(citation, key, value)
    citation.updated_at = utcnow()

    if citation.verified and not was_verified and citation.submitted_by is not None:
        notify(
            db,
            citation.submitted_by,
            "general",
            "Citation Verified",
            "Thank you! A citation you submitted has been verified and is now shown "
            "with the adage.",
            related_id=citation.adage_id,
            related_type="adage",
        )
    db.commit()
    db.refresh(citation)
    return ApiResponse(data=CitationResponse.model_validate(citation), message="Citation updated")


@router.delete("/{citation_id}", response_model=ApiResponse[None])
async def delete_citation(
    citation_id: int, _admin: AdminUserDep, db: SessionDep
) -> ApiResponse[None]:
    citation = get_live_or_404(db, Citation, citation_id, detail="Citation not found")
    citation.deleted_at = utcnow()
    db.commit()
    return ApiResponse(message="Citation deleted")
