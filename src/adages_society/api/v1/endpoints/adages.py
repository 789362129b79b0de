# src/adages_society/api/v1/endpoints/adages.py
"""Adage archive endpoints, including the featured rotation."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel

from adages_society.api.v1.dependencies import (
    AdminUserDep,
    CronDep,
    OptionalUserDep,
    SessionDep,
)
from adages_society.core.roles import is_admin
from adages_society.db.time import utcnow
from adages_society.models import Adage, AdageVersion
from adages_society.repositories.content_repo import get_live_or_404
from adages_society.schemas.adage import (
    AdageCreate,
    AdageDetail,
    AdageResponse,
    AdageUpdate,
    AdageVersionResponse,
    FeaturedAdageResponse,
    FeaturedHistoryEntry,
    RotationResult,
    SetFeaturedRequest,
)
from adages_society.schemas.common import ApiResponse
from adages_society.services import adages as adage_service
from adages_society.services import rotation
from adages_society.services.feeds import export_adages

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/adages", tags=["adages"])


class AdagePage(BaseModel):
    items: list[AdageResponse]
    total: int
    limit: int
    offset: int


@router.get("", response_model=ApiResponse[AdagePage])
async def list_adages(
    db: SessionDep,
    current_user: OptionalUserDep,
    search: str | None = Query(None),
    tag: str | None = Query(None),
    featured: bool | None = Query(None),
    limit: int = Query(adage_service.MAX_PAGE_SIZE, ge=1, le=adage_service.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> ApiResponse[AdagePage]:
    """Browse the archive; hidden adages are listed for admins only."""
    rows, total = adage_service.list_adages(
        db,
        search=search,
        tag=tag,
        featured=featured,
        limit=limit,
        offset=offset,
        include_hidden=current_user is not None and is_admin(current_user.role),
    )
    page = AdagePage(
        items=adage_service.to_responses(db, rows), total=total, limit=limit, offset=offset
    )
    return ApiResponse(data=page)


@router.get("/featured", response_model=ApiResponse[list[FeaturedAdageResponse]])
async def get_featured_adages(db: SessionDep) -> ApiResponse[list[FeaturedAdageResponse]]:
    """Return the adage(s) currently in their feature window."""
    return ApiResponse(data=rotation.featured_adages(db))


@router.get("/featured/history", response_model=ApiResponse[list[FeaturedHistoryEntry]])
async def get_featured_history(
    db: SessionDep,
    limit: int = Query(52, ge=1, le=520),
) -> ApiResponse[list[FeaturedHistoryEntry]]:
    return ApiResponse(data=rotation.featured_history(db, limit=limit))


@router.post("/rotate-featured", response_model=ApiResponse[RotationResult])
def rotate_featured_adage(_cron: CronDep, db: SessionDep) -> ApiResponse[RotationResult]:
    """Weekly cron job: feature the next adage that has not been featured this cycle."""
    outcome = rotation.rotate_featured(db)
    rotation.announce_rotation(db, outcome)
    result = RotationResult(
        adage_id=outcome.adage.id,
        adage=outcome.adage.adage,
        featured_until=outcome.featured_until,
        cycle_restarted=outcome.cycle_restarted,
        unfeatured_count=outcome.unfeatured_count,
    )
    message = "Featured adage rotated"
    if outcome.cycle_restarted:
        message += "; every adage had been featured, so the cycle restarted"
    return ApiResponse(data=result, message=message)


@router.get("/export")
async def export_archive(
    db: SessionDep,
    _admin: AdminUserDep,
    export_format: Literal["csv", "json", "html"] = Query("csv", alias="format"),
) -> Response:
    """Download every live adage as CSV, JSON or an HTML table."""
    adages = (
        db.query(Adage)
        .filter(Adage.deleted_at.is_(None))
        .order_by(Adage.created_at.asc(), Adage.id.asc())
        .all()
    )
    content, media_type = export_adages(adages, export_format)
    filename = f"adages-export-{utcnow():%Y-%m-%d}.{export_format}"
    logger.info("Exported %d adages as %s", len(adages), export_format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{adage_id}", response_model=ApiResponse[AdageDetail])
async def get_adage(
    adage_id: int,
    db: SessionDep,
    current_user: OptionalUserDep,
) -> ApiResponse[AdageDetail]:
    admin = current_user is not None and is_admin(current_user.role)
    adage = get_live_or_404(db, Adage, adage_id, detail="Adage not found", include_hidden=admin)
    detail = adage_service.adage_detail(db, adage, current_user.id if current_user else None)
    return ApiResponse(data=detail)


@router.post("", response_model=ApiResponse[AdageResponse], status_code=status.HTTP_201_CREATED)
async def create_adage(
    payload: AdageCreate,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[AdageResponse]:
    adage = adage_service.create_adage(db, payload, admin.id)
    return ApiResponse(data=adage_service.to_responses(db, [adage])[0], message="Adage created")


@router.put("/{adage_id}", response_model=ApiResponse[AdageResponse])
async def update_adage(
    adage_id: int,
    payload: AdageUpdate,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[AdageResponse]:
    """Edit an adage; the previous text is kept as a numbered version."""
    adage = get_live_or_404(db, Adage, adage_id, detail="Adage not found")
    adage = adage_service.update_adage(db, adage, payload, admin.id)
    return ApiResponse(data=adage_service.to_responses(db, [adage])[0], message="Adage updated")


@router.delete("/{adage_id}", response_model=ApiResponse[None])
async def delete_adage(adage_id: int, admin: AdminUserDep, db: SessionDep) -> ApiResponse[None]:
    adage = get_live_or_404(db, Adage, adage_id, detail="Adage not found")
    adage_service.delete_adage(db, adage, admin.id)
    return ApiResponse(message="Adage deleted")


@router.get("/{adage_id}/versions", response_model=ApiResponse[list[AdageVersionResponse]])
async def list_adage_versions(
    adage_id: int,
    _admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[list[AdageVersionResponse]]:
    get_live_or_404(db, Adage, adage_id, detail="Adage not found")
    versions = (
        db.query(AdageVersion)
        .filter(AdageVersion.adage_id == adage_id)
        .order_by(AdageVersion.version_number.desc())
        .all()
    )
    return ApiResponse(data=[AdageVersionResponse.model_validate(v) for v in versions])


@router.post("/{adage_id}/set-featured", response_model=ApiResponse[AdageResponse])
async def set_featured_adage(
    adage_id: int,
    payload: SetFeaturedRequest,
    admin: AdminUserDep,
    db: SessionDep,
) -> ApiResponse[AdageResponse]:
    """Feature an adage now, replacing whatever is currently featured."""
    adage = get_live_or_404(
        db, Adage, adage_id, detail="Adage not found", include_hidden=False
    )
    adage = rotation.set_featured(
        db,
        adage,
        user_id=admin.id,
        featured_until=payload.featured_until,
        reason=payload.reason,
    )
    return ApiResponse(data=adage_service.to_responses(db, [adage])[0], message="Adage featured")
