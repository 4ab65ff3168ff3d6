import json

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import listing_request
from storefront.core.listing_query import ListingRequest
from storefront.database import get_db
from storefront.models.craftsman import Craftsman
from storefront.schemas.common import MessageResponse, PaginationMeta
from storefront.schemas.craftsman import (
    CraftsmanCreateRequest,
    CraftsmanListResponse,
    CraftsmanResponse,
    CraftsmanUpdateRequest,
)
from storefront.services import craftsman_service

router = APIRouter(prefix="/craftsmen", tags=["craftsmen"])


@router.get("", response_model=CraftsmanListResponse)
async def list_craftsmen(
    listing: ListingRequest = Depends(listing_request),
    specialty: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    page = await craftsman_service.list_craftsmen(db, listing, specialty=specialty)
    return CraftsmanListResponse(
        craftsmen=[_craftsman_to_response(c) for c in page.items],
        pagination=PaginationMeta.from_page(page),
    )


@router.get("/{craftsman_id}", response_model=CraftsmanResponse)
async def get_craftsman(craftsman_id: str, db: AsyncSession = Depends(get_db)):
    return _craftsman_to_response(await craftsman_service.get_craftsman(db, craftsman_id))


@router.post("", response_model=CraftsmanResponse, status_code=201)
async def create_craftsman(req: CraftsmanCreateRequest, db: AsyncSession = Depends(get_db)):
    return _craftsman_to_response(await craftsman_service.create_craftsman(db, req))


@router.put("/{craftsman_id}", response_model=CraftsmanResponse)
async def update_craftsman(
    craftsman_id: str,
    req: CraftsmanUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    return _craftsman_to_response(await craftsman_service.update_craftsman(db, craftsman_id, req))


@router.delete("/{craftsman_id}", response_model=MessageResponse)
async def delete_craftsman(craftsman_id: str, db: AsyncSession = Depends(get_db)):
    await craftsman_service.delete_craftsman(db, craftsman_id)
    return MessageResponse(message="Craftsman deleted")


def _craftsman_to_response(craftsman: Craftsman) -> CraftsmanResponse:
    portfolio = craftsman.portfolio
    if isinstance(portfolio, str):
        portfolio = json.loads(portfolio)

    return CraftsmanResponse(
        id=craftsman.id,
        name=craftsman.name,
        specialty=craftsman.specialty,
        phone=craftsman.phone,
        status=craftsman.status,
        join_date=craftsman.join_date,
        rating=float(craftsman.rating or 0),
        completed_jobs=craftsman.completed_jobs,
        avatar=craftsman.avatar,
        portfolio=portfolio or [],
        description=craftsman.description or "",
        created_at=craftsman.created_at,
        updated_at=craftsman.updated_at,
    )
