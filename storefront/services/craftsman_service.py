import json
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import CraftsmanNotFoundError
from storefront.core.listing_query import ListingQuery, ListingRequest, PageResult
from storefront.models.craftsman import Craftsman
from storefront.schemas.craftsman import CraftsmanCreateRequest, CraftsmanUpdateRequest
from storefront.storage.sql_collection import SqlCollection

logger = logging.getLogger(__name__)

CRAFTSMAN_SEARCH_FIELDS = ("name", "specialty", "phone")

craftsman_listing = ListingQuery(
    resource="craftsmen",
    search_fields=CRAFTSMAN_SEARCH_FIELDS,
    timestamp_field="join_date",
)


async def list_craftsmen(
    db: AsyncSession,
    request: ListingRequest,
    specialty: str | None = None,
) -> PageResult:
    return await craftsman_listing.run(
        SqlCollection(db, Craftsman), request, extra={"specialty": specialty}
    )


async def get_craftsman(db: AsyncSession, craftsman_id: str) -> Craftsman:
    result = await db.execute(select(Craftsman).where(Craftsman.id == craftsman_id))
    craftsman = result.scalar_one_or_none()
    if not craftsman:
        raise CraftsmanNotFoundError(craftsman_id)
    return craftsman


async def create_craftsman(db: AsyncSession, req: CraftsmanCreateRequest) -> Craftsman:
    data = req.model_dump()
    data["portfolio"] = json.dumps(data["portfolio"])
    if data["join_date"] is None:
        data["join_date"] = datetime.now(timezone.utc)
    craftsman = Craftsman(**data)
    db.add(craftsman)
    await db.commit()
    await db.refresh(craftsman)
    logger.info("Craftsman created: %s", craftsman.id)
    return craftsman


async def update_craftsman(
    db: AsyncSession, craftsman_id: str, req: CraftsmanUpdateRequest
) -> Craftsman:
    craftsman = await get_craftsman(db, craftsman_id)

    update_data = {
        field: value
        for field, value in req.model_dump(exclude_unset=True).items()
        if value is not None or field == "avatar"
    }
    if "portfolio" in update_data:
        update_data["portfolio"] = json.dumps(update_data["portfolio"] or [])

    for field, value in update_data.items():
        setattr(craftsman, field, value)

    craftsman.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(craftsman)
    logger.info("Craftsman %s updated: %s", craftsman_id, sorted(update_data))
    return craftsman


async def delete_craftsman(db: AsyncSession, craftsman_id: str) -> None:
    craftsman = await get_craftsman(db, craftsman_id)
    await db.delete(craftsman)
    await db.commit()
    logger.info("Craftsman %s deleted", craftsman_id)
