import json
import logging
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ProductNotFoundError
from storefront.core.listing_query import Comparison, ListingQuery, ListingRequest, PageResult
from storefront.models.product import Product
from storefront.schemas.product import ProductCreateRequest, ProductListFilters, ProductUpdateRequest
from storefront.storage.sql_collection import SqlCollection

logger = logging.getLogger(__name__)

PRODUCT_SEARCH_FIELDS = ("name", "description", "category")
DEFAULT_LISTING_STATUS = "active"
_NULLABLE_FIELDS = {"old_price", "image", "badge", "slug"}

product_listing = ListingQuery(
    resource="products",
    search_fields=PRODUCT_SEARCH_FIELDS,
    timestamp_field="created_at",
    scope={"is_deleted": False},
)


async def list_products(
    db: AsyncSession,
    request: ListingRequest,
    filters: ProductListFilters | None = None,
) -> PageResult:
    """Newest-first page of non-deleted products.

    Without an explicit status only active products are listed; ``"all"``
    counts as no status, so it lists active products too.
    """
    filters = filters or ProductListFilters()
    extra: dict = {"badge": filters.badge}
    if request.status_filter is None:
        extra["status"] = DEFAULT_LISTING_STATUS
    if filters.is_popular:
        extra["is_popular"] = True
    if filters.is_new:
        extra["is_new"] = True

    comparisons = []
    if filters.category:
        comparisons.append(Comparison("category", "ieq", filters.category))
    if filters.min_price is not None:
        comparisons.append(Comparison("price", "ge", filters.min_price))
    if filters.max_price is not None:
        comparisons.append(Comparison("price", "le", filters.max_price))
    if filters.in_stock:
        comparisons.append(Comparison("stock", "gt", 0))

    return await product_listing.run(
        SqlCollection(db, Product), request, extra=extra, comparisons=comparisons
    )


async def get_product(db: AsyncSession, product_id: str) -> Product:
    """Get a product by ID or raise 404. Soft-deleted products are still returned."""
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if not product:
        raise ProductNotFoundError(product_id)
    return product


async def create_product(db: AsyncSession, req: ProductCreateRequest) -> Product:
    data = req.model_dump()
    data["images"] = json.dumps(data["images"])
    product = Product(**data)
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Product created: %s", product.id)
    return product


async def update_product(
    db: AsyncSession, product_id: str, req: ProductUpdateRequest
) -> Product:
    """Apply only the fields the client actually sent."""
    product = await get_product(db, product_id)

    update_data = {
        field: value
        for field, value in req.model_dump(exclude_unset=True).items()
        if value is not None or field in _NULLABLE_FIELDS
    }
    if "images" in update_data:
        update_data["images"] = json.dumps(update_data["images"] or [])

    for field, value in update_data.items():
        setattr(product, field, value)

    product.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(product)
    return product


async def _set_flags(db: AsyncSession, product_id: str, **flags) -> Product:
    product = await get_product(db, product_id)
    for field, value in flags.items():
        setattr(product, field, value)
    product.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(product)
    return product


async def soft_delete_product(db: AsyncSession, product_id: str) -> Product:
    product = await _set_flags(db, product_id, is_deleted=True, status="inactive")
    logger.info("Product archived (soft-delete): %s", product_id)
    return product


async def restore_product(db: AsyncSession, product_id: str) -> Product:
    return await _set_flags(db, product_id, is_deleted=False, status="active")


async def set_archive_status(db: AsyncSession, product_id: str, archived: bool) -> Product:
    return await _set_flags(db, product_id, status="inactive" if archived else "active")


async def list_categories(db: AsyncSession) -> list[dict]:
    """Per-category counts and price range of active, non-deleted products."""
    count = func.count(Product.id).label("product_count")
    stmt = (
        select(
            Product.category,
            count,
            func.avg(Product.price).label("avg_price"),
            func.min(Product.price).label("min_price"),
            func.max(Product.price).label("max_price"),
        )
        .where(Product.status == "active", Product.is_deleted.is_(False))
        .group_by(Product.category)
        .order_by(count.desc(), Product.category.asc())
    )
    rows = (await db.execute(stmt)).all()
    return [
        {
            "category": row.category,
            "count": row.product_count,
            "avg_price": float(row.avg_price or 0),
            "min_price": float(row.min_price or 0),
            "max_price": float(row.max_price or 0),
        }
        for row in rows
    ]
