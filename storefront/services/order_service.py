import json
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import OrderNotFoundError
from storefront.core.listing_query import ListingQuery, ListingRequest, PageResult
from storefront.models.order import Order
from storefront.schemas.order import OrderCreateRequest
from storefront.storage.sql_collection import SqlCollection

logger = logging.getLogger(__name__)

ORDER_SEARCH_FIELDS = ("customer_name", "customer_phone", "customer_address")

order_listing = ListingQuery(
    resource="orders",
    search_fields=ORDER_SEARCH_FIELDS,
    timestamp_field="order_date",
)


async def list_orders(db: AsyncSession, request: ListingRequest) -> PageResult:
    """Newest-first page of orders, optionally filtered by status and search."""
    page = await order_listing.run(SqlCollection(db, Order), request)
    logger.debug("Orders fetched: %d/%d", len(page.items), page.total_count)
    return page


async def get_order(db: AsyncSession, order_id: str) -> Order:
    """Get an order by ID or raise 404."""
    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()
    if not order:
        raise OrderNotFoundError(order_id)
    return order


async def create_order(db: AsyncSession, req: OrderCreateRequest) -> Order:
    order = Order(
        customer_name=req.customer_name,
        customer_phone=req.customer_phone,
        customer_address=req.customer_address,
        items=json.dumps([item.model_dump() for item in req.items]),
        total_amount=req.total_amount,
        status=req.status,
        order_date=datetime.now(timezone.utc),
    )
    db.add(order)
    await db.commit()
    await db.refresh(order)
    logger.info("Order created: %s", order.id)
    return order


async def update_order_status(db: AsyncSession, order_id: str, status: str) -> Order:
    order = await get_order(db, order_id)
    order.status = status
    order.updated_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(order)
    logger.info("Order %s status updated to: %s", order_id, status)
    return order


async def delete_order(db: AsyncSession, order_id: str) -> Order:
    """Hard-delete an order and return the removed row."""
    order = await get_order(db, order_id)
    await db.delete(order)
    await db.commit()
    logger.info("Order %s deleted", order_id)
    return order


def order_items(order: Order) -> list[dict]:
    items = order.items
    if isinstance(items, str):
        items = json.loads(items)
    return items or []
