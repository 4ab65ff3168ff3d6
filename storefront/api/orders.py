from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_notifier, listing_request
from storefront.core.async_tasks import fire_and_forget
from storefront.core.listing_query import ListingRequest
from storefront.database import get_db
from storefront.models.order import Order
from storefront.schemas.common import PaginationMeta
from storefront.schemas.order import (
    OrderCreateRequest,
    OrderDeleteResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdateRequest,
)
from storefront.services import order_service
from storefront.services.telegram_service import TelegramNotifier

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=OrderListResponse)
async def list_orders(
    listing: ListingRequest = Depends(listing_request),
    db: AsyncSession = Depends(get_db),
):
    page = await order_service.list_orders(db, listing)
    return OrderListResponse(
        orders=[_order_to_response(o) for o in page.items],
        pagination=PaginationMeta.from_page(page),
    )


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(
    req: OrderCreateRequest,
    db: AsyncSession = Depends(get_db),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    order = await order_service.create_order(db, req)
    fire_and_forget(notifier.send_order_notification(order), task_name="telegram_order_notification")
    return _order_to_response(order)


@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    req: OrderStatusUpdateRequest,
    db: AsyncSession = Depends(get_db),
    notifier: TelegramNotifier = Depends(get_notifier),
):
    order = await order_service.update_order_status(db, order_id, req.status)
    fire_and_forget(notifier.send_status_update(order, req.status), task_name="telegram_status_update")
    return _order_to_response(order)


@router.delete("/{order_id}", response_model=OrderDeleteResponse)
async def delete_order(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await order_service.delete_order(db, order_id)
    return OrderDeleteResponse(message="Order deleted successfully", deleted_order=_order_to_response(order))


def _order_to_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        customer_address=order.customer_address or "",
        items=order_service.order_items(order),
        total_amount=float(order.total_amount),
        status=order.status,
        order_date=order.order_date,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
