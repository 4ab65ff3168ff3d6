from datetime import datetime

from pydantic import Field

from storefront.schemas.common import CamelModel, PaginationMeta

ORDER_STATUS_PATTERN = "^(pending|processing|completed|cancelled)$"


class OrderItem(CamelModel):
    product_id: str | None = None
    name: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    unit: str = "dona"
    variant_option: str | None = None


class OrderCreateRequest(CamelModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: str = Field(..., min_length=1, max_length=50)
    customer_address: str = ""
    items: list[OrderItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    status: str = Field(default="pending", pattern=ORDER_STATUS_PATTERN)


class OrderStatusUpdateRequest(CamelModel):
    status: str = Field(..., pattern=ORDER_STATUS_PATTERN)


class OrderResponse(CamelModel):
    id: str
    customer_name: str
    customer_phone: str
    customer_address: str
    items: list[OrderItem]
    total_amount: float
    status: str
    order_date: datetime
    created_at: datetime
    updated_at: datetime


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]
    pagination: PaginationMeta


class OrderDeleteResponse(CamelModel):
    message: str
    deleted_order: OrderResponse
