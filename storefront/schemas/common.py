from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from storefront.core.listing_query import PageResult


class CamelModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case accepted too."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class PaginationMeta(CamelModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def from_page(cls, page: PageResult) -> "PaginationMeta":
        return cls(
            current_page=page.current_page,
            total_pages=page.total_pages,
            total_count=page.total_count,
            limit=page.limit,
            has_next_page=page.has_next_page,
            has_prev_page=page.has_prev_page,
        )


class MessageResponse(CamelModel):
    message: str


class HealthResponse(CamelModel):
    status: str
    version: str
    environment: str
    uptime_seconds: float
    products_count: int
    orders_count: int
    craftsmen_count: int
