import re
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from storefront.schemas.common import CamelModel, PaginationMeta

_STATUS_PATTERN = "^(active|inactive|draft)$"
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


class ProductCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    old_price: float | None = Field(default=None, ge=0)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    image: str | None = None
    images: list[str] = []
    stock: int = Field(default=0, ge=0)
    unit: str = "dona"
    badge: str | None = None
    rating: float = Field(default=0, ge=0, le=5)
    is_new: bool = False
    is_popular: bool = False
    slug: str | None = None
    status: str = Field(default="active", pattern=_STATUS_PATTERN)


class ProductUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: float | None = Field(default=None, ge=0)
    old_price: float | None = Field(default=None, ge=0)
    description: str | None = None
    category: str | None = Field(default=None, min_length=1, max_length=100)
    image: str | None = None
    images: list[str] | None = None
    stock: int | None = Field(default=None, ge=0)
    unit: str | None = None
    badge: str | None = None
    rating: float | None = Field(default=None, ge=0, le=5)
    is_new: bool | None = None
    is_popular: bool | None = None
    slug: str | None = None
    status: str | None = Field(default=None, pattern=_STATUS_PATTERN)


class ProductListFilters(BaseModel):
    """Catalogue filters from the query string.

    Like paging parameters, malformed values are dropped instead of
    rejected: a non-numeric price bound is ignored and flags are on only
    for the literal ``"true"``.
    """

    model_config = {"frozen": True}

    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    in_stock: bool = False
    is_popular: bool = False
    is_new: bool = False
    badge: str | None = None

    @field_validator("category", "badge", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _lenient_float(cls, value: Any) -> float | None:
        if value is None or isinstance(value, (int, float)):
            return value
        match = _LEADING_FLOAT.match(str(value))
        return float(match.group(1)) if match else None

    @field_validator("in_stock", "is_popular", "is_new", mode="before")
    @classmethod
    def _true_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value or "").strip().lower() == "true"


class ArchiveRequest(CamelModel):
    archived: bool


class ProductResponse(CamelModel):
    id: str
    name: str
    price: float
    old_price: float | None = None
    description: str
    category: str
    image: str | None = None
    images: list[str]
    stock: int
    unit: str
    badge: str | None = None
    rating: float
    is_new: bool
    is_popular: bool
    slug: str | None = None
    status: str
    is_deleted: bool
    created_at: datetime
    updated_at: datetime


class ProductListResponse(CamelModel):
    products: list[ProductResponse]
    pagination: PaginationMeta


class ProductActionResponse(CamelModel):
    message: str
    product: ProductResponse


class CategorySummary(CamelModel):
    category: str
    count: int
    avg_price: float
    min_price: float
    max_price: float


class CategoryListResponse(CamelModel):
    categories: list[CategorySummary]
