from datetime import datetime

from pydantic import Field

from storefront.schemas.common import CamelModel, PaginationMeta

_STATUS_PATTERN = "^(active|inactive|busy)$"


class CraftsmanCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    specialty: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=50)
    status: str = Field(default="active", pattern=_STATUS_PATTERN)
    join_date: datetime | None = None
    rating: float = Field(default=0, ge=0, le=5)
    completed_jobs: int = Field(default=0, ge=0)
    avatar: str | None = None
    portfolio: list[str] = []
    description: str = ""


class CraftsmanUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    specialty: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, min_length=1, max_length=50)
    status: str | None = Field(default=None, pattern=_STATUS_PATTERN)
    rating: float | None = Field(default=None, ge=0, le=5)
    completed_jobs: int | None = Field(default=None, ge=0)
    avatar: str | None = None
    portfolio: list[str] | None = None
    description: str | None = None


class CraftsmanResponse(CamelModel):
    id: str
    name: str
    specialty: str
    phone: str
    status: str
    join_date: datetime
    rating: float
    completed_jobs: int
    avatar: str | None = None
    portfolio: list[str]
    description: str
    created_at: datetime
    updated_at: datetime


class CraftsmanListResponse(CamelModel):
    craftsmen: list[CraftsmanResponse]
    pagination: PaginationMeta
