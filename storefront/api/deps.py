from fastapi import Query, Request

from storefront.config import Settings
from storefront.core.listing_query import ListingRequest
from storefront.schemas.product import ProductListFilters
from storefront.services.telegram_service import TelegramNotifier


def listing_request(
    page: str | None = Query(None, description="Page number (1-based); malformed values fall back to 1"),
    limit: str | None = Query(None, description="Items per page, clamped to 1..1000 (default 50)"),
    status: str | None = Query(None, description='Exact status to match, or "all"'),
    search: str | None = Query(None, description="Case-insensitive substring search"),
) -> ListingRequest:
    # Raw strings on purpose: bad paging input is clamped, not rejected with 422.
    return ListingRequest(page=page, limit=limit, status_filter=status, search_term=search)


def product_filters(
    category: str | None = Query(None, description="Category, matched case-insensitively"),
    min_price: str | None = Query(None, alias="minPrice"),
    max_price: str | None = Query(None, alias="maxPrice"),
    in_stock: str | None = Query(None, alias="inStock", description='"true" keeps only stock > 0'),
    is_popular: str | None = Query(None, alias="isPopular"),
    is_new: str | None = Query(None, alias="isNew"),
    badge: str | None = Query(None),
) -> ProductListFilters:
    return ProductListFilters(
        category=category,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        is_popular=is_popular,
        is_new=is_new,
        badge=badge,
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier
