import json

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import listing_request, product_filters
from storefront.core.listing_query import ListingRequest
from storefront.database import get_db
from storefront.models.product import Product
from storefront.schemas.common import PaginationMeta
from storefront.schemas.product import (
    ArchiveRequest,
    CategoryListResponse,
    ProductActionResponse,
    ProductCreateRequest,
    ProductListFilters,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)
from storefront.services import product_service

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    listing: ListingRequest = Depends(listing_request),
    filters: ProductListFilters = Depends(product_filters),
    db: AsyncSession = Depends(get_db),
):
    page = await product_service.list_products(db, listing, filters)
    return ProductListResponse(
        products=[_product_to_response(p) for p in page.items],
        pagination=PaginationMeta.from_page(page),
    )


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(db: AsyncSession = Depends(get_db)):
    return CategoryListResponse(categories=await product_service.list_categories(db))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, db: AsyncSession = Depends(get_db)):
    product = await product_service.get_product(db, product_id)
    return _product_to_response(product)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(req: ProductCreateRequest, db: AsyncSession = Depends(get_db)):
    product = await product_service.create_product(db, req)
    return _product_to_response(product)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    req: ProductUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.update_product(db, product_id, req)
    return _product_to_response(product)


@router.patch("/{product_id}/archive", response_model=ProductActionResponse)
async def set_archive_status(
    product_id: str,
    req: ArchiveRequest,
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.set_archive_status(db, product_id, req.archived)
    return ProductActionResponse(
        message="Product archived" if req.archived else "Product activated",
        product=_product_to_response(product),
    )


@router.patch("/{product_id}/restore", response_model=ProductActionResponse)
async def restore_product(product_id: str, db: AsyncSession = Depends(get_db)):
    product = await product_service.restore_product(db, product_id)
    return ProductActionResponse(message="Product restored", product=_product_to_response(product))


@router.delete("/{product_id}", response_model=ProductActionResponse)
async def delete_product(product_id: str, db: AsyncSession = Depends(get_db)):
    product = await product_service.soft_delete_product(db, product_id)
    return ProductActionResponse(message="Product archived (soft-delete)", product=_product_to_response(product))


def _product_to_response(product: Product) -> ProductResponse:
    images = product.images
    if isinstance(images, str):
        images = json.loads(images)

    return ProductResponse(
        id=product.id,
        name=product.name,
        price=float(product.price),
        old_price=float(product.old_price) if product.old_price is not None else None,
        description=product.description or "",
        category=product.category,
        image=product.image,
        images=images or [],
        stock=product.stock,
        unit=product.unit,
        badge=product.badge,
        rating=float(product.rating or 0),
        is_new=product.is_new,
        is_popular=product.is_popular,
        slug=product.slug,
        status=product.status,
        is_deleted=product.is_deleted,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )
