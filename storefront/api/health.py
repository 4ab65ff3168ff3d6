import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_settings
from storefront.config import APP_VERSION, Settings
from storefront.database import get_db
from storefront.models import Craftsman, Order, Product
from storefront.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    products = (await db.execute(select(func.count(Product.id)))).scalar() or 0
    orders = (await db.execute(select(func.count(Order.id)))).scalar() or 0
    craftsmen = (await db.execute(select(func.count(Craftsman.id)))).scalar() or 0

    return HealthResponse(
        status="ok",
        version=APP_VERSION,
        environment=settings.environment,
        uptime_seconds=round(time.monotonic() - _STARTED_AT, 3),
        products_count=products,
        orders_count=orders,
        craftsmen_count=craftsmen,
    )


@router.get("/health/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """Readiness probe: verifies DB connectivity."""
    try:
        await db.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except Exception:
        logger.exception("Readiness check failed, database unreachable")
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "database": "unavailable"},
        )


@router.get("/ping")
async def ping():
    return {"pong": True, "timestamp": time.time()}
