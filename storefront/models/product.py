import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, Text

from storefront.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    old_price = Column(Numeric(14, 2), nullable=True)
    description = Column(Text, default="")
    category = Column(String(100), nullable=False)
    image = Column(String(500), nullable=True)
    images = Column(Text, default="[]")  # JSON array of image paths/URLs
    stock = Column(Integer, nullable=False, default=0)
    unit = Column(String(30), nullable=False, default="dona")
    badge = Column(String(50), nullable=True)
    rating = Column(Numeric(3, 2), nullable=False, default=0)  # 0.00 to 5.00
    is_new = Column(Boolean, nullable=False, default=False)
    is_popular = Column(Boolean, nullable=False, default=False)
    slug = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active | inactive | draft
    is_deleted = Column(Boolean, nullable=False, default=False)  # products are only ever soft-deleted
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_products_listing", "is_deleted", "status", "created_at"),
        Index("idx_products_category", "category"),
        Index("idx_products_slug", "slug"),
    )
