import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Numeric, String, Text

from storefront.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    customer_address = Column(Text, default="")
    items = Column(Text, nullable=False, default="[]")  # JSON array of ordered line items
    total_amount = Column(Numeric(14, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending | processing | completed | cancelled
    order_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_orders_status_date", "status", "order_date"),
        Index("idx_orders_order_date", "order_date"),
    )
