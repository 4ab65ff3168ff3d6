import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String, Text

from storefront.database import Base


def utcnow():
    return datetime.now(timezone.utc)


class Craftsman(Base):
    __tablename__ = "craftsmen"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    specialty = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="active")  # active | inactive | busy
    join_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    rating = Column(Numeric(3, 2), nullable=False, default=0)
    completed_jobs = Column(Integer, nullable=False, default=0)
    avatar = Column(String(500), nullable=True)
    portfolio = Column(Text, default="[]")  # JSON array of image paths/URLs
    description = Column(Text, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_craftsmen_status_join", "status", "join_date"),
        Index("idx_craftsmen_specialty", "specialty"),
    )
