"""
Content model - raw lyrics and sermon notes keyed by storage key
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, Text, UniqueConstraint

from database import Base


class ContentRecord(Base):
    """Free text owned by one collection item"""

    __tablename__ = "content"
    __table_args__ = (UniqueConstraint("storage_key", name="uq_content_storage_key"),)

    id = Column(String(255), primary_key=True)
    item_id = Column(String(255), nullable=False, index=True)
    item_type = Column(String(50), nullable=False)
    content = Column(Text, nullable=True, default="")
    storage_key = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
