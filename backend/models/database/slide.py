"""
Slide model - projected slides owned by a collection
"""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from database import Base


class SlideRecord(Base):
    """Slide content; ownership lives in the collections' slide_ids lists"""

    __tablename__ = "slides"

    id = Column(String(255), primary_key=True)
    title = Column(String(500), nullable=False)
    html = Column(Text, nullable=False)
    order_num = Column(Integer, nullable=False, default=1, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
