"""
Flow model - ordered order-of-service scripts
"""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, String, Text

from database import Base


class FlowRecord(Base):
    __tablename__ = "flows"

    id = Column(String(255), primary_key=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True, default="")
    flow_items = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC))
