"""
Collection models - songs, sermons and asset decks
"""

from datetime import UTC, datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from database import Base


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CollectionColumns:
    """Columns shared by every slide collection table"""

    id = Column(String(255), primary_key=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True, default="")
    slide_ids = Column(JSON, nullable=False, default=list)  # Presentation order
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utc_now)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, title={self.title}, slides={len(self.slide_ids or [])})>"


class SongRecord(CollectionColumns, Base):
    __tablename__ = "songs"


class SermonRecord(CollectionColumns, Base):
    __tablename__ = "sermons"


class AssetDeckRecord(CollectionColumns, Base):
    __tablename__ = "asset_decks"

    autoplay = Column(Boolean, nullable=False, default=False)
    autoplay_loop = Column(Boolean, nullable=False, default=True)
    autoplay_time_in_s = Column(Integer, nullable=False, default=10)
