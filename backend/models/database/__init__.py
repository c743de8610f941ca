"""
Database models package - SQLAlchemy ORM models
"""

from .collection import AssetDeckRecord, SermonRecord, SongRecord
from .content import ContentRecord
from .flow import FlowRecord
from .slide import SlideRecord

__all__ = [
    "AssetDeckRecord",
    "ContentRecord",
    "FlowRecord",
    "SermonRecord",
    "SlideRecord",
    "SongRecord",
]
