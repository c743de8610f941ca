"""SQLAlchemy access for the storage API. Rows go in and out as wire models."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.database import (
    AssetDeckRecord,
    ContentRecord as ContentRow,
    FlowRecord,
    SermonRecord,
    SlideRecord,
    SongRecord,
)
from shared.enums import CollectionKind
from shared.models import (
    COLLECTION_MODELS,
    Collection,
    CollectionUpdate,
    ContentRecord,
    Flow,
    FlowUpdate,
    Slide,
    SlideUpdate,
)

COLLECTION_TABLES = {
    CollectionKind.SONG: SongRecord,
    CollectionKind.SERMON: SermonRecord,
    CollectionKind.ASSET_DECK: AssetDeckRecord,
}

DECK_FIELDS = ("autoplay", "autoplay_loop", "autoplay_time_in_s")


class DuplicateRecordError(Exception):
    """Raised when creating a row whose id is already taken."""


def _now() -> datetime:
    return datetime.now(UTC)


class StorageRepository:
    """CRUD over one database session."""

    def __init__(self, db: Session):
        self.db = db

    # Collections

    def _collection_model(self, kind: CollectionKind, row: Any) -> Collection:
        data = {
            "id": row.id,
            "title": row.title,
            "description": row.description or "",
            "slide_ids": list(row.slide_ids or []),
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
        if kind is CollectionKind.ASSET_DECK:
            data.update({field: getattr(row, field) for field in DECK_FIELDS})
        return COLLECTION_MODELS[kind](**data)

    def list_collections(self, kind: CollectionKind) -> list[Collection]:
        table = COLLECTION_TABLES[kind]
        rows = self.db.execute(select(table).order_by(table.created_at.desc())).scalars().all()
        return [self._collection_model(kind, row) for row in rows]

    def create_collection(self, collection: Collection) -> Collection:
        table = COLLECTION_TABLES[collection.kind]
        if self.db.get(table, collection.id) is not None:
            raise DuplicateRecordError(f"{collection.ref} already exists")

        now = _now()
        row = table(
            id=collection.id,
            title=collection.title,
            description=collection.description or "",
            slide_ids=list(collection.slide_ids),
            created_at=now,
            updated_at=now,
        )
        if collection.kind is CollectionKind.ASSET_DECK:
            for field in DECK_FIELDS:
                setattr(row, field, getattr(collection, field))
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._collection_model(collection.kind, row)

    def update_collection(self, kind: CollectionKind, collection_id: str, changes: CollectionUpdate) -> datetime | None:
        """Apply the fields present in ``changes``; ``None`` when the row is missing."""
        row = self.db.get(COLLECTION_TABLES[kind], collection_id)
        if row is None:
            return None

        for field, value in changes.model_dump(exclude_unset=True).items():
            if field in DECK_FIELDS and kind is not CollectionKind.ASSET_DECK:
                continue
            if field == "description":
                value = value or ""
            elif value is None:
                continue
            if field == "slide_ids":
                value = list(value or [])
            setattr(row, field, value)

        row.updated_at = _now()
        self.db.commit()
        return row.updated_at

    def delete_collection(self, kind: CollectionKind, collection_id: str) -> bool:
        row = self.db.get(COLLECTION_TABLES[kind], collection_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    # Slides

    @staticmethod
    def _slide_model(row: SlideRecord) -> Slide:
        return Slide(
            id=row.id,
            title=row.title,
            html=row.html,
            order=row.order_num,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def list_slides(self) -> list[Slide]:
        rows = self.db.execute(select(SlideRecord).order_by(SlideRecord.order_num)).scalars().all()
        return [self._slide_model(row) for row in rows]

    def upsert_slide(self, slide: Slide) -> Slide:
        now = _now()
        row = self.db.get(SlideRecord, slide.id)
        if row is None:
            row = SlideRecord(id=slide.id, created_at=now)
            self.db.add(row)
        row.title = slide.title
        row.html = slide.html
        row.order_num = slide.order
        row.updated_at = now
        self.db.commit()
        self.db.refresh(row)
        return self._slide_model(row)

    def update_slide(self, slide_id: str, changes: SlideUpdate) -> datetime | None:
        row = self.db.get(SlideRecord, slide_id)
        if row is None:
            return None
        for field, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(row, "order_num" if field == "order" else field, value)
        row.updated_at = _now()
        self.db.commit()
        return row.updated_at

    def delete_slide(self, slide_id: str) -> bool:
        row = self.db.get(SlideRecord, slide_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    # Content

    def _content_row(self, storage_key: str) -> ContentRow | None:
        return self.db.execute(
            select(ContentRow).where(ContentRow.storage_key == storage_key)
        ).scalar_one_or_none()

    def get_content(self, storage_key: str) -> str:
        row = self._content_row(storage_key)
        return (row.content or "") if row else ""

    def save_content(self, record: ContentRecord) -> None:
        now = _now()
        row = self._content_row(record.storage_key)
        if row is None:
            row = ContentRow(id=f"content-{uuid4().hex}", storage_key=record.storage_key, created_at=now)
            self.db.add(row)
        row.item_id = record.item_id
        row.item_type = record.item_type
        row.content = record.content
        row.updated_at = now
        self.db.commit()

    def delete_content(self, storage_key: str) -> bool:
        row = self._content_row(storage_key)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def delete_content_for_item(self, item_type: str, item_id: str) -> int:
        rows = self.db.execute(
            select(ContentRow).where(ContentRow.item_type == item_type, ContentRow.item_id == item_id)
        ).scalars().all()
        for row in rows:
            self.db.delete(row)
        self.db.commit()
        return len(rows)

    # Flows

    @staticmethod
    def _flow_model(row: FlowRecord) -> Flow:
        return Flow(
            id=row.id,
            title=row.title,
            description=row.description or "",
            flow_items=row.flow_items or [],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _items_json(flow_items: list[Any]) -> list[dict[str, Any]]:
        return [item.model_dump(mode="json", by_alias=True) for item in flow_items]

    def list_flows(self) -> list[Flow]:
        rows = self.db.execute(select(FlowRecord).order_by(FlowRecord.created_at.desc())).scalars().all()
        return [self._flow_model(row) for row in rows]

    def create_flow(self, flow: Flow) -> Flow:
        if self.db.get(FlowRecord, flow.id) is not None:
            raise DuplicateRecordError(f"Flow {flow.id} already exists")
        now = _now()
        row = FlowRecord(
            id=flow.id,
            title=flow.title,
            description=flow.description or "",
            flow_items=self._items_json(flow.flow_items),
            created_at=now,
            updated_at=now,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return self._flow_model(row)

    def update_flow(self, flow_id: str, changes: FlowUpdate) -> datetime | None:
        row = self.db.get(FlowRecord, flow_id)
        if row is None:
            return None
        if changes.title is not None:
            row.title = changes.title
        if "description" in changes.model_fields_set:
            row.description = changes.description or ""
        if changes.flow_items is not None:
            row.flow_items = self._items_json(changes.flow_items)
        row.updated_at = _now()
        self.db.commit()
        return row.updated_at

    def delete_flow(self, flow_id: str) -> bool:
        row = self.db.get(FlowRecord, flow_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True
