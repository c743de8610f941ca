"""
Shared data models: slides, collections, flows and stored text content.

Wire format is camelCase (``slideIds``, ``createdAt``) to match the storage API;
Python code uses snake_case attribute names.
"""

from datetime import UTC, datetime
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import CollectionKind, FlowItemType, TextField


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict using the API field names."""
        return self.model_dump(mode="json", by_alias=True)


class Slide(CamelModel):
    """A single projected slide."""

    id: str
    title: str
    html: str
    order: int = 1
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class CollectionRef(BaseModel):
    """Tagged reference to a collection: Song(id) | Sermon(id) | AssetDeck(id)."""

    model_config = ConfigDict(frozen=True)

    kind: CollectionKind
    id: str

    @classmethod
    def song(cls, collection_id: str) -> "CollectionRef":
        return cls(kind=CollectionKind.SONG, id=collection_id)

    @classmethod
    def sermon(cls, collection_id: str) -> "CollectionRef":
        return cls(kind=CollectionKind.SERMON, id=collection_id)

    @classmethod
    def asset_deck(cls, collection_id: str) -> "CollectionRef":
        return cls(kind=CollectionKind.ASSET_DECK, id=collection_id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


class Collection(CamelModel):
    """Named, ordered container of slides."""

    kind: ClassVar[CollectionKind]

    id: str
    title: str
    description: str | None = ""
    slide_ids: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def ref(self) -> CollectionRef:
        return CollectionRef(kind=self.kind, id=self.id)

    def with_slides(self, slide_ids: list[str]) -> "Collection":
        """Copy of this collection with a new slide list and a bumped ``updated_at``."""
        return self.model_copy(update={"slide_ids": list(slide_ids), "updated_at": utc_now()})


class Song(Collection):
    kind: ClassVar[CollectionKind] = CollectionKind.SONG


class Sermon(Collection):
    kind: ClassVar[CollectionKind] = CollectionKind.SERMON


class AssetDeck(Collection):
    kind: ClassVar[CollectionKind] = CollectionKind.ASSET_DECK

    autoplay: bool = False
    autoplay_loop: bool = True
    autoplay_time_in_s: int = Field(default=10, gt=0)


COLLECTION_MODELS: dict[CollectionKind, type[Collection]] = {
    CollectionKind.SONG: Song,
    CollectionKind.SERMON: Sermon,
    CollectionKind.ASSET_DECK: AssetDeck,
}


def collection_from_wire(kind: CollectionKind, data: dict[str, Any]) -> Collection:
    """Build the right collection model for ``kind`` from an API row."""
    return COLLECTION_MODELS[kind].model_validate(data)


class CollectionFlowItem(CamelModel):
    type: Literal["collection"] = FlowItemType.COLLECTION.value
    id: str
    title: str
    order: int = 0
    collection_kind: CollectionKind | None = None


class NoteFlowItem(CamelModel):
    type: Literal["note"] = FlowItemType.NOTE.value
    id: str
    title: str
    note: str = ""
    order: int = 0


FlowItem = Annotated[Union[CollectionFlowItem, NoteFlowItem], Field(discriminator="type")]


class Flow(CamelModel):
    """Ordered script of collections and notes for a whole service."""

    id: str
    title: str
    description: str | None = ""
    flow_items: list[FlowItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ContentRecord(CamelModel):
    """Raw rich text owned by a collection item (lyrics, sermon notes)."""

    item_id: str
    item_type: str
    content: str = ""
    storage_key: str


def storage_key(item_type: str, field: TextField | str, item_id: str) -> str:
    """Storage key ``{itemType}-{field}-{itemId}`` for a text field."""
    field_name = field.value if isinstance(field, TextField) else field
    return f"{item_type}-{field_name}-{item_id}"


def content_keys_for(ref: CollectionRef) -> list[str]:
    """Every storage key a collection can own."""
    return [storage_key(ref.kind.item_type, field, ref.id) for field in TextField]


# --- API request/response models ---


class CollectionUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    slide_ids: list[str] | None = None
    autoplay: bool | None = None
    autoplay_loop: bool | None = None
    autoplay_time_in_s: int | None = Field(default=None, gt=0)


class FlowUpdate(CamelModel):
    title: str | None = None
    description: str | None = None
    flow_items: list[FlowItem] | None = None


class SlideUpdate(CamelModel):
    title: str | None = None
    html: str | None = None
    order: int | None = None


class UpdateResponse(CamelModel):
    success: bool = True
    updated_at: datetime


class SuccessResponse(BaseModel):
    success: bool = True


class ContentResponse(BaseModel):
    content: str = ""


class HealthResponse(BaseModel):
    """Liveness probe answer."""

    status: str = Field(..., description="Service status")
    timestamp: str = Field(..., description="Server time (ISO 8601)")


class NormalizeRequest(BaseModel):
    content: str = Field(..., max_length=200000, description="Raw rich text or plain text")


class SegmentResponse(BaseModel):
    normalized: str
    segments: list[str]


class PreviewRequest(CamelModel):
    owner_id: str
    owner_title: str
    content: str = Field(..., max_length=200000)
    background_url: str | None = None


class PreviewResponse(BaseModel):
    slides: list[Slide]
