"""
Enums and constants used across the application.
"""

from enum import Enum


class CollectionKind(str, Enum):
    """Kinds of slide collections."""

    SONG = "song"
    SERMON = "sermon"
    ASSET_DECK = "asset_deck"

    @property
    def resource(self) -> str:
        """REST resource path segment for this kind."""
        return {
            CollectionKind.SONG: "songs",
            CollectionKind.SERMON: "sermons",
            CollectionKind.ASSET_DECK: "asset-decks",
        }[self]

    @property
    def item_type(self) -> str:
        """Item type used in content storage keys."""
        return self.value.replace("_", "-")


class TextField(str, Enum):
    """Free-text fields owned by a collection."""

    LYRICS = "lyrics"
    NOTES = "notes"


class FlowItemType(str, Enum):
    """Variants of a flow item."""

    COLLECTION = "collection"
    NOTE = "note"
