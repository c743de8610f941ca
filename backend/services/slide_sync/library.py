"""In-memory working set of collections and slides held by an editing client."""

from collections.abc import Iterable

from shared.enums import CollectionKind
from shared.models import Collection, CollectionRef, Slide


class Library:
    """Local state the editor reads from; storage is synced behind it."""

    def __init__(
        self,
        collections: Iterable[Collection] = (),
        slides: Iterable[Slide] = (),
    ) -> None:
        self._collections: dict[CollectionKind, dict[str, Collection]] = {
            kind: {} for kind in CollectionKind
        }
        self.slides: dict[str, Slide] = {}
        for collection in collections:
            self.put(collection)
        self.put_slides(slides)

    def find(self, ref: CollectionRef) -> Collection | None:
        """Single lookup for any collection kind."""
        return self._collections[ref.kind].get(ref.id)

    def put(self, collection: Collection) -> None:
        self._collections[collection.kind][collection.id] = collection

    def remove(self, ref: CollectionRef) -> Collection | None:
        return self._collections[ref.kind].pop(ref.id, None)

    def collections(self, kind: CollectionKind | None = None) -> list[Collection]:
        if kind is not None:
            return list(self._collections[kind].values())
        return [c for by_id in self._collections.values() for c in by_id.values()]

    def replace_collections(self, kind: CollectionKind, collections: Iterable[Collection]) -> None:
        self._collections[kind] = {c.id: c for c in collections}

    def has_collections(self) -> bool:
        return any(self._collections[kind] for kind in CollectionKind)

    def put_slides(self, slides: Iterable[Slide]) -> None:
        for slide in slides:
            self.slides[slide.id] = slide

    def remove_slides(self, slide_ids: Iterable[str]) -> None:
        for slide_id in slide_ids:
            self.slides.pop(slide_id, None)

    def slides_for(self, ref: CollectionRef) -> list[Slide]:
        """Slides of a collection in presentation order; dangling ids are skipped."""
        owner = self.find(ref)
        if owner is None:
            return []
        return [self.slides[sid] for sid in owner.slide_ids if sid in self.slides]
