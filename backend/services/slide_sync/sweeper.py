"""Remove slides that no collection references."""

from collections.abc import Iterable

from services.slide_sync.library import Library
from services.slide_sync.reconciler import PERSISTENCE_ERRORS
from services.slide_sync.storage import StorageBackend
from shared.models import Collection, Slide
from shared.utils import setup_logging

logger = setup_logging("orphan-sweeper")


def referenced_slide_ids(collections: Iterable[Collection]) -> set[str]:
    return {slide_id for collection in collections for slide_id in collection.slide_ids}


def sweep(all_slides: Iterable[Slide], all_collections: Iterable[Collection]) -> list[str]:
    """Ids of orphaned slides, in the order the slides were given."""
    referenced = referenced_slide_ids(all_collections)
    return [slide.id for slide in all_slides if slide.id not in referenced]


class OrphanSweeper:
    """Apply sweeps to the local library and the backing store."""

    def __init__(self, storage: StorageBackend) -> None:
        self.storage = storage

    async def _delete(self, library: Library, slide_ids: list[str]) -> list[str]:
        library.remove_slides(slide_ids)
        for slide_id in slide_ids:
            try:
                await self.storage.delete_slide(slide_id)
            except PERSISTENCE_ERRORS as e:
                logger.error(f"Failed to delete orphaned slide {slide_id}: {e}")
        return slide_ids

    async def run(self, library: Library) -> list[str]:
        """Delete every unreferenced slide; returns the ids removed."""
        orphans = sweep(library.slides.values(), library.collections())
        if orphans:
            logger.info(f"Removing {len(orphans)} orphaned slides")
        return await self._delete(library, orphans)

    async def startup(self, library: Library) -> list[str]:
        """First sweep after the initial load.

        With no collection of any kind, every stored slide is leftover state
        from an earlier session and is cleared outright.
        """
        if not library.has_collections():
            leftovers = list(library.slides)
            if leftovers:
                logger.info(f"No collections found; clearing {len(leftovers)} leftover slides")
            return await self._delete(library, leftovers)
        return await self.run(library)
