"""Replace a collection's slides with a freshly synthesised batch."""

import asyncio
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field

import aiohttp

from services.slide_sync.storage import StorageBackend, StorageError
from shared.models import Collection, Slide
from shared.utils import setup_logging

logger = setup_logging("slide-reconciler")

PERSISTENCE_ERRORS = (StorageError, aiohttp.ClientError, asyncio.TimeoutError)


@dataclass
class ReconcileResult:
    """Outcome of one regeneration for an owner collection."""

    updated_owner: Collection
    deleted_slide_ids: set[str] = field(default_factory=set)
    created_slides: list[Slide] = field(default_factory=list)
    failed_operations: list[str] = field(default_factory=list)

    @property
    def cleared(self) -> bool:
        return not self.updated_owner.slide_ids


class SlideReconciler:
    """Delete-all-then-recreate synchronisation of an owner's slide list.

    Persistence is best effort: individual failures are logged and recorded on
    the result while the returned in-memory owner still reflects the new batch.
    """

    def __init__(self, storage: StorageBackend) -> None:
        self.storage = storage

    async def _attempt(self, description: str, operation: Awaitable, result: ReconcileResult) -> bool:
        try:
            await operation
            return True
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to {description}: {e}")
            result.failed_operations.append(description)
            return False

    async def reconcile(self, owner: Collection, new_slides: Sequence[Slide]) -> ReconcileResult:
        obsolete_ids = list(owner.slide_ids)

        cleared_owner = owner.with_slides([])
        result = ReconcileResult(updated_owner=cleared_owner, deleted_slide_ids=set(obsolete_ids))
        await self._attempt(f"clear slides of {owner.ref}", self.storage.update_collection(cleared_owner), result)

        for slide_id in obsolete_ids:
            await self._attempt(f"delete slide {slide_id}", self.storage.delete_slide(slide_id), result)

        if not new_slides:
            logger.info(f"Cleared {len(obsolete_ids)} slides from {owner.ref}")
            return result

        for slide in new_slides:
            await self._attempt(f"save slide {slide.id}", self.storage.save_slide(slide), result)
        result.created_slides = list(new_slides)

        result.updated_owner = cleared_owner.with_slides([s.id for s in new_slides])
        await self._attempt(
            f"update slide list of {owner.ref}",
            self.storage.update_collection(result.updated_owner),
            result,
        )

        logger.info(
            f"Reconciled {owner.ref}: {len(obsolete_ids)} removed, {len(new_slides)} created"
            + (f", {len(result.failed_operations)} persistence failures" if result.failed_operations else "")
        )
        return result
