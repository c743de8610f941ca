"""Slide sync service: the operations an editing client performs on its library."""

import asyncio
from collections.abc import Coroutine
from typing import Any
from uuid import uuid4

from services.slide_sync.library import Library
from services.slide_sync.normalizer import normalize, visible_text
from services.slide_sync.reconciler import PERSISTENCE_ERRORS, ReconcileResult, SlideReconciler
from services.slide_sync.segmenter import segment
from services.slide_sync.storage import StorageBackend
from services.slide_sync.sweeper import OrphanSweeper
from services.slide_sync.synthesizer import (
    background_of_first_slide,
    make_manual_slide,
    synthesize,
)
from shared.config import config
from shared.enums import CollectionKind, TextField
from shared.models import (
    COLLECTION_MODELS,
    Collection,
    CollectionRef,
    ContentRecord,
    Slide,
    content_keys_for,
    storage_key,
    utc_now,
)
from shared.utils import setup_logging

logger = setup_logging("slide-sync-service")


class CollectionNotFoundError(Exception):
    """Raised when an operation names a collection the library does not hold."""


def slide_texts(raw_content: str) -> list[str]:
    """Normalise and segment editor content into slide texts.

    When nothing segments out of content that still has visible text, the
    whole visible text becomes one slide if ``sync.single_slide_fallback`` is on.
    """
    segments = segment(normalize(raw_content))
    if segments:
        return segments
    if config.get_presentation_value("sync.single_slide_fallback", True):
        fallback = visible_text(raw_content)
        if fallback:
            logger.info("No blank-line segments found; using whole text as one slide")
            return [fallback]
    return []


class SlideSyncService:
    """Keeps a client's library, its slides and the backing store consistent."""

    def __init__(self, storage: StorageBackend, library: Library | None = None) -> None:
        self.storage = storage
        self.library = library or Library()
        self.reconciler = SlideReconciler(storage)
        self.sweeper = OrphanSweeper(storage)
        self._tasks: set[asyncio.Task] = set()
        self._partial_load = False

    # --- startup ---

    async def load(self) -> Library:
        """Pull every collection and slide from storage, then run the startup sweep.

        Sweeps delete from the backing store, so they only run after a
        complete load. A partial load leaves stored slides untouched until
        the next successful load.
        """
        complete = True
        for kind in CollectionKind:
            try:
                self.library.replace_collections(kind, await self.storage.list_collections(kind))
            except PERSISTENCE_ERRORS as e:
                logger.error(f"Failed to load {kind.resource}: {e}")
                complete = False
        try:
            self.library.slides = {s.id: s for s in await self.storage.list_slides()}
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to load slides: {e}")
            complete = False

        self._partial_load = not complete
        if complete:
            await self.sweeper.startup(self.library)
        else:
            logger.warning("Library only partially loaded; skipping startup sweep")
        logger.info(
            f"Loaded {len(self.library.collections())} collections and {len(self.library.slides)} slides"
        )
        return self.library

    # --- background dispatch ---

    def dispatch(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Run ``coro`` without awaiting it; failures are logged, never raised."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Background sync task failed: {error!r}")

    async def drain(self) -> None:
        """Wait for dispatched work (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # --- text-driven slides ---

    async def regenerate_slides(self, ref: CollectionRef, raw_content: str) -> ReconcileResult | None:
        """Rebuild a collection's slides from its text.

        The background of the current slide #1 is applied to the whole new batch.
        A collection that vanished meanwhile is left alone.
        """
        owner = self.library.find(ref)
        if owner is None:
            logger.warning(f"Skipping regeneration: {ref} no longer exists")
            return None

        background = background_of_first_slide(self.library.slides_for(ref))
        new_slides = synthesize(owner.id, owner.title, slide_texts(raw_content), background)

        result = await self.reconciler.reconcile(owner, new_slides)
        self._apply(result)
        await self.sweep()
        return result

    async def save_text(self, ref: CollectionRef, field: TextField, raw_content: str) -> ReconcileResult | None:
        """Persist a text field; song lyrics also regenerate the song's slides."""
        record = ContentRecord(
            item_id=ref.id,
            item_type=ref.kind.item_type,
            content=raw_content,
            storage_key=storage_key(ref.kind.item_type, field, ref.id),
        )
        try:
            await self.storage.save_content(record)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to save {record.storage_key}: {e}")

        if ref.kind is CollectionKind.SONG and field is TextField.LYRICS:
            return await self.regenerate_slides(ref, raw_content)
        return None

    async def load_text(self, ref: CollectionRef, field: TextField) -> str:
        key = storage_key(ref.kind.item_type, field, ref.id)
        try:
            return await self.storage.get_content(key)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to load {key}: {e}")
            return ""

    async def make_sermon_slide(self, ref: CollectionRef, selected_text: str) -> dict[str, str] | None:
        """Create one slide from selected sermon text and append it to the sermon."""
        text = selected_text.strip()
        owner = self.library.find(ref)
        if owner is None or not text:
            logger.warning(f"Cannot make slide for {ref}: missing sermon or empty selection")
            return None

        slide = make_manual_slide(owner, text)
        updated = owner.with_slides([*owner.slide_ids, slide.id])
        self.library.put_slides([slide])
        self.library.put(updated)

        try:
            await self.storage.save_slide(slide)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to save manual slide {slide.id}: {e}")
        try:
            await self.storage.update_collection(updated)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to update slide list of {ref}: {e}")

        return {"slideId": slide.id, "slideTitle": slide.title, "originalText": text}

    async def clear_slides(self, ref: CollectionRef) -> ReconcileResult | None:
        owner = self.library.find(ref)
        if owner is None:
            return None
        result = await self.reconciler.reconcile(owner, [])
        self._apply(result)
        await self.sweep()
        return result

    def _apply(self, result: ReconcileResult) -> None:
        self.library.remove_slides(result.deleted_slide_ids)
        self.library.put_slides(result.created_slides)
        # Owner deleted while persisting: its new slides stay unreferenced and get swept
        if self.library.find(result.updated_owner.ref) is not None:
            self.library.put(result.updated_owner)

    # --- collection CRUD ---

    async def create_collection(
        self,
        kind: CollectionKind,
        title: str,
        description: str = "",
        collection_id: str | None = None,
        **extra: Any,
    ) -> Collection:
        model = COLLECTION_MODELS[kind]
        collection = model(
            id=collection_id or f"{kind.item_type}-{uuid4().hex[:12]}",
            title=title,
            description=description,
            **extra,
        )
        self.library.put(collection)
        try:
            await self.storage.create_collection(collection)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to create {collection.ref}: {e}")
        await self.sweep()
        return collection

    async def update_collection(self, ref: CollectionRef, **changes: Any) -> Collection:
        owner = self.library.find(ref)
        if owner is None:
            raise CollectionNotFoundError(f"{ref} not found")
        updated = owner.model_copy(update={**changes, "updated_at": utc_now()})
        self.library.put(updated)
        try:
            await self.storage.update_collection(updated)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to update {ref}: {e}")
        await self.sweep()
        return updated

    async def delete_collection(self, ref: CollectionRef) -> Collection | None:
        """Delete a collection, its text content and (via the sweep) its slides."""
        removed = self.library.remove(ref)
        if removed is None:
            return None
        try:
            await self.storage.delete_collection(ref)
        except PERSISTENCE_ERRORS as e:
            logger.error(f"Failed to delete {ref}: {e}")
        for key in content_keys_for(ref):
            try:
                await self.storage.delete_content(key)
            except PERSISTENCE_ERRORS as e:
                logger.error(f"Failed to delete content {key}: {e}")
        await self.sweep()
        return removed

    async def sweep(self) -> list[str]:
        """Delete orphaned slides; a no-op until the library has loaded in full."""
        if self._partial_load:
            logger.warning("Skipping orphan sweep: library only partially loaded")
            return []
        return await self.sweeper.run(self.library)

    def slides_for(self, ref: CollectionRef) -> list[Slide]:
        return self.library.slides_for(ref)
