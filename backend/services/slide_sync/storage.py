"""Persistence collaborators used by the slide sync pipeline.

All writes are last-write-wins. There is no retry queue: a failed write is
reported as ``StorageError`` and callers log and move on.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from shared.cache import Cache
from shared.config import config
from shared.enums import CollectionKind
from shared.http_client import AsyncHTTPClient
from shared.models import (
    Collection,
    CollectionRef,
    ContentRecord,
    Flow,
    Slide,
    collection_from_wire,
)
from shared.utils import setup_logging

logger = setup_logging("slide-sync-storage")


class StorageError(Exception):
    """Raised when the backing store cannot complete an operation."""


class StorageBackend(ABC):
    """CRUD surface the reconciler, sweeper and sync service rely on."""

    @abstractmethod
    async def list_collections(self, kind: CollectionKind) -> list[Collection]:
        pass

    @abstractmethod
    async def create_collection(self, collection: Collection) -> Collection:
        pass

    @abstractmethod
    async def update_collection(self, collection: Collection) -> None:
        pass

    @abstractmethod
    async def delete_collection(self, ref: CollectionRef) -> None:
        pass

    @abstractmethod
    async def list_slides(self) -> list[Slide]:
        pass

    @abstractmethod
    async def save_slide(self, slide: Slide) -> Slide:
        """Upsert by slide id."""
        pass

    @abstractmethod
    async def delete_slide(self, slide_id: str) -> None:
        pass

    @abstractmethod
    async def get_content(self, storage_key: str) -> str:
        """Stored text for ``storage_key``; empty string when absent."""
        pass

    @abstractmethod
    async def save_content(self, record: ContentRecord) -> None:
        pass

    @abstractmethod
    async def delete_content(self, storage_key: str) -> None:
        pass

    @abstractmethod
    async def list_flows(self) -> list[Flow]:
        pass

    @abstractmethod
    async def save_flow(self, flow: Flow) -> Flow:
        pass

    @abstractmethod
    async def delete_flow(self, flow_id: str) -> None:
        pass

    async def health(self) -> bool:
        """Whether the store is reachable."""
        return True


class LocalStorage(StorageBackend):
    """In-process store: local-only cache and test double."""

    def __init__(self) -> None:
        self.collections: dict[CollectionKind, dict[str, Collection]] = {
            kind: {} for kind in CollectionKind
        }
        self.slides: dict[str, Slide] = {}
        self.content: dict[str, ContentRecord] = {}
        self.flows: dict[str, Flow] = {}

    async def list_collections(self, kind: CollectionKind) -> list[Collection]:
        return [c.model_copy(deep=True) for c in self.collections[kind].values()]

    async def create_collection(self, collection: Collection) -> Collection:
        stored = collection.model_copy(deep=True)
        self.collections[collection.kind][collection.id] = stored
        return stored.model_copy(deep=True)

    async def update_collection(self, collection: Collection) -> None:
        if collection.id not in self.collections[collection.kind]:
            raise StorageError(f"{collection.ref} does not exist")
        self.collections[collection.kind][collection.id] = collection.model_copy(deep=True)

    async def delete_collection(self, ref: CollectionRef) -> None:
        self.collections[ref.kind].pop(ref.id, None)

    async def list_slides(self) -> list[Slide]:
        return sorted((s.model_copy() for s in self.slides.values()), key=lambda s: s.order)

    async def save_slide(self, slide: Slide) -> Slide:
        self.slides[slide.id] = slide.model_copy()
        return slide

    async def delete_slide(self, slide_id: str) -> None:
        self.slides.pop(slide_id, None)

    async def get_content(self, storage_key: str) -> str:
        record = self.content.get(storage_key)
        return record.content if record else ""

    async def save_content(self, record: ContentRecord) -> None:
        self.content[record.storage_key] = record.model_copy()

    async def delete_content(self, storage_key: str) -> None:
        self.content.pop(storage_key, None)

    async def list_flows(self) -> list[Flow]:
        return [f.model_copy(deep=True) for f in self.flows.values()]

    async def save_flow(self, flow: Flow) -> Flow:
        self.flows[flow.id] = flow.model_copy(deep=True)
        return flow

    async def delete_flow(self, flow_id: str) -> None:
        self.flows.pop(flow_id, None)


class RemoteStorage(StorageBackend):
    """REST client for the storage API (``services.storage.app``).

    Use as an async context manager so the underlying aiohttp session is open.
    """

    def __init__(self, base_url: str | None = None, timeout: int | None = None) -> None:
        self.client = AsyncHTTPClient(
            base_url=base_url or config.get("storage_api_url"),
            timeout=timeout or config.get("http_timeout", 10),
        )

    async def __aenter__(self) -> "RemoteStorage":
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.client.__aexit__(exc_type, exc_val, exc_tb)

    async def _call(self, method: str, endpoint: str, data: Any = None) -> Any:
        send = getattr(self.client, method)
        try:
            if data is None:
                return await send(endpoint)
            return await send(endpoint, data=data)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise StorageError(f"{method.upper()} {endpoint} failed: {e}") from e

    async def list_collections(self, kind: CollectionKind) -> list[Collection]:
        rows = await self._call("get", f"/{kind.resource}")
        return [collection_from_wire(kind, row) for row in rows]

    async def create_collection(self, collection: Collection) -> Collection:
        row = await self._call("post", f"/{collection.kind.resource}", collection.to_wire())
        return collection_from_wire(collection.kind, row)

    async def update_collection(self, collection: Collection) -> None:
        await self._call(
            "put", f"/{collection.kind.resource}/{collection.id}", collection.to_wire()
        )

    async def delete_collection(self, ref: CollectionRef) -> None:
        await self._call("delete", f"/{ref.kind.resource}/{ref.id}")

    async def list_slides(self) -> list[Slide]:
        rows = await self._call("get", "/slides")
        return [Slide.model_validate(row) for row in rows]

    async def save_slide(self, slide: Slide) -> Slide:
        row = await self._call("post", "/slides", slide.to_wire())
        return Slide.model_validate(row)

    async def delete_slide(self, slide_id: str) -> None:
        await self._call("delete", f"/slides/{slide_id}")

    async def get_content(self, storage_key: str) -> str:
        body = await self._call("get", f"/content/{storage_key}")
        return (body or {}).get("content") or ""

    async def save_content(self, record: ContentRecord) -> None:
        await self._call("post", "/content", record.to_wire())

    async def delete_content(self, storage_key: str) -> None:
        await self._call("delete", f"/content/{storage_key}")

    async def list_flows(self) -> list[Flow]:
        rows = await self._call("get", "/flows")
        return [Flow.model_validate(row) for row in rows]

    async def save_flow(self, flow: Flow) -> Flow:
        existing = {f.id for f in await self.list_flows()}
        if flow.id in existing:
            await self._call("put", f"/flows/{flow.id}", flow.to_wire())
            return flow
        row = await self._call("post", "/flows", flow.to_wire())
        return Flow.model_validate(row)

    async def delete_flow(self, flow_id: str) -> None:
        await self._call("delete", f"/flows/{flow_id}")

    async def health(self) -> bool:
        try:
            body = await self._call("get", "/health")
        except StorageError as e:
            logger.warning(f"Storage health probe failed: {e}")
            return False
        return str((body or {}).get("status", "")).upper() == "OK"


class FallbackStorage(StorageBackend):
    """Remote store gated by its health probe, mirrored into a local store.

    Writes always land locally and go to the remote when it answered the last
    probe. Reads come from the remote when available and refresh the mirror,
    otherwise from the local copy.
    """

    HEALTH_KEY = "remote_available"

    def __init__(
        self,
        remote: StorageBackend,
        local: LocalStorage | None = None,
        health_ttl: float | None = None,
    ) -> None:
        self.remote = remote
        self.local = local or LocalStorage()
        ttl = config.get("health_cache_ttl", 30) if health_ttl is None else health_ttl
        self._health = Cache(default_ttl=ttl)

    async def remote_available(self) -> bool:
        cached = self._health.get(self.HEALTH_KEY)
        if cached is not None:
            return cached
        available = await self.remote.health()
        if not available:
            logger.warning("Remote storage unreachable; using local cache only")
        self._health.set(self.HEALTH_KEY, available)
        return available

    def mark_unavailable(self) -> None:
        self._health.set(self.HEALTH_KEY, False)

    async def _write(self, operation: str, *args: Any) -> Any:
        result = await getattr(self.local, operation)(*args)
        if await self.remote_available():
            try:
                result = await getattr(self.remote, operation)(*args)
            except StorageError as e:
                logger.error(f"Remote {operation} failed, kept local copy only: {e}")
                self.mark_unavailable()
        return result

    async def _read(self, operation: str, *args: Any) -> Any:
        if await self.remote_available():
            try:
                return await getattr(self.remote, operation)(*args)
            except StorageError as e:
                logger.error(f"Remote {operation} failed, reading local cache: {e}")
                self.mark_unavailable()
        return await getattr(self.local, operation)(*args)

    async def list_collections(self, kind: CollectionKind) -> list[Collection]:
        collections = await self._read("list_collections", kind)
        self.local.collections[kind] = {c.id: c.model_copy(deep=True) for c in collections}
        return collections

    async def create_collection(self, collection: Collection) -> Collection:
        return await self._write("create_collection", collection)

    async def update_collection(self, collection: Collection) -> None:
        # Remote rows may exist that the local mirror never saw
        if collection.id not in self.local.collections[collection.kind]:
            await self.local.create_collection(collection)
        await self._write("update_collection", collection)

    async def delete_collection(self, ref: CollectionRef) -> None:
        await self._write("delete_collection", ref)

    async def list_slides(self) -> list[Slide]:
        slides = await self._read("list_slides")
        self.local.slides = {s.id: s.model_copy() for s in slides}
        return slides

    async def save_slide(self, slide: Slide) -> Slide:
        return await self._write("save_slide", slide)

    async def delete_slide(self, slide_id: str) -> None:
        await self._write("delete_slide", slide_id)

    async def get_content(self, storage_key: str) -> str:
        return await self._read("get_content", storage_key)

    async def save_content(self, record: ContentRecord) -> None:
        await self._write("save_content", record)

    async def delete_content(self, storage_key: str) -> None:
        await self._write("delete_content", storage_key)

    async def list_flows(self) -> list[Flow]:
        flows = await self._read("list_flows")
        self.local.flows = {f.id: f.model_copy(deep=True) for f in flows}
        return flows

    async def save_flow(self, flow: Flow) -> Flow:
        return await self._write("save_flow", flow)

    async def delete_flow(self, flow_id: str) -> None:
        await self._write("delete_flow", flow_id)

    async def health(self) -> bool:
        return True
