"""Per-field editing state machine with trailing-edge debounce.

``IDLE -> EDITING -> DEBOUNCED_SAVE -> REGENERATING -> IDLE``. Text that arrives
while a save is running queues one more cycle with the newest text, so the
last edit is always saved at least once.
"""

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

from shared.config import config
from shared.enums import TextField
from shared.models import CollectionRef
from shared.utils import setup_logging

logger = setup_logging("editor-sync")

SaveCallback = Callable[[str], Awaitable[object]]


class FieldState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    DEBOUNCED_SAVE = "debounced_save"
    REGENERATING = "regenerating"


class TextFieldSync:
    """Debounces edits to one text field and runs ``on_save`` with the latest text."""

    def __init__(self, on_save: SaveCallback, debounce_seconds: float | None = None) -> None:
        self.on_save = on_save
        if debounce_seconds is None:
            debounce_seconds = float(config.get_presentation_value("sync.debounce_seconds", 1.0))
        self.debounce_seconds = debounce_seconds
        self.state = FieldState.IDLE
        self.latest_text: str | None = None
        self.saves_completed = 0
        self._pending_rerun = False
        self._timer: asyncio.Task | None = None
        self._worker: asyncio.Task | None = None

    def on_text_changed(self, text: str) -> None:
        """Record an edit and restart the debounce timer."""
        self.latest_text = text
        if self.state is FieldState.REGENERATING:
            self._pending_rerun = True
            return
        self.state = FieldState.EDITING
        self._cancel_timer()
        self._timer = asyncio.create_task(self._debounce())

    async def flush(self) -> None:
        """Save immediately (e.g. after a paste) and wait for the cycle to finish."""
        self._cancel_timer()
        if self.latest_text is None:
            return
        if self.state is FieldState.REGENERATING:
            self._pending_rerun = True
        else:
            self._start_worker()
        await self.wait_idle()

    async def wait_idle(self) -> None:
        while self._timer is not None or self._worker is not None:
            await asyncio.gather(
                *[t for t in (self._timer, self._worker) if t is not None],
                return_exceptions=True,
            )

    def cancel(self) -> None:
        """Drop a pending save (owner view closed); a running save finishes."""
        self._cancel_timer()
        if self.state in (FieldState.EDITING, FieldState.DEBOUNCED_SAVE):
            self.state = FieldState.IDLE

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounce(self) -> None:
        try:
            await asyncio.sleep(self.debounce_seconds)
        except asyncio.CancelledError:
            return
        self._timer = None
        if self.state is not FieldState.REGENERATING:
            self.state = FieldState.DEBOUNCED_SAVE
        self._start_worker()

    def _start_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run())
        else:
            self._pending_rerun = True

    async def _run(self) -> None:
        try:
            while True:
                self.state = FieldState.REGENERATING
                self._pending_rerun = False
                text = self.latest_text or ""
                try:
                    await self.on_save(text)
                    self.saves_completed += 1
                except Exception as e:
                    logger.error(f"Saving edited text failed: {e!r}")
                if not self._pending_rerun:
                    break
        finally:
            self.state = FieldState.IDLE
            self._worker = None


class EditorSyncHub:
    """Routes ``on_text_changed(owner, field, text)`` messages to per-field machines."""

    def __init__(
        self,
        save: Callable[[CollectionRef, TextField, str], Awaitable[object]],
        debounce_seconds: float | None = None,
    ) -> None:
        self._save = save
        self.debounce_seconds = debounce_seconds
        self._fields: dict[tuple[CollectionRef, TextField], TextFieldSync] = {}

    def field(self, ref: CollectionRef, field: TextField) -> TextFieldSync:
        key = (ref, field)
        if key not in self._fields:

            async def on_save(text: str) -> object:
                return await self._save(ref, field, text)

            self._fields[key] = TextFieldSync(on_save, self.debounce_seconds)
        return self._fields[key]

    def on_text_changed(self, ref: CollectionRef, field: TextField, text: str) -> None:
        self.field(ref, field).on_text_changed(text)

    async def flush(self, ref: CollectionRef, field: TextField) -> None:
        await self.field(ref, field).flush()

    def state(self, ref: CollectionRef, field: TextField) -> FieldState:
        sync = self._fields.get((ref, field))
        return sync.state if sync else FieldState.IDLE

    def forget(self, ref: CollectionRef) -> None:
        """Drop the machines of a deleted collection."""
        for key in [k for k in self._fields if k[0] == ref]:
            self._fields.pop(key).cancel()

    async def wait_idle(self) -> None:
        await asyncio.gather(*(sync.wait_idle() for sync in self._fields.values()))

    async def close(self) -> None:
        """Flush every field with unsaved text, then stop."""
        for sync in self._fields.values():
            if sync.state in (FieldState.EDITING, FieldState.DEBOUNCED_SAVE):
                await sync.flush()
        await self.wait_idle()
