"""Auto-advancing slide timers, one per collection."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from shared.config import config
from shared.models import AssetDeck, CollectionRef
from shared.utils import setup_logging

logger = setup_logging("autoplay")

AdvanceCallback = Callable[[CollectionRef, str, int], Awaitable[None] | None]


@dataclass
class AutoplayState:
    ref: CollectionRef
    slide_ids: list[str]
    interval_seconds: float
    loop: bool
    position: int = 0


class AutoplayCycler:
    """Repeating interval per collection; must be stopped when the view goes away."""

    def __init__(self) -> None:
        self._tasks: dict[CollectionRef, asyncio.Task] = {}
        self._states: dict[CollectionRef, AutoplayState] = {}

    def start(
        self,
        ref: CollectionRef,
        slide_ids: Sequence[str],
        on_advance: AdvanceCallback,
        interval_seconds: float | None = None,
        loop: bool | None = None,
    ) -> AutoplayState | None:
        """Begin cycling; restarting a collection replaces its previous timer."""
        self.stop(ref)
        if not slide_ids:
            return None
        if interval_seconds is None:
            interval_seconds = float(config.get_presentation_value("autoplay.default_interval_seconds", 10))
        if interval_seconds <= 0:
            raise ValueError("Autoplay interval must be positive")
        if loop is None:
            loop = bool(config.get_presentation_value("autoplay.loop", True))

        state = AutoplayState(ref=ref, slide_ids=list(slide_ids), interval_seconds=interval_seconds, loop=loop)
        self._states[ref] = state
        self._tasks[ref] = asyncio.create_task(self._cycle(state, on_advance))
        logger.info(f"Autoplay started for {ref}: {len(state.slide_ids)} slides every {interval_seconds}s")
        return state

    def start_deck(self, deck: AssetDeck, on_advance: AdvanceCallback) -> AutoplayState | None:
        """Start cycling an asset deck with its own autoplay settings."""
        return self.start(
            deck.ref,
            deck.slide_ids,
            on_advance,
            interval_seconds=deck.autoplay_time_in_s,
            loop=deck.autoplay_loop,
        )

    def is_running(self, ref: CollectionRef) -> bool:
        task = self._tasks.get(ref)
        return task is not None and not task.done()

    def current(self, ref: CollectionRef) -> str | None:
        state = self._states.get(ref)
        return state.slide_ids[state.position] if state else None

    def stop(self, ref: CollectionRef) -> None:
        task = self._tasks.pop(ref, None)
        self._states.pop(ref, None)
        if task is not None and not task.done():
            task.cancel()
            logger.info(f"Autoplay stopped for {ref}")

    def stop_all(self) -> None:
        for ref in list(self._tasks):
            self.stop(ref)

    async def _cycle(self, state: AutoplayState, on_advance: AdvanceCallback) -> None:
        while True:
            await asyncio.sleep(state.interval_seconds)
            next_position = state.position + 1
            if next_position >= len(state.slide_ids):
                if not state.loop:
                    logger.info(f"Autoplay finished for {state.ref}")
                    self._tasks.pop(state.ref, None)
                    return
                next_position = 0
            state.position = next_position
            try:
                result = on_advance(state.ref, state.slide_ids[next_position], next_position)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(f"Autoplay advance failed for {state.ref}: {e!r}")
