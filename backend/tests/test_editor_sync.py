"""Tests for the per-field editing state machine."""

import asyncio

import pytest

from services.slide_sync.editor_sync import EditorSyncHub, FieldState, TextFieldSync
from shared.enums import TextField
from shared.models import CollectionRef


class Recorder:
    """Save callback that records texts and can be held open."""

    def __init__(self):
        self.saved: list[str] = []
        self.release = asyncio.Event()
        self.release.set()
        self.started = asyncio.Event()

    async def __call__(self, text: str):
        self.started.set()
        await self.release.wait()
        self.saved.append(text)


class TestTextFieldSync:
    @pytest.mark.asyncio
    async def test_trailing_edge_debounce_saves_latest_text_once(self):
        recorder = Recorder()
        sync = TextFieldSync(recorder, debounce_seconds=0.05)

        for text in ("A", "Am", "Ama", "Amazing"):
            sync.on_text_changed(text)
            assert sync.state is FieldState.EDITING
        await asyncio.sleep(0.01)
        assert recorder.saved == []

        await asyncio.sleep(0.1)
        await sync.wait_idle()

        assert recorder.saved == ["Amazing"]
        assert sync.state is FieldState.IDLE
        assert sync.saves_completed == 1

    @pytest.mark.asyncio
    async def test_edits_during_regeneration_queue_another_cycle(self):
        recorder = Recorder()
        recorder.release.clear()
        sync = TextFieldSync(recorder, debounce_seconds=0.01)

        sync.on_text_changed("first")
        await recorder.started.wait()
        assert sync.state is FieldState.REGENERATING

        sync.on_text_changed("second")
        sync.on_text_changed("third")
        recorder.release.set()
        await sync.wait_idle()

        assert recorder.saved == ["first", "third"]
        assert sync.state is FieldState.IDLE

    @pytest.mark.asyncio
    async def test_flush_saves_immediately(self):
        recorder = Recorder()
        sync = TextFieldSync(recorder, debounce_seconds=10)

        sync.on_text_changed("pasted text")
        await sync.flush()

        assert recorder.saved == ["pasted text"]
        assert sync.state is FieldState.IDLE

    @pytest.mark.asyncio
    async def test_flush_without_edits_is_a_no_op(self):
        recorder = Recorder()
        await TextFieldSync(recorder, debounce_seconds=0.01).flush()
        assert recorder.saved == []

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_save(self):
        recorder = Recorder()
        sync = TextFieldSync(recorder, debounce_seconds=0.05)

        sync.on_text_changed("abandoned")
        sync.cancel()
        await asyncio.sleep(0.1)

        assert recorder.saved == []
        assert sync.state is FieldState.IDLE

    @pytest.mark.asyncio
    async def test_failed_save_returns_to_idle(self, caplog):
        async def failing(text):
            raise RuntimeError("storage offline")

        sync = TextFieldSync(failing, debounce_seconds=0.01)
        sync.on_text_changed("x")
        await sync.flush()

        assert sync.state is FieldState.IDLE
        assert sync.saves_completed == 0
        assert "storage offline" in caplog.text

    @pytest.mark.asyncio
    async def test_debounce_defaults_to_config(self):
        assert TextFieldSync(Recorder()).debounce_seconds == 1.0


class TestEditorSyncHub:
    @pytest.mark.asyncio
    async def test_routes_by_owner_and_field(self):
        calls = []

        async def save(ref, field, text):
            calls.append((ref.id, field, text))

        hub = EditorSyncHub(save, debounce_seconds=0.01)
        song, sermon = CollectionRef.song("s1"), CollectionRef.sermon("m1")

        hub.on_text_changed(song, TextField.LYRICS, "la la")
        hub.on_text_changed(sermon, TextField.NOTES, "point one")
        await asyncio.sleep(0.05)
        await hub.wait_idle()

        assert sorted(calls) == [("m1", TextField.NOTES, "point one"), ("s1", TextField.LYRICS, "la la")]
        assert hub.state(song, TextField.LYRICS) is FieldState.IDLE

    @pytest.mark.asyncio
    async def test_close_flushes_unsaved_fields(self):
        calls = []

        async def save(ref, field, text):
            calls.append(text)

        hub = EditorSyncHub(save, debounce_seconds=10)
        hub.on_text_changed(CollectionRef.song("s1"), TextField.LYRICS, "unsaved")
        await hub.close()

        assert calls == ["unsaved"]

    @pytest.mark.asyncio
    async def test_forget_cancels_pending_edits(self):
        calls = []

        async def save(ref, field, text):
            calls.append(text)

        hub = EditorSyncHub(save, debounce_seconds=0.05)
        ref = CollectionRef.song("deleted")
        hub.on_text_changed(ref, TextField.LYRICS, "gone")
        hub.forget(ref)
        await asyncio.sleep(0.1)

        assert calls == []
        assert hub.state(ref, TextField.LYRICS) is FieldState.IDLE
