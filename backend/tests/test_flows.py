"""Tests for flow building and order of service output."""

import pytest

from services.flows.builder import (
    FlowItemNotFoundError,
    add_collection_item,
    add_note_item,
    format_order_of_service,
    move_item,
    remove_collection_references,
    remove_item,
    renumber,
)
from shared.models import CollectionFlowItem, Flow, NoteFlowItem, Sermon, Song


@pytest.fixture
def flow():
    flow = Flow(id="flow-sunday", title="Sunday Service")
    flow = add_collection_item(flow, Song(id="song-1", title="Amazing Grace"))
    flow = add_note_item(flow, "Announcements", "Potluck after service\nYouth retreat")
    flow = add_collection_item(flow, Sermon(id="sermon-1", title="Easter Morning"))
    return flow


def _titles(flow):
    return [item.title for item in sorted(flow.flow_items, key=lambda i: i.order)]


class TestFlowBuilder:
    def test_items_are_numbered_densely(self, flow):
        assert [item.order for item in flow.flow_items] == [1, 2, 3]
        assert isinstance(flow.flow_items[0], CollectionFlowItem)
        assert isinstance(flow.flow_items[1], NoteFlowItem)
        assert flow.flow_items[2].collection_kind.value == "sermon"

    def test_insert_at_position(self, flow):
        updated = add_note_item(flow, "Welcome", position=0)
        assert _titles(updated) == ["Welcome", "Amazing Grace", "Announcements", "Easter Morning"]
        assert [item.order for item in updated.flow_items] == [1, 2, 3, 4]

    def test_remove_renumbers(self, flow):
        note_id = flow.flow_items[1].id
        updated = remove_item(flow, note_id)
        assert _titles(updated) == ["Amazing Grace", "Easter Morning"]
        assert [item.order for item in updated.flow_items] == [1, 2]

    def test_move_item(self, flow):
        updated = move_item(flow, "sermon-1", 0)
        assert _titles(updated) == ["Easter Morning", "Amazing Grace", "Announcements"]
        assert [item.order for item in updated.flow_items] == [1, 2, 3]

    def test_move_clamps_position(self, flow):
        updated = move_item(flow, "song-1", 99)
        assert _titles(updated)[-1] == "Amazing Grace"

    def test_unknown_item_raises(self, flow):
        with pytest.raises(FlowItemNotFoundError):
            remove_item(flow, "missing")

    def test_original_flow_is_untouched(self, flow):
        remove_item(flow, "song-1")
        assert len(flow.flow_items) == 3

    def test_remove_collection_references(self, flow):
        updated = remove_collection_references(flow, "song-1")
        assert _titles(updated) == ["Announcements", "Easter Morning"]
        assert remove_collection_references(updated, "unknown") is updated

    def test_renumber_sparse_orders(self):
        items = [
            NoteFlowItem(id="a", title="A", order=5),
            NoteFlowItem(id="b", title="B", order=9),
        ]
        assert [item.order for item in renumber(items)] == [1, 2]


class TestOrderOfService:
    def test_printable_text(self, flow):
        assert format_order_of_service(flow) == "\n".join(
            [
                "Sunday Service",
                "==============",
                "1. Amazing Grace (Song)",
                "2. Announcements",
                "   Potluck after service",
                "   Youth retreat",
                "3. Easter Morning (Sermon)",
            ]
        )


class TestFlowWireFormat:
    def test_round_trips_tagged_items(self, flow):
        wire = flow.to_wire()
        assert wire["flowItems"][1]["type"] == "note"
        assert wire["flowItems"][0]["collectionKind"] == "song"

        restored = Flow.model_validate(wire)
        assert isinstance(restored.flow_items[1], NoteFlowItem)
        assert restored.flow_items[1].note == "Potluck after service\nYouth retreat"
