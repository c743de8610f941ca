"""Operations on flows. Every change leaves item ``order`` dense (1..n)."""

from uuid import uuid4

from shared.models import (
    Collection,
    CollectionFlowItem,
    Flow,
    FlowItem,
    NoteFlowItem,
    utc_now,
)


class FlowItemNotFoundError(Exception):
    """Raised when a flow does not contain the requested item."""


def renumber(items: list[FlowItem]) -> list[FlowItem]:
    """Copies of ``items`` with contiguous ``order`` values in list order."""
    return [item.model_copy(update={"order": position}) for position, item in enumerate(items, start=1)]


def _with_items(flow: Flow, items: list[FlowItem]) -> Flow:
    return flow.model_copy(update={"flow_items": renumber(items), "updated_at": utc_now()})


def ordered_items(flow: Flow) -> list[FlowItem]:
    return sorted(flow.flow_items, key=lambda item: item.order)


def add_collection_item(flow: Flow, collection: Collection, position: int | None = None) -> Flow:
    item = CollectionFlowItem(
        id=collection.id,
        title=collection.title,
        collection_kind=collection.kind,
    )
    return insert_item(flow, item, position)


def add_note_item(flow: Flow, title: str, note: str = "", position: int | None = None) -> Flow:
    item = NoteFlowItem(id=f"note-{uuid4().hex[:12]}", title=title, note=note)
    return insert_item(flow, item, position)


def insert_item(flow: Flow, item: FlowItem, position: int | None = None) -> Flow:
    """Insert at 0-based ``position`` (end when omitted or out of range)."""
    items = ordered_items(flow)
    if position is None or position >= len(items):
        items.append(item)
    else:
        items.insert(max(position, 0), item)
    return _with_items(flow, items)


def _index_of(items: list[FlowItem], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise FlowItemNotFoundError(f"Flow item {item_id} not found")


def remove_item(flow: Flow, item_id: str) -> Flow:
    items = ordered_items(flow)
    del items[_index_of(items, item_id)]
    return _with_items(flow, items)


def move_item(flow: Flow, item_id: str, new_position: int) -> Flow:
    """Move an item to 0-based ``new_position``, clamped to the list bounds."""
    items = ordered_items(flow)
    item = items.pop(_index_of(items, item_id))
    items.insert(min(max(new_position, 0), len(items)), item)
    return _with_items(flow, items)


def remove_collection_references(flow: Flow, collection_id: str) -> Flow:
    """Drop items pointing at a deleted collection."""
    items = [
        item for item in ordered_items(flow)
        if not (isinstance(item, CollectionFlowItem) and item.id == collection_id)
    ]
    if len(items) == len(flow.flow_items):
        return flow
    return _with_items(flow, items)


def format_order_of_service(flow: Flow) -> str:
    """Printable order of service, one numbered line per item, notes indented below."""
    lines = [flow.title, "=" * len(flow.title)]
    for item in ordered_items(flow):
        if isinstance(item, NoteFlowItem):
            lines.append(f"{item.order}. {item.title}")
            lines.extend(f"   {line}" for line in item.note.splitlines() if line.strip())
        else:
            kind = item.collection_kind.value.replace("_", " ").title() if item.collection_kind else "Item"
            lines.append(f"{item.order}. {item.title} ({kind})")
    return "\n".join(lines)
