"""Read-only row views over a finished graph store.

Serializers (export.py, the CLI) consume these instead of reaching into
the store's dicts. Rows come out in a stable order: node rows by id,
attribute rows by node id, connection rows by insertion order.
"""

from __future__ import annotations

from collections.abc import Iterator

from .models import FileRange, FlashCard, Node
from .store import GraphStore
from .validate import generate_edges


def node_rows(store: GraphStore) -> Iterator[Node]:
    for position, name in enumerate(store.nodelist, start=1):
        yield Node(id=position, name=name)


def edge_rows(store: GraphStore) -> list[tuple[int, int]]:
    return generate_edges(store)


def _by_node(mapping: dict) -> Iterator[tuple[int, object]]:
    for key in sorted(mapping):
        yield key, mapping[key]


def line_rows(store: GraphStore) -> Iterator[tuple[int, list[str]]]:
    yield from _by_node(store.lines)


def node_remark_rows(store: GraphStore) -> Iterator[tuple[int, list[str]]]:
    yield from _by_node(store.node_remarks)


def graph_remark_rows(store: GraphStore) -> Iterator[tuple[str, list[str]]]:
    # Namespaces in first-remark order
    yield from store.graph_remarks.items()


def connection_remark_rows(
    store: GraphStore,
) -> Iterator[tuple[int | None, int | None, list[str]]]:
    """(left id, right id, remarks); ids are None for undeclared endpoints."""
    for index in sorted(store.connection_remarks):
        co = store.connections[index]
        yield (
            store.get_node_id(co.left),
            store.get_node_id(co.right),
            store.connection_remarks[index],
        )


def file_range_rows(store: GraphStore) -> Iterator[tuple[int, FileRange]]:
    yield from _by_node(store.file_ranges)


def hyperlink_rows(store: GraphStore) -> Iterator[tuple[int, str]]:
    yield from _by_node(store.hyperlinks)


def todo_rows(store: GraphStore) -> Iterator[tuple[int, str]]:
    yield from _by_node(store.todos)


def tag_rows(store: GraphStore) -> Iterator[tuple[int, str]]:
    """One row per (node, tag) pair."""
    for node_id, tags in _by_node(store.tags):
        for tag in sorted(tags):
            yield node_id, tag


def flashcard_rows(store: GraphStore) -> Iterator[tuple[int, FlashCard]]:
    yield from _by_node(store.flashcards)


def image_rows(store: GraphStore) -> Iterator[tuple[int, str]]:
    yield from _by_node(store.images)


def audio_rows(store: GraphStore) -> Iterator[tuple[int, str]]:
    yield from _by_node(store.audio)


def noderef_rows(
    store: GraphStore,
    start: int = 1,
    end: int | None = None,
) -> Iterator[tuple[int, int]]:
    """(node id, line number) for nodes with ids in [start, end)."""
    for node_id, linum in _by_node(store.noderefs):
        if node_id < start or (end is not None and node_id >= end):
            continue
        yield node_id, linum
