"""Whole-graph checks, run once every line has been interpreted.

Connections are stored as name pairs so nodes can be declared after they
are referenced. Only when the stream is complete can we tell which names
never showed up (check_unknown_nodes) and whether the resolved edges form
a DAG (check_for_loops).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from .errors import CycleError, InvalidGraphError, UnknownNodesError, ValidationError
from .store import GraphStore

if TYPE_CHECKING:
    from .interpreter import DagZet

logger = logging.getLogger(__name__)

Edge = tuple[int, int]


def check_unknown_nodes(store: GraphStore) -> set[str]:
    """Connection endpoints that are neither declared nor external."""
    unknown: set[str] = set()
    for co in store.connections:
        for name in (co.left, co.right):
            if not store.is_known(name):
                unknown.add(name)
    return unknown


def generate_edges(store: GraphStore) -> list[Edge]:
    """Resolve connections to id pairs, dropping any unresolved endpoint."""
    edges: list[Edge] = []
    for co in store.connections:
        left_id = store.get_node_id(co.left)
        right_id = store.get_node_id(co.right)
        if left_id is not None and right_id is not None:
            edges.append((left_id, right_id))
    return edges


def check_for_loops(node_ids: Iterable[int], edges: Iterable[Edge]) -> list[Edge]:
    """Find cycles with a round-based topological sort.

    Each round strips the outgoing edges of every node that has no incoming
    edge left. A target joins the next round only once the whole round's
    removals are done and it has no incoming edge remaining.

    Returns:
        Empty list if the graph is acyclic. Otherwise the edges of direct
        two-node cycles among the leftovers, or every leftover edge when
        the cycle is longer than two nodes.
    """
    edges = list(edges)
    nodes = set(node_ids)

    outgoing: dict[int, list[int]] = {}
    incoming: dict[int, int] = {node: 0 for node in nodes}
    for left, right in edges:
        outgoing.setdefault(left, []).append(right)
        incoming[right] = incoming.get(right, 0) + 1
        incoming.setdefault(left, 0)

    frontier = {node for node, count in incoming.items() if count == 0}
    removed: set[int] = set()  # nodes whose outgoing edges are gone

    while frontier:
        touched: set[int] = set()
        for n in frontier:
            for m in outgoing.get(n, []):
                incoming[m] -= 1
                touched.add(m)
            removed.add(n)

        # Only look at incoming counts after the whole round is applied
        frontier = {m for m in touched if incoming[m] == 0 and m not in removed}

    remaining = [edge for edge in edges if edge[0] not in removed]
    if not remaining:
        return []

    remaining_set = set(remaining)
    loops = [(a, b) for a, b in remaining if (b, a) in remaining_set]
    if loops:
        return loops

    # No mutual pair, so the cycle runs through three or more nodes
    return remaining


def validate(dz: "DagZet") -> list[Edge]:
    """Run every check and raise if any of them failed.

    Returns:
        The resolved edge list, ready for serialization

    Raises:
        UnknownNodesError: some endpoints were never declared
        CycleError: the resolved edges contain a cycle
        InvalidGraphError: both of the above, with each error in `.errors`
    """
    store = dz.store
    errors: list[ValidationError] = []

    unknown = check_unknown_nodes(store)
    if unknown:
        logger.warning(f"Found {len(unknown)} unknown nodes")
        errors.append(UnknownNodesError(unknown))

    # Unresolved endpoints are dropped here, so cycles among declared nodes
    # are still found
    edges = generate_edges(store)
    loops = check_for_loops(store.nodes.values(), edges)
    if loops:
        names = [(store.get_node_name(a), store.get_node_name(b)) for a, b in loops]
        logger.warning(f"Found {len(loops)} edges in cycles")
        errors.append(CycleError(loops, names))

    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise InvalidGraphError(errors)

    logger.debug(
        f"Validated {len(store.nodes)} nodes, {len(edges)} edges "
        f"({len(store.connections)} connections)"
    )
    return edges
