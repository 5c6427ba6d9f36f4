"""Graph store: node table, connections and per-node attributes.

The store only knows how to hold the graph; cursors (current namespace,
current node, last filename) belong to the interpreter that drives it.
"""

from dataclasses import dataclass, field

from .errors import ConflictError, ReturnCode
from .models import Connection, FileRange, FlashCard, Node


@dataclass
class GraphStore:
    """Accumulated state of a dagzet graph.

    Node bookkeeping is kept twice for O(1) lookups both ways:
    - nodes: qualified name -> id
    - nodelist: id - 1 -> qualified name

    Connections are name pairs so they can point at nodes that are declared
    later; integer edges are produced after the stream ends (validate.py).
    """

    nodes: dict[str, int] = field(default_factory=dict)
    nodelist: list[str] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    xnodes: set[str] = field(default_factory=set)

    # Attributes keyed by node id
    lines: dict[int, list[str]] = field(default_factory=dict)
    node_remarks: dict[int, list[str]] = field(default_factory=dict)
    file_ranges: dict[int, FileRange] = field(default_factory=dict)
    hyperlinks: dict[int, str] = field(default_factory=dict)
    todos: dict[int, str] = field(default_factory=dict)
    tags: dict[int, set[str]] = field(default_factory=dict)
    flashcards: dict[int, FlashCard] = field(default_factory=dict)
    images: dict[int, str] = field(default_factory=dict)
    audio: dict[int, str] = field(default_factory=dict)
    noderefs: dict[int, int] = field(default_factory=dict)  # id -> line number

    # Attributes keyed by something else
    graph_remarks: dict[str, list[str]] = field(default_factory=dict)  # namespace
    connection_remarks: dict[int, list[str]] = field(default_factory=dict)  # index

    # Set of connection pairs, mirrors `connections` for duplicate checks
    _pairs: set[tuple[str, str]] = field(default_factory=set)

    def add_node(self, name: str) -> int:
        """Register a qualified name and return its new id."""
        if name in self.nodes:
            raise ConflictError(name, ReturnCode.NODE_ALREADY_EXISTS)
        node_id = len(self.nodes) + 1
        self.nodelist.append(name)
        self.nodes[name] = node_id
        return node_id

    def get_node_id(self, name: str) -> int | None:
        return self.nodes.get(name)

    def get_node_name(self, node_id: int) -> str:
        return self.nodelist[node_id - 1]

    def get_node(self, name: str) -> Node | None:
        node_id = self.nodes.get(name)
        if node_id is None:
            return None
        return Node(id=node_id, name=name)

    def is_connected(self, left: str, right: str) -> bool:
        """Ordered-pair check: (a, b) and (b, a) are different connections."""
        return (left, right) in self._pairs

    def add_connection(self, left: str, right: str) -> int:
        """Append a connection and return its index."""
        if self.is_connected(left, right):
            raise ConflictError(f"{left} -> {right}", ReturnCode.ALREADY_CONNECTED)
        self.connections.append(Connection(left=left, right=right))
        self._pairs.add((left, right))
        return len(self.connections) - 1

    @property
    def last_connection(self) -> Connection | None:
        return self.connections[-1] if self.connections else None

    def is_known(self, name: str) -> bool:
        """Declared node or intentionally external endpoint."""
        return name in self.nodes or name in self.xnodes

    def check_index_consistency(self) -> list[str]:
        """Validate that the two node indices agree. Returns list of errors.

        This is a debug/test utility; an empty list means consistent.
        """
        errors: list[str] = []

        if len(self.nodelist) != len(self.nodes):
            errors.append(
                f"nodelist has {len(self.nodelist)} entries, nodes has {len(self.nodes)}"
            )

        for position, name in enumerate(self.nodelist, start=1):
            node_id = self.nodes.get(name)
            if node_id is None:
                errors.append(f"nodelist entry {name!r} missing from nodes")
            elif node_id != position:
                errors.append(f"{name!r} has id {node_id}, expected {position}")

        expected_pairs = {c.as_pair() for c in self.connections}
        if len(expected_pairs) != len(self.connections):
            errors.append("duplicate connections present")
        if expected_pairs != self._pairs:
            errors.append("connection pair index out of sync")

        return errors
