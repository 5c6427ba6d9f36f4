"""Directive interpreter: turns dagzet lines into graph mutations.

Each line is a two-letter opcode, a separator and an argument:

    ns knowledge
    nn python
    ln a programming language
    co $ ../languages

Lines are applied one at a time. A line either applies completely or fails
with a DagZetError and leaves the graph untouched; the caller decides
whether to keep going.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable

from .constants import (
    ARGS_OFFSET,
    CURRENT_NODE_TOKEN,
    MIN_LINE_LENGTH,
    OPCODE_LENGTH,
    RESERVED_OPCODES,
)
from .errors import (
    ConflictError,
    DagZetError,
    InvalidCommandError,
    LineError,
    ParseError,
    ReturnCode,
    StateError,
    UnresolvedReferenceError,
    UnsupportedError,
)
from .models import FileRange, FlashCard, LineResult
from .resolve import ResolveContext, qualify, resolve_connect_token, resolve_cross_token
from .store import GraphStore
from .trie import Trie

logger = logging.getLogger(__name__)

_LINE_NUMBER = re.compile(r"[+-]?[0-9]+")


class DagZet:
    """Stateful builder for one dagzet graph.

    Holds the graph store and the cursors every directive reads:
    - namespace: set by `ns`, prefixes node names
    - curnode: id of the node created by `nn` or picked by `sn`
    - last_filename: remembered by `fr` for "$" reuse

    Several input files can be fed into the same builder; ids keep counting.
    """

    def __init__(self):
        self.store = GraphStore()
        self.namespace: str | None = None
        self.curnode: int | None = None
        self.last_filename: str | None = None

        self._handlers: dict[str, Callable[[str, int | None], None]] = {
            "ns": self._set_namespace,
            "gr": self._graph_remark,
            "nn": self._new_node,
            "ln": self._line,
            "co": self._connect,
            "cr": self._connection_remark,
            "zz": self._comment,
            "rm": self._node_remark,
            "fr": self._file_range,
            "hl": self._hyperlink,
            "td": self._todo,
            "tg": self._tag,
            "sn": self._select_node,
            "cx": self._cross_connect,
            "ff": self._flash_front,
            "fb": self._flash_back,
            "im": self._image,
            "au": self._audio,
        }

    # ─────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────

    def parse_line(self, line: str, linum: int | None = None) -> None:
        """Apply a single directive.

        Args:
            line: One input line without its trailing newline
            linum: 1-based line number, recorded for nodes declared on it

        Raises:
            DagZetError: the directive failed; nothing was changed
        """
        if not line:
            return

        if len(line) < MIN_LINE_LENGTH:
            raise ParseError(f"line too short: {line!r}")

        cmd = line[:OPCODE_LENGTH]
        args = line[ARGS_OFFSET:]

        handler = self._handlers.get(cmd)
        if handler is None:
            if cmd in RESERVED_OPCODES:
                raise UnsupportedError(f"{cmd} command")
            raise InvalidCommandError(cmd)

        handler(args, linum)

    def parse_line_with_result(self, line: str, linum: int | None = None) -> LineResult:
        """Apply a single directive and report the outcome instead of raising."""
        try:
            self.parse_line(line, linum)
        except DagZetError as e:
            logger.debug(f"Rejected directive {line!r}: {e}")
            return LineResult(code=e.code, message=str(e))
        return LineResult()

    def parse_lines(
        self,
        lines: Iterable[str],
        start: int = 1,
        filename: str | None = None,
    ) -> int:
        """Apply lines in order, stopping at the first failure.

        Returns:
            Number of lines consumed

        Raises:
            LineError: wraps the failing directive with its line number and text
        """
        count = 0
        for linum, line in enumerate(lines, start=start):
            try:
                self.parse_line(line, linum)
            except DagZetError as e:
                raise LineError(e, linum, line, filename) from e
            count += 1
        return count

    @property
    def current_path(self) -> str | None:
        """Full path of the selected node, if any."""
        if self.curnode is None:
            return None
        return self.store.get_node_name(self.curnode)

    def context(self) -> ResolveContext:
        """Snapshot of the cursors for address resolution."""
        return ResolveContext(
            namespace=self.namespace,
            current_path=self.current_path,
            last_connection=self.store.last_connection,
        )

    def build_trie(self) -> Trie:
        """Index every declared node for unique-suffix lookup."""
        return Trie.from_paths(self.store.nodelist)

    # ─────────────────────────────────────────────────────────────────────
    # Cursor helpers
    # ─────────────────────────────────────────────────────────────────────

    def _require_namespace(self) -> str:
        if self.namespace is None:
            raise StateError(code=ReturnCode.NAMESPACE_NOT_SET)
        return self.namespace

    def _require_node(self) -> int:
        if self.curnode is None:
            raise StateError(code=ReturnCode.NODE_NOT_SELECTED)
        return self.curnode

    # ─────────────────────────────────────────────────────────────────────
    # Namespace, nodes and connections
    # ─────────────────────────────────────────────────────────────────────

    def _set_namespace(self, args: str, linum: int | None) -> None:
        self.namespace = args

    def _graph_remark(self, args: str, linum: int | None) -> None:
        ns = self._require_namespace()
        self.store.graph_remarks.setdefault(ns, []).append(args)

    def _new_node(self, args: str, linum: int | None) -> None:
        ns = self._require_namespace()
        node_id = self.store.add_node(qualify(ns, args))
        if linum is not None:
            self.store.noderefs[node_id] = linum
        self.curnode = node_id

    def _select_node(self, args: str, linum: int | None) -> None:
        ns = self._require_namespace()
        tokens = args.split()
        if not tokens:
            raise ParseError(code=ReturnCode.NOT_ENOUGH_ARGS)

        name = qualify(ns, tokens[0])
        node_id = self.store.get_node_id(name)
        if node_id is None:
            raise UnresolvedReferenceError(name, ReturnCode.UNKNOWN_NODE)
        self.curnode = node_id

    def _connect(self, args: str, linum: int | None) -> None:
        self._require_namespace()
        tokens = args.split()
        if len(tokens) < 2:
            raise ParseError(code=ReturnCode.NOT_ENOUGH_ARGS)

        ctx = self.context()
        left = resolve_connect_token(tokens[0], ctx)
        right = resolve_connect_token(tokens[1], ctx)
        self.store.add_connection(left, right)

    def _cross_connect(self, args: str, linum: int | None) -> None:
        tokens = args.split()
        if len(tokens) < 2:
            raise ParseError(code=ReturnCode.NOT_ENOUGH_ARGS)

        ctx = self.context()
        left = resolve_cross_token(tokens[0], "left", ctx)
        right = resolve_cross_token(tokens[1], "right", ctx)
        self.store.add_connection(left, right)
        self.store.xnodes.add(left)
        self.store.xnodes.add(right)

    def _connection_remark(self, args: str, linum: int | None) -> None:
        if not self.store.connections:
            raise StateError(code=ReturnCode.NO_CONNECTIONS)
        cid = len(self.store.connections) - 1
        self.store.connection_remarks.setdefault(cid, []).append(args)

    def _comment(self, args: str, linum: int | None) -> None:
        pass

    # ─────────────────────────────────────────────────────────────────────
    # Node attributes
    # ─────────────────────────────────────────────────────────────────────

    def _line(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        self.store.lines.setdefault(curnode, []).append(args)

    def _node_remark(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        self.store.node_remarks.setdefault(curnode, []).append(args)

    def _file_range(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        tokens = args.split()
        if not tokens:
            raise ParseError(code=ReturnCode.NOT_ENOUGH_ARGS)

        if tokens[0] == CURRENT_NODE_TOKEN:
            if self.last_filename is None:
                raise StateError(code=ReturnCode.NO_FILENAME)
            filename = self.last_filename
        else:
            filename = tokens[0]

        start = _parse_line_number(tokens[1]) if len(tokens) >= 2 else None
        end = _parse_line_number(tokens[2]) if len(tokens) >= 3 else None

        if start is not None and end is not None and start > end:
            raise UnresolvedReferenceError(f"{start} > {end}", ReturnCode.BAD_RANGE)

        self.last_filename = filename
        self.store.file_ranges[curnode] = FileRange(filename=filename, start=start, end=end)

    def _hyperlink(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        tokens = args.split()
        if not tokens:
            raise ParseError(code=ReturnCode.NOT_ENOUGH_ARGS)
        self.store.hyperlinks[curnode] = tokens[0]

    def _todo(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        if not args:
            raise ParseError(code=ReturnCode.NOT_ENOUGH_ARGS)
        self.store.todos[curnode] = args

    def _tag(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        existing = self.store.tags.get(curnode, set())

        # Check everything before inserting anything
        new_tags: list[str] = []
        for tag in args.split():
            if tag in existing or tag in new_tags:
                raise ConflictError(tag, ReturnCode.DUPLICATE_TAG)
            new_tags.append(tag)

        if new_tags:
            self.store.tags.setdefault(curnode, set()).update(new_tags)

    def _flash_front(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        self.store.flashcards.setdefault(curnode, FlashCard()).front.append(args)

    def _flash_back(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        self.store.flashcards.setdefault(curnode, FlashCard()).back.append(args)

    def _image(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        self.store.images[curnode] = args

    def _audio(self, args: str, linum: int | None) -> None:
        curnode = self._require_node()
        self.store.audio[curnode] = args


def _parse_line_number(token: str) -> int | None:
    """Parse a file range bound. A negative bound means the bound is absent."""
    if not _LINE_NUMBER.fullmatch(token):
        raise ParseError(f"not a line number: {token!r}")
    value = int(token)
    return value if value >= 0 else None
