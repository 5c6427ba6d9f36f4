"""Error kinds raised while interpreting and validating a dagzet graph.

Every failure carries a ReturnCode so callers that prefer explicit results
(see DagZet.parse_line_with_result) can switch on the code instead of the
exception class.
"""

from __future__ import annotations

from enum import Enum


class ReturnCode(str, Enum):
    """Outcome of a directive or validation pass."""

    OKAY = "okay"
    ERROR = "error"
    INVALID_COMMAND = "invalid_command"
    UNSUPPORTED = "unsupported"
    NAMESPACE_NOT_SET = "namespace_not_set"
    NODE_ALREADY_EXISTS = "node_already_exists"
    NODE_NOT_SELECTED = "node_not_selected"
    NOT_ENOUGH_ARGS = "not_enough_args"
    ALREADY_CONNECTED = "already_connected"
    NO_CONNECTIONS = "no_connections"
    NO_FILENAME = "no_filename"
    DUPLICATE_TAG = "duplicate_tag"
    UNKNOWN_NODE = "unknown_node"
    BAD_RANGE = "bad_range"
    AMBIGUOUS = "ambiguous"
    UNKNOWN_NODES = "unknown_nodes"
    CYCLE = "cycle"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    ReturnCode.OKAY: "Everything is okay!",
    ReturnCode.ERROR: "Something went wrong.",
    ReturnCode.INVALID_COMMAND: "Invalid command",
    ReturnCode.UNSUPPORTED: "Not implemented",
    ReturnCode.NAMESPACE_NOT_SET: "Namespace not set",
    ReturnCode.NODE_ALREADY_EXISTS: "Node already exists",
    ReturnCode.NODE_NOT_SELECTED: "Node not selected",
    ReturnCode.NOT_ENOUGH_ARGS: "Not enough arguments",
    ReturnCode.ALREADY_CONNECTED: "Already connected",
    ReturnCode.NO_CONNECTIONS: "No connections made",
    ReturnCode.NO_FILENAME: "No previous filename",
    ReturnCode.DUPLICATE_TAG: "Duplicate tag",
    ReturnCode.UNKNOWN_NODE: "Unknown node",
    ReturnCode.BAD_RANGE: "Invalid line range",
    ReturnCode.AMBIGUOUS: "Ambiguous suffix",
    ReturnCode.UNKNOWN_NODES: "Unknown nodes",
    ReturnCode.CYCLE: "Cycles detected",
}


class DagZetError(Exception):
    """Base class for every dagzet failure."""

    default_code = ReturnCode.ERROR

    def __init__(self, detail: str | None = None, code: ReturnCode | None = None):
        self.code = code or self.default_code
        self.detail = detail
        message = self.code.message
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ParseError(DagZetError):
    """Malformed line, missing argument or bad number."""


class StateError(DagZetError):
    """A cursor the directive depends on is not set yet."""


class ConflictError(DagZetError):
    """Duplicate node, connection or tag."""


class UnresolvedReferenceError(DagZetError):
    """A name or range that does not resolve to anything valid."""


class InvalidCommandError(DagZetError):
    default_code = ReturnCode.INVALID_COMMAND


class UnsupportedError(DagZetError):
    """Recognized syntax that has no behavior yet."""

    default_code = ReturnCode.UNSUPPORTED


class SuffixNotFoundError(UnresolvedReferenceError):
    default_code = ReturnCode.UNKNOWN_NODE


class AmbiguousSuffixError(UnresolvedReferenceError):
    default_code = ReturnCode.AMBIGUOUS


class LineError(DagZetError):
    """A directive failure tagged with where it happened."""

    def __init__(
        self,
        cause: DagZetError,
        linum: int,
        line: str,
        filename: str | None = None,
    ):
        self.cause = cause
        self.linum = linum
        self.line = line
        self.filename = filename
        self.code = cause.code
        self.detail = cause.detail
        where = f"{filename}:{linum}" if filename else f"line {linum}"
        Exception.__init__(self, f"{where}: {cause}")


class ValidationError(DagZetError):
    """A whole-graph invariant does not hold."""


class UnknownNodesError(ValidationError):
    default_code = ReturnCode.UNKNOWN_NODES

    def __init__(self, nodes: set[str]):
        self.nodes = set(nodes)
        super().__init__(", ".join(sorted(self.nodes)))


class CycleError(ValidationError):
    default_code = ReturnCode.CYCLE

    def __init__(
        self,
        edges: list[tuple[int, int]],
        names: list[tuple[str, str]] | None = None,
    ):
        self.edges = list(edges)
        self.names = list(names or [])
        pairs = self.names or self.edges
        super().__init__(", ".join(f"{a} -> {b}" for a, b in pairs))


class InvalidGraphError(ValidationError):
    """More than one whole-graph check failed."""

    def __init__(self, errors: list[ValidationError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))
