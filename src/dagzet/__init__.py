"""dagzet - namespaced knowledge graphs from line-oriented directives.

Public API:
- DagZet: interprets directive lines into a graph store
- validate: whole-graph checks (unknown nodes, cycles)
- Trie: unique-suffix lookup over node paths
- SQLiteExporter: writes the dz_* tables
"""

from .errors import DagZetError, ReturnCode
from .export import SQLiteExporter
from .interpreter import DagZet
from .trie import Trie
from .validate import validate

__version__ = "0.1.0"

__all__ = [
    "DagZet",
    "DagZetError",
    "ReturnCode",
    "SQLiteExporter",
    "Trie",
    "validate",
]
