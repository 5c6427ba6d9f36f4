"""SQLite export of a finished dagzet graph.

Writes the dz_* table family. Each table is one attribute category from
views.py; list-valued attributes (lines, remarks, flashcard sides) are
stored as JSON arrays. Each export replaces the rows of the dz_* tables
and leaves any other table in the database untouched.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from . import views
from .store import GraphStore

if TYPE_CHECKING:
    from .interpreter import DagZet

logger = logging.getLogger(__name__)


TABLES: dict[str, list[tuple[str, str]]] = {
    "dz_nodes": [("name", "TEXT UNIQUE"), ("id", "INTEGER PRIMARY KEY"), ("position", "INTEGER")],
    "dz_connections": [("left", "INTEGER NOT NULL"), ("right", "INTEGER NOT NULL")],
    "dz_lines": [("node", "INTEGER"), ("lines", "TEXT")],
    "dz_graph_remarks": [("namespace", "TEXT"), ("remarks", "TEXT")],
    "dz_connection_remarks": [("left", "INTEGER"), ("right", "INTEGER"), ("remarks", "TEXT")],
    "dz_remarks": [("node", "INTEGER"), ("remarks", "TEXT")],
    "dz_file_ranges": [
        ("node", "INTEGER"), ("filename", "TEXT"), ("start", "INTEGER"), ("end", "INTEGER"),
    ],
    "dz_hyperlinks": [("node", "INTEGER"), ("hyperlink", "TEXT")],
    "dz_todo": [("node", "INTEGER"), ("task", "TEXT")],
    "dz_tags": [("node", "INTEGER"), ("tag", "TEXT")],
    "dz_flashcards": [("node", "INTEGER"), ("front", "TEXT"), ("back", "TEXT")],
    "dz_images": [("node", "INTEGER"), ("image", "TEXT")],
    "dz_audio": [("node", "INTEGER"), ("audio", "TEXT")],
    "dz_noderefs": [("node", "INTEGER"), ("filename", "TEXT"), ("linum", "INTEGER")],
}


@dataclass(frozen=True)
class SourceFile:
    """Which node ids were declared by which input file.

    Ids in [start, end) belong to `filename`.
    """

    filename: str
    start: int
    end: int


def _quote(name: str) -> str:
    # left/right are SQL keywords
    return f'"{name}"'


class SQLiteExporter:
    """Writes dz_* tables into a SQLite database."""

    def __init__(self, db_path: Path):
        """Initialize exporter.

        Args:
            db_path: Path to the output database (parent dirs are created)
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
        return self._conn

    def _init_db(self) -> None:
        """Create every dz_* table that does not exist yet."""
        conn = self._get_conn()
        script = []
        for table, columns in TABLES.items():
            cols = ", ".join(f"{_quote(name)} {sqltype}" for name, sqltype in columns)
            script.append(f"CREATE TABLE IF NOT EXISTS {table}({cols});")
        conn.executescript("\n".join(script))

    def clear(self, commit: bool = True) -> None:
        """Delete every row from the dz_* tables, leaving other tables alone.

        Args:
            commit: If True, commit immediately. Set False when called within
                   an export so the old rows go away in the same transaction.
        """
        self._init_db()
        conn = self._get_conn()
        for table in TABLES:
            conn.execute(f"DELETE FROM {table}")
        if commit:
            conn.commit()

    def _insert(self, table: str, rows: list[tuple]) -> int:
        if not rows:
            return 0
        cols = [name for name, _ in TABLES[table]]
        placeholders = ", ".join("?" for _ in cols)
        names = ", ".join(_quote(c) for c in cols)
        self._get_conn().executemany(
            f"INSERT INTO {table} ({names}) VALUES ({placeholders})", rows
        )
        return len(rows)

    def export(
        self,
        dz: "DagZet",
        sources: list[SourceFile] | None = None,
    ) -> dict[str, int]:
        """Write the whole graph.

        Args:
            dz: A builder whose stream is complete (ideally validated)
            sources: Node id ranges per input file, for dz_noderefs

        Returns:
            Rows written per table
        """
        store = dz.store
        conn = self._get_conn()

        try:
            self.clear(commit=False)
            counts = self._write(store, sources)
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()

        logger.info(
            f"Exported {counts['dz_nodes']} nodes, "
            f"{counts['dz_connections']} connections to {self.db_path}"
        )
        return counts

    def _write(
        self,
        store: GraphStore,
        sources: list[SourceFile] | None,
    ) -> dict[str, int]:
        counts = {
            "dz_nodes": self._insert(
                "dz_nodes",
                [(node.name, node.id, node.id) for node in views.node_rows(store)],
            ),
            "dz_connections": self._insert("dz_connections", views.edge_rows(store)),
            "dz_lines": self._insert(
                "dz_lines",
                [(nid, json.dumps(lines)) for nid, lines in views.line_rows(store)],
            ),
            "dz_graph_remarks": self._insert(
                "dz_graph_remarks",
                [(ns, json.dumps(rm)) for ns, rm in views.graph_remark_rows(store)],
            ),
            "dz_connection_remarks": self._insert(
                "dz_connection_remarks",
                [
                    (left, right, json.dumps(rm))
                    for left, right, rm in views.connection_remark_rows(store)
                ],
            ),
            "dz_remarks": self._insert(
                "dz_remarks",
                [(nid, json.dumps(rm)) for nid, rm in views.node_remark_rows(store)],
            ),
            "dz_file_ranges": self._insert(
                "dz_file_ranges",
                [
                    (nid, fr.filename, *fr.bounds())
                    for nid, fr in views.file_range_rows(store)
                ],
            ),
            "dz_hyperlinks": self._insert("dz_hyperlinks", list(views.hyperlink_rows(store))),
            "dz_todo": self._insert("dz_todo", list(views.todo_rows(store))),
            "dz_tags": self._insert("dz_tags", list(views.tag_rows(store))),
            "dz_flashcards": self._insert(
                "dz_flashcards",
                [
                    (nid, json.dumps(card.front), json.dumps(card.back))
                    for nid, card in views.flashcard_rows(store)
                ],
            ),
            "dz_images": self._insert("dz_images", list(views.image_rows(store))),
            "dz_audio": self._insert("dz_audio", list(views.audio_rows(store))),
        }

        noderefs: list[tuple] = []
        if sources:
            for src in sources:
                noderefs.extend(
                    (nid, src.filename, linum)
                    for nid, linum in views.noderef_rows(store, src.start, src.end)
                )
        else:
            noderefs.extend(
                (nid, "", linum) for nid, linum in views.noderef_rows(store)
            )
        counts["dz_noderefs"] = self._insert("dz_noderefs", noderefs)
        return counts

    def close(self):
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "SQLiteExporter":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
