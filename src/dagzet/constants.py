"""Shared constants for the dagzet interpreter, exporter and CLI.

Everything tunable lives here so the other modules never hardcode values.
"""

# ─────────────────────────────────────────────────────────────────────────────
# Directive grammar
# ─────────────────────────────────────────────────────────────────────────────

MIN_LINE_LENGTH = 3  # two-letter opcode + separator
OPCODE_LENGTH = 2
ARGS_OFFSET = 3

PATH_SEPARATOR = "/"

CURRENT_NODE_TOKEN = "$"  # current node (co, cx) or last filename (fr)
PREVIOUS_CONNECTION_TOKEN = "^"  # matching side of the last connection (cx)
PARENT_TOKEN = ".."  # relative path segment (co)
ALIAS_PREFIX = "@"  # reserved alias syntax (cx)

# Opcodes that are part of the language but have no behavior yet
RESERVED_OPCODES = ("eq", "pg", "al")

# ─────────────────────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_DB_NAME = "dagzet.db"
ABSENT_LINE_NUMBER = -1  # file range bound not given

# ─────────────────────────────────────────────────────────────────────────────
# CLI / environment
# ─────────────────────────────────────────────────────────────────────────────

ENV_DB_PATH = "DAGZET_DB"
ENV_LOG_LEVEL = "DAGZET_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
STDIN_FILENAME = "-"
