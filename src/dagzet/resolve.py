"""Address resolution for connection tokens.

Pure functions: given a token and a snapshot of the interpreter's cursors,
return the qualified path the token refers to. Nothing here mutates state.

Forms:
- "$"      current node's full path
- "^"      matching side of the most recent connection (cx only)
- "../x"   relative to the current node's full path (co only)
- other    "{namespace}/{token}" for co, the literal token for cx
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .constants import (
    ALIAS_PREFIX,
    CURRENT_NODE_TOKEN,
    PARENT_TOKEN,
    PATH_SEPARATOR,
    PREVIOUS_CONNECTION_TOKEN,
)
from .errors import ReturnCode, StateError, UnsupportedError
from .models import Connection

Side = Literal["left", "right"]


@dataclass(frozen=True)
class ResolveContext:
    """Read-only view of the cursors a token may refer to."""

    namespace: str | None = None
    current_path: str | None = None
    last_connection: Connection | None = None

    def require_namespace(self) -> str:
        if self.namespace is None:
            raise StateError(code=ReturnCode.NAMESPACE_NOT_SET)
        return self.namespace

    def require_current_path(self) -> str:
        if self.current_path is None:
            raise StateError(code=ReturnCode.NODE_NOT_SELECTED)
        return self.current_path

    def require_last_connection(self) -> Connection:
        if self.last_connection is None:
            raise StateError(code=ReturnCode.NO_CONNECTIONS)
        return self.last_connection


def qualify(namespace: str, name: str) -> str:
    return f"{namespace}{PATH_SEPARATOR}{name}"


def resolve_relative(fullpath: str, path: str) -> str:
    """Replay `path` onto `fullpath`, popping a segment for every "..".

    >>> resolve_relative("ns/a/b", "../c")
    'ns/a/c'
    """
    out = fullpath.split(PATH_SEPARATOR)
    for name in path.split(PATH_SEPARATOR):
        if name == PARENT_TOKEN:
            if out:
                out.pop()
        else:
            out.append(name)
    return PATH_SEPARATOR.join(out)


def resolve_connect_token(token: str, ctx: ResolveContext) -> str:
    """Resolve one side of a `co` directive."""
    if token == CURRENT_NODE_TOKEN:
        return ctx.require_current_path()
    if PARENT_TOKEN in token:
        return resolve_relative(ctx.require_current_path(), token)
    return qualify(ctx.require_namespace(), token)


def resolve_cross_token(token: str, side: Side, ctx: ResolveContext) -> str:
    """Resolve one side of a `cx` directive.

    Plain tokens are already fully qualified by the author and pass through.
    """
    if token == CURRENT_NODE_TOKEN:
        return ctx.require_current_path()
    if token == PREVIOUS_CONNECTION_TOKEN:
        last = ctx.require_last_connection()
        return last.left if side == "left" else last.right
    if token.startswith(ALIAS_PREFIX):
        raise UnsupportedError(f"alias {token}")
    return token
