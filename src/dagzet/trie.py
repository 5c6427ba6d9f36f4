"""Suffix trie for resolving a unique path suffix to a full node path.

Paths are inserted segment by segment in reverse, so "a/b/c" is stored as
c -> b -> a. A suffix like "b/c" then walks c -> b and, if only one path
ever went through that point, follows the single remaining branch down to
the full path.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from .constants import PATH_SEPARATOR
from .errors import AmbiguousSuffixError, SuffixNotFoundError


@dataclass
class TrieNode:
    is_end: bool = False
    children: dict[str, "TrieNode"] = field(default_factory=dict)
    traversed: int = 0  # paths that continued past this node


class Trie:
    """Reverse-segment trie over fully qualified node paths."""

    def __init__(self):
        self.root = TrieNode()

    @classmethod
    def from_paths(cls, paths: Iterable[str]) -> "Trie":
        trie = cls()
        for path in paths:
            trie.add_path(path)
        return trie

    def add_path(self, path: str) -> None:
        node = self.root
        for word in reversed(path.split(PATH_SEPARATOR)):
            node.traversed += 1
            node = node.children.setdefault(word, TrieNode())
        node.is_end = True

    def search(self, suffix: str) -> str:
        """Return the one full path ending in `suffix`.

        Raises:
            SuffixNotFoundError: no inserted path ends in `suffix`
            AmbiguousSuffixError: more than one path could match
        """
        path: list[str] = []
        node = self.root

        for word in reversed(suffix.split(PATH_SEPARATOR)):
            child = node.children.get(word)
            if child is None:
                raise SuffixNotFoundError(suffix)
            node = child
            path.append(word)

        if node.traversed > 1:
            raise AmbiguousSuffixError(suffix)

        while not node.is_end:
            # traversed <= 1 here, so there is exactly one branch to follow
            key = min(node.children)
            path.append(key)
            node = node.children[key]

        return PATH_SEPARATOR.join(reversed(path))
