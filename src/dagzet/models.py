"""Value objects for the dagzet graph.

Uses Pydantic v2 for validation. The store keeps these inside plain dicts
keyed by node id (or connection index); see store.py.
"""

from pydantic import BaseModel, Field

from .constants import ABSENT_LINE_NUMBER
from .errors import ReturnCode


class Node(BaseModel):
    """A declared node: qualified name plus its sequential id."""

    id: int = Field(ge=1)
    name: str  # namespace/local_name

    def to_summary(self) -> dict:
        """Return a compact summary of this node."""
        return {"id": self.id, "name": self.name}


class Connection(BaseModel):
    """A directed edge between two qualified names, resolved later."""

    left: str
    right: str

    def as_pair(self) -> tuple[str, str]:
        return (self.left, self.right)


class FileRange(BaseModel):
    """Ties a node to a range of lines in a file.

    start/end of None mean "from the top" / "to the end of file".
    """

    filename: str
    start: int | None = Field(default=None, ge=0)
    end: int | None = Field(default=None, ge=0)

    @property
    def whole_file(self) -> bool:
        return self.start is None and self.end is None

    def bounds(self) -> tuple[int, int]:
        """Bounds with absent values replaced by the export sentinel."""
        start = ABSENT_LINE_NUMBER if self.start is None else self.start
        end = ABSENT_LINE_NUMBER if self.end is None else self.end
        return start, end


class FlashCard(BaseModel):
    """Front and back lines of a study card attached to a node."""

    front: list[str] = Field(default_factory=list)
    back: list[str] = Field(default_factory=list)


class LineResult(BaseModel):
    """Explicit outcome of interpreting one line."""

    code: ReturnCode = ReturnCode.OKAY
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code is ReturnCode.OKAY
