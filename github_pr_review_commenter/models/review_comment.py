"""Review comment and comment location data models."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

CommentSide = Literal["RIGHT", "LEFT"]


class MatchKind(str, Enum):
    """How a requested line was mapped onto the diff."""

    EXACT = "exact"
    NEARBY = "nearby"
    FILE_LEVEL_FALLBACK = "file_level_fallback"


class ResolvedLocation(BaseModel):
    """A commentable (file, line) pair inside a pull request diff."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    requested_line: int
    match_kind: MatchKind

    def __repr__(self) -> str:
        """Return a string representation of the ResolvedLocation object."""
        return f"<ResolvedLocation(file='{self.file}', line={self.line}, match_kind='{self.match_kind.value}')>"

    @property
    def key(self) -> tuple[str, int]:
        return (self.file, self.line)

    @property
    def was_adjusted(self) -> bool:
        return self.line != self.requested_line


class CommentRecord(BaseModel):
    """An inline review comment, either desired by this run or fetched from GitHub.

    ``id`` is only set on records fetched from the remote store.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    file: str
    line: int
    side: CommentSide = "RIGHT"
    body: str

    def __repr__(self) -> str:
        """Return a string representation of the CommentRecord object."""
        return f"<CommentRecord(id={self.id}, file='{self.file}', line={self.line}, side='{self.side}')>"

    @property
    def location_key(self) -> tuple[str, int]:
        return (self.file, self.line)

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "CommentRecord":
        """Create a CommentRecord from a GitHub pull request review comment.

        Outdated comments report ``line`` as null; fall back to the line they
        were originally posted on.
        """
        line = github_data.get("line") or github_data.get("original_line") or 0
        return cls(
            id=github_data["id"],
            file=github_data.get("path") or "",
            line=line,
            side=github_data.get("side") or "RIGHT",
            body=github_data.get("body") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump()
