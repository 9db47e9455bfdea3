"""File change data model."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

FileStatus = Literal["added", "modified", "removed", "renamed"]


class FileChange(BaseModel):
    """One file touched by a pull request, as reported by the GitHub files endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    filename: str
    status: FileStatus = "modified"
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str | None = None
    previous_filename: str | None = None

    def __repr__(self) -> str:
        """Return a string representation of the FileChange object."""
        return f"<FileChange(filename='{self.filename}', status='{self.status}', has_patch={self.has_patch})>"

    @property
    def has_patch(self) -> bool:
        """Binary and oversized files come back without a patch."""
        return bool(self.patch)

    @classmethod
    def from_github_data(cls, github_data: dict[str, Any]) -> "FileChange":
        """Create a FileChange from a GitHub "list pull request files" entry."""
        status = github_data.get("status", "modified")
        # GitHub also reports copied/changed/unchanged; they behave like modifications here
        if status not in ("added", "modified", "removed", "renamed"):
            status = "modified"

        return cls(
            filename=github_data["filename"],
            status=status,
            additions=github_data.get("additions", 0),
            deletions=github_data.get("deletions", 0),
            changes=github_data.get("changes", 0),
            patch=github_data.get("patch"),
            previous_filename=github_data.get("previous_filename"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump()
