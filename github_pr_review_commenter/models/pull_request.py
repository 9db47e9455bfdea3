"""Pull request reference model."""

import hashlib
from typing import Any

from pydantic import BaseModel, ConfigDict


class PullRequestRef(BaseModel):
    """Identifies the pull request a review run publishes to."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    number: int
    head_sha: str | None = None

    def __repr__(self) -> str:
        """Return a string representation of the PullRequestRef object."""
        return f"<PullRequestRef({self.full_name}#{self.number})>"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def files_url(self) -> str:
        return f"https://github.com/{self.owner}/{self.repo}/pull/{self.number}/files"

    def file_url(self, filename: str, line: int | None = None) -> str:
        """Link to a file, and optionally a new-side line, in the PR diff view."""
        if not line:
            return self.files_url
        anchor = hashlib.sha256(filename.encode("utf-8")).hexdigest()
        return f"{self.files_url}#diff-{anchor}R{line}"

    @classmethod
    def from_github_data(cls, owner: str, repo: str, github_data: dict[str, Any]) -> "PullRequestRef":
        """Create a PullRequestRef from a GitHub pull request payload."""
        return cls(
            owner=owner,
            repo=repo,
            number=github_data["number"],
            head_sha=(github_data.get("head") or {}).get("sha"),
        )
