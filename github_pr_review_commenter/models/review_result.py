"""Review result data model used for the summary comment."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .code_issue import CodeIssue

ReviewStatus = Literal["passed", "needs_attention"]


def determine_review_status(issues: list[CodeIssue]) -> ReviewStatus:
    """Any error or warning needs attention. A review never fails the PR."""
    if any(issue.type in ("error", "warning") for issue in issues):
        return "needs_attention"
    return "passed"


class ReviewResult(BaseModel):
    """Outcome of reviewing one pull request."""

    model_config = ConfigDict(frozen=True)

    issues: list[CodeIssue] = Field(default_factory=list)
    files_reviewed: int = 0
    total_files: int = 0
    status: ReviewStatus = "passed"
    summary: str = ""

    def __repr__(self) -> str:
        """Return a string representation of the ReviewResult object."""
        return f"<ReviewResult(status='{self.status}', issues={len(self.issues)}, files={self.files_reviewed})>"

    @classmethod
    def from_issues(
        cls,
        issues: list[CodeIssue],
        files_reviewed: int,
        summary: str = "",
        total_files: int | None = None,
    ) -> "ReviewResult":
        """``total_files`` counts every changed file, before include/exclude selection."""
        return cls(
            issues=issues,
            files_reviewed=files_reviewed,
            total_files=files_reviewed if total_files is None else total_files,
            status=determine_review_status(issues),
            summary=summary,
        )

    def count_by_type(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for issue in self.issues:
            counts[issue.type] = counts.get(issue.type, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump()
