"""Code issue data model."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

IssueType = Literal["error", "warning", "info"]
IssueSeverity = Literal["high", "medium", "low"]


class CodeIssue(BaseModel):
    """A single review finding.

    Producers disagree on the exact shape of a finding, so unknown keys are
    dropped and every optional field is modelled explicitly. ``line`` is the
    producer's claim and is not trusted to exist in the diff.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    file: str | None = None
    line: int | None = None
    end_line: int | None = None
    type: IssueType = "warning"
    category: str = "best_practice"
    message: str
    description: str = ""
    suggestion: str | None = None
    fixed_code: str | None = None
    rule_id: str = ""
    rule_name: str = ""
    severity: IssueSeverity = "medium"

    @field_validator("file", "suggestion", "fixed_code")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("line", "end_line")
    @classmethod
    def non_positive_line_to_none(cls, value: int | None) -> int | None:
        # Diff coordinates are 1-based; 0 and negatives mean "no line"
        if value is not None and value < 1:
            return None
        return value

    def __repr__(self) -> str:
        """Return a string representation of the CodeIssue object."""
        return f"<CodeIssue(type='{self.type}', file='{self.file}', line={self.line}, message='{self.message}')>"

    @property
    def has_location(self) -> bool:
        return self.file is not None and self.line is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary."""
        return self.model_dump()
