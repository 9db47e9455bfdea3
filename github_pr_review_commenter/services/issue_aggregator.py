"""Issue aggregation: validation, severity filtering, placement and grouping."""

from dataclasses import dataclass, field
from typing import Any

from ..config import SEVERITY_LEVELS
from ..models import CodeIssue, FileChange, ResolvedLocation
from ..utils import get_logger
from .diff_indexer import AddressableLineSet, index_patch
from .location_resolver import resolve_location

logger = get_logger(__name__)

# Drop reasons for issues that cannot be placed
MISSING_LOCATION = "missing_location"
BELOW_THRESHOLD = "below_threshold"
FILE_NOT_IN_DIFF = "file_not_in_diff"
PATCH_MISSING = "patch_missing"
NO_ADDRESSABLE_LINES = "no_addressable_lines"
OUT_OF_TOLERANCE = "out_of_tolerance"


def severity_rank(level: str) -> int:
    """Rank of an issue type or threshold; unknown values rank lowest."""
    return SEVERITY_LEVELS.get(level, SEVERITY_LEVELS["all"])


def filter_issues_by_severity(issues: list[CodeIssue], threshold: str) -> list[CodeIssue]:
    """Keep issues whose type ranks at or above the threshold."""
    min_rank = severity_rank(threshold)
    return [issue for issue in issues if severity_rank(issue.type) >= min_rank]


@dataclass
class IssueGroup:
    """All issues placed on one resolved location. The first issue is the primary one."""

    location: ResolvedLocation
    issues: list[CodeIssue] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, int]:
        return self.location.key

    @property
    def primary(self) -> CodeIssue:
        return self.issues[0]

    @property
    def secondary(self) -> list[CodeIssue]:
        return self.issues[1:]


@dataclass
class AggregationResult:
    """Groups ready for rendering plus what was dropped on the way."""

    groups: list[IssueGroup] = field(default_factory=list)
    dropped: dict[str, int] = field(default_factory=dict)

    @property
    def placed_issue_count(self) -> int:
        return sum(len(group.issues) for group in self.groups)

    @property
    def dropped_issue_count(self) -> int:
        return sum(self.dropped.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "locations": len(self.groups),
            "placed_issues": self.placed_issue_count,
            "dropped": dict(self.dropped),
        }


class IssueAggregator:
    """Turn a flat list of findings into per-location groups."""

    def __init__(self, file_changes: list[FileChange], severity_threshold: str = "warning") -> None:
        """Initialize issue aggregator.

        Args:
        ----
            file_changes: Files of the pull request, with their patches
            severity_threshold: Minimum issue type ("error", "warning", "info" or "all")

        """
        self.file_changes = {fc.filename: fc for fc in file_changes}
        self.severity_threshold = severity_threshold
        self._line_sets: dict[str, AddressableLineSet] = {}

    def addressable_lines(self, filename: str) -> AddressableLineSet:
        """Index a file's patch once per aggregator."""
        if filename not in self._line_sets:
            file_change = self.file_changes.get(filename)
            self._line_sets[filename] = index_patch(file_change.patch if file_change else None)
        return self._line_sets[filename]

    def locate(self, issue: CodeIssue) -> tuple[ResolvedLocation | None, str | None]:
        """Resolve an issue's location, returning (location, drop_reason)."""
        file_change = self.file_changes.get(issue.file)
        if file_change is None:
            return None, FILE_NOT_IN_DIFF
        if not file_change.has_patch:
            return None, PATCH_MISSING

        addressable = self.addressable_lines(issue.file)
        if not addressable:
            return None, NO_ADDRESSABLE_LINES

        location = resolve_location(issue.file, issue.line, addressable)
        if location is None:
            return None, OUT_OF_TOLERANCE
        return location, None

    def aggregate(self, issues: list[CodeIssue]) -> AggregationResult:
        """Validate, filter, place and group issues.

        Args:
        ----
            issues: Findings in producer order

        Returns:
        -------
            AggregationResult with groups in first-encounter order

        """
        result = AggregationResult()
        groups: dict[tuple[str, int], IssueGroup] = {}

        def drop(reason: str) -> None:
            result.dropped[reason] = result.dropped.get(reason, 0) + 1

        located = []
        for issue in issues:
            if not issue.has_location:
                logger.warning(
                    "Skipping issue for inline comment - missing location: file=%r, line=%r, message=%r",
                    issue.file,
                    issue.line,
                    issue.message,
                )
                drop(MISSING_LOCATION)
                continue
            located.append(issue)

        if result.dropped.get(MISSING_LOCATION):
            logger.info("Skipped %d issues for inline comments due to missing file/line info", result.dropped[MISSING_LOCATION])

        eligible = filter_issues_by_severity(located, self.severity_threshold)
        below = len(located) - len(eligible)
        if below:
            result.dropped[BELOW_THRESHOLD] = below
        logger.info(
            "Issue filtering: %d located -> %d eligible for inline comments (severity: %s+)",
            len(located),
            len(eligible),
            self.severity_threshold,
        )

        for issue in eligible:
            location, reason = self.locate(issue)
            if location is None:
                logger.warning("Dropping issue at %s:%d (%s): %s", issue.file, issue.line, reason, issue.message)
                drop(reason)
                continue

            group = groups.get(location.key)
            if group is None:
                group = IssueGroup(location=location)
                groups[location.key] = group
            group.issues.append(issue)

        result.groups = list(groups.values())
        logger.info("Aggregated %d issues into %d locations", result.placed_issue_count, len(result.groups))
        return result
