"""Review publishing service: from findings to comments on a pull request."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from fnmatch import fnmatch
from typing import Any

from ..config import Settings, get_settings
from ..github.client import GitHubAPIClient
from ..github.comment_store import GitHubCommentStore
from ..markers import COMMENT_MARKERS, CommentMarkers, add_markers, normalize_body
from ..models import CodeIssue, CommentRecord, FileChange, PullRequestRef, ReviewResult
from ..utils import get_logger, pull_request_logger
from .comment_renderer import CommentRenderer
from .issue_aggregator import AggregationResult, IssueAggregator
from .reconciliation import ReconciliationEngine, ReconciliationReport

logger = get_logger(__name__)


def matches_pattern(filename: str, pattern: str) -> bool:
    """Glob match where a leading ``**/`` also matches files at the repository root."""
    if fnmatch(filename, pattern):
        return True
    return pattern.startswith("**/") and fnmatch(filename, pattern[3:])


def should_include_file(filename: str, include_patterns: list[str], exclude_patterns: list[str]) -> bool:
    """Exclude patterns win over include patterns."""
    if any(matches_pattern(filename, pattern) for pattern in exclude_patterns):
        return False
    return any(matches_pattern(filename, pattern) for pattern in include_patterns)


def select_file_changes(file_changes: list[FileChange], settings: Settings) -> list[FileChange]:
    """Apply include/exclude patterns, then the max_files cap."""
    selected = [
        fc for fc in file_changes
        if should_include_file(fc.filename, settings.include_pattern_list, settings.exclude_pattern_list)
    ]
    if len(selected) > settings.max_files:
        logger.info("Limiting review to %d of %d matching files", settings.max_files, len(selected))
    return selected[: settings.max_files]


def build_desired_comments(
    aggregation: AggregationResult,
    renderer: CommentRenderer,
    markers: CommentMarkers = COMMENT_MARKERS,
) -> list[CommentRecord]:
    """Render one marked inline comment per aggregated location."""
    return [
        CommentRecord(
            file=group.location.file,
            line=group.location.line,
            side="RIGHT",
            body=add_markers(renderer.render_inline(group.location, group.issues), "inline", markers),
        )
        for group in aggregation.groups
    ]


@dataclass
class PublishResult:
    """Outcome of one publishing run."""

    review: ReviewResult
    aggregation: AggregationResult | None = None
    inline: ReconciliationReport | None = None
    summary_action: str = "skipped"
    errors: list[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.review.status,
            "files_reviewed": self.review.files_reviewed,
            "total_files": self.review.total_files,
            "issues_found": len(self.review.issues),
            "aggregation": self.aggregation.to_dict() if self.aggregation else None,
            "inline": self.inline.to_dict() if self.inline else None,
            "summary": self.summary_action,
            "errors": list(self.errors),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }


class ReviewPublisher:
    """Publish review findings as inline and summary comments."""

    def __init__(
        self,
        store: GitHubCommentStore | None = None,
        settings: Settings | None = None,
        markers: CommentMarkers = COMMENT_MARKERS,
    ) -> None:
        """Initialize review publisher.

        Args:
        ----
            store: Comment store for the target pull request (not needed for previews)
            settings: Application settings
            markers: Marker literals identifying this service's comments

        """
        self.store = store
        self.settings = settings or get_settings()
        self.markers = markers
        self.renderer = CommentRenderer(
            enable_suggestions=self.settings.enable_suggestions,
            summary_format=self.settings.summary_format,
        )

    def aggregate(self, issues: list[CodeIssue], file_changes: list[FileChange], severity: str | None = None) -> AggregationResult:
        aggregator = IssueAggregator(file_changes, severity or self.settings.inline_severity)
        return aggregator.aggregate(issues)

    def preview(
        self,
        issues: list[CodeIssue],
        file_changes: list[FileChange],
        severity: str | None = None,
    ) -> tuple[AggregationResult, list[CommentRecord]]:
        """Compute the desired inline comments without touching GitHub."""
        aggregation = self.aggregate(issues, file_changes, severity)
        return aggregation, build_desired_comments(aggregation, self.renderer, self.markers)

    def _log_issue_overview(self, review: ReviewResult) -> None:
        counts = review.count_by_type()
        logger.info(
            "Review result: %d total issues (%s), inline severity=%s, comment style=%s",
            len(review.issues),
            ", ".join(f"{issue_type}:{count}" for issue_type, count in counts.items()) or "none",
            self.settings.inline_severity,
            self.settings.comment_style,
        )

    def publish_inline(self, issues: list[CodeIssue], file_changes: list[FileChange], result: PublishResult) -> None:
        result.aggregation, desired = self.preview(issues, file_changes)
        engine = ReconciliationEngine(self.store, self.markers)

        if not desired:
            result.inline = engine.reconcile(desired, [])
            return

        existing: list[CommentRecord] = []
        if self.settings.update_existing_comments:
            try:
                existing = self.store.list_existing_marked_comments()
            except Exception as e:
                # Creating without the snapshot would duplicate every earlier comment
                logger.exception("Could not fetch existing comments, skipping inline comments")
                result.errors.append(f"Error fetching existing comments: {e!s}")
                return

        result.inline = engine.reconcile(desired, existing)
        for failure in result.inline.failed:
            result.errors.append(f"Failed to {failure['action']} comment at {failure['file']}:{failure['line']}: {failure['error']}")

    def publish_summary(self, review: ReviewResult, result: PublishResult) -> None:
        pull_request = self.store.pull_request
        inline_count = len(result.aggregation.groups) if result.aggregation else 0
        body = add_markers(self.renderer.render_summary(review, pull_request, inline_count), "summary", self.markers)

        try:
            existing = self.store.find_summary_comment() if self.settings.update_existing_comments else None
            if existing is None:
                comment_id = self.store.create_summary_comment(body)
                logger.info("Created summary comment %s", comment_id)
                result.summary_action = "created"
            elif normalize_body(existing.get("body") or "") == normalize_body(body):
                logger.info("Summary comment %s is up to date", existing["id"])
                result.summary_action = "unchanged"
            else:
                self.store.update_summary_comment(existing["id"], body)
                logger.info("Updated summary comment %s", existing["id"])
                result.summary_action = "updated"
        except Exception as e:
            logger.exception("Failed to post summary comment")
            result.summary_action = "failed"
            result.errors.append(f"Error posting summary comment: {e!s}")

    def publish(
        self,
        issues: list[CodeIssue],
        file_changes: list[FileChange],
        summary: str = "",
        total_files: int | None = None,
    ) -> PublishResult:
        """Publish inline and summary comments for a reviewed pull request.

        Args:
        ----
            issues: Findings for the pull request
            file_changes: Files under review, with patches
            summary: Optional free-text summary for the summary comment
            total_files: Number of changed files before selection, defaults to len(file_changes)

        Returns:
        -------
            PublishResult describing what was written

        """
        if self.store is None:
            msg = "A comment store is required to publish"
            raise ValueError(msg)

        review = ReviewResult.from_issues(issues, len(file_changes), summary, total_files)
        result = PublishResult(review=review)
        self._log_issue_overview(review)

        if self.settings.posts_inline:
            self.publish_inline(issues, file_changes, result)

        if not self.settings.posts_summary:
            logger.info("Summary comment skipped due to comment style configuration")
        elif not file_changes:
            logger.info("Summary comment skipped - no file changes to review")
        else:
            self.publish_summary(review, result)

        result.end_time = datetime.now(UTC)
        duration = (result.end_time - result.start_time).total_seconds()
        logger.info("Publishing completed in %.2f seconds with %d errors", duration, len(result.errors))
        return result


def review_pull_request(
    owner: str,
    repo: str,
    pr_number: int,
    issues: list[CodeIssue],
    summary: str = "",
    client: GitHubAPIClient | None = None,
    settings: Settings | None = None,
) -> PublishResult:
    """Fetch a pull request's files and publish findings to it.

    Errors while reading the pull request propagate; errors while writing
    individual comments are recorded in the result.
    """
    settings = settings or get_settings()
    client = client or GitHubAPIClient(settings=settings)

    logger.info("Publishing review for %s/%s#%d", owner, repo, pr_number)
    pr_data = client.get_pull_request(owner, repo, pr_number)
    pull_request = PullRequestRef.from_github_data(owner, repo, pr_data)
    pr_log = pull_request_logger(logger, pull_request.full_name, pull_request.number)
    if not pull_request.head_sha:
        pr_log.warning("Pull request payload has no head SHA, inline comments cannot be created")

    raw_files = client.get_pull_request_files(owner, repo, pr_number)
    file_changes = select_file_changes([FileChange.from_github_data(data) for data in raw_files], settings)
    pr_log.info("Found %d files to review (%d changed)", len(file_changes), len(raw_files))

    store = GitHubCommentStore(client, pull_request)
    publisher = ReviewPublisher(store, settings)
    result = publisher.publish(issues, file_changes, summary, total_files=len(raw_files))
    pr_log.info("Review status %s, summary %s, %d errors", result.review.status, result.summary_action, len(result.errors))
    return result
