"""GitHub-backed comment store for one pull request."""

from github_pr_review_commenter.markers import COMMENT_MARKERS, CommentMarkers, has_bot_marker, has_role_marker
from github_pr_review_commenter.models import CommentRecord, CommentSide, PullRequestRef
from github_pr_review_commenter.utils import get_logger

from .client import GitHubAPIClient

logger = get_logger(__name__)


class GitHubCommentStore:
    """Reads and writes this service's comments on a single pull request.

    Inline findings live in pull request review comments; the summary lives in
    an issue comment. Both are recognised solely by the markers in their body.
    """

    def __init__(
        self,
        client: GitHubAPIClient,
        pull_request: PullRequestRef,
        markers: CommentMarkers = COMMENT_MARKERS,
    ) -> None:
        """Initialize comment store.

        Args:
        ----
            client: GitHub API client
            pull_request: Pull request to read and write; ``head_sha`` is required for creating inline comments
            markers: Marker literals identifying this service's comments

        """
        self.client = client
        self.pull_request = pull_request
        self.markers = markers

    @property
    def _repo_args(self) -> tuple[str, str]:
        return self.pull_request.owner, self.pull_request.repo

    def list_existing_marked_comments(self) -> list[CommentRecord]:
        """All review comments on the pull request whose body carries the bot marker."""
        raw_comments = self.client.get_pull_request_comments(*self._repo_args, self.pull_request.number)
        records = [
            CommentRecord.from_github_data(comment)
            for comment in raw_comments
            if has_bot_marker(comment.get("body"), self.markers)
        ]
        logger.info(
            "Found %d marked inline comments out of %d review comments on %s#%d",
            len(records),
            len(raw_comments),
            self.pull_request.full_name,
            self.pull_request.number,
        )
        return records

    def create_comment(self, file: str, line: int, side: CommentSide, body: str) -> int:
        """Create an inline comment and return its id."""
        if not self.pull_request.head_sha:
            msg = f"Cannot create inline comment on {self.pull_request.full_name}#{self.pull_request.number} without a head commit SHA"
            raise ValueError(msg)

        logger.debug("Creating review comment at %s:%d (%s)", file, line, side)
        data = self.client.create_review_comment(
            *self._repo_args,
            self.pull_request.number,
            commit_id=self.pull_request.head_sha,
            path=file,
            line=line,
            side=side,
            body=body,
        )
        return data["id"]

    def update_comment(self, comment_id: int, body: str) -> None:
        """Replace the body of an existing inline comment."""
        self.client.update_review_comment(*self._repo_args, comment_id, body)

    def find_summary_comment(self) -> dict | None:
        """First issue comment carrying both the bot and the summary marker."""
        for comment in self.client.get_issue_comments(*self._repo_args, self.pull_request.number):
            if has_role_marker(comment.get("body"), "summary", self.markers):
                return comment
        return None

    def create_summary_comment(self, body: str) -> int:
        data = self.client.create_issue_comment(*self._repo_args, self.pull_request.number, body)
        return data["id"]

    def update_summary_comment(self, comment_id: int, body: str) -> None:
        self.client.update_issue_comment(*self._repo_args, comment_id, body)
