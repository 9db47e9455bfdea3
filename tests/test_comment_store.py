"""Unit tests for the GitHub-backed comment store."""

from unittest.mock import Mock

import pytest

from github_pr_review_commenter.github.comment_store import GitHubCommentStore
from github_pr_review_commenter.markers import add_markers
from github_pr_review_commenter.models import PullRequestRef


class TestGitHubCommentStore:
    """Test the comment store on top of a mocked API client."""

    def setup_method(self) -> None:
        """Set up test fixtures."""
        self.client = Mock()
        self.pull_request = PullRequestRef(owner="user", repo="repo", number=7, head_sha="abc123")
        self.store = GitHubCommentStore(self.client, self.pull_request)

    def test_list_existing_marked_comments(self) -> None:
        self.client.get_pull_request_comments.return_value = [
            {"id": 1, "path": "src/app.py", "line": 2, "side": "RIGHT", "body": add_markers("finding", "inline")},
            {"id": 2, "path": "src/app.py", "line": 2, "side": "RIGHT", "body": "a human wrote this"},
            {"id": 3, "path": "src/main.py", "line": None, "original_line": 40, "body": add_markers("old", "inline")},
            {"id": 4, "path": "src/main.py", "line": 5, "body": None},
        ]

        comments = self.store.list_existing_marked_comments()

        self.client.get_pull_request_comments.assert_called_once_with("user", "repo", 7)
        assert [(c.id, c.file, c.line) for c in comments] == [(1, "src/app.py", 2), (3, "src/main.py", 40)]

    def test_create_comment_uses_head_sha(self) -> None:
        self.client.create_review_comment.return_value = {"id": 55}

        comment_id = self.store.create_comment("src/app.py", 2, "RIGHT", "body")

        assert comment_id == 55
        self.client.create_review_comment.assert_called_once_with(
            "user", "repo", 7, commit_id="abc123", path="src/app.py", line=2, side="RIGHT", body="body",
        )

    def test_create_comment_requires_head_sha(self) -> None:
        store = GitHubCommentStore(self.client, self.pull_request.model_copy(update={"head_sha": None}))

        with pytest.raises(ValueError, match="head commit SHA"):
            store.create_comment("src/app.py", 2, "RIGHT", "body")

        self.client.create_review_comment.assert_not_called()

    def test_update_comment(self) -> None:
        self.store.update_comment(55, "new body")

        self.client.update_review_comment.assert_called_once_with("user", "repo", 55, "new body")

    def test_find_summary_comment(self) -> None:
        summary = {"id": 9, "body": add_markers("summary", "summary")}
        self.client.get_issue_comments.return_value = [
            {"id": 7, "body": "LGTM"},
            {"id": 8, "body": add_markers("not a summary", "inline")},
            summary,
            {"id": 10, "body": add_markers("duplicate", "summary")},
        ]

        assert self.store.find_summary_comment() == summary

    def test_find_summary_comment_missing(self) -> None:
        self.client.get_issue_comments.return_value = [{"id": 7, "body": "LGTM"}]

        assert self.store.find_summary_comment() is None

    def test_summary_writes(self) -> None:
        self.client.create_issue_comment.return_value = {"id": 12}

        assert self.store.create_summary_comment("summary") == 12
        self.store.update_summary_comment(12, "summary v2")

        self.client.create_issue_comment.assert_called_once_with("user", "repo", 7, "summary")
        self.client.update_issue_comment.assert_called_once_with("user", "repo", 12, "summary v2")
