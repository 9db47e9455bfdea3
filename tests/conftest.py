"""Test configuration and fixtures."""

import os
from unittest.mock import Mock

import pytest

# Set environment variables immediately when this module is imported
# This ensures they're available before any other modules try to load Settings
test_env_vars = {
    "GITHUB_TOKEN": "test_github_token_123",
    "GITHUB_API_BASE_URL": "https://api.github.com",
    "GITHUB_REQUEST_DELAY": "0",
    "MAX_GITHUB_RETRIES": "1",
    "APP_NAME": "GitHub PR Review Commenter Test",
    "APP_VERSION": "1.0.0-test",
    "DEBUG": "true",
    "HOST": "127.0.0.1",
    "PORT": "8000",
    "LOG_LEVEL": "DEBUG",
    "COMMENT_STYLE": "both",
    "INLINE_SEVERITY": "warning",
    "SUMMARY_FORMAT": "detailed",
}

for key, value in test_env_vars.items():
    os.environ[key] = value


SAMPLE_PATCH = "@@ -1,3 +1,4 @@\n a\n+b\n-c\n d"

TWO_HUNK_PATCH = (
    "@@ -1,3 +1,4 @@\n"
    " import os\n"
    "+import sys\n"
    " \n"
    " def main():\n"
    "@@ -40,4 +41,6 @@ def main():\n"
    "     run()\n"
    "-    return 0\n"
    "+    cleanup()\n"
    "+    log()\n"
    "+    return 1\n"
    " \n"
)


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> None:
    """Set up test environment variables."""
    yield

    for key in test_env_vars:
        os.environ.pop(key, None)


@pytest.fixture
def settings():
    """Settings built explicitly for a test."""
    from github_pr_review_commenter.config import Settings

    return Settings(
        github_token="test_token",
        github_request_delay=0,
        max_github_retries=1,
        comment_style="both",
        inline_severity="warning",
        summary_format="detailed",
        enable_suggestions=True,
        update_existing_comments=True,
    )


@pytest.fixture
def file_changes():
    """Two changed files with patches and one binary file without."""
    from github_pr_review_commenter.models import FileChange

    return [
        FileChange(filename="src/app.py", status="modified", additions=1, deletions=1, patch=SAMPLE_PATCH),
        FileChange(filename="src/main.py", status="modified", additions=4, deletions=1, patch=TWO_HUNK_PATCH),
        FileChange(filename="assets/logo.png", status="added", additions=0, deletions=0),
    ]


@pytest.fixture
def pull_request():
    from github_pr_review_commenter.models import PullRequestRef

    return PullRequestRef(owner="user", repo="repo", number=7, head_sha="abc123")


class FakeCommentStore:
    """In-memory comment store recording every write."""

    def __init__(self, existing=None, pull_request=None) -> None:
        from github_pr_review_commenter.models import PullRequestRef

        self.existing = list(existing or [])
        self.pull_request = pull_request or PullRequestRef(owner="user", repo="repo", number=7, head_sha="abc123")
        self.created = []
        self.updated = []
        self.summary = None
        self.summary_writes = []
        self.fail_on = set()
        self._next_id = 1000

    def list_existing_marked_comments(self):
        from github_pr_review_commenter.markers import has_bot_marker

        return [comment for comment in self.existing if has_bot_marker(comment.body)]

    def create_comment(self, file, line, side, body):
        if (file, line) in self.fail_on:
            msg = f"422 Unprocessable Entity: line {line} is not part of the diff"
            raise RuntimeError(msg)
        self._next_id += 1
        self.created.append((file, line, side, body))
        from github_pr_review_commenter.models import CommentRecord

        self.existing.append(CommentRecord(id=self._next_id, file=file, line=line, side=side, body=body))
        return self._next_id

    def update_comment(self, comment_id, body):
        self.updated.append((comment_id, body))
        self.existing = [
            comment.model_copy(update={"body": body}) if comment.id == comment_id else comment
            for comment in self.existing
        ]

    def find_summary_comment(self):
        return self.summary

    def create_summary_comment(self, body):
        self.summary = {"id": 1, "body": body}
        self.summary_writes.append(("create", body))
        return 1

    def update_summary_comment(self, comment_id, body):
        self.summary = {"id": comment_id, "body": body}
        self.summary_writes.append(("update", body))


@pytest.fixture
def fake_store():
    return FakeCommentStore()


@pytest.fixture
def mock_store() -> Mock:
    """Mock comment store for checking exact calls."""
    store = Mock()
    store.list_existing_marked_comments.return_value = []
    store.create_comment.return_value = 501
    return store
