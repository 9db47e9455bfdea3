"""Integration tests for publishing reviews against a simulated GitHub API."""

import json
import re

import responses

from conftest import SAMPLE_PATCH, TWO_HUNK_PATCH

from github_pr_review_commenter.github.client import GitHubAPIClient
from github_pr_review_commenter.markers import add_markers
from github_pr_review_commenter.models import CodeIssue
from github_pr_review_commenter.services.review_publisher import review_pull_request

API = "https://api.github.com/repos/user/repo"


class FakeGitHub:
    """Stateful stand-in for the pull request endpoints used when publishing."""

    def __init__(self, review_comments=None, reject_lines=()) -> None:
        self.review_comments = list(review_comments or [])
        self.issue_comments = []
        self.reject_lines = set(reject_lines)
        self.writes = []
        self._next_id = 9000

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def register(self, rsps) -> None:
        rsps.add(rsps.GET, f"{API}/pulls/7", json={"number": 7, "head": {"sha": "abc123"}})
        rsps.add(
            rsps.GET,
            f"{API}/pulls/7/files",
            json=[
                {"filename": "src/app.py", "status": "modified", "patch": SAMPLE_PATCH},
                {"filename": "src/main.py", "status": "modified", "patch": TWO_HUNK_PATCH},
                {"filename": "dist/bundle.js", "status": "modified", "patch": "@@ -1 +1 @@\n-a\n+b"},
            ],
        )
        rsps.add_callback(rsps.GET, f"{API}/pulls/7/comments", callback=lambda _: (200, {}, json.dumps(self.review_comments)))
        rsps.add_callback(rsps.POST, f"{API}/pulls/7/comments", callback=self.create_review_comment)
        rsps.add_callback(rsps.PATCH, re.compile(rf"{API}/pulls/comments/\d+"), callback=self.update_comment)
        rsps.add_callback(rsps.GET, f"{API}/issues/7/comments", callback=lambda _: (200, {}, json.dumps(self.issue_comments)))
        rsps.add_callback(rsps.POST, f"{API}/issues/7/comments", callback=self.create_issue_comment)
        rsps.add_callback(rsps.PATCH, re.compile(rf"{API}/issues/comments/\d+"), callback=self.update_comment)

    def create_review_comment(self, request):
        payload = json.loads(request.body)
        self.writes.append(("create", payload["path"], payload["line"]))
        if payload["line"] in self.reject_lines:
            return (422, {}, json.dumps({"message": "Validation Failed"}))
        comment = {"id": self._new_id(), "path": payload["path"], "line": payload["line"], "side": payload["side"], "body": payload["body"]}
        self.review_comments.append(comment)
        return (201, {}, json.dumps(comment))

    def create_issue_comment(self, request):
        payload = json.loads(request.body)
        self.writes.append(("create", "summary", None))
        comment = {"id": self._new_id(), "body": payload["body"]}
        self.issue_comments.append(comment)
        return (201, {}, json.dumps(comment))

    def update_comment(self, request):
        comment_id = int(request.url.rsplit("/", 1)[-1])
        body = json.loads(request.body)["body"]
        self.writes.append(("update", comment_id, None))
        for comment in self.review_comments + self.issue_comments:
            if comment["id"] == comment_id:
                comment["body"] = body
                return (200, {}, json.dumps(comment))
        return (404, {}, json.dumps({"message": "Not Found"}))


def findings() -> list[CodeIssue]:
    return [
        CodeIssue(file="src/main.py", line=42, type="error", category="bug", message="cleanup() may raise"),
        CodeIssue(file="src/main.py", line=47, type="warning", message="Return value changed"),
        CodeIssue(file="src/app.py", line=2, type="warning", category="performance", message="Slow path"),
        CodeIssue(file="dist/bundle.js", line=1, type="error", message="Generated file"),
    ]


class TestIntegration:
    """End-to-end publishing runs."""

    def run(self, github: FakeGitHub, settings, issues=None):
        with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
            github.register(rsps)
            client = GitHubAPIClient(settings=settings)
            return review_pull_request("user", "repo", 7, issues or findings(), client=client, settings=settings)

    def test_first_run_posts_comments(self, settings) -> None:
        github = FakeGitHub()

        result = self.run(github, settings)

        assert [(c["path"], c["line"]) for c in github.review_comments] == [
            ("src/main.py", 42),
            ("src/main.py", 45),
            ("src/app.py", 2),
        ]
        assert len(github.issue_comments) == 1
        assert result.inline.to_dict()["created"] == 3
        assert result.review.files_reviewed == 2
        assert result.review.total_files == 3
        assert "| Files Reviewed | 2/3 |" in github.issue_comments[0]["body"]
        assert result.aggregation.dropped == {"file_not_in_diff": 1}
        assert result.errors == []

    def test_rerun_writes_nothing(self, settings) -> None:
        github = FakeGitHub()
        self.run(github, settings)
        writes_after_first_run = len(github.writes)

        result = self.run(github, settings)

        assert len(github.writes) == writes_after_first_run
        assert len(github.review_comments) == 3
        assert len(result.inline.unchanged) == 3
        assert result.summary_action == "unchanged"

    def test_changed_finding_edits_existing_comment(self, settings) -> None:
        github = FakeGitHub()
        self.run(github, settings)
        changed = [
            issue.model_copy(update={"message": "Slow path inside loop"}) if issue.file == "src/app.py" else issue
            for issue in findings()
        ]

        result = self.run(github, settings, changed)

        assert len(github.review_comments) == 3
        assert "Slow path inside loop" in github.review_comments[2]["body"]
        assert len(result.inline.updated) == 1
        assert result.summary_action == "updated"

    def test_human_and_other_bot_comments_are_untouched(self, settings) -> None:
        human = {"id": 1, "path": "src/app.py", "line": 2, "body": "Could this be cached?"}
        stale = {"id": 2, "path": "src/main.py", "line": 3, "body": add_markers("Old finding", "inline")}
        github = FakeGitHub(review_comments=[human, stale])

        result = self.run(github, settings)

        assert github.review_comments[0]["body"] == "Could this be cached?"
        assert github.review_comments[1]["body"] == add_markers("Old finding", "inline")
        assert result.inline.stale == 1
        assert not [write for write in github.writes if write[0] == "update"]

    def test_rejected_location_does_not_stop_the_run(self, settings) -> None:
        github = FakeGitHub(reject_lines={42})

        result = self.run(github, settings)

        assert [(c["path"], c["line"]) for c in github.review_comments] == [("src/main.py", 45), ("src/app.py", 2)]
        assert len(result.inline.failed) == 1
        assert result.summary_action == "created"
