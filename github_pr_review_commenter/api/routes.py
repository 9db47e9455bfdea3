"""FastAPI routes for the GitHub PR Review Commenter."""

from typing import Annotated, Any, Literal

import requests
from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, Field

from github_pr_review_commenter.config import Settings, get_settings
from github_pr_review_commenter.github.client import GitHubAPIClient
from github_pr_review_commenter.github.comment_store import GitHubCommentStore
from github_pr_review_commenter.models import CodeIssue, FileChange, PullRequestRef
from github_pr_review_commenter.services.review_publisher import ReviewPublisher, review_pull_request
from github_pr_review_commenter.utils import get_logger

logger = get_logger(__name__)
router = APIRouter()


class PreviewRequest(BaseModel):
    files: list[FileChange] = Field(default_factory=list)
    issues: list[CodeIssue] = Field(default_factory=list)
    inline_severity: Literal["error", "warning", "info", "all"] | None = None


class ReviewRequest(BaseModel):
    issues: list[CodeIssue] = Field(default_factory=list)
    summary: str = ""


# Dependencies
def get_github_client() -> GitHubAPIClient:
    """Get GitHub API client."""
    return GitHubAPIClient()


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


@router.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "message": "GitHub PR Review Commenter API",
        "version": get_settings().app_version,
        "endpoints": {
            "preview": "/preview",
            "review": "/repos/{owner}/{repo}/pulls/{pull_number}/review",
            "comments": "/repos/{owner}/{repo}/pulls/{pull_number}/comments",
            "github_status": "/github/status",
        },
    }


@router.post("/preview")
async def preview_comments(
    request: PreviewRequest,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, Any]:
    """Show where each finding would be placed and how it would read, without posting."""
    publisher = ReviewPublisher(settings=settings)
    aggregation, desired = publisher.preview(request.issues, request.files, request.inline_severity)

    return {
        "comments": [
            {
                "file": group.location.file,
                "line": group.location.line,
                "requested_line": group.location.requested_line,
                "match_kind": group.location.match_kind.value,
                "issues": len(group.issues),
                "body": record.body,
            }
            for group, record in zip(aggregation.groups, desired, strict=True)
        ],
        "dropped": aggregation.dropped,
        "total_issues": len(request.issues),
    }


@router.post("/repos/{owner}/{repo}/pulls/{pull_number}/review")
def publish_review(
    owner: str,
    repo: str,
    pull_number: Annotated[int, Path(ge=1)],
    request: ReviewRequest,
    client: Annotated[GitHubAPIClient, Depends(get_github_client)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, Any]:
    """Publish findings as inline and summary comments on a pull request."""
    try:
        result = review_pull_request(
            owner,
            repo,
            pull_number,
            request.issues,
            summary=request.summary,
            client=client,
            settings=settings,
        )
    except requests.RequestException as e:
        logger.exception("Error reading pull request %s/%s#%d", owner, repo, pull_number)
        raise HTTPException(status_code=502, detail=f"GitHub request failed: {e!s}") from e
    except Exception as e:
        logger.exception("Error publishing review for %s/%s#%d", owner, repo, pull_number)
        raise HTTPException(status_code=500, detail="Internal server error") from e

    return result.to_dict()


@router.get("/repos/{owner}/{repo}/pulls/{pull_number}/comments")
def get_bot_comments(
    owner: str,
    repo: str,
    pull_number: Annotated[int, Path(ge=1)],
    client: Annotated[GitHubAPIClient, Depends(get_github_client)],
) -> dict[str, Any]:
    """List this service's inline comments on a pull request."""
    store = GitHubCommentStore(client, PullRequestRef(owner=owner, repo=repo, number=pull_number))
    try:
        comments = store.list_existing_marked_comments()
    except requests.RequestException as e:
        logger.exception("Error listing comments for %s/%s#%d", owner, repo, pull_number)
        raise HTTPException(status_code=502, detail=f"GitHub request failed: {e!s}") from e

    return {
        "comments": [comment.to_dict() for comment in comments],
        "total": len(comments),
    }


@router.get("/github/status")
def github_status(
    client: Annotated[GitHubAPIClient, Depends(get_github_client)],
) -> dict[str, Any]:
    """Report GitHub connectivity and remaining rate limit."""
    if not client.test_connection():
        return {"connected": False, "rate_limit": None}

    try:
        rate_limit = client.get_rate_limit_status().get("resources", {}).get("core")
    except requests.RequestException:
        logger.exception("Error getting rate limit status")
        rate_limit = None

    return {"connected": True, "rate_limit": rate_limit}
