"""GitHub API client for reading pull requests and writing review comments."""

import time
from typing import Any
from urllib.parse import urljoin

import requests

from github_pr_review_commenter.config import Settings, get_github_headers, get_settings
from github_pr_review_commenter.utils import get_logger

logger = get_logger(__name__)


class GitHubAPIClient:
    """GitHub API client with rate limiting and error handling."""

    def __init__(self, access_token: str | None = None, settings: Settings | None = None) -> None:
        """Initialize GitHub API client.

        Args:
        ----
            access_token: GitHub personal access token for authentication
            settings: Application settings (defaults to the cached settings)

        """
        settings = settings or get_settings()
        self.access_token = access_token or settings.github_token
        self.base_url = settings.github_api_base_url.rstrip("/") + "/"
        self.max_retries = settings.max_github_retries
        self.session = requests.Session()

        headers = get_github_headers(settings)
        headers.pop("Authorization", None)
        self.session.headers.update(headers)

        if self.access_token:
            self.session.headers["Authorization"] = f"token {self.access_token}"
        else:
            logger.warning("No GitHub token provided, using unauthenticated requests")

        # Rate limiting
        self.rate_limit_remaining = None
        self.rate_limit_reset = None
        self.retry_after: float | None = None
        self.last_request_time = 0.0

        # Minimum spacing between requests; comment writes are throttled by GitHub
        self.request_delay = settings.github_request_delay

    def _check_rate_limit(self) -> None:
        """Check rate limit status and wait if necessary."""
        if self.retry_after is not None:
            logger.info("Secondary rate limit hit, waiting %.1f seconds", self.retry_after)
            time.sleep(self.retry_after)
            self.retry_after = None

        if self.rate_limit_remaining is not None and self.rate_limit_remaining <= 0:
            if self.rate_limit_reset:
                wait_time = self.rate_limit_reset - time.time()
                if wait_time > 0:
                    logger.info("Rate limit exceeded, waiting %.1f seconds", wait_time)
                    time.sleep(wait_time + 1)
            else:
                logger.info("Rate limit exceeded, waiting 60 seconds")
                time.sleep(60)
            self.rate_limit_remaining = None

        # Enforce minimum delay between requests
        time_since_last_request = time.time() - self.last_request_time
        if time_since_last_request < self.request_delay:
            time.sleep(self.request_delay - time_since_last_request)

        self.last_request_time = time.time()

    def _update_rate_limit(self, response: requests.Response) -> None:
        if "X-RateLimit-Remaining" in response.headers:
            self.rate_limit_remaining = int(response.headers["X-RateLimit-Remaining"])

        if "X-RateLimit-Reset" in response.headers:
            self.rate_limit_reset = int(response.headers["X-RateLimit-Reset"])

    def _schedule_retry(self, response: requests.Response) -> None:
        """Decide how long to back off after a rate-limited response.

        Secondary limits send Retry-After while primary quota remains; only an
        exhausted primary quota waits for X-RateLimit-Reset.
        """
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None and retry_after.strip().isdigit():
            self.retry_after = float(retry_after)
        elif self.rate_limit_remaining != 0:
            # No hint from GitHub; its guidance is to wait at least a minute
            self.retry_after = 60.0

    def _make_request(self, method: str, url: str, **kwargs: Any) -> requests.Response:  # noqa: ANN401
        """Make HTTP request with rate limiting and error handling.

        Args:
        ----
            method: HTTP method (GET, POST, etc.)
            url: Request URL
            **kwargs: Additional request parameters

        Returns:
        -------
            requests.Response: Response object

        Raises:
        ------
            requests.RequestException: If request fails

        """
        if not url.startswith(("http://", "https://")):
            url = urljoin(self.base_url, url.lstrip("/"))

        try:
            for attempt in range(self.max_retries + 1):
                self._check_rate_limit()
                logger.debug("Making %s request to %s", method, url)

                response = self.session.request(method, url, **kwargs)
                self._update_rate_limit(response)

                rate_limited = response.status_code in (403, 429) and "rate limit" in response.text.lower()
                if not rate_limited or attempt == self.max_retries:
                    break

                logger.warning("Rate limit exceeded (attempt %d/%d)", attempt + 1, self.max_retries)
                self._schedule_retry(response)

            response.raise_for_status()
            return response

        except requests.RequestException:
            logger.exception("%s request to %s failed", method, url)
            raise

    def _get_paginated_results(self, url: str, params: dict | None = None) -> list[dict]:
        """Get all results from paginated endpoint.

        Args:
        ----
            url: API endpoint URL
            params: Query parameters

        Returns:
        -------
            List of all results

        """
        all_results = []
        page = 1
        per_page = 100  # Maximum allowed by GitHub

        while True:
            request_params = params.copy() if params else {}
            request_params.update({
                "page": page,
                "per_page": per_page,
            })

            response = self._make_request("GET", url, params=request_params)
            results = response.json()

            if not results:
                break

            all_results.extend(results)

            # Fewer results than requested means this was the last page
            if len(results) < per_page:
                break

            page += 1

        return all_results

    def get_pull_request(self, owner: str, repo: str, pr_number: int) -> dict:
        """Get a pull request.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
        -------
            Pull request dictionary

        """
        url = f"/repos/{owner}/{repo}/pulls/{pr_number}"

        response = self._make_request("GET", url)
        return response.json()

    def get_pull_request_files(self, owner: str, repo: str, pr_number: int) -> list[dict]:
        """Get files changed in a pull request, including their patches.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
        -------
            List of file dictionaries

        """
        url = f"/repos/{owner}/{repo}/pulls/{pr_number}/files"

        return self._get_paginated_results(url)

    def get_pull_request_comments(self, owner: str, repo: str, pr_number: int) -> list[dict]:
        """Get review (inline) comments for a pull request."""
        url = f"/repos/{owner}/{repo}/pulls/{pr_number}/comments"

        return self._get_paginated_results(url)

    def get_issue_comments(self, owner: str, repo: str, issue_number: int) -> list[dict]:
        """Get issue comments for a pull request (treated as issue)."""
        url = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        return self._get_paginated_results(url)

    def create_review_comment(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        commit_id: str,
        path: str,
        line: int,
        side: str,
        body: str,
    ) -> dict:
        """Create an inline review comment anchored to a new-side line.

        Args:
        ----
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            commit_id: Head commit SHA the line refers to
            path: File path
            line: Line number in the file
            side: "RIGHT" for the new version, "LEFT" for the old one
            body: Comment body

        Returns:
        -------
            Created comment dictionary

        """
        url = f"/repos/{owner}/{repo}/pulls/{pr_number}/comments"
        payload = {
            "commit_id": commit_id,
            "path": path,
            "line": line,
            "side": side,
            "body": body,
        }

        response = self._make_request("POST", url, json=payload)
        return response.json()

    def update_review_comment(self, owner: str, repo: str, comment_id: int, body: str) -> dict:
        """Replace the body of an inline review comment."""
        url = f"/repos/{owner}/{repo}/pulls/comments/{comment_id}"

        response = self._make_request("PATCH", url, json={"body": body})
        return response.json()

    def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> dict:
        """Create a top-level comment on a pull request."""
        url = f"/repos/{owner}/{repo}/issues/{issue_number}/comments"

        response = self._make_request("POST", url, json={"body": body})
        return response.json()

    def update_issue_comment(self, owner: str, repo: str, comment_id: int, body: str) -> dict:
        """Replace the body of a top-level pull request comment."""
        url = f"/repos/{owner}/{repo}/issues/comments/{comment_id}"

        response = self._make_request("PATCH", url, json={"body": body})
        return response.json()

    def get_rate_limit_status(self) -> dict:
        """Get current rate limit status.

        Returns
        -------
            Rate limit status dictionary

        """
        url = "/rate_limit"

        response = self._make_request("GET", url)
        return response.json()

    def test_connection(self) -> bool:
        """Test connection to GitHub API.

        Returns
        -------
            True if connection is successful, False otherwise

        """
        try:
            response = self._make_request("GET", "/user")
            return response.status_code == 200
        except Exception:
            logger.exception("Connection test failed")
            return False
