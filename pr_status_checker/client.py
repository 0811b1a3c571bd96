"""Async GitHub API client for pull request processing."""

import logging
import os
from typing import Any

import httpx

from .exceptions import GitHubAPIError, NotMergeableError, RateLimitError
from .models import (
    CombinedStatus,
    Comparison,
    MergeResult,
    PullRequest,
    Review,
    StatusItem,
    UpdateBranchResult,
    User,
)
from .parser import RepositoryReference

logger = logging.getLogger(__name__)

PER_PAGE = 100


class GitHubClient:
    """Async client for GitHub REST API."""

    BASE_URL = "https://api.github.com"

    def __init__(self, token: str | None = None):
        self.token = token or os.environ.get("GITHUB_TOKEN")
        self._client: httpx.AsyncClient | None = None

    @property
    def headers(self) -> dict[str, str]:
        """Return headers for API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @property
    def is_authenticated(self) -> bool:
        """Check if client has authentication token."""
        return self.token is not None

    async def __aenter__(self) -> "GitHubClient":
        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers=self.headers,
            timeout=30.0,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an API request with error handling."""
        if not self._client:
            raise RuntimeError("Client not initialized. Use async context manager.")

        logger.debug("%s %s", method, path)
        response = await self._client.request(method, path, **kwargs)

        # Handle rate limiting
        if response.status_code == 403:
            remaining = response.headers.get("x-ratelimit-remaining", "0")
            if remaining == "0":
                reset_time = int(response.headers.get("x-ratelimit-reset", "0"))
                raise RateLimitError(reset_time)

        if response.status_code == 404:
            raise GitHubAPIError(f"Resource not found: {path}", 404)

        if response.status_code >= 400:
            raise GitHubAPIError(f"API error: {response.text}", response.status_code)

        if not response.content:
            return {}
        return response.json()

    async def get_authenticated_user(self) -> User:
        """Get the user the token belongs to."""
        data = await self._request("GET", "/user")
        return User(login=data["login"])

    async def list_pull_requests(
        self, repo: RepositoryReference
    ) -> list[PullRequest]:
        """List open pull requests (handles pagination)."""
        pulls: list[PullRequest] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                f"{repo.api_path}/pulls",
                params={"state": "open", "per_page": PER_PAGE, "page": page},
            )
            if not data:
                break
            pulls.extend(self._parse_pull_request(p) for p in data)
            if len(data) < PER_PAGE:
                break
            page += 1
        return pulls

    async def get_pull_request(
        self, repo: RepositoryReference, number: int
    ) -> PullRequest:
        """Fetch a fresh snapshot of a single pull request."""
        data = await self._request("GET", f"{repo.api_path}/pulls/{number}")
        return self._parse_pull_request(data)

    async def get_combined_status(
        self, repo: RepositoryReference, sha: str
    ) -> CombinedStatus:
        """Get combined commit status for a SHA (handles pagination)."""
        statuses: list[dict[str, Any]] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                f"{repo.api_path}/commits/{sha}/status",
                params={"per_page": PER_PAGE, "page": page},
            )
            items = data.get("statuses", [])
            statuses.extend(items)
            total = data.get("total_count", len(statuses))
            if len(items) < PER_PAGE or len(statuses) >= total:
                break
            page += 1
        return CombinedStatus(
            state=data.get("state", "pending"),
            sha=data.get("sha", sha),
            statuses=[
                StatusItem(context=s["context"], state=s["state"])
                for s in statuses
            ],
        )

    async def compare_commits(
        self, repo: RepositoryReference, base: str, head: str
    ) -> Comparison:
        """Compare two commits; ``behind_by`` counts base commits missing from head."""
        data = await self._request("GET", f"{repo.api_path}/compare/{base}...{head}")
        return Comparison(
            status=data.get("status"),
            ahead_by=data.get("ahead_by", 0),
            behind_by=data.get("behind_by", 0),
        )

    async def update_branch(
        self,
        repo: RepositoryReference,
        number: int,
        expected_head_sha: str | None = None,
    ) -> UpdateBranchResult:
        """Ask GitHub to merge the base branch into the PR's head branch."""
        payload = {"expected_head_sha": expected_head_sha} if expected_head_sha else {}
        try:
            data = await self._request(
                "PUT",
                f"{repo.api_path}/pulls/{number}/update-branch",
                json=payload,
            )
        except GitHubAPIError as e:
            if e.status_code == 422 and "not mergeable" in str(e).lower():
                raise NotMergeableError(str(e), e.status_code) from e
            raise
        return UpdateBranchResult(message=data.get("message", ""))

    async def create_review(
        self, repo: RepositoryReference, number: int, event: str = "APPROVE"
    ) -> Review:
        """Submit a review on a pull request."""
        data = await self._request(
            "POST",
            f"{repo.api_path}/pulls/{number}/reviews",
            json={"event": event},
        )
        return Review(id=data["id"], state=data.get("state"))

    async def merge_pull_request(
        self,
        repo: RepositoryReference,
        number: int,
        commit_message: str,
        merge_method: str = "merge",
    ) -> MergeResult:
        """Merge a pull request."""
        data = await self._request(
            "PUT",
            f"{repo.api_path}/pulls/{number}/merge",
            json={"commit_message": commit_message, "merge_method": merge_method},
        )
        return MergeResult(
            sha=data.get("sha"),
            merged=data.get("merged", False),
            message=data.get("message", ""),
        )

    @staticmethod
    def _parse_pull_request(data: dict[str, Any]) -> PullRequest:
        return PullRequest(
            number=data["number"],
            title=data["title"],
            is_draft=data.get("draft", False),
            author=User(login=data["user"]["login"]),
            head_sha=data["head"]["sha"],
            base_sha=data["base"]["sha"],
            requested_reviewers=frozenset(
                r["login"] for r in data.get("requested_reviewers") or []
            ),
        )
