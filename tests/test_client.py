"""Tests for GitHub API client."""

import json
import os
from unittest.mock import patch

import pytest
from httpx import Response

from pr_status_checker.client import GitHubClient
from pr_status_checker.exceptions import (
    GitHubAPIError,
    NotMergeableError,
    RateLimitError,
)
from pr_status_checker.models import StatusState


class TestGitHubClientInit:
    """Tests for GitHubClient initialization."""

    def test_init_with_token(self):
        """Test client initialization with explicit token."""
        client = GitHubClient(token="test-token")
        assert client.token == "test-token"
        assert client.is_authenticated is True

    def test_init_from_env(self):
        """Test client initialization from environment variable."""
        with patch.dict(os.environ, {"GITHUB_TOKEN": "env-token"}):
            client = GitHubClient()
            assert client.token == "env-token"

    def test_headers_with_auth(self):
        """Test headers include authorization when token present."""
        client = GitHubClient(token="test-token")
        assert client.headers["Authorization"] == "Bearer test-token"
        assert client.headers["X-GitHub-Api-Version"] == "2022-11-28"

    async def test_request_without_context_manager(self):
        """Test that request fails if client not initialized."""
        client = GitHubClient(token="test")
        with pytest.raises(RuntimeError, match="Client not initialized"):
            await client._request("GET", "/test")


class TestGitHubClientErrors:
    """Tests for error mapping."""

    async def test_not_found(self, mock_github_api, repository):
        """Test 404 error handling."""
        mock_github_api.get("/repos/owner/repo/pulls/999").mock(
            return_value=Response(404, json={"message": "Not Found"})
        )

        async with GitHubClient(token="test") as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.get_pull_request(repository, 999)

        assert exc_info.value.status_code == 404

    async def test_rate_limit_error(self, mock_github_api, repository):
        """Test rate limit error is raised with reset time."""
        mock_github_api.get("/repos/owner/repo/pulls").mock(
            return_value=Response(
                403,
                headers={
                    "x-ratelimit-remaining": "0",
                    "x-ratelimit-reset": "1704672000",
                },
            )
        )

        async with GitHubClient(token="test") as client:
            with pytest.raises(RateLimitError) as exc_info:
                await client.list_pull_requests(repository)

        assert exc_info.value.reset_time == 1704672000

    async def test_server_error(self, mock_github_api, repository):
        mock_github_api.get("/repos/owner/repo/commits/abc/status").mock(
            return_value=Response(500, json={"message": "Internal Server Error"})
        )

        async with GitHubClient(token="test") as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.get_combined_status(repository, "abc")

        assert exc_info.value.status_code == 500


class TestPullRequests:
    """Tests for listing and fetching pull requests."""

    async def test_list_pull_requests(
        self, mock_github_api, repository, make_pr_response
    ):
        """Test listing parses snapshots and asks for open PRs."""
        route = mock_github_api.get("/repos/owner/repo/pulls").mock(
            return_value=Response(
                200,
                json=[
                    make_pr_response(number=1, reviewers=("bob",)),
                    make_pr_response(number=2, draft=True, reviewers=()),
                ],
            )
        )

        async with GitHubClient(token="test") as client:
            prs = await client.list_pull_requests(repository)

        assert [pr.number for pr in prs] == [1, 2]
        assert prs[0].requested_reviewers == frozenset({"bob"})
        assert prs[0].head_sha == "head1"
        assert prs[0].base_sha == "base1"
        assert prs[0].author.login == "alice"
        assert prs[1].is_draft is True
        assert route.calls.last.request.url.params["state"] == "open"

    async def test_list_pull_requests_pagination(
        self, mock_github_api, repository, make_pr_response
    ):
        """Test listing follows pages until a short page."""
        page1 = [make_pr_response(number=i) for i in range(1, 101)]
        page2 = [make_pr_response(number=101)]
        route = mock_github_api.get("/repos/owner/repo/pulls").mock(
            side_effect=[Response(200, json=page1), Response(200, json=page2)]
        )

        async with GitHubClient(token="test") as client:
            prs = await client.list_pull_requests(repository)

        assert len(prs) == 101
        assert route.call_count == 2

    async def test_null_requested_reviewers(
        self, mock_github_api, repository, make_pr_response
    ):
        data = make_pr_response()
        data["requested_reviewers"] = None
        mock_github_api.get("/repos/owner/repo/pulls/1").mock(
            return_value=Response(200, json=data)
        )

        async with GitHubClient(token="test") as client:
            pr = await client.get_pull_request(repository, 1)

        assert pr.requested_reviewers == frozenset()


class TestStatusAndCompare:
    """Tests for combined status and commit comparison."""

    async def test_get_combined_status(
        self, mock_github_api, repository, make_status_response
    ):
        mock_github_api.get("/repos/owner/repo/commits/head1/status").mock(
            return_value=Response(
                200,
                json=make_status_response(
                    statuses=[("ci/build", "success"), ("ci/test", "failure")]
                ),
            )
        )

        async with GitHubClient(token="test") as client:
            combined = await client.get_combined_status(repository, "head1")

        assert combined.state == "failure"
        assert [s.context for s in combined.statuses] == ["ci/build", "ci/test"]
        assert combined.statuses[1].state == StatusState.FAILURE

    async def test_get_combined_status_pagination(self, mock_github_api, repository):
        """Test contexts past the first page are not dropped."""
        page1 = {
            "state": "failure",
            "sha": "head1",
            "total_count": 101,
            "statuses": [
                {"context": f"ci/job-{i}", "state": "success"} for i in range(100)
            ],
        }
        page2 = {
            "state": "failure",
            "sha": "head1",
            "total_count": 101,
            "statuses": [{"context": "ci/late", "state": "failure"}],
        }
        route = mock_github_api.get("/repos/owner/repo/commits/head1/status").mock(
            side_effect=[Response(200, json=page1), Response(200, json=page2)]
        )

        async with GitHubClient(token="test") as client:
            combined = await client.get_combined_status(repository, "head1")

        assert route.call_count == 2
        assert route.calls.last.request.url.params["page"] == "2"
        assert len(combined.statuses) == 101
        assert combined.statuses[-1].context == "ci/late"
        assert combined.statuses[-1].state == StatusState.FAILURE

    async def test_get_combined_status_stops_at_total_count(
        self, mock_github_api, repository
    ):
        data = {
            "state": "success",
            "sha": "head1",
            "total_count": 100,
            "statuses": [
                {"context": f"ci/job-{i}", "state": "success"} for i in range(100)
            ],
        }
        route = mock_github_api.get("/repos/owner/repo/commits/head1/status").mock(
            return_value=Response(200, json=data)
        )

        async with GitHubClient(token="test") as client:
            combined = await client.get_combined_status(repository, "head1")

        assert route.call_count == 1
        assert len(combined.statuses) == 100

    async def test_compare_commits(self, mock_github_api, repository):
        mock_github_api.get("/repos/owner/repo/compare/base1...head1").mock(
            return_value=Response(
                200, json={"status": "diverged", "ahead_by": 2, "behind_by": 3}
            )
        )

        async with GitHubClient(token="test") as client:
            comparison = await client.compare_commits(repository, "base1", "head1")

        assert comparison.behind_by == 3
        assert comparison.ahead_by == 2


class TestUpdateBranch:
    """Tests for update_branch."""

    async def test_update_in_progress(self, mock_github_api, repository):
        route = mock_github_api.put("/repos/owner/repo/pulls/1/update-branch").mock(
            return_value=Response(
                202,
                json={
                    "message": "Updating pull request branch.",
                    "url": "https://github.com/owner/repo/pull/1",
                },
            )
        )

        async with GitHubClient(token="test") as client:
            result = await client.update_branch(
                repository, 1, expected_head_sha="head1"
            )

        assert result.in_progress is True
        assert json.loads(route.calls.last.request.content) == {
            "expected_head_sha": "head1"
        }

    async def test_not_mergeable(self, mock_github_api, repository):
        """Test the not-mergeable refusal gets its own error type."""
        mock_github_api.put("/repos/owner/repo/pulls/1/update-branch").mock(
            return_value=Response(
                422, json={"message": "Pull request is not mergeable"}
            )
        )

        async with GitHubClient(token="test") as client:
            with pytest.raises(NotMergeableError) as exc_info:
                await client.update_branch(repository, 1)

        assert exc_info.value.status_code == 422

    async def test_other_unprocessable(self, mock_github_api, repository):
        mock_github_api.put("/repos/owner/repo/pulls/1/update-branch").mock(
            return_value=Response(
                422, json={"message": "expected_head_sha does not match"}
            )
        )

        async with GitHubClient(token="test") as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.update_branch(repository, 1, expected_head_sha="x")

        assert not isinstance(exc_info.value, NotMergeableError)


class TestReviewAndMerge:
    """Tests for review creation, merging and the authenticated user."""

    async def test_create_review(self, mock_github_api, repository, review_response):
        route = mock_github_api.post("/repos/owner/repo/pulls/1/reviews").mock(
            return_value=Response(200, json=review_response)
        )

        async with GitHubClient(token="test") as client:
            review = await client.create_review(repository, 1)

        assert review.id == 80
        assert json.loads(route.calls.last.request.content) == {"event": "APPROVE"}

    async def test_merge_pull_request(
        self, mock_github_api, repository, merge_response
    ):
        route = mock_github_api.put("/repos/owner/repo/pulls/1/merge").mock(
            return_value=Response(200, json=merge_response)
        )

        async with GitHubClient(token="test") as client:
            result = await client.merge_pull_request(
                repository, 1, commit_message="Auto-merge successful"
            )

        assert result.merged is True
        assert json.loads(route.calls.last.request.content) == {
            "commit_message": "Auto-merge successful",
            "merge_method": "merge",
        }

    async def test_merge_conflict(self, mock_github_api, repository):
        mock_github_api.put("/repos/owner/repo/pulls/1/merge").mock(
            return_value=Response(405, json={"message": "Pull Request is not mergeable"})
        )

        async with GitHubClient(token="test") as client:
            with pytest.raises(GitHubAPIError) as exc_info:
                await client.merge_pull_request(repository, 1, commit_message="m")

        assert exc_info.value.status_code == 405

    async def test_get_authenticated_user(self, mock_github_api):
        mock_github_api.get("/user").mock(
            return_value=Response(200, json={"login": "checker-bot", "id": 9})
        )

        async with GitHubClient(token="test") as client:
            user = await client.get_authenticated_user()

        assert user.login == "checker-bot"
