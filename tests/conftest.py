"""Shared test fixtures."""

import pytest
import respx

from pr_status_checker.models import CheckerConfig, PullRequest, User
from pr_status_checker.parser import RepositoryReference


@pytest.fixture
def mock_github_api():
    """Fixture providing a respx mock router for GitHub API."""
    with respx.mock(
        base_url="https://api.github.com", assert_all_called=False
    ) as respx_mock:
        yield respx_mock


@pytest.fixture
def repository():
    return RepositoryReference(owner="owner", repo="repo")


@pytest.fixture
def make_config():
    """Factory for configs; reviewer filtering is off unless asked for."""

    def _make(**overrides):
        settings = {
            "token": "test-token",
            "owner": "owner",
            "repo": "repo",
            "approve": True,
            "filter_by_reviewer": False,
            "auto_rebase": False,
        }
        settings.update(overrides)
        return CheckerConfig(**settings)

    return _make


@pytest.fixture
def make_pr_response():
    """Factory for pull request API payloads."""

    def _make(
        number=1,
        title="Add feature",
        draft=False,
        author="alice",
        head_sha="head1",
        base_sha="base1",
        reviewers=("checker-bot",),
    ):
        return {
            "number": number,
            "title": title,
            "state": "open",
            "draft": draft,
            "user": {"login": author, "id": 1},
            "head": {"sha": head_sha, "ref": f"feature-{number}"},
            "base": {"sha": base_sha, "ref": "main"},
            "requested_reviewers": [{"login": r, "id": 2} for r in reviewers],
        }

    return _make


@pytest.fixture
def make_pr(make_pr_response):
    """Factory for PullRequest snapshots built the way the client builds them."""

    def _make(**kwargs):
        data = make_pr_response(**kwargs)
        return PullRequest(
            number=data["number"],
            title=data["title"],
            is_draft=data["draft"],
            author=User(login=data["user"]["login"]),
            head_sha=data["head"]["sha"],
            base_sha=data["base"]["sha"],
            requested_reviewers=frozenset(
                r["login"] for r in data["requested_reviewers"]
            ),
        )

    return _make


@pytest.fixture
def make_status_response():
    """Factory for combined status payloads from (context, state) pairs."""

    def _make(sha="head1", statuses=()):
        items = [{"context": c, "state": s} for c, s in statuses]
        states = {s for _, s in statuses}
        if states & {"failure", "error"}:
            overall = "failure"
        elif "pending" in states or not statuses:
            overall = "pending"
        else:
            overall = "success"
        return {
            "state": overall,
            "sha": sha,
            "statuses": items,
            "total_count": len(items),
        }

    return _make


@pytest.fixture
def merge_response():
    return {
        "sha": "merge-sha",
        "merged": True,
        "message": "Pull Request successfully merged",
    }


@pytest.fixture
def review_response():
    return {"id": 80, "state": "APPROVED", "user": {"login": "checker-bot"}}
