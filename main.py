"""FastMCP server exposing the pull request status checker."""

import asyncio
import os
from typing import Any

import httpx
from fastmcp import FastMCP

from pr_status_checker.client import GitHubClient
from pr_status_checker.config import build_config
from pr_status_checker.exceptions import ConfigurationError, GitHubAPIError
from pr_status_checker.processor import PRProcessor
from pr_status_checker.rebase import Sleep

mcp = FastMCP("GitHub PR Status Checker")


async def process_pull_requests_impl(
    owner: str,
    repo: str,
    approve: bool = True,
    skip_pattern: str = "",
    author_pattern: str = "",
    filter_by_reviewer: bool = True,
    auto_rebase: bool = False,
    token: str | None = None,
    sleep: Sleep = asyncio.sleep,
) -> dict[str, Any]:
    """
    Process every open pull request of a repository once.

    Args:
        owner: Repository owner
        repo: Repository name
        approve: Approve PRs before merging them
        skip_pattern: Skip PRs whose title matches this regular expression
        author_pattern: Only process PRs whose author matches this regular expression
        filter_by_reviewer: Only process PRs that request a review from the token's user
        auto_rebase: Update branches that are behind their base when checks fail
        token: GitHub token (default: GITHUB_TOKEN environment variable)

    Returns:
        The run report, with per-PR outcomes and an overall success flag.
    """
    try:
        config = build_config(
            {
                "token": token or os.environ.get("GITHUB_TOKEN", ""),
                "owner": owner,
                "repo": repo,
                "approve": approve,
                "skip_pattern": skip_pattern,
                "author_pattern": author_pattern,
                "filter_by_reviewer": filter_by_reviewer,
                "auto_rebase": auto_rebase,
            }
        )
    except ConfigurationError as e:
        return {"success": False, "error": str(e)}

    async with GitHubClient(token=config.token.get_secret_value()) as client:
        try:
            processor = await PRProcessor.create(client, config, sleep=sleep)
            report = await processor.process_pull_requests()
        except GitHubAPIError as e:
            return {
                "success": False,
                "reason": "api_error",
                "error": str(e),
                "status_code": e.status_code,
            }
        except httpx.RequestError as e:
            return {"success": False, "reason": "network_error", "error": str(e)}

    return {
        "success": report.succeeded,
        "failures": [r.model_dump(mode="json") for r in report.failures],
        **report.model_dump(mode="json"),
    }


@mcp.tool()
async def process_pull_requests(
    owner: str,
    repo: str,
    approve: bool = True,
    skip_pattern: str = "",
    author_pattern: str = "",
    filter_by_reviewer: bool = True,
    auto_rebase: bool = False,
) -> dict[str, Any]:  # pragma: no cover
    """
    Merge open pull requests of a repository whose status checks pass.

    Args:
        owner: Repository owner
        repo: Repository name
        approve: Approve PRs before merging them (default: true)
        skip_pattern: Skip PRs whose title matches this regular expression
        author_pattern: Only process PRs whose author matches this regular expression
        filter_by_reviewer: Only process PRs that request your review (default: true)
        auto_rebase: Update branches that are behind their base (default: false)

    Returns:
        Per-PR outcomes and an overall success flag.
    """
    return await process_pull_requests_impl(
        owner=owner,
        repo=repo,
        approve=approve,
        skip_pattern=skip_pattern,
        author_pattern=author_pattern,
        filter_by_reviewer=filter_by_reviewer,
        auto_rebase=auto_rebase,
    )


if __name__ == "__main__":
    mcp.run()
