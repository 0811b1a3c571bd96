"""Exception hierarchy for the PR status checker."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RunReport


class PRStatusCheckerError(Exception):
    """Base exception for all PR status checker errors."""


class ConfigurationError(PRStatusCheckerError):
    """Raised when configuration is missing or invalid."""


class GitHubAPIError(PRStatusCheckerError):
    """Base exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(GitHubAPIError):
    """Raised when GitHub rate limit is exceeded."""

    def __init__(self, reset_time: int):
        super().__init__(f"Rate limit exceeded. Resets at {reset_time}", 403)
        self.reset_time = reset_time


class NotMergeableError(GitHubAPIError):
    """Raised when a branch update is refused because the PR is not mergeable."""


class FilterError(PRStatusCheckerError):
    """Raised when a skip filter cannot be evaluated for a PR."""


class BranchUpdateTimeoutError(PRStatusCheckerError):
    """Raised when a branch update does not land within the polling budget."""

    def __init__(self, number: int, attempts: int):
        super().__init__(
            f"branch update timed out after {attempts} attempts"
        )
        self.number = number
        self.attempts = attempts


class MergeError(PRStatusCheckerError):
    """Raised when GitHub accepts a merge request but does not merge."""


class ProcessingError(PRStatusCheckerError):
    """Aggregate error for a run in which at least one PR failed."""

    def __init__(self, report: RunReport):
        failures = report.failures
        details = "; ".join(f"PR #{r.number}: {r.error}" for r in failures)
        super().__init__(
            f"encountered {len(failures)} errors while processing PRs: {details}"
        )
        self.report = report
