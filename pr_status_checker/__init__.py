"""Merge open GitHub pull requests whose status checks pass."""

from .exceptions import (
    BranchUpdateTimeoutError,
    ConfigurationError,
    GitHubAPIError,
    NotMergeableError,
    PRStatusCheckerError,
    ProcessingError,
)
from .models import CheckerConfig, Outcome, PRResult, RunReport
from .processor import PRProcessor

__all__ = [
    "BranchUpdateTimeoutError",
    "CheckerConfig",
    "ConfigurationError",
    "GitHubAPIError",
    "NotMergeableError",
    "Outcome",
    "PRProcessor",
    "PRResult",
    "PRStatusCheckerError",
    "ProcessingError",
    "RunReport",
]
