"""Skip filters applied to each pull request before its status is fetched.

Filters run in a fixed order and the first one that fires decides the skip
reason, so the logged reason for a PR is always the same for the same input.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from .exceptions import FilterError
from .models import CheckerConfig, PullRequest

logger = logging.getLogger(__name__)

# Returns a skip reason, or None to let the PR through
FilterCheck = Callable[[PullRequest], str | None]


@dataclass(frozen=True)
class SkipFilter:
    """A named predicate in the skip chain."""

    name: str
    check: FilterCheck


def reviewer_filter(current_actor: str | None) -> SkipFilter:
    """Only let through PRs that request a review from ``current_actor``."""

    def check(pr: PullRequest) -> str | None:
        if not pr.requested_reviewers:
            return "no reviewers assigned"
        if not pr.is_review_requested_from(current_actor):
            return f"{current_actor} not being a reviewer"
        return None

    return SkipFilter("reviewer", check)


def title_filter(pattern: re.Pattern[str]) -> SkipFilter:
    """Skip PRs whose title matches ``pattern`` anywhere."""

    def check(pr: PullRequest) -> str | None:
        if pattern.search(pr.title):
            return f"title matching skip pattern: {pattern.pattern}"
        return None

    return SkipFilter("title", check)


def author_filter(pattern: re.Pattern[str]) -> SkipFilter:
    """Skip PRs whose author does NOT match ``pattern``."""

    def check(pr: PullRequest) -> str | None:
        if not pattern.search(pr.author.login):
            return (
                f"author '{pr.author.login}' not matching "
                f"author pattern: {pattern.pattern}"
            )
        return None

    return SkipFilter("author", check)


def build_filter_chain(
    config: CheckerConfig, current_actor: str | None
) -> list[SkipFilter]:
    """Build the ordered filter chain: reviewer, title, author."""
    chain: list[SkipFilter] = []
    if config.filter_by_reviewer:
        chain.append(reviewer_filter(current_actor))
    if config.skip_regex is not None:
        chain.append(title_filter(config.skip_regex))
    if config.author_regex is not None:
        chain.append(author_filter(config.author_regex))
    return chain


def evaluate_filters(pr: PullRequest, chain: list[SkipFilter]) -> str | None:
    """Run ``chain`` against ``pr`` and return the first skip reason."""
    for skip_filter in chain:
        try:
            reason = skip_filter.check(pr)
        except re.error as e:
            raise FilterError(
                f"error matching {skip_filter.name} filter: {e}"
            ) from e
        if reason is not None:
            logger.info("PR #%d: Skipping due to %s", pr.number, reason)
            return reason
    return None


def should_skip(
    pr: PullRequest, config: CheckerConfig, current_actor: str | None
) -> str | None:
    """
    Decide whether a PR should be skipped.

    Args:
        pr: The pull request snapshot
        config: Run configuration
        current_actor: Login of the authenticated user, when reviewer filtering is on

    Returns:
        The skip reason, or None if the PR should be processed

    Raises:
        FilterError: If a filter fails to evaluate for this PR
    """
    return evaluate_filters(pr, build_filter_chain(config, current_actor))
