"""Branch updates for PRs whose checks are not passing."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .client import GitHubClient
from .exceptions import BranchUpdateTimeoutError, NotMergeableError
from .merge import MergeController
from .models import CheckerConfig, Outcome, PullRequest, StatusClassification
from .parser import RepositoryReference
from .status import StatusEvaluator

logger = logging.getLogger(__name__)

UPDATE_POLL_ATTEMPTS = 5
UPDATE_POLL_DELAY_SECONDS = 5.0

Sleep = Callable[[float], Awaitable[None]]


class RebaseController:
    """
    Handles a PR whose status checks failed or are still pending.

    When auto-rebase is enabled and the head is behind its base, the branch is
    updated from base. If GitHub applies the update asynchronously, the PR is
    re-fetched until its head SHA moves, then checks are evaluated again
    against the new head and the PR is merged if they are clean.
    """

    def __init__(
        self,
        client: GitHubClient,
        repository: RepositoryReference,
        config: CheckerConfig,
        status_evaluator: StatusEvaluator,
        merge_controller: MergeController,
        sleep: Sleep = asyncio.sleep,
        poll_attempts: int = UPDATE_POLL_ATTEMPTS,
        poll_delay: float = UPDATE_POLL_DELAY_SECONDS,
    ):
        self.client = client
        self.repository = repository
        self.config = config
        self.status_evaluator = status_evaluator
        self.merge_controller = merge_controller
        self.sleep = sleep
        self.poll_attempts = poll_attempts
        self.poll_delay = poll_delay

    async def handle(
        self, pr: PullRequest, classification: StatusClassification
    ) -> Outcome:
        logger.info("PR #%d: Status checks not passed", pr.number)
        if classification.failed:
            logger.info(
                "PR #%d: Failed checks: %s", pr.number, ", ".join(classification.failed)
            )
        if classification.pending:
            logger.info(
                "PR #%d: Pending checks: %s",
                pr.number,
                ", ".join(classification.pending),
            )

        if not self.config.auto_rebase:
            state = "failed" if classification.failed else "pending"
            logger.info(
                "PR #%d: Status checks %s and auto-rebase is disabled", pr.number, state
            )
            return Outcome.STATUS_BLOCKED

        comparison = await self.client.compare_commits(
            self.repository, pr.base_sha, pr.head_sha
        )
        if comparison.behind_by == 0:
            logger.info("PR #%d: Branch is up to date with base branch", pr.number)
            return Outcome.STATUS_BLOCKED

        logger.info(
            "PR #%d: Needs rebase, behind by %d commits. Updating branch...",
            pr.number,
            comparison.behind_by,
        )
        return await self.update_branch(pr)

    async def update_branch(self, pr: PullRequest) -> Outcome:
        try:
            result = await self.client.update_branch(
                self.repository, pr.number, expected_head_sha=pr.head_sha
            )
        except NotMergeableError as e:
            raise NotMergeableError(
                f"cannot be updated automatically, manual rebase required: {e}",
                e.status_code,
            ) from e

        if not result.in_progress:
            logger.info("PR #%d: Branch update requested: %s", pr.number, result.message)
            return Outcome.REBASE_TRIGGERED

        logger.info("PR #%d: Update in progress, waiting for completion...", pr.number)
        updated = await self.wait_for_update(pr)
        return await self.check_updated(updated)

    async def wait_for_update(self, pr: PullRequest) -> PullRequest:
        """Poll until the head SHA differs from ``pr.head_sha``; return the fresh snapshot."""
        for attempt in range(1, self.poll_attempts + 1):
            await self.sleep(self.poll_delay)
            updated = await self.client.get_pull_request(self.repository, pr.number)
            logger.debug(
                "PR #%d: poll %d/%d head=%s",
                pr.number,
                attempt,
                self.poll_attempts,
                updated.head_sha,
            )
            if updated.head_sha != pr.head_sha:
                logger.info("PR #%d: Branch update completed", pr.number)
                return updated
        raise BranchUpdateTimeoutError(pr.number, self.poll_attempts)

    async def check_updated(self, pr: PullRequest) -> Outcome:
        classification = await self.status_evaluator.classify(pr.head_sha)
        if classification.is_clean:
            return await self.merge_controller.finalize(pr)

        logger.info("PR #%d: Status checks still not passed after update", pr.number)
        return Outcome.REBASE_DID_NOT_FIX_CHECKS
