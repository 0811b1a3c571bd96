"""Approval and merge of pull requests whose checks pass."""

import logging

from .client import GitHubClient
from .exceptions import MergeError
from .models import CheckerConfig, Outcome, PullRequest
from .parser import RepositoryReference

logger = logging.getLogger(__name__)

MERGE_COMMIT_MESSAGE = "Auto-merge successful"
MERGE_METHOD = "merge"
APPROVE_EVENT = "APPROVE"


class MergeController:
    """Optionally approves, then merges, a PR with passing checks."""

    def __init__(
        self,
        client: GitHubClient,
        repository: RepositoryReference,
        config: CheckerConfig,
    ):
        self.client = client
        self.repository = repository
        self.config = config

    async def finalize(self, pr: PullRequest) -> Outcome:
        """
        Approve (if enabled) and merge ``pr``.

        An approval failure propagates before any merge is attempted. Merge
        failures are not retried; the PR is picked up again on the next run.
        """
        logger.info("PR #%d: All status checks passed", pr.number)

        if self.config.approve:
            logger.info("PR #%d: Approving PR...", pr.number)
            review = await self.client.create_review(
                self.repository, pr.number, event=APPROVE_EVENT
            )
            logger.info("PR #%d: Approved with review ID %d", pr.number, review.id)

        result = await self.client.merge_pull_request(
            self.repository,
            pr.number,
            commit_message=MERGE_COMMIT_MESSAGE,
            merge_method=MERGE_METHOD,
        )
        if not result.merged:
            raise MergeError(f"PR was not merged: {result.message or 'no reason given'}")

        logger.info("PR #%d: Successfully merged as %s", pr.number, result.sha)
        return Outcome.APPROVED_AND_MERGED if self.config.approve else Outcome.MERGED
