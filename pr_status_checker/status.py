"""Classification of a commit's combined CI status."""

import logging

from .client import GitHubClient
from .models import CombinedStatus, StatusClassification, StatusState
from .parser import RepositoryReference

logger = logging.getLogger(__name__)

FAILED_STATES = frozenset({StatusState.FAILURE, StatusState.ERROR})


def classify_statuses(combined: CombinedStatus) -> StatusClassification:
    """Split status contexts into failed and pending; success and skipped are ignored."""
    classification = StatusClassification()
    for item in combined.statuses:
        if item.state in FAILED_STATES:
            classification.failed.append(item.context)
        elif item.state == StatusState.PENDING:
            classification.pending.append(item.context)
    return classification


class StatusEvaluator:
    """Fetches and classifies the combined status of a head commit."""

    def __init__(self, client: GitHubClient, repository: RepositoryReference):
        self.client = client
        self.repository = repository

    async def classify(self, head_sha: str) -> StatusClassification:
        combined = await self.client.get_combined_status(self.repository, head_sha)
        classification = classify_statuses(combined)
        logger.debug(
            "%s: %d failed, %d pending",
            head_sha,
            len(classification.failed),
            len(classification.pending),
        )
        return classification
