"""Concurrent processing of every open pull request in a repository."""

import asyncio
import logging

from .client import GitHubClient
from .exceptions import BranchUpdateTimeoutError, ProcessingError
from .filters import build_filter_chain, evaluate_filters
from .merge import MergeController
from .models import CheckerConfig, Outcome, PRResult, PullRequest, RunReport
from .parser import RepositoryReference
from .rebase import RebaseController, Sleep
from .status import StatusEvaluator

logger = logging.getLogger(__name__)


class PRProcessor:
    """
    Runs the per-PR pipeline over all open, non-draft PRs of a repository.

    Each PR is handled by its own task: skip filters, then status checks,
    then either the merge or the rebase path. Errors are caught per PR so one
    failing PR never interrupts the others.
    """

    def __init__(
        self,
        client: GitHubClient,
        config: CheckerConfig,
        current_actor: str | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.config = config
        self.current_actor = current_actor
        self.repository = RepositoryReference(owner=config.owner, repo=config.repo)
        self.filters = build_filter_chain(config, current_actor)
        self.status_evaluator = StatusEvaluator(client, self.repository)
        self.merge_controller = MergeController(client, self.repository, config)
        self.rebase_controller = RebaseController(
            client,
            self.repository,
            config,
            self.status_evaluator,
            self.merge_controller,
            sleep=sleep,
        )

    @classmethod
    async def create(
        cls,
        client: GitHubClient,
        config: CheckerConfig,
        sleep: Sleep = asyncio.sleep,
    ) -> "PRProcessor":
        """Build a processor, resolving the authenticated user once if needed."""
        current_actor = None
        if config.filter_by_reviewer:
            user = await client.get_authenticated_user()
            current_actor = user.login
        return cls(client, config, current_actor=current_actor, sleep=sleep)

    async def process_pull_requests(self) -> RunReport:
        """Process every open PR and report what happened to each one."""
        prs = await self.client.list_pull_requests(self.repository)
        logger.info("Found %d open pull requests", len(prs))
        if self.config.filter_by_reviewer:
            logger.info(
                "Reviewer filter enabled: only processing PRs where %s is a reviewer",
                self.current_actor,
            )
        if self.config.author_pattern:
            logger.info("Author filter enabled: %s", self.config.author_pattern)
        if self.config.skip_pattern:
            logger.info("Skip pattern enabled: %s", self.config.skip_pattern)

        report = RunReport(repository=self.repository.full_name)
        ready: list[PullRequest] = []
        for pr in prs:
            if pr.is_draft:
                logger.info("PR #%d: Skipping draft PR: %s", pr.number, pr.title)
                report.drafts.append(pr.number)
            else:
                ready.append(pr)

        report.results = list(
            await asyncio.gather(*(self._run_unit(pr) for pr in ready))
        )
        return report

    async def run(self) -> RunReport:
        """
        Process all PRs.

        Raises:
            ProcessingError: If the pipeline failed for any PR
        """
        report = await self.process_pull_requests()
        if not report.succeeded:
            raise ProcessingError(report)
        return report

    async def _run_unit(self, pr: PullRequest) -> PRResult:
        """Run one PR's pipeline, turning any error into a failed result."""
        try:
            return await self.process_single(pr)
        except BranchUpdateTimeoutError as e:
            logger.error("Error processing PR #%d: %s", pr.number, e)
            return PRResult(
                number=pr.number,
                title=pr.title,
                outcome=Outcome.REBASE_TIMED_OUT,
                error=str(e),
            )
        except Exception as e:
            logger.exception("Error processing PR #%d: %s", pr.number, e)
            return PRResult(
                number=pr.number,
                title=pr.title,
                outcome=Outcome.ERROR,
                error=str(e) or type(e).__name__,
            )

    async def process_single(self, pr: PullRequest) -> PRResult:
        logger.info("Processing PR #%d: %s", pr.number, pr.title)

        reason = evaluate_filters(pr, self.filters)
        if reason is not None:
            return PRResult(
                number=pr.number, title=pr.title, outcome=Outcome.SKIPPED, reason=reason
            )

        classification = await self.status_evaluator.classify(pr.head_sha)
        if classification.is_clean:
            outcome = await self.merge_controller.finalize(pr)
        else:
            outcome = await self.rebase_controller.handle(pr, classification)
        return PRResult(number=pr.number, title=pr.title, outcome=outcome)
