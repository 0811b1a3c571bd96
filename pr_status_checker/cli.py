"""Command-line entry point."""

import asyncio
import logging
import sys
from collections.abc import Sequence

import httpx

from .client import GitHubClient
from .config import load_config
from .exceptions import ConfigurationError, PRStatusCheckerError, ProcessingError
from .models import CheckerConfig, Outcome, RunReport
from .processor import PRProcessor

logger = logging.getLogger("pr_status_checker")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_CONFIG = 2


def configure_logging(
    level: int = logging.INFO, handler: logging.Handler | None = None
) -> None:
    """Send package logs to stderr (or ``handler``) at ``level``."""
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


async def run_checker(config: CheckerConfig) -> RunReport:
    async with GitHubClient(token=config.token.get_secret_value()) as client:
        processor = await PRProcessor.create(client, config)
        return await processor.run()


def summarize(report: RunReport) -> str:
    counts = ", ".join(
        f"{outcome.value}={report.count(outcome)}"
        for outcome in Outcome
        if report.count(outcome)
    )
    return (
        f"{report.repository}: {len(report.results)} processed, "
        f"{len(report.drafts)} drafts ({counts or 'nothing to do'})"
    )


def main(argv: Sequence[str] | None = None) -> int:
    try:
        config, args = load_config(argv)
    except ConfigurationError as e:
        configure_logging()
        logger.error("Failed to load configuration: %s", e)
        return EXIT_CONFIG

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        report = asyncio.run(run_checker(config))
    except ProcessingError as e:
        logger.info(summarize(e.report))
        logger.error("Failed to process pull requests: %s", e)
        return EXIT_FAILURES
    except (PRStatusCheckerError, httpx.HTTPError) as e:
        logger.error("Failed to process pull requests: %s", e)
        return EXIT_FAILURES

    logger.info(summarize(report))
    logger.info("Successfully completed processing all pull requests")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
