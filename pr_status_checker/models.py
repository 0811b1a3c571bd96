"""Pydantic data models for pull request processing."""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

UPDATE_IN_PROGRESS_MESSAGE = "Updating pull request branch."


class User(BaseModel):
    """GitHub user."""

    login: str


class PullRequest(BaseModel):
    """Snapshot of an open pull request, taken when it was fetched."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    is_draft: bool = False
    author: User
    head_sha: str
    base_sha: str
    requested_reviewers: frozenset[str] = Field(default_factory=frozenset)

    def is_review_requested_from(self, login: str | None) -> bool:
        """Check whether ``login`` is among the requested reviewers."""
        return login is not None and login in self.requested_reviewers


class StatusState(str, Enum):
    """Commit status state."""

    ERROR = "error"
    FAILURE = "failure"
    PENDING = "pending"
    SUCCESS = "success"
    SKIPPED = "skipped"


class StatusItem(BaseModel):
    """A single named status context on a commit."""

    context: str
    state: StatusState


class CombinedStatus(BaseModel):
    """Combined status for a commit from the commit statuses API."""

    state: str
    sha: str
    statuses: list[StatusItem] = Field(default_factory=list)


class StatusClassification(BaseModel):
    """Failed and pending contexts of a combined status."""

    failed: list[str] = Field(default_factory=list)
    pending: list[str] = Field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.failed and not self.pending


class Comparison(BaseModel):
    """Result of comparing a PR head against its base."""

    status: str | None = None
    ahead_by: int = 0
    behind_by: int = 0


class UpdateBranchResult(BaseModel):
    """Response to a branch update request."""

    message: str = ""

    @property
    def in_progress(self) -> bool:
        """GitHub applies the update asynchronously when it answers with this message."""
        return self.message == UPDATE_IN_PROGRESS_MESSAGE


class Review(BaseModel):
    """Pull request review created by the checker."""

    id: int
    state: str | None = None


class MergeResult(BaseModel):
    """Response from the merge endpoint."""

    sha: str | None = None
    merged: bool
    message: str = ""


class Outcome(str, Enum):
    """Terminal result of processing one pull request."""

    SKIPPED = "skipped"
    REBASE_TRIGGERED = "rebase_triggered"
    REBASE_TIMED_OUT = "rebase_timed_out"
    REBASE_DID_NOT_FIX_CHECKS = "rebase_did_not_fix_checks"
    MERGED = "merged"
    APPROVED_AND_MERGED = "approved_and_merged"
    STATUS_BLOCKED = "status_blocked"
    ERROR = "error"


FAILED_OUTCOMES = frozenset({Outcome.ERROR, Outcome.REBASE_TIMED_OUT})


class PRResult(BaseModel):
    """Outcome of one PR pipeline, with the skip reason or error if any."""

    number: int
    title: str
    outcome: Outcome
    reason: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.outcome in FAILED_OUTCOMES


class RunReport(BaseModel):
    """Everything that happened during one run over a repository."""

    repository: str
    drafts: list[int] = Field(default_factory=list)
    results: list[PRResult] = Field(default_factory=list)

    @property
    def failures(self) -> list[PRResult]:
        return [r for r in self.results if r.failed]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def count(self, outcome: Outcome) -> int:
        """Number of PRs that ended with ``outcome``."""
        return sum(1 for r in self.results if r.outcome == outcome)


class CheckerConfig(BaseModel):
    """Configuration for a processing run. Read-only once loaded."""

    model_config = ConfigDict(frozen=True)

    token: SecretStr
    owner: str
    repo: str
    approve: bool = True
    skip_pattern: str = ""  # Skip PRs whose title matches
    author_pattern: str = ""  # Only process PRs whose author matches
    filter_by_reviewer: bool = True
    auto_rebase: bool = False

    @field_validator("token")
    @classmethod
    def _require_token(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError(
                "GitHub token is required. "
                "Set it via --token or the GITHUB_TOKEN environment variable"
            )
        return value

    @field_validator("skip_pattern", "author_pattern")
    @classmethod
    def _compile_pattern(cls, value: str) -> str:
        if value:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid pattern {value!r}: {e}") from e
        return value

    @property
    def skip_regex(self) -> re.Pattern[str] | None:
        return re.compile(self.skip_pattern) if self.skip_pattern else None

    @property
    def author_regex(self) -> re.Pattern[str] | None:
        return re.compile(self.author_pattern) if self.author_pattern else None
