"""Parsing utilities for git remote URLs."""

import logging
import re
import subprocess
from dataclasses import dataclass
from urllib.parse import urlparse

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# owner/repo path of a remote, with optional .git suffix and trailing slash
REMOTE_PATH_PATTERN = re.compile(
    r"^/?(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)

# scp-like syntax: git@github.com:owner/repo.git
SCP_REMOTE_PATTERN = re.compile(r"^(?:[^@/]+@)?(?P<host>[^:/]+):(?P<path>[^/].*)$")


@dataclass(frozen=True)
class RepositoryReference:
    """Immutable reference to a GitHub repository."""

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def api_path(self) -> str:
        """Return the API path prefix for this repository."""
        return f"/repos/{self.owner}/{self.repo}"


def parse_remote_url(url: str) -> RepositoryReference:
    """
    Parse a git remote URL into owner and repository name.

    Args:
        url: An HTTPS, ssh:// or scp-style remote URL
            (e.g., https://github.com/owner/repo.git, git@github.com:owner/repo.git)

    Returns:
        RepositoryReference with owner and repo

    Raises:
        ValueError: If the URL does not point at an owner/repo path
    """
    url = url.strip()
    parsed = urlparse(url)

    if parsed.scheme in ("http", "https", "ssh", "git"):
        path = parsed.path
    else:
        scp = SCP_REMOTE_PATTERN.match(url)
        if not scp:
            raise ValueError(f"Unsupported remote URL: {url}")
        path = scp.group("path")

    match = REMOTE_PATH_PATTERN.match(path)
    if not match:
        raise ValueError(f"Not a valid repository path in remote URL: {url}")

    return RepositoryReference(owner=match.group("owner"), repo=match.group("repo"))


def get_git_config(key: str, cwd: str | None = None) -> str:
    """Read a single value from git config."""
    result = subprocess.run(
        ["git", "config", "--get", key],
        capture_output=True,
        text=True,
        check=True,
        cwd=cwd,
    )
    return result.stdout.strip()


def get_repository_info(cwd: str | None = None) -> RepositoryReference:
    """Resolve the repository from the ``origin`` remote of the working copy."""
    try:
        remote_url = get_git_config("remote.origin.url", cwd=cwd)
    except (OSError, subprocess.CalledProcessError) as e:
        raise ConfigurationError(f"failed to get remote URL: {e}") from e

    try:
        ref = parse_remote_url(remote_url)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    logger.info("Using repository from git config: %s", ref.full_name)
    return ref
