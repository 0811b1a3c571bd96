"""Configuration loading from command-line flags and environment variables."""

import argparse
import os
from collections.abc import Mapping, Sequence

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .models import CheckerConfig
from .parser import get_repository_info

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})

# config field -> environment variable
STRING_ENV_VARS = {
    "token": "GITHUB_TOKEN",
    "owner": "GITHUB_OWNER",
    "repo": "GITHUB_REPO",
    "skip_pattern": "GITHUB_PR_SKIP_PATTERN",
    "author_pattern": "GITHUB_PR_AUTHOR_PATTERN",
}
BOOL_ENV_VARS = {
    "approve": "GITHUB_PR_APPROVE",
    "filter_by_reviewer": "GITHUB_PR_FILTER_REVIEWER",
    "auto_rebase": "GITHUB_PR_AUTO_REBASE",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pr-status-checker",
        description=(
            "Merge open pull requests whose status checks pass, "
            "optionally approving them and updating stale branches."
        ),
    )
    parser.add_argument("--token", help="GitHub personal access token")
    parser.add_argument("--owner", help="Repository owner")
    parser.add_argument("--repo", help="Repository name")
    parser.add_argument(
        "--approve",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Approve PRs before merging when status checks pass (default: on)",
    )
    parser.add_argument(
        "--skip-pattern",
        help="Skip PRs whose titles match this regular expression",
    )
    parser.add_argument(
        "--author-pattern",
        help="Only process PRs whose authors match this regular expression",
    )
    parser.add_argument(
        "--filter-reviewer",
        dest="filter_by_reviewer",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Only process PRs that request your review (default: on)",
    )
    parser.add_argument(
        "--auto-rebase",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Update PR branches that are behind their base (default: off)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    return parser


def parse_bool(name: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ConfigurationError(f"invalid boolean value for {name}: {value!r}")


def resolve_settings(
    args: argparse.Namespace, environ: Mapping[str, str]
) -> dict[str, object]:
    """Merge flags over environment; unset values are left out so model defaults apply."""
    settings: dict[str, object] = {}
    for field, env_var in STRING_ENV_VARS.items():
        value = getattr(args, field)
        if not value:
            value = environ.get(env_var, "")
        if value:
            settings[field] = value
    for field, env_var in BOOL_ENV_VARS.items():
        value = getattr(args, field)
        if value is None and environ.get(env_var):
            value = parse_bool(env_var, environ[env_var])
        if value is not None:
            settings[field] = value
    return settings


def load_config(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[CheckerConfig, argparse.Namespace]:
    """
    Load configuration with precedence flag > environment > git remote > default.

    Returns:
        The validated config and the parsed arguments

    Raises:
        ConfigurationError: If the token is missing, a pattern is invalid or
            the repository cannot be determined
    """
    environ = os.environ if environ is None else environ
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args, environ)

    if not settings.get("token"):
        raise ConfigurationError(
            "GitHub token is required. "
            "Set it via --token or the GITHUB_TOKEN environment variable"
        )

    if not settings.get("owner") or not settings.get("repo"):
        ref = get_repository_info()
        settings["owner"], settings["repo"] = ref.owner, ref.repo

    return build_config(settings), args


def build_config(settings: Mapping[str, object]) -> CheckerConfig:
    """Validate settings into a CheckerConfig."""
    try:
        return CheckerConfig.model_validate(settings)
    except ValidationError as e:
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"invalid configuration: {messages}") from e
