"""Git queries for the working directory. Every failure means "no git info"."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0


def _run_git(args: list[str], working_dir: str, timeout: float) -> str | None:
    if not working_dir:
        return None
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=working_dir,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=True,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        # Not a repo, git missing, or too slow
        logger.debug("git %s failed in %s: %s", " ".join(args), working_dir, exc)
        return None
    return result.stdout


def get_git_branch(working_dir: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Current branch name, or "" when unavailable (detached HEAD included)."""
    output = _run_git(["branch", "--show-current"], working_dir, timeout)
    return output.strip() if output else ""


def has_git_changes(working_dir: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    output = _run_git(["status", "--porcelain"], working_dir, timeout)
    return bool(output and output.strip())
