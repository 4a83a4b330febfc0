"""Git command runner and repository utilities.

Contains:
- run_git_command: Run a git command and return its output
- run_git_command_safe: Run a git command, retrying transient failures
- get_repo_root: Get the root directory of the current git repository
"""

import logging
import subprocess
import time
from pathlib import Path

from aicommits.git.exceptions import (
    CommandError,
    GitError,
    RepositoryError,
    StagingError,
)

logger = logging.getLogger(__name__)

# Seconds to wait between attempts of a transient failure
RETRY_BACKOFF_SECONDS = 1.0

NOT_A_REPOSITORY_MARKER = "not a git repository"
INDEX_LOCK_MARKER = "index.lock"


def run_git_command(args: list[str]) -> str:
    """Run a git command and return its output.

    The output is returned as-is; porcelain formats are column sensitive,
    so callers strip it themselves when that is safe.

    Args:
        args: List of arguments to pass to git.

    Returns:
        The stdout of the git command.

    Raises:
        RepositoryError: If git reports that this is not a repository.
        CommandError: If the command fails for any other reason.
        GitError: If git is not installed.
    """
    command = " ".join(args)
    logger.debug("Running: git %s", command)
    try:
        result = subprocess.run(
            ["git"] + args,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )
        return result.stdout
    except subprocess.CalledProcessError as e:
        # Some failures, e.g. "nothing to commit", are reported on stdout
        stderr = (e.stderr or "").strip() or (e.stdout or "").strip() or str(e)
        if NOT_A_REPOSITORY_MARKER in stderr.lower():
            raise RepositoryError("Not in a git repository")
        raise CommandError(command, stderr, e.returncode)
    except FileNotFoundError:
        raise GitError(
            "Git is not installed or not in PATH.",
            "GIT_NOT_FOUND",
            "Install git and make sure the git executable is on your PATH.",
        )


def _is_transient(error: GitError) -> bool:
    """Check whether a failure is likely to succeed on retry."""
    if isinstance(error, (RepositoryError, StagingError)):
        return False
    if not isinstance(error, CommandError):
        return False
    return INDEX_LOCK_MARKER in error.message or INDEX_LOCK_MARKER in error.original_error


def run_git_command_safe(args: list[str], retries: int = 1) -> str:
    """Run a git command, retrying transient failures.

    Only lock contention on the index is treated as transient. Each retry
    waits RETRY_BACKOFF_SECONDS before the next attempt.

    Args:
        args: List of arguments to pass to git.
        retries: Total number of attempts.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: The last failure once attempts are exhausted, or any
            non-transient failure immediately.
    """
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            return run_git_command(args)
        except GitError as e:
            if _is_transient(e) and attempt < attempts:
                logger.warning(
                    "Git operation failed (attempt %d/%d), retrying...", attempt, attempts
                )
                time.sleep(RETRY_BACKOFF_SECONDS)
                continue
            raise


def get_repo_root() -> Path:
    """Get the root directory of the current git repository.

    Returns:
        Path to the repository root.

    Raises:
        RepositoryError: If not in a git repository.
    """
    root = run_git_command(["rev-parse", "--show-toplevel"])
    return Path(root.strip())
