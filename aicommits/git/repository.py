"""Repository state checks.

Contains:
- is_repository: Check whether the working directory is inside a git repo
- has_staged_changes: Check whether anything is staged
- validate_state: Precondition gate used before every diff or commit
- has_commits: Check whether the repository has any commits yet
"""

import logging

from aicommits.git.exceptions import GitError, RepositoryError, StagingError
from aicommits.git.runner import run_git_command_safe
from aicommits.git.status import get_staged_files_list, get_status

logger = logging.getLogger(__name__)

_NO_COMMITS_MARKERS = (
    "does not have any commits yet",
    "bad default revision",
    "ambiguous argument 'HEAD'",
)


def is_repository() -> bool:
    """Check if the working directory is inside a git repository.

    Never raises; any failure is reported as False.

    Returns:
        True if a repository was found.
    """
    try:
        run_git_command_safe(["rev-parse", "--git-dir"])
        return True
    except RepositoryError:
        return False
    except GitError as e:
        logger.warning("Error checking git repository status: %s", e)
        return False


def has_staged_changes() -> bool:
    """Check if there are staged changes.

    Returns:
        True if at least one path is staged.

    Raises:
        RepositoryError: If not in a git repository, so callers can tell
            "no repository" apart from "nothing staged".
    """
    try:
        return len(get_staged_files_list()) > 0
    except RepositoryError:
        raise
    except GitError as e:
        logger.warning("Error checking staged changes: %s", e)
        return False


def validate_state() -> None:
    """Validate that we are in a repository with staged changes.

    The repository check always runs first, so a missing repository is
    reported before an empty index.

    Raises:
        RepositoryError: If not in a git repository.
        StagingError: If nothing is staged. Carries the number of unstaged
            and untracked files when the status could be read.
    """
    if not is_repository():
        raise RepositoryError(
            "Not in a git repository. Please run this command from within a git repository."
        )

    if has_staged_changes():
        return

    try:
        status = get_status()
    except GitError as e:
        logger.debug("Could not read status for staging hint: %s", e)
        raise StagingError(
            "No staged changes found. Please stage some changes before proceeding."
        )

    raise StagingError(
        "No staged changes found",
        unstaged_count=len(status.unstaged),
        untracked_count=len(status.untracked),
    )


def has_commits() -> bool:
    """Check if there are any commits in the repository.

    Returns:
        True if HEAD points at a commit.
    """
    try:
        run_git_command_safe(["log", "-1", "--oneline"])
        return True
    except GitError as e:
        text = f"{e} {getattr(e, 'original_error', '')}"
        if any(marker in text for marker in _NO_COMMITS_MARKERS):
            return False
        logger.warning("Error checking commit history: %s", text.strip())
        return False
