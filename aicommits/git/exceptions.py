"""Git-related exception classes.

Contains all exception classes for Git operations:
- GitErrorKind: Tag identifying which failure family an error belongs to
- GitError: Base exception for git-related errors
- RepositoryError: Raised when not inside a git repository
- StagingError: Raised when there are no staged changes
- CommandError: Raised when a git subprocess fails
- CommitError: Raised when a commit cannot be created
"""

from enum import Enum
from typing import Optional


GENERIC_RECOVERY_HINT = "Check the error above and try again."


class GitErrorKind(Enum):
    """Failure families for git operations."""

    GENERIC = "generic"
    REPOSITORY = "repository"
    STAGING = "staging"
    COMMAND = "command"
    COMMIT = "commit"


class GitError(Exception):
    """Base exception for git-related errors.

    Attributes:
        message: Human readable description of the failure.
        code: Machine readable error code.
        recovery_hint: Suggested remedy, if one is known.
    """

    kind = GitErrorKind.GENERIC

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        recovery_hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recovery_hint = recovery_hint

    @property
    def display_hint(self) -> str:
        """The recovery hint, or a generic one when none is set."""
        return self.recovery_hint or GENERIC_RECOVERY_HINT


class RepositoryError(GitError):
    """Raised when the working directory is not inside a git repository."""

    kind = GitErrorKind.REPOSITORY

    def __init__(self, message: str = "Not in a git repository"):
        super().__init__(
            message,
            "NOT_A_REPOSITORY",
            "Make sure you are running this command from within a git repository. "
            'Use "git init" to initialize a new repository.',
        )


class StagingError(GitError):
    """Raised when there are no staged changes."""

    kind = GitErrorKind.STAGING

    def __init__(self, message: str, unstaged_count: int = 0, untracked_count: int = 0):
        hints = []
        if unstaged_count > 0:
            hints.append(f"Stage {unstaged_count} unstaged file(s): git add <files>")
        if untracked_count > 0:
            hints.append(f"Stage {untracked_count} untracked file(s): git add <files>")
        if not hints:
            hints.append("Make some changes and stage them: git add <files>")

        super().__init__(message, "NO_STAGED_CHANGES", "\n".join(hints))
        self.unstaged_count = unstaged_count
        self.untracked_count = untracked_count


# Substring of git's stderr -> recovery hint, checked in order
_COMMAND_HINTS = [
    (
        "not a git repository",
        'Initialize a git repository with "git init" or navigate to an existing repository.',
    ),
    (
        "Permission denied",
        "Check file permissions and ensure you have write access to the repository.",
    ),
    (
        "fatal: not a valid object name",
        "The repository may be empty or corrupted. Try making an initial commit.",
    ),
    (
        "index.lock",
        "Another git process may be running. Wait for it to finish "
        "or remove .git/index.lock if stuck.",
    ),
]


class CommandError(GitError):
    """Raised when a git subprocess exits with a non-zero status."""

    kind = GitErrorKind.COMMAND

    def __init__(self, command: str, original_error: str, exit_code: Optional[int] = None):
        recovery_hint = "Check the command and try again."
        for marker, hint in _COMMAND_HINTS:
            if marker in original_error:
                recovery_hint = hint
                break

        super().__init__(f"Git command failed: git {command}", "COMMAND_FAILED", recovery_hint)
        self.command = command
        self.original_error = original_error
        self.exit_code = exit_code


def match_commit_hint(original_error: Optional[str]) -> Optional[str]:
    """Find a specific recovery hint for a failed `git commit`.

    Args:
        original_error: Error text printed by git.

    Returns:
        The matching hint, or None for unrecognized errors.
    """
    if not original_error:
        return None
    if "Please tell me who you are" in original_error:
        return (
            "Configure your git identity:\n"
            '  git config --global user.name "Your Name"\n'
            '  git config --global user.email "your.email@example.com"'
        )
    if "nothing to commit" in original_error:
        return (
            "Stage some changes before committing:\n"
            "  git add <files>  # Stage specific files\n"
            "  git add .        # Stage all changes"
        )
    if "pathspec" in original_error and "did not match" in original_error:
        return "Check that the files you're trying to add exist and try again."
    return None


class CommitError(GitError):
    """Raised when a commit cannot be created."""

    kind = GitErrorKind.COMMIT

    def __init__(self, message: str, original_error: Optional[str] = None):
        recovery_hint = (
            match_commit_hint(original_error)
            or "Check your git configuration and try again."
        )
        super().__init__(message, "COMMIT_FAILED", recovery_hint)
        self.original_error = original_error or ""
