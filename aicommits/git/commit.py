"""Git commit utilities.

Contains:
- validate_message: Check the shape of a commit message
- parse_commit_hash / parse_commit_summary: Read `git commit` output
- commit: Commit staged changes with a single message
- commit_with_body: Commit staged changes with a subject and body
- get_last_commit: Read information about HEAD
"""

import logging
import os
import re
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from aicommits.git.exceptions import (
    CommandError,
    CommitError,
    GitError,
    match_commit_hint,
)
from aicommits.git.repository import validate_state
from aicommits.git.runner import run_git_command_safe

logger = logging.getLogger(__name__)


CONVENTIONAL_COMMIT_TYPES = [
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "build",
    "ci",
    "ops",
    "chore",
    "revert",
]

CONVENTIONAL_COMMIT_PATTERN = re.compile(
    rf"^({'|'.join(CONVENTIONAL_COMMIT_TYPES)})(\(.+\))?!?: .+"
)

MIN_MESSAGE_LENGTH = 10
MAX_SUBJECT_LENGTH = 100

# Total attempts for the commit subprocess (retries index.lock contention)
COMMIT_ATTEMPTS = 2

UNKNOWN_HASH = "unknown"

_HASH_PATTERN = re.compile(r"\[[^\]]*\s([0-9a-f]{4,40})\]")
_SUMMARY_PATTERN = re.compile(
    r"(\d+) files? changed(?:, (\d+) insertions?\(\+\))?(?:, (\d+) deletions?\(-\))?"
)


@dataclass
class CommitSummary:
    """Counts reported by `git commit`."""

    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0


@dataclass
class CommitResult:
    """Outcome of a successful commit."""

    hash: str = UNKNOWN_HASH
    summary: CommitSummary = field(default_factory=CommitSummary)

    @property
    def files_changed(self) -> int:
        return self.summary.files_changed

    @property
    def insertions(self) -> int:
        return self.summary.insertions

    @property
    def deletions(self) -> int:
        return self.summary.deletions


@dataclass
class CommitInfo:
    """Information about a single commit."""

    hash: str
    subject: str
    author: str
    date: str


def validate_message(message: str) -> None:
    """Validate the shape of a commit message.

    Conventional commit format is only recommended: a message that does not
    follow it is logged as a warning but accepted.

    Args:
        message: The full commit message.

    Raises:
        CommitError: If the message is empty, too short, or its first line
            is too long.
    """
    if not message or not message.strip():
        raise CommitError("Commit message cannot be empty")

    trimmed = message.strip()
    if len(trimmed) < MIN_MESSAGE_LENGTH:
        raise CommitError(
            f"Commit message is too short (minimum {MIN_MESSAGE_LENGTH} characters)"
        )

    first_line = trimmed.split("\n")[0]
    if len(first_line) > MAX_SUBJECT_LENGTH:
        raise CommitError(
            f"Commit message first line is too long (maximum {MAX_SUBJECT_LENGTH} characters)"
        )

    if not CONVENTIONAL_COMMIT_PATTERN.match(first_line):
        logger.warning(
            "Commit message does not follow conventional commit format. "
            "Recommended format: type(scope): description "
            "(e.g. feat(auth): add user authentication)"
        )


def parse_commit_hash(output: str) -> str:
    """Extract the short hash from `git commit` output.

    Args:
        output: Stdout of git commit, e.g. "[main 1a2b3c4] feat: add x".

    Returns:
        The short hash, or "unknown" if it cannot be found.
    """
    match = _HASH_PATTERN.search(output)
    return match.group(1) if match else UNKNOWN_HASH


def parse_commit_summary(output: str) -> CommitSummary:
    """Parse the "N files changed, M insertions(+), K deletions(-)" line.

    Args:
        output: Stdout of git commit.

    Returns:
        CommitSummary, all zeros if the line is missing.
    """
    match = _SUMMARY_PATTERN.search(output)
    if not match:
        return CommitSummary()

    files_changed, insertions, deletions = match.groups()
    return CommitSummary(
        files_changed=int(files_changed or 0),
        insertions=int(insertions or 0),
        deletions=int(deletions or 0),
    )


def _run_commit(args: list[str]) -> CommitResult:
    try:
        output = run_git_command_safe(["commit"] + args, retries=COMMIT_ATTEMPTS)
    except CommandError as e:
        # Known commit failures get a commit-specific remedy
        if match_commit_hint(e.original_error):
            raise CommitError(
                f"Failed to commit changes: {e.original_error}", e.original_error
            ) from e
        raise

    result = CommitResult(hash=parse_commit_hash(output), summary=parse_commit_summary(output))
    logger.info("Commit successful: %s", result.hash)
    return result


def _log_recovery_hint(error: GitError) -> None:
    if error.recovery_hint:
        logger.error(
            "Recovery suggestion:\n%s", error.recovery_hint, extra={"recovery_hint": error.recovery_hint}
        )


@contextmanager
def _message_file(message: str) -> Iterator[Path]:
    """Write a commit message to a unique temp file, removed on exit.

    Cleanup failures are logged, never raised.
    """
    fd, name = tempfile.mkstemp(
        prefix=f"ai-commits-message-{time.time_ns()}-",
        suffix=".txt",
    )
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(message)
        yield path
    finally:
        try:
            path.unlink()
        except OSError as e:
            logger.warning("Could not clean up temporary file %s: %s", path, e)


def commit(message: str) -> CommitResult:
    """Commit staged changes with the given message.

    Args:
        message: The commit message.

    Returns:
        CommitResult with the new hash and change counts.

    Raises:
        RepositoryError: If not in a git repository.
        StagingError: If nothing is staged.
        CommitError: If the message is invalid or the commit fails.
        GitError: For other git failures.
    """
    try:
        validate_state()
        validate_message(message)
        return _run_commit(["-m", message])
    except GitError as e:
        _log_recovery_hint(e)
        raise
    except Exception as e:
        raise CommitError(f"Failed to commit changes: {e}", str(e)) from e


def commit_with_body(subject: str, body: Optional[str] = None) -> CommitResult:
    """Commit staged changes with a multi-line message.

    The message is passed to git through a temporary file which is always
    removed before this function returns.

    Args:
        subject: The first line of the message.
        body: Optional message body, separated from the subject by a blank line.

    Returns:
        CommitResult with the new hash and change counts.

    Raises:
        RepositoryError: If not in a git repository.
        StagingError: If nothing is staged.
        CommitError: If the message is invalid or the commit fails.
        GitError: For other git failures.
    """
    try:
        validate_state()

        full_message = f"{subject}\n\n{body}" if body else subject
        validate_message(full_message)

        with _message_file(full_message) as message_file:
            return _run_commit(["-F", str(message_file)])
    except GitError as e:
        _log_recovery_hint(e)
        raise
    except Exception as e:
        raise CommitError(f"Failed to commit changes: {e}", str(e)) from e


def get_last_commit() -> CommitInfo:
    """Get information about the last commit.

    Returns:
        CommitInfo for HEAD.

    Raises:
        GitError: If there is no commit or the output cannot be parsed.
    """
    try:
        output = run_git_command_safe(
            ["log", "-1", "--pretty=format:%H|%s|%an|%ad", "--date=short"]
        ).strip()
        parts = output.split("|")

        if len(parts) < 4:
            raise GitError("Unable to parse last commit information", "PARSE_ERROR")

        # The subject itself may contain "|"
        return CommitInfo(
            hash=parts[0],
            subject="|".join(parts[1:-2]),
            author=parts[-2],
            date=parts[-1],
        )
    except GitError:
        raise
    except Exception as e:
        raise GitError(f"Failed to get last commit: {e}", "COMMIT_INFO_FAILED") from e
