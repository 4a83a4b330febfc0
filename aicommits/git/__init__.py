"""Git operations for ai-commits.

This package wraps the git command line with:
- exceptions: GitError, RepositoryError, StagingError, CommandError, CommitError
- runner: run_git_command, run_git_command_safe, get_repo_root
- repository: is_repository, has_staged_changes, validate_state, has_commits
- status: get_status, get_detailed_status, parse_porcelain_status
- diff: get_staged_diff, parse_numstat, determine_file_status, extract_file_diff
- commit: validate_message, commit, commit_with_body, get_last_commit
"""

# Exceptions
from aicommits.git.exceptions import (
    GitErrorKind,
    GitError,
    RepositoryError,
    StagingError,
    CommandError,
    CommitError,
)

# Runner utilities
from aicommits.git.runner import (
    run_git_command,
    run_git_command_safe,
    get_repo_root,
)

# Repository state
from aicommits.git.repository import (
    is_repository,
    has_staged_changes,
    validate_state,
    has_commits,
)

# Status utilities
from aicommits.git.status import (
    RepositoryStatus,
    DetailedStatus,
    StatusCategory,
    parse_porcelain_status,
    get_status,
    get_detailed_status,
    get_staged_files_list,
)

# Diff utilities
from aicommits.git.diff import (
    FileStatus,
    FileChange,
    DiffSummary,
    DiffSet,
    get_staged_diff,
    parse_numstat,
    determine_file_status,
    extract_file_diff,
    calculate_summary,
)

# Commit utilities
from aicommits.git.commit import (
    CONVENTIONAL_COMMIT_TYPES,
    CommitSummary,
    CommitResult,
    CommitInfo,
    validate_message,
    parse_commit_hash,
    parse_commit_summary,
    commit,
    commit_with_body,
    get_last_commit,
)


__all__ = [
    # Exceptions
    "GitErrorKind",
    "GitError",
    "RepositoryError",
    "StagingError",
    "CommandError",
    "CommitError",
    # Runner
    "run_git_command",
    "run_git_command_safe",
    "get_repo_root",
    # Repository
    "is_repository",
    "has_staged_changes",
    "validate_state",
    "has_commits",
    # Status
    "RepositoryStatus",
    "DetailedStatus",
    "StatusCategory",
    "parse_porcelain_status",
    "get_status",
    "get_detailed_status",
    "get_staged_files_list",
    # Diff
    "FileStatus",
    "FileChange",
    "DiffSummary",
    "DiffSet",
    "get_staged_diff",
    "parse_numstat",
    "determine_file_status",
    "extract_file_diff",
    "calculate_summary",
    # Commit
    "CONVENTIONAL_COMMIT_TYPES",
    "CommitSummary",
    "CommitResult",
    "CommitInfo",
    "validate_message",
    "parse_commit_hash",
    "parse_commit_summary",
    "commit",
    "commit_with_body",
    "get_last_commit",
]
