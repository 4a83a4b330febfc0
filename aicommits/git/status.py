"""Git status utilities.

Contains:
- RepositoryStatus: Staged, unstaged and untracked paths of the working tree
- DetailedStatus: Truncated, counted view of a RepositoryStatus for display
- parse_porcelain_status: Parse `git status --porcelain` output
- get_status: Query and parse the repository status
- get_detailed_status: Summarized status for diagnostics
- get_staged_files_list: Get list of staged file paths
"""

from dataclasses import dataclass, field

from aicommits.git.exceptions import GitError
from aicommits.git.runner import run_git_command_safe


# Number of example paths kept per category in the detailed view
DETAILED_STATUS_MAX_FILES = 5


@dataclass
class RepositoryStatus:
    """Working tree status split by category.

    A path can appear in more than one category, e.g. a file with staged
    changes that was modified again afterwards is both staged and unstaged.
    """

    staged: list[str] = field(default_factory=list)
    unstaged: list[str] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)


@dataclass
class StatusCategory:
    """Count and example paths for one status category."""

    count: int
    files: list[str]


@dataclass
class DetailedStatus:
    """Display-oriented status summary."""

    staged: StatusCategory
    unstaged: StatusCategory
    untracked: StatusCategory
    summary: str


def parse_porcelain_status(output: str) -> RepositoryStatus:
    """Parse git status output in porcelain format.

    The porcelain format uses two columns followed by a space and the path:
    - First column: index (staged) status
    - Second column: worktree status

    Args:
        output: Raw output of `git status --porcelain`.

    Returns:
        The classified repository status.
    """
    status = RepositoryStatus()

    for line in output.split("\n"):
        if not line.strip():
            continue
        # Skip lines that are too short to carry both columns
        if len(line) < 3:
            continue

        index_status = line[0]
        worktree_status = line[1]
        path = line[3:]

        if index_status != " " and index_status != "?":
            status.staged.append(path)
        if worktree_status != " " and worktree_status != "?":
            status.unstaged.append(path)
        if index_status == "?" and worktree_status == "?":
            status.untracked.append(path)

    return status


def get_status() -> RepositoryStatus:
    """Get the repository status.

    Returns:
        The classified repository status.

    Raises:
        GitError: If the status cannot be read.
    """
    try:
        output = run_git_command_safe(["status", "--porcelain"])
        return parse_porcelain_status(output)
    except GitError:
        raise
    except Exception as e:
        raise GitError(f"Failed to get git status: {e}", "STATUS_FAILED") from e


def _category(files: list[str]) -> StatusCategory:
    return StatusCategory(count=len(files), files=files[:DETAILED_STATUS_MAX_FILES])


def get_detailed_status() -> DetailedStatus:
    """Get status counts with a few example files per category.

    Returns:
        DetailedStatus with a human readable summary line.
    """
    status = get_status()

    staged = _category(status.staged)
    unstaged = _category(status.unstaged)
    untracked = _category(status.untracked)

    parts = []
    if staged.count > 0:
        parts.append(f"{staged.count} staged file(s)")
    if unstaged.count > 0:
        parts.append(f"{unstaged.count} unstaged file(s)")
    if untracked.count > 0:
        parts.append(f"{untracked.count} untracked file(s)")

    summary = ", ".join(parts) if parts else "Working directory clean"

    return DetailedStatus(
        staged=staged,
        unstaged=unstaged,
        untracked=untracked,
        summary=summary,
    )


def get_staged_files_list() -> list[str]:
    """Get list of staged file paths.

    Returns:
        List of staged file paths.
    """
    output = run_git_command_safe(["diff", "--staged", "--name-only"]).strip()
    if not output:
        return []
    return output.split("\n")
