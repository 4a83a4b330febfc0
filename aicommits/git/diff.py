"""Git diff utilities.

Contains:
- FileStatus, FileChange, DiffSummary, DiffSet: Typed view of the staged diff
- get_staged_diff: Read and parse the staged changes
- parse_numstat: Combine `--numstat` counts with per-file diff text
- determine_file_status: Classify a file as added, modified, deleted or renamed
- extract_file_diff: Extract one file's section from a unified diff
- calculate_summary: Aggregate per-file counts
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from aicommits.git.exceptions import GitError, StagingError
from aicommits.git.repository import validate_state
from aicommits.git.runner import run_git_command_safe


DIFF_HEADER_PREFIX = "diff --git "

# numstat prints "-" instead of counts for binary files
BINARY_SENTINEL = "-"

# "src/{old => new}/file.py" style rename in numstat output
_BRACE_RENAME_PATTERN = re.compile(r"^(.*)\{(.*) => (.*)\}(.*)$")


class FileStatus(Enum):
    """How a file changed in the staged diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass
class FileChange:
    """A single file in the staged diff."""

    path: str
    status: FileStatus
    additions: int = 0
    deletions: int = 0
    diff: str = ""
    old_path: Optional[str] = None


@dataclass
class DiffSummary:
    """Totals over all files of a diff."""

    additions: int = 0
    deletions: int = 0
    files_changed: int = 0


@dataclass
class DiffSet:
    """Parsed staged diff.

    Files keep the order in which git emitted them.
    """

    files: list[FileChange] = field(default_factory=list)
    summary: DiffSummary = field(default_factory=DiffSummary)

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]


def get_staged_diff() -> DiffSet:
    """Get the staged changes as a parsed diff.

    Returns:
        DiffSet with one FileChange per staged file.

    Raises:
        RepositoryError: If not in a git repository.
        StagingError: If there are no staged changes.
        GitError: If git fails or the output cannot be parsed.
    """
    validate_state()

    try:
        numstat_output = run_git_command_safe(["diff", "--staged", "--numstat"])
        diff_content = run_git_command_safe(["diff", "--staged"])

        if not numstat_output.strip():
            raise StagingError("No staged changes found")

        files = parse_numstat(numstat_output, diff_content)
        return DiffSet(files=files, summary=calculate_summary(files))
    except GitError:
        raise
    except Exception as e:
        raise GitError(f"Failed to get staged diff: {e}", "DIFF_FAILED") from e


def _parse_count(value: str) -> int:
    """Parse an addition/deletion count, mapping binary or junk values to 0."""
    value = value.strip()
    if value == BINARY_SENTINEL:
        return 0
    try:
        return max(int(value), 0)
    except ValueError:
        return 0


# Escapes git uses in C-style quoted paths (core.quotePath)
_QUOTED_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    '"': '"',
    "\\": "\\",
}


def _unquote_path(path: str) -> str:
    """Decode a path git printed in C-style quotes.

    Octal escapes are raw bytes of the UTF-8 encoded name, e.g.
    "t\\303\\244st.txt" is "täst.txt". Unquoted paths are returned as-is.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path

    inner = path[1:-1]
    decoded = bytearray()
    i = 0
    while i < len(inner):
        char = inner[i]
        if char != "\\" or i + 1 == len(inner):
            decoded += char.encode("utf-8")
            i += 1
            continue

        escape = inner[i + 1]
        octal = inner[i + 1:i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            decoded.append(int(octal, 8) & 0xFF)
            i += 4
        else:
            decoded += _QUOTED_ESCAPES.get(escape, escape).encode("utf-8")
            i += 2

    return decoded.decode("utf-8", errors="replace")


def _resolve_rename(path: str) -> tuple[str, Optional[str]]:
    """Resolve numstat rename notation to (new_path, old_path).

    Quoted names are printed as `"old" => "new"` without braces.
    """
    match = _BRACE_RENAME_PATTERN.match(path)
    if match and not path.startswith('"'):
        prefix, old, new, suffix = match.groups()
        old_path = (prefix + old + suffix).replace("//", "/").lstrip("/")
        new_path = (prefix + new + suffix).replace("//", "/").lstrip("/")
        return new_path, old_path
    if " => " in path:
        old_path, new_path = path.split(" => ", 1)
        return _unquote_path(new_path), _unquote_path(old_path)
    return _unquote_path(path), None


def _closing_quote(text: str) -> int:
    """Index of the quote closing the quoted token at the start of text."""
    i = 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i
        i += 1
    return -1


def _split_unquoted_header(rest: str) -> Optional[tuple[str, str]]:
    """Split "a/X b/Y" where neither path is quoted.

    Paths may contain spaces, so every " b/" is a candidate split point.
    A split where both sides are equal wins (the common non-rename case),
    otherwise the last candidate is used.
    """
    if not rest.startswith("a/"):
        return None
    body = rest[2:]

    candidates = []
    start = 0
    while True:
        idx = body.find(" b/", start)
        if idx == -1:
            break
        candidates.append((body[:idx], body[idx + 3:]))
        start = idx + 1

    if not candidates:
        return None
    for old_path, new_path in candidates:
        if old_path == new_path:
            return old_path, new_path
    return candidates[-1]


def _parse_header_paths(line: str) -> Optional[tuple[str, str]]:
    """Split a `diff --git a/X b/Y` header into (X, Y).

    Either side may be C-style quoted, e.g. `"a/t\\303\\244st.txt"`.
    """
    rest = line[len(DIFF_HEADER_PREFIX):]

    if rest.startswith('"'):
        end = _closing_quote(rest)
        if end == -1:
            return None
        old_token, new_token = rest[:end + 1], rest[end + 2:]
    elif rest.endswith('"') and ' "b/' in rest:
        idx = rest.rfind(' "b/')
        old_token, new_token = rest[:idx], rest[idx + 1:]
    else:
        return _split_unquoted_header(rest)

    old_path, new_path = _unquote_path(old_token), _unquote_path(new_token)
    if not (old_path.startswith("a/") and new_path.startswith("b/")):
        return None
    return old_path[2:], new_path[2:]


def _iter_file_sections(diff_content: str) -> Iterator[tuple[str, list[str]]]:
    """Yield (destination path, lines) for every file section of a diff."""
    current_path = None
    current_lines: list[str] = []

    for line in diff_content.split("\n"):
        if line.startswith(DIFF_HEADER_PREFIX):
            if current_path is not None:
                yield current_path, current_lines
            paths = _parse_header_paths(line)
            current_path = paths[1] if paths else None
            current_lines = [line]
        elif current_path is not None:
            current_lines.append(line)

    if current_path is not None:
        yield current_path, current_lines


def _split_sections(diff_content: str) -> dict[str, list[str]]:
    sections: dict[str, list[str]] = {}
    for path, lines in _iter_file_sections(diff_content):
        sections.setdefault(path, lines)
    return sections


def _status_from_section(lines: list[str]) -> FileStatus:
    for line in lines:
        if line.startswith("new file mode"):
            return FileStatus.ADDED
        if line.startswith("deleted file mode"):
            return FileStatus.DELETED
        if line.startswith("rename from"):
            return FileStatus.RENAMED
        if line.startswith("@@"):
            # Extended headers end where the first hunk begins
            break
    return FileStatus.MODIFIED


def _join_section(lines: list[str]) -> str:
    return "\n".join(lines).rstrip("\n")


def determine_file_status(path: str, diff_content: str) -> FileStatus:
    """Determine a file's status from its own section of the diff.

    Args:
        path: Destination path of the file.
        diff_content: Full `git diff --staged` output.

    Returns:
        The file status, MODIFIED when no marker is present.
    """
    lines = _split_sections(diff_content).get(path)
    if lines is None:
        return FileStatus.MODIFIED
    return _status_from_section(lines)


def extract_file_diff(path: str, diff_content: str) -> str:
    """Extract the diff text for a single file.

    Args:
        path: Destination path of the file, compared literally.
        diff_content: Full `git diff --staged` output.

    Returns:
        The file's section including its header, or "" if absent.
    """
    lines = _split_sections(diff_content).get(path)
    if lines is None:
        return ""
    return _join_section(lines)


def parse_numstat(numstat_output: str, diff_content: str) -> list[FileChange]:
    """Parse `git diff --numstat` output into FileChange entries.

    Args:
        numstat_output: Tab separated "additions, deletions, path" lines.
        diff_content: Full unified diff used for status and per-file text.

    Returns:
        FileChange list in numstat order.
    """
    sections = _split_sections(diff_content)
    files = []

    for line in numstat_output.split("\n"):
        if not line.strip():
            continue

        parts = line.split("\t")
        if len(parts) < 3:
            continue

        path, old_path = _resolve_rename(parts[2])
        lines = sections.get(path)

        if lines is not None:
            status = _status_from_section(lines)
            file_diff = _join_section(lines)
        else:
            status = FileStatus.RENAMED if old_path else FileStatus.MODIFIED
            file_diff = ""

        files.append(
            FileChange(
                path=path,
                status=status,
                additions=_parse_count(parts[0]),
                deletions=_parse_count(parts[1]),
                diff=file_diff,
                old_path=old_path,
            )
        )

    return files


def calculate_summary(files: list[FileChange]) -> DiffSummary:
    """Calculate summary statistics over all files."""
    return DiffSummary(
        additions=sum(f.additions for f in files),
        deletions=sum(f.deletions for f in files),
        files_changed=len(files),
    )
