"""Diff analysis for ai-commits.

Provides deterministic hints about the commit type and scope of a staged
diff. The hints are passed to the model as part of the prompt; the model
makes the final choice.
"""

import fnmatch
from collections import Counter
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Optional

from aicommits.config import ScopeDetectionSettings, ScopeRule
from aicommits.git.diff import DiffSet, FileStatus


# Fraction of files a directory must cover to be used as scope
DOMINANT_THRESHOLD = 0.6

# Path segments too generic to be a useful scope
STOP_WORDS = {
    "src",
    "lib",
    "libs",
    "source",
    "tests",
    "test",
    "spec",
    "__tests__",
    "dist",
    "build",
    "out",
    "bin",
    "pkg",
    "cmd",
    "internal",
    "public",
    "static",
    "assets",
    "app",
    "common",
    "shared",
    "utils",
    "util",
}

DOC_EXTENSIONS = {".md", ".rst", ".txt", ".adoc", ".mdx"}
DOC_DIRS = {"docs", "doc", "documentation"}

TEST_PATTERNS = (
    "test_",
    "_test.",
    ".test.",
    ".spec.",
    "tests/",
    "test/",
    "__tests__/",
)

CI_PATTERNS = (
    ".github/workflows/",
    ".gitlab-ci",
    "Jenkinsfile",
    ".circleci/",
    ".travis",
)

BUILD_FILES = {
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "pyproject.toml",
    "poetry.lock",
    "setup.py",
    "setup.cfg",
    "requirements.txt",
    "Makefile",
    "CMakeLists.txt",
    "Cargo.toml",
    "Cargo.lock",
    "go.mod",
    "go.sum",
    "Gemfile",
    "Gemfile.lock",
    "Dockerfile",
    "tsconfig.json",
}


@dataclass
class DiffAnalysis:
    """Heuristic hints for the prompt."""

    suggested_type: str
    suggested_scope: Optional[str] = None
    file_types: list[str] = field(default_factory=list)
    changes_summary: str = ""


def is_docs_file(path: str) -> bool:
    """Check if a file is a documentation file."""
    if is_build_file(path):
        return False
    p = PurePosixPath(path.lower())
    return p.suffix in DOC_EXTENSIONS or any(part in DOC_DIRS for part in p.parts[:-1])


def is_test_file(path: str) -> bool:
    """Check if a file is a test file."""
    lowered = path.lower()
    return any(pattern in lowered for pattern in TEST_PATTERNS)


def is_ci_file(path: str) -> bool:
    return any(pattern in path for pattern in CI_PATTERNS)


def is_build_file(path: str) -> bool:
    name = PurePosixPath(path).name
    return name in BUILD_FILES or name.startswith("docker-compose")


def get_file_types(diff: DiffSet) -> list[str]:
    """Get the distinct file extensions in the diff.

    Files without an extension are reported by name, e.g. "Makefile".

    Returns:
        Extensions without the leading dot, in first-seen order.
    """
    types = []
    for path in diff.paths:
        p = PurePosixPath(path)
        file_type = p.suffix.lstrip(".").lower() or p.name
        if file_type not in types:
            types.append(file_type)
    return types


def detect_commit_type(diff: DiffSet) -> str:
    """Detect the likely commit type from the changed files.

    Returns:
        One of docs, test, ops, build, feat, refactor, fix, chore.
    """
    paths = diff.paths
    if not paths:
        return "chore"

    if all(is_docs_file(p) for p in paths):
        return "docs"
    if all(is_test_file(p) for p in paths):
        return "test"
    # CI before build, CI files often look like build files
    if all(is_ci_file(p) for p in paths):
        return "ops"
    if all(is_build_file(p) for p in paths):
        return "build"

    source_files = [f for f in diff.files if not is_test_file(f.path) and not is_docs_file(f.path)]
    if not source_files:
        # Docs and tests only
        return "test" if any(is_test_file(p) for p in paths) else "docs"
    if any(f.status == FileStatus.ADDED for f in source_files):
        return "feat"
    if all(f.status in (FileStatus.DELETED, FileStatus.RENAMED) for f in source_files):
        return "refactor"

    summary = diff.summary
    if summary.deletions > summary.additions:
        return "refactor"
    if summary.additions + summary.deletions > 0:
        return "fix"
    return "chore"


def _match_rule(path: str, rule: ScopeRule) -> bool:
    if path == rule.pattern:
        return True
    if fnmatch.fnmatch(path, rule.pattern):
        return True
    return fnmatch.fnmatch(PurePosixPath(path).name, rule.pattern)


def _scope_from_rules(paths: list[str], rules: list[ScopeRule]) -> Optional[str]:
    counts: Counter[str] = Counter()
    for path in paths:
        for rule in rules:
            if _match_rule(path, rule):
                counts[rule.scope] += 1
                break  # First matching rule wins

    if not counts:
        return None
    scope, count = counts.most_common(1)[0]
    if count / len(paths) >= DOMINANT_THRESHOLD:
        return scope
    return None


def _scope_from_paths(paths: list[str]) -> Optional[str]:
    counts: Counter[str] = Counter()
    for path in paths:
        segments = [
            s for s in PurePosixPath(path).parts[:-1][:2]
            if s.lower() not in STOP_WORDS and len(s) > 1
        ]
        if segments:
            # The deepest valid segment is the most specific
            counts[segments[-1].lower()] += 1

    if not counts:
        return None
    scope, count = counts.most_common(1)[0]
    if count / len(paths) >= DOMINANT_THRESHOLD:
        return scope
    return None


def detect_scope(
    diff: DiffSet,
    settings: Optional[ScopeDetectionSettings] = None,
) -> Optional[str]:
    """Detect the scope of the change.

    Configured glob rules are tried first, then the dominant directory.

    Args:
        diff: The parsed staged diff.
        settings: Scope detection settings; None means rules-less detection.

    Returns:
        The scope, or None when disabled or changes are spread out.
    """
    if settings is not None and not settings.enabled:
        return None

    paths = diff.paths
    if not paths:
        return None

    if settings is not None and settings.rules:
        scope = _scope_from_rules(paths, settings.rules)
        if scope:
            return scope

    return _scope_from_paths(paths)


def generate_changes_summary(diff: DiffSet) -> str:
    """Generate a one-line summary of the changes.

    Example: "3 file(s) changed (+10 -2): 1 added, 2 modified"
    """
    summary = diff.summary
    counts: Counter[str] = Counter(f.status.value for f in diff.files)
    by_status = ", ".join(
        f"{counts[status.value]} {status.value}"
        for status in FileStatus
        if counts[status.value]
    )

    text = (
        f"{summary.files_changed} file(s) changed "
        f"(+{summary.additions} -{summary.deletions})"
    )
    return f"{text}: {by_status}" if by_status else text


def analyze_diff(
    diff: DiffSet,
    settings: Optional[ScopeDetectionSettings] = None,
) -> DiffAnalysis:
    """Analyze a diff to suggest commit type and scope.

    Args:
        diff: The parsed staged diff.
        settings: Scope detection settings.

    Returns:
        DiffAnalysis hints for the prompt.
    """
    return DiffAnalysis(
        suggested_type=detect_commit_type(diff),
        suggested_scope=detect_scope(diff, settings),
        file_types=get_file_types(diff),
        changes_summary=generate_changes_summary(diff),
    )
