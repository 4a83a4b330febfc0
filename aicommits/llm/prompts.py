"""Prompt building and response parsing for commit message generation."""

import re
from typing import Optional, TYPE_CHECKING

from pydantic import BaseModel, field_validator

from aicommits.git.diff import DiffSet
from aicommits.llm.exceptions import LLMError

if TYPE_CHECKING:
    from aicommits.analyzer import DiffAnalysis


# Types the model is asked to choose from
PROMPT_COMMIT_TYPES = [
    "feat",
    "fix",
    "refactor",
    "perf",
    "style",
    "test",
    "docs",
    "build",
    "ops",
    "chore",
]

MAX_DESCRIPTION_LENGTH = 72
DEFAULT_MAX_DIFF_CHARS = 50000

_RESPONSE_PREFIX = re.compile(r"^COMMIT MESSAGE:\s*", re.IGNORECASE)
_RESPONSE_PATTERN = re.compile(
    rf"^({'|'.join(PROMPT_COMMIT_TYPES)})(\(([^)]+)\))?: (.+)$"
)

PROMPT_TEMPLATE = """You are an expert developer assistant that generates conventional commit messages.

TASK: Generate a conventional commit message based on the git diff provided.

CONVENTIONAL COMMIT FORMAT:
<type>(<scope>): <description>

VALID TYPES:
- feat: New features
- fix: Bug fixes
- refactor: Code restructuring without behavior change
- perf: Performance improvements
- style: Code style changes (formatting, etc.)
- test: Test changes
- docs: Documentation changes
- build: Build system changes
- ops: Operational changes
- chore: Miscellaneous changes

RULES:
1. Use lowercase for type and scope
2. Keep description under {max_length} characters
3. Use imperative mood ("add" not "added")
4. No period at the end of description
5. Be specific and concise
6. Focus on WHAT changed, not HOW

ANALYSIS:
{analysis}

GIT DIFF:
```
{diff}
```

Generate ONLY the commit message in the format: <type>(<scope>): <description>
If no scope is appropriate, use: <type>: <description>

COMMIT MESSAGE:"""


class ParsedCommitMessage(BaseModel):
    """Pydantic model for a commit message produced by the model.

    Attributes:
        type: Conventional commit type.
        scope: Optional scope in parentheses.
        description: Imperative summary.
        body: Optional remaining lines.
    """

    type: str
    scope: Optional[str] = None
    description: str
    body: Optional[str] = None

    @field_validator("description")
    @classmethod
    def description_must_not_be_empty(cls, v: str) -> str:
        """Ensure description is not empty."""
        if not v or not v.strip():
            raise ValueError("Description cannot be empty")
        return v.strip()

    @property
    def subject(self) -> str:
        """Render the header line, e.g. "feat(api): add endpoint"."""
        scope = f"({self.scope})" if self.scope else ""
        return f"{self.type}{scope}: {self.description}"

    def render(self) -> str:
        """Render the full message with the body after a blank line."""
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject


def format_diff_for_prompt(diff: DiffSet, max_chars: int = DEFAULT_MAX_DIFF_CHARS) -> str:
    """Join per-file diffs into prompt text, truncating if necessary.

    Args:
        diff: The parsed staged diff.
        max_chars: Maximum characters of diff text.

    Returns:
        The diff text for the prompt.
    """
    text = "\n".join(f.diff for f in diff.files if f.diff)
    if len(text) > max_chars:
        text = text[:max_chars] + "\n...[truncated]\n"
    return text


def _format_analysis(analysis: Optional["DiffAnalysis"]) -> str:
    if analysis is None:
        return "(none)"

    lines = []
    if analysis.suggested_type:
        lines.append(f"Suggested type: {analysis.suggested_type}")
    if analysis.suggested_scope:
        lines.append(f"Suggested scope: {analysis.suggested_scope}")
    if analysis.file_types:
        lines.append(f"File types: {', '.join(analysis.file_types)}")
    if analysis.changes_summary:
        lines.append(f"Summary: {analysis.changes_summary}")
    return "\n".join(lines) if lines else "(none)"


def create_commit_prompt(
    diff_text: str,
    analysis: Optional["DiffAnalysis"] = None,
    max_length: int = MAX_DESCRIPTION_LENGTH,
) -> str:
    """Create the prompt for commit message generation.

    Args:
        diff_text: Diff text, see format_diff_for_prompt.
        analysis: Optional heuristic hints about type and scope.
        max_length: Description length the model is asked to stay under.

    Returns:
        The formatted prompt.
    """
    return PROMPT_TEMPLATE.format(
        analysis=_format_analysis(analysis),
        diff=diff_text,
        max_length=max_length,
    )


def parse_commit_message_response(
    response: str,
    max_length: int = MAX_DESCRIPTION_LENGTH,
) -> ParsedCommitMessage:
    """Parse and validate the model's response.

    Args:
        response: Raw text returned by the model.
        max_length: Longest description accepted.

    Returns:
        The parsed commit message.

    Raises:
        LLMError: If the first line is not a conventional commit header or
            the description is too long.
    """
    cleaned = _RESPONSE_PREFIX.sub("", response.strip())
    # Models sometimes wrap the answer in backticks or quotes
    cleaned = cleaned.strip().strip("`").strip()

    lines = cleaned.split("\n")
    commit_line = lines[0].strip().strip("\"'")

    match = _RESPONSE_PATTERN.match(commit_line)
    if not match:
        raise LLMError(
            "Generated message does not follow conventional commit format",
            "INVALID_FORMAT",
            "Try again, or pass your own message with --message.",
        )

    commit_type, _, scope, description = match.groups()

    if len(description) > max_length:
        raise LLMError(
            f"Generated description is too long (max {max_length} characters)",
            "DESCRIPTION_TOO_LONG",
            "Try again, or pass your own message with --message.",
        )

    body = "\n".join(lines[1:]).strip() or None

    return ParsedCommitMessage(
        type=commit_type,
        scope=scope,
        description=description,
        body=body,
    )
