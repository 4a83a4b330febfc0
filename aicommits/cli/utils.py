"""Shared utility functions for CLI commands."""

import logging
from pathlib import Path
from typing import Optional, Union

import typer

from aicommits.config import Config, find_config_file, load_config
from aicommits.git import GitError, get_repo_root
from aicommits.llm import LLMError


LOG_FORMAT = "%(levelname)s: %(message)s"


def _not_a_recovery_hint(record: logging.LogRecord) -> bool:
    # Recovery hints are printed by echo_error instead
    return not hasattr(record, "recovery_hint")


def configure_logging(verbose: bool = False) -> None:
    """Send library diagnostics to stderr.

    Args:
        verbose: Show debug output, including every git command run.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_not_a_recovery_hint)

    root = logging.getLogger("aicommits")
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def resolve_config_path(config_path: Optional[Path]) -> Optional[Path]:
    """Find the config file to use.

    An explicit path wins. Otherwise the repository root (or the current
    directory outside a repository) is searched.
    """
    if config_path is not None:
        return config_path
    try:
        directory = get_repo_root()
    except GitError:
        directory = Path.cwd()
    return find_config_file(directory)


def load_effective_config(config_path: Optional[Path] = None) -> Config:
    """Load the configuration used by CLI commands.

    Raises:
        ConfigError: If the config file is invalid.
    """
    return load_config(resolve_config_path(config_path))


def echo_error(error: Union[GitError, LLMError], label: str = "Error") -> None:
    """Print an error and its recovery suggestion to stderr."""
    typer.echo(f"{label}: {error.message}", err=True)
    typer.echo("", err=True)
    typer.echo("Recovery suggestion:", err=True)
    for line in error.display_hint.split("\n"):
        typer.echo(f"  {line}", err=True)


def print_pull_progress(status: str, percent: Optional[int]) -> None:
    """Progress callback for model downloads."""
    if percent is None:
        typer.echo(status, err=True)
    else:
        typer.echo(f"{status} {percent}%", err=True)


def split_message(message: str) -> tuple[str, Optional[str]]:
    """Split a message into subject and optional body."""
    parts = message.strip().split("\n", 1)
    subject = parts[0].strip()
    body = parts[1].strip() if len(parts) > 1 else ""
    return subject, body or None
