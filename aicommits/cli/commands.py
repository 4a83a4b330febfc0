"""Diagnostic CLI commands: status, config and check."""

from pathlib import Path
from typing import Optional

import typer

from aicommits.config import ConfigError, config_to_yaml
from aicommits.git import (
    GitError,
    get_detailed_status,
    get_last_commit,
    get_repo_root,
    has_commits,
)
from aicommits.llm import LLMError, validate_ollama_config
from aicommits.cli.utils import (
    configure_logging,
    echo_error,
    load_effective_config,
    resolve_config_path,
)


def status_command() -> None:
    """Show staged, unstaged and untracked files."""
    configure_logging()

    try:
        repo_root = get_repo_root()
        status = get_detailed_status()
    except GitError as e:
        echo_error(e, "Git error")
        raise typer.Exit(1)

    typer.echo(f"Repository: {repo_root}")
    typer.echo(f"Status: {status.summary}")

    for label, category in (
        ("Staged", status.staged),
        ("Unstaged", status.unstaged),
        ("Untracked", status.untracked),
    ):
        if category.count == 0:
            continue
        typer.echo(f"\n{label} ({category.count}):")
        for path in category.files:
            typer.echo(f"  {path}")
        remaining = category.count - len(category.files)
        if remaining > 0:
            typer.echo(f"  ... and {remaining} more")

    typer.echo("")
    if not has_commits():
        typer.echo("No commits yet")
        return

    try:
        last = get_last_commit()
    except GitError as e:
        typer.echo(f"Last commit: unavailable ({e.message})", err=True)
        return
    typer.echo(f"Last commit: {last.hash[:7]} {last.subject} ({last.author}, {last.date})")


def config_command(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Show the effective configuration."""
    configure_logging()

    source = resolve_config_path(config_path)
    try:
        config = load_effective_config(config_path)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(1)

    if source is not None and source.exists():
        typer.echo(f"# Loaded from {source}")
    else:
        typer.echo("# Using default configuration")
    typer.echo(config_to_yaml(config))


def check_command(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Check that Ollama is running and the model is available."""
    configure_logging()

    try:
        config = load_effective_config(config_path)
        model_ready = validate_ollama_config(config)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(1)
    except LLMError as e:
        echo_error(e, "LLM error")
        raise typer.Exit(1)

    if model_ready:
        typer.echo(f"Ollama configuration is valid (model: {config.llm.model})")
    else:
        typer.echo(f"Ollama is running, but model {config.llm.model} is not pulled yet.")
        typer.echo(f"Pull it with: ollama pull {config.llm.model}")
