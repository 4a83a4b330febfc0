"""Main CLI command for generating commit messages."""

from pathlib import Path
from typing import Optional

import typer

from aicommits.analyzer import analyze_diff
from aicommits.config import ConfigError
from aicommits.git import (
    GitError,
    commit,
    commit_with_body,
    get_staged_diff,
)
from aicommits.llm import (
    LLMError,
    create_commit_prompt,
    format_diff_for_prompt,
    generate_commit_message,
    parse_commit_message_response,
)
from aicommits.cli.utils import (
    configure_logging,
    echo_error,
    load_effective_config,
    print_pull_progress,
    split_message,
)


def main_command(
    ctx: typer.Context,
    auto: bool = typer.Option(
        False,
        "--auto",
        "-a",
        help="Generate and commit immediately without confirmation",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-d",
        help="Generate the commit message only (do not commit)",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (default: .ai-commits.yaml in the repository root)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Ollama model to use",
    ),
    no_scope: bool = typer.Option(
        False,
        "--no-scope",
        help="Disable automatic scope detection",
    ),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        help="Use this commit message instead of generating one",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug output, including git commands",
    ),
) -> None:
    """Generate a conventional commit message from staged changes."""
    # If a subcommand is invoked, don't run the default behavior
    if ctx.invoked_subcommand is not None:
        return

    configure_logging(verbose)

    # Step 1: Configuration
    try:
        config = load_effective_config(config_path)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(1)

    if model:
        config.llm.model = model
    if no_scope:
        config.scope_detection.enabled = False

    # Step 2: Staged changes
    try:
        typer.echo("Collecting staged changes...", err=True)
        diff = get_staged_diff()
    except GitError as e:
        echo_error(e, "Git error")
        raise typer.Exit(1)

    summary = diff.summary
    typer.echo(
        f"{summary.files_changed} file(s) changed, "
        f"{summary.additions} insertion(s), {summary.deletions} deletion(s)",
        err=True,
    )

    # Step 3: Commit message
    if message:
        subject, body = split_message(message)
    else:
        try:
            analysis = analyze_diff(diff, config.scope_detection)
            prompt = create_commit_prompt(
                format_diff_for_prompt(diff), analysis, config.commit_format.max_length
            )

            typer.echo(f"Generating commit message with {config.llm.model}...", err=True)
            response = generate_commit_message(prompt, config, on_progress=print_pull_progress)
            parsed = parse_commit_message_response(
                response.content, config.commit_format.max_length
            )
        except LLMError as e:
            echo_error(e, "LLM error")
            raise typer.Exit(1)

        subject = parsed.subject
        body = parsed.body if config.commit_format.include_body else None

    full_message = f"{subject}\n\n{body}" if body else subject

    typer.echo("")
    typer.echo("=" * 60)
    typer.echo(full_message)
    typer.echo("=" * 60)
    typer.echo("")

    if dry_run:
        typer.echo("Dry run: nothing committed.", err=True)
        return

    # Step 4: Confirmation
    if not auto:
        confirm = typer.prompt(
            "Commit with this message? [Y/n]",
            default="y",
            show_default=False,
        )
        if confirm.lower() not in ("y", "yes", ""):
            typer.echo("Commit cancelled.", err=True)
            raise typer.Exit(0)

    # Step 5: Commit
    try:
        typer.echo("Committing...", err=True)
        if body:
            result = commit_with_body(subject, body)
        else:
            result = commit(subject)
    except GitError as e:
        echo_error(e, "Commit failed")
        raise typer.Exit(1)

    typer.echo(f"Commit successful: {result.hash}")
    if result.files_changed > 0:
        typer.echo(
            f"{result.files_changed} file(s) changed, "
            f"{result.insertions} insertion(s), {result.deletions} deletion(s)"
        )
