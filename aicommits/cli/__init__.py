"""CLI entry point for ai-commits.

This module provides the main CLI application that combines the default
generate-and-commit command with the diagnostic subcommands.
"""

import typer

from aicommits.cli.commands import check_command, config_command, status_command
from aicommits.cli.main import main_command

# Main application
app = typer.Typer(
    name="ai-commits",
    help="Generate conventional commit messages using a local LLM based on your staged changes",
    add_completion=False,
)

# Add individual commands
app.command("status")(status_command)
app.command("config")(config_command)
app.command("check")(check_command)

# Set the main callback for default behavior
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "main_command",
    "status_command",
    "config_command",
    "check_command",
]
