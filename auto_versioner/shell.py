"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running git and the
GitHub CLI, plus output formatting helpers.
"""

from __future__ import annotations

import os
import subprocess

import click


def git(*args: str, check: bool = True, env: dict[str, str] | None = None) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "ls-remote", "--tags").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., deleting a
               local tag that was never fetched).
        env: Extra environment variables, layered over os.environ.

    Returns:
        Stripped stdout from the git command.
    """
    full_env = {**os.environ, **env} if env else None
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, check=check, env=full_env
    )
    return result.stdout.strip()


def gh(*args: str, check: bool = True) -> str:
    """Run a GitHub CLI command and return stdout.

    Same contract as git(); requires an authenticated `gh`.
    """
    result = subprocess.run(["gh", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def describe_failure(exc: subprocess.CalledProcessError) -> str:
    """Best human-readable cause for a failed command: its stderr, else the exit code."""
    stderr = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
    return stderr or f"exit status {exc.returncode}"


def step(msg: str) -> None:
    """Print a visually distinct step header to stderr.

    stdout is reserved for command results (tag names, bumps) so that
    callers can capture them.
    """
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}", err=True)
