"""Shell and git utilities.

Provides simple wrappers around subprocess calls for running release
commands and git operations, plus output formatting helpers.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., tag lookup).

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def run(
    *args: str, cwd: Path | None = None, check: bool = True
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command, streaming its output to the terminal.

    Unlike git(), this doesn't capture output so users can follow gem
    builds and registry uploads as they happen.

    Args:
        *args: Command and arguments (e.g., "gem", "build", "rails.gemspec").
        cwd: Directory to run the command in. Defaults to the current one.
        check: If True (default), raise on non-zero exit.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def capture(*args: str) -> str | None:
    """Run a helper command and return its output, or None if unavailable.

    Used for optional lookups (one-time passwords, git identity) where a
    missing tool or a failing command simply means "no value".
    """
    try:
        result = subprocess.run(args, capture_output=True, text=True)
    except OSError:
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def which(name: str) -> bool:
    """Return True if an executable is available on PATH."""
    return shutil.which(name) is not None


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate major phases of the release in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the release.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)
