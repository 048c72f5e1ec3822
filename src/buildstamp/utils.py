"""Core utility functions: logging and repository root discovery."""

import os

from rich.console import Console

from buildstamp.config import ENV_PREFIX, LOG_FILE_NAME

console = Console()
err_console = Console(stderr=True)


def find_repo_root(start: str) -> str:
    """Walk up from *start* to the nearest directory holding a .git entry.

    A .git file counts too (worktrees and submodules use one). Returns
    *start* itself, made absolute, when no enclosing checkout exists, so a
    source tarball still resolves against the directory it was asked about.
    """
    start = os.path.abspath(os.path.expanduser(start))
    current = start
    while True:
        if os.path.exists(os.path.join(current, ".git")):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return start
        current = parent


def resolve_logs_dir(log_dir: str = "") -> str:
    """Return the log directory, creating it if needed.

    Uses *log_dir* when given, then BUILDSTAMP_LOG_DIR. Returns "" when
    neither is set, in which case nothing is written to disk.
    """
    logs_dir = log_dir or os.environ.get(f"{ENV_PREFIX}LOG_DIR", "")
    if logs_dir:
        os.makedirs(logs_dir, exist_ok=True)
    return logs_dir


def log(message: str, style: str = "", stderr: bool = False, log_dir: str = "") -> None:
    """Write a message to the console (with optional style) and, if configured, the log file."""
    target = err_console if stderr else console
    if style:
        target.print(message, style=style)
    else:
        target.print(message)

    try:
        logs_dir = resolve_logs_dir(log_dir)
        if not logs_dir:
            return
        with open(os.path.join(logs_dir, LOG_FILE_NAME), "a", encoding="utf-8") as f:
            f.write(message + "\n")
    except OSError:
        pass  # Never break a build over logging
