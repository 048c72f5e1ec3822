"""Git queries used for version resolution.

Every failure of a query (git not installed, not a repository, non-zero
exit, timeout, OS error) comes back as ``NotFound`` rather than an
exception. Callers decide the fallback; nothing here raises for a missing
checkout.
"""

import os
import subprocess
from dataclasses import dataclass

from buildstamp.config import BRANCH_ARGS, DESCRIBE_ARGS, GIT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class Found:
    """A git query that succeeded with non-empty output."""

    value: str
    found = True

    def value_or(self, default: str | None) -> str | None:
        return self.value


@dataclass(frozen=True)
class NotFound:
    """A git query whose metadata is unavailable; *reason* says why."""

    reason: str = ""
    found = False

    def value_or(self, default: str | None) -> str | None:
        return default


GitResult = Found | NotFound


def run_git(repo_dir: str, *args: str, timeout: float = GIT_TIMEOUT_SECONDS) -> GitResult:
    """Run a git command in *repo_dir*. Return Found(stdout) or NotFound(reason).

    subprocess.run drains both pipes before waiting, and kills the child on
    timeout, so a chatty or hung git never blocks the build.
    """
    try:
        result = subprocess.run(
            ["git", "-C", os.fspath(repo_dir), *args],
            capture_output=True,
            encoding="utf-8",
            timeout=timeout,
        )
    except FileNotFoundError:
        return NotFound("git executable not found")
    except subprocess.TimeoutExpired:
        return NotFound(f"timed out after {timeout:g}s")
    except UnicodeDecodeError:
        # Ref names and localized messages are not guaranteed to be UTF-8.
        return NotFound("git output is not valid UTF-8")
    except subprocess.SubprocessError as exc:
        return NotFound(f"git failed: {exc}")
    except OSError as exc:
        return NotFound(f"could not run git: {exc}")

    if result.returncode != 0:
        detail = (result.stderr or "").strip().splitlines()
        reason = f"exit code {result.returncode}"
        if detail:
            reason += f": {detail[0]}"
        return NotFound(reason)

    output = (result.stdout or "").strip()
    if not output:
        return NotFound("empty output")
    return Found(output)


def compact_describe(raw: str) -> str:
    """Drop the 'g' marker before the abbreviated hash in a describe string.

    Pure function: only the first '-g' is replaced, so 'v3.0.0-5-gdeadbeef'
    becomes 'v3.0.0-5-deadbeef'.
    """
    return raw.replace("-g", "-", 1)


def describe_tag(repo_dir: str, timeout: float = GIT_TIMEOUT_SECONDS, runner=run_git) -> GitResult:
    """Describe HEAD against the nearest v* tag, skipping SNAPSHOT tags."""
    result = runner(repo_dir, *DESCRIBE_ARGS, timeout=timeout)
    if result.found:
        return Found(compact_describe(result.value))
    return result


def current_branch(repo_dir: str, timeout: float = GIT_TIMEOUT_SECONDS, runner=run_git) -> GitResult:
    """Return the abbreviated name of the checked-out ref (HEAD when detached)."""
    return runner(repo_dir, *BRANCH_ARGS, timeout=timeout)
