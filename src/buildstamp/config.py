"""Configuration constants and environment-driven settings.

Defaults live as module-level constants. ``load_settings`` overlays the
``BUILDSTAMP_*`` environment variables on top of them; CLI options
override both.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Version defaults
# ---------------------------------------------------------------------------

BASE_VERSION = "3.0.0"
SUFFIX = "SNAPSHOT"

# Requesting this task marks the build as a release.
RELEASE_TASK = "release"

# ---------------------------------------------------------------------------
# Git queries
# ---------------------------------------------------------------------------

GIT_TIMEOUT_SECONDS = 5.0

DESCRIBE_ARGS = ("describe", "--tags", "--match", "v*", "--exclude", "*SNAPSHOT*")
BRANCH_ARGS = ("rev-parse", "--abbrev-ref", "HEAD")

# Revision reported for snapshot builds when no tag can be described.
DIRTY_REVISION = "dirty"

# ---------------------------------------------------------------------------
# Artifact stamping
# ---------------------------------------------------------------------------

VERSION_KEY = "application.version"
REVISION_KEY = "git.revision"
MODE_KEY = "build.mode"

LOG_FILE_NAME = "buildstamp.log"

ENV_PREFIX = "BUILDSTAMP_"


class BuildstampError(Exception):
    """Base class for errors surfaced to the command line."""


class ConfigError(BuildstampError):
    """An environment variable holds a value that cannot be used."""


@dataclass(frozen=True)
class Settings:
    base_version: str = BASE_VERSION
    suffix: str = SUFFIX
    release_task: str = RELEASE_TASK
    git_timeout: float = GIT_TIMEOUT_SECONDS
    log_dir: str = ""


def _parse_timeout(raw: str) -> float:
    """Parse a positive timeout in seconds. Raises ConfigError otherwise."""
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{ENV_PREFIX}GIT_TIMEOUT must be a number, got '{raw}'") from None
    if value <= 0:
        raise ConfigError(f"{ENV_PREFIX}GIT_TIMEOUT must be positive, got '{raw}'")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from BUILDSTAMP_* environment variables.

    An unset variable keeps the default. ``BUILDSTAMP_SUFFIX`` may be set
    to the empty string to drop the suffix entirely.
    """
    env = os.environ if environ is None else environ

    base_version = env.get(f"{ENV_PREFIX}BASE_VERSION", "").strip() or BASE_VERSION
    suffix = env.get(f"{ENV_PREFIX}SUFFIX", SUFFIX).strip()
    release_task = env.get(f"{ENV_PREFIX}RELEASE_TASK", "").strip() or RELEASE_TASK

    raw_timeout = env.get(f"{ENV_PREFIX}GIT_TIMEOUT", "").strip()
    git_timeout = _parse_timeout(raw_timeout) if raw_timeout else GIT_TIMEOUT_SECONDS

    log_dir = env.get(f"{ENV_PREFIX}LOG_DIR", "").strip()

    return Settings(
        base_version=base_version,
        suffix=suffix,
        release_task=release_task,
        git_timeout=git_timeout,
        log_dir=log_dir,
    )
