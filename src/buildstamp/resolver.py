"""Version resolution: turn git metadata and a build mode into a VersionInfo.

Resolution happens once per build invocation. The resulting VersionInfo is
immutable and handed explicitly to whatever embeds it (CLI output, stamped
properties files); nothing is cached at module level.
"""

import enum
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field

from buildstamp import git_helpers
from buildstamp.config import BASE_VERSION, DIRTY_REVISION, GIT_TIMEOUT_SECONDS, RELEASE_TASK, SUFFIX, Settings
from buildstamp.utils import log


class Mode(str, enum.Enum):
    RELEASE = "release"
    SNAPSHOT = "snapshot"

    @classmethod
    def from_flag(cls, is_release: bool) -> "Mode":
        return cls.RELEASE if is_release else cls.SNAPSHOT


@dataclass(frozen=True)
class VersionInfo:
    """The strings a build embeds: a revision and a display version."""

    base_version: str
    suffix: str
    mode: Mode
    revision: str
    display_version: str
    # Informational only; two resolutions differing by branch are equal.
    branch: str | None = field(default=None, compare=False)

    @property
    def is_release(self) -> bool:
        return self.mode is Mode.RELEASE

    def to_dict(self) -> dict:
        data = asdict(self)
        data["mode"] = self.mode.value
        return data


def join_suffix(version: str, suffix: str) -> str:
    """Append '-suffix' to *version*, or return it unchanged for an empty suffix."""
    return f"{version}-{suffix}" if suffix else version


def is_release_requested(task_names: Iterable[str], release_task: str = RELEASE_TASK) -> bool:
    """Check whether the release task is among the requested build tasks.

    Pure function: matching is exact, so 'prerelease' does not count.
    """
    return release_task in task_names


def format_summary(info: VersionInfo) -> str:
    """Render the one-line build summary for *info*.

    Pure function. A snapshot with no describable tag gets a fixed message,
    since the revision is only the 'dirty' placeholder.
    """
    branch = info.branch or "unknown"
    if info.is_release:
        return f"Building RELEASE ({branch}): {info.display_version}"
    if info.revision == DIRTY_REVISION:
        return "Building SNAPSHOT (no .git folder found)"
    return f"Building SNAPSHOT ({branch}): {info.revision}"


class VersionResolver:
    """Resolve the build version for one repository checkout.

    *runner* runs a git query and returns a GitResult; it defaults to
    git_helpers.run_git and exists so tests can inject canned answers.
    """

    def __init__(
        self,
        repo_dir: str,
        base_version: str = BASE_VERSION,
        suffix: str = SUFFIX,
        timeout: float = GIT_TIMEOUT_SECONDS,
        runner=git_helpers.run_git,
        log_dir: str = "",
    ):
        self.repo_dir = repo_dir
        self.base_version = base_version
        self.suffix = suffix
        self.timeout = timeout
        self.runner = runner
        self.log_dir = log_dir

    @classmethod
    def from_settings(cls, repo_dir: str, settings: Settings, runner=git_helpers.run_git) -> "VersionResolver":
        return cls(
            repo_dir,
            base_version=settings.base_version,
            suffix=settings.suffix,
            timeout=settings.git_timeout,
            runner=runner,
            log_dir=settings.log_dir,
        )

    def describe_tag(self) -> git_helpers.GitResult:
        return git_helpers.describe_tag(self.repo_dir, timeout=self.timeout, runner=self.runner)

    def current_branch(self) -> git_helpers.GitResult:
        return git_helpers.current_branch(self.repo_dir, timeout=self.timeout, runner=self.runner)

    def compute(self, is_release: bool) -> VersionInfo:
        """Resolve without logging. Never raises for missing git metadata."""
        branch = self.current_branch().value_or(None)

        if is_release:
            return VersionInfo(
                base_version=self.base_version,
                suffix=self.suffix,
                mode=Mode.RELEASE,
                revision="",
                display_version=join_suffix(self.base_version, self.suffix),
                branch=branch,
            )

        described = self.describe_tag()
        if described.found:
            revision = described.value
            display_version = join_suffix(revision, self.suffix)
        else:
            revision = DIRTY_REVISION
            display_version = join_suffix(self.base_version, self.suffix)

        return VersionInfo(
            base_version=self.base_version,
            suffix=self.suffix,
            mode=Mode.SNAPSHOT,
            revision=revision,
            display_version=display_version,
            branch=branch,
        )

    def resolve(self, is_release: bool, stderr: bool = False) -> VersionInfo:
        """Resolve the version and log a one-line summary of the result."""
        info = self.compute(is_release)
        log(format_summary(info), style="bold cyan", stderr=stderr, log_dir=self.log_dir)
        return info


def resolve_version(
    repo_dir: str,
    is_release: bool,
    settings: Settings | None = None,
    stderr: bool = False,
) -> VersionInfo:
    """Resolve the version for *repo_dir* once, using *settings* (or defaults)."""
    resolver = VersionResolver.from_settings(repo_dir, settings or Settings())
    return resolver.resolve(is_release, stderr=stderr)
