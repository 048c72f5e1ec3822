"""Tests for git queries: failure handling, describe post-processing, command shapes."""

import os
import subprocess
import sys

import pytest

from buildstamp import git_helpers
from buildstamp.resolver import VersionResolver
from buildstamp.git_helpers import (
    Found,
    NotFound,
    compact_describe,
    current_branch,
    describe_tag,
    run_git,
)


def _fake_run(stdout="", returncode=0, stderr="", calls=None):
    def fake(args, **kwargs):
        if calls is not None:
            calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)
    return fake


def _raising_run(exc):
    def fake(args, **kwargs):
        raise exc
    return fake


# ============================================
# compact_describe (pure function)
# ============================================


def test_compact_describe_drops_g_before_hash():
    assert compact_describe("v3.0.0-5-gdeadbeef") == "v3.0.0-5-deadbeef"


def test_compact_describe_replaces_only_first_marker():
    assert compact_describe("v3.0.0-gamma-5-gdeadbeef") == "v3.0.0-amma-5-gdeadbeef"


def test_compact_describe_leaves_exact_tag_alone():
    assert compact_describe("v3.0.0") == "v3.0.0"


# ============================================
# run_git
# ============================================


def test_run_git_returns_trimmed_stdout(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_run(stdout="  main\n"))
    assert run_git("/repo", "rev-parse", "--abbrev-ref", "HEAD") == Found("main")


def test_run_git_passes_repo_dir_and_timeout(monkeypatch):
    calls = []
    monkeypatch.setattr(subprocess, "run", _fake_run(stdout="x", calls=calls))
    run_git("/some/repo", "status", timeout=2.5)
    args, kwargs = calls[0]
    assert args == ["git", "-C", "/some/repo", "status"]
    assert kwargs["timeout"] == 2.5
    assert kwargs["capture_output"] is True
    assert kwargs["encoding"] == "utf-8"


def test_run_git_nonzero_exit_is_not_found(monkeypatch):
    monkeypatch.setattr(
        subprocess, "run",
        _fake_run(returncode=128, stderr="fatal: not a git repository\n"),
    )
    result = run_git("/tmp", "describe")
    assert isinstance(result, NotFound)
    assert result.reason == "exit code 128: fatal: not a git repository"


def test_run_git_missing_executable_is_not_found(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _raising_run(FileNotFoundError("git")))
    result = run_git("/repo", "describe")
    assert result == NotFound("git executable not found")


def test_run_git_timeout_is_not_found(monkeypatch):
    monkeypatch.setattr(
        subprocess, "run",
        _raising_run(subprocess.TimeoutExpired(cmd="git", timeout=5)),
    )
    result = run_git("/repo", "describe", timeout=5)
    assert not result.found
    assert "timed out" in result.reason


def test_run_git_os_error_is_not_found(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _raising_run(PermissionError("denied")))
    assert not run_git("/repo", "describe").found


def test_run_git_empty_output_is_not_found(monkeypatch):
    monkeypatch.setattr(subprocess, "run", _fake_run(stdout="\n"))
    assert run_git("/repo", "describe") == NotFound("empty output")


def test_value_or_returns_default_only_when_absent():
    assert Found("v1").value_or("fallback") == "v1"
    assert NotFound("nope").value_or("fallback") == "fallback"
    assert NotFound("nope").value_or(None) is None


# ============================================
# describe_tag / current_branch
# ============================================


def test_describe_tag_uses_v_tags_and_skips_snapshots(monkeypatch):
    calls = []
    monkeypatch.setattr(subprocess, "run", _fake_run(stdout="v3.0.0-5-gdeadbeef\n", calls=calls))
    result = describe_tag("/repo")
    assert result == Found("v3.0.0-5-deadbeef")
    args, _ = calls[0]
    assert args[3:] == ["describe", "--tags", "--match", "v*", "--exclude", "*SNAPSHOT*"]


def test_describe_tag_absent_passes_through_reason():
    def runner(repo_dir, *args, timeout):
        return NotFound("exit code 128")
    assert describe_tag("/repo", runner=runner) == NotFound("exit code 128")


def test_current_branch_queries_abbrev_ref(monkeypatch):
    calls = []
    monkeypatch.setattr(subprocess, "run", _fake_run(stdout="feature/x\n", calls=calls))
    assert current_branch("/repo") == Found("feature/x")
    args, _ = calls[0]
    assert args[3:] == ["rev-parse", "--abbrev-ref", "HEAD"]


@pytest.mark.parametrize("exc", [
    FileNotFoundError("git"),
    subprocess.TimeoutExpired(cmd="git", timeout=1),
    OSError("broken pipe"),
    UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte"),
])
def test_queries_never_raise(monkeypatch, exc):
    monkeypatch.setattr(subprocess, "run", _raising_run(exc))
    assert not git_helpers.describe_tag("/repo").found
    assert not git_helpers.current_branch("/repo").found


def test_run_git_undecodable_output_is_not_found(monkeypatch):
    monkeypatch.setattr(
        subprocess, "run",
        _raising_run(UnicodeDecodeError("utf-8", b"v3.0.0-5-gdead\xffbeef", 14, 15, "invalid start byte")),
    )
    assert run_git("/repo", "describe") == NotFound("git output is not valid UTF-8")


# ============================================
# Fake git executable on PATH
# ============================================


def _install_fake_git(tmp_path, monkeypatch, output: bytes):
    """Put a git script on PATH that prints *output* for any command."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    payload = tmp_path / "git-output"
    payload.write_bytes(output)
    script = bin_dir / "git"
    script.write_text(f"#!/bin/sh\ncat '{payload}'\n", encoding="utf-8")
    script.chmod(0o755)
    monkeypatch.setenv("PATH", str(bin_dir) + os.pathsep + os.environ.get("PATH", ""))


@pytest.mark.skipif(sys.platform == "win32", reason="shell script git stand-in")
def test_non_utf8_git_output_falls_back_to_dirty(tmp_path, monkeypatch):
    _install_fake_git(tmp_path, monkeypatch, b"v3.0.0-5-gdead\xffbeef\n")
    resolver = VersionResolver(str(tmp_path), base_version="3.0.0", suffix="SNAPSHOT")

    snapshot = resolver.resolve(is_release=False)
    assert snapshot.revision == "dirty"
    assert snapshot.display_version == "3.0.0-SNAPSHOT"
    assert snapshot.branch is None

    release = resolver.resolve(is_release=True)
    assert release.display_version == "3.0.0-SNAPSHOT"
    assert release.branch is None
