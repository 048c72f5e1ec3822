import pytest


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    """Keep log files out of the working tree and ignore the caller's BUILDSTAMP_* settings."""
    for name in ("BUILDSTAMP_BASE_VERSION", "BUILDSTAMP_SUFFIX", "BUILDSTAMP_RELEASE_TASK",
                 "BUILDSTAMP_GIT_TIMEOUT", "BUILDSTAMP_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("BUILDSTAMP_LOG_DIR", str(tmp_path / "logs"))
