"""Version information for buildstamp itself.

Reports the package version plus the described git revision of the
buildstamp source checkout, so editable installs show exactly what code is
running. Uses the same resolver it offers to builds, pointed at this
file's repo rather than the caller's cwd.
"""

import os

from buildstamp.config import DIRTY_REVISION
from buildstamp.resolver import VersionResolver

PACKAGE_VERSION = "1.0.0"

_REPO_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def get_version() -> str:
    """Return version string like '1.0.0 (v1.0.0-3-3a7f2c1, main)'."""
    info = VersionResolver(_REPO_DIR, base_version=PACKAGE_VERSION, suffix="").compute(is_release=False)
    if info.revision == DIRTY_REVISION:
        return PACKAGE_VERSION
    if info.branch:
        return f"{PACKAGE_VERSION} ({info.revision}, {info.branch})"
    return f"{PACKAGE_VERSION} ({info.revision})"
