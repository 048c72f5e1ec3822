"""Embed resolved version strings into a build artifact.

The artifact is a Java-style ``.properties`` file: one ``key=value`` per
line, ``#`` comments, no escaping (version strings never need it).
"""

import os
from datetime import datetime, timezone

from buildstamp.config import MODE_KEY, REVISION_KEY, VERSION_KEY, BuildstampError
from buildstamp.resolver import VersionInfo


class StampError(BuildstampError):
    """A properties file is missing or cannot be parsed."""


def render_properties(info: VersionInfo, generated_at: datetime | None = None) -> str:
    """Render *info* as properties text.

    Pure function: the timestamp comment is the only varying line and can
    be pinned with *generated_at*.
    """
    when = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    lines = [
        f"# Generated by buildstamp on {when}",
        f"{VERSION_KEY}={info.display_version}",
        f"{REVISION_KEY}={info.revision}",
        f"{MODE_KEY}={info.mode.value}",
    ]
    return "\n".join(lines) + "\n"


def write_properties(info: VersionInfo, path: str) -> str:
    """Write *info* to a properties file at *path*, creating parent dirs.

    Returns the absolute path written.
    """
    path = os.path.abspath(path)
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_properties(info))
    return path


def parse_properties(content: str) -> dict[str, str]:
    """Parse properties text into a dict.

    Pure function: blank lines and lines starting with '#' or '!' are
    skipped, whitespace around keys and values is trimmed. A line without
    '=' raises StampError naming the line number.
    """
    entries: dict[str, str] = {}
    for lineno, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "!")):
            continue
        key, sep, value = stripped.partition("=")
        if not sep or not key.strip():
            raise StampError(f"line {lineno}: expected key=value, got '{stripped}'")
        entries[key.strip()] = value.strip()
    return entries


def read_properties(path: str) -> dict[str, str]:
    """Read and parse a properties file. Raises StampError if unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as exc:
        raise StampError(f"cannot read {path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise StampError(f"cannot read {path}: not valid UTF-8 at byte {exc.start}") from exc
    return parse_properties(content)
