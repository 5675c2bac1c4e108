"""Find .xmind files below the allowed directories."""

import os
from pathlib import Path

from loguru import logger

from xmind_archive.access import ensure_allowed
from xmind_archive.config import ARCHIVE_EXTENSION
from xmind_archive.core.archive.codec import read_archive
from xmind_archive.errors import FormatError
from xmind_archive.protocols import PathPolicyProtocol


def _log_walk_error(err: OSError) -> None:
    logger.warning("Error scanning directory {}: {}", err.filename, err)


def _roots(policy: PathPolicyProtocol, directory: str | Path | None) -> list[Path]:
    if directory is not None:
        return [ensure_allowed(policy, directory)]
    return policy.directories


def _walk_archives(policy: PathPolicyProtocol, root: Path) -> list[Path]:
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        dirnames[:] = sorted(d for d in dirnames if policy.is_path_allowed(Path(dirpath) / d))
        found.extend(
            Path(dirpath) / name
            for name in sorted(filenames)
            if name.lower().endswith(ARCHIVE_EXTENSION)
        )
    return found


def list_archives(policy: PathPolicyProtocol, directory: str | Path | None = None) -> list[Path]:
    """Recursively list .xmind files in directory, or in every allowed directory.

    Raises:
        AccessDeniedError: directory is outside the allow-list.
    """
    files: list[Path] = []
    for root in _roots(policy, directory):
        files.extend(_walk_archives(policy, root))
    logger.debug("Found {} archive(s)", len(files))
    return files


def content_contains(path: Path, text: str) -> bool:
    """Case-insensitively search the raw content.json of an archive.

    Unreadable archives count as no match.
    """
    try:
        content = read_archive(path)
    except (FormatError, OSError) as e:
        logger.warning("Error reading XMind file {}: {}", path, e)
        return False
    return text.lower() in content.lower()


def find_archives(
    policy: PathPolicyProtocol,
    pattern: str,
    directory: str | Path | None = None,
) -> list[Path]:
    """Find archives whose name or content contains pattern.

    Name matches (file name, stem or full path) come first, then content
    matches; each group is sorted by file name. An empty pattern matches all.
    """
    needle = pattern.lower()
    name_matches: list[Path] = []
    content_matches: list[Path] = []

    for path in list_archives(policy, directory):
        searchable = (path.name.lower(), path.stem.lower(), str(path).lower())
        if not needle or any(needle in text for text in searchable):
            name_matches.append(path)
        elif content_contains(path, needle):
            content_matches.append(path)

    def by_name(p: Path) -> tuple[str, str]:
        return (p.name.lower(), str(p))

    return sorted(name_matches, key=by_name) + sorted(content_matches, key=by_name)
