"""Configuration constants for xmind-archive."""

import os
from pathlib import Path

ARCHIVE_EXTENSION = ".xmind"

# Archive entries.
CONTENT_ENTRY = "content.json"
METADATA_ENTRY = "metadata.json"
MANIFEST_ENTRY = "manifest.json"
THUMBNAIL_ENTRY = "Thumbnails/thumbnail.png"

# Extension providers inside content.json.
TASK_PROVIDER = "org.xmind.ui.task"
WORKING_DAY_PROVIDER = "org.xmind.ui.working-day-settings"

INTERNAL_LINK_PREFIX = "xmind:#"

CREATOR_NAME = "xmind-archive"
CREATOR_VERSION = "2.0.0"
DATA_STRUCTURE_VERSION = "3"
LAYOUT_ENGINE_VERSION = "5"

# Fixed working calendar attached to sheets with planned tasks.
WORKING_DAY_SETTINGS: dict[str, object] = {
    "id": "YmFzaWMtY2FsZW5kYXI=",
    "name": "Calendrier de base",
    "defaultWorkingDays": [1, 2, 3, 4, 5],
    "rules": [],
}

DEFAULT_SHEET_TITLE = "Untitled Map"
MS_PER_DAY = 86_400_000

# Fuzzy path search.
FUZZY_THRESHOLD = 0.5
FUZZY_RESULT_LIMIT = 5

SEARCH_FIELDS: tuple[str, ...] = ("title", "notes", "labels", "callouts", "tasks")

# Guard against pathological nesting in both directions of the codec.
MAX_TOPIC_DEPTH = 200

ALLOWED_DIRS_ENV = "XMIND_ALLOWED_DIRS"


def resolve_allowed_directories(directories: list[Path] | None = None) -> list[Path]:
    """Resolve the directories the tools may touch.

    Explicit arguments win, then XMIND_ALLOWED_DIRS (os.pathsep separated),
    then the current working directory.
    """
    if directories:
        candidates = list(directories)
    elif env := os.environ.get(ALLOWED_DIRS_ENV):
        candidates = [Path(p) for p in env.split(os.pathsep) if p]
    else:
        candidates = [Path.cwd()]

    resolved: list[Path] = []
    for candidate in candidates:
        path = candidate.expanduser().resolve()
        if not path.is_dir():
            msg = f"Allowed directory {str(candidate)!r} does not exist or is not a directory"
            raise ValueError(msg)
        resolved.append(path)
    return resolved
