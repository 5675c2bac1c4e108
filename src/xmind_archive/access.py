"""Directory allow-list consulted before any file is touched."""

import os
from pathlib import Path

from xmind_archive.errors import AccessDeniedError
from xmind_archive.protocols import PathPolicyProtocol


def _normalize(path: str | Path) -> str:
    return os.path.normcase(str(Path(path).expanduser().resolve()))


class AllowList:
    """Allow paths equal to or below a fixed set of directories.

    The set is established once and never mutated.
    """

    def __init__(self, directories: list[Path]) -> None:
        self._directories = [Path(d).expanduser().resolve() for d in directories]
        self._normalized = [_normalize(d) for d in self._directories]

    @property
    def directories(self) -> list[Path]:
        return list(self._directories)

    def is_path_allowed(self, path: str | Path) -> bool:
        candidate = _normalize(path)
        for allowed in self._normalized:
            if candidate == allowed or candidate.startswith(allowed.rstrip(os.sep) + os.sep):
                return True
        return False

    def __repr__(self) -> str:
        return f"AllowList({[str(d) for d in self._directories]!r})"


def ensure_allowed(policy: PathPolicyProtocol, path: str | Path) -> Path:
    """Return the resolved path, raising AccessDeniedError if the policy refuses it."""
    if not policy.is_path_allowed(path):
        raise AccessDeniedError(str(path))
    return Path(path).expanduser().resolve()
