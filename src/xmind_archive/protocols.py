"""Protocols for dependency injection in archive operations."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class PathPolicyProtocol(Protocol):
    """Decides which filesystem paths archive operations may touch."""

    @property
    def directories(self) -> list[Path]:
        """Root directories scanned when no directory is given."""
        ...

    def is_path_allowed(self, path: str | Path) -> bool:
        """Return True if the path may be read or written."""
        ...
