"""Write built archives to disk."""

import os
import tempfile
from pathlib import Path

from loguru import logger

from xmind_archive.access import ensure_allowed
from xmind_archive.config import ARCHIVE_EXTENSION
from xmind_archive.errors import OutputPathError
from xmind_archive.protocols import PathPolicyProtocol


class ArchiveWriter:
    """Write .xmind files inside the allowed directories.

    - Refuse paths without the .xmind extension.
    - Refuse to replace an existing file unless overwrite is set.
    - Create missing parent directories.
    - Write to a temporary file and rename it into place, so a failed write
      never leaves a truncated archive behind.
    """

    def __init__(self, policy: PathPolicyProtocol) -> None:
        self.policy = policy

    def check_target(self, path: str | Path, *, overwrite: bool = False) -> Path:
        """Validate an output path and return it resolved.

        Raises:
            OutputPathError: Wrong extension, or the file exists and overwrite is False.
            AccessDeniedError: The path is outside the allow-list.
        """
        if not str(path).lower().endswith(ARCHIVE_EXTENSION):
            msg = f"File path must end with {ARCHIVE_EXTENSION}"
            raise OutputPathError(msg)
        resolved = ensure_allowed(self.policy, path)
        if resolved.exists() and not overwrite:
            msg = f"File already exists: {path}. Set overwrite=true to replace."
            raise OutputPathError(msg)
        return resolved

    def write(self, path: Path, data: bytes) -> None:
        """Atomically replace path with data."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote {} ({} bytes)", path, len(data))
