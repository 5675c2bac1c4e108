"""Translate between .xmind zip containers and their JSON entries."""

import io
import json
import zipfile
from pathlib import Path
from typing import Any

from loguru import logger

from xmind_archive.config import (
    CONTENT_ENTRY,
    CREATOR_NAME,
    CREATOR_VERSION,
    DATA_STRUCTURE_VERSION,
    LAYOUT_ENGINE_VERSION,
    MANIFEST_ENTRY,
    METADATA_ENTRY,
    THUMBNAIL_ENTRY,
)
from xmind_archive.errors import FormatError


def decode_archive(data: bytes) -> str:
    """Return the text of content.json from archive bytes.

    Raises:
        FormatError: The container cannot be opened or has no content.json.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            if CONTENT_ENTRY not in zf.namelist():
                msg = f"{CONTENT_ENTRY} not found in XMind file"
                raise FormatError(msg)
            return zf.read(CONTENT_ENTRY).decode("utf-8")
    except (zipfile.BadZipFile, UnicodeDecodeError) as e:
        msg = f"Failed to extract {CONTENT_ENTRY}: {e}"
        raise FormatError(msg) from e


def read_archive(path: Path) -> str:
    """Read an archive from disk and return its content.json text."""
    logger.debug("Opening archive {}", path)
    return decode_archive(path.read_bytes())


def build_metadata() -> dict[str, Any]:
    return {
        "dataStructureVersion": DATA_STRUCTURE_VERSION,
        "creator": {"name": CREATOR_NAME, "version": CREATOR_VERSION},
        "layoutEngineVersion": LAYOUT_ENGINE_VERSION,
    }


def build_manifest() -> dict[str, Any]:
    # The thumbnail is declared but never written.
    return {"file-entries": {CONTENT_ENTRY: {}, METADATA_ENTRY: {}, THUMBNAIL_ENTRY: {}}}


def encode_archive(content: str, metadata: str, manifest: str) -> bytes:
    """Assemble a new archive in memory and return its bytes."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(CONTENT_ENTRY, content.encode("utf-8"))
        zf.writestr(METADATA_ENTRY, metadata.encode("utf-8"))
        zf.writestr(MANIFEST_ENTRY, manifest.encode("utf-8"))
    return buf.getvalue()


def dump_json(data: Any) -> str:
    """Serialize an entry compactly, keeping non-ASCII titles readable."""
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
