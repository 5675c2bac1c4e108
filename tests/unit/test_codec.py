"""Tests for the zip container codec."""

import io
import json
import zipfile
from pathlib import Path

import pytest

from xmind_archive.core.archive.codec import (
    build_manifest,
    build_metadata,
    decode_archive,
    dump_json,
    encode_archive,
    read_archive,
)
from xmind_archive.errors import FormatError


def _zip(entries: dict[str, bytes]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def test_encode_archive_writes_three_entries() -> None:
    data = encode_archive("[]", "{}", "{}")
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        assert sorted(zf.namelist()) == ["content.json", "manifest.json", "metadata.json"]
        assert all(i.compress_type == zipfile.ZIP_DEFLATED for i in zf.infolist())


def test_decode_archive_returns_content_text() -> None:
    data = encode_archive('[{"title": "Café"}]', "{}", "{}")
    assert json.loads(decode_archive(data)) == [{"title": "Café"}]


def test_decode_archive_without_content_json_fails() -> None:
    with pytest.raises(FormatError, match="content.json not found"):
        decode_archive(_zip({"metadata.json": b"{}"}))


def test_decode_archive_rejects_non_zip_bytes() -> None:
    with pytest.raises(FormatError, match="Failed to extract"):
        decode_archive(b"definitely not a zip")


def test_decode_archive_rejects_invalid_utf8() -> None:
    with pytest.raises(FormatError):
        decode_archive(_zip({"content.json": b"\xff\xfe\x00"}))


def test_read_archive_reads_from_disk(tmp_path: Path) -> None:
    path = tmp_path / "m.xmind"
    path.write_bytes(encode_archive("[]", "{}", "{}"))
    assert read_archive(path) == "[]"


def test_metadata_names_creator() -> None:
    meta = build_metadata()
    assert meta["dataStructureVersion"] == "3"
    assert meta["layoutEngineVersion"] == "5"
    assert meta["creator"]["name"] == "xmind-archive"


def test_manifest_lists_entries() -> None:
    entries = build_manifest()["file-entries"]
    assert set(entries) == {"content.json", "metadata.json", "Thumbnails/thumbnail.png"}


def test_dump_json_is_compact_and_keeps_unicode() -> None:
    assert dump_json({"title": "思维导图", "n": [1, 2]}) == '{"title":"思维导图","n":[1,2]}'
