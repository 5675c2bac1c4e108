"""XMind mind map archive tools: decode, search, and build .xmind files."""

from xmind_archive.access import AllowList
from xmind_archive.core.builder.builder import ArchiveBuilder, BuiltDocument
from xmind_archive.core.importer.parser import parse_archive
from xmind_archive.protocols import PathPolicyProtocol

__all__ = ["AllowList", "ArchiveBuilder", "BuiltDocument", "PathPolicyProtocol", "parse_archive"]
