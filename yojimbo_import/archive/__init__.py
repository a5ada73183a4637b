from yojimbo_import.archive.files import (
    FileIndex,
    FileResolver,
    ResolvedFile,
    content_type_for,
    sniff_kind,
)
from yojimbo_import.archive.reader import ArchiveReader, is_resource_fork

__all__ = [
    "ArchiveReader",
    "FileIndex",
    "FileResolver",
    "ResolvedFile",
    "content_type_for",
    "is_resource_fork",
    "sniff_kind",
]
