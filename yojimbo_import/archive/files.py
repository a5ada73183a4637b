"""UUID file index and magic-byte sniffing for ``_EXTERNAL_DATA`` payloads.

Yojimbo stores images and PDFs as loose, extension-less files named by
UUID.  The database blob for such an item only holds that UUID, so the
index below maps it back to the member path.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import PurePosixPath
from types import MappingProxyType

from yojimbo_import.archive.reader import READ_ERRORS, ArchiveReader
from yojimbo_import.core.exceptions import MemberNotFoundError

logger = logging.getLogger(__name__)

UUID_RE = re.compile(
    r"[0-9A-Fa-f]{8}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{4}-[0-9A-Fa-f]{12}"
)

DEFAULT_KIND = "png"

# Ordered: first match wins.
SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"%PDF", "pdf"),
    (b"\xff\xd8\xff", "jpg"),
    (b"\x89PNG", "png"),
    (b"GIF", "gif"),
    (b"II*\x00", "tiff"),
    (b"MM\x00*", "tiff"),
    (b"BM", "bmp"),
)

CONTENT_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "png": "image/png",
        "gif": "image/gif",
        "webp": "image/webp",
        "svg": "image/svg+xml",
        "tiff": "image/tiff",
        "tif": "image/tiff",
        "bmp": "image/bmp",
        "pdf": "application/pdf",
        "webarchive": "application/x-webarchive",
    }
)

FALLBACK_CONTENT_TYPE = "application/octet-stream"


def sniff_kind(data: bytes) -> str:
    """Return the file extension matching *data*'s leading signature.

    Unknown signatures fall back to :data:`DEFAULT_KIND`.
    """
    for signature, kind in SIGNATURES:
        if data.startswith(signature):
            return kind
    return DEFAULT_KIND


def content_type_for(filename: str) -> str:
    ext = PurePosixPath(filename).suffix.lstrip(".").lower()
    return CONTENT_TYPES.get(ext, FALLBACK_CONTENT_TYPE)


class FileIndex(Mapping[str, str]):
    """Immutable map of uppercased UUID -> ZIP member path."""

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def build(cls, members: Iterable[str]) -> FileIndex:
        """Index every member whose file name is exactly a UUID."""
        entries: dict[str, str] = {}
        for path in members:
            name = PurePosixPath(path).name
            if UUID_RE.fullmatch(name):
                entries[name.upper()] = path
        logger.info("Indexed %d UUID-named files", len(entries))
        return cls(entries)

    def __getitem__(self, uuid: str) -> str:
        return self._entries[uuid.upper()]

    def __contains__(self, uuid: object) -> bool:
        return isinstance(uuid, str) and uuid.upper() in self._entries

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True)
class ResolvedFile:
    """Bytes of a referenced member plus the kind its magic bytes revealed."""

    uuid: str
    path: str
    data: bytes
    kind: str

    def filename_for(self, name: str) -> str:
        return f"{name}.{self.kind}"

    @property
    def content_type(self) -> str:
        return content_type_for(self.filename_for(self.uuid))


class FileResolver:
    """Resolves file-reference UUIDs to member bytes."""

    def __init__(self, reader: ArchiveReader, index: FileIndex) -> None:
        self._reader = reader
        self._index = index

    def resolve(self, uuid: str) -> ResolvedFile | None:
        """Return the referenced file, or ``None`` if the UUID dangles."""
        path = self._index.get(uuid)
        if path is None:
            logger.debug("Dangling file reference %s", uuid)
            return None
        try:
            data = self._reader.read_member(path)
        except (MemberNotFoundError, *READ_ERRORS) as exc:
            logger.warning("Could not read %s for %s: %s", path, uuid, exc)
            return None
        if not data:
            logger.debug("Empty file %s for %s", path, uuid)
            return None
        return ResolvedFile(
            uuid=uuid.upper(), path=path, data=data, kind=sniff_kind(data)
        )
