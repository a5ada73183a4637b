from __future__ import annotations

import io
import logging
import zipfile
import zlib
from pathlib import PurePosixPath

from yojimbo_import.core.exceptions import MemberNotFoundError, NotAZipError

logger = logging.getLogger(__name__)

_RESOURCE_FORK_PREFIX = "._"
_RESOURCE_FORK_DIR = "__MACOSX"

# Raised by zipfile for a damaged or unsupported member.
READ_ERRORS: tuple[type[Exception], ...] = (
    zipfile.BadZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
)


def is_resource_fork(path: str) -> bool:
    """True for AppleDouble entries (any ``._`` component, ``__MACOSX/`` trees)."""
    parts = PurePosixPath(path).parts
    if not parts:
        return False
    if parts[0] == _RESOURCE_FORK_DIR:
        return True
    return any(p.startswith(_RESOURCE_FORK_PREFIX) for p in parts)


class ArchiveReader:
    """Read-only view over an in-memory ZIP archive.

    Only the central directory is parsed on open; member bytes are read
    on demand by :meth:`read_member`.  ``zipfile`` guards the shared file
    handle with a lock, so concurrent reads of distinct members are safe.
    """

    def __init__(self, zf: zipfile.ZipFile) -> None:
        self._zf = zf

    @classmethod
    def open(cls, data: bytes) -> ArchiveReader:
        """Open *data* as a ZIP archive.

        Raises :class:`NotAZipError` when the bytes are not a readable
        ZIP container.
        """
        try:
            zf = zipfile.ZipFile(io.BytesIO(data), "r")
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError) as exc:
            raise NotAZipError(str(exc)) from exc
        except TypeError as exc:
            raise NotAZipError(f"expected bytes, got {type(data).__name__}") from exc
        logger.info("Opened archive with %d entries", len(zf.infolist()))
        return cls(zf)

    def list_members(self) -> list[str]:
        """Return member paths, excluding directories and resource forks."""
        return [
            info.filename
            for info in self._zf.infolist()
            if not info.is_dir() and not is_resource_fork(info.filename)
        ]

    def read_member(self, path: str) -> bytes:
        """Read one member fully.

        Raises :class:`MemberNotFoundError` if *path* is not in the archive.
        """
        try:
            return self._zf.read(path)
        except KeyError as exc:
            raise MemberNotFoundError(path) from exc

    def close(self) -> None:
        self._zf.close()

    def __enter__(self) -> ArchiveReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
