"""Decide what a ``ZBLOB.ZBYTES`` value holds.

The first byte discriminates the two encodings seen in exports:

- ``0x02``: a file reference, ``0x02 + "<UUID>" + 0x00``.  The UUID names a
  loose file elsewhere in the archive.
- ``0x01`` followed by ``bplist``: an NSKeyedArchiver binary plist whose
  user text is salvaged by :func:`~yojimbo_import.blob.scrub.scrub_text`.

A ``0x02`` blob whose UUID is missing or malformed still counts as a file
reference: it yields no content and no attachment.  Any other prefix is an
unknown encoding and yields no content.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from yojimbo_import.archive.files import UUID_RE
from yojimbo_import.blob.scrub import MIN_RUN_LENGTH, scrub_text

logger = logging.getLogger(__name__)

MIN_BLOB_LENGTH = 10

FILE_REFERENCE_PREFIX = 0x02
ARCHIVED_OBJECT_PREFIX = 0x01
ARCHIVE_MAGIC = b"bplist"


class BlobKind(enum.StrEnum):
    ENCRYPTED = "encrypted"
    ABSENT = "absent"
    FILE_REFERENCE = "file_reference"
    MALFORMED_REFERENCE = "malformed_reference"
    ARCHIVED_OBJECT = "archived_object"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class BlobClassification:
    kind: BlobKind
    content: str = ""
    uuid: str | None = None

    @property
    def is_file_reference(self) -> bool:
        return self.kind in (BlobKind.FILE_REFERENCE, BlobKind.MALFORMED_REFERENCE)


ENCRYPTED = BlobClassification(BlobKind.ENCRYPTED)
ABSENT = BlobClassification(BlobKind.ABSENT)
UNKNOWN = BlobClassification(BlobKind.UNKNOWN)
MALFORMED_REFERENCE = BlobClassification(BlobKind.MALFORMED_REFERENCE)


def extract_uuid(blob: bytes) -> str | None:
    """Return the uppercased UUID of a ``0x02`` blob, or ``None`` if malformed."""
    if not blob or blob[0] != FILE_REFERENCE_PREFIX:
        return None
    raw = blob[1:].split(b"\x00", 1)[0]
    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError:
        return None
    if not UUID_RE.fullmatch(text):
        return None
    return text.upper()


def _text_start(blob: bytes) -> int:
    # Skip prefix and magic, then the two-digit version ("00").
    pos = 1 + len(ARCHIVE_MAGIC)
    while pos < len(blob) and pos < 1 + len(ARCHIVE_MAGIC) + 2:
        if not 0x30 <= blob[pos] <= 0x39:
            break
        pos += 1
    return pos


def classify(
    blob: bytes | None,
    encrypted: bool = False,
    *,
    min_blob_length: int = MIN_BLOB_LENGTH,
    min_run_length: int = MIN_RUN_LENGTH,
) -> BlobClassification:
    """Classify one blob.  Never raises on malformed bytes."""
    if encrypted:
        return ENCRYPTED
    if not blob:
        return ABSENT

    prefix = blob[0]
    # Checked before the length floor: a short 0x02 blob is still a reference.
    if prefix == FILE_REFERENCE_PREFIX:
        uuid = extract_uuid(blob)
        if uuid is None:
            logger.debug("File-reference blob without a valid UUID")
            return MALFORMED_REFERENCE
        return BlobClassification(BlobKind.FILE_REFERENCE, uuid=uuid)

    if len(blob) < min_blob_length:
        return ABSENT

    magic = blob[1 : 1 + len(ARCHIVE_MAGIC)]
    if prefix == ARCHIVED_OBJECT_PREFIX and magic == ARCHIVE_MAGIC:
        content = scrub_text(blob, _text_start(blob), min_run_length)
        return BlobClassification(BlobKind.ARCHIVED_OBJECT, content=content)

    logger.debug("Unknown blob prefix 0x%02x", prefix)
    return UNKNOWN
